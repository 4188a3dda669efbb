"""Multi-master I2C arbitration on a wired-AND data line."""

from __future__ import annotations

import json
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .frames import HALF, UNIT, FrameType, I2CFrame, MasterState, Trace, TraceBuilder, bit, mask, wired_and
from .i2c import ADDRESS_BITS, CLOCK_PHASES, WRITE


class ArbitrationError(Exception):
    pass


@dataclass(frozen=True)
class MasterDrive:
    level: int
    state: MasterState


@dataclass(frozen=True)
class ArbitrationResult:
    trace: Trace
    addresses: Tuple[Optional[int], ...]
    drives: Tuple[Tuple[MasterDrive, ...], ...]
    lost_at: Tuple[Optional[int], ...]

    @property
    def winners(self) -> Tuple[int, ...]:
        final = self.drives[-1]
        return tuple(i for i, drive in enumerate(final) if drive.state is MasterState.ACTIVE)

    @property
    def tied(self) -> bool:
        return len(self.winners) > 1

    def states(self, master: int) -> Tuple[MasterState, ...]:
        return tuple(row[master].state for row in self.drives)

    def to_json(self) -> str:
        payload: Dict[str, Any] = self.trace.to_dict()
        payload["addresses"] = list(self.addresses)
        payload["lost_at"] = list(self.lost_at)
        payload["winners"] = list(self.winners)
        payload["drives"] = [
            [{"level": d.level, "state": d.state.to_char()} for d in row] for row in self.drives
        ]
        return json.dumps(payload, indent=2, sort_keys=True)


class _Master:
    def __init__(self, address: Optional[int]):
        self.address = None if address is None else mask(address, ADDRESS_BITS)
        self.state = MasterState.IDLE if address is None else MasterState.ACTIVE
        self.released = address is None
        self.lost_at: Optional[int] = None

    def propose(self, position: int) -> int:
        if self.address is None:
            return 1
        return bit(self.address, position)

    def drive(self, proposed: int) -> int:
        return 1 if self.released else proposed

    def snapshot(self, proposed: int) -> MasterDrive:
        return MasterDrive(level=self.drive(proposed), state=self.state)


class _Bus:
    def __init__(self, masters: List[_Master]):
        self.masters = masters
        self.builder = TraceBuilder("I2C-ARB", I2CFrame)
        self.drives: List[Tuple[MasterDrive, ...]] = []

    def emit(
        self,
        label: str,
        frame_type: FrameType,
        duration: Fraction,
        proposals: Sequence[int],
        scl: int,
        external: Sequence[int] = (),
    ) -> None:
        row = tuple(m.snapshot(p) for m, p in zip(self.masters, proposals))
        sda = wired_and([d.level for d in row] + list(external))
        self.builder.add(label, frame_type, duration, sda=sda, scl=scl)
        self.drives.append(row)

    def all_drive(self, level: int) -> List[int]:
        return [level] * len(self.masters)


def resolve_arbitration(addresses: Sequence[Optional[int]]) -> ArbitrationResult:
    """Resolve the address phase of masters contending for one I2C bus.

    Every participating master drives its own address bits MSB first. A
    master that proposes 1 while another active master pulls the line to 0
    loses on that bit; from the next bit on it releases SDA and only
    observes. Masters with identical addresses never lose against each
    other, so such a contest ends tied. A `None` address marks a master
    that stays idle and never drives the line.
    """
    masters = [_Master(address) for address in addresses]
    if not any(m.state is MasterState.ACTIVE for m in masters):
        raise ArbitrationError("At least one master must take part in arbitration")

    bus = _Bus(masters)

    bus.emit("Idle", FrameType.IDLE, UNIT, bus.all_drive(1), scl=1)
    bus.emit("Start", FrameType.START, UNIT, bus.all_drive(0), scl=1)
    bus.emit("", FrameType.START, HALF, bus.all_drive(0), scl=0)

    for i in range(ADDRESS_BITS - 1, -1, -1):
        proposals = [m.propose(i) for m in masters]
        contenders = [(m, p) for m, p in zip(masters, proposals) if m.state is MasterState.ACTIVE]
        observed = wired_and(p for _, p in contenders)
        for master, proposed in contenders:
            if proposed == 1 and observed == 0:
                master.state = MasterState.LOST
                master.lost_at = i

        for scl in CLOCK_PHASES:
            bus.emit(f"A{i}", FrameType.ADDRESS, HALF, proposals, scl=scl)

        for master in masters:
            if master.state is MasterState.LOST:
                master.released = True

    for scl in CLOCK_PHASES:
        bus.emit("W", FrameType.ADDRESS, HALF, bus.all_drive(WRITE), scl=scl)

    # The addressed slave pulls SDA low; every master has released the line.
    for scl in CLOCK_PHASES:
        bus.emit("ACK", FrameType.ACK, HALF, bus.all_drive(1), scl=scl, external=(0,))

    bus.emit("Stop", FrameType.STOP, HALF, bus.all_drive(0), scl=0)
    bus.emit("Stop", FrameType.STOP, HALF, bus.all_drive(0), scl=1)
    bus.emit("Stop", FrameType.STOP, UNIT, bus.all_drive(1), scl=1)
    bus.emit("Idle", FrameType.IDLE, UNIT, bus.all_drive(1), scl=1)

    return ArbitrationResult(
        trace=bus.builder.build(),
        addresses=tuple(m.address for m in masters),
        drives=tuple(bus.drives),
        lost_at=tuple(m.lost_at for m in masters),
    )


def arbitrate(address_a: int, address_b: int) -> ArbitrationResult:
    return resolve_arbitration([address_a, address_b])
