"""Display projections derived from simulation results.

Nothing here feeds back into the generators; these views only reshape
authoritative results for whatever renders them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .arbitration import ArbitrationResult
from .frames import FrameType, I2CFrame, MasterState, Trace


I2C_PHASES = ("Start", "Address", "R/W", "Ack", "Data", "Ack", "Stop")


@dataclass(frozen=True)
class ArbitrationFrameView:
    frame: I2CFrame
    master_levels: Tuple[int, ...]
    master_states: Tuple[MasterState, ...]

    @property
    def sda_a(self) -> int:
        return self.master_levels[0]

    @property
    def sda_b(self) -> int:
        return self.master_levels[1]

    @property
    def master_a_state(self) -> MasterState:
        return self.master_states[0]

    @property
    def master_b_state(self) -> MasterState:
        return self.master_states[1]


def arbitration_view(result: ArbitrationResult) -> List[ArbitrationFrameView]:
    return [
        ArbitrationFrameView(
            frame=frame,
            master_levels=tuple(d.level for d in row),
            master_states=tuple(d.state for d in row),
        )
        for frame, row in zip(result.trace.frames, result.drives)
    ]


def i2c_phase(trace: Trace, index: int) -> Optional[int]:
    """Map frame `index` of an I2C trace onto the phase bar (see I2C_PHASES).

    Idle frames belong to no phase and give None. The two acknowledge
    phases are told apart by whether the data byte has started yet.
    """
    frame = trace.frames[index]
    if frame.type is FrameType.START:
        return 0
    if frame.type is FrameType.ADDRESS:
        return 2 if frame.label in ("W", "R") else 1
    if frame.type is FrameType.ACK:
        first_data = next((f.index for f in trace.frames if f.type is FrameType.DATA), None)
        if first_data is None or index < first_data:
            return 3
        return 5
    if frame.type is FrameType.DATA:
        return 4
    if frame.type is FrameType.STOP:
        return 6
    return None
