"""Signal frame primitives shared by all protocol generators."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from enum import Enum
from fractions import Fraction
from typing import Any, Dict, Iterable, Iterator, List, Tuple, Union


UNIT = Fraction(1)
HALF = Fraction(1, 2)


class FrameType(Enum):
    IDLE = "idle"
    START = "start"
    ADDRESS = "address"
    ACK = "ack"
    DATA = "data"
    STOP = "stop"
    SETUP = "setup"

    def to_char(self) -> str:
        return self.value


class MasterState(Enum):
    ACTIVE = "active"
    LOST = "lost"
    IDLE = "idle"

    def to_char(self) -> str:
        return self.value


@dataclass(frozen=True)
class UARTFrame:
    index: int
    label: str
    level: int
    type: FrameType
    duration: Fraction

    LINES = ("level",)


@dataclass(frozen=True)
class I2CFrame:
    index: int
    label: str
    sda: int
    scl: int
    type: FrameType
    duration: Fraction

    LINES = ("sda", "scl")


@dataclass(frozen=True)
class SPIFrame:
    index: int
    label: str
    cs: int
    sck: int
    mosi: int
    miso: int
    type: FrameType
    duration: Fraction

    LINES = ("cs", "sck", "mosi", "miso")


Frame = Union[UARTFrame, I2CFrame, SPIFrame]


def bit(value: int, position: int) -> int:
    return (value >> position) & 1


def mask(value: int, width: int) -> int:
    return value & ((1 << width) - 1)


def wired_and(levels: Iterable[int]) -> int:
    """Resolve an open-drain line: any driver at 0 pulls the bus low."""
    for level in levels:
        if level == 0:
            return 0
    return 1


def frame_to_dict(frame: Frame) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for item in fields(frame):
        value = getattr(frame, item.name)
        if isinstance(value, Enum):
            value = value.to_char()
        elif isinstance(value, Fraction):
            value = float(value)
        payload[item.name] = value
    return payload


@dataclass(frozen=True)
class Trace:
    """Complete, ordered frame sequence produced by one generator call."""

    protocol: str
    frames: Tuple[Frame, ...]

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self.frames)

    def __getitem__(self, index: int) -> Frame:
        return self.frames[index]

    @property
    def lines(self) -> Tuple[str, ...]:
        if not self.frames:
            return ()
        return type(self.frames[0]).LINES

    @property
    def total_duration(self) -> Fraction:
        return sum((frame.duration for frame in self.frames), Fraction(0))

    def of_type(self, frame_type: FrameType) -> List[Frame]:
        return [frame for frame in self.frames if frame.type is frame_type]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "protocol": self.protocol,
            "frames": [frame_to_dict(frame) for frame in self.frames],
            "total_duration": float(self.total_duration),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)


class TraceBuilder:
    """Accumulates frames for a single generation call.

    The sequence counter lives on the builder, so every call starts at 0.
    """

    def __init__(self, protocol: str, frame_cls: type):
        self.protocol = protocol
        self.frame_cls = frame_cls
        self._frames: List[Frame] = []

    def add(self, label: str, frame_type: FrameType, duration: Fraction, **levels: int) -> Frame:
        if duration <= 0:
            raise ValueError(f"Frame duration must be positive, got {duration}")
        frame = self.frame_cls(
            index=len(self._frames),
            label=label,
            type=frame_type,
            duration=Fraction(duration),
            **{name: int(level) for name, level in levels.items()},
        )
        self._frames.append(frame)
        return frame

    def build(self) -> Trace:
        return Trace(protocol=self.protocol, frames=tuple(self._frames))
