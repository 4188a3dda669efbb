"""I2C single-master write transaction generation."""

from __future__ import annotations

from .frames import HALF, UNIT, FrameType, I2CFrame, Trace, TraceBuilder, bit, mask


ADDRESS_BITS = 7
DATA_BITS = 8
WRITE = 0

# Per-bit SCL sequence: data is set while SCL is low, then SCL is raised
# and lowered again, so SDA is stable across the high phase.
CLOCK_PHASES = (0, 1, 0)


def clock_bit(builder: TraceBuilder, label: str, frame_type: FrameType, sda: int) -> None:
    for scl in CLOCK_PHASES:
        builder.add(label, frame_type, HALF, sda=sda, scl=scl)


def add_start(builder: TraceBuilder) -> None:
    builder.add("Idle", FrameType.IDLE, UNIT, sda=1, scl=1)
    builder.add("Start", FrameType.START, UNIT, sda=0, scl=1)
    builder.add("", FrameType.START, HALF, sda=0, scl=0)


def add_stop(builder: TraceBuilder) -> None:
    builder.add("Stop", FrameType.STOP, HALF, sda=0, scl=0)
    builder.add("Stop", FrameType.STOP, HALF, sda=0, scl=1)
    builder.add("Stop", FrameType.STOP, UNIT, sda=1, scl=1)
    builder.add("Idle", FrameType.IDLE, UNIT, sda=1, scl=1)


def generate_i2c(address: int, data: int) -> Trace:
    """Return the bus trace of a 7-bit address write of one data byte.

    The slave is always modelled as acknowledging (SDA held low during
    both acknowledge clocks).
    """
    address = mask(address, ADDRESS_BITS)
    data = mask(data, DATA_BITS)
    builder = TraceBuilder("I2C", I2CFrame)

    add_start(builder)
    for i in range(ADDRESS_BITS - 1, -1, -1):
        clock_bit(builder, f"A{i}", FrameType.ADDRESS, bit(address, i))
    clock_bit(builder, "W", FrameType.ADDRESS, WRITE)
    clock_bit(builder, "ACK", FrameType.ACK, 0)
    for i in range(DATA_BITS - 1, -1, -1):
        clock_bit(builder, f"D{i}", FrameType.DATA, bit(data, i))
    clock_bit(builder, "ACK", FrameType.ACK, 0)
    add_stop(builder)

    return builder.build()
