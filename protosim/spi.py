"""SPI full-duplex byte exchange in the four CPOL/CPHA modes."""

from __future__ import annotations

from dataclasses import dataclass

from .frames import HALF, UNIT, FrameType, SPIFrame, Trace, TraceBuilder, bit, mask


DATA_BITS = 8


@dataclass(frozen=True)
class ClockMode:
    """Clock polarity/phase pair decoded from a 2-bit mode number.

    Mode 0: CPOL=0, CPHA=0
    Mode 1: CPOL=0, CPHA=1
    Mode 2: CPOL=1, CPHA=0
    Mode 3: CPOL=1, CPHA=1
    """

    cpol: int
    cpha: int

    @classmethod
    def from_mode(cls, mode: int) -> "ClockMode":
        mode = mask(mode, 2)
        return cls(cpol=(mode >> 1) & 1, cpha=mode & 1)

    @property
    def mode(self) -> int:
        return (self.cpol << 1) | self.cpha

    @property
    def idle_level(self) -> int:
        return self.cpol

    @property
    def active_level(self) -> int:
        return 1 - self.cpol

    @property
    def sample_level(self) -> int:
        """SCK level the clock moves to on the sampling edge."""
        return self.active_level if self.cpha == 0 else self.idle_level

    def __str__(self) -> str:
        return f"mode {self.mode} (CPOL={self.cpol}, CPHA={self.cpha})"


def generate_spi(mosi: int, miso: int, mode: int) -> Trace:
    """Return the trace of one byte shifted out on MOSI and in on MISO.

    Bits go MSB first on both lines at once. With CPHA=0 each bit is set
    up while SCK idles and sampled on the edge to the active level; with
    CPHA=1 the data changes on the edge to the active level and is sampled
    on the return to idle. Data never changes on a sampling edge.
    """
    mosi = mask(mosi, DATA_BITS)
    miso = mask(miso, DATA_BITS)
    clock = ClockMode.from_mode(mode)
    idle, active = clock.idle_level, clock.active_level
    builder = TraceBuilder("SPI", SPIFrame)

    builder.add("Idle", FrameType.IDLE, UNIT, cs=1, sck=idle, mosi=1, miso=1)
    builder.add("CS Low", FrameType.SETUP, HALF, cs=0, sck=idle, mosi=1, miso=1)

    for i in range(DATA_BITS - 1, -1, -1):
        tx, rx = bit(mosi, i), bit(miso, i)
        if clock.cpha == 0:
            first, second = idle, active
        else:
            first, second = active, idle
        builder.add(f"D{i}", FrameType.DATA, HALF, cs=0, sck=first, mosi=tx, miso=rx)
        builder.add(f"D{i}", FrameType.DATA, HALF, cs=0, sck=second, mosi=tx, miso=rx)

    if clock.cpha == 0:
        # SCK was left at the active level by the last sample edge.
        builder.add("", FrameType.IDLE, HALF, cs=0, sck=idle, mosi=1, miso=1)

    builder.add("CS High", FrameType.IDLE, UNIT, cs=1, sck=idle, mosi=1, miso=1)

    return builder.build()
