"""Read generated traces back the way a logic analyzer decoder would.

Decoders only look at line levels from frame to frame: they sample on
clock edges and find START/STOP conditions from SDA transitions while SCL
is high. Labels and frame tags are not consulted for the I2C and SPI
read-back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .frames import Trace
from .spi import ClockMode


class DecodeError(Exception):
    pass


def _expect(trace: Trace, *protocols: str) -> None:
    if trace.protocol not in protocols:
        raise DecodeError(f"Expected a {'/'.join(protocols)} trace, got {trace.protocol}")


def decode_uart(trace: Trace) -> int:
    """Return the byte carried by a UART trace (data bits LSB first)."""
    _expect(trace, "UART")
    frames = list(trace.frames)
    start = next((i for i, f in enumerate(frames) if f.level == 0), None)
    if start is None or start == 0 or frames[start - 1].level != 1:
        raise DecodeError("No start bit found")

    data = frames[start + 1 : start + 9]
    if len(data) != 8 or start + 9 >= len(frames):
        raise DecodeError("Trace ends before the stop bit")
    if frames[start + 9].level != 1:
        raise DecodeError("Framing error: stop bit is low")

    value = 0
    for i, frame in enumerate(data):
        value |= frame.level << i
    return value


@dataclass(frozen=True)
class I2CTransfer:
    address: int
    rw: int
    acks: Tuple[bool, ...]
    data: Optional[int] = None


def decode_i2c(trace: Trace) -> I2CTransfer:
    """Decode the first START..STOP transfer of an I2C trace."""
    _expect(trace, "I2C", "I2C-ARB")
    bits: List[int] = []
    state = "FIND START"
    prev = None

    for frame in trace.frames:
        if prev is not None:
            if state == "FIND START":
                if prev.sda == 1 and frame.sda == 0 and frame.scl == 1:
                    state = "READ"
            elif prev.scl == 0 and frame.scl == 1:
                bits.append(frame.sda)
            elif prev.sda == 0 and frame.sda == 1 and frame.scl == 1:
                state = "STOP"
                break
        prev = frame

    if state != "STOP":
        raise DecodeError(f"Incomplete transfer (decoder state {state})")
    # The SCL pulse that precedes STOP is clocked in as a stray bit; only
    # whole 9-bit groups (8 bits plus acknowledge) count.
    groups = len(bits) // 9
    if groups not in (1, 2):
        raise DecodeError(f"Unexpected number of clocked bits: {len(bits)}")

    address = 0
    for level in bits[:7]:
        address = (address << 1) | level
    acks = [bits[8] == 0]
    data = None
    if groups == 2:
        data = 0
        for level in bits[9:17]:
            data = (data << 1) | level
        acks.append(bits[17] == 0)

    return I2CTransfer(address=address, rw=bits[7], acks=tuple(acks), data=data)


def decode_spi(trace: Trace, mode: int) -> Tuple[int, int]:
    """Return (mosi, miso) sampled on the sampling edge of `mode`.

    A data line that changes together with a sampling edge is reported
    as an error, since the receiver could latch either value.
    """
    _expect(trace, "SPI")
    clock = ClockMode.from_mode(mode)
    mosi = miso = 0
    count = 0
    prev = None

    for frame in trace.frames:
        if prev is not None and frame.cs == 0 and prev.sck != frame.sck and frame.sck == clock.sample_level:
            if frame.mosi != prev.mosi or frame.miso != prev.miso:
                raise DecodeError(f"Data changed on sampling edge at frame {frame.index}")
            mosi = (mosi << 1) | frame.mosi
            miso = (miso << 1) | frame.miso
            count += 1
        prev = frame

    if count != 8:
        raise DecodeError(f"Expected 8 sampling edges, found {count}")
    return mosi, miso

