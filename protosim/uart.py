"""UART (8N1) frame generation."""

from __future__ import annotations

from typing import Union

from .frames import UNIT, FrameType, Trace, TraceBuilder, UARTFrame, bit, mask


DATA_BITS = 8


def char_code(char: Union[str, int]) -> int:
    if isinstance(char, str):
        if not char:
            raise ValueError("UART input character must not be empty")
        return mask(ord(char[0]), DATA_BITS)
    return mask(char, DATA_BITS)


def generate_uart(char: Union[str, int]) -> Trace:
    """Return the 12-frame line trace for one character.

    Idle, start, eight data bits LSB first, stop, idle. Ordinals above
    255 are truncated to their low byte.
    """
    code = char_code(char)
    builder = TraceBuilder("UART", UARTFrame)

    builder.add("Idle", FrameType.IDLE, UNIT, level=1)
    builder.add("Start", FrameType.START, UNIT, level=0)
    for i in range(DATA_BITS):
        builder.add(f"D{i}", FrameType.DATA, UNIT, level=bit(code, i))
    builder.add("Stop", FrameType.STOP, UNIT, level=1)
    builder.add("Idle", FrameType.IDLE, UNIT, level=1)

    return builder.build()
