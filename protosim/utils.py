"""Text rendering helpers for command line output."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .arbitration import ArbitrationResult
from .converters import SARResult
from .frames import Trace


def _row(cells: Sequence[str], widths: Sequence[int]) -> str:
    return "  ".join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()


def _table(header: List[str], rows: List[List[str]]) -> str:
    widths = [max(len(header[i]), *(len(r[i]) for r in rows)) if rows else len(header[i]) for i in range(len(header))]
    lines = [_row(header, widths), _row(["-" * w for w in widths], widths)]
    lines.extend(_row(r, widths) for r in rows)
    return "\n".join(lines)


def format_trace_table(trace: Trace, arbitration: Optional[ArbitrationResult] = None) -> str:
    """One line per frame: index, label, tag, duration and every line level.

    With an arbitration result the per-master drive level and state are
    appended as extra columns.
    """
    lines = list(trace.lines)
    header = ["#", "label", "type", "dur"] + lines
    if arbitration is not None:
        for m in range(len(arbitration.addresses)):
            header += [f"m{m}", f"m{m} state"]

    rows = []
    for frame in trace.frames:
        row = [str(frame.index), frame.label, frame.type.to_char(), str(frame.duration)]
        row += [str(getattr(frame, line)) for line in lines]
        if arbitration is not None:
            for drive in arbitration.drives[frame.index]:
                row += [str(drive.level), drive.state.to_char()]
        rows.append(row)
    return _table(header, rows)


def format_sar_table(result: SARResult) -> str:
    rows = [
        [f"b{s.bit_index}", f"{s.trial_voltage:.4f}", str(s.decision), f"{s.approximation:.4f}"]
        for s in result.steps
    ]
    return _table(["bit", "trial", "keep", "approx"], rows)
