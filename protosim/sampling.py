"""Uniformly sampled view of a trace, as a logic analyzer would capture it."""

from __future__ import annotations

from fractions import Fraction
from typing import Dict

import numpy as np

from .frames import Trace


class SamplingError(Exception):
    pass


def sample_trace(trace: Trace, samples_per_unit: int = 2) -> Dict[str, np.ndarray]:
    """Return one int8 array per signal line, plus the time axis under "t".

    Each frame contributes duration * samples_per_unit samples, so the
    rate must resolve the shortest frame (half a unit needs at least 2).
    """
    if samples_per_unit <= 0:
        raise SamplingError(f"samples_per_unit must be positive, got {samples_per_unit}")

    counts = []
    for frame in trace.frames:
        n = Fraction(frame.duration) * samples_per_unit
        if n.denominator != 1:
            raise SamplingError(
                f"Frame {frame.index} lasts {frame.duration} units; "
                f"{samples_per_unit} samples per unit cannot resolve it"
            )
        counts.append(int(n))

    out: Dict[str, np.ndarray] = {}
    for line in trace.lines:
        levels = np.array([getattr(frame, line) for frame in trace.frames], dtype=np.int8)
        out[line] = np.repeat(levels, counts)
    out["t"] = np.arange(sum(counts)) / samples_per_unit
    return out


def edge_count(sig01: np.ndarray) -> int:
    """Count 0->1 and 1->0 transitions."""
    s = (sig01 > 0.5).astype(np.int8)
    return int(np.sum(np.abs(np.diff(s))))
