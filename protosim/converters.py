"""Ideal models of an R-2R ladder DAC and two ADC techniques."""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from typing import Tuple

import numpy as np

from .frames import bit, mask


class ConverterError(Exception):
    pass


class ResolutionError(ConverterError):
    pass


def _check_resolution(resolution: int) -> None:
    if resolution <= 0:
        raise ResolutionError(f"Resolution must be at least 1 bit, got {resolution}")


def _check_reference(reference: float) -> None:
    if reference <= 0:
        raise ConverterError(f"Reference voltage must be positive, got {reference}")


def lsb_voltage(reference: float, resolution: int) -> float:
    return reference / (1 << resolution)


def code_string(code: int, resolution: int) -> str:
    return format(code, f"0{resolution}b")


# ---------------------------------------------------------------------------
# R-2R ladder DAC
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LadderState:
    code: int
    resolution: int
    reference: float
    switches: Tuple[str, ...]
    voltage: float

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2, sort_keys=True)


def ladder_state(code: int, reference: float, resolution: int) -> LadderState:
    """Output voltage U = Uref * D / 2^N and switch positions of the ladder.

    `switches[i]` is the rail the switch of bit i connects to: "ref" for a
    1 bit, "gnd" for a 0 bit. Codes wider than N bits are truncated.
    """
    _check_resolution(resolution)
    code = mask(code, resolution)
    switches = tuple("ref" if bit(code, i) else "gnd" for i in range(resolution))
    return LadderState(
        code=code,
        resolution=resolution,
        reference=reference,
        switches=switches,
        voltage=reference * code / (1 << resolution),
    )


def dac_transfer_curve(reference: float, resolution: int) -> np.ndarray:
    """Output voltage of every code 0 .. 2^N - 1, indexed by code."""
    _check_resolution(resolution)
    codes = np.arange(1 << resolution, dtype=np.float64)
    return codes * lsb_voltage(reference, resolution)


# ---------------------------------------------------------------------------
# Successive approximation ADC
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SARStep:
    bit_index: int
    trial_voltage: float
    decision: int
    approximation: float


@dataclass(frozen=True)
class SARResult:
    input_voltage: float
    reference: float
    resolution: int
    steps: Tuple[SARStep, ...]

    @property
    def code(self) -> int:
        value = 0
        for step in self.steps:
            value = (value << 1) | step.decision
        return value

    @property
    def estimate(self) -> float:
        return self.steps[-1].approximation

    @property
    def lsb(self) -> float:
        return lsb_voltage(self.reference, self.resolution)

    @property
    def quantization_error(self) -> float:
        return self.input_voltage - self.estimate

    @property
    def binary(self) -> str:
        return code_string(self.code, self.resolution)

    def to_json(self) -> str:
        payload = {
            "input_voltage": self.input_voltage,
            "reference": self.reference,
            "resolution": self.resolution,
            "code": self.code,
            "binary": self.binary,
            "estimate": self.estimate,
            "lsb": self.lsb,
            "quantization_error": self.quantization_error,
            "steps": [asdict(step) for step in self.steps],
        }
        return json.dumps(payload, indent=2, sort_keys=True)


def sar_convert(input_voltage: float, reference: float, resolution: int) -> SARResult:
    """Convert by weighing one bit at a time from MSB to LSB.

    Each step adds the bit weight Uref / 2^(N - bit) to the running
    approximation and keeps the bit when the input is at least that trial
    voltage. Exactly N steps are taken.
    """
    _check_resolution(resolution)
    _check_reference(reference)
    approximation = 0.0
    steps = []
    for bit_index in range(resolution - 1, -1, -1):
        trial = approximation + reference / (1 << (resolution - bit_index))
        decision = 1 if input_voltage >= trial else 0
        if decision:
            approximation = trial
        steps.append(
            SARStep(
                bit_index=bit_index,
                trial_voltage=trial,
                decision=decision,
                approximation=approximation,
            )
        )
    return SARResult(
        input_voltage=input_voltage,
        reference=reference,
        resolution=resolution,
        steps=tuple(steps),
    )


# ---------------------------------------------------------------------------
# Dual-slope integrating ADC
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DualSlopeResult:
    input_voltage: float
    reference: float
    resolution: int
    t1: float

    @property
    def t2(self) -> float:
        """De-integration time; T2 / T1 = Ue / Uref."""
        return self.t1 * (self.input_voltage / self.reference)

    @property
    def peak_ratio(self) -> float:
        """Integrator output at the end of T1 relative to a full-scale input."""
        return self.input_voltage / self.reference

    @property
    def full_scale(self) -> int:
        return (1 << self.resolution) - 1

    @property
    def code(self) -> int:
        # Half counts round up.
        return int(math.floor(self.t2 / self.t1 * self.full_scale + 0.5))

    @property
    def estimate(self) -> float:
        return self.code / self.full_scale * self.reference

    @property
    def quantization_error(self) -> float:
        return self.input_voltage - self.estimate

    @property
    def binary(self) -> str:
        return code_string(self.code, self.resolution)

    def to_json(self) -> str:
        payload = {
            "input_voltage": self.input_voltage,
            "reference": self.reference,
            "resolution": self.resolution,
            "t1": self.t1,
            "t2": self.t2,
            "peak_ratio": self.peak_ratio,
            "code": self.code,
            "binary": self.binary,
            "estimate": self.estimate,
            "quantization_error": self.quantization_error,
        }
        return json.dumps(payload, indent=2, sort_keys=True)


def dual_slope_convert(
    input_voltage: float,
    reference: float,
    resolution: int,
    t1: float = 100.0,
) -> DualSlopeResult:
    """Integrate the input for T1, then de-integrate the reference for T2.

    The result depends only on the ratio T2 / T1, not on the integrator's
    R and C. Inputs outside [0, Uref] saturate at the ends of the range.
    """
    _check_resolution(resolution)
    _check_reference(reference)
    if t1 <= 0:
        raise ConverterError(f"Integration time T1 must be positive, got {t1}")
    clamped = min(max(input_voltage, 0.0), reference)
    return DualSlopeResult(
        input_voltage=clamped,
        reference=reference,
        resolution=resolution,
        t1=t1,
    )
