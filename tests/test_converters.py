import json

import numpy as np
import pytest

from protosim.converters import (
    ConverterError,
    ResolutionError,
    dac_transfer_curve,
    dual_slope_convert,
    ladder_state,
    sar_convert,
)


REF = 3.3


@pytest.mark.parametrize("resolution", [1, 4, 8])
def test_dac_is_linear_and_increasing(resolution):
    voltages = [ladder_state(code, REF, resolution).voltage for code in range(1 << resolution)]
    for code, voltage in enumerate(voltages):
        assert voltage == pytest.approx(REF * code / (1 << resolution))
    assert all(b > a for a, b in zip(voltages, voltages[1:]))
    assert np.allclose(dac_transfer_curve(REF, resolution), voltages)


def test_dac_switch_positions():
    state = ladder_state(0b1010, REF, 4)
    assert state.switches == ("gnd", "ref", "gnd", "ref")
    assert state.voltage == pytest.approx(REF * 10 / 16)


def test_dac_masks_code():
    assert ladder_state(0x1F, REF, 4) == ladder_state(0xF, REF, 4)


def test_dac_rejects_bad_parameters():
    with pytest.raises(ResolutionError):
        ladder_state(1, REF, 0)
    with pytest.raises(ResolutionError):
        dac_transfer_curve(REF, -1)


def test_sar_example_midscale():
    result = sar_convert(1.65, REF, 4)
    assert [s.bit_index for s in result.steps] == [3, 2, 1, 0]
    assert [s.decision for s in result.steps] == [1, 0, 0, 0]
    assert result.code == 8
    assert result.binary == "1000"
    assert result.estimate == pytest.approx(1.65)
    assert result.lsb == pytest.approx(REF / 16)


@pytest.mark.parametrize("resolution", [1, 4, 8, 12])
@pytest.mark.parametrize("vin", list(np.linspace(0.0, REF, 41)))
def test_sar_monotonic_and_within_one_lsb(resolution, vin):
    result = sar_convert(float(vin), REF, resolution)
    assert len(result.steps) == resolution
    approximations = [s.approximation for s in result.steps]
    assert all(b >= a for a, b in zip(approximations, approximations[1:]))
    assert -1e-9 <= result.quantization_error <= result.lsb + 1e-9
    assert result.code == int(result.binary, 2)


def test_sar_full_scale_and_zero():
    assert sar_convert(REF, REF, 4).code == 15
    assert sar_convert(0.0, REF, 4).code == 0


def test_sar_rejects_bad_resolution():
    with pytest.raises(ResolutionError):
        sar_convert(1.0, REF, 0)


def test_sar_json():
    payload = json.loads(sar_convert(1.0, REF, 4).to_json())
    assert payload["code"] == sar_convert(1.0, REF, 4).code
    assert len(payload["steps"]) == 4


@pytest.mark.parametrize("vin", list(np.linspace(0.0, REF, 23)))
def test_dual_slope_ratio_law(vin):
    result = dual_slope_convert(float(vin), REF, 8, t1=100.0)
    assert result.t2 / result.t1 == pytest.approx(vin / REF)
    assert 0 <= result.code <= 255


@pytest.mark.parametrize("resolution", [1, 4, 10])
def test_dual_slope_end_points(resolution):
    assert dual_slope_convert(REF, REF, resolution).code == (1 << resolution) - 1
    zero = dual_slope_convert(0.0, REF, resolution)
    assert zero.code == 0
    assert zero.t2 == 0


def test_dual_slope_is_independent_of_t1():
    codes = {dual_slope_convert(1.2, REF, 8, t1=t1).code for t1 in (0.001, 1.0, 100.0, 5e6)}
    assert len(codes) == 1


def test_dual_slope_estimate():
    result = dual_slope_convert(1.65, REF, 4)
    assert result.code == 8
    assert result.estimate == pytest.approx(8 / 15 * REF)
    assert result.quantization_error == pytest.approx(1.65 - 8 / 15 * REF)


def test_dual_slope_saturates_out_of_range_input():
    assert dual_slope_convert(5.0, REF, 4).code == 15
    assert dual_slope_convert(-1.0, REF, 4).code == 0


def test_dual_slope_rejects_bad_parameters():
    with pytest.raises(ResolutionError):
        dual_slope_convert(1.0, REF, 0)
    with pytest.raises(ConverterError):
        dual_slope_convert(1.0, REF, 4, t1=0)
    with pytest.raises(ConverterError):
        dual_slope_convert(1.0, -REF, 4)


def test_dac_accepts_any_reference():
    assert ladder_state(5, 0.0, 4).voltage == 0.0
    assert ladder_state(8, -2.0, 4).voltage == pytest.approx(-1.0)
    assert np.allclose(dac_transfer_curve(0.0, 3), np.zeros(8))
