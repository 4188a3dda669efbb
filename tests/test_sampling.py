import numpy as np
import pytest

from protosim.i2c import generate_i2c
from protosim.sampling import SamplingError, edge_count, sample_trace
from protosim.spi import generate_spi
from protosim.uart import generate_uart


def test_sample_uart_one_per_unit():
    samples = sample_trace(generate_uart(0x41), samples_per_unit=1)
    assert samples["level"].tolist() == [1, 0, 1, 0, 0, 0, 0, 0, 1, 0, 1, 1]
    assert samples["t"].tolist() == list(range(12))


def test_sample_i2c_needs_half_unit_resolution():
    trace = generate_i2c(0x50, 0xA5)
    with pytest.raises(SamplingError):
        sample_trace(trace, samples_per_unit=1)
    samples = sample_trace(trace, samples_per_unit=2)
    assert len(samples["sda"]) == int(trace.total_duration * 2)
    assert samples["t"][1] == 0.5


@pytest.mark.parametrize("mode", range(4))
def test_spi_clock_has_sixteen_edges(mode):
    samples = sample_trace(generate_spi(0xF0, 0x0F, mode), samples_per_unit=2)
    assert edge_count(samples["sck"]) == 16
    assert edge_count(samples["cs"]) == 2


def test_edge_count():
    assert edge_count(np.array([0, 1, 1, 0, 1])) == 3
    assert edge_count(np.array([1, 1, 1])) == 0


def test_sampling_rejects_non_positive_rate():
    with pytest.raises(SamplingError):
        sample_trace(generate_uart("A"), samples_per_unit=0)
