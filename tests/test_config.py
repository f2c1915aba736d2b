import dataclasses

import pytest

from lwlrf.config import RadarConfig


def make_config(**overrides):
    values = dict(
        range_resolution=0.175,
        azimuth_samples=400,
        encoder_size=5600,
        bin_size=16,
        range_in_bins=2856,
        expected_rotation_rate=4000,
    )
    values.update(overrides)
    return RadarConfig(**values)


def test_scan_size_is_bins_times_azimuths():
    config = make_config(range_in_bins=7, azimuth_samples=3)
    assert config.scan_size() == 21


def test_scan_size_zero_when_no_azimuths():
    assert make_config(azimuth_samples=0).scan_size() == 0


def test_fields_are_kept():
    config = make_config()
    assert config.encoder_size == 5600
    assert config.range_resolution == pytest.approx(0.175)


def test_config_is_immutable():
    config = make_config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.range_in_bins = 1
    assert config.range_in_bins == 2856
    assert config.scan_size() == 2856 * 400


@pytest.mark.parametrize("samples", [-1, 0x10000])
def test_azimuth_samples_must_fit_sixteen_bits(samples):
    with pytest.raises(ValueError):
        make_config(azimuth_samples=samples)


def test_azimuth_samples_upper_bound_accepted():
    assert make_config(azimuth_samples=0xFFFF, range_in_bins=1).scan_size() == 0xFFFF