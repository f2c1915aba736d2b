import pytest

from lwlrf.config import NotConfiguredError, RadarConfig
from lwlrf.fft_converter import (
    SPEED_OF_LIGHT_M_PER_NS,
    ConversionResult,
    FFTConverter,
    FFTFrame,
)

STAMP = 1_700_000_000_123_456_789


def make_config(**overrides):
    values = dict(
        range_resolution=0.5,
        azimuth_samples=4,
        encoder_size=400,
        bin_size=16,
        range_in_bins=5,
        expected_rotation_rate=4000,
    )
    values.update(overrides)
    return RadarConfig(**values)


@pytest.fixture
def converter():
    conv = FFTConverter("radar")
    conv.configure(make_config())
    return conv


def frame(azimuth, stamp=STAMP, data=(0, 100, 65535, 30000, 5)):
    return FFTFrame(azimuth=azimuth, stamp_ns=stamp, data=list(data))


def test_process_without_configuration_raises():
    with pytest.raises(NotConfiguredError):
        FFTConverter("radar").process(frame(0))


def test_only_first_configuration_is_used():
    conv = FFTConverter("radar")
    first = make_config()
    conv.configure(first)
    conv.configure(make_config(encoder_size=999))
    assert conv.config == first


def test_one_point_per_range_bin(converter):
    result = converter.process(frame(10))
    assert isinstance(result, ConversionResult)
    assert result.azimuth.width == 5
    assert all(p.azimuth == 10 for p in result.azimuth)
    assert result.scan is None


def test_intensity_scaling_extremes(converter):
    result = converter.process(frame(0, data=[0, 65535]))
    assert [p.intensity for p in result.azimuth] == [0.0, 255.0]


def test_azimuth_zero_lies_on_x_axis(converter):
    result = converter.process(frame(0))
    for range_bin, point in enumerate(result.azimuth):
        assert point.x == pytest.approx(0.5 * range_bin)
        assert point.y == pytest.approx(0.0)
        assert point.z == 0.0


def test_quarter_turn_lies_on_y_axis(converter):
    result = converter.process(frame(100))
    for range_bin, point in enumerate(result.azimuth):
        assert point.x == pytest.approx(0.0, abs=1e-9)
        assert point.y == pytest.approx(0.5 * range_bin)


def test_first_bin_time_accounts_for_full_range(converter):
    data = [1] * 10
    result = converter.process(frame(0, data=data))
    flight = 0.5 * len(data) / SPEED_OF_LIGHT_M_PER_NS
    assert result.azimuth[0].timestamp_ns() == pytest.approx(STAMP - flight, abs=512)


def test_azimuth_header(converter):
    first = converter.process(frame(10))
    second = converter.process(frame(20))
    assert first.azimuth.frame_id == "radar"
    assert (first.azimuth.seq, second.azimuth.seq) == (0, 1)
    assert first.azimuth.stamp_ns % 1000 == 0
    assert 0 <= STAMP - first.azimuth.stamp_ns < 1000


def test_scan_published_when_azimuth_wraps(converter):
    converter.process(frame(10, stamp=STAMP))
    converter.process(frame(20, stamp=STAMP + 5_000_000))
    result = converter.process(frame(5, stamp=STAMP + 10_000_000))
    scan = result.scan
    assert scan is not None
    assert scan.width == 10
    assert [p.azimuth for p in scan][::5] == [10, 20]
    assert scan.frame_id == "radar"
    assert scan.seq == 0
    assert 0 <= STAMP + 5_000_000 - scan.stamp_ns < 1000
    assert result.azimuth.seq == 2


def test_next_scan_starts_with_wrapping_frame(converter):
    converter.process(frame(10))
    converter.process(frame(5))
    converter.process(frame(30))
    result = converter.process(frame(1))
    assert result.scan is not None
    assert [p.azimuth for p in result.scan][::5] == [5, 30]


def test_no_scan_while_azimuth_increases(converter):
    results = [converter.process(frame(a)) for a in (0, 1, 2, 3)]
    assert all(r.scan is None for r in results)


def test_frame_validation():
    with pytest.raises(ValueError):
        FFTFrame(azimuth=0x10000, stamp_ns=0, data=[])
    with pytest.raises(ValueError):
        FFTFrame(azimuth=0, stamp_ns=0, data=[70000])
    with pytest.raises(ValueError):
        FFTFrame(azimuth=0, stamp_ns=-1, data=[])


def test_time_before_epoch_raises(converter):
    with pytest.raises(ValueError):
        converter.process(frame(0, stamp=0, data=[1, 1, 1]))