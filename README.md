# lwlrf

A small pipeline of plain Python objects for processing data from a spinning radar.

1. **FFT conversion** (`lwlrf.fft_converter.FFTConverter`) turns each
   `FFTFrame` into `RadarPoint`s. An `FFTFrame` holds one azimuth of 16-bit FFT
   amplitudes. Each amplitude becomes one point:
   - the point lies at `range_resolution * bin` along the azimuth angle;
   - its intensity is the amplitude scaled to 0–255;
   - its nanosecond capture time is split into `time_high` / `time_low`.

   The capture time is the frame stamp less the time of flight for that bin.
   `process` returns a `ConversionResult` holding the azimuth cloud. When the
   azimuth wraps around (it is lower than the previous one), the result also
   holds the complete scan gathered so far in `scan`.
2. **Cloud filtering** (`lwlrf.cloud_filter.CloudFilter`) takes one full scan
   of exactly `RadarConfig.scan_size()` points. It runs a 2-D cell-averaging
   CFAR (`cfar_suppress`) over the intensities, in both range and azimuth. Any
   cell whose intensity exceeds 1.75 times its local noise average is set to
   zero. It then keeps only points whose intensity lies in `[100, 255]`
   (`passthrough`). The input cloud is not modified.
3. **Motion compensation** (`lwlrf.motion_compensation.MotionCompensator`)
   deskews a cloud. It looks up the sensor-to-target transforms at the start of
   the scan and at its end. The start is the cloud stamp less one period of
   `expected_input_frequency`. Each point goes into the target frame with the
   transform interpolated at its own capture time. Interpolation is linear for
   translation and `slerp` for rotation. The point then returns to the sensor
   frame through the transform at the end of the scan. The transforms come from
   a `TransformBuffer`, which you fill with stamped `Transform`s via
   `set_transform`. The buffer keeps 60 seconds of history by default.

## Installation

```
pip install .
```

Running the tests:

```
pip install .[test]
pytest
```

## Usage

```python
from lwlrf.config import RadarConfig
from lwlrf.fft_converter import FFTConverter, FFTFrame
from lwlrf.cloud_filter import CloudFilter

config = RadarConfig(
    range_resolution=0.175,
    azimuth_samples=400,
    encoder_size=5600,
    bin_size=0,
    range_in_bins=2856,
    expected_rotation_rate=4000,
)

converter = FFTConverter(sensor_frame="radar")
converter.configure(config)

result = converter.process(FFTFrame(azimuth=0, stamp_ns=1_000_000_000, data=[0] * 2856))
result.azimuth      # the points of this azimuth
result.scan         # a complete scan when the azimuth wrapped, otherwise None

cloud_filter = CloudFilter(guard_cells=2, train_cells=8)
cloud_filter.configure(config)
# cloud_filter.filter(scan) needs a cloud of exactly config.scan_size() points
```

Motion compensation:

```python
from lwlrf.motion_compensation import (
    MotionCompensator, Quaternion, Transform, TransformBuffer, Vector3,
)

buffer = TransformBuffer()
buffer.set_transform(Transform(Vector3(0, 0, 0), Quaternion(), "odom", "radar", stamp_ns=0))
buffer.set_transform(Transform(Vector3(1, 0, 0), Quaternion(), "odom", "radar", stamp_ns=10**9))

compensator = MotionCompensator(buffer, target_frame="odom", expected_input_frequency=4.0)
deskewed = compensator.compensate(scan)   # scan: a PointCloud in frame "radar"
```

## Errors

- `FFTConverter.process` and `CloudFilter.filter` raise `NotConfiguredError`
  if `configure` has not been called. Only the first configuration passed to
  `configure` is used.
- `CloudFilter.filter` raises `ScanSizeError` for a cloud of the wrong size.
- `TransformBuffer.lookup` raises `TransformLookupError` when two frames are
  not connected. It raises `ExtrapolationError` when the requested time is
  outside the stored samples. A time of zero asks for the latest samples.
- `MotionCompensator.compensate` does not raise for missing transforms.
  It returns an unchanged copy of the cloud, and logs a warning, when the
  transforms it needs are unavailable or cannot be extrapolated.

## What it does not do

The package does not connect to a radar, a message bus or a transform
publisher. Nothing subscribes to topics or publishes clouds. You hand frames,
configurations, clouds and transforms to the objects yourself, and you take the
results back. There is no command-line program. The `downsampling_factor`
accepted by `CloudFilter` is stored but not used.