"""Conversion of per-azimuth FFT returns into radar point clouds."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from lwlrf.config import NotConfiguredError, RadarConfig
from lwlrf.points import PointCloud, RadarPoint, split_timestamp

SPEED_OF_LIGHT_M_PER_NS = 0.299792
_UINT16_MAX = 0xFFFF


@dataclass(frozen=True)
class FFTFrame:
    """High-precision FFT data of one azimuth: one 16-bit amplitude per range bin."""

    azimuth: int
    stamp_ns: int
    data: Sequence[int]

    def __post_init__(self) -> None:
        if not 0 <= self.azimuth <= _UINT16_MAX:
            raise ValueError(f"azimuth must fit in 16 bits, got {self.azimuth}")
        if self.stamp_ns < 0:
            raise ValueError(f"stamp must not be negative, got {self.stamp_ns}")
        if any(not 0 <= value <= _UINT16_MAX for value in self.data):
            raise ValueError("FFT amplitudes must fit in 16 bits")


@dataclass
class ConversionResult:
    """What one FFT frame produced: its azimuth cloud and, on wrap-around, a full scan."""

    azimuth: PointCloud
    scan: PointCloud | None = None


def _cloud_stamp(stamp_ns: int) -> int:
    # Cloud headers keep microseconds only.
    return stamp_ns // 1000 * 1000


class FFTConverter:
    """Turns a stream of FFT frames into azimuth clouds and complete scans."""

    def __init__(self, sensor_frame: str) -> None:
        self.sensor_frame = sensor_frame
        self.config: RadarConfig | None = None
        self._azimuth_frame_number = 0
        self._scan_frame_number = 0
        self._last_azimuth = 0
        self._scan = PointCloud()

    def configure(self, config: RadarConfig) -> None:
        """Accept the radar configuration; only the first one received is used."""
        if self.config is None:
            self.config = config

    def _build_points(self, frame: FFTFrame, config: RadarConfig) -> list[RadarPoint]:
        theta = frame.azimuth / config.encoder_size * 2 * math.pi
        cos_theta, sin_theta = math.cos(theta), math.sin(theta)
        resolution = config.range_resolution
        total_bins = len(frame.data)
        points = []
        for range_bin, amplitude in enumerate(frame.data):
            flight_ns = (
                resolution * total_bins - resolution * range_bin
            ) / SPEED_OF_LIGHT_M_PER_NS
            time_high, time_low = split_timestamp(int(frame.stamp_ns - flight_ns))
            distance = resolution * range_bin
            points.append(
                RadarPoint(
                    x=distance * cos_theta,
                    y=distance * sin_theta,
                    z=0.0,
                    intensity=float(int(amplitude / 65535.0 * 255)),
                    time_high=time_high,
                    time_low=time_low,
                    azimuth=frame.azimuth,
                )
            )
        return points

    def process(self, frame: FFTFrame) -> ConversionResult:
        """Convert one frame; a full scan is returned when the azimuth wraps around."""
        if self.config is None:
            raise NotConfiguredError("radar configuration has not been received")

        azimuth_cloud = PointCloud(
            points=self._build_points(frame, self.config),
            frame_id=self.sensor_frame,
            seq=self._azimuth_frame_number,
            stamp_ns=_cloud_stamp(frame.stamp_ns),
        )

        completed = None
        if frame.azimuth < self._last_azimuth:
            completed = PointCloud(
                points=list(self._scan.points),
                frame_id=self.sensor_frame,
                seq=self._scan_frame_number,
                stamp_ns=self._scan.stamp_ns,
            )
            self._scan.clear()

        self._scan.extend(azimuth_cloud)
        self._scan.stamp_ns = azimuth_cloud.stamp_ns
        self._azimuth_frame_number += 1
        self._last_azimuth = frame.azimuth
        return ConversionResult(azimuth=azimuth_cloud, scan=completed)