"""Radar configuration as reported by the sensor's configuration message."""

from __future__ import annotations

from dataclasses import dataclass

_UINT16_MAX = 0xFFFF


class NotConfiguredError(RuntimeError):
    """Raised when data arrives before the radar configuration is known."""


@dataclass(frozen=True)
class RadarConfig:
    """Static parameters of the radar that shape every scan it produces."""

    range_resolution: float
    azimuth_samples: int
    encoder_size: int
    bin_size: int
    range_in_bins: int
    expected_rotation_rate: int

    def __post_init__(self) -> None:
        if not 0 <= self.azimuth_samples <= _UINT16_MAX:
            raise ValueError(
                f"azimuth_samples must fit in 16 bits, got {self.azimuth_samples}"
            )

    def scan_size(self) -> int:
        """Number of points in one full rotation of the radar."""
        return self.range_in_bins * self.azimuth_samples