"""CA-CFAR suppression and intensity pass-through filtering of full radar scans."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace

from lwlrf.config import NotConfiguredError, RadarConfig
from lwlrf.points import PointCloud, RadarPoint

RADAR_INTENSITY_THRESHOLD = 1.75
PASSTHROUGH_LOW = 100.0
PASSTHROUGH_HIGH = 255.0

_log = logging.getLogger(__name__)


class ScanSizeError(ValueError):
    """Raised when a cloud does not hold exactly one full scan."""


def cfar_suppress(
    intensities: Sequence[float],
    range_bins: int,
    guard_cells: int,
    train_cells: int,
) -> list[float]:
    """Run the 2-D cell-averaging CFAR over a full scan laid out azimuth by azimuth.

    A cell whose intensity exceeds the local noise average times the threshold
    is set to zero. Cells are updated in order, so later cells see the earlier
    updates, and cells whose training window does not fit are left alone.
    """
    if range_bins <= 0:
        raise ValueError(f"range_bins must be positive, got {range_bins}")
    if guard_cells < 0 or train_cells < 0:
        raise ValueError("guard and training cell counts must not be negative")

    values = [float(value) for value in intensities]
    width = len(values)
    if train_cells == 0:
        # The noise average is undefined, so no cell can exceed it.
        return values

    reach = train_cells + guard_cells
    azimuth_reach = range_bins * reach
    for start in range(0, width, range_bins):
        stop = start + range_bins
        for point in range(start, stop):
            if point - reach < start or point + reach > stop:
                continue
            # A cell whose window would touch the end of the scan is left alone.
            if point - azimuth_reach < 0 or point + azimuth_reach >= width:
                continue

            noise = 0.0
            for forward in range(train_cells // 2):
                reverse = train_cells - forward
                noise += values[point + reverse - guard_cells]
                noise += values[point + forward - guard_cells]
                noise += values[point - reverse - guard_cells]
                noise += values[point - forward - guard_cells]

                noise += values[point - range_bins * (reverse + guard_cells)]
                noise += values[point - range_bins * (forward + guard_cells)]
                noise += values[point + range_bins * (reverse + guard_cells)]
                noise += values[point + range_bins * (forward + guard_cells)]

            average = noise / (train_cells * 4.0)
            if values[point] > average * RADAR_INTENSITY_THRESHOLD:
                values[point] = 0.0
    return values


def passthrough(points: Iterable[RadarPoint], low: float, high: float) -> list[RadarPoint]:
    """Keep the points whose intensity lies within [low, high]."""
    return [point for point in points if low <= point.intensity <= high]


class CloudFilter:
    """Filters complete radar scans with CA-CFAR followed by an intensity window."""

    def __init__(self, guard_cells: int, train_cells: int, downsampling_factor: int = 1) -> None:
        if guard_cells < 0 or train_cells < 0:
            raise ValueError("guard and training cell counts must not be negative")
        self.guard_cells = guard_cells
        self.train_cells = train_cells
        self.downsampling_factor = downsampling_factor
        self.config: RadarConfig | None = None

    def configure(self, config: RadarConfig) -> None:
        """Accept the radar configuration; only the first one received is used."""
        if self.config is None:
            self.config = config

    def filter(self, cloud: PointCloud) -> PointCloud:
        """Return a filtered copy of one full scan; the input is left untouched."""
        if self.config is None:
            raise NotConfiguredError("radar configuration has not been received")
        expected = self.config.scan_size()
        if cloud.width != expected:
            _log.error("Input cloud size must be equal to the size of scan")
            raise ScanSizeError(
                f"cloud holds {cloud.width} points, a full scan holds {expected}"
            )

        suppressed = cfar_suppress(
            [point.intensity for point in cloud],
            self.config.range_in_bins,
            self.guard_cells,
            self.train_cells,
        )
        points = [
            replace(point, intensity=intensity)
            for point, intensity in zip(cloud, suppressed)
        ]
        return PointCloud(
            points=passthrough(points, PASSTHROUGH_LOW, PASSTHROUGH_HIGH),
            frame_id=cloud.frame_id,
            seq=cloud.seq,
            stamp_ns=cloud.stamp_ns,
        )