"""Radar points and the clouds that hold them."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

_UINT32_MAX = 0xFFFFFFFF
_UINT64_MAX = (1 << 64) - 1


def split_timestamp(nsec: int) -> tuple[int, int]:
    """Split a 64-bit nanosecond time into its high and low 32-bit words."""
    if not 0 <= nsec <= _UINT64_MAX:
        raise ValueError(f"timestamp {nsec} does not fit in 64 unsigned bits")
    return nsec >> 32, nsec & _UINT32_MAX


def join_timestamp(high: int, low: int) -> int:
    """Rebuild a 64-bit nanosecond time from its high and low 32-bit words."""
    for name, value in (("high", high), ("low", low)):
        if not 0 <= value <= _UINT32_MAX:
            raise ValueError(f"{name} word {value} does not fit in 32 unsigned bits")
    return (high << 32) | low


@dataclass
class RadarPoint:
    """One radar return: position, intensity, capture time and azimuth."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    intensity: float = 0.0
    time_high: int = 0
    time_low: int = 0
    azimuth: int = 0

    def timestamp_ns(self) -> int:
        """Capture time of the point in nanoseconds."""
        return join_timestamp(self.time_high, self.time_low)


@dataclass
class PointCloud:
    """An unordered cloud of radar points with its header fields."""

    points: list[RadarPoint] = field(default_factory=list)
    frame_id: str = ""
    seq: int = 0
    stamp_ns: int = 0

    @property
    def width(self) -> int:
        return len(self.points)

    @property
    def height(self) -> int:
        return 1

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[RadarPoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> RadarPoint:
        return self.points[index]

    def clear(self) -> None:
        """Drop every point; the header is left as it is."""
        self.points.clear()

    def extend(self, other: PointCloud | Iterable[RadarPoint]) -> None:
        """Append the points of another cloud, keeping the newer of the two stamps."""
        if isinstance(other, PointCloud):
            self.stamp_ns = max(self.stamp_ns, other.stamp_ns)
            self.points.extend(other.points)
        else:
            self.points.extend(other)