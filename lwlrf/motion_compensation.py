"""Motion compensation of radar scans using a buffer of timed frame transforms."""

from __future__ import annotations

import logging
import math
from bisect import bisect_left
from dataclasses import dataclass, field, replace

from lwlrf.points import PointCloud

_log = logging.getLogger(__name__)

_NS_PER_S = 1_000_000_000


@dataclass(frozen=True)
class Vector3:
    """A point or translation in three dimensions."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def _cross(self, other: Vector3) -> Vector3:
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )


@dataclass(frozen=True)
class Quaternion:
    """A rotation quaternion; the default is the identity."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def __mul__(self, other: Quaternion) -> Quaternion:
        return Quaternion(
            self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
            self.w * other.y + self.y * other.w + self.z * other.x - self.x * other.z,
            self.w * other.z + self.z * other.w + self.x * other.y - self.y * other.x,
            self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
        )

    def _dot(self, other: Quaternion) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z + self.w * other.w

    def rotate(self, vector: Vector3) -> Vector3:
        """Rotate a vector by this (unit) quaternion."""
        axis = Vector3(self.x, self.y, self.z)
        twice = axis._cross(vector) * 2.0
        return vector + twice * self.w + axis._cross(twice)

    def inverse(self) -> Quaternion:
        """The conjugate, which undoes a unit rotation."""
        return Quaternion(-self.x, -self.y, -self.z, self.w)


@dataclass(frozen=True)
class Transform:
    """A rigid transform taking points in child_frame_id into frame_id."""

    translation: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion)
    frame_id: str = ""
    child_frame_id: str = ""
    stamp_ns: int = 0

    def apply(self, point: Vector3) -> Vector3:
        """Map a point from the child frame into the parent frame."""
        return self.rotation.rotate(point) + self.translation

    def inverse(self) -> Transform:
        """The transform taking points from the parent frame back into the child."""
        rotation = self.rotation.inverse()
        return Transform(
            translation=-rotation.rotate(self.translation),
            rotation=rotation,
            frame_id=self.child_frame_id,
            child_frame_id=self.frame_id,
            stamp_ns=self.stamp_ns,
        )

    def _then(self, inner: Transform) -> Transform:
        # self after inner: points go through inner first.
        return Transform(
            translation=self.rotation.rotate(inner.translation) + self.translation,
            rotation=self.rotation * inner.rotation,
            frame_id=self.frame_id,
            child_frame_id=inner.child_frame_id,
            stamp_ns=self.stamp_ns,
        )


class TransformLookupError(LookupError):
    """Raised when no chain of transforms joins two frames."""


class ExtrapolationError(TransformLookupError):
    """Raised when a transform is asked for outside the time its samples cover."""


def slerp(q1: Quaternion, q2: Quaternion, ratio: float) -> Quaternion:
    """Spherical linear interpolation along the shorter arc between two rotations."""
    magnitude = math.sqrt(q1._dot(q1) * q2._dot(q2))
    product = q1._dot(q2) / magnitude
    if abs(product) >= 1.0:
        return q1
    sign = -1.0 if product < 0 else 1.0
    theta = math.acos(sign * product)
    s1 = math.sin(sign * ratio * theta)
    s0 = math.sin((1.0 - ratio) * theta)
    d = 1.0 / math.sin(theta)
    return Quaternion(
        (q1.x * s0 + q2.x * s1) * d,
        (q1.y * s0 + q2.y * s1) * d,
        (q1.z * s0 + q2.z * s1) * d,
        (q1.w * s0 + q2.w * s1) * d,
    )


def interpolate_transform(one: Transform, two: Transform, time_ns: int) -> Transform:
    """Interpolate (or extrapolate) between two stamped transforms at a given time."""
    if one.stamp_ns == two.stamp_ns:
        return two
    ratio = (time_ns - one.stamp_ns) / (two.stamp_ns - one.stamp_ns)
    translation = one.translation + (two.translation - one.translation) * ratio
    return Transform(
        translation=translation,
        rotation=slerp(one.rotation, two.rotation, ratio),
        frame_id=one.frame_id,
        child_frame_id=one.child_frame_id,
        stamp_ns=time_ns,
    )


@dataclass
class _Edge:
    parent: str
    stamps: list[int] = field(default_factory=list)
    samples: list[Transform] = field(default_factory=list)


class TransformBuffer:
    """A time-limited store of parent/child transforms forming a frame tree."""

    def __init__(self, cache_time_ns: int = 60 * _NS_PER_S) -> None:
        if cache_time_ns < 0:
            raise ValueError("cache time must not be negative")
        self.cache_time_ns = cache_time_ns
        self._edges: dict[str, _Edge] = {}

    def set_transform(self, transform: Transform) -> None:
        """Record a transform from child_frame_id into frame_id at its stamp."""
        if not transform.frame_id or not transform.child_frame_id:
            raise ValueError("a transform needs both a frame and a child frame")
        if transform.frame_id == transform.child_frame_id:
            raise ValueError("a frame cannot be its own parent")
        edge = self._edges.get(transform.child_frame_id)
        if edge is None or edge.parent != transform.frame_id:
            edge = _Edge(parent=transform.frame_id)
            self._edges[transform.child_frame_id] = edge

        index = bisect_left(edge.stamps, transform.stamp_ns)
        if index < len(edge.stamps) and edge.stamps[index] == transform.stamp_ns:
            edge.samples[index] = transform
        else:
            edge.stamps.insert(index, transform.stamp_ns)
            edge.samples.insert(index, transform)

        oldest_kept = bisect_left(edge.stamps, edge.stamps[-1] - self.cache_time_ns)
        del edge.stamps[:oldest_kept]
        del edge.samples[:oldest_kept]

    def _ancestors(self, frame: str) -> list[str]:
        chain = [frame]
        while frame in self._edges:
            frame = self._edges[frame].parent
            if frame in chain:
                break
            chain.append(frame)
        return chain

    def _sample(self, child: str, time_ns: int) -> Transform:
        edge = self._edges[child]
        if time_ns == 0:
            return edge.samples[-1]
        if time_ns < edge.stamps[0] or time_ns > edge.stamps[-1]:
            raise ExtrapolationError(
                f"no transform {edge.parent} <- {child} at {time_ns} ns; "
                f"samples cover {edge.stamps[0]}..{edge.stamps[-1]} ns"
            )
        index = bisect_left(edge.stamps, time_ns)
        if edge.stamps[index] == time_ns:
            return edge.samples[index]
        return interpolate_transform(edge.samples[index - 1], edge.samples[index], time_ns)

    def _to_ancestor(self, frame: str, chain: list[str], time_ns: int) -> Transform:
        result = Transform(frame_id=frame, child_frame_id=frame, stamp_ns=time_ns)
        for child in chain:
            result = self._sample(child, time_ns)._then(result)
        return result

    def lookup(self, target_frame: str, source_frame: str, time_ns: int) -> Transform:
        """The transform taking points in source_frame into target_frame at a time.

        A time of zero asks for the latest sample of every link.
        """
        if target_frame == source_frame:
            return Transform(frame_id=target_frame, child_frame_id=source_frame, stamp_ns=time_ns)
        source_chain = self._ancestors(source_frame)
        target_chain = self._ancestors(target_frame)
        common = next((frame for frame in source_chain if frame in target_chain), None)
        if common is None:
            raise TransformLookupError(
                f"frames {target_frame!r} and {source_frame!r} are not connected"
            )
        source_links = source_chain[: source_chain.index(common)]
        target_links = target_chain[: target_chain.index(common)]
        common_from_source = self._to_ancestor(source_frame, source_links, time_ns)
        common_from_target = self._to_ancestor(target_frame, target_links, time_ns)
        result = common_from_target.inverse()._then(common_from_source)
        return replace(
            result, frame_id=target_frame, child_frame_id=source_frame, stamp_ns=time_ns
        )

    def can_transform(self, target_frame: str, source_frame: str, time_ns: int) -> bool:
        """Whether lookup would succeed for these frames at this time."""
        try:
            self.lookup(target_frame, source_frame, time_ns)
        except TransformLookupError:
            return False
        return True


class MotionCompensator:
    """Deskews scans by moving each point with the sensor motion at its capture time."""

    def __init__(
        self,
        buffer: TransformBuffer,
        target_frame: str,
        expected_input_frequency: float,
    ) -> None:
        if expected_input_frequency <= 0:
            raise ValueError("expected input frequency must be positive")
        self.buffer = buffer
        self.target_frame = target_frame
        self.expected_input_frequency = expected_input_frequency

    def compensate(self, cloud: PointCloud) -> PointCloud:
        """Return a deskewed copy of the cloud, or an unchanged copy if transforms are missing."""
        unchanged = PointCloud(
            points=[replace(point) for point in cloud],
            frame_id=cloud.frame_id,
            seq=cloud.seq,
            stamp_ns=cloud.stamp_ns,
        )
        end_ns = cloud.stamp_ns
        start_ns = end_ns - round(_NS_PER_S / self.expected_input_frequency)

        if not self.buffer.can_transform(self.target_frame, cloud.frame_id, end_ns):
            _log.warning(
                "Motion Compensation is waiting for the transform from target frame (%s) "
                "to sensor frame (%s) to become available.",
                self.target_frame,
                cloud.frame_id,
            )
            return unchanged

        try:
            start = self.buffer.lookup(self.target_frame, cloud.frame_id, start_ns)
            end = self.buffer.lookup(self.target_frame, cloud.frame_id, end_ns)
            back = self.buffer.lookup(cloud.frame_id, self.target_frame, end_ns)
        except ExtrapolationError as error:
            _log.warning(
                "Motion Compensation unable to extrapolate transform from target frame (%s) "
                "to sensor frame (%s). Details: %s",
                self.target_frame,
                cloud.frame_id,
                error,
            )
            return unchanged

        points = []
        for point in cloud:
            at_capture = interpolate_transform(start, end, point.timestamp_ns())
            moved = back.apply(at_capture.apply(Vector3(point.x, point.y, point.z)))
            points.append(replace(point, x=moved.x, y=moved.y, z=moved.z))
        return PointCloud(
            points=points, frame_id=back.frame_id, seq=cloud.seq, stamp_ns=cloud.stamp_ns
        )