"""Transforms: local and world position, rotation and scale."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

Vector3 = Tuple[float, float, float]


def _vector(values: Iterable[float]) -> Vector3:
    x, y, z = (float(v) for v in values)
    return (x, y, z)


def _normalize(vector: Vector3) -> Vector3:
    length = math.sqrt(sum(c * c for c in vector))
    if length == 0.0:
        return vector
    return _vector(c / length for c in vector)


@dataclass(frozen=True)
class Quaternion:
    """A rotation quaternion, identity by default."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_axis_angle(cls, axis: Iterable[float], angle: float) -> "Quaternion":
        """A rotation of ``angle`` radians about ``axis``."""
        ax, ay, az = _normalize(_vector(axis))
        half = angle / 2.0
        s = math.sin(half)
        return cls(math.cos(half), ax * s, ay * s, az * s)

    def __mul__(self, other: "Quaternion") -> "Quaternion":
        if not isinstance(other, Quaternion):
            return NotImplemented
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z
        return Quaternion(
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        )

    def conjugate(self) -> "Quaternion":
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def inverse(self) -> "Quaternion":
        """The inverse rotation; ValueError for the zero quaternion."""
        norm = self.w * self.w + self.x * self.x + self.y * self.y + self.z * self.z
        if norm == 0.0:
            raise ValueError("the zero quaternion has no inverse")
        c = self.conjugate()
        return Quaternion(c.w / norm, c.x / norm, c.y / norm, c.z / norm)

    def rotate(self, vector: Iterable[float]) -> Vector3:
        """Rotate a vector by this quaternion."""
        x, y, z = _vector(vector)
        result = self * Quaternion(0.0, x, y, z) * self.inverse()
        return (result.x, result.y, result.z)

    def rotate_inverse(self, vector: Iterable[float]) -> Vector3:
        """Rotate a vector by the inverse of this quaternion."""
        return self.inverse().rotate(vector)


@dataclass
class Transform:
    """Position, rotation and scale relative to a parent."""

    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Quaternion = field(default_factory=Quaternion)
    scale: Vector3 = (1.0, 1.0, 1.0)


@dataclass
class WorldTransform(Transform):
    """Position, rotation and scale in world space."""

    def forward(self) -> Vector3:
        """The unit vector the transform looks along."""
        return _normalize(self.rotation.rotate_inverse((0.0, 0.0, -1.0)))

    def right(self) -> Vector3:
        """The unit vector to the transform's right."""
        return _normalize(self.rotation.rotate_inverse((1.0, 0.0, 0.0)))

    def up(self) -> Vector3:
        """The unit vector above the transform."""
        return _normalize(self.rotation.rotate_inverse((0.0, 1.0, 0.0)))


def update_world_transform(
    local: Transform, parent: Optional[WorldTransform] = None
) -> WorldTransform:
    """Combine a local transform with its parent's world transform."""
    if parent is None:
        return WorldTransform(local.position, local.rotation, local.scale)
    return WorldTransform(
        _vector(a + b for a, b in zip(local.position, parent.position)),
        local.rotation * parent.rotation,
        _vector(a * b for a, b in zip(local.scale, parent.scale)),
    )