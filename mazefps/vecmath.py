"""Small 3D vector and quaternion types used by the game and its protocol."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Iterator


@dataclass(frozen=True)
class Vec3:
    """An immutable three-component vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    ZERO: ClassVar[Vec3]
    ONE: ClassVar[Vec3]
    X: ClassVar[Vec3]
    Y: ClassVar[Vec3]
    Z: ClassVar[Vec3]
    NEG_Z: ClassVar[Vec3]

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: Vec3) -> Vec3:
        if not isinstance(other, Vec3):
            return NotImplemented
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        if not isinstance(other, Vec3):
            return NotImplemented
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, factor: float) -> Vec3:
        if not isinstance(factor, (int, float)):
            return NotImplemented
        return Vec3(self.x * factor, self.y * factor, self.z * factor)

    __rmul__ = __mul__

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def length(self) -> float:
        """Euclidean length."""
        return math.hypot(self.x, self.y, self.z)

    def normalize_or_zero(self) -> Vec3:
        """Unit vector in the same direction, or the zero vector if that is undefined."""
        length = self.length()
        if length == 0.0 or not math.isfinite(length):
            return Vec3.ZERO
        return self * (1.0 / length)

    def lerp(self, other: Vec3, t: float) -> Vec3:
        """Linear interpolation from this vector towards ``other``."""
        return self + (other - self) * t


Vec3.ZERO = Vec3(0.0, 0.0, 0.0)
Vec3.ONE = Vec3(1.0, 1.0, 1.0)
Vec3.X = Vec3(1.0, 0.0, 0.0)
Vec3.Y = Vec3(0.0, 1.0, 0.0)
Vec3.Z = Vec3(0.0, 0.0, 1.0)
Vec3.NEG_Z = Vec3(0.0, 0.0, -1.0)


def _cross(a: Vec3, b: Vec3) -> Vec3:
    return Vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@dataclass(frozen=True)
class Quat:
    """An immutable rotation quaternion stored as (x, y, z, w)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    IDENTITY: ClassVar[Quat]

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z
        yield self.w

    @staticmethod
    def from_rotation_y(angle: float) -> Quat:
        """Rotation of ``angle`` radians about the Y axis."""
        half = angle * 0.5
        return Quat(0.0, math.sin(half), 0.0, math.cos(half))

    @staticmethod
    def _from_rotation_x(angle: float) -> Quat:
        half = angle * 0.5
        return Quat(math.sin(half), 0.0, 0.0, math.cos(half))

    @staticmethod
    def _from_rotation_z(angle: float) -> Quat:
        half = angle * 0.5
        return Quat(0.0, 0.0, math.sin(half), math.cos(half))

    @staticmethod
    def from_euler_yxz(yaw: float, pitch: float, roll: float) -> Quat:
        """Rotation by yaw about Y, then pitch about X, then roll about Z."""
        return (
            Quat.from_rotation_y(yaw)
            * Quat._from_rotation_x(pitch)
            * Quat._from_rotation_z(roll)
        )

    def to_euler_yxz(self) -> tuple[float, float, float]:
        """Decompose into (yaw, pitch, roll) in YXZ order."""
        x, y, z, w = self.x, self.y, self.z, self.w
        m02 = 2.0 * (x * z + w * y)
        m22 = 1.0 - 2.0 * (x * x + y * y)
        m12 = 2.0 * (y * z - w * x)
        m10 = 2.0 * (x * y + w * z)
        m11 = 1.0 - 2.0 * (x * x + z * z)
        pitch = math.asin(max(-1.0, min(1.0, -m12)))
        yaw = math.atan2(m02, m22)
        roll = math.atan2(m10, m11)
        return yaw, pitch, roll

    def rotate(self, vector: Vec3) -> Vec3:
        """Apply this rotation to ``vector``."""
        axis = Vec3(self.x, self.y, self.z)
        t = _cross(axis, vector) * 2.0
        return vector + t * self.w + _cross(axis, t)

    def forward(self) -> Vec3:
        """The direction this rotation faces (rotated -Z)."""
        return self.rotate(Vec3.NEG_Z)

    def right(self) -> Vec3:
        """The right-hand direction of this rotation (rotated +X)."""
        return self.rotate(Vec3.X)

    def __mul__(self, other):
        if isinstance(other, Vec3):
            return self.rotate(other)
        if not isinstance(other, Quat):
            return NotImplemented
        x1, y1, z1, w1 = self.x, self.y, self.z, self.w
        x2, y2, z2, w2 = other.x, other.y, other.z, other.w
        return Quat(
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        )


Quat.IDENTITY = Quat(0.0, 0.0, 0.0, 1.0)