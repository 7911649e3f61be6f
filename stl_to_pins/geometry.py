"""Small vector algebra and plane fitting.

Vectors are immutable value types; arithmetic returns new instances.
Anything that would divide by a zero length raises instead of
producing NaN.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .errors import DegeneratePlaneError, DegenerateVectorError, InvalidInputError

EPS = 1e-12


@dataclass(frozen=True)
class Vec2:
    x: float
    y: float

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def add(self, other: Vec2) -> Vec2:
        return self + other

    def sub(self, other: Vec2) -> Vec2:
        return self - other

    def scale(self, scalar: float) -> Vec2:
        return self * scalar

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> Vec2:
        n = self.length()
        if n < EPS:
            raise DegenerateVectorError("Cannot normalize a zero-length vector.")
        return Vec2(self.x / n, self.y / n)

    def dot(self, other: Vec2) -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vec2) -> float:
        """Z component of the 3D cross product of two in-plane vectors."""
        return self.x * other.y - self.y * other.x

    def angle_between(self, other: Vec2) -> float:
        if self.length() < EPS or other.length() < EPS:
            raise DegenerateVectorError("Angle is undefined for a zero-length vector.")
        return math.atan2(abs(self.cross(other)), self.dot(other))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)


@dataclass(frozen=True)
class Vec3:
    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, arr) -> Vec3:
        x, y, z = (float(c) for c in arr)
        return cls(x, y, z)

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vec3:
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def add(self, other: Vec3) -> Vec3:
        return self + other

    def sub(self, other: Vec3) -> Vec3:
        return self - other

    def scale(self, scalar: float) -> Vec3:
        return self * scalar

    def length(self) -> float:
        return math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)

    def normalize(self) -> Vec3:
        n = self.length()
        if n < EPS:
            raise DegenerateVectorError("Cannot normalize a zero-length vector.")
        return Vec3(self.x / n, self.y / n, self.z / n)

    def dot(self, other: Vec3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def angle_between(self, other: Vec3) -> float:
        """Unsigned angle in radians, in [0, pi]."""
        if self.length() < EPS or other.length() < EPS:
            raise DegenerateVectorError("Angle is undefined for a zero-length vector.")
        return math.atan2(self.cross(other).length(), self.dot(other))

    def rotate_z(self, angle: float) -> Vec3:
        """Rotate (x, y) about the z axis by `angle` radians; z is kept."""
        if angle == 0:
            return self
        c, s = math.cos(angle), math.sin(angle)
        return Vec3(self.x * c - self.y * s, self.x * s + self.y * c, self.z)

    def xy(self) -> Vec2:
        return Vec2(self.x, self.y)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


@dataclass(frozen=True)
class Plane:
    """Plane `normal . p + d = 0` with a unit-length normal."""

    normal: Vec3
    d: float

    def __post_init__(self):
        # rescale both terms so the normal is unit length; the plane is unchanged
        n = self.normal.length()
        if n < EPS:
            raise DegeneratePlaneError("Plane normal has zero length.")
        if abs(n - 1.0) > 1e-12:
            object.__setattr__(self, "normal", self.normal * (1.0 / n))
            object.__setattr__(self, "d", self.d / n)

    @classmethod
    def from_points(cls, p1: Vec3, p2: Vec3, p3: Vec3) -> Plane:
        try:
            normal = (p2 - p1).cross(p3 - p1).normalize()
        except DegenerateVectorError as exc:
            raise DegeneratePlaneError(
                "Points are collinear or coincident; no unique plane."
            ) from exc
        return cls(normal, -normal.dot(p1))

    @classmethod
    def best_fit_plane(cls, points) -> Plane:
        """Total least-squares plane through `points`.

        The normal is the singular vector of the centered covariance with
        the smallest singular value, so orthogonal distance is minimized
        (not the z residual). The normal is flipped to point up (z >= 0).
        """
        if points is None or len(points) < 3:
            raise InvalidInputError("At least three points are required to define a plane.")

        pts = np.array([p.to_array() if isinstance(p, Vec3) else p for p in points],
                       dtype=np.float64)
        centroid = pts.mean(axis=0)
        h = pts - centroid
        _, s, vt = np.linalg.svd(h.T @ h)

        # rank < 2: all points on one line (or one point)
        if s[1] <= EPS * max(s[0], 1.0):
            raise DegeneratePlaneError("Points are collinear; no unique best-fit plane.")

        n = vt[2]
        if n[2] < 0 or (n[2] == 0 and (n[1] < 0 or (n[1] == 0 and n[0] < 0))):
            n = -n
        normal = Vec3.from_array(n / np.linalg.norm(n))
        return cls(normal, -normal.dot(Vec3.from_array(centroid)))

    def get_z(self, x: float, y: float) -> float:
        if self.normal.z == 0:
            raise DegeneratePlaneError("The plane is vertical; z is not a function of (x, y).")
        return (-self.d - self.normal.x * x - self.normal.y * y) / self.normal.z

    def distance(self, p: Vec3) -> float:
        """Signed distance from `p`, positive on the normal side."""
        return self.normal.dot(p) + self.d
