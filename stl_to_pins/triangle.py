"""Triangle primitive and the barycentric kernel used for depth lookup."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from .errors import DegenerateTriangleError, InvalidInputError
from .geometry import Vec3

# Tolerance on the barycentric parameters so grid points that sit exactly on
# an edge shared by two triangles are not lost to rounding.
EPS = 1e-9
# Footprints whose doubled area is below this fraction of the squared edge
# length are treated as having no area.
AREA_EPS = 1e-12


def barycentric_grid(tri, px, py, eps=EPS):
    """Vectorized 2D barycentric test of points (px, py) against `tri`.

    `tri` is a (3, 3) array of vertices; only x and y are used. Returns
    `(weights, inside)` where `weights` has shape `px.shape + (3,)` holding the
    weight of each vertex (clamped to >= 0 and summing to 1) and `inside` is a
    boolean mask of points within the footprint.

    Raises DegenerateTriangleError if the footprint has zero area.
    """
    tri = np.asarray(tri, dtype=np.float64)
    v0 = tri[0]
    e1 = tri[1] - v0
    e2 = tri[2] - v0

    d00 = e1[0] ** 2 + e1[1] ** 2
    d01 = e1[0] * e2[0] + e1[1] * e2[1]
    d11 = e2[0] ** 2 + e2[1] ** 2
    cross_z = e1[0] * e2[1] - e1[1] * e2[0]
    if abs(cross_z) <= AREA_EPS * max(d00, d11):
        raise DegenerateTriangleError("Triangle has no area in the XY plane.")
    denom = d00 * d11 - d01 * d01

    dx = np.asarray(px, dtype=np.float64) - v0[0]
    dy = np.asarray(py, dtype=np.float64) - v0[1]
    d20 = dx * e1[0] + dy * e1[1]
    d21 = dx * e2[0] + dy * e2[1]
    s = (d11 * d20 - d01 * d21) / denom
    t = (d00 * d21 - d01 * d20) / denom

    inside = (s >= -eps) & (t >= -eps) & (s + t <= 1 + eps)

    s = np.clip(s, 0.0, None)
    t = np.clip(t, 0.0, None)
    total = s + t
    over = total > 1.0
    s = np.where(over, s / np.where(over, total, 1.0), s)
    t = np.where(over, t / np.where(over, total, 1.0), t)
    u = np.clip(1.0 - s - t, 0.0, None)

    return np.stack([u, s, t], axis=-1), inside


@dataclass(frozen=True)
class Triangle:
    """Three vertices in counter-clockwise order plus their unit normal.

    The normal is computed once from (v1->v2) x (v1->v3). Zero-area
    triangles are rejected with DegenerateVectorError.
    """

    v1: Vec3
    v2: Vec3
    v3: Vec3
    normal: Vec3 = field(init=False, compare=False)

    def __post_init__(self):
        normal = (self.v2 - self.v1).cross(self.v3 - self.v1).normalize()
        object.__setattr__(self, "normal", normal)

    @classmethod
    def _moved(cls, v1: Vec3, v2: Vec3, v3: Vec3, normal: Vec3) -> Triangle:
        """New triangle reusing a normal already known to match the vertices."""
        tri = object.__new__(cls)
        for name, value in (("v1", v1), ("v2", v2), ("v3", v3), ("normal", normal)):
            object.__setattr__(tri, name, value)
        return tri

    @classmethod
    def from_array(cls, arr) -> Triangle:
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape != (3, 3):
            raise InvalidInputError(f"Expected a (3, 3) vertex array, got {arr.shape}")
        return cls(*(Vec3.from_array(row) for row in arr))

    @property
    def vertices(self) -> Tuple[Vec3, Vec3, Vec3]:
        return (self.v1, self.v2, self.v3)

    def to_array(self) -> np.ndarray:
        return np.array([v.to_array() for v in self.vertices])

    def translate(self, delta: Vec3) -> Triangle:
        return self._moved(self.v1 + delta, self.v2 + delta, self.v3 + delta, self.normal)

    def rotate_z(self, angle: float) -> Triangle:
        if angle == 0:
            return self
        return self._moved(
            self.v1.rotate_z(angle),
            self.v2.rotate_z(angle),
            self.v3.rotate_z(angle),
            self.normal.rotate_z(angle),
        )

    def footprint_area(self) -> float:
        """Signed area of the XY projection (positive when CCW seen from +z)."""
        e1 = self.v2 - self.v1
        e2 = self.v3 - self.v1
        return 0.5 * (e1.x * e2.y - e1.y * e2.x)

    def has_footprint(self) -> bool:
        e1 = (self.v2 - self.v1).xy()
        e2 = (self.v3 - self.v1).xy()
        scale = max(e1.dot(e1), e2.dot(e2))
        return abs(e1.cross(e2)) > AREA_EPS * scale

    def barycentric_coords(self, x: float, y: float) -> Optional[Tuple[float, float, float]]:
        """Weights (u, v, w) of v1, v2, v3 for point (x, y), or None if outside.

        Only x and y are considered. w == 1 - u - v.
        """
        weights, inside = barycentric_grid(self.to_array(), x, y)
        if not bool(inside):
            return None
        u, v, w = (float(c) for c in weights)
        return u, v, w

    def interpolate_z(self, weights) -> float:
        u, v, w = weights
        return u * self.v1.z + v * self.v2.z + w * self.v3.z

    def sample_points(self, count: int, rng: np.random.Generator) -> np.ndarray:
        """Uniformly distributed points on the face, shape (count, 3)."""
        if count < 0:
            raise InvalidInputError("count must be >= 0")
        r1 = rng.random(count)
        r2 = rng.random(count)
        sq = np.sqrt(r1)
        a = (1 - sq)[:, None]
        b = (sq * (1 - r2))[:, None]
        c = (r2 * sq)[:, None]
        tri = self.to_array()
        return a * tri[0] + b * tri[1] + c * tri[2]
