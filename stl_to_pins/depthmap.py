"""Depth map generation: sample surface heights on a regular grid.

Each grid point takes its height from a triangle whose XY footprint
contains it, interpolated with barycentric weights. Points covered by no
triangle are undetermined.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .config import GRID_SIZE, UNDETERMINED_SENTINEL
from .errors import InvalidInputError
from .triangle import barycentric_grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Grid:
    """Evenly spaced size x size sample points over a rectangle.

    Rows follow y and columns follow x. This is the one place grid
    coordinates are computed; the depth map and the pin mapper both use it.
    """

    x_min: float
    x_max: float
    y_min: float
    y_max: float
    size: int = GRID_SIZE

    def __post_init__(self):
        if self.size <= 1:
            raise InvalidInputError(f"Grid size must be > 1, got {self.size}")
        if self.x_max < self.x_min or self.y_max < self.y_min:
            raise InvalidInputError(
                f"Empty region: x [{self.x_min}, {self.x_max}], y [{self.y_min}, {self.y_max}]"
            )

    @property
    def x_step(self) -> float:
        return (self.x_max - self.x_min) / (self.size - 1)

    @property
    def y_step(self) -> float:
        return (self.y_max - self.y_min) / (self.size - 1)

    def point(self, row: int, col: int) -> Tuple[float, float]:
        return self.x_min + col * self.x_step, self.y_min + row * self.y_step

    @property
    def xs(self) -> np.ndarray:
        return np.array([self.point(0, c)[0] for c in range(self.size)])

    @property
    def ys(self) -> np.ndarray:
        return np.array([self.point(r, 0)[1] for r in range(self.size)])


class HeightKind(enum.Enum):
    MEASURED = "measured"
    UNDETERMINED = "undetermined"
    AT_BASE = "at_base"


@dataclass(frozen=True)
class Height:
    """Pin height: a measured z, undetermined, or at the base plane (z == 0)."""

    kind: HeightKind
    z: Optional[float] = None

    @classmethod
    def measured(cls, z: float) -> Height:
        return cls(HeightKind.MEASURED, float(z))

    @classmethod
    def undetermined(cls) -> Height:
        return cls(HeightKind.UNDETERMINED)

    @classmethod
    def at_base(cls) -> Height:
        return cls(HeightKind.AT_BASE, 0.0)

    @classmethod
    def of(cls, z: float) -> Height:
        if math.isnan(z):
            return cls.undetermined()
        if z == 0:
            return cls.at_base()
        return cls.measured(z)

    @property
    def is_undetermined(self) -> bool:
        return self.kind is HeightKind.UNDETERMINED

    @property
    def is_measured(self) -> bool:
        return self.kind is HeightKind.MEASURED


class TieBreak(enum.Enum):
    """Which triangle wins when several footprints contain a grid point."""

    FIRST_MATCH = "first"
    HIGHEST_Z = "highest"


class DepthMap:
    """Read-only size x size height grid, NaN where undetermined."""

    def __init__(self, values):
        values = np.array(values, dtype=np.float64)
        if values.ndim != 2 or values.shape[0] != values.shape[1]:
            raise InvalidInputError(f"Depth map must be square, got shape {values.shape}")
        values.setflags(write=False)
        self._values = values

    @classmethod
    def from_array(cls, values, sentinel: float = UNDETERMINED_SENTINEL) -> DepthMap:
        """Inverse of `to_array`: cells equal to `sentinel` become undetermined."""
        values = np.array(values, dtype=np.float64)
        values[values == sentinel] = np.nan
        return cls(values)

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def size(self) -> int:
        return self._values.shape[0]

    def height(self, row: int, col: int) -> Height:
        return Height.of(float(self._values[row, col]))

    def undetermined_count(self) -> int:
        return int(np.isnan(self._values).sum())

    def to_array(self, sentinel: float = UNDETERMINED_SENTINEL) -> np.ndarray:
        """Copy of the heights with undetermined cells set to `sentinel`."""
        out = self._values.copy()
        out[np.isnan(out)] = sentinel
        return out

    def __repr__(self):
        return f"DepthMap({self.size}x{self.size}, undetermined={self.undetermined_count()})"


def generate_depth_map(mesh, grid: Grid, tie_break: TieBreak = TieBreak.FIRST_MATCH) -> DepthMap:
    """Sample the mesh surface height at every grid point.

    Triangles are rasterized in mesh order: for each one, the grid points
    inside its XY bounding box get a barycentric containment test. With
    FIRST_MATCH a cell keeps the first height it receives; with HIGHEST_Z
    the largest height wins. Vertical triangles have no footprint and are
    skipped.
    """
    xs, ys = grid.xs, grid.ys
    zmap = np.full((grid.size, grid.size), np.nan)
    skipped = 0

    for tri in mesh:
        if not tri.has_footprint():
            skipped += 1
            continue
        v = tri.to_array()

        # XY bounding box -> grid index range
        ix0 = max(0, int(np.searchsorted(xs, v[:, 0].min())) - 1)
        ix1 = min(len(xs), int(np.searchsorted(xs, v[:, 0].max())) + 1)
        iy0 = max(0, int(np.searchsorted(ys, v[:, 1].min())) - 1)
        iy1 = min(len(ys), int(np.searchsorted(ys, v[:, 1].max())) + 1)
        if ix0 >= ix1 or iy0 >= iy1:
            continue

        px, py = np.meshgrid(xs[ix0:ix1], ys[iy0:iy1])
        weights, inside = barycentric_grid(v, px, py)
        z = weights @ v[:, 2]

        region = zmap[iy0:iy1, ix0:ix1]
        if tie_break is TieBreak.FIRST_MATCH:
            update = inside & np.isnan(region)
        else:
            update = inside & (np.isnan(region) | (z > region))
        region[update] = z[update]

    if skipped:
        logger.debug("Skipped %d triangles with no XY footprint", skipped)

    depth = DepthMap(zmap)
    logger.info("Depth map %dx%d: %d undetermined cells",
                grid.size, grid.size, depth.undetermined_count())
    return depth
