"""Map a depth map onto physical pin positions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .depthmap import DepthMap, Grid, Height
from .errors import InvalidInputError


@dataclass(frozen=True)
class PinRecord:
    x: float
    y: float
    height: Height


def calculate_pin_heights(depth_map: DepthMap, grid: Grid) -> List[PinRecord]:
    """One PinRecord per grid cell, row-major, at the grid's (x, y)."""
    if depth_map.size != grid.size:
        raise InvalidInputError(
            f"Depth map is {depth_map.size}x{depth_map.size} but grid is {grid.size}x{grid.size}"
        )

    pins = []
    for row in range(grid.size):
        for col in range(grid.size):
            x, y = grid.point(row, col)
            pins.append(PinRecord(x, y, depth_map.height(row, col)))
    return pins
