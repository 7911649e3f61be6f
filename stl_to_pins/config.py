"""Machine defaults and the run configuration."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .errors import InvalidInputError

# Pins per side of the bed
GRID_SIZE = 10
# Pin bed footprint in machine units: x_min, x_max, y_min, y_max
DEFAULT_REGION = (12.0, 462.0, 25.0, 475.0)
# Decimals written for every coordinate in the command stream
DEFAULT_PRECISION = 3
# Legacy encoding of an undetermined cell when a depth map is exported
UNDETERMINED_SENTINEL = -1.0


@dataclass
class PinBedConfig:
    """Everything one run of the pipeline needs besides the mesh itself."""

    mesh_path: Path
    output: str = "output.gcode"
    region: Tuple[float, float, float, float] = DEFAULT_REGION
    grid_size: int = GRID_SIZE
    angle: float = 0.0
    tie_break: str = "first"
    precision: int = DEFAULT_PRECISION
    log_file: Optional[str] = None

    def validate(self) -> None:
        x_min, x_max, y_min, y_max = self.region
        if x_max < x_min or y_max < y_min:
            raise InvalidInputError("--region must satisfy XMIN <= XMAX and YMIN <= YMAX")
        if self.grid_size <= 1:
            raise InvalidInputError("--grid must be > 1")
        if not math.isfinite(self.angle):
            raise InvalidInputError("--angle must be finite")
        if self.tie_break not in ("first", "highest"):
            raise InvalidInputError("--tie-break must be 'first' or 'highest'")
        if not 0 <= self.precision <= 12:
            raise InvalidInputError("--precision must be in [0, 12]")
