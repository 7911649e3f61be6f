"""Turn a triangle mesh into pin heights and G-code for a pin-bed machine."""

from .depthmap import DepthMap, Grid, Height, HeightKind, TieBreak, generate_depth_map
from .errors import (
    DegenerateGeometryError,
    DegeneratePlaneError,
    DegenerateTriangleError,
    DegenerateVectorError,
    FallbackUndefinedError,
    InvalidInputError,
    IOFailureError,
    MeshLoadError,
    PinBedError,
)
from .gcode import fallback_height, gcode_lines, write_gcode
from .geometry import Plane, Vec2, Vec3
from .mesh import (
    Mesh,
    calculate_aabb_min,
    load_mesh,
    make_planar,
    normalize,
    rotate_to_optimize_z,
    translate_to_first_quadrant,
)
from .pins import PinRecord, calculate_pin_heights
from .triangle import Triangle

__version__ = "0.1.0"
