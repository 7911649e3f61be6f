"""Mesh to pin-bed G-code.

Converts a 3D mesh into a grid of pin heights for an adaptable molding
machine: normalize the mesh, sample its downward-facing shell on an NxN
grid, and emit one push/retract cycle per pin.

Usage:
    stl-to-pins part.stl -o part.gcode
    stl-to-pins part.stl --region 12 462 25 475 --grid 10
    stl-to-pins part.stl --angle 0.3 --tie-break highest -o -
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from .config import DEFAULT_PRECISION, DEFAULT_REGION, GRID_SIZE, PinBedConfig
from .depthmap import Grid, TieBreak, generate_depth_map
from .errors import PinBedError
from .gcode import gcode_lines, write_gcode
from .logging_config import setup_logging
from .mesh import load_mesh, normalize
from .pins import calculate_pin_heights

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Mesh to G-code for a pin-bed molding machine")
    ap.add_argument("mesh", type=Path, help="Input mesh file (STL/OBJ/PLY)")
    ap.add_argument("-o", "--output", default="output.gcode", help="Output path, '-' for stdout")
    ap.add_argument("--region", nargs=4, type=float, default=DEFAULT_REGION,
                    metavar=("XMIN", "XMAX", "YMIN", "YMAX"),
                    help="Pin bed extent in machine units (12 462 25 475)")
    ap.add_argument("--grid", type=int, default=GRID_SIZE, help="Pins per side (10)")
    ap.add_argument("--angle", type=float, default=0.0,
                    help="Rotation about Z in radians applied after normalization (0)")
    ap.add_argument("--tie-break", choices=("first", "highest"), default="first",
                    help="Overlapping triangles: first in file order, or highest Z")
    ap.add_argument("--precision", type=int, default=DEFAULT_PRECISION,
                    help="Decimals per coordinate (3)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    ap.add_argument("--log-file", default=None, help="Also write the log to this file")
    return ap.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> PinBedConfig:
    cfg = PinBedConfig(
        mesh_path=args.mesh,
        output=args.output,
        region=tuple(args.region),
        grid_size=args.grid,
        angle=args.angle,
        tie_break=args.tie_break,
        precision=args.precision,
        log_file=args.log_file,
    )
    cfg.validate()
    return cfg


def run(cfg: PinBedConfig) -> None:
    t0 = time.time()
    mesh = load_mesh(cfg.mesh_path)

    mesh = normalize(mesh, cfg.angle)
    logger.info("%d triangles after normalization", len(mesh))

    grid = Grid(*cfg.region, size=cfg.grid_size)
    depth = generate_depth_map(mesh, grid, TieBreak(cfg.tie_break))
    pins = calculate_pin_heights(depth, grid)

    lines = gcode_lines(pins, cfg.precision)
    write_gcode(lines, cfg.output)
    logger.info("-> %s: %d lines (%.2fs)", cfg.output, len(lines), time.time() - t0)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)
        run(config_from_args(args))
    except PinBedError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
