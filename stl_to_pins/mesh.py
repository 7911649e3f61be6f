"""Mesh container, loading, and the normalization passes.

The passes never mutate their input; each returns a new Mesh. They are
order-sensitive and the pipeline runs them as

    translate_to_first_quadrant -> make_planar -> rotate_to_optimize_z
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, Tuple

import numpy as np
import trimesh

from .errors import InvalidInputError, MeshLoadError
from .geometry import Vec3
from .triangle import Triangle

logger = logging.getLogger(__name__)

# Faces smaller than this (in squared model units) are dropped on load;
# they have no well-defined normal.
MIN_FACE_AREA = 1e-12


class Mesh:
    """Ordered, immutable collection of triangles."""

    __slots__ = ("_triangles",)

    def __init__(self, triangles: Iterable[Triangle] = ()):
        self._triangles: Tuple[Triangle, ...] = tuple(triangles)

    @classmethod
    def from_arrays(cls, vertices, faces) -> Mesh:
        vertices = np.asarray(vertices, dtype=np.float64)
        faces = np.asarray(faces, dtype=np.int64)
        return cls(Triangle.from_array(vertices[f]) for f in faces)

    @classmethod
    def from_trimesh(cls, tm: trimesh.Trimesh) -> Mesh:
        tris = np.asarray(tm.triangles, dtype=np.float64)
        keep = np.asarray(tm.area_faces) > MIN_FACE_AREA
        dropped = int((~keep).sum())
        if dropped:
            logger.warning("Dropped %d zero-area faces", dropped)
        return cls(Triangle.from_array(t) for t in tris[keep])

    @property
    def triangles(self) -> Tuple[Triangle, ...]:
        return self._triangles

    def __len__(self) -> int:
        return len(self._triangles)

    def __iter__(self) -> Iterator[Triangle]:
        return iter(self._triangles)

    def __getitem__(self, index):
        return self._triangles[index]

    def __eq__(self, other):
        if not isinstance(other, Mesh):
            return NotImplemented
        return self._triangles == other._triangles

    def __hash__(self):
        return hash(self._triangles)

    def __repr__(self):
        return f"Mesh({len(self)} triangles)"

    def to_array(self) -> np.ndarray:
        """Vertices as an (N, 3, 3) array."""
        if not self._triangles:
            return np.empty((0, 3, 3))
        return np.array([t.to_array() for t in self._triangles])


def load_mesh(path) -> Mesh:
    """Load a mesh file (STL/OBJ/PLY) keeping the file's face order."""
    path = Path(path)
    if not path.exists():
        raise MeshLoadError(f"Mesh file not found: {path}")

    try:
        loaded = trimesh.load(str(path), force="mesh", process=False)
    except (OSError, ValueError) as exc:
        raise MeshLoadError(f"Could not read {path}: {exc}") from exc

    if isinstance(loaded, trimesh.Scene):
        if not loaded.geometry:
            raise MeshLoadError(f"No geometry found in {path}")
        loaded = trimesh.util.concatenate(tuple(loaded.geometry.values()))
    if not isinstance(loaded, trimesh.Trimesh):
        raise MeshLoadError(f"{path} does not contain a triangular mesh")

    mesh = Mesh.from_trimesh(loaded)
    logger.info("Loaded %s: %d triangles", path, len(mesh))
    return mesh


def calculate_aabb_min(mesh) -> Vec3:
    """Minimum corner of the axis-aligned bounding box of all vertices."""
    if mesh is None or len(mesh) == 0:
        raise InvalidInputError("The mesh cannot be None or empty.")

    min_x = min_y = min_z = float("inf")
    for tri in mesh:
        for v in tri.vertices:
            min_x = min(min_x, v.x)
            min_y = min(min_y, v.y)
            min_z = min(min_z, v.z)
    return Vec3(min_x, min_y, min_z)


def translate_to_first_quadrant(mesh: Mesh) -> Mesh:
    """Move the mesh so its AABB minimum corner lands on the origin."""
    lo = calculate_aabb_min(mesh)
    delta = -lo
    logger.debug("Translating mesh by (%g, %g, %g)", delta.x, delta.y, delta.z)
    return Mesh(t.translate(delta) for t in mesh)


def make_planar(mesh: Mesh) -> Mesh:
    """Drop upward-facing triangles (normal.z > 0), keeping order.

    Assumes a closed shell: what is left is the downward-facing side,
    which is treated as a single-valued height field.
    """
    kept = Mesh(t for t in mesh if not t.normal.z > 0)
    logger.debug("make_planar kept %d of %d triangles", len(kept), len(mesh))
    return kept


def rotate_to_optimize_z(mesh: Mesh, angle: float) -> Mesh:
    """Rotate every vertex (x, y) about the z axis by `angle` radians."""
    if angle == 0:
        return Mesh(mesh)
    return Mesh(t.rotate_z(angle) for t in mesh)


def normalize(mesh: Mesh, angle: float = 0.0) -> Mesh:
    """Run the three passes in pipeline order."""
    mesh = translate_to_first_quadrant(mesh)
    mesh = make_planar(mesh)
    return rotate_to_optimize_z(mesh, angle)
