# world/icosphere.py
"""Icosahedron tessellation of the planet sphere.

The 12 icosahedron corners are the corners of three golden-ratio rectangles
lying in the xy, yz and xz planes. Each of the 20 faces is split into
splits^2 triangles row by row; every new point is deduplicated against the
existing vertices through a dict keyed by its rounded coordinates, so
neighbouring faces share edge vertices and the mesh is watertight.

Subdivision can run one source face at a time (`subdivide_face`) so a
tick-driven host stays responsive, or in one go (`build`).
"""
from __future__ import annotations

import math
from typing import Dict, List, Tuple

from config import VERTEX_KEY_DECIMALS
from world.mesh import MeshData

Vec3 = Tuple[float, float, float]
Face = Tuple[int, int, int]

GOLDEN_RATIO = (1.0 + math.sqrt(5.0)) / 2.0

_T = GOLDEN_RATIO
ICOSAHEDRON_CORNERS: Tuple[Vec3, ...] = (
    # xy plane
    (-1.0, _T, 0.0), (1.0, _T, 0.0), (-1.0, -_T, 0.0), (1.0, -_T, 0.0),
    # yz plane
    (0.0, -1.0, _T), (0.0, 1.0, _T), (0.0, -1.0, -_T), (0.0, 1.0, -_T),
    # xz plane
    (_T, 0.0, -1.0), (_T, 0.0, 1.0), (-_T, 0.0, -1.0), (-_T, 0.0, 1.0),
)

# Wound so cross(b - a, c - a) points away from the center
ICOSAHEDRON_FACES: Tuple[Face, ...] = (
    # around corner 0
    (0, 5, 1), (0, 11, 5), (0, 10, 11), (0, 7, 10), (0, 1, 7),
    # adjacent to the faces around corner 0
    (11, 4, 5), (10, 2, 11), (7, 6, 10), (1, 8, 7), (5, 9, 1),
    # around corner 3
    (3, 4, 2), (3, 9, 4), (3, 8, 9), (3, 6, 8), (3, 2, 6),
    # adjacent to the faces around corner 3
    (4, 9, 5), (9, 8, 1), (8, 6, 7), (6, 2, 10), (2, 4, 11),
)


def _normalized(v: Vec3) -> Vec3:
    length = math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
    return (v[0] / length, v[1] / length, v[2] / length)


def _lerp(a: Vec3, b: Vec3, t: float) -> Vec3:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t, a[2] + (b[2] - a[2]) * t)


def expected_face_count(splits: int) -> int:
    """Faces produced for a split count (splits <= 1 keeps the icosahedron)."""
    return 20 * max(splits, 1) ** 2


class IcosphereBuilder:
    """Builds a deduplicated, outward-wound icosphere.

    Holds the in-progress vertex list, face list and per-vertex face lists
    across staged calls; `finish()` turns them into a MeshData arena.
    """

    def __init__(self, key_decimals: int = VERTEX_KEY_DECIMALS):
        self.key_scale = 10 ** key_decimals
        self.positions: List[Vec3] = []
        self.faces: List[Face] = []
        self.vertex_faces: List[List[int]] = []
        self.source_faces: List[Face] = []
        self._vertex_keys: Dict[Tuple[int, int, int], int] = {}

    # =========================================================================
    # Arena mutation
    # =========================================================================

    def vertex_key(self, position: Vec3) -> Tuple[int, int, int]:
        """Structural identity: coordinates rounded to the key precision."""
        scale = self.key_scale
        return (round(position[0] * scale), round(position[1] * scale), round(position[2] * scale))

    def add_vertex(self, position: Vec3) -> int:
        """Return the handle of an equal existing vertex, or append a new one."""
        key = self.vertex_key(position)
        existing = self._vertex_keys.get(key)
        if existing is not None:
            return existing
        self.positions.append(position)
        handle = len(self.positions) - 1
        self._vertex_keys[key] = handle
        self.vertex_faces.append([])
        return handle

    def add_face(self, a: int, b: int, c: int) -> int:
        """Append a face and register it with all three of its vertices."""
        handle = len(self.faces)
        self.faces.append((a, b, c))
        self.vertex_faces[a].append(handle)
        self.vertex_faces[b].append(handle)
        self.vertex_faces[c].append(handle)
        return handle

    # =========================================================================
    # Stages
    # =========================================================================

    def build_icosahedron(self) -> None:
        """Reset the arena to the unit icosahedron."""
        self.positions.clear()
        self.faces.clear()
        self.vertex_faces.clear()
        self.source_faces.clear()
        self._vertex_keys.clear()
        for corner in ICOSAHEDRON_CORNERS:
            self.add_vertex(_normalized(corner))
        for face in ICOSAHEDRON_FACES:
            self.add_face(*face)

    def begin_subdivision(self) -> int:
        """Move the live faces aside as subdivision input.

        Returns:
            Number of source faces to subdivide.
        """
        self.source_faces = list(self.faces)
        self.faces.clear()
        for faces in self.vertex_faces:
            faces.clear()
        return len(self.source_faces)

    def subdivide_face(self, index: int, splits: int) -> None:
        """Split source face `index` into splits^2 triangles.

        Row k (1..splits) runs from lerp(a, c, k/s) to lerp(a, b, k/s) with
        k - 1 interior points; each row is stitched to the row above it.
        """
        a, b, c = self.source_faces[index]
        pa, pb, pc = self.positions[a], self.positions[b], self.positions[c]

        # Vertex handles of every row, flattened; row k starts at k*(k+1)/2
        row_vertices: List[int] = [a]
        for split in range(1, splits + 1):
            row_start = len(row_vertices)
            fraction = split / splits
            begin = self.add_vertex(_lerp(pa, pc, fraction))
            end = self.add_vertex(_lerp(pa, pb, fraction))
            row_vertices.append(begin)
            begin_pos, end_pos = self.positions[begin], self.positions[end]
            for offset in range(1, split):
                row_vertices.append(self.add_vertex(_lerp(begin_pos, end_pos, offset / split)))
            row_vertices.append(end)

            above = row_start - split
            self.add_face(row_vertices[row_start], row_vertices[above], row_vertices[row_start + 1])
            for offset in range(1, split):
                here = row_vertices[row_start + offset]
                self.add_face(here, row_vertices[above + offset - 1], row_vertices[above + offset])
                self.add_face(here, row_vertices[above + offset], row_vertices[row_start + offset + 1])

    def finish(self, radius: float = 1.0) -> MeshData:
        """Project every vertex onto the sphere of `radius` and freeze the arena."""
        vertices = [_normalized(p) for p in self.positions]
        mesh = MeshData(
            vertices=vertices,
            faces=self.faces if self.faces else [],
            vertex_faces=[list(faces) for faces in self.vertex_faces],
        )
        mesh.set_sphere_normals()
        mesh.vertices *= radius
        return mesh

    def build(self, splits: int, radius: float = 1.0) -> MeshData:
        """Build the whole icosphere synchronously.

        Raises:
            ValueError: If splits is negative.
        """
        if splits < 0:
            raise ValueError(f"icosphere splits must be >= 0, got {splits}")
        self.build_icosahedron()
        if splits > 1:
            for index in range(self.begin_subdivision()):
                self.subdivide_face(index, splits)
        return self.finish(radius)
