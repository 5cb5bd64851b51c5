# world/mesh.py
"""Mesh arena for the planet surface.

Vertices and faces are addressed by stable integer handles:
- vertices: (V, 3) float64 positions relative to the planet center
- faces: (F, 3) int64 vertex handles, outward winding
- vertex_faces: per-vertex list of face handles touching it

A face handle `f` corresponds to the start offset `3 * f` in the flat
triangle index list handed to renderers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np
from scipy import sparse

from config import EROSION_COLOR_SATURATION


@dataclass(frozen=True)
class MeshSnapshot:
    """Read-only copy of the mesh buffers for an external consumer.

    Parallel arrays: positions/normals (V, 3), colors (V, 4) RGBA in 0-1,
    indices (3F,) flat triangle list.
    """
    positions: np.ndarray
    normals: np.ndarray
    colors: np.ndarray
    indices: np.ndarray
    state: str = "idle"
    progress: float = 1.0

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3


def _frozen(array: np.ndarray, dtype) -> np.ndarray:
    copy = np.array(array, dtype=dtype, copy=True)
    copy.setflags(write=False)
    return copy


def face_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Unnormalised face normals cross(b - a, c - a), shape (F, 3)."""
    a = vertices[faces[:, 0]]
    b = vertices[faces[:, 1]]
    c = vertices[faces[:, 2]]
    return np.cross(b - a, c - a)


def _normalize_rows(vectors: np.ndarray) -> np.ndarray:
    lengths = np.linalg.norm(vectors, axis=1, keepdims=True)
    return np.divide(vectors, lengths, out=np.zeros_like(vectors), where=lengths > 0)


@dataclass
class MeshData:
    """Vertex/face arena shared by every stage of generation and simulation."""
    vertices: np.ndarray
    faces: np.ndarray
    vertex_faces: List[List[int]]
    normals: np.ndarray | None = None
    colors: np.ndarray | None = None
    # Signed radial change accumulated by erosion (-) and deposition (+)
    erosion: np.ndarray | None = None

    # Vertex -> vertex neighbour table (CSR indptr, indices), built lazily
    _neighbors: Tuple[np.ndarray, np.ndarray] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.vertices = np.asarray(self.vertices, dtype=np.float64)
        self.faces = np.asarray(self.faces, dtype=np.int64).reshape(-1, 3)
        if self.normals is None:
            self.normals = np.zeros_like(self.vertices)
        if self.erosion is None:
            self.erosion = np.zeros(len(self.vertices), dtype=np.float64)
        if self.colors is None:
            self.colors = np.ones((len(self.vertices), 4), dtype=np.float32)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    # =========================================================================
    # Topology
    # =========================================================================

    def neighbor_table(self) -> Tuple[np.ndarray, np.ndarray]:
        """CSR (indptr, indices) of vertices sharing an edge with each vertex."""
        if self._neighbors is None:
            rows = np.concatenate([self.faces[:, 0], self.faces[:, 1], self.faces[:, 2],
                                   self.faces[:, 1], self.faces[:, 2], self.faces[:, 0]])
            cols = np.concatenate([self.faces[:, 1], self.faces[:, 2], self.faces[:, 0],
                                   self.faces[:, 0], self.faces[:, 1], self.faces[:, 2]])
            data = np.ones(len(rows), dtype=np.int8)
            n = self.vertex_count
            adjacency = sparse.coo_matrix((data, (rows, cols)), shape=(n, n)).tocsr()
            adjacency.sum_duplicates()
            self._neighbors = (adjacency.indptr, adjacency.indices)
        return self._neighbors

    def neighbors(self, vertex: int) -> np.ndarray:
        """Vertex handles sharing an edge with `vertex` (excluding itself)."""
        indptr, indices = self.neighbor_table()
        return indices[indptr[vertex]:indptr[vertex + 1]]

    def face_center(self, face: int) -> np.ndarray:
        return self.vertices[self.faces[face]].mean(axis=0)

    def face_normal(self, face: int) -> np.ndarray:
        a, b, c = self.vertices[self.faces[face]]
        return np.cross(b - a, c - a)

    # =========================================================================
    # Normals
    # =========================================================================

    def set_sphere_normals(self) -> None:
        """Normals pointing straight out from the center (perfect sphere)."""
        self.normals = _normalize_rows(self.vertices.copy())

    def compute_normals(self) -> None:
        """Average the normals of all faces touching each vertex (vectorized)."""
        per_face = face_normals(self.vertices, self.faces)
        sums = np.zeros_like(self.vertices)
        for corner in range(3):
            np.add.at(sums, self.faces[:, corner], per_face)
        self.normals = _normalize_rows(sums)

    def vertex_normal(self, vertex: int) -> np.ndarray:
        """Normalised sum of the face normals around one vertex."""
        adjacent = self.faces[self.vertex_faces[vertex]]
        a = self.vertices[adjacent[:, 0]]
        b = self.vertices[adjacent[:, 1]]
        c = self.vertices[adjacent[:, 2]]
        total = np.cross(b - a, c - a).sum(axis=0)
        length = np.linalg.norm(total)
        if length == 0:
            return total
        return total / length

    def refresh_normals(self, vertex: int) -> None:
        """Recompute the normal of `vertex` and of every vertex touching it."""
        self.normals[vertex] = self.vertex_normal(vertex)
        for neighbor in self.neighbors(vertex):
            self.normals[neighbor] = self.vertex_normal(neighbor)

    # =========================================================================
    # Heights
    # =========================================================================

    def radial_heights(self) -> np.ndarray:
        """Distance of every vertex from the planet center."""
        return np.linalg.norm(self.vertices, axis=1)

    def move_radially(self, vertex: int, amount: float) -> float:
        """Raise (+) or lower (-) a vertex along its direction from the center.

        Returns the signed amount applied: 0.0 for a vertex at the center,
        which has no direction to move along.
        """
        position = self.vertices[vertex]
        length = np.linalg.norm(position)
        if length == 0:
            return 0.0
        self.vertices[vertex] = position + position / length * amount
        self.erosion[vertex] += amount
        return amount

    # =========================================================================
    # Buffers
    # =========================================================================

    def update_colors(self, saturation: float = EROSION_COLOR_SATURATION) -> None:
        """Tint vertices by erosion intensity: red where eroded, blue where filled."""
        intensity = np.clip(np.abs(self.erosion) / saturation, 0.0, 1.0).astype(np.float32)
        colors = np.ones((self.vertex_count, 4), dtype=np.float32)
        eroded = self.erosion < 0
        deposited = self.erosion > 0
        colors[eroded, 1] -= intensity[eroded]
        colors[eroded, 2] -= intensity[eroded]
        colors[deposited, 0] -= intensity[deposited]
        colors[deposited, 1] -= intensity[deposited]
        self.colors = colors

    def flat_indices(self) -> np.ndarray:
        """Flat triangle index list (multiples of 3) for renderers."""
        return self.faces.astype(np.uint32).ravel()

    def snapshot(self, state: str = "idle", progress: float = 1.0) -> MeshSnapshot:
        """Copy the buffers so the consumer never sees the next tick's mutation."""
        self.update_colors()
        return MeshSnapshot(
            positions=_frozen(self.vertices, np.float32),
            normals=_frozen(self.normals, np.float32),
            colors=_frozen(self.colors, np.float32),
            indices=_frozen(self.flat_indices(), np.uint32),
            state=state,
            progress=progress,
        )
