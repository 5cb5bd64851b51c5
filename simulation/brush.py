# simulation/brush.py
"""
Erosion brush precomputation and cache.

A brush spreads one erosion event over a topological neighbourhood so the
terrain is worn smoothly instead of at a single point. For every vertex it
holds the vertices within `radius - 1` hops of the mesh and a weight per
vertex that falls off linearly with hop distance.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from world.mesh import MeshData

Brush = Tuple[np.ndarray, np.ndarray]   # (vertex handles, weights summing to 1)


def build_vertex_brush(
    vertex: int,
    radius: int,
    vertex_faces: Sequence[Sequence[int]],
    faces: np.ndarray,
) -> Brush:
    """Breadth-first brush for one vertex.

    Hop 0 is the vertex itself with weight 1; vertices first reached at hop
    h get weight 1 - h / radius. Weights are normalised to sum to 1.
    """
    indices: List[int] = [vertex]
    weights: List[float] = [1.0]
    visited = {vertex}
    frontier = [vertex]

    for hop in range(1, radius):
        weight = 1.0 - hop / radius
        next_frontier: List[int] = []
        for current in frontier:
            for face in vertex_faces[current]:
                for neighbor in faces[face]:
                    neighbor = int(neighbor)
                    if neighbor in visited:
                        continue
                    visited.add(neighbor)
                    indices.append(neighbor)
                    weights.append(weight)
                    next_frontier.append(neighbor)
        if not next_frontier:
            break
        frontier = next_frontier

    weight_array = np.array(weights, dtype=np.float64)
    weight_array /= weight_array.sum()
    return np.array(indices, dtype=np.int64), weight_array


def build_erosion_brush(radius: int, mesh: MeshData) -> List[Brush]:
    """Brushes for every vertex of the mesh.

    Raises:
        ValueError: If radius is below 1.
    """
    if radius < 1:
        raise ValueError(f"erosion radius must be >= 1, got {radius}")
    return [
        build_vertex_brush(vertex, radius, mesh.vertex_faces, mesh.faces)
        for vertex in range(mesh.vertex_count)
    ]


class ErosionBrushCache:
    """Cache of per-vertex brushes keyed by (radius, vertex count).

    Brushes depend only on topology, which changes only on regeneration, so
    the cache rebuilds when the radius or the vertex count differs from the
    last build and is otherwise reused across simulation runs.
    """

    def __init__(self):
        self.brushes: List[Brush] = []
        self.radius: int | None = None
        self.vertex_count: int | None = None

        # === Statistics (for debugging/tuning) ===
        self.rebuild_count: int = 0

    def needs_rebuild(self, radius: int, mesh: MeshData) -> bool:
        return self.radius != radius or self.vertex_count != mesh.vertex_count

    def get(self, radius: int, mesh: MeshData) -> List[Brush]:
        """Brushes for `mesh`, rebuilt first if stale."""
        if self.needs_rebuild(radius, mesh):
            self.brushes = build_erosion_brush(radius, mesh)
            self.radius = radius
            self.vertex_count = mesh.vertex_count
            self.rebuild_count += 1
        return self.brushes

    def invalidate(self) -> None:
        """Force a rebuild on next use (e.g. after regenerating topology)."""
        self.radius = None
        self.vertex_count = None

    def get_stats(self) -> dict:
        return {
            'radius': self.radius,
            'vertex_count': self.vertex_count,
            'rebuild_count': self.rebuild_count,
            'memory_estimate_mb': sum(i.nbytes + w.nbytes for i, w in self.brushes) / 1024 / 1024,
        }
