# world/locator.py
"""Point location: which mesh face lies under a geographic coordinate.

A point is inside a face when the angles it subtends between consecutive
face corners add up to a full turn. The corners are flattened into a plane
around the query first:
- geographic plane (lon, lat) for most of the globe, with the +/-180 seam
  corrected per corner and pole corners taking the query's longitude
- the plane tangent to the sphere at the query (gnomonic projection) for
  queries near the poles, where lon/lat space is singular

The projection is picked per query so all faces around the query are
flattened consistently and tile the plane without gaps.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, Set

import numpy as np

from config import FACE_ANGLE_SUM_THRESHOLD, GEO_POLAR_LATITUDE
from world.geo import GeoCoord, GeoIndex, geo_to_direction, longitude_toward, to_geo_array
from world.mesh import MeshData

logger = logging.getLogger(__name__)

# Coordinates closer than this (degrees) are the same point
_GEO_EPSILON = 1e-9


class FaceLocationError(RuntimeError):
    """No face contains the point even after every bucket was searched.

    Indicates floating point inconsistency or incomplete adjacency data;
    callers must not fall back to an arbitrary face.
    """

    def __init__(self, geo: Sequence[float], buckets_checked: int):
        self.geo = (float(geo[0]), float(geo[1]))
        self.buckets_checked = buckets_checked
        super().__init__(
            f"checked all {buckets_checked} buckets without finding a face containing "
            f"({self.geo[0]:.4f} E, {self.geo[1]:.4f} N): angle sums hit a float error "
            f"or vertex adjacency is missing data"
        )


class FaceLocator:
    """Finds the face under a geographic coordinate using a GeoIndex."""

    def __init__(
        self,
        mesh: MeshData,
        index: GeoIndex,
        polar_latitude: float = GEO_POLAR_LATITUDE,
        angle_threshold: float = FACE_ANGLE_SUM_THRESHOLD,
    ):
        self.mesh = mesh
        self.index = index
        self.polar_latitude = polar_latitude
        self.angle_threshold = angle_threshold
        self.vertex_geo = np.zeros((0, 2))
        self.refresh()

    def refresh(self) -> None:
        """Recompute cached vertex coordinates after vertices moved sideways."""
        self.vertex_geo = to_geo_array(self.mesh.vertices) if self.mesh.vertex_count else np.zeros((0, 2))

    # =========================================================================
    # Containment test
    # =========================================================================

    def _geographic_corners(self, corners: np.ndarray, geo: Sequence[float]) -> np.ndarray:
        points = self.vertex_geo[corners].copy()
        for point in points:
            if abs(point[1]) >= 90.0 - _GEO_EPSILON:
                point[0] = geo[0]
            else:
                point[0] = longitude_toward(point[0], geo[0])
        return points - np.array([geo[0], geo[1]])

    def _tangent_corners(self, corners: np.ndarray, geo: Sequence[float]) -> Optional[np.ndarray]:
        lon = math.radians(geo[0])
        lat = math.radians(geo[1])
        direction = geo_to_direction(geo)
        east = np.array([math.cos(lon), 0.0, -math.sin(lon)])
        north = np.array([-math.sin(lon) * math.sin(lat), math.cos(lat), -math.cos(lon) * math.sin(lat)])
        positions = self.mesh.vertices[corners]
        depth = positions @ direction
        if np.any(depth <= 0.0):
            # Corner on the far hemisphere: face cannot contain the query
            return None
        projected = positions / depth[:, None]
        return np.column_stack([projected @ east, projected @ north])

    def angle_sum(self, face: int, geo: Sequence[float]) -> float:
        """Degrees subtended at `geo` by the three edges of `face`."""
        corners = self.mesh.faces[face]
        if abs(geo[1]) >= self.polar_latitude:
            vectors = self._tangent_corners(corners, geo)
            if vectors is None:
                return 0.0
        else:
            vectors = self._geographic_corners(corners, geo)

        lengths = np.linalg.norm(vectors, axis=1)
        if np.any(lengths < _GEO_EPSILON):
            # Query sits on a corner of the face
            return 360.0
        units = vectors / lengths[:, None]
        total = 0.0
        previous = units[2]
        for unit in units:
            total += math.degrees(math.acos(max(-1.0, min(1.0, float(previous @ unit)))))
            previous = unit
        return total

    def contains(self, face: int, geo: Sequence[float]) -> bool:
        return self.angle_sum(face, geo) > self.angle_threshold

    # =========================================================================
    # Search
    # =========================================================================

    def _on_vertex(self, vertex: int, geo: Sequence[float]) -> bool:
        vlon, vlat = self.vertex_geo[vertex]
        if abs(vlat - geo[1]) >= _GEO_EPSILON:
            return False
        return abs(abs(vlat) - 90.0) < _GEO_EPSILON or abs(vlon - geo[0]) < _GEO_EPSILON

    def face_containing(
        self,
        geo: Sequence[float],
        vertex: int,
        skip: Optional[Set[int]] = None,
    ) -> Optional[int]:
        """Face around `vertex` containing `geo`, or None.

        Args:
            geo: Query coordinate.
            vertex: Vertex whose faces are tested.
            skip: Faces already rejected during this search; updated in place.
        """
        faces = self.mesh.vertex_faces[vertex]
        if not faces:
            return None
        if self._on_vertex(vertex, geo):
            return faces[0]
        for face in faces:
            if skip is not None:
                if face in skip:
                    continue
                skip.add(face)
            if self.contains(face, geo):
                return face
        return None

    def locate(self, geo: Sequence[float], seed_vertex: Optional[int] = None) -> int:
        """Face containing `geo`.

        Tries the faces around `seed_vertex` first, then spirals outward
        through the index buckets.

        Raises:
            FaceLocationError: If every bucket was checked without a hit.
        """
        rejected: Set[int] = set()
        if seed_vertex is not None:
            face = self.face_containing(geo, seed_vertex, rejected)
            if face is not None:
                return face

        buckets_checked = 0
        for bucket in self.index.spiral(self.index.bucket_of(geo)):
            buckets_checked += 1
            for vertex in self.index.vertices_in(bucket):
                face = self.face_containing(geo, vertex, rejected)
                if face is not None:
                    return face

        logger.debug("Face search exhausted %d buckets for %s", buckets_checked, tuple(geo))
        raise FaceLocationError(geo, buckets_checked)

    # =========================================================================
    # Geometry on a located face
    # =========================================================================

    def world_position(self, geo: Sequence[float], face: int) -> np.ndarray:
        """Point on the plane of `face` directly below `geo`.

        Exact inverse of to_geo for points on the face: intersects the ray
        from the center towards `geo` with the face's plane.
        """
        direction = geo_to_direction(geo)
        a, b, c = self.mesh.vertices[self.mesh.faces[face]]
        normal = np.cross(b - a, c - a)
        denom = float(normal @ direction)
        if abs(denom) > 1e-12:
            distance = float(normal @ a) / denom
            if distance > 0.0:
                return direction * distance
        return self._blended_position(geo, face)

    def _blended_position(self, geo: Sequence[float], face: int) -> np.ndarray:
        """Inverse-distance blend of the corners, for rays parallel to the face."""
        corners = self.mesh.faces[face]
        offsets = self._geographic_corners(corners, geo)
        distances = np.linalg.norm(offsets, axis=1)
        total = distances.sum()
        positions = self.mesh.vertices[corners]
        if total == 0.0:
            return positions[0].copy()
        weights = 1.0 - distances / total
        return (positions * weights[:, None]).sum(axis=0) / weights.sum()

    def nearest_vertex(self, position: np.ndarray, face: int) -> int:
        """Corner of `face` closest to `position`."""
        corners = self.mesh.faces[face]
        distances = np.linalg.norm(self.mesh.vertices[corners] - position, axis=1)
        return int(corners[int(np.argmin(distances))])

    def vertex_coord(self, vertex: int) -> GeoCoord:
        lon, lat = self.vertex_geo[vertex]
        return float(lon), float(lat)
