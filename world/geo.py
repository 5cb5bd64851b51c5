# world/geo.py
"""Geographic coordinates on the planet surface and the bucket index over them.

Coordinates are (longitude, latitude) in degrees:
- longitude: signed angle from the forward axis (0, 0, 1) to the point's
  projection onto the equatorial plane, around the up axis (0, 1, 0)
- latitude: signed angle from that equatorial projection up to the point

The poles have no longitude; they map to (0, +/-90).
"""
from __future__ import annotations

import math
from typing import List, Sequence, Tuple

import numpy as np

from config import GEO_LONGITUDE_CHUNKS, GEO_LATITUDE_CHUNKS

GeoCoord = Tuple[float, float]
Bucket = Tuple[int, int]


# =============================================================================
# Conversions
# =============================================================================

def to_geo(position: Sequence[float]) -> GeoCoord:
    """Geographic coordinate of a single 3D position."""
    x, y, z = float(position[0]), float(position[1]), float(position[2])
    equatorial = math.hypot(x, z)
    if equatorial == 0.0:
        # Poles: longitude is undefined
        if y == 0.0:
            return 0.0, 0.0
        return 0.0, math.copysign(90.0, y)
    return math.degrees(math.atan2(x, z)), math.degrees(math.atan2(y, equatorial))


def to_geo_array(positions: np.ndarray) -> np.ndarray:
    """Vectorized to_geo for (N, 3) positions, returns (N, 2) [lon, lat]."""
    positions = np.asarray(positions, dtype=np.float64)
    x, y, z = positions[:, 0], positions[:, 1], positions[:, 2]
    equatorial = np.hypot(x, z)
    lon = np.degrees(np.arctan2(x, z))
    lat = np.degrees(np.arctan2(y, equatorial))
    lon[equatorial == 0.0] = 0.0
    return np.column_stack([lon, lat])


def geo_to_direction(geo: Sequence[float]) -> np.ndarray:
    """Unit vector pointing at a geographic coordinate (inverse of to_geo)."""
    lon = math.radians(geo[0])
    lat = math.radians(geo[1])
    cos_lat = math.cos(lat)
    return np.array([math.sin(lon) * cos_lat, math.sin(lat), math.cos(lon) * cos_lat])


def geo_to_position(geo: Sequence[float], altitude: float) -> np.ndarray:
    """3D point at `altitude` from the center above a geographic coordinate."""
    return geo_to_direction(geo) * altitude


# =============================================================================
# Wraparound
# =============================================================================

def wrap_longitude(lon: float) -> float:
    """Bring a longitude back into [-180, 180] (179 + 5 -> -176)."""
    if lon > 180.0 or lon < -180.0:
        lon = (lon + 180.0) % 360.0 - 180.0
    return lon


def wrap_geo(geo: Sequence[float]) -> GeoCoord:
    """Wrap a coordinate that has drifted past the seam or over a pole.

    Longitude wraps to the other side of the map. Latitude past a pole is
    reflected back (lat -> +/-180 - lat) and the point moves to the opposite
    meridian, which is where it really is on the sphere.
    """
    lon, lat = float(geo[0]), float(geo[1])
    if lat > 90.0:
        lat = 180.0 - lat
        lon += 180.0
    elif lat < -90.0:
        lat = -180.0 - lat
        lon += 180.0
    return wrap_longitude(lon), lat


def crossed_pole(lat: float) -> bool:
    return lat > 90.0 or lat < -90.0


def longitude_toward(lon: float, reference: float) -> float:
    """Shift `lon` by 360 if it is more than 180 degrees from `reference`.

    Puts both points on the same side of the +/-180 seam so differences
    between them are short.
    """
    if lon - reference > 180.0:
        return lon - 360.0
    if reference - lon > 180.0:
        return lon + 360.0
    return lon


# =============================================================================
# Bucket index
# =============================================================================

class GeoIndex:
    """Longitude x latitude grid of buckets holding vertex handles.

    Every vertex sits in exactly one bucket. Rebuild whenever vertex
    coordinates shift (after noise, before simulation).
    """

    def __init__(self, lon_chunks: int = GEO_LONGITUDE_CHUNKS, lat_chunks: int = GEO_LATITUDE_CHUNKS):
        if lon_chunks < 1 or lat_chunks < 1:
            raise ValueError(f"geo index needs at least one chunk per axis, got {lon_chunks}x{lat_chunks}")
        self.lon_chunks = lon_chunks
        self.lat_chunks = lat_chunks
        self.buckets: List[List[List[int]]] = []
        self.vertex_count = 0
        self.clear()

    def clear(self) -> None:
        self.buckets = [[[] for _ in range(self.lat_chunks)] for _ in range(self.lon_chunks)]
        self.vertex_count = 0

    def bucket_of(self, geo: Sequence[float]) -> Bucket:
        """Bucket holding a coordinate; the max bound goes in the last bucket."""
        x = int(math.floor((geo[0] + 180.0) / 360.0 * self.lon_chunks))
        y = int(math.floor((geo[1] + 90.0) / 180.0 * self.lat_chunks))
        x = min(max(x, 0), self.lon_chunks - 1)
        y = min(max(y, 0), self.lat_chunks - 1)
        return x, y

    def rebuild(self, vertices: np.ndarray) -> None:
        """Re-bucket every vertex from scratch (vectorized bucket math)."""
        self.clear()
        if len(vertices) == 0:
            return
        geo = to_geo_array(vertices)
        xs = np.floor((geo[:, 0] + 180.0) / 360.0 * self.lon_chunks).astype(np.int64)
        ys = np.floor((geo[:, 1] + 90.0) / 180.0 * self.lat_chunks).astype(np.int64)
        np.clip(xs, 0, self.lon_chunks - 1, out=xs)
        np.clip(ys, 0, self.lat_chunks - 1, out=ys)
        for vertex, (x, y) in enumerate(zip(xs.tolist(), ys.tolist())):
            self.buckets[x][y].append(vertex)
        self.vertex_count = len(vertices)

    def vertices_in(self, bucket: Bucket) -> List[int]:
        return self.buckets[bucket[0]][bucket[1]]

    def ring(self, center: Bucket, distance: int) -> List[Bucket]:
        """Buckets at Chebyshev distance `distance` from center.

        Longitude wraps around the seam, latitude is clamped at the poles;
        duplicates produced by the wrap are removed.
        """
        cx, cy = center
        if distance == 0:
            return [center]
        seen = set()
        ring: List[Bucket] = []
        for dx in range(-distance, distance + 1):
            for dy in range(-distance, distance + 1):
                if max(abs(dx), abs(dy)) != distance:
                    continue
                y = cy + dy
                if not 0 <= y < self.lat_chunks:
                    continue
                bucket = ((cx + dx) % self.lon_chunks, y)
                if bucket not in seen:
                    seen.add(bucket)
                    ring.append(bucket)
        return ring

    def spiral(self, center: Bucket):
        """Yield every bucket once, nearest rings first."""
        visited = set()
        total = self.lon_chunks * self.lat_chunks
        max_distance = max(self.lon_chunks, self.lat_chunks)
        for distance in range(max_distance + 1):
            for bucket in self.ring(center, distance):
                if bucket in visited:
                    continue
                visited.add(bucket)
                yield bucket
            if len(visited) == total:
                return
