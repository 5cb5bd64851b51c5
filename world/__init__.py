"""
World module: planet surface geometry and weather.

Provides:
- Layered Perlin noise (from noise.py)
- Mesh arena and snapshots (from mesh.py)
- Icosphere tessellation (from icosphere.py)
- Geographic coordinates and bucket index (from geo.py)
- Face point location (from locator.py)
- Clouds and wind (from weather.py)
"""

# Noise
from world.noise import perlin_noise, layered_noise, displace_vertices

# Mesh
from world.mesh import MeshData, MeshSnapshot, face_normals
from world.icosphere import IcosphereBuilder, expected_face_count

# Geographic index and point location
from world.geo import (
    GeoIndex,
    to_geo,
    to_geo_array,
    geo_to_direction,
    geo_to_position,
    wrap_geo,
)
from world.locator import FaceLocator, FaceLocationError

# Weather system
from world.weather import Cloud, WeatherField, wind_for_latitude

__all__ = [
    # Noise
    "perlin_noise",
    "layered_noise",
    "displace_vertices",
    # Mesh
    "MeshData",
    "MeshSnapshot",
    "face_normals",
    "IcosphereBuilder",
    "expected_face_count",
    # Geo
    "GeoIndex",
    "to_geo",
    "to_geo_array",
    "geo_to_direction",
    "geo_to_position",
    "wrap_geo",
    "FaceLocator",
    "FaceLocationError",
    # Weather
    "Cloud",
    "WeatherField",
    "wind_for_latitude",
]
