# config.py
"""
Centralized planet generation configuration.

This file contains high-level, cross-cutting constants.
Domain-specific constants are in:
- simulation/config.py (erosion and sediment tuning)
- render/config.py (viewer colors, window dimensions)
"""
from __future__ import annotations

from typing import Tuple

Vec3 = Tuple[float, float, float]
Vec4 = Tuple[float, float, float, float]

# =============================================================================
# PLANET SHAPE
# =============================================================================
# All distances are in "planet units"; only ratios matter.
PLANET_RADIUS = 10.0        # Radius of the undisplaced sphere
OCEAN_LEVEL = 14.5          # Vertices closer to the center than this are ocean
ALTITUDE = 5.0              # Displacement applied at a noise value of 1.0
ICOSPHERE_SPLITS = 16       # Each icosahedron face becomes SPLITS^2 triangles

# Vertex dedup: positions are rounded to this many decimal places
VERTEX_KEY_DECIMALS = 3

# =============================================================================
# PERLIN NOISE
# =============================================================================
NOISE_OFFSET: Vec3 = (0.0, 0.0, 0.0)
NOISE_CELL_SIZES: Vec4 = (8.0, 4.0, 2.0, 1.0)
NOISE_WEIGHTS: Vec4 = (1.0, 0.25, 0.5, 0.1)

# =============================================================================
# GEOGRAPHIC INDEX
# =============================================================================
# Longitude/latitude buckets used to seed point-location searches
GEO_LONGITUDE_CHUNKS = 25
GEO_LATITUDE_CHUNKS = 25

# Above this |latitude| the face containment test runs in the tangent plane
# of the query point instead of raw longitude/latitude space
GEO_POLAR_LATITUDE = 55.0

# Angle sum (degrees) above which a point counts as inside a triangle
FACE_ANGLE_SUM_THRESHOLD = 355.0

# =============================================================================
# SIMULATION SCHEDULING
# =============================================================================
SIMULATE_WEATHER = True
TOTAL_SIMULATION_ITERATIONS = 10000
SIMULATION_BATCH_SIZE = 100        # Iterations per tick
PROGRESS_LOG_INTERVAL = 100        # Iterations between progress log lines

# Max event messages retained by the generator
MESSAGE_LOG_SIZE = 100

# Erosion colour ramp: accumulated erosion that maps to full intensity
EROSION_COLOR_SATURATION = 0.05

# =============================================================================
# CLOUDS & WIND
# =============================================================================
CLOUD_SPAWN_CHANCE = 0.01           # Chance per iteration to spawn a cloud over ocean
CLOUD_SIZE_RANGE: Tuple[float, float] = (1.0, 4.0)          # Radius in degrees
CLOUD_LIFESPAN_RANGE: Tuple[float, float] = (50.0, 500.0)   # Life in iterations
CLOUD_ALTITUDE_PADDING = 2.0        # Extra height above the displaced surface

WIND_SPEED = 0.05                   # Acceleration applied per advection step
MAX_CLOUD_SPEED = 1.0               # Degrees per step
WIND_VARIATION = 0.2                # Max random drift per axis per step

# Prevailing wind by latitude band: (lower bound, (d_lon, d_lat)).
# Bands are checked top-down, the first band whose bound the latitude
# exceeds wins; the final band catches everything south of -60.
WIND_BANDS: Tuple[Tuple[float, Tuple[float, float]], ...] = (
    (60.0, (1.5, -2.0)),     # polar easterlies, north
    (30.0, (-1.0, 1.0)),     # westerlies, north
    (0.0, (1.0, -1.0)),      # trade winds, north
    (-30.0, (1.0, 1.0)),     # trade winds, south
    (-60.0, (-1.0, -1.0)),   # westerlies, south
    (-90.0, (1.5, 2.0)),     # polar easterlies, south
)
