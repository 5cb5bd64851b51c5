# planet_state/settings.py
"""Runtime settings for a planet generation and erosion run."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from config import (
    ALTITUDE,
    CLOUD_ALTITUDE_PADDING,
    CLOUD_LIFESPAN_RANGE,
    CLOUD_SIZE_RANGE,
    CLOUD_SPAWN_CHANCE,
    GEO_LATITUDE_CHUNKS,
    GEO_LONGITUDE_CHUNKS,
    ICOSPHERE_SPLITS,
    MAX_CLOUD_SPEED,
    NOISE_CELL_SIZES,
    NOISE_OFFSET,
    NOISE_WEIGHTS,
    OCEAN_LEVEL,
    PLANET_RADIUS,
    SIMULATE_WEATHER,
    SIMULATION_BATCH_SIZE,
    TOTAL_SIMULATION_ITERATIONS,
    WIND_SPEED,
    WIND_VARIATION,
)
from simulation.config import (
    DEPOSIT_SPEED,
    ERODE_SPEED,
    EROSION_RADIUS,
    EVAPORATE_SPEED,
    GRAVITY,
    INERTIA,
    INITIAL_SPEED,
    INITIAL_WATER_VOLUME,
    MAX_DROPLET_LIFETIME,
    MIN_SEDIMENT_CAPACITY,
    SEDIMENT_CAPACITY_FACTOR,
    WEATHERLESS_DROPLETS,
)


@dataclass
class NoiseSettings:
    """Four-octave displacement noise."""
    cell_sizes: Tuple[float, ...] = NOISE_CELL_SIZES
    weights: Tuple[float, ...] = NOISE_WEIGHTS
    offset: Tuple[float, float, float] = NOISE_OFFSET


@dataclass
class ErosionSettings:
    """Droplet physics and run length."""
    radius: int = EROSION_RADIUS
    inertia: float = INERTIA
    sediment_capacity_factor: float = SEDIMENT_CAPACITY_FACTOR
    min_sediment_capacity: float = MIN_SEDIMENT_CAPACITY
    erode_speed: float = ERODE_SPEED
    deposit_speed: float = DEPOSIT_SPEED
    evaporate_speed: float = EVAPORATE_SPEED
    gravity: float = GRAVITY
    max_lifetime: int = MAX_DROPLET_LIFETIME
    initial_water: float = INITIAL_WATER_VOLUME
    initial_speed: float = INITIAL_SPEED
    weatherless_droplets: int = WEATHERLESS_DROPLETS
    total_iterations: int = TOTAL_SIMULATION_ITERATIONS
    batch_size: int = SIMULATION_BATCH_SIZE


@dataclass
class WeatherSettings:
    """Cloud spawning and wind."""
    spawn_chance: float = CLOUD_SPAWN_CHANCE
    size_range: Tuple[float, float] = CLOUD_SIZE_RANGE
    lifespan_range: Tuple[float, float] = CLOUD_LIFESPAN_RANGE
    altitude_padding: float = CLOUD_ALTITUDE_PADDING
    wind_speed: float = WIND_SPEED
    max_speed: float = MAX_CLOUD_SPEED
    variation: float = WIND_VARIATION


@dataclass
class PlanetSettings:
    """
    Everything a TerrainGenerator needs for one run.

    Defaults come from config.py and simulation/config.py. `seed=None`
    draws from system entropy, so runs are not reproducible.
    """
    planet_radius: float = PLANET_RADIUS
    ocean_level: float = OCEAN_LEVEL
    altitude: float = ALTITUDE
    splits: int = ICOSPHERE_SPLITS
    lon_chunks: int = GEO_LONGITUDE_CHUNKS
    lat_chunks: int = GEO_LATITUDE_CHUNKS
    simulate_weather: bool = SIMULATE_WEATHER
    seed: int | None = None
    noise: NoiseSettings = field(default_factory=NoiseSettings)
    erosion: ErosionSettings = field(default_factory=ErosionSettings)
    weather: WeatherSettings = field(default_factory=WeatherSettings)

    def validate(self) -> None:
        """
        Check settings before a run starts.

        Raises:
            ValueError: On the first invalid option found.
        """
        if self.planet_radius <= 0:
            raise ValueError(f"planet_radius must be positive, got {self.planet_radius}")
        if self.splits < 0:
            raise ValueError(f"splits must be >= 0, got {self.splits}")
        if self.lon_chunks < 1 or self.lat_chunks < 1:
            raise ValueError(f"geo chunk counts must be >= 1, got {self.lon_chunks}x{self.lat_chunks}")
        if len(self.noise.cell_sizes) != 4 or len(self.noise.weights) != 4:
            raise ValueError("noise needs exactly 4 cell sizes and 4 weights")
        if any(size == 0 for size in self.noise.cell_sizes):
            raise ValueError(f"noise cell sizes must be non-zero, got {self.noise.cell_sizes}")
        if self.erosion.radius < 1:
            raise ValueError(f"erosion radius must be >= 1, got {self.erosion.radius}")
        if self.erosion.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.erosion.batch_size}")
        if self.erosion.total_iterations < 0:
            raise ValueError(f"total_iterations must be >= 0, got {self.erosion.total_iterations}")
        if not 0.0 <= self.erosion.inertia <= 1.0:
            raise ValueError(f"inertia must be in [0, 1], got {self.erosion.inertia}")
        for name, (low, high) in (("size_range", self.weather.size_range),
                                  ("lifespan_range", self.weather.lifespan_range)):
            if low > high:
                raise ValueError(f"weather {name} is inverted: {low} > {high}")
