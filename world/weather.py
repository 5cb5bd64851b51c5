# world/weather.py
"""
Cloud and wind system for the planet.

Clouds form over the ocean, drift with the prevailing wind of their latitude
band and rain droplets onto the terrain below them until they dissipate.
Positions are geographic (lon, lat) so wind acts in degrees per step.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from config import (
    CLOUD_ALTITUDE_PADDING,
    CLOUD_LIFESPAN_RANGE,
    CLOUD_SIZE_RANGE,
    MAX_CLOUD_SPEED,
    WIND_BANDS,
    WIND_SPEED,
    WIND_VARIATION,
)
from world.geo import GeoCoord, crossed_pole, geo_to_position, to_geo, wrap_geo


def wind_for_latitude(lat: float) -> Tuple[float, float]:
    """Prevailing (d_lon, d_lat) wind direction for a latitude."""
    for lower_bound, direction in WIND_BANDS[:-1]:
        if lat > lower_bound:
            return direction
    return WIND_BANDS[-1][1]


@dataclass
class Cloud:
    """A single raincloud drifting over the surface."""
    geo: GeoCoord
    radius: float               # Droplet spread in degrees
    altitude: float             # Distance from the planet center
    life: float                 # Remaining advection steps
    velocity: Tuple[float, float] = (0.0, 0.0)

    @property
    def alive(self) -> bool:
        return self.life > 0

    def apply_wind(
        self,
        direction: Tuple[float, float],
        wind_speed: float = WIND_SPEED,
        max_speed: float = MAX_CLOUD_SPEED,
    ) -> None:
        """Accelerate along `direction`, keeping speed at or below max_speed."""
        vx = self.velocity[0] + direction[0] * wind_speed
        vy = self.velocity[1] + direction[1] * wind_speed
        speed = math.hypot(vx, vy)
        if speed > max_speed:
            vx *= max_speed / speed
            vy *= max_speed / speed
        self.velocity = (vx, vy)

    def move(self) -> None:
        """Step by velocity; crossing a pole reverses the north/south motion."""
        lon = self.geo[0] + self.velocity[0]
        lat = self.geo[1] + self.velocity[1]
        if crossed_pole(lat):
            self.velocity = (self.velocity[0], -self.velocity[1])
        self.geo = wrap_geo((lon, lat))

    def position(self) -> np.ndarray:
        """3D position of the cloud at its altitude."""
        return geo_to_position(self.geo, self.altitude)


@dataclass
class WeatherField:
    """
    All live clouds plus the tuning used to spawn and move them.

    Every random draw goes through `rng` so a seeded run is reproducible.
    """
    clouds: List[Cloud] = field(default_factory=list)
    rng: random.Random = field(default_factory=random.Random)
    size_range: Tuple[float, float] = CLOUD_SIZE_RANGE
    lifespan_range: Tuple[float, float] = CLOUD_LIFESPAN_RANGE
    altitude_padding: float = CLOUD_ALTITUDE_PADDING
    wind_speed: float = WIND_SPEED
    max_speed: float = MAX_CLOUD_SPEED
    variation: float = WIND_VARIATION

    def clear(self) -> None:
        self.clouds.clear()

    def spawn(
        self,
        chance: float,
        ocean_vertices: Sequence[int],
        vertices: np.ndarray,
        planet_radius: float,
        altitude: float,
    ) -> Cloud | None:
        """
        Maybe spawn a cloud above a random ocean vertex.

        Args:
            chance: Probability of spawning this call.
            ocean_vertices: Handles of vertices below ocean level.
            vertices: Mesh vertex positions.
            planet_radius: Undisplaced sphere radius.
            altitude: Terrain displacement scale.

        Returns:
            The new cloud, or None if none formed.
        """
        if not ocean_vertices or self.rng.random() >= chance:
            return None

        vertex = ocean_vertices[self.rng.randrange(len(ocean_vertices))]
        low = planet_radius + altitude
        high = low + altitude * 0.5
        cloud = Cloud(
            geo=to_geo(vertices[vertex]),
            radius=self.rng.uniform(*self.size_range),
            altitude=low + (high - low) * self.rng.random() + self.altitude_padding,
            life=self.rng.uniform(*self.lifespan_range),
        )
        self.clouds.append(cloud)
        return cloud

    def advect(self) -> List[str]:
        """
        Move every cloud one step with its band's wind and age it.

        Returns a list of event messages (clouds that dissipated).
        """
        messages: List[str] = []
        survivors: List[Cloud] = []
        for cloud in self.clouds:
            base = wind_for_latitude(cloud.geo[1])
            direction = (
                base[0] + self.rng.uniform(0.0, self.variation),
                base[1] + self.rng.uniform(0.0, self.variation),
            )
            cloud.apply_wind(direction, self.wind_speed, self.max_speed)
            cloud.move()
            cloud.life -= 1
            if cloud.alive:
                survivors.append(cloud)
            else:
                messages.append(f"Cloud dissipated at ({cloud.geo[0]:.1f} E, {cloud.geo[1]:.1f} N).")
        self.clouds = survivors
        return messages
