# simulation/erosion.py
"""Droplet-based hydraulic erosion on the planet mesh.

Each droplet starts under a cloud (or anywhere when weather is off), runs
downhill across faces for a bounded number of steps and trades height
between the terrain and the sediment it carries.

Key concepts:
- Flow: gravity points at the planet center; projected into the plane of the
  current face it gives the downhill direction
- Capacity: fast, wet droplets falling steeply carry more sediment
- Erosion is spread over the nearest vertex's brush, deposition is dropped on
  the nearest vertex only, which keeps small depressions sharp
- Terrain only ever moves along each vertex's radial direction, so geographic
  coordinates and the geo index stay valid during a run
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence

import numpy as np

from world.geo import GeoCoord, to_geo, wrap_geo
from world.locator import FaceLocator
from world.mesh import MeshData
from world.weather import Cloud, WeatherField

if TYPE_CHECKING:
    from planet_state.settings import PlanetSettings
    from simulation.brush import Brush

logger = logging.getLogger(__name__)

# Directions shorter than this are treated as zero (flat ground)
_MIN_DIRECTION = 1e-9


@dataclass
class DropletResult:
    """What a single droplet did before it stopped."""
    steps: int = 0
    eroded: float = 0.0
    deposited: float = 0.0
    sediment: float = 0.0


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _normalized(vector: np.ndarray) -> Optional[np.ndarray]:
    length = float(np.linalg.norm(vector))
    if length < _MIN_DIRECTION:
        return None
    return vector / length


def face_frame(mesh: MeshData, face: int):
    """Orthonormal (tangent, bitangent, normal) frame of a face."""
    a, b, _ = mesh.vertices[mesh.faces[face]]
    normal = _normalized(mesh.face_normal(face))
    tangent = _normalized(b - a)
    if normal is None or tangent is None:
        return None
    bitangent = np.cross(normal, tangent)
    return tangent, bitangent, normal


def flow_direction(mesh: MeshData, face: int) -> np.ndarray:
    """
    Downhill direction across a face in world space.

    The vector from the face center to the planet center is expressed in the
    face's local frame; keeping only its in-plane (tangent, bitangent)
    components and mapping them back gives the slope direction. A face that
    directly faces the center yields the zero vector.
    """
    frame = face_frame(mesh, face)
    if frame is None:
        return np.zeros(3)
    tangent, bitangent, _ = frame
    gravity = -mesh.face_center(face)
    return tangent * float(gravity @ tangent) + bitangent * float(gravity @ bitangent)


# =============================================================================
# SIMULATOR
# =============================================================================

class ErosionSimulator:
    """Runs droplets and cloud iterations against one mesh.

    Owns nothing but counters: the mesh, locator, brushes, weather and random
    source are shared with the generator driving it.
    """

    def __init__(
        self,
        mesh: MeshData,
        locator: FaceLocator,
        brushes: Sequence["Brush"],
        settings: "PlanetSettings",
        weather: WeatherField,
        ocean_vertices: Sequence[int] = (),
        rng: random.Random | None = None,
    ):
        self.mesh = mesh
        self.locator = locator
        self.brushes = brushes
        self.settings = settings
        self.weather = weather
        self.ocean_vertices = list(ocean_vertices)
        self.rng = rng if rng is not None else random.Random()

        self.iterations = 0
        self.droplets = 0
        self.total_eroded = 0.0
        self.total_deposited = 0.0

    # =========================================================================
    # Droplet spawning and movement
    # =========================================================================

    def spawn_geo(self, cloud: Cloud | None = None) -> GeoCoord:
        """Start coordinate: jittered under `cloud`, or uniform over the sphere."""
        if cloud is not None:
            lon = cloud.geo[0] + self.rng.uniform(-cloud.radius, cloud.radius)
            lat = cloud.geo[1] + self.rng.uniform(-cloud.radius, cloud.radius)
            return wrap_geo((lon, lat))
        lon = self.rng.uniform(-180.0, 180.0)
        # asin of a uniform height gives equal area per latitude band
        lat = math.degrees(math.asin(self.rng.uniform(-1.0, 1.0)))
        return lon, lat

    def next_vertex(self, vertex: int, direction: np.ndarray) -> Optional[int]:
        """Neighbour of `vertex` whose edge points most along `direction`."""
        neighbors = self.mesh.neighbors(vertex)
        if len(neighbors) == 0:
            return None
        edges = self.mesh.vertices[neighbors] - self.mesh.vertices[vertex]
        lengths = np.linalg.norm(edges, axis=1)
        alignment = (edges @ direction) / np.where(lengths > 0, lengths, np.inf)
        return int(neighbors[int(np.argmax(alignment))])

    # =========================================================================
    # Terrain changes
    # =========================================================================

    def deposit(self, vertex: int, amount: float) -> float:
        """Raise one vertex by `amount` and refresh the normals around it.

        Returns:
            Height actually added.
        """
        if amount <= 0.0:
            return 0.0
        applied = self.mesh.move_radially(vertex, amount)
        if applied:
            self.mesh.refresh_normals(vertex)
        return applied

    def erode(self, vertex: int, amount: float) -> float:
        """
        Lower the brush around `vertex` by a total of `amount`.

        Each brush point loses its weighted share, capped at its distance
        from the center so no vertex passes through it.

        Returns:
            Height actually removed.
        """
        if amount <= 0.0:
            return 0.0
        indices, weights = self.brushes[vertex]
        removed = 0.0
        for point, weight in zip(indices.tolist(), weights.tolist()):
            magnitude = float(np.linalg.norm(self.mesh.vertices[point]))
            take = min(amount * weight, magnitude)
            if take <= 0.0:
                continue
            applied = -self.mesh.move_radially(point, -take)
            if applied:
                self.mesh.refresh_normals(point)
                removed += applied
        return removed

    # =========================================================================
    # Droplet lifecycle
    # =========================================================================

    def run_droplet(self, cloud: Cloud | None = None) -> DropletResult:
        """
        Simulate one droplet from spawn until it stops.

        A droplet stops when its lifetime runs out, the ground under it is
        flat, or it runs out of speed.

        Raises:
            FaceLocationError: If a coordinate cannot be placed on any face.
        """
        params = self.settings.erosion
        result = DropletResult()

        geo = self.spawn_geo(cloud)
        face = self.locator.locate(geo)
        position = self.locator.world_position(geo, face)
        direction = np.zeros(3)
        speed = params.initial_speed
        water = params.initial_water
        sediment = 0.0

        for _ in range(params.max_lifetime):
            vertex = self.locator.nearest_vertex(position, face)

            blended = direction * params.inertia + flow_direction(self.mesh, face) * (1.0 - params.inertia)
            blended = _normalized(blended)
            if blended is None:
                break
            direction = blended

            neighbor = self.next_vertex(vertex, direction)
            if neighbor is None:
                break
            step_length = float(np.linalg.norm(self.mesh.vertices[neighbor] - self.mesh.vertices[vertex]))

            new_geo = to_geo(position + direction * step_length)
            new_face = self.locator.locate(new_geo, seed_vertex=neighbor)
            new_position = self.locator.world_position(new_geo, new_face)

            delta = float(np.linalg.norm(new_position) - np.linalg.norm(position))
            capacity = max(-delta * speed * water * params.sediment_capacity_factor,
                           params.min_sediment_capacity)

            if new_face != face:
                if sediment > capacity or delta > 0:
                    if delta > 0:
                        amount = min(delta, sediment)
                    else:
                        amount = (sediment - capacity) * params.deposit_speed
                    dropped = self.deposit(vertex, amount)
                    sediment -= dropped
                    result.deposited += dropped
                else:
                    amount = min((capacity - sediment) * params.erode_speed, -delta)
                    removed = self.erode(vertex, amount)
                    sediment += removed
                    result.eroded += removed

            result.steps += 1
            speed = math.sqrt(max(speed * speed + delta * params.gravity, 0.0))
            water *= 1.0 - params.evaporate_speed
            face, position = new_face, new_position
            if speed <= 0.0:
                break

        result.sediment = sediment
        logger.debug("Droplet stopped after %d steps carrying %.5f sediment", result.steps, sediment)
        self.droplets += 1
        self.total_eroded += result.eroded
        self.total_deposited += result.deposited
        return result

    def run_iteration(self) -> List[str]:
        """
        One simulation iteration.

        With weather: maybe spawn a cloud, move all clouds, then rain one
        droplet under each. Without: a fixed number of droplets anywhere.

        Returns a list of event messages.
        """
        messages: List[str] = []
        if self.settings.simulate_weather:
            cloud = self.weather.spawn(
                self.settings.weather.spawn_chance,
                self.ocean_vertices,
                self.mesh.vertices,
                self.settings.planet_radius,
                self.settings.altitude,
            )
            if cloud is not None:
                messages.append(f"Cloud formed at ({cloud.geo[0]:.1f} E, {cloud.geo[1]:.1f} N).")
            messages.extend(self.weather.advect())
            for cloud in list(self.weather.clouds):
                self.run_droplet(cloud)
        else:
            for _ in range(self.settings.erosion.weatherless_droplets):
                self.run_droplet()
        self.iterations += 1
        return messages

    def get_stats(self) -> dict:
        return {
            'iterations': self.iterations,
            'droplets': self.droplets,
            'eroded': self.total_eroded,
            'deposited': self.total_deposited,
            'clouds': len(self.weather.clouds),
        }
