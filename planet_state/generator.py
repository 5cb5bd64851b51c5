# planet_state/generator.py
"""Tick-driven planet generator.

One TerrainGenerator owns the mesh and every structure built over it and
moves through a fixed sequence of stages, doing one bounded unit of work per
`tick()` so a host loop stays responsive:

    IDLE -> BUILDING_ICOSAHEDRON -> SUBDIVIDING -> APPLYING_NOISE
         -> COMPUTING_NORMALS -> IDLE (or -> SIMULATING -> IDLE)
    IDLE -> SIMULATING -> IDLE

Subdivision processes one icosahedron face per tick and simulation one batch
of iterations per tick. Stopping early is just a matter of not ticking.
"""
from __future__ import annotations

import collections
import logging
import random
from enum import Enum
from typing import Deque, Iterator, List, Optional

import numpy as np

from config import MESSAGE_LOG_SIZE, PROGRESS_LOG_INTERVAL
from planet_state.settings import PlanetSettings
from simulation.brush import ErosionBrushCache
from simulation.erosion import ErosionSimulator
from world.geo import GeoIndex, to_geo_array
from world.icosphere import IcosphereBuilder
from world.locator import FaceLocationError, FaceLocator
from world.mesh import MeshData, MeshSnapshot
from world.noise import displace_vertices
from world.weather import WeatherField

logger = logging.getLogger(__name__)


class GeneratorState(Enum):
    IDLE = "idle"
    BUILDING_ICOSAHEDRON = "building_icosahedron"
    SUBDIVIDING = "subdividing"
    APPLYING_NOISE = "applying_noise"
    COMPUTING_NORMALS = "computing_normals"
    SIMULATING = "simulating"


class TickStatus(Enum):
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ERROR = "error"


class TerrainGenerator:
    """Staged planet generation and erosion simulation."""

    def __init__(self, settings: Optional[PlanetSettings] = None):
        self.settings = settings if settings is not None else PlanetSettings()
        self.rng = random.Random(self.settings.seed)
        self.state = GeneratorState.IDLE
        self.messages: Deque[str] = collections.deque(maxlen=MESSAGE_LOG_SIZE)

        self.builder = IcosphereBuilder()
        self.mesh: Optional[MeshData] = None
        self.index = GeoIndex(self.settings.lon_chunks, self.settings.lat_chunks)
        self.locator: Optional[FaceLocator] = None
        self.brush_cache = ErosionBrushCache()
        self.weather = WeatherField(rng=self.rng)
        self.simulator: Optional[ErosionSimulator] = None
        self.ocean_vertices: List[int] = []
        self.latest_snapshot: Optional[MeshSnapshot] = None

        self._simulate_after_generation = False
        self._faces_done = 0
        self._faces_total = 0
        self.iterations = 0

    # =========================================================================
    # Entry points
    # =========================================================================

    def generate(self, settings: Optional[PlanetSettings] = None, simulate: bool = False) -> None:
        """
        Start building a new planet; drive it with tick().

        Args:
            settings: Replaces the current settings when given.
            simulate: Run the erosion simulation straight after generation.

        Raises:
            ValueError: If the settings are invalid.
        """
        if settings is not None:
            settings.validate()
            self.settings = settings
            self.index = GeoIndex(settings.lon_chunks, settings.lat_chunks)
        else:
            self.settings.validate()
        # Same settings, same planet and same erosion run
        self.rng.seed(self.settings.seed)
        # Brushes follow the adjacency of the mesh about to be built
        self.brush_cache.invalidate()
        self._simulate_after_generation = simulate
        self._set_state(GeneratorState.BUILDING_ICOSAHEDRON)

    def run_simulation(self) -> None:
        """
        Start an erosion run on the current planet; drive it with tick().

        Raises:
            RuntimeError: If no planet has been generated yet.
        """
        if self.mesh is None:
            raise RuntimeError("generate a planet before running the simulation")
        self._set_state(GeneratorState.SIMULATING)

    def project_to_geographic(self) -> MeshSnapshot:
        """
        Flat map of the current planet: each vertex at (lon, lat, 0).

        The mesh itself is left untouched; normals all face -z.

        Raises:
            RuntimeError: If no planet has been generated yet.
        """
        if self.mesh is None:
            raise RuntimeError("generate a planet before projecting it")
        geo = to_geo_array(self.mesh.vertices)
        positions = np.column_stack([geo, np.zeros(len(geo))])
        normals = np.tile(np.array([0.0, 0.0, -1.0]), (len(geo), 1))
        self.mesh.update_colors()
        projected = MeshData(
            vertices=positions,
            faces=self.mesh.faces,
            vertex_faces=self.mesh.vertex_faces,
            normals=normals,
            colors=self.mesh.colors,
            erosion=self.mesh.erosion,
        )
        return projected.snapshot(self.state.value, self.progress)

    # =========================================================================
    # State machine
    # =========================================================================

    @property
    def busy(self) -> bool:
        return self.state != GeneratorState.IDLE

    @property
    def progress(self) -> float:
        """Fraction of the current stage done (1.0 when idle)."""
        if self.state == GeneratorState.SUBDIVIDING and self._faces_total:
            return self._faces_done / self._faces_total
        if self.state == GeneratorState.SIMULATING:
            total = self.settings.erosion.total_iterations
            return self.iterations / total if total else 1.0
        if self.state == GeneratorState.IDLE:
            return 1.0
        return 0.0

    def _set_state(self, new_state: GeneratorState) -> None:
        """Switch state, running the leave/enter side effects."""
        if self.state == GeneratorState.SUBDIVIDING:
            self.mesh = self.builder.finish(self.settings.planet_radius)

        old_state = self.state
        self.state = new_state
        logger.debug("Generator %s -> %s", old_state.value, new_state.value)

        if new_state == GeneratorState.BUILDING_ICOSAHEDRON:
            self.mesh = None
            self.locator = None
            self.simulator = None
            self.index.clear()
            self.weather.clear()
        elif new_state == GeneratorState.SUBDIVIDING:
            self._faces_done = 0
            self._faces_total = self.builder.begin_subdivision()
        elif new_state == GeneratorState.SIMULATING:
            self._begin_simulation()

    def _begin_simulation(self) -> None:
        settings = self.settings
        self.iterations = 0
        self.weather = WeatherField(
            rng=self.rng,
            size_range=settings.weather.size_range,
            lifespan_range=settings.weather.lifespan_range,
            altitude_padding=settings.weather.altitude_padding,
            wind_speed=settings.weather.wind_speed,
            max_speed=settings.weather.max_speed,
            variation=settings.weather.variation,
        )
        heights = self.mesh.radial_heights()
        self.ocean_vertices = np.flatnonzero(heights < settings.ocean_level).tolist()
        if self.locator is None:
            self.locator = FaceLocator(self.mesh, self.index)
        brushes = self.brush_cache.get(settings.erosion.radius, self.mesh)
        self.simulator = ErosionSimulator(
            self.mesh,
            self.locator,
            brushes,
            settings,
            self.weather,
            ocean_vertices=self.ocean_vertices,
            rng=self.rng,
        )
        logger.info(
            "Simulation started: %d iterations, %d ocean vertices, brush radius %d",
            settings.erosion.total_iterations, len(self.ocean_vertices), settings.erosion.radius,
        )
        self.messages.append(f"Erosion simulation started ({len(self.ocean_vertices)} ocean vertices).")

    def _publish(self) -> MeshSnapshot:
        self.latest_snapshot = self.mesh.snapshot(self.state.value, self.progress)
        return self.latest_snapshot

    def tick(self) -> TickStatus:
        """Advance the active stage by one unit of work."""
        if self.state == GeneratorState.IDLE:
            return TickStatus.DONE

        if self.state == GeneratorState.BUILDING_ICOSAHEDRON:
            self.builder.build_icosahedron()
            if self.settings.splits > 1:
                self._set_state(GeneratorState.SUBDIVIDING)
            else:
                self.mesh = self.builder.finish(self.settings.planet_radius)
                self._set_state(GeneratorState.APPLYING_NOISE)
            return TickStatus.IN_PROGRESS

        if self.state == GeneratorState.SUBDIVIDING:
            self.builder.subdivide_face(self._faces_done, self.settings.splits)
            self._faces_done += 1
            if self._faces_done >= self._faces_total:
                self._set_state(GeneratorState.APPLYING_NOISE)
            return TickStatus.IN_PROGRESS

        if self.state == GeneratorState.APPLYING_NOISE:
            noise = self.settings.noise
            self.mesh.vertices = displace_vertices(
                self.mesh.vertices, self.settings.altitude,
                noise.cell_sizes, noise.weights, noise.offset,
            )
            self.index.rebuild(self.mesh.vertices)
            self.locator = FaceLocator(self.mesh, self.index)
            self._set_state(GeneratorState.COMPUTING_NORMALS)
            return TickStatus.IN_PROGRESS

        if self.state == GeneratorState.COMPUTING_NORMALS:
            self.mesh.compute_normals()
            logger.info(
                "Planet generated: %d vertices, %d faces",
                self.mesh.vertex_count, self.mesh.face_count,
            )
            self.messages.append(f"Planet generated with {self.mesh.face_count} faces.")
            if self._simulate_after_generation:
                self._simulate_after_generation = False
                self._publish()
                self._set_state(GeneratorState.SIMULATING)
                return TickStatus.IN_PROGRESS
            self._set_state(GeneratorState.IDLE)
            self._publish()
            return TickStatus.DONE

        return self._simulate_batch()

    def _simulate_batch(self) -> TickStatus:
        erosion = self.settings.erosion
        batch = min(erosion.batch_size, erosion.total_iterations - self.iterations)
        try:
            for _ in range(batch):
                self.messages.extend(self.simulator.run_iteration())
                self.iterations += 1
                if self.iterations % PROGRESS_LOG_INTERVAL == 0:
                    logger.debug("Simulation progress %d/%d", self.iterations, erosion.total_iterations)
        except FaceLocationError as exc:
            logger.error("Simulation halted after %d iterations: %s", self.iterations, exc)
            self.messages.append("Simulation halted: a droplet fell off the mesh.")
            self._set_state(GeneratorState.IDLE)
            self._publish()
            return TickStatus.ERROR

        if self.iterations >= erosion.total_iterations:
            stats = self.simulator.get_stats()
            logger.info(
                "Simulation finished: %d droplets, eroded %.4f, deposited %.4f",
                stats['droplets'], stats['eroded'], stats['deposited'],
            )
            self.messages.append(f"Erosion simulation finished after {self.iterations} iterations.")
            self._set_state(GeneratorState.IDLE)
            self._publish()
            return TickStatus.DONE

        self._publish()
        return TickStatus.IN_PROGRESS

    # =========================================================================
    # Host helpers
    # =========================================================================

    def snapshot(self) -> Optional[MeshSnapshot]:
        """Fresh copy of the current mesh, or None before the first build."""
        if self.mesh is None:
            return None
        return self._publish()

    def iter_generate(
        self,
        settings: Optional[PlanetSettings] = None,
        simulate: bool = False,
    ) -> Iterator[MeshSnapshot]:
        """
        Generate synchronously, yielding a snapshot whenever one is published.

        The final snapshot has state "idle".

        Raises:
            RuntimeError: If the simulation halted on a face location error.
        """
        self.generate(settings, simulate=simulate)
        last = self.latest_snapshot
        while True:
            status = self.tick()
            if self.latest_snapshot is not last:
                last = self.latest_snapshot
                yield last
            if status == TickStatus.ERROR:
                raise RuntimeError(f"simulation halted: {self.messages[-1]}")
            if status == TickStatus.DONE:
                return
