"""Shared fixtures: small planets cheap enough to build per test."""
from __future__ import annotations

import random

import numpy as np
import pytest

from planet_state import PlanetSettings
from simulation.brush import build_erosion_brush
from world.geo import GeoIndex
from world.icosphere import IcosphereBuilder
from world.locator import FaceLocator
from world.noise import displace_vertices
from world.weather import WeatherField

SPLITS = 4
RADIUS = 10.0


@pytest.fixture
def sphere():
    """Undisplaced icosphere, 320 faces, radius 10."""
    return IcosphereBuilder().build(SPLITS, RADIUS)


@pytest.fixture
def terrain():
    """Noise-displaced icosphere with normals."""
    settings = PlanetSettings()
    mesh = IcosphereBuilder().build(SPLITS, RADIUS)
    mesh.vertices = displace_vertices(
        mesh.vertices, settings.altitude,
        settings.noise.cell_sizes, settings.noise.weights, settings.noise.offset,
    )
    mesh.compute_normals()
    return mesh


def _locator_for(mesh):
    index = GeoIndex(12, 12)
    index.rebuild(mesh.vertices)
    return FaceLocator(mesh, index)


@pytest.fixture
def sphere_locator(sphere):
    return _locator_for(sphere)


@pytest.fixture
def terrain_locator(terrain):
    return _locator_for(terrain)


@pytest.fixture
def small_settings():
    settings = PlanetSettings(splits=SPLITS, seed=7, lon_chunks=12, lat_chunks=12)
    settings.erosion.radius = 2
    settings.erosion.total_iterations = 6
    settings.erosion.batch_size = 4
    return settings


@pytest.fixture
def simulator_parts(terrain, terrain_locator, small_settings):
    """Everything an ErosionSimulator needs, seeded."""
    rng = random.Random(small_settings.seed)
    brushes = build_erosion_brush(small_settings.erosion.radius, terrain)
    heights = terrain.radial_heights()
    ocean = np.flatnonzero(heights < small_settings.ocean_level).tolist()
    weather = WeatherField(rng=rng)
    return terrain, terrain_locator, brushes, small_settings, weather, ocean, rng
