"""Tests for face location by geographic coordinate."""
from __future__ import annotations

import math
import random

import numpy as np
import pytest

from world.geo import GeoIndex, geo_to_direction, to_geo
from world.locator import FaceLocationError, FaceLocator


def barycentric(mesh, face, point):
    """Barycentric coordinates of `point` in the plane of `face`."""
    a, b, c = mesh.vertices[mesh.faces[face]]
    v0, v1, v2 = b - a, c - a, point - a
    d00, d01, d11 = v0 @ v0, v0 @ v1, v1 @ v1
    d20, d21 = v2 @ v0, v2 @ v1
    denom = d00 * d11 - d01 * d01
    v = (d11 * d20 - d01 * d21) / denom
    w = (d00 * d21 - d01 * d20) / denom
    return np.array([1.0 - v - w, v, w])


class TestContainment:
    def test_angle_sum_inside_is_full_turn(self, sphere_locator, sphere):
        geo = to_geo(sphere.face_center(10))
        assert sphere_locator.angle_sum(10, geo) == pytest.approx(360.0, abs=1e-6)

    def test_far_face_rejected(self, sphere_locator, sphere):
        geo = to_geo(sphere.face_center(0))
        direction = geo_to_direction(geo)
        centers = sphere.vertices[sphere.faces].mean(axis=1)
        far = int(np.argmin(centers @ direction))
        assert not sphere_locator.contains(far, geo)

    def test_corner_counts_as_inside(self, sphere_locator, sphere):
        vertex = int(sphere.faces[5][1])
        assert sphere_locator.angle_sum(5, sphere_locator.vertex_coord(vertex)) == 360.0


class TestLocate:
    def test_face_centers_locate_to_their_face(self, terrain_locator, terrain):
        for face in range(terrain.face_count):
            geo = to_geo(terrain.face_center(face))
            assert terrain_locator.locate(geo) == face

    def test_seed_vertex_shortcut(self, sphere_locator, sphere):
        face = 42
        geo = to_geo(sphere.face_center(face))
        seed = int(sphere.faces[face][0])
        assert sphere_locator.locate(geo, seed_vertex=seed) == face

    def test_query_on_vertex(self, sphere_locator, sphere):
        vertex = 17
        geo = sphere_locator.vertex_coord(vertex)
        assert sphere_locator.locate(geo, seed_vertex=vertex) == sphere.vertex_faces[vertex][0]

    @pytest.mark.parametrize("geo", [(0.0, 89.9), (123.0, -89.5), (-60.0, 70.0)])
    def test_polar_queries(self, sphere_locator, sphere, geo):
        face = sphere_locator.locate(geo)
        point = sphere_locator.world_position(geo, face)
        assert np.all(barycentric(sphere, face, point) >= -0.05)

    def test_random_points(self, terrain_locator, terrain):
        rng = random.Random(3)
        for _ in range(200):
            geo = (rng.uniform(-180.0, 180.0), math.degrees(math.asin(rng.uniform(-1.0, 1.0))))
            face = terrain_locator.locate(geo)
            point = terrain_locator.world_position(geo, face)
            # lon/lat flattening bends edges slightly away from the poles
            assert np.all(barycentric(terrain, face, point) >= -0.1)

    def test_seam_query(self, sphere_locator, sphere):
        for lon in (-179.99, 180.0):
            face = sphere_locator.locate((lon, 3.0))
            point = sphere_locator.world_position((lon, 3.0), face)
            assert np.all(barycentric(sphere, face, point) >= -0.1)

    def test_empty_index_raises(self, sphere):
        locator = FaceLocator(sphere, GeoIndex(5, 4))
        with pytest.raises(FaceLocationError) as info:
            locator.locate((10.0, 10.0))
        assert info.value.buckets_checked == 20
        assert info.value.geo == (10.0, 10.0)


class TestGeometry:
    def test_world_position_recovers_center(self, terrain_locator, terrain):
        for face in (0, 99, terrain.face_count - 1):
            center = terrain.face_center(face)
            point = terrain_locator.world_position(to_geo(center), face)
            assert np.allclose(point, center)

    def test_world_position_keeps_direction(self, terrain_locator):
        geo = (33.0, -12.0)
        face = terrain_locator.locate(geo)
        assert to_geo(terrain_locator.world_position(geo, face)) == pytest.approx(geo)

    def test_nearest_vertex_is_a_corner(self, sphere_locator, sphere):
        face = 7
        corner = int(sphere.faces[face][2])
        assert sphere_locator.nearest_vertex(sphere.vertices[corner] * 1.001, face) == corner

    def test_refresh_tracks_moved_vertices(self, sphere):
        index = GeoIndex(6, 6)
        index.rebuild(sphere.vertices)
        locator = FaceLocator(sphere, index)
        sphere.vertices[0] = sphere.vertices[1].copy()
        locator.refresh()
        assert locator.vertex_coord(0) == pytest.approx(locator.vertex_coord(1))
