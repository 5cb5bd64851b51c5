"""Tests for layered Perlin noise and vertex displacement."""
from __future__ import annotations

import numpy as np
import pytest

from world.noise import displace_vertices, ease_in_out, layered_noise, perlin_noise

CELL_SIZES = (8.0, 4.0, 2.0, 1.0)
WEIGHTS = (1.0, 0.25, 0.5, 0.1)


def _points(count=200, seed=0):
    return np.random.default_rng(seed).uniform(-20.0, 20.0, size=(count, 3))


class TestPerlinNoise:
    def test_same_input_same_output(self):
        point = (3.25, -1.5, 7.75)
        assert perlin_noise(point) == perlin_noise(point)

    def test_single_point_returns_float(self):
        assert isinstance(perlin_noise((0.5, 0.5, 0.5)), float)

    def test_zero_on_lattice_points(self):
        lattice = np.array([[0, 0, 0], [1, 2, 3], [-4, 5, -6]], dtype=float)
        assert np.allclose(perlin_noise(lattice), 0.0)

    def test_vectorized_matches_single(self):
        points = _points(20)
        batch = perlin_noise(points)
        for point, value in zip(points, batch):
            assert perlin_noise(point) == pytest.approx(value)

    def test_bounded(self):
        values = perlin_noise(_points(2000))
        assert np.all(np.isfinite(values))
        assert np.all(np.abs(values) < 3.0)

    def test_not_constant(self):
        assert np.std(perlin_noise(_points(500) * 0.37)) > 0.01


class TestEase:
    def test_matches_smoothstep(self):
        t = np.linspace(0.0, 1.0, 11)
        assert np.allclose(ease_in_out(t), 3 * t ** 2 - 2 * t ** 3)


class TestLayeredNoise:
    def test_deterministic(self):
        points = _points()
        assert np.array_equal(
            layered_noise(points, CELL_SIZES, WEIGHTS),
            layered_noise(points, CELL_SIZES, WEIGHTS),
        )

    def test_lattice_point_is_half_weight_sum(self):
        # Every octave samples a lattice point (noise 0) and remaps it to 0.5
        value = layered_noise((0.0, 0.0, 0.0), CELL_SIZES, WEIGHTS)
        assert value == pytest.approx(0.5 * sum(WEIGHTS))

    def test_offset_shifts_field(self):
        point = np.array([1.3, 2.7, -0.4])
        offset = (5.0, -2.0, 1.0)
        shifted = layered_noise(point, CELL_SIZES, WEIGHTS, offset)
        assert shifted == pytest.approx(layered_noise(point + np.array(offset), CELL_SIZES, WEIGHTS))

    @pytest.mark.parametrize("sizes, weights", [
        ((8.0, 4.0, 2.0), WEIGHTS),
        (CELL_SIZES, (1.0, 0.5)),
        ((8.0, 0.0, 2.0, 1.0), WEIGHTS),
    ])
    def test_invalid_parameters(self, sizes, weights):
        with pytest.raises(ValueError):
            layered_noise((1.0, 2.0, 3.0), sizes, weights)


class TestDisplacement:
    def test_moves_along_radial_direction(self, sphere):
        displaced = displace_vertices(sphere.vertices, 5.0, CELL_SIZES, WEIGHTS)
        before = sphere.vertices / np.linalg.norm(sphere.vertices, axis=1, keepdims=True)
        after = displaced / np.linalg.norm(displaced, axis=1, keepdims=True)
        assert np.allclose(before, after)

    def test_amount_is_noise_times_altitude(self, sphere):
        displaced = displace_vertices(sphere.vertices, 5.0, CELL_SIZES, WEIGHTS)
        expected = layered_noise(sphere.vertices, CELL_SIZES, WEIGHTS) * 5.0
        moved = np.linalg.norm(displaced, axis=1) - np.linalg.norm(sphere.vertices, axis=1)
        assert np.allclose(moved, expected)
