"""Tests for clouds and the wind bands."""
from __future__ import annotations

import math
import random

import numpy as np
import pytest

from world.weather import Cloud, WeatherField, wind_for_latitude


class TestWindBands:
    @pytest.mark.parametrize("lat, expected", [
        (75.0, (1.5, -2.0)),
        (60.0, (-1.0, 1.0)),
        (45.0, (-1.0, 1.0)),
        (10.0, (1.0, -1.0)),
        (0.0, (1.0, 1.0)),
        (-45.0, (-1.0, -1.0)),
        (-60.0, (1.5, 2.0)),
        (-90.0, (1.5, 2.0)),
    ])
    def test_band_lookup(self, lat, expected):
        assert wind_for_latitude(lat) == expected


class TestCloud:
    def test_speed_clamped(self):
        cloud = Cloud(geo=(0.0, 0.0), radius=1.0, altitude=20.0, life=10)
        for _ in range(100):
            cloud.apply_wind((3.0, 4.0), wind_speed=1.0, max_speed=2.0)
        assert math.hypot(*cloud.velocity) == pytest.approx(2.0)
        assert cloud.velocity[0] / cloud.velocity[1] == pytest.approx(0.75)

    def test_slow_wind_accumulates(self):
        cloud = Cloud(geo=(0.0, 0.0), radius=1.0, altitude=20.0, life=10)
        cloud.apply_wind((1.0, 0.0), wind_speed=0.1, max_speed=5.0)
        cloud.apply_wind((1.0, 0.0), wind_speed=0.1, max_speed=5.0)
        assert cloud.velocity == pytest.approx((0.2, 0.0))

    def test_move_wraps_at_seam(self):
        cloud = Cloud(geo=(179.0, 10.0), radius=1.0, altitude=20.0, life=10, velocity=(5.0, 0.0))
        cloud.move()
        assert cloud.geo == pytest.approx((-176.0, 10.0))

    def test_pole_crossing_reverses_north_south(self):
        cloud = Cloud(geo=(0.0, 89.5), radius=1.0, altitude=20.0, life=10, velocity=(0.0, 1.0))
        cloud.move()
        assert cloud.geo == pytest.approx((180.0, 89.5))
        assert cloud.velocity == (0.0, -1.0)

    def test_position_at_altitude(self):
        cloud = Cloud(geo=(40.0, -20.0), radius=1.0, altitude=17.5, life=1)
        assert np.linalg.norm(cloud.position()) == pytest.approx(17.5)


class TestWeatherField:
    def test_no_ocean_no_clouds(self, sphere):
        weather = WeatherField(rng=random.Random(1))
        assert weather.spawn(1.0, [], sphere.vertices, 10.0, 5.0) is None
        assert weather.clouds == []

    def test_zero_chance_never_spawns(self, sphere):
        weather = WeatherField(rng=random.Random(1))
        for _ in range(50):
            assert weather.spawn(0.0, [0, 1, 2], sphere.vertices, 10.0, 5.0) is None

    def test_spawn_over_ocean(self, sphere):
        from world.geo import to_geo

        weather = WeatherField(rng=random.Random(1), altitude_padding=2.0)
        ocean = [3, 9, 27]
        for _ in range(30):
            cloud = weather.spawn(1.0, ocean, sphere.vertices, 10.0, 4.0)
            assert any(cloud.geo == pytest.approx(to_geo(sphere.vertices[v])) for v in ocean)
            assert 10.0 + 4.0 + 2.0 <= cloud.altitude <= 10.0 + 4.0 * 1.5 + 2.0
            assert weather.size_range[0] <= cloud.radius <= weather.size_range[1]
            assert weather.lifespan_range[0] <= cloud.life <= weather.lifespan_range[1]
        assert len(weather.clouds) == 30

    def test_expired_clouds_removed_with_message(self):
        weather = WeatherField(rng=random.Random(2))
        weather.clouds = [
            Cloud(geo=(0.0, 0.0), radius=1.0, altitude=20.0, life=1),
            Cloud(geo=(10.0, 0.0), radius=1.0, altitude=20.0, life=5),
        ]
        messages = weather.advect()
        assert len(weather.clouds) == 1
        assert weather.clouds[0].life == 4
        assert len(messages) == 1 and messages[0].startswith("Cloud dissipated")

    def test_advect_follows_band_wind(self):
        weather = WeatherField(rng=random.Random(3), variation=0.0, wind_speed=0.5, max_speed=10.0)
        weather.clouds = [Cloud(geo=(0.0, 45.0), radius=1.0, altitude=20.0, life=10)]
        weather.advect()
        assert weather.clouds[0].geo == pytest.approx((-0.5, 45.5))

    def test_seeded_runs_match(self, sphere):
        def run(seed):
            weather = WeatherField(rng=random.Random(seed))
            for _ in range(20):
                weather.spawn(0.5, list(range(40)), sphere.vertices, 10.0, 5.0)
                weather.advect()
            return [(c.geo, c.life) for c in weather.clouds]

        assert run(11) == run(11)

    def test_clear(self):
        weather = WeatherField()
        weather.clouds.append(Cloud(geo=(0.0, 0.0), radius=1.0, altitude=1.0, life=1))
        weather.clear()
        assert weather.clouds == []
