"""Tests for the tick-driven generator and the command line host."""
from __future__ import annotations

import numpy as np
import pytest

from planet_state import GeneratorState, PlanetSettings, TerrainGenerator, TickStatus
from simulation.erosion import ErosionSimulator
from world.geo import to_geo_array
from world.locator import FaceLocationError


def run_ticks(generator, limit=10000):
    """Tick to completion; returns (states seen per tick, final status)."""
    states = []
    for _ in range(limit):
        states.append(generator.state)
        status = generator.tick()
        if status != TickStatus.IN_PROGRESS:
            return states, status
    raise AssertionError("generator never finished")


class TestStateMachine:
    def test_idle_tick_is_done(self):
        generator = TerrainGenerator(PlanetSettings(splits=2))
        assert generator.tick() == TickStatus.DONE
        assert not generator.busy
        assert generator.progress == 1.0

    def test_stage_sequence(self):
        generator = TerrainGenerator()
        generator.generate(PlanetSettings(splits=3, seed=1))
        states, status = run_ticks(generator)

        assert status == TickStatus.DONE
        assert len(states) == 23
        assert states[0] == GeneratorState.BUILDING_ICOSAHEDRON
        assert states[1:21] == [GeneratorState.SUBDIVIDING] * 20
        assert states[21:] == [GeneratorState.APPLYING_NOISE, GeneratorState.COMPUTING_NORMALS]
        assert generator.state == GeneratorState.IDLE
        assert generator.mesh.face_count == 180

    def test_single_split_skips_subdivision(self):
        generator = TerrainGenerator()
        generator.generate(PlanetSettings(splits=1, seed=1))
        assert generator.tick() == TickStatus.IN_PROGRESS
        assert generator.state == GeneratorState.APPLYING_NOISE
        assert generator.mesh.face_count == 20

    def test_subdivision_progress(self):
        generator = TerrainGenerator()
        generator.generate(PlanetSettings(splits=2, seed=1))
        generator.tick()
        for done in range(1, 6):
            generator.tick()
            assert generator.progress == pytest.approx(done / 20)

    def test_invalid_settings_rejected(self):
        generator = TerrainGenerator()
        with pytest.raises(ValueError):
            generator.generate(PlanetSettings(splits=-1))
        assert generator.state == GeneratorState.IDLE

    def test_messages_bounded(self):
        generator = TerrainGenerator()
        for index in range(500):
            generator.messages.append(f"message {index}")
        assert len(generator.messages) == 100
        assert generator.messages[-1] == "message 499"


class TestOutputs:
    def test_snapshot_buffers(self, small_settings):
        generator = TerrainGenerator()
        generator.generate(small_settings)
        run_ticks(generator)
        snapshot = generator.latest_snapshot

        assert snapshot.state == "idle"
        assert snapshot.progress == 1.0
        assert snapshot.positions.dtype == np.float32
        assert snapshot.indices.dtype == np.uint32
        assert snapshot.triangle_count == 320
        assert snapshot.vertex_count == generator.mesh.vertex_count
        assert snapshot.colors.shape == (snapshot.vertex_count, 4)
        with pytest.raises(ValueError):
            snapshot.positions[0, 0] = 1.0

    def test_snapshot_is_a_copy(self, small_settings):
        generator = TerrainGenerator()
        generator.generate(small_settings)
        run_ticks(generator)
        snapshot = generator.snapshot()
        generator.mesh.vertices[0] *= 2.0
        assert not np.allclose(snapshot.positions[0], generator.mesh.vertices[0])

    def test_noise_applied(self, small_settings):
        generator = TerrainGenerator()
        generator.generate(small_settings)
        run_ticks(generator)
        heights = generator.mesh.radial_heights()
        assert np.ptp(heights) > 0
        assert not np.allclose(heights, small_settings.planet_radius)

    def test_snapshot_before_generation(self):
        assert TerrainGenerator().snapshot() is None

    def test_geographic_projection(self, small_settings):
        generator = TerrainGenerator()
        generator.generate(small_settings)
        run_ticks(generator)
        before = generator.mesh.vertices.copy()

        flat = generator.project_to_geographic()
        assert np.allclose(flat.positions[:, :2], to_geo_array(before), atol=1e-3)
        assert np.all(flat.positions[:, 2] == 0.0)
        assert np.all(flat.normals == np.array([0.0, 0.0, -1.0], dtype=np.float32))
        assert np.array_equal(generator.mesh.vertices, before)

    def test_projection_needs_a_planet(self):
        with pytest.raises(RuntimeError):
            TerrainGenerator().project_to_geographic()


class TestSimulation:
    def test_run_before_generate(self):
        with pytest.raises(RuntimeError):
            TerrainGenerator().run_simulation()

    def test_batches_and_progress(self, small_settings):
        small_settings.simulate_weather = False
        generator = TerrainGenerator()
        generator.generate(small_settings)
        run_ticks(generator)

        generator.run_simulation()
        assert generator.state == GeneratorState.SIMULATING
        assert generator.progress == 0.0
        assert generator.tick() == TickStatus.IN_PROGRESS
        assert generator.progress == pytest.approx(4 / 6)
        assert generator.tick() == TickStatus.DONE
        assert generator.state == GeneratorState.IDLE
        assert generator.simulator.iterations == 6
        assert generator.simulator.droplets == 6 * small_settings.erosion.weatherless_droplets

    def test_generate_then_simulate(self, small_settings):
        generator = TerrainGenerator()
        generator.generate(small_settings, simulate=True)
        states, status = run_ticks(generator)
        assert status == TickStatus.DONE
        assert states.count(GeneratorState.SIMULATING) == 2
        assert generator.iterations == 6

    def test_ocean_vertices_taken_at_start(self, small_settings):
        generator = TerrainGenerator()
        generator.generate(small_settings, simulate=True)
        while generator.state != GeneratorState.SIMULATING:
            generator.tick()
        heights = generator.mesh.radial_heights()
        expected = np.flatnonzero(heights < small_settings.ocean_level).tolist()
        assert generator.ocean_vertices == expected
        assert generator.simulator.ocean_vertices == expected

    def test_brushes_reused_between_runs(self, small_settings):
        generator = TerrainGenerator()
        generator.generate(small_settings, simulate=True)
        run_ticks(generator)
        generator.run_simulation()
        run_ticks(generator)
        assert generator.brush_cache.rebuild_count == 1

    def test_face_location_failure_halts(self, small_settings):
        small_settings.simulate_weather = False
        generator = TerrainGenerator()
        generator.generate(small_settings)
        run_ticks(generator)

        generator.index.clear()
        generator.run_simulation()
        assert generator.tick() == TickStatus.ERROR
        assert generator.state == GeneratorState.IDLE
        assert generator.messages[-1] == "Simulation halted: a droplet fell off the mesh."

    def test_seeded_runs_reproduce(self):
        def erode(seed):
            settings = PlanetSettings(splits=4, seed=seed, lon_chunks=12, lat_chunks=12)
            settings.erosion.radius = 2
            settings.erosion.total_iterations = 20
            settings.weather.spawn_chance = 0.5
            generator = TerrainGenerator()
            generator.generate(settings, simulate=True)
            run_ticks(generator)
            return generator.mesh.vertices.copy()

        assert np.array_equal(erode(5), erode(5))


class TestEndToEnd:
    def test_zero_weights_leave_a_sphere(self):
        settings = PlanetSettings(splits=2, seed=1)
        settings.noise.weights = (0.0, 0.0, 0.0, 0.0)
        generator = TerrainGenerator()
        generator.generate(settings)
        run_ticks(generator)
        assert np.allclose(generator.mesh.radial_heights(), settings.planet_radius)

    def test_zero_iterations_leave_terrain_untouched(self, small_settings):
        small_settings.erosion.total_iterations = 0
        generator = TerrainGenerator()
        generator.generate(small_settings, simulate=True)
        while generator.state != GeneratorState.COMPUTING_NORMALS:
            generator.tick()
        displaced = generator.mesh.vertices.copy()
        generator.tick()
        assert generator.state == GeneratorState.SIMULATING
        normals = generator.mesh.normals.copy()

        assert generator.tick() == TickStatus.DONE
        assert np.array_equal(generator.mesh.vertices, displaced)
        assert np.array_equal(generator.mesh.normals, normals)
        assert generator.simulator.droplets == 0

    def test_same_settings_same_planet(self, small_settings):
        meshes = []
        for _ in range(2):
            generator = TerrainGenerator()
            generator.generate(small_settings)
            run_ticks(generator)
            meshes.append(generator.mesh)
        first, second = meshes
        assert first.vertex_count == second.vertex_count
        assert first.face_count == second.face_count
        assert np.array_equal(first.vertices, second.vertices)
        assert np.array_equal(first.faces, second.faces)

    def test_regenerating_reuses_the_seed(self, small_settings):
        generator = TerrainGenerator()
        runs = []
        for _ in range(2):
            generator.generate(small_settings if not runs else None, simulate=True)
            run_ticks(generator)
            runs.append(generator.mesh.vertices.copy())
        assert np.array_equal(runs[0], runs[1])

    def test_regenerating_rebuilds_brushes(self, small_settings):
        generator = TerrainGenerator()
        generator.generate(small_settings, simulate=True)
        run_ticks(generator)
        first = generator.simulator.brushes
        generator.generate(simulate=True)
        run_ticks(generator)
        assert generator.brush_cache.rebuild_count == 2
        assert generator.simulator.brushes is not first


class TestIterGenerate:
    def test_yields_final_idle_snapshot(self, small_settings):
        snapshots = list(TerrainGenerator().iter_generate(small_settings))
        assert len(snapshots) == 1
        assert snapshots[-1].state == "idle"

    def test_yields_simulation_batches(self, small_settings):
        snapshots = list(TerrainGenerator().iter_generate(small_settings, simulate=True))
        assert len(snapshots) == 3
        assert snapshots[-1].state == "idle"

    def test_raises_when_halted(self, small_settings, monkeypatch):
        def fall_off(simulator):
            raise FaceLocationError((0.0, 0.0), 1)

        monkeypatch.setattr(ErosionSimulator, "run_iteration", fall_off)
        generator = TerrainGenerator()
        with pytest.raises(RuntimeError, match="simulation halted"):
            list(generator.iter_generate(small_settings, simulate=True))
        assert generator.state == GeneratorState.IDLE


class TestSettings:
    @pytest.mark.parametrize("change", [
        lambda s: setattr(s, "planet_radius", 0.0),
        lambda s: setattr(s, "splits", -2),
        lambda s: setattr(s, "lon_chunks", 0),
        lambda s: setattr(s.noise, "weights", (1.0, 0.5)),
        lambda s: setattr(s.noise, "cell_sizes", (8.0, 0.0, 2.0, 1.0)),
        lambda s: setattr(s.erosion, "radius", 0),
        lambda s: setattr(s.erosion, "batch_size", 0),
        lambda s: setattr(s.erosion, "inertia", 1.5),
        lambda s: setattr(s.weather, "size_range", (5.0, 1.0)),
    ])
    def test_validate_rejects(self, change):
        settings = PlanetSettings()
        change(settings)
        with pytest.raises(ValueError):
            settings.validate()

    def test_defaults_valid(self):
        PlanetSettings().validate()


class TestCommandLine:
    def test_writes_archive(self, tmp_path, capsys):
        from main import main

        output = tmp_path / "planet.npz"
        code = main(["--splits", "2", "--iterations", "2", "--batch-size", "1",
                     "--seed", "3", "--no-weather", "--output", str(output)])
        assert code == 0
        with np.load(output) as archive:
            assert archive["indices"].shape == (240,)
            assert archive["positions"].shape[1] == 3
        assert "Vertices: 42" in capsys.readouterr().out

    def test_invalid_arguments(self):
        from main import main

        assert main(["--splits", "-1"]) == 2
