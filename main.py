# main.py
"""
Planet Generator - headless command line host.

Builds an icosphere planet, displaces it with layered noise and optionally
runs cloud-driven hydraulic erosion over it, ticking the generator to
completion and reporting timings and mesh statistics. The final mesh buffers
can be written to an .npz archive for an external renderer.

For the interactive viewer run pygame_runner.py instead.
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Dict, List, Optional

import numpy as np

from planet_state import PlanetSettings, TerrainGenerator, TickStatus
from world.mesh import MeshSnapshot

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = PlanetSettings()
    parser = argparse.ArgumentParser(description="Generate and erode a spherical planet.")
    parser.add_argument("--splits", type=int, default=defaults.splits,
                        help="icosahedron face subdivisions (faces = 20 * splits^2)")
    parser.add_argument("--radius", type=float, default=defaults.planet_radius,
                        help="radius of the undisplaced sphere")
    parser.add_argument("--altitude", type=float, default=defaults.altitude,
                        help="noise displacement scale")
    parser.add_argument("--ocean-level", type=float, default=defaults.ocean_level,
                        help="vertices closer to the center than this are ocean")
    parser.add_argument("--seed", type=int, default=None,
                        help="random seed for reproducible erosion runs")
    parser.add_argument("--iterations", type=int, default=defaults.erosion.total_iterations,
                        help="total simulation iterations")
    parser.add_argument("--batch-size", type=int, default=defaults.erosion.batch_size,
                        help="simulation iterations per tick")
    parser.add_argument("--erosion-radius", type=int, default=defaults.erosion.radius,
                        help="erosion brush radius in mesh hops")
    parser.add_argument("--no-weather", action="store_true",
                        help="rain droplets uniformly instead of under clouds")
    parser.add_argument("--no-simulate", action="store_true",
                        help="stop after generating the terrain")
    parser.add_argument("--output", default=None,
                        help="write the final mesh buffers to this .npz file")
    parser.add_argument("--geographic", action="store_true",
                        help="write the lon/lat projection instead of the globe")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def settings_from_args(args: argparse.Namespace) -> PlanetSettings:
    settings = PlanetSettings(
        planet_radius=args.radius,
        ocean_level=args.ocean_level,
        altitude=args.altitude,
        splits=args.splits,
        simulate_weather=not args.no_weather,
        seed=args.seed,
    )
    settings.erosion.total_iterations = args.iterations
    settings.erosion.batch_size = args.batch_size
    settings.erosion.radius = args.erosion_radius
    return settings


def run_to_completion(generator: TerrainGenerator) -> Dict[str, float]:
    """Tick until the generator is idle, timing each state.

    Returns:
        Seconds spent per state name.
    """
    timings: Dict[str, float] = {}
    status = TickStatus.IN_PROGRESS
    while status == TickStatus.IN_PROGRESS:
        state = generator.state.value
        start = time.perf_counter()
        status = generator.tick()
        timings[state] = timings.get(state, 0.0) + time.perf_counter() - start
    if status == TickStatus.ERROR:
        raise RuntimeError(generator.messages[-1] if generator.messages else "generator error")
    return timings


def save_snapshot(snapshot: MeshSnapshot, path: str) -> None:
    np.savez_compressed(
        path,
        positions=snapshot.positions,
        normals=snapshot.normals,
        colors=snapshot.colors,
        indices=snapshot.indices,
    )


def summarize(generator: TerrainGenerator, timings: Dict[str, float]) -> List[str]:
    lines: List[str] = []
    mesh = generator.mesh
    heights = mesh.radial_heights()
    lines.append(f"Vertices: {mesh.vertex_count}  Faces: {mesh.face_count}")
    lines.append(f"Height: min {heights.min():.3f}  max {heights.max():.3f}  mean {heights.mean():.3f}")
    ocean = int(np.count_nonzero(heights < generator.settings.ocean_level))
    lines.append(f"Ocean vertices: {ocean} ({100.0 * ocean / mesh.vertex_count:.1f}%)")
    if generator.simulator is not None:
        stats = generator.simulator.get_stats()
        lines.append(
            f"Erosion: {stats['iterations']} iterations, {stats['droplets']} droplets, "
            f"eroded {stats['eroded']:.4f}, deposited {stats['deposited']:.4f}"
        )
    for state, seconds in timings.items():
        lines.append(f"  {state:<22} {seconds * 1000:10.1f} ms")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        settings = settings_from_args(args)
        settings.validate()
    except ValueError as exc:
        logger.error("Invalid settings: %s", exc)
        return 2

    generator = TerrainGenerator(settings)
    generator.generate(simulate=not args.no_simulate)
    try:
        timings = run_to_completion(generator)
    except RuntimeError as exc:
        logger.error("Generation failed: %s", exc)
        return 1

    for line in summarize(generator, timings):
        print(line)

    if args.output:
        snapshot = generator.project_to_geographic() if args.geographic else generator.snapshot()
        save_snapshot(snapshot, args.output)
        logger.info("Wrote %d vertices to %s", snapshot.vertex_count, args.output)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(0)
