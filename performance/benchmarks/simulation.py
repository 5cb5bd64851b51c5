#!/usr/bin/env python3
"""
Performance benchmarking script for planet generation and erosion.

Drives a TerrainGenerator headless (no rendering) and measures how long each
generator state takes per tick, peak memory, and the hot code paths.

Usage:
    python -m performance.benchmarks.simulation [compare]
"""
from __future__ import annotations

import cProfile
import io
import pstats
import time
import tracemalloc
from statistics import mean, median, stdev
from typing import Dict, List, Sequence, Tuple

from planet_state import PlanetSettings, TerrainGenerator, TickStatus


class Timer:
    """Context manager for timing code blocks."""

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed = time.perf_counter() - self.start


def get_time_stats(times: List[float]) -> Tuple[float, float, float, float, float]:
    """Returns (mean, median, stdev, min, max) in seconds."""
    if not times:
        return (0.0, 0.0, 0.0, 0.0, 0.0)
    return (
        mean(times),
        median(times),
        stdev(times) if len(times) > 1 else 0.0,
        min(times),
        max(times),
    )


class PerformanceMetrics:
    """Tick timings grouped by the generator state that ran them."""

    def __init__(self, settings: PlanetSettings):
        self.settings = settings
        self.state_times: Dict[str, List[float]] = {}
        self.memory_snapshots: List[int] = []  # Bytes
        self.total_time: float = 0.0
        self.vertex_count = 0
        self.face_count = 0
        self.droplets = 0

    def record_tick(self, state: str, duration: float) -> None:
        self.state_times.setdefault(state, []).append(duration)

    def record_memory(self) -> None:
        current, _peak = tracemalloc.get_traced_memory()
        self.memory_snapshots.append(current)

    @property
    def tick_count(self) -> int:
        return sum(len(times) for times in self.state_times.values())

    def print_report(self) -> None:
        """Print a performance report."""
        print("\n" + "=" * 80)
        print("PLANET GENERATOR PERFORMANCE REPORT")
        print(f"Splits: {self.settings.splits}  Vertices: {self.vertex_count}  Faces: {self.face_count}")
        print("=" * 80)

        print("\nOVERALL")
        print(f"  Total Runtime:      {self.total_time:.2f}s")
        print(f"  Total Ticks:        {self.tick_count}")
        print(f"  Droplets:           {self.droplets}")

        print("\nTICK TIMING BY STATE (mean / median / max)")
        for state, times in self.state_times.items():
            avg, med, _dev, _low, high = get_time_stats(times)
            share = sum(times) / self.total_time * 100 if self.total_time else 0.0
            print(f"  {state:22s} {len(times):6d} ticks  {avg * 1000:8.2f}ms  "
                  f"{med * 1000:8.2f}ms  {high * 1000:8.2f}ms  ({share:5.1f}%)")

        if self.memory_snapshots:
            print("\nMEMORY USAGE")
            print(f"  Mean:               {mean(self.memory_snapshots) / 1024 / 1024:.1f} MB")
            print(f"  Peak:               {max(self.memory_snapshots) / 1024 / 1024:.1f} MB")

        print("\n" + "=" * 80)


def _print_hotspots(profiler: cProfile.Profile, sort_key: str, title: str) -> None:
    print(f"\nHOT CODE PATHS (Top 20 functions by {title})")
    print("=" * 80)
    s = io.StringIO()
    pstats.Stats(profiler, stream=s).sort_stats(sort_key).print_stats(20)
    for line in s.getvalue().split('\n')[:25]:
        if line.strip():
            print(line)


def run_benchmark(
    splits: int = 16,
    iterations: int = 1000,
    seed: int = 1,
    profile_hotspots: bool = True,
    report: bool = True,
) -> PerformanceMetrics:
    """
    Generate a planet and erode it, timing every tick.

    Args:
        splits: Icosphere subdivisions.
        iterations: Simulation iterations to run after generation.
        seed: Random seed, so repeated benchmarks do the same work.
        profile_hotspots: If True, run cProfile to identify hot code paths.
        report: Print the report when done.

    Returns:
        PerformanceMetrics object with collected data
    """
    settings = PlanetSettings(splits=splits, seed=seed)
    settings.erosion.total_iterations = iterations
    print(f"\nStarting benchmark: splits={splits}, {iterations} iterations...")

    tracemalloc.start()
    metrics = PerformanceMetrics(settings)
    generator = TerrainGenerator(settings)
    generator.generate(simulate=iterations > 0)

    profiler = cProfile.Profile() if profile_hotspots else None
    if profiler is not None:
        profiler.enable()

    with Timer() as total:
        status = TickStatus.IN_PROGRESS
        while status == TickStatus.IN_PROGRESS:
            state = generator.state.value
            with Timer() as tick:
                status = generator.tick()
            metrics.record_tick(state, tick.elapsed)
            if metrics.tick_count % 20 == 0:
                metrics.record_memory()
                print(f"    {state}: {generator.progress * 100:.0f}%", end='\r')

    if profiler is not None:
        profiler.disable()
    metrics.record_memory()
    tracemalloc.stop()

    metrics.total_time = total.elapsed
    metrics.vertex_count = generator.mesh.vertex_count
    metrics.face_count = generator.mesh.face_count
    if generator.simulator is not None:
        metrics.droplets = generator.simulator.droplets
    print(f"    Finished with status {status.value}" + " " * 20)

    if report:
        metrics.print_report()
    if profiler is not None:
        _print_hotspots(profiler, 'cumulative', "cumulative time")
        _print_hotspots(profiler, 'tottime', "total time")
    return metrics


def compare_splits(split_counts: Sequence[int] = (4, 8, 16, 24), iterations: int = 200) -> None:
    """Run benchmarks at several mesh resolutions for comparison."""
    print("\n" + "=" * 80)
    print("MESH RESOLUTION COMPARISON BENCHMARK")
    print("=" * 80)

    rows = []
    for splits in split_counts:
        metrics = run_benchmark(splits, iterations, profile_hotspots=False, report=False)
        simulating = metrics.state_times.get("simulating", [])
        rows.append((splits, metrics.face_count, metrics.total_time,
                     mean(simulating) if simulating else 0.0))

    print(f"\n{'splits':<8} {'faces':<10} {'total':<10} {'sim tick':<10}")
    print("-" * 40)
    for splits, faces, total, sim_tick in rows:
        print(f"{splits:<8} {faces:<10} {total:<10.2f} {sim_tick * 1000:<10.2f}")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "compare":
        compare_splits()
    else:
        run_benchmark(splits=16, iterations=1000, profile_hotspots=True)
