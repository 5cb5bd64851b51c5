"""Simulation modules for the planet.

- brush: Per-vertex erosion brushes and their cache
- erosion: Droplet hydraulic erosion driven by clouds
"""

from simulation.brush import ErosionBrushCache, build_erosion_brush
from simulation.erosion import DropletResult, ErosionSimulator

__all__ = ["ErosionBrushCache", "build_erosion_brush", "DropletResult", "ErosionSimulator"]
