# render/colors.py
"""Elevation-based terrain colors for the globe view (vectorised over vertices)."""
from __future__ import annotations

from typing import Tuple

import numpy as np

from render.config import (
    COLOR_HIGHLAND,
    COLOR_LOWLAND,
    COLOR_OCEAN_DEEP,
    COLOR_OCEAN_SHALLOW,
    COLOR_PEAK,
)

Color = Tuple[int, int, int]


def _ramp(low: Color, high: Color, t: np.ndarray) -> np.ndarray:
    low_arr = np.array(low, dtype=np.float64)
    high_arr = np.array(high, dtype=np.float64)
    return low_arr + (high_arr - low_arr) * t[:, None]


def terrain_colors(heights: np.ndarray, ocean_level: float) -> np.ndarray:
    """
    Base RGB (0-255) per vertex from its height.

    Below ocean_level: deep to shallow blue. Above: green lowland through
    brown highland to white peaks.
    """
    colors = np.empty((len(heights), 3), dtype=np.float64)
    if len(heights) == 0:
        return colors
    min_h, max_h = float(heights.min()), float(heights.max())

    ocean = heights < ocean_level
    if np.any(ocean):
        span = max(ocean_level - min_h, 1e-9)
        t = np.clip((heights[ocean] - min_h) / span, 0.0, 1.0)
        colors[ocean] = _ramp(COLOR_OCEAN_DEEP, COLOR_OCEAN_SHALLOW, t)

    land = ~ocean
    if np.any(land):
        span = max(max_h - ocean_level, 1e-9)
        t = np.clip((heights[land] - ocean_level) / span, 0.0, 1.0)
        low = np.clip(t * 2.0, 0.0, 1.0)
        high = np.clip(t * 2.0 - 1.0, 0.0, 1.0)
        lowland = _ramp(COLOR_LOWLAND, COLOR_HIGHLAND, low)
        peak = np.array(COLOR_PEAK, dtype=np.float64)
        colors[land] = lowland + (peak - lowland) * high[:, None]
    return colors
