# world/noise.py
"""
Layered 3D Perlin noise for planet terrain.

Gradient noise with hash-derived corner gradients: every integer lattice
corner gets a pseudo-random direction computed from its coordinates alone,
so the field is pure and identical inputs always produce identical terrain.

All functions accept a single point of shape (3,) or an (N, 3) array and are
vectorised over N.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

# Dot directions used to turn a lattice corner into three unrelated scalars
_HASH_DIRECTIONS = np.array([
    [12.989, 78.233, 37.719],
    [39.346, 11.135, 83.155],
    [73.156, 52.235, 9.151],
])
_HASH_SCALE = 143758.5453

_CORNERS = tuple((x, y, z) for z in (0, 1) for y in (0, 1) for x in (0, 1))


def _frac(values: np.ndarray) -> np.ndarray:
    return values - np.floor(values)


def corner_gradients(cells: np.ndarray) -> np.ndarray:
    """Pseudo-random gradient in [-1, 1)^3 for each (N, 3) lattice corner."""
    # sin() first keeps large coordinates from losing precision in the hash
    projected = np.sin(cells) @ _HASH_DIRECTIONS.T
    return _frac(np.sin(projected) * _HASH_SCALE) * 2.0 - 1.0


def ease_in_out(t: np.ndarray) -> np.ndarray:
    """S-curve: blend of t^2 and 1-(1-t)^2 by t, equal to 3t^2 - 2t^3."""
    ease_in = t * t
    ease_out = 1.0 - (1.0 - t) * (1.0 - t)
    return ease_in + (ease_out - ease_in) * t


def perlin_noise(points) -> np.ndarray | float:
    """3D gradient noise, roughly in [-0.5, 0.5].

    Args:
        points: (3,) or (N, 3) sample positions.

    Returns:
        A float for a single point, otherwise an (N,) array.
    """
    pts = np.asarray(points, dtype=np.float64)
    single = pts.ndim == 1
    pts = np.atleast_2d(pts)

    base = np.floor(pts)
    fraction = pts - base
    interp = ease_in_out(fraction)

    # corner_noise[z, y, x] -> (N,)
    corner_noise = np.empty((2, 2, 2, len(pts)), dtype=np.float64)
    for x, y, z in _CORNERS:
        offset = np.array([x, y, z], dtype=np.float64)
        gradient = corner_gradients(base + offset)
        corner_noise[z, y, x] = np.einsum("ij,ij->i", gradient, fraction - offset)

    along_x = corner_noise[:, :, 0] + (corner_noise[:, :, 1] - corner_noise[:, :, 0]) * interp[:, 0]
    along_y = along_x[:, 0] + (along_x[:, 1] - along_x[:, 0]) * interp[:, 1]
    noise = along_y[0] + (along_y[1] - along_y[0]) * interp[:, 2]

    if single:
        return float(noise[0])
    return noise


def layered_noise(
    points,
    cell_sizes: Sequence[float],
    weights: Sequence[float],
    offset: Sequence[float] | None = None,
) -> np.ndarray | float:
    """Weighted sum of four noise octaves, each remapped to roughly [0, 1].

    Args:
        points: (3,) or (N, 3) sample positions.
        cell_sizes: Four lattice cell sizes; larger cells = smoother terrain.
        weights: Four weights, one per cell size.
        offset: Optional translation applied before sampling.

    Raises:
        ValueError: If cell_sizes or weights are not four values, or a
            cell size is zero.
    """
    if len(cell_sizes) != 4 or len(weights) != 4:
        raise ValueError("layered noise needs exactly 4 cell sizes and 4 weights")
    if any(size == 0 for size in cell_sizes):
        raise ValueError(f"noise cell sizes must be non-zero, got {tuple(cell_sizes)}")

    pts = np.asarray(points, dtype=np.float64)
    if offset is not None:
        pts = pts + np.asarray(offset, dtype=np.float64)

    total = 0.0
    for size, weight in zip(cell_sizes, weights):
        total = total + (np.asarray(perlin_noise(pts / size)) + 0.5) * weight

    if pts.ndim == 1:
        return float(total)
    return total


def displace_vertices(
    vertices: np.ndarray,
    altitude: float,
    cell_sizes: Sequence[float],
    weights: Sequence[float],
    offset: Sequence[float] | None = None,
) -> np.ndarray:
    """Push each vertex outward along its direction by noise * altitude."""
    noise = np.asarray(layered_noise(vertices, cell_sizes, weights, offset))
    lengths = np.linalg.norm(vertices, axis=1, keepdims=True)
    directions = np.divide(vertices, lengths, out=np.zeros_like(vertices), where=lengths > 0)
    return vertices + directions * (noise * altitude)[:, None]
