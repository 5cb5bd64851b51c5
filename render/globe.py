# render/globe.py
"""Globe rendering: flat-shaded orthographic view of a mesh snapshot.

Triangles are rotated into camera space, back faces are culled and the rest
are drawn far-to-near (painter's algorithm) so no depth buffer is needed.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pygame

from render.colors import terrain_colors
from render.config import (
    AMBIENT_LIGHT,
    GLOBE_FILL,
    INITIAL_PITCH,
    LIGHT_DIRECTION,
    ZOOM_MAX,
    ZOOM_MIN,
)
from world.mesh import MeshSnapshot, face_normals


@dataclass
class GlobeView:
    """Orientation and zoom of the viewer's camera."""
    yaw: float = 0.0
    pitch: float = INITIAL_PITCH
    zoom: float = 1.0

    def rotate(self, d_yaw: float, d_pitch: float = 0.0) -> None:
        self.yaw = (self.yaw + d_yaw) % (2.0 * math.pi)
        self.pitch = max(-math.pi / 2, min(math.pi / 2, self.pitch + d_pitch))

    def set_zoom(self, zoom: float) -> None:
        self.zoom = max(ZOOM_MIN, min(ZOOM_MAX, zoom))

    def rotation_matrix(self) -> np.ndarray:
        """World -> camera rotation (yaw around +y, then pitch around +x)."""
        cy, sy = math.cos(self.yaw), math.sin(self.yaw)
        cp, sp = math.cos(self.pitch), math.sin(self.pitch)
        yaw = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
        pitch = np.array([[1.0, 0.0, 0.0], [0.0, cp, -sp], [0.0, sp, cp]])
        return pitch @ yaw


def shaded_face_colors(
    snapshot: MeshSnapshot,
    faces: np.ndarray,
    camera_normals: np.ndarray,
    ocean_level: float,
) -> np.ndarray:
    """
    Lit RGB per face: terrain ramp x erosion tint x Lambert light.

    Args:
        snapshot: Mesh buffers to color.
        faces: (F, 3) vertex handles of the faces to color.
        camera_normals: (F, 3) unit face normals in camera space.
        ocean_level: Height separating ocean from land colors.
    """
    heights = np.linalg.norm(snapshot.positions, axis=1)
    vertex_rgb = terrain_colors(heights, ocean_level) * snapshot.colors[:, :3]
    face_rgb = vertex_rgb[faces].mean(axis=1)

    light = np.array(LIGHT_DIRECTION, dtype=np.float64)
    light /= np.linalg.norm(light)
    lambert = np.clip(camera_normals @ light, 0.0, 1.0)
    intensity = AMBIENT_LIGHT + (1.0 - AMBIENT_LIGHT) * lambert
    return np.clip(face_rgb * intensity[:, None], 0, 255).astype(np.int32)


def render_globe(
    surface: pygame.Surface,
    snapshot: MeshSnapshot,
    view: GlobeView,
    rect: pygame.Rect,
    ocean_level: float,
) -> int:
    """
    Draw the snapshot into `rect`.

    Returns:
        Number of triangles drawn.
    """
    if snapshot.triangle_count == 0:
        return 0

    positions = snapshot.positions.astype(np.float64) @ view.rotation_matrix().T
    faces = snapshot.indices.reshape(-1, 3).astype(np.int64)

    normals = face_normals(positions, faces)
    lengths = np.linalg.norm(normals, axis=1)
    visible = (normals[:, 2] > 0) & (lengths > 0)
    if not np.any(visible):
        return 0
    faces = faces[visible]
    normals = normals[visible] / lengths[visible][:, None]

    colors = shaded_face_colors(snapshot, faces, normals, ocean_level)

    extent = float(np.max(np.linalg.norm(positions, axis=1))) or 1.0
    scale = rect.height * GLOBE_FILL * 0.5 / extent * view.zoom
    screen_x = rect.centerx + positions[:, 0] * scale
    screen_y = rect.centery - positions[:, 1] * scale

    depth = positions[faces, 2].mean(axis=1)
    order = np.argsort(depth)

    for face_index in order.tolist():
        a, b, c = faces[face_index]
        points: Tuple[Tuple[float, float], ...] = (
            (screen_x[a], screen_y[a]),
            (screen_x[b], screen_y[b]),
            (screen_x[c], screen_y[c]),
        )
        pygame.draw.polygon(surface, tuple(colors[face_index]), points)
    return len(order)
