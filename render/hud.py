# render/hud.py
"""HUD panels: generator status, planet statistics, simulation counters."""
from __future__ import annotations

from typing import TYPE_CHECKING

from render.primitives import draw_progress_bar, draw_section_header, draw_text
from render.config import (
    LINE_HEIGHT,
    SECTION_SPACING,
    COLOR_TEXT_GRAY,
)

if TYPE_CHECKING:
    from planet_state import TerrainGenerator
    from render.globe import GlobeView


def render_hud(
    screen,
    font,
    generator: "TerrainGenerator",
    view: "GlobeView",
    hud_x: int,
    start_y: int,
    width: int,
) -> int:
    """Render the status panels. Returns final y position."""
    y_offset = start_y

    y_offset = draw_section_header(screen, font, "GENERATOR", (hud_x, y_offset), width=width) + 4
    draw_text(screen, font, f"State: {generator.state.value}", (hud_x, y_offset))
    y_offset += LINE_HEIGHT
    draw_progress_bar(screen, (hud_x, y_offset + 4), width, generator.progress)
    y_offset += LINE_HEIGHT + SECTION_SPACING

    settings = generator.settings
    y_offset = draw_section_header(screen, font, "PLANET", (hud_x, y_offset), width=width) + 4
    if generator.mesh is not None:
        draw_text(screen, font, f"Vertices: {generator.mesh.vertex_count}", (hud_x, y_offset))
        y_offset += LINE_HEIGHT
        draw_text(screen, font, f"Faces: {generator.mesh.face_count}", (hud_x, y_offset))
        y_offset += LINE_HEIGHT
    draw_text(screen, font, f"Splits: {settings.splits}  Radius: {settings.planet_radius:g}",
              (hud_x, y_offset), color=COLOR_TEXT_GRAY)
    y_offset += LINE_HEIGHT
    draw_text(screen, font, f"Seed: {settings.seed}  Zoom: {view.zoom:.1f}x",
              (hud_x, y_offset), color=COLOR_TEXT_GRAY)
    y_offset += LINE_HEIGHT + SECTION_SPACING

    y_offset = draw_section_header(screen, font, "EROSION", (hud_x, y_offset), width=width) + 4
    if generator.simulator is None:
        draw_text(screen, font, "Not run yet", (hud_x, y_offset), color=COLOR_TEXT_GRAY)
        return y_offset + LINE_HEIGHT + SECTION_SPACING

    stats = generator.simulator.get_stats()
    lines = (
        f"Iterations: {generator.iterations}/{settings.erosion.total_iterations}",
        f"Droplets: {stats['droplets']}",
        f"Clouds: {stats['clouds']}",
        f"Eroded: {stats['eroded']:.3f}",
        f"Deposited: {stats['deposited']:.3f}",
    )
    for line in lines:
        draw_text(screen, font, line, (hud_x, y_offset))
        y_offset += LINE_HEIGHT
    return y_offset + SECTION_SPACING
