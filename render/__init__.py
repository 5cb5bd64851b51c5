"""
Rendering module for the pygame-ce planet viewer.

Provides the globe renderer, status HUD and overlays.
"""
from render.colors import Color, terrain_colors
from render.primitives import draw_text, draw_section_header, draw_progress_bar
from render.globe import GlobeView, render_globe, shaded_face_colors
from render.hud import render_hud
from render.overlays import render_banner, render_help_overlay, render_event_log, message_color

__all__ = [
    # Colors
    "Color",
    "terrain_colors",
    # Primitives
    "draw_text",
    "draw_section_header",
    "draw_progress_bar",
    # Globe
    "GlobeView",
    "render_globe",
    "shaded_face_colors",
    # HUD
    "render_hud",
    # Overlays
    "render_banner",
    "render_help_overlay",
    "render_event_log",
    "message_color",
]
