# render/config.py
"""
Configuration constants for the rendering domain.
Includes window dimensions, globe shading, colors and font sizes.
"""
from __future__ import annotations

from typing import Tuple

# =============================================================================
# WINDOW & LAYOUT
# =============================================================================
VIRTUAL_WIDTH = 1280
VIRTUAL_HEIGHT = 720

SIDEBAR_WIDTH = 300
LINE_HEIGHT = 20
FONT_SIZE = 18
SECTION_SPACING = 8
LOG_PANEL_HEIGHT = 260
TARGET_FPS = 60

# =============================================================================
# GLOBE VIEW
# =============================================================================
GLOBE_FILL = 0.85                     # Fraction of the viewport height the planet spans
ROTATION_SPEED = 0.35                 # Radians per second of automatic spin
MANUAL_ROTATION_STEP = 0.1            # Radians per arrow key press
ZOOM_STEP = 0.1
ZOOM_MIN = 0.3
ZOOM_MAX = 4.0
INITIAL_PITCH = 0.35                  # Tilt towards the viewer, radians

# Direction the sunlight comes from (camera space, +z towards the viewer)
LIGHT_DIRECTION: Tuple[float, float, float] = (-0.4, 0.5, 0.75)
AMBIENT_LIGHT = 0.25

# =============================================================================
# COLORS
# =============================================================================
# UI Colors
COLOR_BG_DARK = (20, 20, 25)
COLOR_BG_PANEL = (25, 25, 30)
COLOR_BORDER = (40, 40, 40)
COLOR_TEXT_WHITE = (230, 230, 230)
COLOR_TEXT_GRAY = (160, 160, 160)
COLOR_TEXT_DIM = (100, 100, 100)
COLOR_TEXT_HIGHLIGHT = (220, 200, 120)
COLOR_PROGRESS_BAR = (200, 200, 80)
COLOR_PROGRESS_BG = (50, 50, 50)

# Event log text by message kind
COLOR_LOG_DEFAULT = (160, 200, 160)
COLOR_LOG_WEATHER = (140, 180, 230)
COLOR_LOG_ERROR = (230, 110, 100)

# Terrain ramp
COLOR_OCEAN_DEEP = (28, 70, 140)
COLOR_OCEAN_SHALLOW = (70, 140, 210)
COLOR_LOWLAND = (96, 150, 72)
COLOR_HIGHLAND = (150, 130, 100)
COLOR_PEAK = (235, 235, 235)
