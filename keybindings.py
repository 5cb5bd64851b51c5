"""
keybindings.py - Centralized key mappings for the planet viewer (Pygame version)

Single source of truth for all keyboard controls.
"""
from __future__ import annotations

import pygame


def _key(name: str) -> int:
    """Get pygame key constant by name."""
    return getattr(pygame, f"K_{name}", 0)


# Generation / simulation
GENERATE_KEY = _key("g")      # Build a new planet (reseeded)
SIMULATE_KEY = _key("e")      # Run erosion on the current planet
WEATHER_KEY = _key("c")       # Toggle cloud-driven droplets for the next run
PAUSE_KEY = _key("SPACE")     # Stop/resume ticking the generator

# View
ROTATE_LEFT_KEY = _key("LEFT")
ROTATE_RIGHT_KEY = _key("RIGHT")
TILT_UP_KEY = _key("UP")
TILT_DOWN_KEY = _key("DOWN")
SPIN_KEY = _key("r")          # Toggle automatic rotation
ZOOM_IN_KEYS = (_key("EQUALS"), _key("PLUS"))
ZOOM_OUT_KEYS = (_key("MINUS"),)

# System keys
QUIT_KEY = _key("ESCAPE")
HELP_KEY = _key("h")

# Control descriptions for help display
CONTROL_DESCRIPTIONS = [
    "G: generate new planet",
    "E: run erosion",
    "C: toggle clouds",
    "Space: pause/resume",
    "Arrows: rotate/tilt",
    "R: toggle spin",
    "+/-, wheel: zoom",
    "H: help",
    "Esc: quit",
]
