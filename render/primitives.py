# render/primitives.py
"""Text and bar primitives shared by the HUD and overlays."""
from __future__ import annotations

from typing import Dict, Tuple

import pygame

from render.config import (
    COLOR_BORDER,
    COLOR_PROGRESS_BAR,
    COLOR_PROGRESS_BG,
    COLOR_TEXT_HIGHLIGHT,
    COLOR_TEXT_WHITE,
    LINE_HEIGHT,
)

Color = Tuple[int, int, int]

# Rendered text surfaces keyed by (font id, text, color). Counters in the
# HUD change every tick, so the cache is dropped once it grows past the cap.
_TEXT_CACHE: Dict[Tuple[int, str, Color], pygame.Surface] = {}
_TEXT_CACHE_LIMIT = 512


def draw_text(surface, font, text: str, pos: Tuple[int, int], color: Color = COLOR_TEXT_WHITE) -> int:
    """Blit cached text at `pos`. Returns the rendered width in pixels."""
    cache_key = (id(font), text, color)
    rendered = _TEXT_CACHE.get(cache_key)
    if rendered is None:
        if len(_TEXT_CACHE) >= _TEXT_CACHE_LIMIT:
            _TEXT_CACHE.clear()
        rendered = font.render(text, True, color)
        _TEXT_CACHE[cache_key] = rendered
    surface.blit(rendered, pos)
    return rendered.get_width()


def draw_section_header(surface, font, text: str, pos: Tuple[int, int], width: int = 200) -> int:
    """Highlighted title with a rule under it. Returns the y below the rule."""
    x, y = pos
    draw_text(surface, font, text, (x, y), color=COLOR_TEXT_HIGHLIGHT)
    y += LINE_HEIGHT
    pygame.draw.line(surface, (100, 100, 80), (x, y), (x + width, y), 1)
    return y + 6


def draw_progress_bar(surface, pos: Tuple[int, int], width: int, fraction: float, height: int = 8) -> None:
    """Outlined bar filled to `fraction` (clamped to 0..1)."""
    x, y = pos
    pygame.draw.rect(surface, COLOR_PROGRESS_BG, (x, y, width, height), 0)
    filled = int(width * max(0.0, min(1.0, fraction)))
    if filled > 0:
        pygame.draw.rect(surface, COLOR_PROGRESS_BAR, (x, y, filled, height), 0)
    pygame.draw.rect(surface, COLOR_BORDER, (x, y, width, height), 1)
