# render/overlays.py
"""Overlay rendering: controls help, pause banner, event log."""
from __future__ import annotations

from typing import Deque, Sequence, Tuple

import pygame

from render.primitives import Color, draw_text
from render.config import (
    LINE_HEIGHT,
    COLOR_BG_PANEL,
    COLOR_BORDER,
    COLOR_LOG_DEFAULT,
    COLOR_LOG_ERROR,
    COLOR_LOG_WEATHER,
    COLOR_TEXT_HIGHLIGHT,
    COLOR_TEXT_GRAY,
    COLOR_TEXT_DIM,
)

ROW_HEIGHT = 18


def _split_control(control: str) -> Tuple[str, str]:
    """'G: generate new planet' -> ('G', 'generate new planet')."""
    key, sep, description = control.partition(":")
    if not sep:
        return "", control
    return key.strip(), description.strip()


def render_help_overlay(
    surface,
    font,
    controls: Sequence[str],
    pos: Tuple[int, int],
    available_width: int,
    available_height: int,
) -> None:
    """Render the controls as an aligned key / description table.

    Args:
        surface: The pygame surface to draw on.
        font: The pygame font to use for rendering text.
        controls: "Key: description" strings.
        pos: The (x, y) coordinates for the top-left corner of the overlay.
        available_width: The maximum width for the overlay.
        available_height: The maximum height for the overlay.
    """
    x, y = pos
    bottom = pos[1] + available_height

    pygame.draw.rect(surface, COLOR_BG_PANEL, (x - 4, y - 4, available_width, available_height), 0)
    draw_text(surface, font, "CONTROLS", (x, y), color=COLOR_TEXT_HIGHLIGHT)
    y += ROW_HEIGHT + 4

    rows = [_split_control(control) for control in controls]
    key_width = max((font.size(key)[0] for key, _ in rows), default=0) + 12
    for key, description in rows:
        if y + ROW_HEIGHT >= bottom:
            break
        draw_text(surface, font, key, (x, y), color=COLOR_TEXT_HIGHLIGHT)
        draw_text(surface, font, description, (x + key_width, y), color=COLOR_TEXT_GRAY)
        y += ROW_HEIGHT


def render_banner(surface, font, text: str, pos: Tuple[int, int], width: int) -> int:
    """Boxed one-line notice (e.g. PAUSED). Returns the y below the box."""
    x, y = pos
    height = LINE_HEIGHT + 8
    pygame.draw.rect(surface, COLOR_BG_PANEL, (x, y, width, height), 0)
    pygame.draw.rect(surface, COLOR_BORDER, (x, y, width, height), 1)
    draw_text(surface, font, text, (x + 6, y + 4), color=COLOR_TEXT_HIGHLIGHT)
    return y + height


def message_color(message: str) -> Color:
    """Log color for a generator message."""
    if message.startswith("Simulation halted"):
        return COLOR_LOG_ERROR
    if message.startswith("Cloud"):
        return COLOR_LOG_WEATHER
    return COLOR_LOG_DEFAULT


def render_event_log(
    surface,
    font,
    messages: Deque[str],
    pos: Tuple[int, int],
    max_height: int,
) -> int:
    """Render the newest generator messages that fit, oldest at the top.

    Returns:
        Number of visible message slots.
    """
    log_x, log_y = pos
    total_messages = len(messages)

    draw_text(surface, font, "EVENT LOG", (log_x, log_y), color=COLOR_TEXT_HIGHLIGHT)
    log_y += LINE_HEIGHT + 4

    visible_count = (max_height - 40) // ROW_HEIGHT
    if visible_count <= 0:
        return 0

    # Index into the deque instead of copying it every frame
    start_idx = max(0, total_messages - visible_count)
    for i in range(start_idx, total_messages):
        message = messages[i]
        draw_text(surface, font, f"- {message}", (log_x, log_y), color=message_color(message))
        log_y += ROW_HEIGHT

    if start_idx > 0:
        draw_text(surface, font, f"[{start_idx} older]", (log_x, log_y), color=COLOR_TEXT_DIM)

    return visible_count

