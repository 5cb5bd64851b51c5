# pygame_runner.py
"""
Pygame-CE viewer for the planet generator.

Architecture:
- The viewer is the host loop: it issues one generator tick per frame, so a
  subdivision face or a simulation batch never blocks the window for long
- Virtual screen space: fixed 1280x720 layout surface
- Screen space: actual window pixels (scales with resize)

The globe is redrawn from the generator's latest snapshot, which is a copy,
so the next tick never mutates what is on screen.

Controls:
- G: generate a new planet
- E: run erosion on the current planet
- C: toggle clouds for the next run
- Space: pause/resume ticking
- Arrows: rotate/tilt, R: toggle spin, +/- or wheel: zoom
- H: show help
- ESC: quit
"""
from __future__ import annotations

import logging
import random
import sys
from typing import Tuple

try:
    import pygame
except ImportError as exc:
    raise SystemExit("pygame-ce is required. Install with: pip install pygame-ce") from exc

from keybindings import (
    CONTROL_DESCRIPTIONS,
    GENERATE_KEY,
    HELP_KEY,
    PAUSE_KEY,
    QUIT_KEY,
    ROTATE_LEFT_KEY,
    ROTATE_RIGHT_KEY,
    SIMULATE_KEY,
    SPIN_KEY,
    TILT_DOWN_KEY,
    TILT_UP_KEY,
    WEATHER_KEY,
    ZOOM_IN_KEYS,
    ZOOM_OUT_KEYS,
)
from planet_state import PlanetSettings, TerrainGenerator, TickStatus
from render import GlobeView, render_banner, render_event_log, render_globe, render_help_overlay, render_hud
from render.config import (
    COLOR_BG_DARK,
    COLOR_BG_PANEL,
    FONT_SIZE,
    LOG_PANEL_HEIGHT,
    MANUAL_ROTATION_STEP,
    ROTATION_SPEED,
    SIDEBAR_WIDTH,
    TARGET_FPS,
    VIRTUAL_HEIGHT,
    VIRTUAL_WIDTH,
    ZOOM_STEP,
)

logger = logging.getLogger(__name__)


def blit_virtual_to_screen(virtual_screen: pygame.Surface, screen: pygame.Surface) -> None:
    """Scale and blit the virtual screen to the actual display, with letterboxing."""
    screen_w, screen_h = screen.get_size()
    scale = min(screen_w / VIRTUAL_WIDTH, screen_h / VIRTUAL_HEIGHT)
    scaled_w = int(VIRTUAL_WIDTH * scale)
    scaled_h = int(VIRTUAL_HEIGHT * scale)
    offset_x = (screen_w - scaled_w) // 2
    offset_y = (screen_h - scaled_h) // 2

    # Fill letterbox areas
    screen.fill((0, 0, 0))

    # Scale and blit
    scaled = pygame.transform.scale(virtual_screen, (scaled_w, scaled_h))
    screen.blit(scaled, (offset_x, offset_y))


def render_to_virtual_screen(
    virtual_screen: pygame.Surface,
    font,
    generator: TerrainGenerator,
    view: GlobeView,
    globe_rect: pygame.Rect,
    show_help: bool,
    paused: bool,
) -> None:
    """Compose the globe, the sidebar and the log panel."""
    virtual_screen.fill(COLOR_BG_DARK)

    # 1. Globe
    snapshot = generator.latest_snapshot
    if snapshot is not None:
        render_globe(virtual_screen, snapshot, view, globe_rect, generator.settings.ocean_level)

    # 2. Sidebar
    sidebar_x = VIRTUAL_WIDTH - SIDEBAR_WIDTH
    pygame.draw.rect(virtual_screen, COLOR_BG_PANEL, (sidebar_x, 0, SIDEBAR_WIDTH, VIRTUAL_HEIGHT), 0)
    y = render_hud(virtual_screen, font, generator, view, sidebar_x + 12, 12, SIDEBAR_WIDTH - 24)
    if paused:
        render_banner(virtual_screen, font, "PAUSED (Space to resume)", (sidebar_x + 12, y), SIDEBAR_WIDTH - 24)

    # 3. Log panel
    log_top = VIRTUAL_HEIGHT - LOG_PANEL_HEIGHT
    pygame.draw.line(virtual_screen, (80, 80, 80), (sidebar_x, log_top), (VIRTUAL_WIDTH, log_top), 2)
    log_x, log_y = sidebar_x + 12, log_top + 8
    if show_help:
        render_help_overlay(virtual_screen, font, CONTROL_DESCRIPTIONS,
                            (log_x, log_y), SIDEBAR_WIDTH - 24, LOG_PANEL_HEIGHT - 16)
    else:
        render_event_log(virtual_screen, font, generator.messages, (log_x, log_y), LOG_PANEL_HEIGHT)


def run(settings: PlanetSettings | None = None, simulate: bool = True) -> None:
    """Main viewer loop."""
    pygame.init()

    # Create virtual screen (fixed internal resolution)
    virtual_screen = pygame.Surface((VIRTUAL_WIDTH, VIRTUAL_HEIGHT))

    # Create actual display window (resizable)
    screen = pygame.display.set_mode((VIRTUAL_WIDTH, VIRTUAL_HEIGHT), pygame.RESIZABLE)
    pygame.display.set_caption("Planet Generator - Hydraulic Erosion")

    font = pygame.font.Font(None, FONT_SIZE)
    clock = pygame.time.Clock()

    generator = TerrainGenerator(settings)
    generator.messages.append("Generating planet. Press H for help.")
    generator.generate(simulate=simulate)

    view = GlobeView()
    globe_rect = pygame.Rect(0, 0, VIRTUAL_WIDTH - SIDEBAR_WIDTH, VIRTUAL_HEIGHT)
    show_help = False
    paused = False
    spinning = True

    running = True
    while running:
        dt = clock.tick(TARGET_FPS) / 1000.0

        # Handle events
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                continue

            if event.type == pygame.MOUSEWHEEL:
                view.set_zoom(view.zoom + event.y * ZOOM_STEP)
                continue

            if event.type != pygame.KEYDOWN:
                continue

            if event.key == QUIT_KEY:
                running = False
            elif event.key == HELP_KEY:
                show_help = not show_help
            elif event.key == PAUSE_KEY:
                paused = not paused
            elif event.key == SPIN_KEY:
                spinning = not spinning
            elif event.key in ZOOM_IN_KEYS:
                view.set_zoom(view.zoom + ZOOM_STEP * 2)
            elif event.key in ZOOM_OUT_KEYS:
                view.set_zoom(view.zoom - ZOOM_STEP * 2)
            elif event.key == ROTATE_LEFT_KEY:
                view.rotate(-MANUAL_ROTATION_STEP)
            elif event.key == ROTATE_RIGHT_KEY:
                view.rotate(MANUAL_ROTATION_STEP)
            elif event.key == TILT_UP_KEY:
                view.rotate(0.0, MANUAL_ROTATION_STEP)
            elif event.key == TILT_DOWN_KEY:
                view.rotate(0.0, -MANUAL_ROTATION_STEP)
            elif generator.busy:
                generator.messages.append("Generator is busy.")
            elif event.key == GENERATE_KEY:
                new_settings = generator.settings
                new_settings.seed = random.randrange(2 ** 31)
                generator.generate(new_settings)
            elif event.key == SIMULATE_KEY:
                generator.run_simulation()
            elif event.key == WEATHER_KEY:
                generator.settings.simulate_weather = not generator.settings.simulate_weather
                state = "on" if generator.settings.simulate_weather else "off"
                generator.messages.append(f"Clouds {state} for the next erosion run.")

        # Generator tick: one unit of work per frame
        if not paused:
            status = generator.tick()
            if status == TickStatus.ERROR:
                logger.warning("Generator reported an error; ticking paused")
                paused = True

        if spinning:
            view.rotate(ROTATION_SPEED * dt)

        render_to_virtual_screen(virtual_screen, font, generator, view, globe_rect, show_help, paused)
        blit_virtual_to_screen(virtual_screen, screen)
        pygame.display.flip()

    pygame.quit()


def _parse_args(argv: Tuple[str, ...]):
    from main import build_parser, settings_from_args

    parser = build_parser()
    parser.description = "Interactive viewer for the planet generator."
    args = parser.parse_args(argv)
    return settings_from_args(args), args


if __name__ == "__main__":
    settings, args = _parse_args(tuple(sys.argv[1:]))
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    try:
        run(settings, simulate=not args.no_simulate)
    except KeyboardInterrupt:
        sys.exit(0)
