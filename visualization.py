# visualization.py
"""
Handles the visualization of the firefly swarm using Pygame.

FireflyRenderer draws stars and fireflies onto any surface and is what the
Simulation calls back into during a frame. Visualizer owns the window, the
keyboard controls that stand in for the shape menu, and the HUD.
"""
import logging
import math
import pygame
import numpy as np
from dataclasses import replace
from typing import TYPE_CHECKING, List, NamedTuple, Optional, Sequence, Tuple

from constants import (
    BACKGROUND_COLOR, DEFAULT_WINDOW_SIZE, FPS, WINDOW_TITLE, FIREFLY_PALETTE,
    GLOW_MIN_RADIUS, GLOW_FLICKER_RADIUS, GLOW_SIZE_STEPS, GLOW_CORE_OFFSET,
    CORE_DOT_RADIUS, BODY_COLOR, BODY_RADII, WING_COLOR, WING_RADII, WING_OFFSET,
    WING_SPREAD_AMPLITUDE, WING_REST_ANGLE, ELLIPSE_SEGMENTS, HUD_TEXT_ALPHA,
    HUD_BOTTOM_MARGIN, SCATTER_ID
)
from particle import Firefly
from starfield import StarField

if TYPE_CHECKING:
    from controller import SelectionController
    from simulation import Simulation


# --- Data Contracts ---
#
# class FireflyRenderer:
#   - __init__(self, surface: pygame.Surface, palette=FIREFLY_PALETTE):
#     - Side Effects: Pre-renders glow sprites for every palette color.
#   - begin_frame / draw_stars / draw_firefly / finish_frame:
#     - Called in that order once per frame. finish_frame composites the
#       translucent wing layer.
#
# class Visualizer:
#   - handle_events(self, simulation, controller, now_ms) -> bool:
#     - Outputs: False if the user has quit, True otherwise.

Point = Tuple[float, float]

KEY_BINDINGS = {
    pygame.K_1: "heart",
    pygame.K_2: "arrow_heart",
    pygame.K_s: SCATTER_ID,
    pygame.K_SPACE: SCATTER_ID,
}
COUNT_STEP = 5


class FireflySprite(NamedTuple):
    """Screen-space geometry of one firefly for one frame."""
    glow_center: Point
    glow_level: float
    core_alpha: float
    body: List[Point]
    wings: Tuple[List[Point], List[Point]]


def flicker_level(flicker_phase: float) -> float:
    """Maps the flicker oscillator onto [0, 1]."""
    return (math.sin(flicker_phase) + 1) / 2


def wing_spread(wing_phase: float) -> float:
    return math.sin(wing_phase) * WING_SPREAD_AMPLITUDE


def ellipse_polygon(center: Point, radii: Tuple[float, float], angle: float,
                    segments: int = ELLIPSE_SEGMENTS) -> List[Point]:
    """Approximates a rotated ellipse with a polygon."""
    a = np.linspace(0, 2 * math.pi, segments, endpoint=False)
    px = radii[0] * np.cos(a)
    py = radii[1] * np.sin(a)
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    xs = center[0] + px * cos_a - py * sin_a
    ys = center[1] + px * sin_a + py * cos_a
    return list(zip(xs.tolist(), ys.tolist()))


def _rotate(point: Point, angle: float) -> Point:
    c, s = math.cos(angle), math.sin(angle)
    return point[0] * c - point[1] * s, point[0] * s + point[1] * c


def firefly_sprite(f: Firefly) -> FireflySprite:
    """
    Lays out the glow, body and wings of a firefly in screen space.

    The sprite's local frame points its head along -y, so it is rotated by
    heading + pi/2 to face the direction of flight.
    """
    theta = f.heading + math.pi / 2
    level = flicker_level(f.flicker_phase)

    gx, gy = _rotate((0.0, GLOW_CORE_OFFSET), theta)
    body = ellipse_polygon((f.x, f.y), BODY_RADII, theta)

    spread = wing_spread(f.wing_phase)
    wings = []
    for side in (-1, 1):
        wing_angle = side * (spread + WING_REST_ANGLE)
        cx, cy = _rotate((side * WING_OFFSET[0], WING_OFFSET[1]), theta + wing_angle)
        wings.append(ellipse_polygon((f.x + cx, f.y + cy), WING_RADII, theta + wing_angle))

    return FireflySprite(
        glow_center=(f.x + gx, f.y + gy),
        glow_level=level,
        core_alpha=0.6 + level * 0.4,
        body=body,
        wings=(wings[0], wings[1]),
    )


def _glow_falloff(fraction: float) -> float:
    """Radial brightness: full at the center, a faint skirt, dark at the rim."""
    skirt = 1 / 15
    if fraction <= 0.5:
        return 1 - (1 - skirt) * (fraction / 0.5)
    return skirt * (1 - (fraction - 0.5) / 0.5)


class FireflyRenderer:
    """
    Draws one frame of stars and fireflies onto a target surface.
    """
    def __init__(self, surface: pygame.Surface, palette: Sequence[Tuple[int, int, int]] = FIREFLY_PALETTE):
        self.surface = surface
        self.glow_sprites = self._pre_render_glows(palette)
        self.wing_layer = pygame.Surface(surface.get_size(), pygame.SRCALPHA)

    def set_surface(self, surface: pygame.Surface) -> None:
        self.surface = surface
        self.wing_layer = pygame.Surface(surface.get_size(), pygame.SRCALPHA)

    def _pre_render_glows(self, palette) -> dict:
        """
        Pre-renders glow sprites for each color at every flicker size step.
        """
        logging.debug("Pre-rendering firefly glow surfaces...")
        sprites = {}
        for color in palette:
            sizes = []
            for step in range(GLOW_SIZE_STEPS):
                level = step / max(GLOW_SIZE_STEPS - 1, 1)
                radius = int(round(GLOW_MIN_RADIUS + level * GLOW_FLICKER_RADIUS))
                glow = pygame.Surface((radius * 2 + 1, radius * 2 + 1))
                glow.fill((0, 0, 0))
                for r in range(radius, 0, -1):
                    k = _glow_falloff(r / radius)
                    ring = tuple(int(c * k) for c in color)
                    pygame.draw.circle(glow, ring, (radius, radius), r)
                sizes.append(glow)
            sprites[tuple(color)] = sizes
        logging.debug(f"Finished pre-rendering {len(sprites) * GLOW_SIZE_STEPS} glow surfaces.")
        return sprites

    def begin_frame(self) -> None:
        self.surface.fill(BACKGROUND_COLOR)
        self.wing_layer.fill((0, 0, 0, 0))

    def draw_stars(self, stars: StarField) -> None:
        alphas = stars.alphas()
        for (x, y), radius, alpha in zip(stars.positions, stars.radii, alphas):
            level = int(255 * alpha)
            pygame.draw.circle(self.surface, (level, level, level), (int(x), int(y)), max(1, int(round(radius))))

    def draw_firefly(self, f: Firefly) -> None:
        sprite = firefly_sprite(f)

        # Glow, added on top of whatever is already there.
        sizes = self.glow_sprites.get(tuple(f.color))
        if sizes is not None:
            glow = sizes[int(round(sprite.glow_level * (GLOW_SIZE_STEPS - 1)))]
            half = glow.get_width() // 2
            gx, gy = sprite.glow_center
            self.surface.blit(glow, (int(gx) - half, int(gy) - half), special_flags=pygame.BLEND_RGB_ADD)

        core = int(255 * sprite.core_alpha)
        pygame.draw.circle(self.surface, (core, core, core), sprite.glow_center, CORE_DOT_RADIUS)

        pygame.draw.polygon(self.surface, BODY_COLOR, sprite.body)
        for wing in sprite.wings:
            pygame.draw.polygon(self.wing_layer, WING_COLOR, wing)

    def finish_frame(self) -> None:
        self.surface.blit(self.wing_layer, (0, 0))


class Visualizer:
    """
    Owns the Pygame window, keyboard controls and HUD.
    """
    def __init__(self, vis_params: Optional[dict] = None):
        pygame.init()
        pygame.font.init()

        vis_params = vis_params or {}
        self.fps = vis_params.get('fps', FPS)

        if vis_params.get('fullscreen', False):
            display_info = pygame.display.Info()
            size = (display_info.current_w, display_info.current_h)
            self.screen = pygame.display.set_mode(size, pygame.FULLSCREEN)
        else:
            size = (vis_params.get('width', DEFAULT_WINDOW_SIZE[0]),
                    vis_params.get('height', DEFAULT_WINDOW_SIZE[1]))
            self.screen = pygame.display.set_mode(size, pygame.RESIZABLE)

        pygame.display.set_caption(WINDOW_TITLE)
        self.clock = pygame.time.Clock()
        self.renderer = FireflyRenderer(self.screen)

        try:
            self.font_label = pygame.font.SysFont("Segoe UI", 14)
            self.font_hint = pygame.font.SysFont("Segoe UI", 12)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default sans-serif.")
            self.font_label = pygame.font.SysFont(None, 18)
            self.font_hint = pygame.font.SysFont(None, 16)

        logging.info(f"Visualizer initialized with Pygame display ({size[0]}x{size[1]}).")

    @property
    def size(self) -> Tuple[int, int]:
        return self.screen.get_size()

    def handle_events(self, simulation: "Simulation", controller: "SelectionController", now_ms: float) -> bool:
        """
        Processes window and keyboard events.

        Returns:
            bool: False if the loop should exit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.get_surface()
                self.renderer.set_surface(self.screen)
                simulation.resize(*self.screen.get_size())

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False
                if event.key in KEY_BINDINGS:
                    controller.select(KEY_BINDINGS[event.key], now_ms)
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                    self._change_count(simulation, COUNT_STEP)
                elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                    self._change_count(simulation, -COUNT_STEP)
        return True

    def _change_count(self, simulation: "Simulation", delta: int) -> None:
        config = simulation.config
        count = max(0, config.population_target() + delta)
        simulation.set_config(replace(config, count=count))

    def _hud_color(self, color_value: str) -> pygame.Color:
        try:
            color = pygame.Color(color_value)
        except (ValueError, TypeError):
            color = pygame.Color(255, 255, 255)
        color.a = HUD_TEXT_ALPHA
        return color

    def draw_hud(self, simulation: "Simulation", controller: "SelectionController") -> None:
        width, height = self.size
        label = controller.active_label
        if label:
            text = self.font_label.render(label.upper(), True, self._hud_color(simulation.config.color))
            text.set_alpha(HUD_TEXT_ALPHA)
            rect = text.get_rect(midbottom=(width // 2, height - HUD_BOTTOM_MARGIN))
            self.screen.blit(text, rect)

        hint = "1 Heart   2 Arrow Heart   S Scatter   +/- Count"
        if controller.waiting:
            hint += "   (settling...)"
        hint_surf = self.font_hint.render(hint, True, (120, 120, 120))
        self.screen.blit(hint_surf, (12, 10))

    def present(self) -> None:
        pygame.display.flip()
        self.clock.tick(self.fps)

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
