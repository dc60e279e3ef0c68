# simulation.py
"""
Drives the per-frame cycle of the firefly swarm.

This module defines the Simulation class. It owns the star field, the
population and the active target points, takes declarative inputs from the
outside (configuration, selected shape, gathering flag, viewport size) and
applies them at the start of the next frame. A frame always runs in the
same order: clear, update and draw the stars, update and draw every
firefly, then sweep out fireflies that have finished retiring.
"""
import logging
from typing import Optional, Protocol

import numpy as np

from constants import DEFAULT_STAR_COUNT
from particle import Firefly, FrameInputs
from population import FireflyPopulation
from shapes import generate_shape_points
from starfield import StarField
from utils import FireflyConfig

# --- Data Contracts ---
#
# class Simulation:
#   - set_config / set_selection / resize:
#     - Side Effects: Record new inputs only. Nothing inside the population
#       changes until the next call to step() or synchronize().
#
#   - step(self, now_ms: float, renderer: Optional[FrameRenderer] = None) -> None:
#     - Inputs: now_ms, wall-clock milliseconds. The first call marks the
#       loop start.
#     - Side Effects: Reconciles inputs, advances stars and fireflies by
#       one frame and drops fireflies that have retired off-screen.
#     - Invariants: While gathering on a non-empty shape, the population
#       size equals the number of target points after every step.


class FrameRenderer(Protocol):
    """What the scheduler needs from whatever draws the frame."""

    def begin_frame(self) -> None: ...

    def draw_stars(self, stars: StarField) -> None: ...

    def draw_firefly(self, firefly: Firefly) -> None: ...


class Simulation:
    """
    Owns the swarm state and advances it one display frame at a time.
    """
    def __init__(
        self,
        config: FireflyConfig,
        width: float,
        height: float,
        rng: np.random.Generator,
        star_count: int = DEFAULT_STAR_COUNT,
    ):
        self.config = config
        self.width = width
        self.height = height
        self.rng = rng

        # Declarative inputs, as last set by the controller.
        self.shape_id = ""
        self.gathering = False

        # What the population currently reflects.
        self._applied_shape = ""
        self._applied_gathering = False
        self._applied_count = config.population_target()
        self._resize_pending = False

        self.start_ms: Optional[float] = None
        self.gather_start_ms = 0.0
        self.frame_count = 0

        self.stars = StarField(width, height, rng, count=star_count)
        self.population = FireflyPopulation(width, height, rng, initial_count=self._applied_count)

        logging.info(f"Simulation initialized for a {width}x{height} viewport.")

    @property
    def targets(self) -> np.ndarray:
        return self.population.targets

    # --- Inputs ---

    def set_config(self, config: FireflyConfig) -> None:
        if config != self.config:
            logging.info(f"Configuration updated: {config}")
        self.config = config

    def set_selection(self, shape_id: str, gathering: bool) -> None:
        self.shape_id = shape_id or ""
        self.gathering = bool(gathering)

    def resize(self, width: float, height: float) -> None:
        if (width, height) != (self.width, self.height):
            logging.info(f"Viewport resized to {width}x{height}.")
        self.width = width
        self.height = height
        self._resize_pending = True

    # --- Reconciliation ---

    def _gather_into(self, shape_id: str) -> None:
        points = generate_shape_points(shape_id, self.width, self.height, self.rng)
        self.population.gather(points)

    def synchronize(self, now_ms: float) -> None:
        """Brings the population in line with the latest inputs."""
        selection_changed = (
            self.gathering != self._applied_gathering or
            (self.gathering and self.shape_id != self._applied_shape)
        )

        if self._resize_pending:
            self._resize_pending = False
            self.stars.reset(self.width, self.height)
            self.population.resize(self.width, self.height)
            if self.gathering and not selection_changed:
                self._gather_into(self.shape_id)

        count = self.config.population_target()
        if selection_changed:
            if self.gathering:
                logging.info(f"Gathering into '{self.shape_id}'.")
                self.gather_start_ms = now_ms
                self._gather_into(self.shape_id)
            else:
                logging.info("Scattering the swarm.")
                self.population.scatter(count)
                self._applied_count = count
            self._applied_gathering = self.gathering
            self._applied_shape = self.shape_id if self.gathering else ""
        elif not self.gathering and count != self._applied_count:
            # Count changes made while gathered wait for the next scatter.
            self.population.sync_free_roam(count)
            self._applied_count = count

    # --- Frame cycle ---

    def frame_inputs(self, now_ms: float) -> FrameInputs:
        start = self.start_ms if self.start_ms is not None else now_ms
        return FrameInputs(
            width=self.width,
            height=self.height,
            speed=self.config.speed,
            flicker_rate=self.config.flicker_rate,
            wing_speed=self.config.wing_speed,
            time_ms=now_ms - start,
            gather_elapsed_ms=now_ms - self.gather_start_ms if self._applied_gathering else 0.0,
        )

    def step(self, now_ms: float, renderer: Optional[FrameRenderer] = None) -> None:
        """
        Executes one display frame.
        """
        if self.start_ms is None:
            self.start_ms = now_ms

        self.synchronize(now_ms)
        frame = self.frame_inputs(now_ms)

        if renderer is not None:
            renderer.begin_frame()

        self.stars.update()
        if renderer is not None:
            renderer.draw_stars(self.stars)

        self.population.update(frame, renderer.draw_firefly if renderer is not None else None)
        self.population.sweep()
        self.frame_count += 1
