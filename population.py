# population.py
"""
Manages the live collection of fireflies.

This module defines the FireflyPopulation class, which reconciles the swarm
against what is currently required of it: a free-roam head count while
scattered, or one firefly per shape point while gathered. Fireflies are
never deleted abruptly when the swarm shrinks while scattered; they are
marked as retiring and swept out once they have flown off-screen.
"""
import logging
import numpy as np
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from constants import OFFSCREEN_MARGIN, GATHER_DELAY_MAX_MS
from particle import Firefly, FireflyState, FrameInputs, spawn_firefly, step_firefly
from shapes import empty_points

# --- Data Contracts ---
#
# class FireflyPopulation:
#   - __init__(self, width, height, rng, initial_count=0):
#     - Side Effects: Spawns initial_count fireflies inside the viewport.
#
#   - gather(self, points: np.ndarray) -> None:
#     - Invariants: afterwards, unless points is empty,
#       len(self.fireflies) == len(points) and firefly i targets point i.
#
#   - scatter(self, count: int) -> None:
#     - Invariants: afterwards no firefly has a target, exactly
#       max(0, len(before) - count) fireflies are retiring, and exactly
#       `count` are not (new ones spawn at the edges if the swarm is short).
#
#   - sync_free_roam(self, count: int) -> None:
#     - Invariants: afterwards exactly `count` fireflies are not retiring.
#
#   - sweep(self) -> int:
#     - Removes retiring fireflies that are past OFFSCREEN_MARGIN. Never
#       touches non-retiring fireflies, so target indices stay valid.


class FireflyPopulation:
    """
    A container for all fireflies and the active target point sequence.
    """
    def __init__(self, width: float, height: float, rng: np.random.Generator, initial_count: int = 0):
        self.width = width
        self.height = height
        self.rng = rng
        self.targets = empty_points()
        self.fireflies: List[Firefly] = [
            spawn_firefly(width, height, rng) for _ in range(max(initial_count, 0))
        ]
        logging.info(f"FireflyPopulation initialized with {len(self.fireflies)} fireflies.")

    def __len__(self) -> int:
        return len(self.fireflies)

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def target_for(self, firefly: Firefly) -> Optional[Tuple[float, float]]:
        """Resolves a firefly's target index against the active sequence."""
        index = firefly.target_index
        if index is None or index >= self.targets.shape[0]:
            return None
        return self.targets[index]

    def _spawn_at_edges(self, count: int) -> None:
        for _ in range(count):
            self.fireflies.append(spawn_firefly(self.width, self.height, self.rng, from_edge=True))

    def gather(self, points: np.ndarray) -> None:
        """
        Assigns every firefly a shape point, growing or trimming the swarm
        so that there is exactly one firefly per point.
        """
        self.targets = points
        required = points.shape[0]

        if required == 0:
            # Nothing to assemble into: everyone keeps flying freely.
            self.fireflies = [replace(f, target_index=None, docked=False) for f in self.fireflies]
            logging.warning("Gather requested with an empty target set. Fireflies keep wandering.")
            return

        current = len(self.fireflies)
        if required > current:
            self._spawn_at_edges(required - current)
        elif required < current:
            self.fireflies = self.fireflies[:required]

        self.fireflies = [
            replace(
                f,
                target_index=i,
                docked=False,
                retiring=False,
                gather_delay_ms=self.rng.random() * GATHER_DELAY_MAX_MS,
            )
            for i, f in enumerate(self.fireflies)
        ]
        logging.info(f"Gather sync: {current} -> {required} fireflies, one per shape point.")

    def scatter(self, count: int) -> None:
        """
        Releases every firefly. Those at or beyond `count` start retiring,
        and a swarm smaller than `count` is topped up from the edges.
        """
        count = max(count, 0)
        self.targets = empty_points()
        self.fireflies = [
            replace(f, target_index=None, docked=False, retiring=i >= count)
            for i, f in enumerate(self.fireflies)
        ]
        retiring = max(0, len(self.fireflies) - count)
        logging.info(f"Scatter: {len(self.fireflies) - retiring} wandering, {retiring} retiring.")
        self.sync_free_roam(count)

    def sync_free_roam(self, count: int) -> None:
        """
        Matches the number of non-retiring fireflies to `count` while scattered.
        """
        count = max(count, 0)
        active = [i for i, f in enumerate(self.fireflies) if not f.retiring]

        if len(active) < count:
            added = count - len(active)
            self._spawn_at_edges(added)
            logging.info(f"Free-roam sync: spawned {added} fireflies (target {count}).")
        elif len(active) > count:
            excess = set(active[count:])
            self.fireflies = [
                replace(f, retiring=True) if i in excess else f
                for i, f in enumerate(self.fireflies)
            ]
            logging.info(f"Free-roam sync: retiring {len(excess)} fireflies (target {count}).")

    def update(self, frame: FrameInputs, on_update=None) -> None:
        """
        Advances every firefly by one frame, in stable order.

        on_update, if given, is called with each updated firefly as soon as
        it has moved so that drawing can follow updating one by one.
        """
        updated = []
        for f in self.fireflies:
            new = step_firefly(f, frame, self.target_for(f), self.rng)
            updated.append(new)
            if on_update is not None:
                on_update(new)
        self.fireflies = updated

    def sweep(self) -> int:
        """Drops retiring fireflies that have left the viewport. Returns how many."""
        before = len(self.fireflies)
        self.fireflies = [
            f for f in self.fireflies
            if not (f.retiring and f.is_offscreen(self.width, self.height, OFFSCREEN_MARGIN))
        ]
        removed = before - len(self.fireflies)
        if removed:
            logging.debug(f"Swept {removed} retired fireflies. {len(self.fireflies)} remain.")
        return removed

    def state_counts(self) -> Dict[FireflyState, int]:
        counts = {state: 0 for state in FireflyState}
        for f in self.fireflies:
            counts[f.state] += 1
        return counts
