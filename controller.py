# controller.py
"""
Turns shape-menu selections into the engine's declarative selection state.

Selecting a shape while scattered gathers right away. Re-selecting the
active shape scatters. Selecting a different shape while gathered scatters
first and gathers into the new shape after a settle delay; that deferred
gather is a ScheduledTask that any later selection cancels.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from constants import SETTLE_DELAY_MS, SCATTER_ID, SHAPE_LABELS


@dataclass
class ScheduledTask:
    """A one-shot action due at a wall-clock time, which can be cancelled."""
    due_ms: float
    action: Callable[[], None] = field(repr=False)
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        if self.pending:
            self.cancelled = True

    def fire_if_due(self, now_ms: float) -> bool:
        if not self.pending or now_ms < self.due_ms:
            return False
        self.fired = True
        self.action()
        return True


class SelectionController:
    """
    Holds the current selection and pushes it into the simulation.
    """
    def __init__(self, simulation, settle_delay_ms: float = SETTLE_DELAY_MS):
        self.simulation = simulation
        self.settle_delay_ms = settle_delay_ms
        self.shape_id = ""
        self.gathering = False
        self.pending: Optional[ScheduledTask] = None

    @property
    def waiting(self) -> bool:
        """True while a deferred gather is queued for the selected shape."""
        return self.pending is not None and self.pending.pending

    @property
    def active_label(self) -> Optional[str]:
        if self.gathering and self.shape_id:
            return SHAPE_LABELS.get(self.shape_id, self.shape_id)
        return None

    def _publish(self) -> None:
        self.simulation.set_selection(self.shape_id, self.gathering)

    def _cancel_pending(self) -> None:
        if self.pending is not None:
            if self.pending.pending:
                logging.info(f"Cancelled deferred gather into '{self.shape_id}'.")
            self.pending.cancel()
            self.pending = None

    def select(self, shape_id: str, now_ms: float) -> None:
        self._cancel_pending()

        if shape_id == SCATTER_ID:
            self.shape_id, self.gathering = "", False
        elif self.gathering and shape_id == self.shape_id:
            self.shape_id, self.gathering = "", False
        elif self.gathering:
            # Release the current shape, then gather into the new one once settled.
            self.shape_id, self.gathering = shape_id, False
            self.pending = ScheduledTask(now_ms + self.settle_delay_ms, self._begin_gather)
            logging.info(f"Switching to '{shape_id}' in {self.settle_delay_ms:.0f} ms.")
        else:
            self.shape_id, self.gathering = shape_id, True

        logging.info(f"Selection: shape='{self.shape_id}', gathering={self.gathering}.")
        self._publish()

    def _begin_gather(self) -> None:
        self.gathering = True
        logging.info(f"Settle delay elapsed. Gathering into '{self.shape_id}'.")
        self._publish()

    def poll(self, now_ms: float) -> None:
        """Fires the deferred gather once it is due."""
        if self.pending is not None and self.pending.fire_if_due(now_ms):
            self.pending = None

    def shutdown(self) -> None:
        self._cancel_pending()
