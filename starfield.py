# starfield.py
"""
The decorative twinkling star background.

Stars are stored as parallel NumPy arrays and twinkle through a
Numba-jitted kernel. They have no interaction with the fireflies.
"""
import logging
import math
import numpy as np
from numba import jit

from constants import (
    DEFAULT_STAR_COUNT, STAR_MAX_RADIUS, STAR_MIN_OPACITY, STAR_MAX_OPACITY,
    STAR_TWINKLE_MIN, STAR_TWINKLE_SPREAD
)

# --- Data Contracts ---
#
# class StarField:
#   - reset(self, width, height) -> None:
#     - Side Effects: Replaces every star. A degenerate viewport yields none.
#     - Invariants: positions (N, 2), radii (N,), opacity (N,), rates (N,),
#       all float64.
#
#   - update(self) -> None:
#     - Invariants: opacity reflects at [STAR_MIN_OPACITY, STAR_MAX_OPACITY]
#       by flipping the sign of the star's rate.


@jit(nopython=True)
def _twinkle_numba(opacity, rates, low, high):
    """
    Advances every star's opacity and reflects it at the bounds.

    A rate is only flipped while it is still carrying the opacity out of
    bounds, so a star can never get stuck oscillating outside the range.
    """
    for i in range(opacity.shape[0]):
        opacity[i] += rates[i]
        if (opacity[i] > high and rates[i] > 0) or (opacity[i] < low and rates[i] < 0):
            rates[i] = -rates[i]


class StarField:
    def __init__(self, width: float, height: float, rng: np.random.Generator, count: int = DEFAULT_STAR_COUNT):
        self.rng = rng
        self.count = count
        self.reset(width, height)

    def __len__(self) -> int:
        return self.opacity.shape[0]

    def reset(self, width: float, height: float) -> None:
        degenerate = not (math.isfinite(width) and math.isfinite(height)) or min(width, height) <= 0
        n = 0 if degenerate else max(int(self.count), 0)
        if degenerate:
            logging.warning(f"Degenerate viewport {width}x{height}. Star field is empty.")

        if n:
            self.positions = self.rng.uniform(low=[0, 0], high=[width, height], size=(n, 2))
        else:
            self.positions = np.empty((0, 2), dtype=np.float64)
        self.radii = self.rng.random(n) * STAR_MAX_RADIUS
        self.opacity = self.rng.uniform(STAR_MIN_OPACITY, STAR_MAX_OPACITY, size=n)
        self.rates = STAR_TWINKLE_MIN + self.rng.random(n) * STAR_TWINKLE_SPREAD
        logging.debug(f"Star field reset with {n} stars for {width}x{height}.")

    def update(self) -> None:
        _twinkle_numba(self.opacity, self.rates, STAR_MIN_OPACITY, STAR_MAX_OPACITY)

    def alphas(self) -> np.ndarray:
        """Opacities clipped to [0, 1] for drawing."""
        return np.clip(self.opacity, 0.0, 1.0)
