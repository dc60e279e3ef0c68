# shapes.py
"""
Generates the target silhouettes the swarm assembles into.

Every glyph is produced as a NumPy array of viewport-space points centered
on the viewport midpoint and scaled by min(width, height). The point order
is shuffled once so that handing points out by index fills the glyph in
evenly rather than tracing its outline.
"""
import logging
import math
import numpy as np
from typing import Optional

from constants import (
    SHAPE_POINT_COUNT, SHAPE_SCALE_RATIO, SHAPE_JITTER, ARROW_HEART_RATIO,
    SHAPE_LABELS
)

# --- Data Contracts ---
#
# generate_shape_points(shape_id, width, height, rng, shuffle=True) -> np.ndarray:
#   - Inputs:
#     - shape_id: str, one of SHAPE_LABELS' keys.
#     - width, height: viewport size in pixels.
#     - rng: np.random.Generator used for jitter and shuffling.
#   - Outputs: float64 array of shape (N, 2). N == SHAPE_POINT_COUNT for a
#     known shape on a non-degenerate viewport, otherwise N == 0.
#   - Invariants: The caller owns the returned array; nothing is cached.

# Arrow layout, in units of the glyph scale.
ARROW_ANGLE = math.pi / 4 + 0.1
ARROW_LENGTH = 2.8
ARROW_CENTER_SHIFT = 0.3
ARROW_SHAFT_END = 0.7
ARROW_HEAD_END = 0.85
ARROW_SHAFT_JITTER = 1.0   # Pixels, applied independently on both axes.
ARROW_HEAD_SIZE = 0.4
ARROW_HEAD_SPLAY = 0.85 * math.pi
ARROW_TAIL_SIZE = 0.35
ARROW_TAIL_SPLAY = 0.7 * math.pi
ARROW_FEATHER_GROUPS = 4


def empty_points() -> np.ndarray:
    return np.empty((0, 2), dtype=np.float64)


def heart_curve(t: np.ndarray) -> np.ndarray:
    """
    The classic parametric heart, in its native units (x in [-16, 16]).
    y is negated so the point of the heart faces down in screen space.
    """
    x = 16 * np.sin(t) ** 3
    y = -(13 * np.cos(t) - 5 * np.cos(2 * t) - 2 * np.cos(3 * t) - np.cos(4 * t))
    return np.column_stack((x, y))


def _heart_points(count: int, scale: float, rng: np.random.Generator,
                  jitter: float = SHAPE_JITTER) -> np.ndarray:
    t = np.arange(count) / count * 2 * math.pi
    if jitter:
        t = t + rng.uniform(-jitter, jitter, size=count)
    return heart_curve(t) * (scale / 16)


def arrow_endpoints(scale: float):
    """Returns the (start, end) points of the arrow shaft, relative to center."""
    direction = np.array([math.cos(ARROW_ANGLE), math.sin(ARROW_ANGLE)])
    half = direction * ARROW_LENGTH * scale * 0.5
    shift = np.array([ARROW_CENTER_SHIFT * scale, ARROW_CENTER_SHIFT * scale])
    return -half - shift, half - shift


def _arrow_points(count: int, scale: float, rng: np.random.Generator) -> np.ndarray:
    """
    Lays out an arrow from the upper left to the lower right.

    The fractional position of each point within the arrow picks its part:
    the first 70% form the shaft, the next 15% the two head barbs and the
    rest four feather tufts near the shaft start.
    """
    start, end = arrow_endpoints(scale)
    fraction = np.arange(count) / count
    points = np.empty((count, 2), dtype=np.float64)

    shaft = fraction < ARROW_SHAFT_END
    head = (fraction >= ARROW_SHAFT_END) & (fraction < ARROW_HEAD_END)
    tail = fraction >= ARROW_HEAD_END

    # Shaft: a straight line with a little positional noise.
    t_line = fraction[shaft] / ARROW_SHAFT_END
    points[shaft] = start + (end - start) * t_line[:, np.newaxis]
    points[shaft] += rng.uniform(-ARROW_SHAFT_JITTER, ARROW_SHAFT_JITTER, size=(int(shaft.sum()), 2))

    # Head: two barbs splayed back from the shaft end.
    t_head = (fraction[head] - ARROW_SHAFT_END) / (ARROW_HEAD_END - ARROW_SHAFT_END)
    first_barb = t_head < 0.5
    side = np.where(first_barb, 1.0, -1.0)
    local_t = np.where(first_barb, t_head * 2, (t_head - 0.5) * 2)
    barb_angle = ARROW_ANGLE + ARROW_HEAD_SPLAY * side
    reach = ARROW_HEAD_SIZE * scale * local_t
    points[head] = end + np.column_stack((np.cos(barb_angle), np.sin(barb_angle))) * reach[:, np.newaxis]

    # Tail: feather tufts stepping along the shaft from its start.
    t_tail = (fraction[tail] - ARROW_HEAD_END) / (1.0 - ARROW_HEAD_END)
    tail_size = ARROW_TAIL_SIZE * scale
    group = np.floor(t_tail * ARROW_FEATHER_GROUPS)
    direction = np.array([math.cos(ARROW_ANGLE), math.sin(ARROW_ANGLE)])
    bases = start + direction * (group * tail_size * 0.2)[:, np.newaxis]
    side = np.where(rng.random(group.shape[0]) > 0.5, 1.0, -1.0)
    feather_angle = ARROW_ANGLE + ARROW_TAIL_SPLAY * side
    dist = tail_size * 0.4 * rng.random(group.shape[0])
    points[tail] = bases + np.column_stack((np.cos(feather_angle), np.sin(feather_angle))) * dist[:, np.newaxis]

    return points


def _arrow_heart_points(count: int, scale: float, rng: np.random.Generator) -> np.ndarray:
    heart_count = int(math.floor(count * ARROW_HEART_RATIO))
    return np.concatenate((
        _heart_points(heart_count, scale, rng, jitter=0.0),
        _arrow_points(count - heart_count, scale, rng),
    ))


_GENERATORS = {
    "heart": _heart_points,
    "arrow_heart": _arrow_heart_points,
}


def is_known_shape(shape_id: Optional[str]) -> bool:
    return shape_id in _GENERATORS


def generate_shape_points(
    shape_id: Optional[str],
    width: float,
    height: float,
    rng: np.random.Generator,
    shuffle: bool = True,
) -> np.ndarray:
    """
    Generates the target point sequence for a glyph.

    Unknown shape ids and degenerate viewports yield an empty array, which the
    population treats as "no assembly target".
    """
    generator = _GENERATORS.get(shape_id)
    if generator is None:
        logging.warning(f"Unknown shape '{shape_id}'. No target points generated.")
        return empty_points()

    if not (math.isfinite(width) and math.isfinite(height)) or min(width, height) <= 0:
        logging.warning(f"Degenerate viewport {width}x{height}. No target points generated.")
        return empty_points()

    scale = min(width, height) * SHAPE_SCALE_RATIO
    center = np.array([width / 2, height / 2])
    points = generator(SHAPE_POINT_COUNT, scale, rng) + center

    if shuffle:
        points = points[rng.permutation(points.shape[0])]

    logging.debug(f"Generated {points.shape[0]} points for '{SHAPE_LABELS[shape_id]}' at {width}x{height}.")
    return points
