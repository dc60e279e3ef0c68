# particle.py
"""
A single firefly: its plain-data state record and the pure function that
advances it by one frame.

A firefly never mutates in place. `step_firefly` takes the current record
plus the frame's inputs and returns a new record, so the motion model can
be tested frame by frame with a seeded random generator.
"""
import logging
import math
import numpy as np
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Tuple

from constants import (
    FIREFLY_PALETTE, SPAWN_EDGE_BUFFER, INITIAL_GATHER_DELAY_MAX_MS,
    DOCK_DISTANCE, WING_PHASE_STEP, FLICKER_PHASE_STEP,
    WANDER_RETARGET_CHANCE, WANDER_RETARGET_SPREAD, WANDER_TURN_SMOOTHING,
    WANDER_WOBBLE_FREQ, WANDER_WOBBLE_AMPLITUDE, RETIRE_PUSH_BASE, WRAP_BUFFER,
    APPROACH_WOBBLE_FREQ, APPROACH_WOBBLE_AMPLITUDE, APPROACH_WOBBLE_RANGE,
    APPROACH_VELOCITY_SMOOTHING, DOCK_HOVER_RADIUS, DOCK_HOVER_SPEED,
    DOCK_RETARGET_CHANCE, DOCK_TURN_SMOOTHING
)

# --- Data Contracts ---
#
# step_firefly(firefly, frame, target, rng) -> Firefly:
#   - Inputs:
#     - firefly: the record for the current frame.
#     - frame: FrameInputs shared by every firefly this frame.
#     - target: (x, y) of the firefly's assigned shape point, or None.
#       Must be None exactly when firefly.target_index is None.
#     - rng: np.random.Generator for the per-frame random choices.
#   - Outputs: A new Firefly. The input record is left untouched.
#   - Invariants: wing_phase and flicker_phase always advance. A docked
#     firefly always has a target. A retiring firefly never gets closer to
#     the viewport center.


class FireflyState(Enum):
    WANDERING = "wandering"
    APPROACHING = "approaching"
    DOCKED = "docked"
    RETIRING = "retiring"


@dataclass(frozen=True)
class FrameInputs:
    """Everything a firefly reads from the outside world for one frame."""
    width: float
    height: float
    speed: float
    flicker_rate: float
    wing_speed: float
    time_ms: float
    gather_elapsed_ms: float = 0.0


@dataclass(frozen=True)
class Firefly:
    x: float
    y: float
    vx: float
    vy: float
    heading: float
    desired_heading: float
    wing_phase: float
    flicker_phase: float
    color: Tuple[int, int, int]
    speed_factor: float
    noise_offset: float
    gather_delay_ms: float
    cruise_speed: float
    target_index: Optional[int] = None
    docked: bool = False
    retiring: bool = False

    def __post_init__(self):
        if self.docked and self.target_index is None:
            raise ValueError("A firefly cannot be docked without a target point.")

    @property
    def state(self) -> FireflyState:
        if self.retiring:
            return FireflyState.RETIRING
        if self.target_index is None:
            return FireflyState.WANDERING
        if self.docked:
            return FireflyState.DOCKED
        return FireflyState.APPROACHING

    def is_offscreen(self, width: float, height: float, margin: float) -> bool:
        return (
            self.x < -margin or self.x > width + margin or
            self.y < -margin or self.y > height + margin
        )


def spawn_firefly(
    width: float,
    height: float,
    rng: np.random.Generator,
    from_edge: bool = False,
    palette: Sequence[Tuple[int, int, int]] = FIREFLY_PALETTE,
) -> Firefly:
    """
    Creates a firefly with freshly randomized traits.

    With from_edge, it starts just outside a random viewport edge so that it
    appears to fly in rather than pop into existence.
    """
    if from_edge:
        side = int(rng.integers(0, 4))
        if side == 0:
            x, y = -SPAWN_EDGE_BUFFER, rng.random() * height
        elif side == 1:
            x, y = width + SPAWN_EDGE_BUFFER, rng.random() * height
        elif side == 2:
            x, y = rng.random() * width, -SPAWN_EDGE_BUFFER
        else:
            x, y = rng.random() * width, height + SPAWN_EDGE_BUFFER
    else:
        x, y = rng.random() * width, rng.random() * height

    vx = (rng.random() - 0.5) * 2
    vy = (rng.random() - 0.5) * 2
    heading = math.atan2(vy, vx)
    color = palette[int(rng.integers(0, len(palette)))]

    return Firefly(
        x=float(x), y=float(y), vx=vx, vy=vy,
        heading=heading,
        desired_heading=heading,
        wing_phase=rng.random() * 2 * math.pi,
        flicker_phase=rng.random() * 2 * math.pi,
        color=tuple(color),
        speed_factor=0.4 + rng.random() * 0.6,
        noise_offset=rng.random() * 1000,
        gather_delay_ms=rng.random() * INITIAL_GATHER_DELAY_MAX_MS,
        cruise_speed=2 + rng.random() * 3,
    )


def wrap_angle(angle: float) -> float:
    """Normalizes an angle difference into [-pi, pi]."""
    return (angle + math.pi) % (2 * math.pi) - math.pi


def dock_offset(time_ms: float, noise_offset: float) -> Tuple[float, float]:
    """
    Hover offset of a docked firefly around its target.

    Two sine terms per axis at unrelated frequencies give an organic path
    whose magnitude never exceeds 1.4 * DOCK_HOVER_RADIUS per axis.
    """
    phase = time_ms * DOCK_HOVER_SPEED
    minor = DOCK_HOVER_RADIUS * 0.4
    dx = (math.sin(phase + noise_offset) * DOCK_HOVER_RADIUS +
          math.sin(phase * 2.1 + noise_offset) * minor)
    dy = (math.cos(phase * 0.87 + noise_offset) * DOCK_HOVER_RADIUS +
          math.cos(phase * 1.73 + noise_offset) * minor)
    return dx, dy


def _wander(f: Firefly, frame: FrameInputs, rng: np.random.Generator) -> Firefly:
    desired = f.desired_heading
    if rng.random() < WANDER_RETARGET_CHANCE:
        desired += (rng.random() - 0.5) * WANDER_RETARGET_SPREAD
    heading = f.heading + (desired - f.heading) * WANDER_TURN_SMOOTHING

    speed = frame.speed * f.speed_factor
    wave = math.sin(frame.time_ms * WANDER_WOBBLE_FREQ + f.noise_offset) * WANDER_WOBBLE_AMPLITUDE
    vx = math.cos(heading + wave) * speed
    vy = math.sin(heading + wave) * speed

    if f.retiring:
        # Push away from the center, harder the farther out. The push is at
        # least as strong as the cruising speed, so radial motion stays outward.
        dx = f.x - frame.width / 2
        dy = f.y - frame.height / 2
        dist = math.hypot(dx, dy)
        if dist > 0:
            ux, uy = dx / dist, dy / dist
        else:
            ux, uy = math.cos(heading), math.sin(heading)
        half_diagonal = max(math.hypot(frame.width, frame.height) / 2, 1.0)
        push = (RETIRE_PUSH_BASE + dist / half_diagonal) * speed
        vx += ux * push
        vy += uy * push
        return replace(f, x=f.x + vx, y=f.y + vy, vx=vx, vy=vy,
                       heading=heading, desired_heading=desired)

    x = f.x + vx
    y = f.y + vy
    if x < -WRAP_BUFFER:
        x = frame.width + WRAP_BUFFER
    if x > frame.width + WRAP_BUFFER:
        x = -WRAP_BUFFER
    if y < -WRAP_BUFFER:
        y = frame.height + WRAP_BUFFER
    if y > frame.height + WRAP_BUFFER:
        y = -WRAP_BUFFER
    return replace(f, x=x, y=y, vx=vx, vy=vy, heading=heading, desired_heading=desired)


def _hover(f: Firefly, frame: FrameInputs, target, rng: np.random.Generator) -> Firefly:
    dx, dy = dock_offset(frame.time_ms, f.noise_offset)
    desired = f.desired_heading
    if rng.random() < DOCK_RETARGET_CHANCE:
        desired = rng.random() * 2 * math.pi
    heading = f.heading + wrap_angle(desired - f.heading) * DOCK_TURN_SMOOTHING
    return replace(f, x=float(target[0]) + dx, y=float(target[1]) + dy,
                   heading=heading, desired_heading=desired)


def _approach(f: Firefly, frame: FrameInputs, target) -> Firefly:
    dx = float(target[0]) - f.x
    dy = float(target[1]) - f.y
    dist = math.hypot(dx, dy)

    if dist < DOCK_DISTANCE:
        logging.debug(f"Firefly docked at ({target[0]:.1f}, {target[1]:.1f}).")
        return replace(f, docked=True, desired_heading=f.heading)

    wobble = math.sin(frame.time_ms * APPROACH_WOBBLE_FREQ + f.noise_offset) * APPROACH_WOBBLE_AMPLITUDE
    angle = math.atan2(dy, dx) + wobble * min(1.0, dist / APPROACH_WOBBLE_RANGE)
    # Cruise far away, slow down on the final stretch.
    approach_speed = min(f.cruise_speed, dist * 0.05 + 0.5)

    target_vx = math.cos(angle) * approach_speed
    target_vy = math.sin(angle) * approach_speed
    vx = f.vx + (target_vx - f.vx) * APPROACH_VELOCITY_SMOOTHING
    vy = f.vy + (target_vy - f.vy) * APPROACH_VELOCITY_SMOOTHING
    return replace(f, x=f.x + vx, y=f.y + vy, vx=vx, vy=vy, heading=math.atan2(vy, vx))


def step_firefly(
    f: Firefly,
    frame: FrameInputs,
    target: Optional[Sequence[float]],
    rng: np.random.Generator,
) -> Firefly:
    """
    Advances one firefly by one frame according to its state.
    """
    f = replace(
        f,
        wing_phase=f.wing_phase + WING_PHASE_STEP * frame.wing_speed,
        flicker_phase=f.flicker_phase + FLICKER_PHASE_STEP * frame.flicker_rate,
    )

    if f.retiring:
        return _wander(f, frame, rng)

    if target is None:
        if f.docked:
            f = replace(f, docked=False)
        return _wander(f, frame, rng)

    if f.docked:
        return _hover(f, frame, target, rng)

    if frame.gather_elapsed_ms > f.gather_delay_ms:
        return _approach(f, frame, target)

    # Still waiting for its turn: keep wandering so arrivals are staggered.
    return _wander(f, frame, rng)
