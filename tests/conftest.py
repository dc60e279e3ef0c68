import os

# Renderer tests run without a real display.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import numpy as np
import pytest

from particle import Firefly, FrameInputs


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def frame():
    return FrameInputs(width=800, height=600, speed=1.2, flicker_rate=5, wing_speed=8, time_ms=0.0)


def make_firefly(**overrides):
    values = dict(
        x=400.0, y=300.0, vx=0.0, vy=0.0, heading=0.0, desired_heading=0.0,
        wing_phase=0.0, flicker_phase=0.0, color=(255, 255, 255),
        speed_factor=1.0, noise_offset=0.0, gather_delay_ms=0.0, cruise_speed=3.0,
    )
    values.update(overrides)
    return Firefly(**values)


@pytest.fixture
def firefly_factory():
    return make_firefly
