from dataclasses import replace

import numpy as np
import pytest

from constants import SETTLE_DELAY_MS, SHAPE_POINT_COUNT, SHAPE_SCALE_RATIO
from controller import SelectionController
from particle import FireflyState
from simulation import Simulation
from utils import FireflyConfig

W, H = 800, 600
FRAME_MS = 16.0


@pytest.fixture
def simulation():
    config = FireflyConfig(count=35, speed=6.0)
    return Simulation(config, W, H, np.random.default_rng(2024), star_count=50)


class RecordingRenderer:
    def __init__(self):
        self.events = []

    def begin_frame(self):
        self.events.append("begin")

    def draw_stars(self, stars):
        self.events.append("stars")

    def draw_firefly(self, firefly):
        self.events.append(firefly)


def run_frames(simulation, start_ms, frames, renderer=None):
    now = start_ms
    for _ in range(frames):
        now += FRAME_MS
        simulation.step(now, renderer)
    return now


def test_starts_with_free_roaming_swarm(simulation):
    simulation.step(0.0)
    counts = simulation.population.state_counts()
    assert len(simulation.population) == 35
    assert counts[FireflyState.WANDERING] == 35
    assert simulation.targets.shape == (0, 2)


def test_gather_and_scatter_round_trip(simulation):
    now = run_frames(simulation, 0.0, 5)

    simulation.set_selection("heart", True)
    simulation.step(now)
    fireflies = simulation.population.fireflies
    assert simulation.targets.shape == (SHAPE_POINT_COUNT, 2)
    assert len(fireflies) == SHAPE_POINT_COUNT
    assert sorted(f.target_index for f in fireflies) == list(range(SHAPE_POINT_COUNT))

    now = run_frames(simulation, now, 700)
    counts = simulation.population.state_counts()
    assert len(simulation.population) == SHAPE_POINT_COUNT
    assert counts[FireflyState.DOCKED] > SHAPE_POINT_COUNT // 2

    simulation.set_selection("", False)
    simulation.step(now)
    counts = simulation.population.state_counts()
    assert all(f.target_index is None for f in simulation.population.fireflies)
    retiring_now = counts[FireflyState.RETIRING]
    assert retiring_now + counts[FireflyState.WANDERING] == len(simulation.population)
    assert counts[FireflyState.WANDERING] == 35

    for _ in range(3000):
        if len(simulation.population) == 35:
            break
        now = run_frames(simulation, now, 1)
    assert len(simulation.population) == 35
    assert simulation.population.state_counts()[FireflyState.WANDERING] == 35


def test_population_matches_targets_after_every_gather_sync(simulation):
    simulation.set_selection("arrow_heart", True)
    now = run_frames(simulation, 0.0, 3)
    assert len(simulation.population) == simulation.targets.shape[0] == SHAPE_POINT_COUNT

    simulation.resize(400, 300)
    simulation.step(now)
    assert len(simulation.population) == simulation.targets.shape[0] == SHAPE_POINT_COUNT
    scale = 300 * SHAPE_SCALE_RATIO
    distances = np.linalg.norm(simulation.targets - np.array([200, 150]), axis=1)
    assert distances.max() <= 2.1 * scale
    assert all(f.target_index is not None for f in simulation.population.fireflies)


def test_unknown_shape_gather_is_a_no_op(simulation):
    simulation.set_selection("spiral", True)
    run_frames(simulation, 0.0, 3)
    assert len(simulation.population) == 35
    assert all(f.state is FireflyState.WANDERING for f in simulation.population.fireflies)


def test_count_change_while_gathered_waits_for_scatter(simulation):
    simulation.set_selection("heart", True)
    now = run_frames(simulation, 0.0, 2)

    simulation.set_config(replace(simulation.config, count=10))
    now = run_frames(simulation, now, 2)
    assert len(simulation.population) == SHAPE_POINT_COUNT
    assert simulation.population.state_counts()[FireflyState.RETIRING] == 0

    simulation.set_selection("", False)
    simulation.step(now)
    assert simulation.population.state_counts()[FireflyState.WANDERING] == 10


def test_scatter_regrows_swarm_beyond_shape_size():
    simulation = Simulation(FireflyConfig(count=800), W, H, np.random.default_rng(3), star_count=10)
    simulation.step(0.0)
    assert len(simulation.population) == 800

    simulation.set_selection("heart", True)
    now = run_frames(simulation, 0.0, 2)
    assert len(simulation.population) == SHAPE_POINT_COUNT

    simulation.set_selection("", False)
    run_frames(simulation, now, 5)
    counts = simulation.population.state_counts()
    assert counts[FireflyState.WANDERING] == 800
    assert counts[FireflyState.RETIRING] == 0

def test_count_change_while_scattered_applies_next_frame(simulation):
    simulation.step(0.0)
    simulation.set_config(replace(simulation.config, count=50))
    assert len(simulation.population) == 35
    simulation.step(FRAME_MS)
    assert len(simulation.population) == 50

    simulation.set_config(replace(simulation.config, count=5))
    simulation.step(2 * FRAME_MS)
    assert simulation.population.state_counts()[FireflyState.RETIRING] == 45


def test_negative_count_degrades_to_empty_swarm():
    config = FireflyConfig(count=-4)
    simulation = Simulation(config, W, H, np.random.default_rng(1), star_count=10)
    simulation.step(0.0)
    assert len(simulation.population) == 0


def test_non_finite_count_does_not_crash():
    simulation = Simulation(FireflyConfig(count=float("nan")), W, H, np.random.default_rng(1))
    simulation.step(0.0)
    assert len(simulation.population) == 0


def test_resize_resets_stars(simulation):
    simulation.step(0.0)
    simulation.resize(200, 100)
    simulation.step(FRAME_MS)
    assert len(simulation.stars) == 50
    assert (simulation.stars.positions[:, 0] <= 200).all()
    assert (simulation.stars.positions[:, 1] <= 100).all()


def test_frame_phases_run_in_order(simulation):
    renderer = RecordingRenderer()
    simulation.step(0.0, renderer)
    assert renderer.events[0] == "begin"
    assert renderer.events[1] == "stars"
    assert len(renderer.events[2:]) == 35


def test_offscreen_retiring_firefly_is_drawn_then_swept(simulation):
    simulation.step(0.0)
    fireflies = simulation.population.fireflies
    fireflies[0] = replace(fireflies[0], x=-1000.0, retiring=True)

    renderer = RecordingRenderer()
    simulation.step(FRAME_MS, renderer)
    assert len(renderer.events[2:]) == 35
    assert len(simulation.population) == 34


def test_gather_clock_starts_when_gathering_begins(simulation):
    simulation.step(0.0)
    simulation.set_selection("heart", True)
    simulation.step(1000.0)
    assert simulation.gather_start_ms == 1000.0
    assert simulation.frame_inputs(1600.0).gather_elapsed_ms == pytest.approx(600.0)
    assert simulation.frame_inputs(1600.0).time_ms == pytest.approx(1600.0)


def test_switching_shapes_scatters_then_gathers_after_settle_delay(simulation):
    controller = SelectionController(simulation)
    controller.select("heart", 0.0)
    now = run_frames(simulation, 0.0, 10)
    heart_targets = simulation.targets.copy()

    controller.select("arrow_heart", now)
    simulation.step(now)
    assert all(f.target_index is None for f in simulation.population.fireflies)
    assert controller.waiting

    controller.poll(now + SETTLE_DELAY_MS - 1)
    simulation.step(now + SETTLE_DELAY_MS - 1)
    assert all(f.target_index is None for f in simulation.population.fireflies)

    controller.poll(now + SETTLE_DELAY_MS)
    simulation.step(now + SETTLE_DELAY_MS)
    assert not controller.waiting
    assert simulation.gathering and simulation.shape_id == "arrow_heart"
    assert simulation.targets.shape == (SHAPE_POINT_COUNT, 2)
    assert not np.array_equal(simulation.targets, heart_targets)
    assert len(simulation.population) == SHAPE_POINT_COUNT
