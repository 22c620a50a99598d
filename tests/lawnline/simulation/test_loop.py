"""Unit tests for LoopDriver — fixed-timestep accumulation and speed multiplier."""
from __future__ import annotations

import time

import pytest

from lawnline.comms.event_bus import EventBus
from lawnline.simulation import TICK_DT, Game, LoopDriver

pytestmark = pytest.mark.unit


def _seeded_game(seed: int = 5) -> Game:
    game = Game(EventBus(maxsize=10), seed=seed)
    game.place_defender(0, 0, "sunflower")
    game.place_defender(1, 1, "peashooter")
    game.place_defender(2, 2, "peashooter")
    game.place_defender(2, 5, "wallnut")
    game.place_defender(3, 4, "spikeweed")
    return game


def _comparable(snapshot: dict) -> dict:
    snapshot = dict(snapshot)
    snapshot.pop("speed_multiplier")
    return snapshot


class TestFrameAccounting:
    def test_one_frame_one_tick_at_1x(self):
        game = Game(EventBus())
        driver = LoopDriver(game)
        assert driver.frame(TICK_DT) == 1
        assert game.ticks == 1

    def test_partial_frames_accumulate(self):
        game = Game(EventBus())
        driver = LoopDriver(game)
        assert driver.frame(TICK_DT / 2) == 0
        assert driver.frame(TICK_DT / 2) == 1
        assert game.ticks == 1

    @pytest.mark.parametrize("multiplier", [1, 2, 4, 8])
    def test_multiplier_scales_ticks_per_frame(self, multiplier):
        game = Game(EventBus())
        game.set_speed(multiplier)
        driver = LoopDriver(game)
        for _ in range(30):
            assert driver.frame(TICK_DT) == multiplier
        assert game.ticks == 30 * multiplier

    def test_backlog_is_capped_and_dropped(self):
        game = Game(EventBus())
        driver = LoopDriver(game, max_ticks_per_frame=10)
        assert driver.frame(TICK_DT * 25) == 10
        assert driver.dropped_ticks == 15
        assert driver.accumulator < 1.0
        assert driver.frame(TICK_DT) == 1

    def test_on_frame_receives_snapshot(self):
        game = Game(EventBus())
        frames: list[dict] = []
        driver = LoopDriver(game, on_frame=frames.append)
        driver.frame(TICK_DT)
        driver.frame(0.0)
        assert len(frames) == 2
        assert frames[0]["time"] == round(TICK_DT, 3)
        assert driver.frames == 2
        assert driver.ticks == 1


class TestSpeedEquivalence:
    def test_4x_matches_1x_over_four_times_the_frames(self):
        fast = _seeded_game()
        fast.set_speed(4)
        slow = _seeded_game()

        fast_driver = LoopDriver(fast)
        slow_driver = LoopDriver(slow)
        frames = 60 * 30
        for _ in range(frames):
            fast_driver.frame(TICK_DT)
        for _ in range(frames * 4):
            slow_driver.frame(TICK_DT)

        assert fast.ticks == slow.ticks == frames * 4
        assert _comparable(fast.snapshot()) == _comparable(slow.snapshot())

    def test_same_real_time_runs_four_times_the_ticks(self):
        fast = _seeded_game()
        fast.set_speed(4)
        slow = _seeded_game()
        fast_driver = LoopDriver(fast)
        slow_driver = LoopDriver(slow)
        for _ in range(120):
            fast_driver.frame(TICK_DT)
            slow_driver.frame(TICK_DT)
        assert fast.ticks == 4 * slow.ticks
        assert fast.now == pytest.approx(4 * slow.now)


class TestThread:
    def test_start_and_stop(self):
        game = Game(EventBus())
        driver = LoopDriver(game, frame_rate=200.0)
        driver.start()
        assert driver.running
        deadline = time.monotonic() + 2.0
        while game.ticks == 0 and time.monotonic() < deadline:
            time.sleep(0.01)
        driver.stop()
        assert not driver.running
        assert game.ticks > 0
