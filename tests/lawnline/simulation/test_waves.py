"""Unit tests for WaveScheduler — difficulty formulas and the spawn state machine."""
from __future__ import annotations

import itertools
import queue
import random

import pytest

from lawnline.comms.event_bus import EventBus
from lawnline.simulation.context import TickContext
from lawnline.simulation.entities import Attacker
from lawnline.simulation.grid import FIELD_WIDTH, Grid
from lawnline.simulation.waves import (
    MAX_WAVE_SIZE,
    WAVES_PER_LEVEL,
    PendingWave,
    WaveScheduler,
    attacker_speed,
    spawn_interval,
    speed_bonus_pct,
    wave_delay,
    wave_in_level,
    wave_size,
)

pytestmark = pytest.mark.unit

DT = 1 / 60


def _scheduler(seed: int = 3) -> tuple[WaveScheduler, queue.Queue]:
    bus = EventBus(maxsize=500)
    events = bus.subscribe()
    return WaveScheduler(bus, random.Random(seed), Grid()), events


def _ctx(now: float, attackers=None) -> TickContext:
    counter = itertools.count(1)
    return TickContext(
        now=now,
        dt=DT,
        attackers=attackers if attackers is not None else [],
        defenders=[],
        next_id=lambda prefix: f"{prefix}-{next(counter)}",
    )


def _blocker() -> Attacker:
    return Attacker(id="keep", lane=0, x=800.0, y=50.0, speed=0.2)


class TestFormulas:
    def test_wave_in_level(self):
        assert [wave_in_level(n) for n in (1, 9, 10, 11, 20, 21)] == [1, 9, 10, 1, 10, 1]

    def test_speed_level_one(self):
        assert attacker_speed(1, 1) == pytest.approx(0.2)
        assert speed_bonus_pct(1, 1) == 0

    def test_speed_grows_with_level_and_waves(self):
        assert attacker_speed(2, 11) == pytest.approx(0.2 * (1 + 0.3 + 0.2))
        assert speed_bonus_pct(2, 11) == 50

    def test_wave_speed_bonus_is_capped(self):
        assert attacker_speed(1, 200) == pytest.approx(0.2 * 1.8)

    def test_size_monotonic_within_level_and_capped(self):
        for level in range(1, 8):
            first = (level - 1) * WAVES_PER_LEVEL + 1
            sizes = [wave_size(level, n) for n in range(first, first + WAVES_PER_LEVEL)]
            assert sizes == sorted(sizes)
            assert max(sizes) <= MAX_WAVE_SIZE

    def test_size_values(self):
        assert wave_size(1, 1) == 2
        assert wave_size(1, 3) == 3
        assert wave_size(1, 10) == 5
        assert wave_size(3, 29) == 7
        assert wave_size(10, 100) == 7

    def test_delay_and_interval_floors(self):
        assert wave_delay(1) == pytest.approx(1.9)
        assert wave_delay(50) == 1.0
        assert spawn_interval(1) == pytest.approx(7.8)
        assert spawn_interval(50) == 4.0


class TestStateMachine:
    def test_reset_pends_opening_wave(self):
        s, _ = _scheduler()
        s.reset()
        assert s.level == 1 and s.wave_count == 1
        assert s.pending == PendingWave(remaining=0.0, advance=False)
        assert s.state == "spawning_delay"

    def test_opening_wave_spawns_on_first_tick_without_advancing(self):
        s, events = _scheduler()
        s.reset()
        spawned = s.tick(_ctx(DT))
        assert len(spawned) == wave_size(1, 1)
        assert s.wave_count == 1
        assert s.state == "spawned"
        assert all(a.x == FIELD_WIDTH for a in spawned)
        assert all(a.speed == pytest.approx(0.2) for a in spawned)
        assert [e["type"] for e in _drain(events)] == ["wave_start"]

    def test_distinct_lanes_until_all_used(self):
        s, _ = _scheduler()
        s.level = 5
        s.wave_count = 49
        s.pending = PendingWave(remaining=0.0, advance=False)
        spawned = s.tick(_ctx(DT, attackers=[_blocker()]))
        lanes = [a.lane for a in spawned]
        assert len(lanes) == 7
        assert sorted(lanes[:5]) == [0, 1, 2, 3, 4]
        assert lanes[5:] == lanes[:2]

    def test_empty_field_requests_wave_immediately(self):
        s, events = _scheduler()
        assert s.pending is None
        assert s.tick(_ctx(1.0)) == []
        assert s.spawning
        assert s.pending.remaining == pytest.approx(wave_delay(1) - DT)
        assert _drain(events)[0]["type"] == "wave_scheduled"

    def test_pending_wave_fires_after_delay_and_advances(self):
        s, _ = _scheduler()
        s.request_wave(0.0)
        ticks = 0
        spawned: list[Attacker] = []
        while not spawned:
            ticks += 1
            spawned = s.tick(_ctx(ticks * DT, attackers=[_blocker()]))
        assert ticks == pytest.approx(wave_delay(1) * 60, abs=1)
        assert s.wave_count == 2
        assert not s.spawning
        assert s.tick(_ctx((ticks + 1) * DT, attackers=[_blocker()])) == []
        assert s.state == "idle"

    def test_request_while_pending_is_ignored(self):
        s, _ = _scheduler()
        assert s.request_wave(0.0) is True
        first = s.pending
        assert s.request_wave(0.5) is False
        assert s.pending is first

    def test_periodic_trigger(self):
        s, _ = _scheduler()
        s.last_trigger_at = 0.0
        assert s.tick(_ctx(spawn_interval(1) - 0.1, attackers=[_blocker()])) == []
        assert not s.spawning
        s.tick(_ctx(spawn_interval(1), attackers=[_blocker()]))
        assert s.spawning

    def test_level_rises_after_tenth_wave(self):
        s, events = _scheduler()
        s.wave_count = WAVES_PER_LEVEL
        s.pending = PendingWave(remaining=0.0)
        s.tick(_ctx(DT, attackers=[_blocker()]))
        assert s.level == 2
        assert s.wave_count == WAVES_PER_LEVEL + 1
        types = [e["type"] for e in _drain(events)]
        assert types == ["level_up", "wave_start"]

    def test_cancel_drops_pending_wave(self):
        s, _ = _scheduler()
        s.request_wave(0.0)
        s.cancel()
        assert not s.spawning
        assert s.tick(_ctx(DT, attackers=[_blocker()])) == []

    def test_wave_count_is_monotonic(self):
        s, _ = _scheduler()
        s.reset()
        seen = [s.wave_count]
        for n in range(1, 60 * 120):
            s.tick(_ctx(n * DT))
            seen.append(s.wave_count)
        assert seen == sorted(seen)
        assert seen[-1] > 1


def _drain(events: queue.Queue) -> list[dict]:
    out = []
    while True:
        try:
            out.append(events.get_nowait())
        except queue.Empty:
            return out
