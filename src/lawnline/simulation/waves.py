"""WaveScheduler — spawn timing, wave sizing and level escalation.

Architecture
------------
The scheduler is a small state machine consumed by ``Game.tick()``:

  idle -> spawning_delay -> spawned -> idle

A wave is requested either by the periodic trigger (every
``spawn_interval(wave_count)`` simulated seconds) or immediately when
the attacker collection is empty, so the player never waits through
dead time.  A request does not spawn at once: it arms a ``PendingWave``
countdown of ``wave_delay(wave_count)`` seconds that ``tick()`` drains
by the fixed timestep.  At most one wave is pending; further requests
are ignored until it fires.  ``cancel()`` drops the pending wave, which
is how ``Game.reset()`` keeps a stale spawn out of a fresh episode.

When a pending wave fires:
  - if ``wave_count`` is a multiple of WAVES_PER_LEVEL the level rises
  - ``wave_count`` increments
  - speed and size are computed from the new level/wave
  - lanes are drawn from a uniform shuffle (wrapping around once every
    lane has one attacker) and one attacker spawns per drawn lane at
    the right edge of the field

The opening wave after a reset is pending with zero delay and does not
advance the counters, so wave 1 spawns on the first tick.

Difficulty:
  speed  = BASE * (1 + (level-1)*0.3 + min((wave_count // 10) * 0.2, 0.8))
  size   = min(min(2 + (level-1), 4) + wave_in_level // 3, 7)
  delay  = max(2.0 - wave_count*0.1, 1.0) s
  period = max(8.0 - wave_count*0.2, 4.0) s

Events published on EventBus:
  - ``wave_scheduled``: a wave countdown started
  - ``wave_start``: attackers of a wave entered the field
  - ``level_up``: the level increased
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from .entities import Attacker
from .grid import FIELD_WIDTH

if TYPE_CHECKING:
    from lawnline.comms.event_bus import EventBus
    from .context import TickContext
    from .grid import Grid

WAVES_PER_LEVEL = 10

# Attacker speed formula (units per tick)
BASE_ATTACKER_SPEED = 0.2
LEVEL_SPEED_BONUS = 0.3
WAVE_SPEED_STEP = 10
WAVE_SPEED_BONUS = 0.2
WAVE_SPEED_BONUS_CAP = 0.8

# Wave size formula
BASE_WAVE_SIZE = 2
LEVEL_WAVE_SIZE_CAP = 4
WAVE_SIZE_STEP = 3
MAX_WAVE_SIZE = 7

# Countdown between a wave request and the spawn (simulated seconds)
WAVE_DELAY_BASE = 2.0
WAVE_DELAY_DECREMENT = 0.1
WAVE_DELAY_MIN = 1.0

# Periodic wave trigger (simulated seconds)
SPAWN_INTERVAL_BASE = 8.0
SPAWN_INTERVAL_DECREMENT = 0.2
SPAWN_INTERVAL_MIN = 4.0


def wave_in_level(wave_count: int) -> int:
    """1-based position of *wave_count* inside its level."""
    return (wave_count - 1) % WAVES_PER_LEVEL + 1


def attacker_speed(level: int, wave_count: int) -> float:
    level_bonus = (level - 1) * LEVEL_SPEED_BONUS
    wave_bonus = min((wave_count // WAVE_SPEED_STEP) * WAVE_SPEED_BONUS, WAVE_SPEED_BONUS_CAP)
    return BASE_ATTACKER_SPEED * (1 + level_bonus + wave_bonus)


def speed_bonus_pct(level: int, wave_count: int) -> int:
    return round((attacker_speed(level, wave_count) / BASE_ATTACKER_SPEED - 1) * 100)


def wave_size(level: int, wave_count: int) -> int:
    base = min(BASE_WAVE_SIZE + (level - 1), LEVEL_WAVE_SIZE_CAP)
    return min(base + wave_in_level(wave_count) // WAVE_SIZE_STEP, MAX_WAVE_SIZE)


def wave_delay(wave_count: int) -> float:
    return max(WAVE_DELAY_BASE - wave_count * WAVE_DELAY_DECREMENT, WAVE_DELAY_MIN)


def spawn_interval(wave_count: int) -> float:
    return max(SPAWN_INTERVAL_BASE - wave_count * SPAWN_INTERVAL_DECREMENT, SPAWN_INTERVAL_MIN)


@dataclass
class PendingWave:
    """A scheduled, cancellable wave spawn."""

    remaining: float
    advance: bool = True


class WaveScheduler:
    """Wave state machine + difficulty escalation."""

    def __init__(self, event_bus: EventBus, rng: random.Random, grid: Grid) -> None:
        self._event_bus = event_bus
        self._rng = rng
        self._grid = grid

        self.state: str = "idle"
        self.level: int = 1
        self.wave_count: int = 1
        self.pending: PendingWave | None = None
        self.last_trigger_at: float = 0.0

    # -- Public interface -------------------------------------------------------

    @property
    def spawning(self) -> bool:
        return self.pending is not None

    def reset(self, now: float = 0.0) -> None:
        """Back to level 1 / wave 1 with the opening wave pending."""
        self.level = 1
        self.wave_count = 1
        self.last_trigger_at = now
        self.pending = PendingWave(remaining=0.0, advance=False)
        self.state = "spawning_delay"

    def cancel(self) -> None:
        """Drop any pending wave."""
        self.pending = None
        self.state = "idle"

    def request_wave(self, now: float) -> bool:
        """Start the countdown for the next wave. Ignored while one is pending."""
        if self.pending is not None:
            return False
        delay = wave_delay(self.wave_count)
        self.pending = PendingWave(remaining=delay)
        self.state = "spawning_delay"
        self.last_trigger_at = now
        self._event_bus.publish("wave_scheduled", {
            "wave_count": self.wave_count + 1,
            "delay": delay,
        })
        return True

    def tick(self, ctx: TickContext) -> list[Attacker]:
        """Advance timers by one step. Returns the attackers spawned this tick."""
        if self.state == "spawned":
            self.state = "idle"

        if self.pending is None:
            if not ctx.attackers:
                self.request_wave(ctx.now)
            elif ctx.now - self.last_trigger_at >= spawn_interval(self.wave_count):
                self.request_wave(ctx.now)

        if self.pending is None:
            return []
        self.pending.remaining -= ctx.dt
        if self.pending.remaining > 0:
            return []
        return self._fire(ctx)

    def get_state(self) -> dict:
        return {
            "state": self.state,
            "level": self.level,
            "wave_count": self.wave_count,
            "wave_in_level": wave_in_level(self.wave_count),
            "waves_per_level": WAVES_PER_LEVEL,
            "wave_size": wave_size(self.level, self.wave_count),
            "attacker_speed": round(attacker_speed(self.level, self.wave_count), 4),
            "speed_bonus_pct": speed_bonus_pct(self.level, self.wave_count),
            "spawning": self.spawning,
            "countdown": round(self.pending.remaining, 3) if self.pending else None,
        }

    # -- Wave management --------------------------------------------------------

    def _fire(self, ctx: TickContext) -> list[Attacker]:
        advance = self.pending.advance
        self.pending = None
        if advance:
            if self.wave_count % WAVES_PER_LEVEL == 0:
                self.level += 1
                logger.info(f"Level up: {self.level}")
                self._event_bus.publish("level_up", {"level": self.level})
            self.wave_count += 1

        speed = attacker_speed(self.level, self.wave_count)
        count = wave_size(self.level, self.wave_count)
        lanes = self._choose_lanes(count)
        attackers = [
            Attacker(
                id=ctx.next_id("attacker"),
                lane=lane,
                x=FIELD_WIDTH,
                y=self._grid.lane_y(lane),
                speed=speed,
            )
            for lane in lanes
        ]
        self.state = "spawned"
        logger.debug(
            f"Wave {self.wave_count} (level {self.level}): "
            f"{count} attackers at speed {speed:.3f} on lanes {lanes}"
        )
        self._event_bus.publish("wave_start", {
            "wave_count": self.wave_count,
            "wave_in_level": wave_in_level(self.wave_count),
            "level": self.level,
            "attacker_count": count,
            "speed": speed,
            "lanes": lanes,
        })
        return attackers

    def _choose_lanes(self, count: int) -> list[int]:
        lanes = list(range(self._grid.rows))
        self._rng.shuffle(lanes)
        return [lanes[i % len(lanes)] for i in range(count)]
