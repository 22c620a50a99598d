"""LoopDriver — paces fixed-timestep ticks against real elapsed time.

Each ``frame(elapsed)`` adds ``elapsed * speed_multiplier`` worth of
simulated time to an accumulator (kept in tick units), runs one
``Game.tick()`` per whole tick accumulated, then hands a snapshot to
the ``on_frame`` callback.  The multiplier therefore changes how many
ticks run per real second and nothing else: four frames at 4x produce
exactly the state of sixteen frames at 1x.

A stalled host would otherwise demand an unbounded catch-up burst, so
at most ``max_ticks_per_frame`` ticks run per frame; the backlog beyond
that is dropped.

``start()`` runs ``frame()`` from a daemon thread at ``frame_rate``
Hz.  Tests and the headless runner call ``frame()`` directly.
"""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Callable

from loguru import logger

from .engine import TICK_DT

if TYPE_CHECKING:
    from .engine import Game

MAX_TICKS_PER_FRAME = 64

# Absorbs float error so 4 * (1/60) of real time is 4 ticks, not 3
_EPSILON = 1e-9


class LoopDriver:
    """Drives a Game at a fixed timestep with a speed multiplier."""

    def __init__(
        self,
        game: Game,
        on_frame: Callable[[dict], None] | None = None,
        tick_dt: float = TICK_DT,
        frame_rate: float = 60.0,
        max_ticks_per_frame: int = MAX_TICKS_PER_FRAME,
    ) -> None:
        self._game = game
        self._on_frame = on_frame
        self._tick_dt = tick_dt
        self._frame_rate = frame_rate
        self._max_ticks = max_ticks_per_frame
        self._accumulator = 0.0

        self._running = False
        self._thread: threading.Thread | None = None

        self.frames = 0
        self.ticks = 0
        self.dropped_ticks = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def accumulator(self) -> float:
        """Pending simulated time, in ticks."""
        return self._accumulator

    def frame(self, elapsed: float) -> int:
        """Account for *elapsed* real seconds. Returns the ticks executed."""
        if elapsed > 0:
            self._accumulator += elapsed * self._game.speed_multiplier / self._tick_dt

        executed = 0
        while self._accumulator >= 1.0 - _EPSILON and executed < self._max_ticks:
            self._game.tick()
            self._accumulator -= 1.0
            executed += 1

        if self._accumulator >= 1.0 - _EPSILON:
            dropped = int(self._accumulator + _EPSILON)
            self._accumulator -= dropped
            self.dropped_ticks += dropped
            logger.warning(f"Loop fell behind: dropped {dropped} ticks")
        if self._accumulator < 0:
            self._accumulator = 0.0

        self.frames += 1
        self.ticks += executed
        if self._on_frame is not None:
            self._on_frame(self._game.snapshot())
        return executed

    # -- Lifecycle ----------------------------------------------------------

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(
            target=self._run, name="lawnline-loop", daemon=True
        )
        self._thread.start()
        logger.info(f"Game loop started ({self._frame_rate:g} fps)")

    def stop(self) -> None:
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        logger.info(f"Game loop stopped after {self.frames} frames, {self.ticks} ticks")

    def _run(self) -> None:
        period = 1.0 / self._frame_rate
        last = time.monotonic()
        while self._running:
            time.sleep(period)
            now = time.monotonic()
            try:
                self.frame(now - last)
            except Exception as e:
                logger.opt(exception=True).error(f"Game loop frame failed: {e}")
            last = now
