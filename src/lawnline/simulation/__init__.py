"""Lane-defense simulation core: grid, entities, combat, waves and the Game."""

from .combat import CombatResolver
from .context import TickContext
from .engine import (
    INITIAL_RESOURCE,
    REMOVE_TOOL,
    SPEED_MULTIPLIERS,
    TICK_DT,
    TICK_RATE,
    Game,
)
from .entities import Attacker, Defender, Pickup, Projectile, Sweeper
from .grid import Grid
from .loop import MAX_TICKS_PER_FRAME, LoopDriver
from .outcomes import ClickResult, CollectOutcome, PlaceOutcome, RemoveOutcome
from .waves import PendingWave, WaveScheduler

__all__ = [
    "Attacker",
    "ClickResult",
    "CollectOutcome",
    "CombatResolver",
    "Defender",
    "Game",
    "Grid",
    "INITIAL_RESOURCE",
    "LoopDriver",
    "MAX_TICKS_PER_FRAME",
    "PendingWave",
    "Pickup",
    "PlaceOutcome",
    "Projectile",
    "REMOVE_TOOL",
    "RemoveOutcome",
    "SPEED_MULTIPLIERS",
    "Sweeper",
    "TICK_DT",
    "TICK_RATE",
    "TickContext",
    "WaveScheduler",
]
