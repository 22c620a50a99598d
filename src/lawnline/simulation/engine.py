"""Game — the authoritative owner of one lane-defense episode.

Architecture
------------
``Game`` owns every collection (defenders, attackers, projectiles,
pickups, sweepers), the grid occupancy, the resource balance and the
wave scheduler.  It never sleeps and never reads the wall clock: the
simulated clock is ``ticks * TICK_DT`` and only ``tick()`` advances it.
Real-time pacing is the job of ``LoopDriver``.

One ``tick()`` runs, in order:

  1. defenders act (producers emit pickups, shooters fire, area-denial
     pulses, mines arm); new entities are buffered on the TickContext
  2. buffered projectiles and pickups join the live collections
  3. projectiles advance (and get empowered), pickups advance their
     rise/hover/fall machine, active sweepers advance
  4. ``CombatResolver.resolve()``: hits, melee, mines, boundary, sweeps
  5. the wave scheduler may spawn a wave
  6. landed pickups are auto-collected (when enabled); spent ones purged

Commands (place, remove, collect, click, tool/speed selection, reset)
take the same re-entrant lock as ``tick()``, so a command issued from an
HTTP handler never interleaves with a tick running on the loop thread.
Domain failures are returned as outcome enums, never raised.

Events published on EventBus:
  - ``defender_placed`` / ``defender_removed``
  - ``projectile_fired`` / ``pickup_spawned`` / ``pickup_collected``
  - ``sweeper_spent``: a sweeper left the field and is used up
  - ``game_over`` / ``game_reset``
  (combat and wave events are published by their own subsystems)
"""

from __future__ import annotations

import itertools
import random
import threading

from loguru import logger

from lawnline.comms.event_bus import EventBus
from lawnline.units import cost_table, get_type, placeable_type_ids, tool_palette

from .combat import CombatResolver
from .context import TickContext
from .entities import Attacker, Defender, Pickup, Projectile, Sweeper
from .grid import FIELD_HEIGHT, FIELD_WIDTH, Grid
from .outcomes import ClickResult, CollectOutcome, PlaceOutcome, RemoveOutcome
from .waves import WAVES_PER_LEVEL, WaveScheduler, speed_bonus_pct, wave_in_level, wave_size

INITIAL_RESOURCE = 500

# Fixed timestep
TICK_RATE = 60
TICK_DT = 1.0 / TICK_RATE

SPEED_MULTIPLIERS = (1, 2, 4, 8)

# Tool id for removing defenders (every other tool is a defender type_id)
REMOVE_TOOL = "remove"

# Sweepers wait this far left of the grid's left edge
SWEEPER_OFFSET_X = 40.0


class Game:
    """One episode of the lane-defense simulation."""

    def __init__(
        self,
        event_bus: EventBus | None = None,
        seed: int | None = None,
        auto_collect: bool = False,
    ) -> None:
        self._event_bus = event_bus if event_bus is not None else EventBus()
        self._lock = threading.RLock()
        self._rng = random.Random(seed)
        self._ids = itertools.count(1)

        self.grid = Grid()
        self.combat = CombatResolver(self._event_bus)
        self.waves = WaveScheduler(self._event_bus, self._rng, self.grid)

        # Player preferences survive reset()
        self.speed_multiplier: int = 1
        self.auto_collect: bool = auto_collect

        self._init_episode()

    def _init_episode(self) -> None:
        self.defenders: list[Defender] = []
        self.attackers: list[Attacker] = []
        self.projectiles: list[Projectile] = []
        self.pickups: list[Pickup] = []
        self.sweepers: list[Sweeper] = [
            Sweeper(
                lane=lane,
                x=self.grid.start_x - SWEEPER_OFFSET_X,
                y=self.grid.lane_y(lane),
            )
            for lane in range(self.grid.rows)
        ]
        self.grid.clear()
        self.resource: int = INITIAL_RESOURCE
        self.kills: int = 0
        self.game_over: bool = False
        self.selected_tool: str | None = None
        self._ticks: int = 0
        self.waves.reset(now=0.0)

    # -- Properties -------------------------------------------------------------

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def now(self) -> float:
        """Simulated seconds since the episode started."""
        return self._ticks * TICK_DT

    @property
    def level(self) -> int:
        return self.waves.level

    @property
    def wave_count(self) -> int:
        return self.waves.wave_count

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    # -- Tick -------------------------------------------------------------------

    def tick(self) -> None:
        """Advance the episode by exactly one fixed timestep."""
        with self._lock:
            if self.game_over:
                return
            self._ticks += 1
            ctx = TickContext(
                now=self.now,
                dt=TICK_DT,
                attackers=self.attackers,
                defenders=self.defenders,
                next_id=self._next_id,
            )

            for defender in list(self.defenders):
                defender.tick(ctx)
            self._merge_spawned(ctx)

            for projectile in self.projectiles:
                projectile.tick(ctx)
            for pickup in self.pickups:
                pickup.tick(ctx)
            for sweeper in self.sweepers:
                was_active = sweeper.active
                sweeper.tick(ctx)
                if was_active and sweeper.used:
                    logger.debug(f"Sweeper on lane {sweeper.lane} spent")
                    self._event_bus.publish("sweeper_spent", {"lane": sweeper.lane})

            self.combat.resolve(self, ctx)
            if self.game_over:
                return

            self.attackers.extend(self.waves.tick(ctx))
            self._settle_pickups()

    def _merge_spawned(self, ctx: TickContext) -> None:
        for projectile in ctx.new_projectiles:
            self._event_bus.publish("projectile_fired", {
                "projectile_id": projectile.id,
                "lane": projectile.lane,
                "position": {"x": projectile.x, "y": projectile.y},
            })
        for pickup in ctx.new_pickups:
            self._event_bus.publish("pickup_spawned", {
                "pickup_id": pickup.id,
                "position": {"x": pickup.x, "y": pickup.y},
            })
        self.projectiles.extend(ctx.new_projectiles)
        self.pickups.extend(ctx.new_pickups)

    def _settle_pickups(self) -> None:
        if self.auto_collect:
            for pickup in self.pickups:
                if not pickup.collected and pickup.landed:
                    self._collect(pickup)
        self.pickups[:] = [p for p in self.pickups if not p.expired]

    # -- Commands ---------------------------------------------------------------

    def place_defender(self, row: int, col: int, type_id: str) -> PlaceOutcome:
        """Plant a defender of *type_id* in the given cell, paying its cost."""
        with self._lock:
            if self.game_over:
                return PlaceOutcome.GAME_OVER
            kind = get_type(type_id)
            if kind is None or not kind.placeable:
                return PlaceOutcome.INVALID_TYPE
            if not self.grid.in_bounds(row, col):
                return PlaceOutcome.INVALID_CELL
            if self.grid.get(row, col) is not None:
                return PlaceOutcome.OCCUPIED
            cost = kind.stats.cost
            if self.resource < cost:
                return PlaceOutcome.INSUFFICIENT_RESOURCE

            x, y = self.grid.cell_center(row, col)
            defender = Defender(
                id=self._next_id(kind.type_id), kind=kind, row=row, col=col, x=x, y=y,
            )
            kind.on_placed(defender, self.now)
            self.grid.place(row, col, defender)
            self.defenders.append(defender)
            self.resource -= cost
            logger.debug(f"Placed {kind.type_id} at ({row}, {col}), resource {self.resource}")
            self._event_bus.publish("defender_placed", {
                "defender_id": defender.id,
                "type": kind.type_id,
                "row": row,
                "col": col,
                "cost": cost,
                "resource": self.resource,
            })
            return PlaceOutcome.PLACED

    def remove_defender(self, row: int, col: int) -> RemoveOutcome:
        """Dig up the defender in the given cell, refunding half its cost."""
        with self._lock:
            if self.game_over:
                return RemoveOutcome.GAME_OVER
            if not self.grid.in_bounds(row, col):
                return RemoveOutcome.INVALID_CELL
            defender = self.grid.get(row, col)
            if defender is None:
                return RemoveOutcome.EMPTY

            self.grid.remove(defender)
            self.defenders.remove(defender)
            refund = defender.kind.refund()
            self.resource += refund
            logger.debug(f"Removed {defender.type_id} at ({row}, {col}), refund {refund}")
            self._event_bus.publish("defender_removed", {
                "defender_id": defender.id,
                "type": defender.type_id,
                "row": row,
                "col": col,
                "refund": refund,
                "resource": self.resource,
            })
            return RemoveOutcome.REMOVED

    def collect_pickup(self, pickup_id: str) -> CollectOutcome:
        with self._lock:
            for pickup in self.pickups:
                if pickup.id != pickup_id:
                    continue
                if pickup.collected:
                    return CollectOutcome.ALREADY_COLLECTED
                self._collect(pickup)
                return CollectOutcome.COLLECTED
            return CollectOutcome.NOT_FOUND

    def _collect(self, pickup: Pickup) -> None:
        pickup.collected = True
        self.resource += pickup.value
        self._event_bus.publish("pickup_collected", {
            "pickup_id": pickup.id,
            "value": pickup.value,
            "resource": self.resource,
        })

    def click(self, x: float, y: float) -> ClickResult:
        """Resolve a pointer click: a pickup under the point wins, then the grid cell."""
        with self._lock:
            for pickup in self.pickups:
                if not pickup.collected and pickup.contains(x, y):
                    return ClickResult("collect", self.collect_pickup(pickup.id))

            cell = self.grid.cell_at(x, y)
            if cell is None:
                return ClickResult("none")
            row, col = cell
            if self.selected_tool is None:
                return ClickResult("none", row=row, col=col)
            if self.selected_tool == REMOVE_TOOL:
                return ClickResult("remove", self.remove_defender(row, col), row, col)

            outcome = self.place_defender(row, col, self.selected_tool)
            if outcome is PlaceOutcome.PLACED:
                self.selected_tool = None
            return ClickResult("place", outcome, row, col)

    def select_tool(self, tool: str | None) -> bool:
        """Select a placement tool or the removal tool.

        Selecting the tool that is already selected clears the selection.
        Returns False for an unknown tool.
        """
        with self._lock:
            if tool is None:
                self.selected_tool = None
                return True
            if tool != REMOVE_TOOL and tool not in placeable_type_ids():
                return False
            self.selected_tool = None if self.selected_tool == tool else tool
            return True

    def set_speed(self, multiplier: int) -> bool:
        with self._lock:
            if multiplier not in SPEED_MULTIPLIERS:
                return False
            self.speed_multiplier = multiplier
            logger.info(f"Speed multiplier set to {multiplier}x")
            return True

    def set_auto_collect(self, enabled: bool) -> None:
        with self._lock:
            self.auto_collect = enabled
            if enabled:
                self._settle_pickups()

    def end_game(self, attacker: Attacker) -> None:
        """Called by the resolver when an attacker breaks through a spent lane."""
        with self._lock:
            if self.game_over:
                return
            self.game_over = True
            self.waves.cancel()
            logger.warning(
                f"Game over: lane {attacker.lane} breached at level {self.level}, "
                f"wave {self.wave_count} ({self.kills} kills)"
            )
            self._event_bus.publish("game_over", {
                "lane": attacker.lane,
                "attacker_id": attacker.id,
                "level": self.level,
                "wave_count": self.wave_count,
                "kills": self.kills,
                "time": round(self.now, 3),
            })

    def reset(self) -> None:
        """Start a fresh episode. Speed multiplier and auto-collect are kept."""
        with self._lock:
            self.waves.cancel()
            self._init_episode()
            logger.info("Game reset")
            self._event_bus.publish("game_reset", {"resource": self.resource})

    # -- Read model -------------------------------------------------------------

    def get_game_state(self) -> dict:
        """HUD snapshot."""
        with self._lock:
            return {
                "resource": self.resource,
                "level": self.level,
                "wave_in_level": wave_in_level(self.wave_count),
                "waves_per_level": WAVES_PER_LEVEL,
                "wave_count": self.wave_count,
                "wave_size": wave_size(self.level, self.wave_count),
                "attackers_alive": sum(1 for a in self.attackers if a.alive),
                "speed_bonus_pct": speed_bonus_pct(self.level, self.wave_count),
                "speed_multiplier": self.speed_multiplier,
                "selected_tool": self.selected_tool,
                "auto_collect": self.auto_collect,
                "spawning": self.waves.spawning,
                "kills": self.kills,
                "game_over": self.game_over,
                "time": round(self.now, 3),
                "costs": cost_table(),
                "tools": tool_palette(),
            }

    def snapshot(self) -> dict:
        """HUD state plus the visual state of every entity."""
        with self._lock:
            now = self.now
            state = self.get_game_state()
            state.update({
                "field": {
                    "width": FIELD_WIDTH,
                    "height": FIELD_HEIGHT,
                    "rows": self.grid.rows,
                    "cols": self.grid.cols,
                    "cell_width": self.grid.cell_width,
                    "cell_height": self.grid.cell_height,
                    "start_x": self.grid.start_x,
                },
                "defenders": [d.to_dict(now) for d in self.defenders],
                "attackers": [a.to_dict(now) for a in self.attackers],
                "projectiles": [p.to_dict(now) for p in self.projectiles],
                "pickups": [p.to_dict(now) for p in self.pickups],
                "sweepers": [s.to_dict(now) for s in self.sweepers],
                "waves": self.waves.get_state(),
            })
            return state
