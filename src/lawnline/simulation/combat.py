"""CombatResolver — per-tick collision detection and damage resolution.

Architecture
------------
The resolver runs once per tick, after every entity has taken its own
step, and operates directly on the Game's live collections.  Passes run
in a fixed order:

  1. Projectile vs attacker.  Each projectile hits the first living
     attacker in its lane whose body span contains it, then is removed
     (at most one hit).  Projectiles past the right edge are dropped.
     Attackers at zero health (including those hurt by area-denial
     defenders earlier in the tick) are purged right after this pass, so
     a projectile resolved later in the same tick cannot hit an attacker
     an earlier projectile already killed; it simply flies on.

  2. Attacker vs defender (melee).  Overlapping blocking defenders halt
     the attacker, which bites every ``attack_interval`` simulated
     seconds.  A defender reduced to zero is removed from the flat list
     and the grid immediately, and the attacker moves in this same tick.
     An armed mine overlapping an attacker detonates instead, damaging
     every attacker in its lane within the blast radius.  Area-denial
     defenders never block and are never bitten.

  3. Boundary.  An attacker at or past the grid's left edge activates
     its lane's sweeper; if that sweeper is already used the game ends.

  4. Sweepers.  Every active sweeper destroys the attackers of its lane
     it has reached.

Events published on the EventBus for audio/HUD collaborators:
  - ``projectile_hit``: damage applied by a projectile
  - ``defender_attacked``: an attacker bit a defender
  - ``defender_destroyed``: a defender's health reached zero
  - ``mine_detonated``: an armed mine went off
  - ``attacker_eliminated``: an attacker was removed
  - ``sweeper_triggered``: a lane's sweeper started its run
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from lawnline.units.base import DefenderRole
from lawnline.units.defenders.potato_mine import BLAST_DAMAGE, BLAST_RADIUS

if TYPE_CHECKING:
    from lawnline.comms.event_bus import EventBus
    from .context import TickContext
    from .engine import Game
    from .entities import Attacker, Defender, Projectile


def _overlaps(a: tuple[float, float], b: tuple[float, float]) -> bool:
    return a[0] < b[1] and b[0] < a[1]


class CombatResolver:
    """Resolves projectile hits, melee, mines, boundary crossings and sweeps."""

    def __init__(self, event_bus: EventBus) -> None:
        self._event_bus = event_bus

    def resolve(self, game: Game, ctx: TickContext) -> None:
        self._resolve_projectiles(game, ctx)
        self._purge_dead(game, cause="damage")
        self._resolve_melee(game, ctx)
        self._purge_dead(game, cause="detonation")
        self._resolve_boundary(game, ctx)
        if game.game_over:
            return
        self._resolve_sweepers(game, ctx)
        self._purge_dead(game, cause="sweeper")

    # -- 1. Projectiles ---------------------------------------------------------

    def _resolve_projectiles(self, game: Game, ctx: TickContext) -> None:
        lane_tolerance = game.grid.cell_height / 2
        survivors: list[Projectile] = []
        for proj in game.projectiles:
            target = self._first_hit(proj, game.attackers, lane_tolerance)
            if target is not None:
                target.apply_damage(proj.damage, ctx.now)
                self._event_bus.publish("projectile_hit", {
                    "projectile_id": proj.id,
                    "attacker_id": target.id,
                    "damage": proj.damage,
                    "empowered": proj.empowered,
                    "remaining_health": target.health,
                })
                continue
            if proj.out_of_bounds():
                continue
            survivors.append(proj)
        game.projectiles[:] = survivors

    @staticmethod
    def _first_hit(
        proj: Projectile, attackers: list[Attacker], lane_tolerance: float,
    ) -> Attacker | None:
        for attacker in attackers:
            if not attacker.alive:
                continue
            if abs(proj.y - attacker.y) >= lane_tolerance:
                continue
            left, right = attacker.span()
            if left <= proj.x <= right:
                return attacker
        return None

    # -- 2. Melee -----------------------------------------------------------------

    def _resolve_melee(self, game: Game, ctx: TickContext) -> None:
        for attacker in list(game.attackers):
            if not attacker.alive:
                continue
            blocked = False
            for defender in list(game.defenders):
                if defender.row != attacker.lane or not defender.alive:
                    continue
                if not _overlaps(attacker.span(), defender.span()):
                    continue
                if defender.kind.role is DefenderRole.EXPLOSIVE and defender.armed:
                    self._detonate(game, defender, ctx)
                    continue
                if not defender.blocks or not defender.kind.melee_target:
                    continue
                blocked = True
                if not attacker.can_attack(ctx.now):
                    continue
                attacker.last_attack_at = ctx.now
                destroyed = defender.apply_damage(attacker.attack_damage, ctx.now)
                self._event_bus.publish("defender_attacked", {
                    "defender_id": defender.id,
                    "attacker_id": attacker.id,
                    "damage": attacker.attack_damage,
                    "remaining_health": defender.health,
                })
                if destroyed:
                    self._destroy_defender(game, defender, "eaten")
                    blocked = False
            if not attacker.alive:
                continue
            attacker.blocked = blocked
            if not blocked:
                attacker.tick(ctx)

    def _detonate(self, game: Game, mine: Defender, ctx: TickContext) -> None:
        victims = 0
        for attacker in game.attackers:
            if attacker.lane != mine.row or not attacker.alive:
                continue
            if abs(attacker.x - mine.x) <= BLAST_RADIUS:
                attacker.apply_damage(BLAST_DAMAGE, ctx.now)
                victims += 1
        mine.health = 0
        self._event_bus.publish("mine_detonated", {
            "defender_id": mine.id,
            "row": mine.row,
            "col": mine.col,
            "position": {"x": mine.x, "y": mine.y},
            "attackers_hit": victims,
        })
        self._destroy_defender(game, mine, "detonated")

    def _destroy_defender(self, game: Game, defender: Defender, reason: str) -> None:
        if defender in game.defenders:
            game.defenders.remove(defender)
        game.grid.remove(defender)
        self._event_bus.publish("defender_destroyed", {
            "defender_id": defender.id,
            "type": defender.type_id,
            "row": defender.row,
            "col": defender.col,
            "reason": reason,
        })

    # -- 3. Boundary --------------------------------------------------------------

    def _resolve_boundary(self, game: Game, ctx: TickContext) -> None:
        boundary = game.grid.start_x
        for attacker in game.attackers:
            if attacker.x > boundary:
                continue
            sweeper = game.sweepers[attacker.lane]
            if sweeper.used:
                game.end_game(attacker)
                return
            if sweeper.activate():
                logger.info(f"Sweeper triggered on lane {sweeper.lane}")
                self._event_bus.publish("sweeper_triggered", {
                    "lane": sweeper.lane,
                    "attacker_id": attacker.id,
                })

    # -- 4. Sweepers --------------------------------------------------------------

    def _resolve_sweepers(self, game: Game, ctx: TickContext) -> None:
        for sweeper in game.sweepers:
            if not sweeper.active:
                continue
            reach = sweeper.reach()
            for attacker in game.attackers:
                if attacker.lane == sweeper.lane and attacker.alive and attacker.x <= reach:
                    attacker.health = 0.0

    # -- Cleanup ------------------------------------------------------------------

    def _purge_dead(self, game: Game, cause: str) -> None:
        alive: list[Attacker] = []
        for attacker in game.attackers:
            if attacker.alive:
                alive.append(attacker)
                continue
            game.kills += 1
            self._event_bus.publish("attacker_eliminated", {
                "attacker_id": attacker.id,
                "lane": attacker.lane,
                "position": {"x": attacker.x, "y": attacker.y},
                "method": cause,
            })
        game.attackers[:] = alive
