"""Entity models — Defender, Attacker, Projectile, Pickup, Sweeper.

Architecture
------------
Every entity is a flat dataclass that owns its own timers and health and
exposes ``tick(ctx)`` for one fixed simulation step.  Timers compare
against ``ctx.now``, the simulated clock, never against wall time, so a
run is fully determined by its tick count and random seed.

Defender behaviour is NOT switched on a type string here.  ``Defender``
holds a reference to its ``DefenderType`` variant (``kind``) and
delegates ``tick()`` to it, so adding a type means adding one module
under ``lawnline.units.defenders``.

Interactions *between* entities (hits, melee, sweeping) are resolved by
``CombatResolver``; an entity's own ``tick()`` only changes that entity,
emits new entities through the context, or (for area-denial defenders)
damages attackers in reach.

``to_dict(now)`` is the per-entity "describe visual state" read used by
renderers: position, type, health, flashing flag, state-machine phase.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lawnline.units.base import DefenderRole

from .grid import FIELD_WIDTH

if TYPE_CHECKING:
    from lawnline.units.base import DefenderType
    from .context import TickContext

# Hit feedback window (simulated seconds)
FLASH_DURATION = 0.2

# Attacker defaults
ATTACKER_HEALTH = 100.0
ATTACKER_SIZE = 40.0
ATTACKER_DAMAGE = 10.0
ATTACKER_ATTACK_INTERVAL = 1.0  # simulated seconds between bites

# Projectile defaults (speed in units per tick)
PROJECTILE_SPEED = 8.0
PROJECTILE_DAMAGE = 20.0
PROJECTILE_SIZE = 12.0

# Pickup defaults (speeds in units per tick)
PICKUP_VALUE = 25
PICKUP_SIZE = 30.0
PICKUP_SPEED = 1.0
PICKUP_RISE = 100.0
PICKUP_HOVER = 1.0  # simulated seconds at the top of the arc

# Sweeper defaults
SWEEPER_SIZE = 40.0
SWEEPER_SPEED = 5.0


@dataclass
class Defender:
    """A stationary unit occupying one grid cell."""

    id: str
    kind: type[DefenderType]
    row: int
    col: int
    x: float
    y: float
    health: float = 0.0
    max_health: float = 0.0
    flash_until: float = 0.0

    # Per-type timers; each variant initialises the ones it uses
    last_shot_at: float | None = None
    last_produced_at: float = 0.0
    last_pulse_at: float = 0.0
    ready_at: float = 0.0
    armed: bool = False

    def __post_init__(self) -> None:
        if self.max_health <= 0:
            self.max_health = float(self.kind.stats.health)
        if self.health <= 0:
            self.health = self.max_health

    @property
    def type_id(self) -> str:
        return self.kind.type_id

    @property
    def size(self) -> float:
        return self.kind.size

    @property
    def blocks(self) -> bool:
        return self.kind.blocks

    @property
    def alive(self) -> bool:
        return self.health > 0

    def span(self) -> tuple[float, float]:
        half = self.size / 2
        return (self.x - half, self.x + half)

    def apply_damage(self, amount: float, now: float) -> bool:
        """Apply *amount* damage. Returns True if this defender is destroyed."""
        self.health -= amount
        self.flash_until = now + FLASH_DURATION
        return self.health <= 0

    def tick(self, ctx: TickContext) -> None:
        self.kind.tick(self, ctx)

    def to_dict(self, now: float) -> dict:
        data = {
            "id": self.id,
            "type": self.type_id,
            "role": self.kind.role.value,
            "row": self.row,
            "col": self.col,
            "position": {"x": self.x, "y": self.y},
            "health": round(self.health, 1),
            "max_health": round(self.max_health, 1),
            "flashing": now < self.flash_until,
        }
        data.update(self.kind.describe(self, now))
        return data


@dataclass
class Attacker:
    """A mobile unit walking leftward along one lane."""

    id: str
    lane: int
    x: float
    y: float
    speed: float
    health: float = ATTACKER_HEALTH
    max_health: float = ATTACKER_HEALTH
    size: float = ATTACKER_SIZE
    attack_damage: float = ATTACKER_DAMAGE
    attack_interval: float = ATTACKER_ATTACK_INTERVAL
    last_attack_at: float | None = None
    flash_until: float = 0.0
    blocked: bool = False

    @property
    def alive(self) -> bool:
        return self.health > 0

    def span(self) -> tuple[float, float]:
        half = self.size / 2
        return (self.x - half, self.x + half)

    def apply_damage(self, amount: float, now: float) -> bool:
        """Apply *amount* damage. Returns True if this attacker is eliminated."""
        self.health -= amount
        self.flash_until = now + FLASH_DURATION
        return self.health <= 0

    def can_attack(self, now: float) -> bool:
        return self.last_attack_at is None or now - self.last_attack_at >= self.attack_interval

    def tick(self, ctx: TickContext) -> None:
        """Advance one step leftward.  Only called when nothing blocks it."""
        self.x -= self.speed

    def to_dict(self, now: float) -> dict:
        return {
            "id": self.id,
            "lane": self.lane,
            "position": {"x": self.x, "y": self.y},
            "health": round(self.health, 1),
            "max_health": round(self.max_health, 1),
            "speed": self.speed,
            "flashing": now < self.flash_until,
            "state": "attacking" if self.blocked else "walking",
        }


@dataclass
class Projectile:
    """A shot travelling rightward along a lane; lands at most one hit."""

    id: str
    lane: int
    x: float
    y: float
    speed: float = PROJECTILE_SPEED
    damage: float = PROJECTILE_DAMAGE
    size: float = PROJECTILE_SIZE
    empowered: bool = False

    def tick(self, ctx: TickContext) -> None:
        self.x += self.speed
        if self.empowered:
            return
        for defender in ctx.defenders:
            if defender.kind.role is not DefenderRole.AMPLIFIER or defender.row != self.lane:
                continue
            if abs(self.x - defender.x) < defender.size / 2:
                self.empowered = True
                self.damage *= 2
                break

    def out_of_bounds(self) -> bool:
        return self.x >= FIELD_WIDTH

    def to_dict(self, now: float) -> dict:
        return {
            "id": self.id,
            "lane": self.lane,
            "position": {"x": self.x, "y": self.y},
            "damage": self.damage,
            "empowered": self.empowered,
        }


@dataclass
class Pickup:
    """A resource orb: rises, hovers, falls back and waits to be collected.

    Phases:
      rising -> hovering (PICKUP_HOVER s) -> falling -> rests at origin_y
      collected: drifts up while shrinking; purged at size 0
    """

    id: str
    x: float
    y: float
    origin_y: float = 0.0
    target_y: float = 0.0
    value: int = PICKUP_VALUE
    size: float = PICKUP_SIZE
    speed: float = PICKUP_SPEED
    state: str = "rising"  # "rising", "hovering", "falling"
    hover_started_at: float | None = None
    collected: bool = False

    def __post_init__(self) -> None:
        self.origin_y = self.y
        self.target_y = self.y - PICKUP_RISE

    @property
    def landed(self) -> bool:
        return self.state == "falling" and self.y >= self.origin_y

    @property
    def expired(self) -> bool:
        return self.collected and self.size <= 0

    def contains(self, x: float, y: float) -> bool:
        dx = x - self.x
        dy = y - self.y
        return dx * dx + dy * dy < self.size * self.size

    def tick(self, ctx: TickContext) -> None:
        if self.collected:
            self.y -= self.speed * 2
            self.size = max(0.0, self.size - 1)
            return

        if self.state == "rising":
            self.y = max(self.target_y, self.y - self.speed)
            if self.y <= self.target_y:
                self.state = "hovering"
                self.hover_started_at = ctx.now
        elif self.state == "hovering":
            if ctx.now - self.hover_started_at >= PICKUP_HOVER:
                self.state = "falling"
        elif self.state == "falling":
            if self.y < self.origin_y:
                self.y = min(self.origin_y, self.y + self.speed)

    def to_dict(self, now: float) -> dict:
        return {
            "id": self.id,
            "position": {"x": self.x, "y": self.y},
            "size": self.size,
            "state": self.state,
            "collected": self.collected,
            "value": self.value,
        }


@dataclass
class Sweeper:
    """One-shot last line of defense guarding the left end of a lane.

    Lifecycle: inactive -> active -> used.  Exactly one activation per
    lane per episode.
    """

    lane: int
    x: float
    y: float
    size: float = SWEEPER_SIZE
    speed: float = SWEEPER_SPEED
    active: bool = False
    used: bool = False

    @property
    def state(self) -> str:
        if self.used:
            return "used"
        return "active" if self.active else "inactive"

    def activate(self) -> bool:
        """Start the sweep. Returns False if already active or used."""
        if self.active or self.used:
            return False
        self.active = True
        return True

    def reach(self) -> float:
        return self.x + self.size / 2

    def tick(self, ctx: TickContext) -> None:
        if not self.active:
            return
        self.x += self.speed
        if self.x - self.size / 2 > FIELD_WIDTH:
            self.active = False
            self.used = True

    def to_dict(self, now: float) -> dict:
        return {
            "lane": self.lane,
            "position": {"x": self.x, "y": self.y},
            "state": self.state,
            "visible": not self.used,
        }
