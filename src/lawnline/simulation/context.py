"""TickContext — explicit per-tick state handed to every entity.

TickContext is created at the start of each ``Game.tick()`` and passed
to every entity's ``tick()`` and to the combat resolver.  It carries the
simulated clock, read access to the live collections, and the queues new
entities are emitted into.  Entities never reach back into ``Game``.

Entities spawned during the tick (pickups from producers, projectiles
from shooters) are buffered in ``new_pickups`` / ``new_projectiles`` and
merged by the game once the defender pass is finished, so no collection
grows while it is being iterated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from .entities import Pickup, Projectile

if TYPE_CHECKING:
    from .entities import Attacker, Defender


@dataclass
class TickContext:
    """Explicit per-tick state passed through the tick pipeline.

    Attributes:
        now: Simulated seconds since the episode started (after this tick)
        dt: Fixed timestep in simulated seconds
        attackers: Live attacker collection (mutated by the resolver)
        defenders: Live defender collection
        next_id: Factory returning a fresh entity id for a prefix
        new_pickups: Pickups emitted during this tick
        new_projectiles: Projectiles emitted during this tick
    """

    now: float
    dt: float
    attackers: list[Attacker]
    defenders: list[Defender]
    next_id: Callable[[str], str]
    new_pickups: list[Pickup] = field(default_factory=list)
    new_projectiles: list[Projectile] = field(default_factory=list)

    def spawn_pickup(self, x: float, y: float) -> Pickup:
        pickup = Pickup(id=self.next_id("pickup"), x=x, y=y)
        self.new_pickups.append(pickup)
        return pickup

    def fire_projectile(self, x: float, y: float, lane: int) -> Projectile:
        projectile = Projectile(id=self.next_id("projectile"), lane=lane, x=x, y=y)
        self.new_projectiles.append(projectile)
        return projectile

    def attackers_in_lane(self, lane: int) -> list[Attacker]:
        return [a for a in self.attackers if a.lane == lane and a.alive]
