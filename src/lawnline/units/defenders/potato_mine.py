from lawnline.units.base import DefenderRole, DefenderStats, DefenderType

# Simulated seconds from planting until the mine can detonate
ARMING_DELAY = 15.0

# Detonation reach along the lane and the damage dealt within it
BLAST_RADIUS = 60.0
BLAST_DAMAGE = 300.0


class PotatoMine(DefenderType):
    """Delayed explosive: harmless while arming, consumed on first contact once armed.

    Detonation is resolved by ``CombatResolver`` during the melee pass.
    """
    type_id = "potato_mine"
    display_name = "Potato Mine"
    icon = "M"
    role = DefenderRole.EXPLOSIVE
    stats = DefenderStats(health=50, cost=25)

    @classmethod
    def on_placed(cls, defender, now):
        defender.ready_at = now + ARMING_DELAY
        defender.armed = False

    @classmethod
    def tick(cls, defender, ctx):
        if not defender.armed and ctx.now >= defender.ready_at:
            defender.armed = True

    @classmethod
    def describe(cls, defender, now):
        remaining = max(0.0, defender.ready_at - now)
        return {
            "armed": defender.armed,
            "arming_progress": round(1.0 - remaining / ARMING_DELAY, 3),
        }
