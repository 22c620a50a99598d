from lawnline.units.base import DefenderRole, DefenderStats, DefenderType

# Damage pulse cadence (simulated seconds), damage and reach along the lane
PULSE_INTERVAL = 1.0
PULSE_DAMAGE = 20.0
PULSE_RADIUS = 40.0


class Spikeweed(DefenderType):
    """Area denial: hurts everything walking over it.

    Attackers pass through its cell undeterred and never attack it.
    """
    type_id = "spikeweed"
    display_name = "Spikeweed"
    icon = "^"
    role = DefenderRole.AREA_DENIAL
    stats = DefenderStats(health=100, cost=100)
    blocks = False
    melee_target = False

    @classmethod
    def on_placed(cls, defender, now):
        defender.last_pulse_at = now

    @classmethod
    def tick(cls, defender, ctx):
        if ctx.now - defender.last_pulse_at < PULSE_INTERVAL:
            return
        defender.last_pulse_at = ctx.now
        for attacker in ctx.attackers_in_lane(defender.row):
            if abs(attacker.x - defender.x) <= PULSE_RADIUS:
                attacker.apply_damage(PULSE_DAMAGE, ctx.now)
