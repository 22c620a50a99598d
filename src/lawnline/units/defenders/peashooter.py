from lawnline.units.base import DefenderRole, DefenderStats, DefenderType

# Simulated seconds between shots
SHOOT_INTERVAL = 2.0

# Projectiles leave the muzzle this far right of the defender centre
MUZZLE_OFFSET_X = 20.0


class Peashooter(DefenderType):
    """Shooter: fires down its lane whenever an attacker is ahead of it."""
    type_id = "peashooter"
    display_name = "Peashooter"
    icon = "P"
    role = DefenderRole.SHOOTER
    stats = DefenderStats(health=100, cost=100)

    @classmethod
    def tick(cls, defender, ctx):
        if defender.last_shot_at is not None and ctx.now - defender.last_shot_at < SHOOT_INTERVAL:
            return
        threatened = any(a.x > defender.x for a in ctx.attackers_in_lane(defender.row))
        if threatened:
            ctx.fire_projectile(defender.x + MUZZLE_OFFSET_X, defender.y, defender.row)
            defender.last_shot_at = ctx.now
