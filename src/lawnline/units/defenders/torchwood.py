from lawnline.units.base import DefenderRole, DefenderStats, DefenderType


class Torchwood(DefenderType):
    """Amplifier: projectiles flying through it leave with double damage.

    The empowering itself happens in ``Projectile.tick`` since it is the
    projectile's state that changes.
    """
    type_id = "torchwood"
    display_name = "Torchwood"
    icon = "T"
    role = DefenderRole.AMPLIFIER
    stats = DefenderStats(health=100, cost=175)
