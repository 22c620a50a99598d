from lawnline.units.base import DefenderRole, DefenderStats, DefenderType


class Wallnut(DefenderType):
    """Blocker: no behaviour, just a lot of health to chew through."""
    type_id = "wallnut"
    display_name = "Wall-nut"
    icon = "W"
    role = DefenderRole.BLOCKER
    stats = DefenderStats(health=400, cost=50)
