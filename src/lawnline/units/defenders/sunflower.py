from lawnline.units.base import DefenderRole, DefenderStats, DefenderType

# Simulated seconds between resource pickups
PRODUCE_INTERVAL = 10.0

# Pickups appear slightly above the producer
PICKUP_OFFSET_Y = 20.0


class Sunflower(DefenderType):
    """Resource producer: drops one pickup above itself on a fixed cadence."""
    type_id = "sunflower"
    display_name = "Sunflower"
    icon = "S"
    role = DefenderRole.PRODUCER
    stats = DefenderStats(health=80, cost=50)

    @classmethod
    def on_placed(cls, defender, now):
        defender.last_produced_at = now

    @classmethod
    def tick(cls, defender, ctx):
        if ctx.now - defender.last_produced_at >= PRODUCE_INTERVAL:
            ctx.spawn_pickup(defender.x, defender.y - PICKUP_OFFSET_Y)
            defender.last_produced_at = ctx.now

    @classmethod
    def describe(cls, defender, now):
        elapsed = now - defender.last_produced_at
        return {"production_progress": round(min(1.0, elapsed / PRODUCE_INTERVAL), 3)}
