"""Unit tests for entity models — Defender, Attacker, Projectile, Pickup, Sweeper."""
from __future__ import annotations

import itertools

import pytest

from lawnline.simulation.context import TickContext
from lawnline.simulation.entities import (
    ATTACKER_HEALTH,
    FLASH_DURATION,
    PICKUP_HOVER,
    PICKUP_RISE,
    PICKUP_SIZE,
    PROJECTILE_DAMAGE,
    PROJECTILE_SPEED,
    Attacker,
    Defender,
    Pickup,
    Projectile,
    Sweeper,
)
from lawnline.simulation.grid import FIELD_WIDTH
from lawnline.units import get_type

pytestmark = pytest.mark.unit

DT = 1 / 60


def _ctx(now: float = 0.0, attackers=None, defenders=None) -> TickContext:
    counter = itertools.count(1)
    return TickContext(
        now=now,
        dt=DT,
        attackers=attackers if attackers is not None else [],
        defenders=defenders if defenders is not None else [],
        next_id=lambda prefix: f"{prefix}-{next(counter)}",
    )


class TestDefender:
    def test_health_defaults_to_type_stats(self):
        d = Defender(id="d", kind=get_type("wallnut"), row=0, col=0, x=130.0, y=50.0)
        assert d.health == d.max_health == 400
        assert d.type_id == "wallnut"
        assert d.span() == (110.0, 150.0)

    def test_apply_damage_flashes_and_reports_destruction(self):
        d = Defender(id="d", kind=get_type("sunflower"), row=0, col=0, x=130.0, y=50.0)
        assert d.apply_damage(30, now=2.0) is False
        assert d.health == 50
        assert d.to_dict(2.0 + FLASH_DURATION / 2)["flashing"] is True
        assert d.to_dict(2.0 + FLASH_DURATION)["flashing"] is False
        assert d.apply_damage(50, now=3.0) is True
        assert not d.alive

    def test_to_dict_shape(self):
        d = Defender(id="d", kind=get_type("peashooter"), row=1, col=2, x=290.0, y=150.0)
        state = d.to_dict(0.0)
        assert state["type"] == "peashooter"
        assert state["role"] == "shooter"
        assert state["position"] == {"x": 290.0, "y": 150.0}
        assert (state["row"], state["col"]) == (1, 2)


class TestAttacker:
    def test_defaults(self):
        a = Attacker(id="a", lane=0, x=900.0, y=50.0, speed=0.2)
        assert a.health == ATTACKER_HEALTH
        assert a.size == 40.0
        assert a.attack_damage == 10.0

    def test_tick_moves_left_by_speed(self):
        a = Attacker(id="a", lane=0, x=900.0, y=50.0, speed=0.25)
        a.tick(_ctx())
        a.tick(_ctx())
        assert a.x == pytest.approx(899.5)

    def test_can_attack_respects_interval(self):
        a = Attacker(id="a", lane=0, x=500.0, y=50.0, speed=0.2)
        assert a.can_attack(0.0)
        a.last_attack_at = 1.0
        assert not a.can_attack(1.5)
        assert a.can_attack(2.0)

    def test_to_dict_state(self):
        a = Attacker(id="a", lane=0, x=500.0, y=50.0, speed=0.2)
        assert a.to_dict(0.0)["state"] == "walking"
        a.blocked = True
        assert a.to_dict(0.0)["state"] == "attacking"


class TestProjectile:
    def test_moves_right(self):
        p = Projectile(id="p", lane=0, x=150.0, y=50.0)
        p.tick(_ctx())
        assert p.x == 150.0 + PROJECTILE_SPEED

    def test_empowered_once_passing_amplifier(self):
        torch = Defender(id="t", kind=get_type("torchwood"), row=0, col=2, x=290.0, y=50.0)
        p = Projectile(id="p", lane=0, x=280.0, y=50.0)
        ctx = _ctx(defenders=[torch])
        p.tick(ctx)
        assert p.empowered is True
        assert p.damage == PROJECTILE_DAMAGE * 2
        p.tick(ctx)
        assert p.damage == PROJECTILE_DAMAGE * 2

    def test_amplifier_in_other_lane_has_no_effect(self):
        torch = Defender(id="t", kind=get_type("torchwood"), row=1, col=2, x=290.0, y=150.0)
        p = Projectile(id="p", lane=0, x=280.0, y=50.0)
        p.tick(_ctx(defenders=[torch]))
        assert p.empowered is False
        assert p.damage == PROJECTILE_DAMAGE

    def test_out_of_bounds(self):
        assert Projectile(id="p", lane=0, x=FIELD_WIDTH, y=50.0).out_of_bounds()
        assert not Projectile(id="p", lane=0, x=FIELD_WIDTH - 1, y=50.0).out_of_bounds()


class TestPickup:
    def _run(self, pickup: Pickup, ticks: int, start_tick: int = 0) -> int:
        for n in range(start_tick + 1, start_tick + ticks + 1):
            pickup.tick(_ctx(now=n * DT))
        return start_tick + ticks

    def test_initial_state(self):
        p = Pickup(id="s", x=100.0, y=300.0)
        assert p.state == "rising"
        assert p.origin_y == 300.0
        assert p.target_y == 300.0 - PICKUP_RISE

    def test_rise_hover_fall_cycle(self):
        p = Pickup(id="s", x=100.0, y=300.0)
        tick = self._run(p, int(PICKUP_RISE))
        assert p.state == "hovering"
        assert p.y == p.target_y

        tick = self._run(p, int(PICKUP_HOVER * 60) + 1, tick)
        assert p.state == "falling"

        self._run(p, int(PICKUP_RISE) + 5, tick)
        assert p.y == p.origin_y
        assert p.landed
        assert not p.collected

    def test_contains(self):
        p = Pickup(id="s", x=100.0, y=300.0)
        assert p.contains(110.0, 310.0)
        assert not p.contains(100.0 + PICKUP_SIZE, 300.0)

    def test_collected_drifts_up_and_shrinks_until_expired(self):
        p = Pickup(id="s", x=100.0, y=300.0)
        p.collected = True
        p.tick(_ctx())
        assert p.y == 298.0
        assert p.size == PICKUP_SIZE - 1
        for _ in range(int(PICKUP_SIZE)):
            p.tick(_ctx())
        assert p.size == 0
        assert p.expired


class TestSweeper:
    def test_lifecycle_inactive_active_used(self):
        s = Sweeper(lane=0, x=50.0, y=50.0)
        assert s.state == "inactive"
        s.tick(_ctx())
        assert s.x == 50.0

        assert s.activate() is True
        assert s.state == "active"
        assert s.activate() is False

        while s.active:
            s.tick(_ctx())
        assert s.state == "used"
        assert s.x - s.size / 2 > FIELD_WIDTH
        assert s.activate() is False
        assert s.to_dict(0.0)["visible"] is False
