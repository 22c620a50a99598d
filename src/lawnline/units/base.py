"""Base classes for the defender type system.

DefenderRole  -- enum for what a defender contributes to a lane
DefenderStats -- frozen dataclass for health/cost
DefenderType  -- abstract base every concrete defender subclasses
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from lawnline.simulation.context import TickContext
    from lawnline.simulation.entities import Defender


class DefenderRole(Enum):
    """The part a defender plays on its lane."""
    PRODUCER = "producer"
    SHOOTER = "shooter"
    BLOCKER = "blocker"
    AREA_DENIAL = "area_denial"
    AMPLIFIER = "amplifier"
    EXPLOSIVE = "explosive"


@dataclass(frozen=True)
class DefenderStats:
    """Immutable stat profile for a defender type."""
    health: int
    cost: int


class DefenderType:
    """Abstract base for every defender type definition.

    Subclasses MUST set all ClassVar fields.  The registry discovers
    concrete subclasses automatically at import time.  Behaviour lives
    in ``tick()``; the per-instance state it reads and writes lives on
    the ``Defender`` entity.
    """

    # -- identity --
    type_id: ClassVar[str]
    display_name: ClassVar[str]
    icon: ClassVar[str]
    role: ClassVar[DefenderRole]

    # -- stats --
    stats: ClassVar[DefenderStats]
    size: ClassVar[float] = 40.0

    # -- interaction matrix --
    blocks: ClassVar[bool] = True        # halts attackers that overlap it
    melee_target: ClassVar[bool] = True  # attackers chew on it

    # -- spawn rules --
    placeable: ClassVar[bool] = True

    @classmethod
    def on_placed(cls, defender: Defender, now: float) -> None:
        """Initialise per-type timers when the defender enters the field."""

    @classmethod
    def tick(cls, defender: Defender, ctx: TickContext) -> None:
        """Run this type's behaviour for one simulation step."""

    @classmethod
    def describe(cls, defender: Defender, now: float) -> dict:
        """Type-specific visual state merged into ``Defender.to_dict()``."""
        return {}

    @classmethod
    def refund(cls) -> int:
        return cls.stats.cost // 2

    def __repr__(self) -> str:
        return f"<DefenderType {self.type_id}>"
