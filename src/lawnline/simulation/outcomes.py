"""Outcome values returned by the Game's command methods.

Commands never raise for domain conditions (no money, cell taken, pickup
gone).  They return one of these values and leave the caller (UI, HTTP
router) to decide on feedback.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PlaceOutcome(Enum):
    PLACED = "placed"
    OCCUPIED = "occupied"
    INSUFFICIENT_RESOURCE = "insufficient_resource"
    INVALID_CELL = "invalid_cell"
    INVALID_TYPE = "invalid_type"
    GAME_OVER = "game_over"


class RemoveOutcome(Enum):
    REMOVED = "removed"
    EMPTY = "empty"
    INVALID_CELL = "invalid_cell"
    GAME_OVER = "game_over"


class CollectOutcome(Enum):
    COLLECTED = "collected"
    ALREADY_COLLECTED = "already_collected"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ClickResult:
    """What a pointer click on the playfield turned into.

    ``action`` is one of "collect", "place", "remove" or "none".
    """

    action: str
    outcome: Enum | None = None
    row: int | None = None
    col: int | None = None

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "outcome": self.outcome.value if self.outcome is not None else None,
            "row": self.row,
            "col": self.col,
        }
