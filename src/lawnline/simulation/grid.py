"""Grid — the row/column placement surface, one lane per row.

The grid only tracks occupancy.  The flat defender list on ``Game`` is
the authoritative collection for ticking; the grid answers "what is in
this cell" and keeps the one-defender-per-cell invariant.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from .entities import Defender

# Playfield geometry (abstract canvas units)
FIELD_WIDTH = 900.0
FIELD_HEIGHT = 500.0
GRID_ROWS = 5
GRID_COLS = 9
CELL_WIDTH = 80.0
CELL_HEIGHT = FIELD_HEIGHT / GRID_ROWS
GRID_START_X = (FIELD_WIDTH - GRID_COLS * CELL_WIDTH) / 2


class Grid:
    """rows x cols matrix of optional Defender references."""

    def __init__(
        self,
        rows: int = GRID_ROWS,
        cols: int = GRID_COLS,
        cell_width: float = CELL_WIDTH,
        cell_height: float = CELL_HEIGHT,
        start_x: float = GRID_START_X,
    ) -> None:
        self.rows = rows
        self.cols = cols
        self.cell_width = cell_width
        self.cell_height = cell_height
        self.start_x = start_x
        self._cells: list[list[Defender | None]] = [
            [None] * cols for _ in range(rows)
        ]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get(self, row: int, col: int) -> Defender | None:
        if not self.in_bounds(row, col):
            return None
        return self._cells[row][col]

    def place(self, row: int, col: int, defender: Defender) -> bool:
        """Put *defender* in the cell. Fails on out-of-range or occupied cells."""
        if not self.in_bounds(row, col) or self._cells[row][col] is not None:
            return False
        self._cells[row][col] = defender
        return True

    def remove(self, defender: Defender) -> bool:
        """Clear the cell holding *defender*. Returns False if it was not found."""
        for row in self._cells:
            for col, occupant in enumerate(row):
                if occupant is defender:
                    row[col] = None
                    return True
        return False

    def clear(self) -> None:
        self._cells = [[None] * self.cols for _ in range(self.rows)]

    def cell_center(self, row: int, col: int) -> tuple[float, float]:
        return (
            self.start_x + (col + 0.5) * self.cell_width,
            (row + 0.5) * self.cell_height,
        )

    def lane_y(self, lane: int) -> float:
        return (lane + 0.5) * self.cell_height

    def cell_at(self, x: float, y: float) -> tuple[int, int] | None:
        """Map a point on the playfield to its (row, col), or None outside the grid."""
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        col = int((x - self.start_x) // self.cell_width)
        row = int(y // self.cell_height)
        if self.in_bounds(row, col):
            return row, col
        return None

    def occupied_cells(self) -> Iterator[tuple[int, int, Defender]]:
        for r, row in enumerate(self._cells):
            for c, occupant in enumerate(row):
                if occupant is not None:
                    yield r, c, occupant

    def __len__(self) -> int:
        return sum(1 for _ in self.occupied_cells())
