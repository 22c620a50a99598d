"""Unit tests for Grid — occupancy, geometry and point-to-cell mapping."""
from __future__ import annotations

import math

import pytest

from lawnline.simulation.entities import Defender
from lawnline.simulation.grid import (
    CELL_HEIGHT,
    CELL_WIDTH,
    FIELD_WIDTH,
    GRID_COLS,
    GRID_ROWS,
    GRID_START_X,
    Grid,
)
from lawnline.units import get_type

pytestmark = pytest.mark.unit


def _defender(row: int = 0, col: int = 0, type_id: str = "wallnut") -> Defender:
    return Defender(id=f"d-{row}-{col}", kind=get_type(type_id), row=row, col=col, x=0.0, y=0.0)


class TestGeometry:
    def test_field_constants(self):
        assert (GRID_ROWS, GRID_COLS) == (5, 9)
        assert CELL_WIDTH == 80.0
        assert CELL_HEIGHT == 100.0
        assert GRID_START_X == 90.0
        assert GRID_START_X + GRID_COLS * CELL_WIDTH + GRID_START_X == FIELD_WIDTH

    def test_cell_center(self):
        grid = Grid()
        assert grid.cell_center(0, 0) == (130.0, 50.0)
        assert grid.cell_center(2, 3) == (370.0, 250.0)
        assert grid.cell_center(4, 8) == (770.0, 450.0)

    def test_lane_y_matches_cell_center(self):
        grid = Grid()
        for row in range(grid.rows):
            assert grid.lane_y(row) == grid.cell_center(row, 0)[1]

    def test_cell_at_inverts_cell_center(self):
        grid = Grid()
        for row in range(grid.rows):
            for col in range(grid.cols):
                x, y = grid.cell_center(row, col)
                assert grid.cell_at(x, y) == (row, col)

    @pytest.mark.parametrize("point", [(10.0, 50.0), (880.0, 50.0), (400.0, 520.0), (400.0, -1.0)])
    def test_cell_at_outside_grid(self, point):
        assert Grid().cell_at(*point) is None

    @pytest.mark.parametrize("point", [
        (math.nan, 50.0), (400.0, math.nan), (math.inf, 50.0), (400.0, -math.inf),
    ])
    def test_cell_at_non_finite_point(self, point):
        assert Grid().cell_at(*point) is None


class TestOccupancy:
    def test_place_into_empty_cell(self):
        grid = Grid()
        d = _defender(2, 3)
        assert grid.place(2, 3, d) is True
        assert grid.get(2, 3) is d
        assert len(grid) == 1

    def test_place_into_occupied_cell_fails(self):
        grid = Grid()
        first, second = _defender(1, 1), _defender(1, 1)
        grid.place(1, 1, first)
        assert grid.place(1, 1, second) is False
        assert grid.get(1, 1) is first

    @pytest.mark.parametrize("cell", [(-1, 0), (0, -1), (5, 0), (0, 9)])
    def test_place_out_of_range_fails(self, cell):
        grid = Grid()
        assert grid.place(*cell, _defender()) is False
        assert len(grid) == 0

    def test_remove_is_idempotent(self):
        grid = Grid()
        d = _defender(3, 4)
        grid.place(3, 4, d)
        assert grid.remove(d) is True
        assert grid.get(3, 4) is None
        assert grid.remove(d) is False

    def test_get_out_of_range_returns_none(self):
        assert Grid().get(10, 10) is None

    def test_clear(self):
        grid = Grid()
        grid.place(0, 0, _defender(0, 0))
        grid.place(4, 8, _defender(4, 8))
        grid.clear()
        assert len(grid) == 0
        assert list(grid.occupied_cells()) == []

    def test_occupied_cells_lists_every_defender(self):
        grid = Grid()
        a, b = _defender(0, 1), _defender(3, 2)
        grid.place(0, 1, a)
        grid.place(3, 2, b)
        assert list(grid.occupied_cells()) == [(0, 1, a), (3, 2, b)]
