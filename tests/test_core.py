"""
Tests for the stateless grid engine: rotation, row reduction, moves, spawning and terminal detection.
"""

import random

import pytest

from core import (
    CellState,
    Direction,
    FORWARD_ROTATION,
    INVERSE_ROTATION,
    GridShapeError,
    NewCell,
    NoEmptyCellError,
    Tile,
    initialize,
    is_terminal,
    max_value,
    move,
    pick_new_cell,
    reduce_row_left,
    rotate,
    spawn,
    validate_rectangular,
)
from grid_helpers import make_grid, values_of


class FixedRandom:
    """Stand-in for random.Random returning preset draws."""

    def __init__(self, draw, index):
        self.draw = draw
        self.index = index

    def random(self):
        return self.draw

    def randrange(self, stop):
        assert 0 <= self.index < stop
        return self.index


class TestValidateRectangular:
    """Tests for validate_rectangular."""

    def test_square_grid(self):
        assert validate_rectangular(make_grid([[0, 2], [4, 0]]))

    def test_rectangular_grid(self):
        assert validate_rectangular(make_grid([[0, 2, 4]]))

    def test_ragged_grid(self):
        assert not validate_rectangular([[None, None], [None]])

    def test_empty_grid(self):
        assert not validate_rectangular([])
        assert not validate_rectangular([[]])


class TestRotate:
    """Tests for counter-clockwise rotation."""

    grid = make_grid([[1, 2, 3], [4, 5, 6]])

    def test_zero_is_identity(self):
        assert rotate(self.grid, 0) is self.grid

    def test_quarter_turn(self):
        assert values_of(rotate(self.grid, 90)) == [[3, 6], [2, 5], [1, 4]]

    def test_half_turn(self):
        assert values_of(rotate(self.grid, 180)) == [[6, 5, 4], [3, 2, 1]]

    def test_three_quarter_turn(self):
        assert values_of(rotate(self.grid, 270)) == [[4, 1], [5, 2], [6, 3]]

    def test_inverse_rotations(self):
        assert rotate(rotate(self.grid, 90), 270) == self.grid
        assert rotate(rotate(self.grid, 270), 90) == self.grid
        assert rotate(rotate(self.grid, 180), 180) == self.grid

    def test_four_quarter_turns(self):
        rotated = self.grid
        for _ in range(4):
            rotated = rotate(rotated, 90)
        assert rotated == self.grid

    def test_does_not_mutate_input(self):
        before = values_of(self.grid)
        rotate(self.grid, 90)
        assert values_of(self.grid) == before

    def test_unsupported_angle(self):
        with pytest.raises(ValueError):
            rotate(self.grid, 45)

    def test_ragged_grid(self):
        with pytest.raises(GridShapeError):
            rotate([[None, None], [None]], 90)


class TestReduceRowLeft:
    """Tests for the single-row slide and merge."""

    def test_merge_then_keep(self):
        row, moved, score = reduce_row_left(make_grid([[2, 2, 4, 0]])[0])
        assert values_of([row]) == [[4, 4, 0, 0]]
        assert moved
        assert score == 4

    def test_gap_does_not_break_adjacency(self):
        row, moved, score = reduce_row_left(make_grid([[2, 0, 2, 2]])[0])
        assert values_of([row]) == [[4, 2, 0, 0]]
        assert moved
        assert score == 4

    def test_empty_row(self):
        row, moved, score = reduce_row_left([None, None, None, None])
        assert row == [None, None, None, None]
        assert not moved
        assert score == 0

    def test_three_equal_tiles(self):
        row, moved, score = reduce_row_left(make_grid([[2, 2, 2, 0]])[0])
        assert values_of([row]) == [[4, 2, 0, 0]]
        assert score == 4

    def test_four_equal_tiles(self):
        row, _, score = reduce_row_left(make_grid([[2, 2, 2, 2]])[0])
        assert values_of([row]) == [[4, 4, 0, 0]]
        assert score == 8

    def test_merged_tile_merges_only_once(self):
        row, _, score = reduce_row_left(make_grid([[4, 2, 2, 0]])[0])
        assert values_of([row]) == [[4, 4, 0, 0]]
        assert score == 4

    def test_slide_without_merge(self):
        row, moved, score = reduce_row_left(make_grid([[0, 2, 0, 4]])[0])
        assert values_of([row]) == [[2, 4, 0, 0]]
        assert moved
        assert score == 0

    def test_score_sums_merges(self):
        _, _, score = reduce_row_left(make_grid([[2, 2, 4, 4]])[0])
        assert score == 12

    def test_states_after_reduction(self):
        row, _, _ = reduce_row_left([Tile(2), Tile(2), Tile(8, CellState.NEW), None])
        assert row[0] == Tile(4, CellState.MERGED)
        assert row[1] == Tile(8, CellState.NORMAL)
        assert row[2] is None

    def test_state_change_is_not_movement(self):
        row, moved, score = reduce_row_left([Tile(2, CellState.NEW), Tile(4, CellState.MERGED), None])
        assert row == [Tile(2, CellState.NORMAL), Tile(4, CellState.NORMAL), None]
        assert not moved
        assert score == 0


class TestMove:
    """Tests for moving a whole grid."""

    grid = make_grid([[2, 0, 0, 0], [2, 0, 0, 0], [0, 0, 0, 0], [4, 0, 0, 0]])

    def test_left(self):
        result = move(make_grid([[2, 2, 0, 0], [0, 4, 0, 4], [0, 0, 0, 0], [8, 0, 0, 0]]), Direction.LEFT)
        assert values_of(result.grid) == [[4, 0, 0, 0], [8, 0, 0, 0], [0, 0, 0, 0], [8, 0, 0, 0]]
        assert result.moved
        assert result.score == 12

    def test_up(self):
        result = move(self.grid, Direction.UP)
        assert values_of(result.grid) == [[4, 0, 0, 0], [4, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
        assert result.moved
        assert result.score == 4

    def test_down(self):
        result = move(self.grid, Direction.DOWN)
        assert values_of(result.grid) == [[0, 0, 0, 0], [0, 0, 0, 0], [4, 0, 0, 0], [4, 0, 0, 0]]
        assert result.score == 4

    def test_right(self):
        result = move(make_grid([[2, 2, 2, 0]]), Direction.RIGHT)
        assert values_of(result.grid) == [[0, 0, 2, 4]]
        assert result.score == 4

    def test_accepts_string_direction(self):
        assert move(self.grid, "up") == move(self.grid, Direction.UP)

    @pytest.mark.parametrize("direction", list(Direction))
    def test_matches_manual_rotation(self, direction):
        rng = random.Random(11)
        grids = [make_grid([[2, 0, 2], [4, 4, 0], [0, 8, 8], [2, 2, 2], [16, 0, 4]])]
        grids += [make_grid([[rng.choice([0, 2, 4, 8]) for _ in range(3)] for _ in range(5)]) for _ in range(50)]
        for grid in grids:
            rows = [reduce_row_left(row) for row in rotate(grid, FORWARD_ROTATION[direction])]
            result = move(grid, direction)
            assert result.grid == rotate([row for row, _, _ in rows], INVERSE_ROTATION[direction])
            assert result.moved == any(moved for _, moved, _ in rows)
            assert result.score == sum(score for _, _, score in rows)
            if not result.moved:
                assert values_of(result.grid) == values_of(grid)

    @pytest.mark.parametrize("direction", list(Direction))
    def test_stuck_grid_keeps_values(self, direction):
        grid = make_grid([[2, 4, 2], [4, 2, 4], [2, 4, 2], [4, 2, 4], [2, 4, 2]], CellState.NEW)
        result = move(grid, direction)
        assert not result.moved
        assert result.score == 0
        assert values_of(result.grid) == values_of(grid)

    def test_rectangular_grid(self):
        result = move(make_grid([[2, 0, 4], [2, 0, 4]]), Direction.UP)
        assert values_of(result.grid) == [[4, 0, 8], [0, 0, 0]]
        assert result.score == 12

    def test_no_movement_returns_same_values(self):
        grid = make_grid([[2, 4, 0, 0], [8, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]], CellState.NEW)
        result = move(grid, Direction.LEFT)
        assert not result.moved
        assert result.score == 0
        assert values_of(result.grid) == values_of(grid)

    def test_does_not_mutate_input(self):
        before = values_of(self.grid)
        move(self.grid, Direction.UP)
        assert values_of(self.grid) == before

    def test_ragged_grid(self):
        with pytest.raises(GridShapeError):
            move([[None, None], [None]], Direction.LEFT)

    def test_unknown_direction(self):
        with pytest.raises(ValueError):
            move(self.grid, "sideways")


class TestSpawn:
    """Tests for placing new tiles."""

    def test_adds_exactly_one_tile(self):
        grid = make_grid([[2, 0], [0, 4]])
        spawned = spawn(grid, random.Random(7))
        changed = [
            (r, c) for r in range(2) for c in range(2) if spawned[r][c] != grid[r][c]
        ]
        assert len(changed) == 1
        r, c = changed[0]
        assert grid[r][c] is None
        assert spawned[r][c].value in (2, 4)
        assert spawned[r][c].state is CellState.NEW

    def test_does_not_mutate_input(self):
        grid = make_grid([[2, 0], [0, 4]])
        spawn(grid, random.Random(1))
        assert values_of(grid) == [[2, 0], [0, 4]]

    def test_value_two_below_threshold(self):
        grid = make_grid([[2, 0], [0, 4]])
        assert pick_new_cell(grid, FixedRandom(0.59, 1)) == NewCell(1, 0, 2)

    def test_value_four_above_threshold(self):
        grid = make_grid([[2, 0], [0, 4]])
        assert pick_new_cell(grid, FixedRandom(0.6, 0)) == NewCell(0, 1, 4)

    def test_seeded_spawn_is_reproducible(self):
        grid = make_grid([[0, 0, 0], [0, 2, 0]])
        assert spawn(grid, random.Random(3)) == spawn(grid, random.Random(3))

    def test_full_grid(self):
        with pytest.raises(NoEmptyCellError):
            spawn(make_grid([[2, 4], [4, 2]]))


class TestInitialize:
    """Tests for the starting grid."""

    def test_two_new_tiles(self):
        grid = initialize(rng=random.Random(0))
        tiles = [cell for row in grid for cell in row if cell is not None]
        assert len(grid) == 4 and all(len(row) == 4 for row in grid)
        assert tiles == [Tile(2, CellState.NEW), Tile(2, CellState.NEW)]

    def test_custom_size(self):
        grid = initialize(2, random.Random(5))
        assert len(grid) == 2
        assert sum(cell is not None for row in grid for cell in row) == 2

    @pytest.mark.parametrize("size", [1, 0, "4", 2.0])
    def test_invalid_size(self, size):
        with pytest.raises(ValueError):
            initialize(size)


class TestTerminalDetector:
    """Tests for max_value and is_terminal."""

    def test_max_value(self):
        assert max_value(make_grid([[2, 0], [64, 8]])) == 64

    def test_max_value_empty_grid(self):
        assert max_value(make_grid([[0, 0], [0, 0]])) == 0

    def test_full_grid_without_pairs(self):
        grid = make_grid([[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 2]])
        assert is_terminal(grid)

    def test_empty_cell(self):
        assert not is_terminal(make_grid([[2, 4], [4, 0]]))

    def test_horizontal_pair(self):
        assert not is_terminal(make_grid([[2, 2], [4, 8]]))

    def test_vertical_pair(self):
        assert not is_terminal(make_grid([[2, 4], [2, 8]]))

    def test_equal_values_with_different_states(self):
        grid = [[Tile(2, CellState.NEW), Tile(2, CellState.MERGED)], [Tile(4), Tile(8)]]
        assert not is_terminal(grid)

    def test_terminal_grid_cannot_move(self):
        grid = make_grid([[2, 4, 2], [4, 2, 4]])
        assert is_terminal(grid)
        assert not any(move(grid, direction).moved for direction in Direction)
