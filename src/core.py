# core.py
# This file is intended to be the stateless core logic for a 2048 game.
# Every function takes a grid and returns a new one; nothing here is mutated in place.

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple, Union
import logging
import random

logger = logging.getLogger(__name__)

DEFAULT_BOARD_SIZE = 4
SPAWN_TWO_PROBABILITY = 0.6  # otherwise a 4 is spawned

class CellState(Enum):
    """Transient presentation state carried by a tile."""
    NEW = "new"        # just spawned
    MERGED = "merged"  # produced by a merge during the last move
    NORMAL = "normal"

class Direction(Enum):
    """Represents the possible move directions."""
    UP = "up"
    LEFT = "left"
    RIGHT = "right"
    DOWN = "down"

@dataclass(frozen=True)
class Tile:
    """A value-bearing cell. Tiles are never edited, only replaced."""
    value: int
    state: CellState = CellState.NORMAL

Cell = Optional[Tile]
Grid = List[List[Cell]]

class MoveResult(NamedTuple):
    grid: Grid
    moved: bool
    score: int

class NewCell(NamedTuple):
    row: int
    column: int
    value: int

class GridShapeError(ValueError):
    """Raised when a grid is empty or its rows differ in length."""

class NoEmptyCellError(ValueError):
    """Raised when a tile has to be placed on a grid without empty cells."""

# Counter-clockwise rotation that turns a direction into "left", and the one that undoes it.
FORWARD_ROTATION = {
    Direction.LEFT: 0,
    Direction.UP: 90,
    Direction.RIGHT: 180,
    Direction.DOWN: 270,
}
INVERSE_ROTATION = {direction: (360 - degrees) % 360 for direction, degrees in FORWARD_ROTATION.items()}

# --- Grid Helper Functions ---

def validate_rectangular(grid: Grid) -> bool:
    """
    Checks that a grid has at least one row and column and that every row has the same length.
    Args:
        grid (Grid): The grid to check.
    Returns:
        bool: True if the grid is a valid N x M grid.
    """
    if not grid or not grid[0]:
        return False
    width = len(grid[0])
    return all(len(row) == width for row in grid)

def _require_rectangular(grid: Grid) -> None:
    if not validate_rectangular(grid):
        logger.debug("Rejected grid with row lengths %s", [len(row) for row in grid or []])
        raise GridShapeError("Grid must be a non-empty N x M matrix.")

def get_empty_cells(grid: Grid) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty cells in row-major order.
    Args:
        grid (Grid): The grid to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    return [
        (row_idx, col_idx)
        for row_idx, row in enumerate(grid)
        for col_idx, cell in enumerate(row)
        if cell is None
    ]

def _cell_value(cell: Cell) -> int:
    return cell.value if cell is not None else 0

def empty_grid(size: int = DEFAULT_BOARD_SIZE) -> Grid:
    return [[None] * size for _ in range(size)]

def initialize(size: int = DEFAULT_BOARD_SIZE, rng: Optional[random.Random] = None) -> Grid:
    """
    Creates a fresh size x size grid holding two new tiles of value 2 at distinct positions.
    Args:
        size (int): The dimension of the square grid. Default is 4.
        rng (random.Random, optional): Source of randomness, the random module when omitted.
    Returns:
        Grid: The initial grid.
    Raises:
        ValueError: If size is not an integer of at least 2.
    """
    if not isinstance(size, int) or isinstance(size, bool) or size < 2:
        raise ValueError("Board size must be an integer of at least 2.")
    rng = rng if rng is not None else random

    grid = empty_grid(size)
    for position in rng.sample(range(size * size), 2):
        grid[position // size][position % size] = Tile(2, CellState.NEW)
    return grid

# --- Rotation ---

def rotate(grid: Grid, degrees: int) -> Grid:
    """
    Rotates a grid counter-clockwise by a multiple of 90 degrees.
    Args:
        grid (Grid): An R x C grid.
        degrees (int): One of 0, 90, 180 or 270.
    Returns:
        Grid: The rotated grid, C x R for 90 and 270. A rotation by 0 returns the input itself.
    Raises:
        GridShapeError: If the grid is not rectangular.
        ValueError: If degrees is not a supported angle.
    """
    _require_rectangular(grid)
    rows, columns = len(grid), len(grid[0])

    if degrees == 0:
        return grid
    if degrees == 90:
        return [[grid[r][columns - 1 - c] for r in range(rows)] for c in range(columns)]
    if degrees == 180:
        return [[grid[rows - 1 - r][columns - 1 - c] for c in range(columns)] for r in range(rows)]
    if degrees == 270:
        return [[grid[rows - 1 - r][c] for r in range(rows)] for c in range(columns)]
    raise ValueError(f"Unsupported rotation angle: {degrees}")

# --- Line Reduction (Core Move Logic) ---

def reduce_row_left(row: List[Cell]) -> Tuple[List[Cell], bool, int]:
    """
    Slides a single row to the left and merges equal neighbours once.
    Empty cells do not break adjacency, and a merged tile is emitted right away so it
    can never take part in a second merge during the same move.
    Args:
        row (List[Cell]): The row to reduce.
    Returns:
        Tuple[List[Cell], bool, int]: The reduced row, whether any value changed
                                      position, and the score earned by merges.
    """
    reduced: List[Cell] = []
    pending: Cell = None
    score = 0

    for cell in row:
        if cell is None:
            continue
        if pending is None:
            pending = cell
        elif pending.value == cell.value:
            merged = Tile(cell.value * 2, CellState.MERGED)
            reduced.append(merged)
            score += merged.value
            pending = None
        else:
            reduced.append(replace(pending, state=CellState.NORMAL))
            pending = cell

    if pending is not None:
        reduced.append(replace(pending, state=CellState.NORMAL))

    reduced += [None] * (len(row) - len(reduced))

    # State changes alone (new -> normal) are not movement.
    moved = any(_cell_value(before) != _cell_value(after) for before, after in zip(row, reduced))
    return reduced, moved, score

# --- Core Game Move Processing ---

def _coerce_direction(direction: Union[Direction, str]) -> Direction:
    try:
        return Direction(direction)
    except ValueError:
        logger.debug("Rejected unknown direction %r", direction)
        raise ValueError(f"Invalid direction: {direction!r}") from None

def move(grid: Grid, direction: Union[Direction, str]) -> MoveResult:
    """
    Slides every tile of the grid in the given direction.
    The grid is rotated so the move becomes a slide to the left, each row is reduced,
    and the result is rotated back.
    Args:
        grid (Grid): The current grid.
        direction (Direction): The direction to move, or its string value.
    Returns:
        MoveResult: The new grid, whether anything moved, and the score gained.
    Raises:
        GridShapeError: If the grid is not rectangular.
        ValueError: If the direction is unknown.
    """
    _require_rectangular(grid)
    direction = _coerce_direction(direction)

    rotated = rotate(grid, FORWARD_ROTATION[direction])
    reduced_rows = [reduce_row_left(row) for row in rotated]

    result = [row for row, _, _ in reduced_rows]
    moved = any(row_moved for _, row_moved, _ in reduced_rows)
    score = sum(row_score for _, _, row_score in reduced_rows)

    return MoveResult(rotate(result, INVERSE_ROTATION[direction]), moved, score)

# --- Spawning ---

def pick_new_cell(grid: Grid, rng: Optional[random.Random] = None) -> NewCell:
    """
    Chooses where the next tile appears and what it is worth.
    Args:
        grid (Grid): The grid to place a tile on.
        rng (random.Random, optional): Source of randomness, the random module when omitted.
    Returns:
        NewCell: An empty coordinate and a value of 2 (60%) or 4 (40%).
    Raises:
        GridShapeError: If the grid is not rectangular.
        NoEmptyCellError: If the grid is full.
    """
    _require_rectangular(grid)
    rng = rng if rng is not None else random

    empty_cells = get_empty_cells(grid)
    if not empty_cells:
        logger.debug("Rejected spawn on a full %dx%d grid", len(grid), len(grid[0]))
        raise NoEmptyCellError("Cannot spawn a tile: the grid has no empty cell.")

    value = 2 if rng.random() < SPAWN_TWO_PROBABILITY else 4
    row, column = empty_cells[rng.randrange(len(empty_cells))]
    return NewCell(row, column, value)

def place_tile(grid: Grid, new_cell: NewCell) -> Grid:
    """Returns a copy of the grid with a new tile at the given coordinate."""
    placed = [list(row) for row in grid]
    placed[new_cell.row][new_cell.column] = Tile(new_cell.value, CellState.NEW)
    return placed

def spawn(grid: Grid, rng: Optional[random.Random] = None) -> Grid:
    """
    Adds one new tile to a random empty cell on a copy of the grid.
    Callers must make sure the grid has an empty cell first.
    """
    return place_tile(grid, pick_new_cell(grid, rng))

# --- Game State Checks ---

def max_value(grid: Grid) -> int:
    """
    Returns the largest tile value on the grid, or 0 when the grid is empty.
    """
    return max((_cell_value(cell) for row in grid for cell in row), default=0)

def is_terminal(grid: Grid) -> bool:
    """
    Checks whether no move is possible any more.
    Args:
        grid (Grid): The game grid.
    Returns:
        bool: True if there is no empty cell and no two neighbouring tiles share a value.
    Raises:
        GridShapeError: If the grid is not rectangular.
    """
    _require_rectangular(grid)
    if get_empty_cells(grid):
        return False

    rows, columns = len(grid), len(grid[0])
    for r in range(rows):
        for c in range(columns):
            value = grid[r][c].value
            if c + 1 < columns and grid[r][c + 1].value == value:
                return False
            if r + 1 < rows and grid[r + 1][c].value == value:
                return False
    return True
