# game.py
# Game progress tracking built on top of the stateless core.
# The core only computes grids; this module decides when to spawn and when a game ends.

from enum import Enum
from typing import NamedTuple, Optional, Union
import logging
import random

import core

logger = logging.getLogger(__name__)

DEFAULT_WIN_TILE = 128

class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = "IN_PROGRESS"
    GAME_OVER = "GAME_OVER"  # Lost
    GAME_WON = "GAME_WON"

class TurnResult(NamedTuple):
    grid: core.Grid
    score: int
    moved: bool
    new_cell: Optional[core.NewCell]
    progress: GameProgressState

def determine_game_status(grid: core.Grid, win_tile: int = DEFAULT_WIN_TILE) -> GameProgressState:
    """
    Determines the current progress state of the game based on the grid.
    Args:
        grid (Grid): The current game grid.
        win_tile (int): The tile value that signifies a win.
    Returns:
        GameProgressState: GAME_WON once a tile reaches win_tile, GAME_OVER when no
                           move is left, IN_PROGRESS otherwise.
    """
    if core.max_value(grid) >= win_tile:
        return GameProgressState.GAME_WON
    if core.is_terminal(grid):
        return GameProgressState.GAME_OVER
    return GameProgressState.IN_PROGRESS

def play_turn(
    grid: core.Grid,
    score: int,
    direction: Union[core.Direction, str],
    win_tile: int = DEFAULT_WIN_TILE,
    rng: Optional[random.Random] = None,
) -> TurnResult:
    """
    Plays one turn: move, spawn a tile if anything moved, then re-evaluate progress.
    Args:
        grid (Grid): The grid before the move.
        score (int): The score before the move.
        direction (Direction): The direction to move.
        win_tile (int): The tile value that signifies a win.
        rng (random.Random, optional): Source of randomness for the spawned tile.
    Returns:
        TurnResult: The grid and score after the turn. When nothing moved, the input
                    grid and score are returned unchanged and no tile is spawned.
    """
    result = core.move(grid, direction)

    new_cell = None
    if result.moved:
        grid = result.grid
        score += result.score
        if core.get_empty_cells(grid):
            new_cell = core.pick_new_cell(grid, rng)
            grid = core.place_tile(grid, new_cell)

    progress = determine_game_status(grid, win_tile)
    logger.debug(
        "Turn %s: moved=%s gained=%d new_cell=%s progress=%s",
        direction, result.moved, result.score, new_cell, progress.name,
    )
    if progress is not GameProgressState.IN_PROGRESS:
        logger.info("Game finished with %s at score %d", progress.name, score)

    return TurnResult(grid, score, result.moved, new_cell, progress)
