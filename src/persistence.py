# persistence.py
# Saving and restoring a game in progress as a JSON file.

from pathlib import Path
from typing import Optional, Tuple, Union
import logging

import core
from schemas import CellData, SavedGame, grid_from_data

logger = logging.getLogger(__name__)

DEFAULT_SAVE_FILE = "2048-game-state.json"

PathLike = Union[str, Path]

def save_game(path: PathLike, grid: core.Grid, score: int) -> None:
    """
    Writes the grid and score to a JSON file.
    Every saved tile is stored with the "new" state so a resumed game shows all tiles
    as freshly appeared.
    Args:
        path (str | Path): Destination file.
        grid (Grid): The grid to save.
        score (int): The current score.
    """
    rows = [
        [CellData(state=core.CellState.NEW, value=cell.value) if cell is not None else None for cell in row]
        for row in grid
    ]
    saved = SavedGame(grid=rows, score=score)
    Path(path).write_text(saved.model_dump_json(), encoding="utf-8")
    logger.debug("Saved game with score %d to %s", score, path)

def load_game(path: PathLike) -> Optional[Tuple[core.Grid, int]]:
    """
    Reads a game saved by save_game.
    Args:
        path (str | Path): The save file.
    Returns:
        Optional[Tuple[Grid, int]]: The grid and score, or None when there is no save file.
    Raises:
        ValueError: If the file is not a valid saved game (pydantic.ValidationError).
    """
    path = Path(path)
    if not path.exists():
        return None
    saved = SavedGame.model_validate_json(path.read_text(encoding="utf-8"))
    logger.debug("Loaded game with score %d from %s", saved.score, path)
    return grid_from_data(saved.grid), saved.score

def clear_game(path: PathLike) -> None:
    """Removes the save file if there is one."""
    Path(path).unlink(missing_ok=True)
