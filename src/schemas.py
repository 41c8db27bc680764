# schemas.py
# Pydantic models describing the JSON shape of cells and grids, shared by the API and save files.

from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, Field

import core

class CellData(BaseModel):
    """A single tile on the wire. Empty cells are sent as null."""
    state: core.CellState = Field(
        default=core.CellState.NORMAL,
        description="Presentation state of the tile (new, merged, normal)."
    )
    value: int = Field(..., gt=0, description="Value of the tile, a power of two.")

def _validate_grid_shape(grid: List[List[Optional[CellData]]]) -> List[List[Optional[CellData]]]:
    if not core.validate_rectangular(grid):
        raise ValueError("Grid must be a non-empty N x M matrix.")
    return grid

GridData = Annotated[List[List[Optional[CellData]]], AfterValidator(_validate_grid_shape)]

class SavedGame(BaseModel):
    """A game persisted between sessions."""
    grid: GridData = Field(..., description="The game grid, rows of cells or null.")
    score: int = Field(..., ge=0, description="Score accumulated so far.")

# --- Conversion Helpers ---

def grid_to_data(grid: core.Grid) -> List[List[Optional[CellData]]]:
    return [
        [CellData(state=cell.state, value=cell.value) if cell is not None else None for cell in row]
        for row in grid
    ]

def grid_from_data(grid: List[List[Optional[CellData]]]) -> core.Grid:
    return [
        [core.Tile(cell.value, cell.state) if cell is not None else None for cell in row]
        for row in grid
    ]
