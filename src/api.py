from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from typing import Optional
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
import logging

import core
from game import DEFAULT_WIN_TILE, GameProgressState, determine_game_status, play_turn
from schemas import GridData, grid_from_data, grid_to_data

logger = logging.getLogger(__name__)

RATE_LIMIT = "100/minute"

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="A stateless API for playing the 2048 game. "\
                "Manage your game state (grid, score, win_tile) on the client side.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    size: int = Field(
        default=core.DEFAULT_BOARD_SIZE,
        gt=1, # Board size must be at least 2x2
        description="Size of the N x N game grid (e.g., 4 for a 4x4 grid)."
    )
    win_tile: int = Field(
        default=DEFAULT_WIN_TILE,
        gt=0,
        description="The tile value to achieve for winning the game (e.g., 128)."
    )

class NewCellData(BaseModel):
    """Where the tile added after a move appeared."""
    row: int = Field(..., ge=0)
    column: int = Field(..., ge=0)
    value: int = Field(..., gt=0)

class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    grid: GridData = Field(..., description="The game grid, rows of cells; empty cells are null.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    progress: GameProgressState = Field(
        ...,
        description="Current progress state of the game (IN_PROGRESS, GAME_WON, GAME_OVER)."
    )
    win_tile: int = Field(..., gt=0, description="The tile value required to win this game instance.")
    board_size: int = Field(..., gt=0, description="Number of rows in the grid (N for an N x N game).")

class MoveRequestData(BaseModel):
    """Data required to make a move."""
    grid: GridData = Field(..., description="Current game grid before the move.")
    score: int = Field(..., ge=0, description="Current score before the move.")
    direction: core.Direction = Field(
        ...,
        description="Direction of the move (up, left, right, down)."
    )
    win_tile: int = Field(default=DEFAULT_WIN_TILE, gt=0, description="The win condition tile for this game instance.")

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move changed the grid, False otherwise."
    )
    score_gained: int = Field(..., ge=0, description="Score earned by merges during this move.")
    new_cell: Optional[NewCellData] = Field(
        default=None,
        description="The tile spawned after an effective move, if any."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was not effective or the game ended."
    )

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit(RATE_LIMIT)
async def start_new_game(request: Request, settings: NewGameSettings):
    """
    Initializes a new 2048 game.

    - **size**: Dimension of the N x N grid. Default is 4.
    - **win_tile**: Tile value to reach to win. Default is 128.

    Returns the initial grid with two new tiles of value 2, score 0 and progress IN_PROGRESS.
    """
    try:
        initial_grid = core.initialize(settings.size)
        return GameStateData(
            grid=grid_to_data(initial_grid),
            score=0,
            progress=determine_game_status(initial_grid, settings.win_tile),
            win_tile=settings.win_tile,
            board_size=settings.size
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Unexpected error in /game/new", exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit(RATE_LIMIT)
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    The API will:
    1. Slide and merge the tiles in the requested direction.
    2. If the move changed the grid, add a new random tile (2 or 4).
    3. Determine the new game status (IN_PROGRESS, GAME_WON, GAME_OVER).
    """
    current_grid = grid_from_data(request_data.grid)
    message_for_client: Optional[str] = None

    try:
        turn = play_turn(current_grid, request_data.score, request_data.direction, request_data.win_tile)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.error("Unexpected error in /game/move", exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")

    if not turn.moved:
        message_for_client = "Move was not effective; grid unchanged by slide."
    if turn.progress == GameProgressState.GAME_WON:
        message_for_client = "Congratulations! You won!"
    elif turn.progress == GameProgressState.GAME_OVER:
        message_for_client = "Game Over. No more valid moves."

    return MoveResponseData(
        grid=grid_to_data(turn.grid),
        score=turn.score,
        progress=turn.progress,
        win_tile=request_data.win_tile,
        board_size=len(turn.grid),
        move_was_effective=turn.moved,
        score_gained=turn.score - request_data.score,
        new_cell=NewCellData(**turn.new_cell._asdict()) if turn.new_cell else None,
        message=message_for_client
    )
