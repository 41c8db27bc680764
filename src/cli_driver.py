# cli_driver.py
# This file is intended to be run to play the 2048 game on the CLI

from argparse import ArgumentParser
from typing import List, Optional
import logging
import random
import sys

import core
from game import DEFAULT_WIN_TILE, GameProgressState, determine_game_status, play_turn
from persistence import DEFAULT_SAVE_FILE, clear_game, load_game, save_game

logger = logging.getLogger(__name__)

KEY_BINDINGS = {
    'W': core.Direction.UP, 'A': core.Direction.LEFT, 'S': core.Direction.DOWN, 'D': core.Direction.RIGHT,
    'K': core.Direction.UP, 'H': core.Direction.LEFT, 'J': core.Direction.DOWN, 'L': core.Direction.RIGHT,
}
STATE_MARKERS = {core.CellState.NEW: "*", core.CellState.MERGED: "+", core.CellState.NORMAL: ""}

def build_parser() -> ArgumentParser:
    parser = ArgumentParser(description="Play 2048 in the terminal.")
    parser.add_argument("--size", type=int, default=core.DEFAULT_BOARD_SIZE, help="Dimension of the N x N grid.")
    parser.add_argument("--win-tile", type=int, default=DEFAULT_WIN_TILE, help="Tile value that wins the game.")
    parser.add_argument("--save-file", default=DEFAULT_SAVE_FILE, help="Where the game in progress is kept.")
    parser.add_argument("--no-save", action="store_true", help="Neither resume nor save a game.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible tile spawning.")
    parser.add_argument(
        "--log-level", default="WARNING", type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Logging level."
    )
    return parser

def restore_or_start(save_file: Optional[str], size: int, rng: random.Random):
    """Returns (grid, score), resuming from the save file when a usable one exists."""
    if save_file:
        try:
            restored = load_game(save_file)
        except ValueError as e:
            print(f"Ignoring unreadable save file {save_file}: {e}", file=sys.stderr)
            logger.warning("Unreadable save file %s", save_file, exc_info=True)
            restored = None
        if restored is not None:
            grid, score = restored
            if len(grid) == size and len(grid[0]) == size:
                print("Continuing saved game.")
                return grid, score
            print(f"Saved game is not {size}x{size}; starting a new one.", file=sys.stderr)
    return core.initialize(size, rng), 0

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    if args.size < 2:
        parser.error("--size must be at least 2")
    if args.win_tile <= 0:
        parser.error("--win-tile must be positive")

    rng = random.Random(args.seed)
    save_file = None if args.no_save else args.save_file

    # 1. Initialize game
    current_grid, current_score = restore_or_start(save_file, args.size, rng)
    if save_file:
        save_game(save_file, current_grid, current_score)
    current_progress = determine_game_status(current_grid, args.win_tile)
    display_board_state(current_grid, current_score, current_progress)

    # 2. Game Loop
    while True:
        if current_progress != GameProgressState.IN_PROGRESS:
            if save_file:
                clear_game(save_file)
            if input("Try again? (y/n): ").strip().upper() != 'Y':
                break
            current_grid, current_score = core.initialize(args.size, rng), 0
            current_progress = GameProgressState.IN_PROGRESS
            if save_file:
                save_game(save_file, current_grid, current_score)
            display_board_state(current_grid, current_score, current_progress)
            continue

        move_input = input("Enter move (W/A/S/D or K/H/J/L, R to restart, Q to quit): ").strip().upper()

        if move_input == 'Q':
            print("Quitting game.")
            break

        if move_input == 'R':
            current_grid, current_score = core.initialize(args.size, rng), 0
            if save_file:
                save_game(save_file, current_grid, current_score)
            display_board_state(current_grid, current_score, current_progress)
            continue

        chosen_direction = KEY_BINDINGS.get(move_input)
        if not chosen_direction:
            print("Invalid input. Use W, A, S, D.")
            continue

        # 3. Play the turn: move, spawn, status
        turn = play_turn(current_grid, current_score, chosen_direction, args.win_tile, rng)
        if not turn.moved:
            print("Move did not change the board. Try a different direction.")
            continue

        current_grid, current_score, current_progress = turn.grid, turn.score, turn.progress
        if save_file and current_progress == GameProgressState.IN_PROGRESS:
            save_game(save_file, current_grid, current_score)

        display_board_state(current_grid, current_score, current_progress)
        if current_progress == GameProgressState.GAME_WON:
            print(f"Congratulations! You reached the {args.win_tile} tile!")
        elif current_progress == GameProgressState.GAME_OVER:
            print("No more moves possible. Better luck next time!")

    return 0

# --- Display Function ---
def format_cell(cell: core.Cell) -> str:
    if cell is None:
        return "."
    return f"{cell.value}{STATE_MARKERS[cell.state]}"

def display_board_state(grid: core.Grid, score: int, progress: GameProgressState):
    """Prints the grid, score, and game status to the console."""
    print(f"\nScore: {score}")
    status_message = {
        GameProgressState.IN_PROGRESS: f"Status: {progress.name}",
        GameProgressState.GAME_WON: "YOU WON!",
        GameProgressState.GAME_OVER: "GAME OVER!"
    }
    print(status_message[progress])

    for row in grid:
        print("\t".join(format_cell(cell) for cell in row))
    print("-" * (len(grid[0]) * 6)) # Adjust width based on board size

if __name__ == "__main__":
    sys.exit(main())
