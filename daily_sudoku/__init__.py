"""
Deterministic daily Sudoku: puzzle generation, board validation and
undo/redo game sessions.
"""

from .board import board_to_text, parse_board, peers_of
from .config import DIFFICULTIES, GameSettings, get_difficulty, load_settings
from .daily_puzzle import (
    DailyPuzzleFactory,
    PuzzleDefinition,
    build_daily_puzzle,
    derive_seed,
    list_dates,
)
from .game_session import GameRecord, GameSession
from .session_history import GameSnapshot, SessionHistory
from .storage import GameStats, ProgressStore
from .sudoku_generator import CarveIncomplete, GenerationFailure, SudokuGenerator
from .sudoku_solver import Classification, Verdict, classify
from .validator import conflict_set, is_solved

__version__ = "0.1.0"

__all__ = [
    "CarveIncomplete",
    "Classification",
    "DIFFICULTIES",
    "DailyPuzzleFactory",
    "GameRecord",
    "GameSession",
    "GameSettings",
    "GameSnapshot",
    "GameStats",
    "GenerationFailure",
    "ProgressStore",
    "PuzzleDefinition",
    "SessionHistory",
    "SudokuGenerator",
    "Verdict",
    "board_to_text",
    "build_daily_puzzle",
    "classify",
    "conflict_set",
    "derive_seed",
    "get_difficulty",
    "is_solved",
    "list_dates",
    "load_settings",
    "parse_board",
    "peers_of",
]
