"""
Daily puzzle factory.

Every (date, difficulty) pair maps to one seed, and that seed to one puzzle,
so every player sees the same grid for the same day. "Today" is always passed
in by the caller; nothing here reads the clock.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Sequence

from loguru import logger

from .board import CELL_COUNT, Board, count_clues
from .config import get_difficulty
from .sudoku_generator import DEFAULT_MAX_STEPS, GenerationFailure, SudokuGenerator
from .sudoku_solver import classify

DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MAX_ATTEMPTS = 2


@dataclass(frozen=True)
class PuzzleDefinition:
    id: str
    date: str
    difficulty: str
    given: Board
    solution: Board
    clue_count: int

    def __post_init__(self) -> None:
        if len(self.given) != CELL_COUNT or len(self.solution) != CELL_COUNT:
            raise ValueError("Puzzle boards must contain exactly 81 cells.")
        if count_clues(self.given) != self.clue_count:
            raise ValueError(
                f"clue_count {self.clue_count} does not match the {count_clues(self.given)} "
                "non-zero cells in the given board."
            )

    def is_given(self, index: int) -> bool:
        return self.given[index] != 0


def format_date_key(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def parse_date_key(date_key: str) -> date:
    if not isinstance(date_key, str) or not DATE_KEY_PATTERN.match(date_key):
        raise ValueError(f"Date key must look like YYYY-MM-DD, got {date_key!r}.")
    try:
        return datetime.strptime(date_key, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError(f"Date key {date_key!r} is not a calendar date.") from exc


def derive_seed(date_key: str, difficulty: str, attempt: int = 0) -> int:
    """
    Derive the generation seed for a date and difficulty.

    The seed is the first 8 bytes of SHA-256 over ``"{date}:{difficulty}"``
    (with ``"#{attempt}"`` appended for retries), read big-endian.
    """

    material = f"{date_key}:{difficulty}"
    if attempt:
        material += f"#{attempt}"
    digest = hashlib.sha256(material.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def list_dates(count_back: int, today: date) -> List[str]:
    """Return the ``count_back`` most recent date keys ending at ``today``, newest first."""
    return [format_date_key(today - timedelta(days=offset)) for offset in range(max(0, count_back))]


class DailyPuzzleFactory:
    """Build the deterministic puzzle for a calendar date and difficulty."""

    def __init__(self, *, max_steps: int = DEFAULT_MAX_STEPS) -> None:
        self.max_steps = max_steps

    def build(self, date_key: str, difficulty: str) -> PuzzleDefinition:
        parse_date_key(date_key)
        get_difficulty(difficulty)

        attempt = 0
        while True:
            seed = derive_seed(date_key, difficulty, attempt)
            logger.debug(
                "Building {} puzzle for {} (attempt {}, seed {})",
                difficulty,
                date_key,
                attempt,
                seed,
            )
            try:
                return self._build_once(date_key, difficulty, seed)
            except GenerationFailure as exc:
                attempt += 1
                if attempt >= MAX_ATTEMPTS:
                    raise
                logger.warning(
                    "Generation failed for {} {}, retrying with alternate seed: {}",
                    date_key,
                    difficulty,
                    exc,
                )

    def _build_once(self, date_key: str, difficulty: str, seed: int) -> PuzzleDefinition:
        generator = SudokuGenerator(difficulty, seed=seed, max_steps=self.max_steps)
        result, solution = generator.create_puzzle_with_solution()

        verdict = classify(result.given)
        if not verdict.is_unique or verdict.solution != solution:
            raise GenerationFailure(
                f"Carved puzzle for {date_key} {difficulty} lost its unique solution."
            )

        puzzle = PuzzleDefinition(
            id=f"{date_key}:{difficulty}",
            date=date_key,
            difficulty=difficulty,
            given=result.given,
            solution=solution,
            clue_count=result.clue_count,
        )
        logger.info(
            "Built {} puzzle for {} with {} clues",
            difficulty,
            date_key,
            puzzle.clue_count,
        )
        return puzzle

    def build_range(self, date_keys: Sequence[str], difficulty: str) -> List[PuzzleDefinition]:
        return [self.build(date_key, difficulty) for date_key in date_keys]


def build_daily_puzzle(date_key: str, difficulty: str = "medium") -> PuzzleDefinition:
    return DailyPuzzleFactory().build(date_key, difficulty)


__all__ = [
    "DailyPuzzleFactory",
    "PuzzleDefinition",
    "build_daily_puzzle",
    "derive_seed",
    "format_date_key",
    "list_dates",
    "parse_date_key",
]
