"""
Seeded Sudoku generation.

``SudokuGenerator`` fills a complete grid with a randomized row-major
backtracking search, then carves clues away while the puzzle keeps exactly one
solution. All randomness flows through the ``random.Random`` instance handed
to the generator, so a fixed seed reproduces the same puzzle.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from .board import CELL_COUNT, DIGITS, PEERS, Board, count_clues
from .config import DifficultyConfig, get_difficulty
from .sudoku_solver import has_unique_solution

DEFAULT_MAX_STEPS = 200_000


class GenerationFailure(RuntimeError):
    """The backtracking fill exceeded its step budget."""

    def __init__(self, message: str, steps: int = 0) -> None:
        super().__init__(message)
        self.steps = steps


class CarveIncomplete(RuntimeError):
    """Carving stopped above the difficulty band without losing uniqueness."""

    def __init__(self, clue_count: int, min_clues: int, max_clues: int) -> None:
        super().__init__(
            f"Carved puzzle kept {clue_count} clues, outside the requested "
            f"{min_clues}-{max_clues} band."
        )
        self.clue_count = clue_count
        self.min_clues = min_clues
        self.max_clues = max_clues


@dataclass(frozen=True)
class CarveResult:
    given: Board
    clue_count: int
    target: int
    min_clues: int
    max_clues: int
    passes: int

    @property
    def in_band(self) -> bool:
        return self.min_clues <= self.clue_count <= self.max_clues


class SudokuGenerator:
    """Generate uniquely solvable puzzles for one difficulty tier."""

    def __init__(
        self,
        difficulty: str,
        *,
        seed: Optional[int] = None,
        randomizer: Optional[random.Random] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
    ) -> None:
        self.difficulty: DifficultyConfig = get_difficulty(difficulty)
        self.random = randomizer if randomizer is not None else random.Random(seed)
        self.max_steps = max_steps

    def generate_full_solution(self) -> Board:
        board = [0] * CELL_COUNT
        # frames[i] holds the untried digits for cell i, in shuffled order
        frames: List[List[int]] = [self._shuffled_digits()]
        steps = 0

        while frames:
            index = len(frames) - 1
            board[index] = 0
            digit = self._next_legal_digit(board, index, frames[-1])
            if digit is None:
                frames.pop()
                continue

            board[index] = digit
            steps += 1
            if steps > self.max_steps:
                raise GenerationFailure(
                    f"Solution search exceeded {self.max_steps} steps.", steps=steps
                )
            if index == CELL_COUNT - 1:
                logger.debug("Filled solution grid in {} steps", steps)
                return tuple(board)
            frames.append(self._shuffled_digits())

        raise GenerationFailure("Solution search exhausted every candidate.", steps=steps)

    def carve(self, solution: Sequence[int], *, strict: bool = False) -> CarveResult:
        """
        Remove clues from ``solution`` while the puzzle stays uniquely solvable.

        Args:
            solution: A complete, valid board.
            strict: Raise ``CarveIncomplete`` instead of returning a puzzle that
                kept more clues than the difficulty allows.

        Returns:
            CarveResult: the carved board and how far carving got.
        """

        config = self.difficulty
        puzzle = list(solution)
        clues = count_clues(puzzle)
        target = self.random.randint(config.min_clues, config.max_clues)
        cells = list(range(CELL_COUNT))
        self.random.shuffle(cells)

        passes = 0
        while clues > target:
            passes += 1
            removed_this_pass = 0
            for index in cells:
                if clues <= target:
                    break
                backup = puzzle[index]
                if not backup:
                    continue

                puzzle[index] = 0
                if has_unique_solution(puzzle):
                    clues -= 1
                    removed_this_pass += 1
                else:
                    puzzle[index] = backup

            logger.debug(
                "Carve pass {} removed {} clue(s), {} left (target {})",
                passes,
                removed_this_pass,
                clues,
                target,
            )
            if not removed_this_pass:
                break

        result = CarveResult(
            given=tuple(puzzle),
            clue_count=clues,
            target=target,
            min_clues=config.min_clues,
            max_clues=config.max_clues,
            passes=passes,
        )
        if not result.in_band:
            if strict:
                raise CarveIncomplete(clues, config.min_clues, config.max_clues)
            logger.warning(
                "Could not carve {} puzzle below {} clues (band {}-{}); keeping unique puzzle",
                config.name,
                clues,
                config.min_clues,
                config.max_clues,
            )
        return result

    def create_puzzle_with_solution(self) -> Tuple[CarveResult, Board]:
        solution = self.generate_full_solution()
        result = self.carve(solution)
        return result, solution

    def _shuffled_digits(self) -> List[int]:
        digits = list(DIGITS)
        self.random.shuffle(digits)
        return digits

    @staticmethod
    def _next_legal_digit(board: List[int], index: int, remaining: List[int]) -> Optional[int]:
        peers = PEERS[index]
        while remaining:
            digit = remaining.pop()
            if all(board[peer] != digit for peer in peers):
                return digit
        return None


def generate_solution(rng: random.Random, max_steps: int = DEFAULT_MAX_STEPS) -> Board:
    """Fill a complete grid, drawing every shuffle from ``rng``. The tier does not affect filling."""
    return SudokuGenerator("easy", randomizer=rng, max_steps=max_steps).generate_full_solution()


def carve_puzzle(
    solution: Sequence[int],
    difficulty: str,
    rng: random.Random,
    strict: bool = False,
) -> CarveResult:
    return SudokuGenerator(difficulty, randomizer=rng).carve(solution, strict=strict)


__all__ = [
    "CarveIncomplete",
    "CarveResult",
    "DEFAULT_MAX_STEPS",
    "GenerationFailure",
    "SudokuGenerator",
    "carve_puzzle",
    "generate_solution",
]
