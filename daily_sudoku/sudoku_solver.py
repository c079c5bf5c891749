"""
Uniqueness solver for 9x9 Sudoku boards.

The solver counts completions up to a limit, which is all the carver needs:
a puzzle is rejected the moment a second completion shows up, so the search
never enumerates more than two solutions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .board import CELL_COUNT, Board, box_of, col_of, parse_board, row_of

FULL_MASK = 0b1111111110

_UNIT_SLOTS: Tuple[Tuple[int, int, int], ...] = tuple(
    (row_of(i), col_of(i), box_of(i)) for i in range(CELL_COUNT)
)


class BoardConflictError(ValueError):
    """Raised when the givens already break a row, column or box constraint."""


class Verdict(Enum):
    NO_SOLUTION = "no_solution"
    UNIQUE = "unique"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class Classification:
    verdict: Verdict
    solution: Optional[Board] = None

    @property
    def is_unique(self) -> bool:
        return self.verdict is Verdict.UNIQUE


class SudokuSolver:
    """Backtracking solver with fewest-candidates cell selection."""

    def __init__(self, board: Sequence[int]) -> None:
        self.board: List[int] = list(parse_board(board))
        self.rows = [0] * 9
        self.cols = [0] * 9
        self.boxes = [0] * 9

        for index, value in enumerate(self.board):
            if value == 0:
                continue
            r, c, b = _UNIT_SLOTS[index]
            bit = 1 << value
            if self.rows[r] & bit or self.cols[c] & bit or self.boxes[b] & bit:
                raise BoardConflictError(
                    f"Duplicate value {value} detected at cell ({r}, {c})."
                )
            self.rows[r] |= bit
            self.cols[c] |= bit
            self.boxes[b] |= bit

        self.solution_counter = 0
        self.first_solution: Optional[Board] = None
        self.steps = 0
        self._solution_limit = 1

    def solve(self, limit: int = 1) -> int:
        """
        Search for completions of the board.

        Args:
            limit: Maximum number of solutions to search for. Use 1 to find a
                single solution; use 2 to test uniqueness.

        Returns:
            int: Number of solutions found, capped at ``limit``.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1.")

        self.solution_counter = 0
        self.first_solution = None
        self.steps = 0
        self._solution_limit = limit
        self._search()
        return self.solution_counter

    def get_solution(self) -> Optional[Board]:
        return self.first_solution

    # Internal helpers -----------------------------------------------------

    def _candidates(self, index: int) -> int:
        r, c, b = _UNIT_SLOTS[index]
        return FULL_MASK & ~(self.rows[r] | self.cols[c] | self.boxes[b])

    def _select_unassigned_cell(self) -> Optional[Tuple[int, int]]:
        best_index = -1
        best_mask = 0
        best_count = 10

        for index, value in enumerate(self.board):
            if value:
                continue
            mask = self._candidates(index)
            count = bin(mask).count("1")
            if count == 0:
                return index, 0
            if count < best_count:
                best_index, best_mask, best_count = index, mask, count
                if count == 1:
                    break

        if best_index < 0:
            return None
        return best_index, best_mask

    def _place_value(self, index: int, value: int) -> None:
        r, c, b = _UNIT_SLOTS[index]
        bit = 1 << value
        self.board[index] = value
        self.rows[r] |= bit
        self.cols[c] |= bit
        self.boxes[b] |= bit

    def _remove_value(self, index: int, value: int) -> None:
        r, c, b = _UNIT_SLOTS[index]
        bit = ~(1 << value)
        self.board[index] = 0
        self.rows[r] &= bit
        self.cols[c] &= bit
        self.boxes[b] &= bit

    def _record_solution(self) -> bool:
        self.solution_counter += 1
        if self.first_solution is None:
            self.first_solution = tuple(self.board)
        return self.solution_counter >= self._solution_limit

    def _search(self) -> None:
        selection = self._select_unassigned_cell()
        if selection is None:
            self._record_solution()
            return

        # frame: [cell index, untried candidate mask, value currently placed]
        stack: List[List[int]] = [[selection[0], selection[1], 0]]
        while stack:
            frame = stack[-1]
            index, remaining, placed = frame
            if placed:
                self._remove_value(index, placed)
                frame[2] = 0
            if not remaining:
                stack.pop()
                continue

            value = (remaining & -remaining).bit_length() - 1
            frame[1] = remaining & (remaining - 1)
            self._place_value(index, value)
            frame[2] = value
            self.steps += 1

            selection = self._select_unassigned_cell()
            if selection is None:
                if self._record_solution():
                    self._unwind(stack)
                    return
                continue

            next_index, next_mask = selection
            if next_mask:
                stack.append([next_index, next_mask, 0])

    def _unwind(self, stack: List[List[int]]) -> None:
        for index, _, placed in reversed(stack):
            if placed:
                self._remove_value(index, placed)


def classify(board: Sequence[int]) -> Classification:
    """Classify a partial board as having no, exactly one, or several completions."""

    try:
        solver = SudokuSolver(board)
    except BoardConflictError:
        return Classification(Verdict.NO_SOLUTION)

    count = solver.solve(limit=2)
    if count == 0:
        return Classification(Verdict.NO_SOLUTION)
    if count == 1:
        return Classification(Verdict.UNIQUE, solver.get_solution())
    return Classification(Verdict.MULTIPLE)


def has_unique_solution(board: Sequence[int]) -> bool:
    return classify(board).is_unique


__all__ = [
    "BoardConflictError",
    "Classification",
    "SudokuSolver",
    "Verdict",
    "classify",
    "has_unique_solution",
]
