"""
Board checks against Sudoku rules and the known solution.

``conflict_set`` and ``is_solved`` drive highlighting and completion;
``describe_issues`` produces the readable report used by the ``check`` command.
"""

from __future__ import annotations

from collections import Counter
from typing import List, Optional, Sequence, Set

from .board import BOXES, COLS, DIGITS, PEERS, ROWS, col_of, row_of


def conflict_set(values: Sequence[int]) -> Set[int]:
    """Return every filled cell whose value also appears among its peers."""

    conflicts: Set[int] = set()
    for index, value in enumerate(values):
        if value and any(values[peer] == value for peer in PEERS[index]):
            conflicts.add(index)
    return conflicts


def is_solved(values: Sequence[int], solution: Sequence[int]) -> bool:
    return len(values) == len(solution) and all(a == b for a, b in zip(values, solution))


def completed_digits(values: Sequence[int]) -> Set[int]:
    """Digits already placed nine times; the number pad can grey these out."""
    counts = Counter(value for value in values if value)
    return {digit for digit in DIGITS if counts[digit] >= 9}


def _unit_issue(label: str, cells: List[int]) -> Optional[str]:
    counts = Counter(value for value in cells if value)
    duplicates = sorted(digit for digit, count in counts.items() if count > 1)
    missing = sorted(set(DIGITS) - set(counts))
    issue_parts = []
    if duplicates:
        issue_parts.append(f"duplicate {duplicates}")
    if missing and all(cells):
        issue_parts.append(f"missing {missing}")
    if not issue_parts:
        return None
    return f"{label} violates Sudoku rules: {'; '.join(issue_parts)}."


def describe_issues(values: Sequence[int], given: Optional[Sequence[int]] = None) -> List[str]:
    """
    List rule violations in ``values``.

    Args:
        values: Board to inspect; empty cells are ignored.
        given: Optional starting grid; clues overwritten in ``values`` are reported.

    Returns:
        list: One message per broken clue, row, column or box.
    """

    issues: List[str] = []

    if given is not None:
        for index, clue in enumerate(given):
            if clue and values[index] != clue:
                issues.append(
                    f"Cell ({row_of(index) + 1}, {col_of(index) + 1}) must be {clue} per the "
                    f"puzzle, but the board uses {values[index]}."
                )

    for label, units in (("Row", ROWS), ("Column", COLS)):
        for number, unit in enumerate(units, start=1):
            issue = _unit_issue(f"{label} {number}", [values[i] for i in unit])
            if issue:
                issues.append(issue)

    for number, unit in enumerate(BOXES):
        label = f"Subgrid ({number // 3 + 1}, {number % 3 + 1})"
        issue = _unit_issue(label, [values[i] for i in unit])
        if issue:
            issues.append(issue)

    return issues


__all__ = ["completed_digits", "conflict_set", "describe_issues", "is_solved"]
