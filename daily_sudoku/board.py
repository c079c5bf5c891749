"""
Board geometry for the 9x9 grid.

Boards are flat sequences of 81 ints in row-major order (index = row * 9 + col),
0 meaning an empty cell. Peer sets and units are computed once at import time.
"""

from __future__ import annotations

from typing import FrozenSet, List, Sequence, Tuple, Union

SIZE = 9
BOX_SIZE = 3
CELL_COUNT = SIZE * SIZE
DIGITS = tuple(range(1, SIZE + 1))

Board = Tuple[int, ...]


def row_of(index: int) -> int:
    return index // SIZE


def col_of(index: int) -> int:
    return index % SIZE


def box_of(index: int) -> int:
    return (row_of(index) // BOX_SIZE) * BOX_SIZE + col_of(index) // BOX_SIZE


def index_of(row: int, col: int) -> int:
    return row * SIZE + col


ROWS: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(index_of(r, c) for c in range(SIZE)) for r in range(SIZE)
)
COLS: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(index_of(r, c) for r in range(SIZE)) for c in range(SIZE)
)
BOXES: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(i for i in range(CELL_COUNT) if box_of(i) == b) for b in range(SIZE)
)
UNITS = ROWS + COLS + BOXES


def _build_peers() -> Tuple[FrozenSet[int], ...]:
    peers = []
    for i in range(CELL_COUNT):
        related = set(ROWS[row_of(i)]) | set(COLS[col_of(i)]) | set(BOXES[box_of(i)])
        related.discard(i)
        peers.append(frozenset(related))
    return tuple(peers)


PEERS = _build_peers()


def peers_of(index: int) -> FrozenSet[int]:
    """Return the 20 cells sharing a row, column or box with ``index``."""
    return PEERS[index]


def empty_board() -> Board:
    return (0,) * CELL_COUNT


def count_clues(board: Sequence[int]) -> int:
    return sum(1 for value in board if value)


def rows_of(board: Sequence[int]) -> List[List[int]]:
    return [list(board[r * SIZE:(r + 1) * SIZE]) for r in range(SIZE)]


def board_to_text(board: Sequence[int]) -> str:
    """Render a board as nine lines, empty cells shown as '.'."""

    lines: List[str] = []
    for row in rows_of(board):
        lines.append(" ".join(str(value) if value else "." for value in row))
    return "\n".join(lines)


def parse_board(source: Union[str, Sequence[int], Sequence[Sequence[int]]]) -> Board:
    """
    Build a flat board from one of the accepted shapes.

    Args:
        source: an 81 character string ('0' or '.' for empties, whitespace
            ignored), a flat sequence of 81 ints, or 9 rows of 9 ints.

    Returns:
        Board: tuple of 81 ints.

    Raises:
        ValueError: if the shape or any value is invalid.
    """

    if isinstance(source, str):
        chars = [ch for ch in source if not ch.isspace()]
        if len(chars) != CELL_COUNT:
            raise ValueError(f"Board text must contain {CELL_COUNT} cells, got {len(chars)}.")
        cells = []
        for ch in chars:
            if ch == ".":
                cells.append(0)
            elif ch.isdigit():
                cells.append(int(ch))
            else:
                raise ValueError(f"Invalid board character {ch!r}.")
        return tuple(cells)

    items = list(source)
    if len(items) == SIZE and all(isinstance(row, (list, tuple)) for row in items):
        if any(len(row) != SIZE for row in items):
            raise ValueError("Each board row must contain exactly 9 cells.")
        items = [value for row in items for value in row]

    if len(items) != CELL_COUNT:
        raise ValueError(f"Board must contain {CELL_COUNT} cells, got {len(items)}.")

    cells = []
    for index, value in enumerate(items):
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= SIZE:
            raise ValueError(f"Cell {index} contains invalid value {value!r}.")
        cells.append(value)
    return tuple(cells)


__all__ = [
    "BOXES",
    "Board",
    "CELL_COUNT",
    "COLS",
    "DIGITS",
    "PEERS",
    "ROWS",
    "SIZE",
    "UNITS",
    "board_to_text",
    "box_of",
    "col_of",
    "count_clues",
    "empty_board",
    "index_of",
    "parse_board",
    "peers_of",
    "row_of",
    "rows_of",
]
