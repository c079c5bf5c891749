"""
Undo/redo over immutable game snapshots.

Snapshots hold tuples only, so pushing ``present`` onto a stack never needs a
copy: nothing can mutate it afterwards.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Sequence, Tuple

from .board import CELL_COUNT
from .notes import EMPTY

DEFAULT_HISTORY_LIMIT = 100


@dataclass(frozen=True)
class GameSnapshot:
    values: Tuple[int, ...]
    notes: Tuple[int, ...]
    mistakes: int = 0

    @classmethod
    def initial(cls, given: Sequence[int]) -> "GameSnapshot":
        return cls(values=tuple(given), notes=(EMPTY,) * CELL_COUNT, mistakes=0)


class SessionHistory:
    """Bounded past/future stacks around a single present snapshot."""

    def __init__(
        self,
        initial: GameSnapshot,
        present: Optional[GameSnapshot] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        if limit < 1:
            raise ValueError("History limit must be >= 1.")
        self.initial = initial
        self.present = present if present is not None else initial
        self.past: Deque[GameSnapshot] = deque(maxlen=limit)
        self.future: Deque[GameSnapshot] = deque(maxlen=limit)

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def apply(self, snapshot: GameSnapshot) -> bool:
        if snapshot == self.present:
            return False
        self.past.append(self.present)
        self.future.clear()
        self.present = snapshot
        return True

    def undo(self) -> bool:
        if not self.past:
            return False
        # appendleft on a full deque drops the far end of the redo stack
        self.future.appendleft(self.present)
        self.present = self.past.pop()
        return True

    def redo(self) -> bool:
        if not self.future:
            return False
        self.past.append(self.present)
        self.present = self.future.popleft()
        return True

    def restart(self) -> None:
        self.past.clear()
        self.future.clear()
        self.present = self.initial


__all__ = ["DEFAULT_HISTORY_LIMIT", "GameSnapshot", "SessionHistory"]
