"""
Gameplay session for one daily puzzle.

``GameSession`` layers the player actions (digit entry, notes, clearing,
undo/redo, restart) on top of ``SessionHistory`` and emits a serializable
``GameRecord`` after every change so the host can persist it however it likes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Set, Tuple, Union

from loguru import logger

from . import notes as notes_codec
from .board import CELL_COUNT, DIGITS, SIZE, col_of, index_of, parse_board, peers_of, row_of
from .config import GameSettings
from .daily_puzzle import PuzzleDefinition
from .session_history import GameSnapshot, SessionHistory
from .validator import completed_digits, conflict_set, is_solved

PersistCallback = Callable[["GameRecord"], None]
CompleteCallback = Callable[[int], None]
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _require_int(payload: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Record field {key!r} must be a non-negative int, got {value!r}.")
    return value


def _optional_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Record field {key!r} must be a string or null.")
    return value


@dataclass(frozen=True)
class GameRecord:
    """Serializable progress for one (date, difficulty) puzzle."""

    date: str
    difficulty: str
    values: Tuple[int, ...]
    notes: Tuple[int, ...]
    mistakes: int
    elapsed_seconds: int = 0
    notes_mode: bool = False
    completed: bool = False
    completed_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "difficulty": self.difficulty,
            "values": list(self.values),
            "notes": list(self.notes),
            "mistakes": self.mistakes,
            "elapsedSeconds": self.elapsed_seconds,
            "notesMode": self.notes_mode,
            "completed": self.completed,
            "completedAt": self.completed_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GameRecord":
        """
        Validate and load a stored record.

        Raises:
            ValueError: if any field is missing or malformed. Nothing is repaired.
        """

        if not isinstance(payload, dict):
            raise ValueError("Record must be a JSON object.")

        date_key = payload.get("date")
        difficulty = payload.get("difficulty")
        if not isinstance(date_key, str) or not isinstance(difficulty, str):
            raise ValueError("Record must carry string 'date' and 'difficulty' fields.")

        raw_values = payload.get("values")
        if not isinstance(raw_values, (list, tuple)) or len(raw_values) != CELL_COUNT:
            raise ValueError(f"Record 'values' must be a flat list of {CELL_COUNT} cells.")
        if any(isinstance(value, bool) or not isinstance(value, int) for value in raw_values):
            raise ValueError("Record 'values' must hold only integers.")
        values = parse_board(raw_values)

        raw_notes = payload.get("notes")
        if not isinstance(raw_notes, (list, tuple)) or len(raw_notes) != CELL_COUNT:
            raise ValueError(f"Record 'notes' must be a list of {CELL_COUNT} masks.")
        for mask in raw_notes:
            if (
                isinstance(mask, bool)
                or not isinstance(mask, int)
                or mask < 0
                or mask & ~notes_codec.FULL
            ):
                raise ValueError(f"Record contains invalid note mask {mask!r}.")

        notes_mode = payload.get("notesMode", False)
        completed = payload.get("completed", False)
        if not isinstance(notes_mode, bool) or not isinstance(completed, bool):
            raise ValueError("Record flags 'notesMode' and 'completed' must be booleans.")

        return cls(
            date=date_key,
            difficulty=difficulty,
            values=values,
            notes=tuple(raw_notes),
            mistakes=_require_int(payload, "mistakes"),
            elapsed_seconds=_require_int(payload, "elapsedSeconds", 0),
            notes_mode=notes_mode,
            completed=completed,
            completed_at=_optional_str(payload, "completedAt"),
            updated_at=_optional_str(payload, "updatedAt"),
        )


class GameSession:
    """Player-facing state machine for one puzzle."""

    def __init__(
        self,
        puzzle: PuzzleDefinition,
        settings: Optional[GameSettings] = None,
        record: Optional[Union[GameRecord, Dict[str, Any]]] = None,
        *,
        on_persist: Optional[PersistCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.puzzle = puzzle
        self.settings = settings or GameSettings()
        self.on_persist = on_persist
        self.on_complete = on_complete
        self.clock = clock or _utc_now

        self.selected_index: Optional[int] = None
        self.notes_mode = False
        self.elapsed_seconds = 0
        self.completed_at: Optional[str] = None

        present: Optional[GameSnapshot] = None
        stored = self._rehydrate(record)
        if stored is not None:
            present = GameSnapshot(stored.values, stored.notes, stored.mistakes)
            self.notes_mode = stored.notes_mode
            self.elapsed_seconds = stored.elapsed_seconds
            self.completed_at = stored.completed_at

        self.history = SessionHistory(
            GameSnapshot.initial(puzzle.given),
            present,
            limit=self.settings.history_limit,
        )

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    @property
    def snapshot(self) -> GameSnapshot:
        return self.history.present

    @property
    def values(self) -> Tuple[int, ...]:
        return self.history.present.values

    @property
    def notes(self) -> Tuple[int, ...]:
        return self.history.present.notes

    @property
    def mistakes(self) -> int:
        return self.history.present.mistakes

    @property
    def completed(self) -> bool:
        return is_solved(self.values, self.puzzle.solution)

    @property
    def conflicts(self) -> Set[int]:
        return conflict_set(self.values)

    @property
    def completed_digits(self) -> Set[int]:
        return completed_digits(self.values)

    @property
    def can_undo(self) -> bool:
        return not self.completed and self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return not self.completed and self.history.can_redo

    # ------------------------------------------------------------------
    # Selection and modes
    # ------------------------------------------------------------------
    def select(self, index: Optional[int]) -> None:
        if index is not None:
            self._check_index(index)
        self.selected_index = index

    def move_selection(self, d_row: int, d_col: int) -> int:
        index = self.selected_index if self.selected_index is not None else 0
        row = (row_of(index) + d_row) % SIZE
        col = (col_of(index) + d_col) % SIZE
        self.selected_index = index_of(row, col)
        return self.selected_index

    def set_notes_mode(self, enabled: bool) -> None:
        if self.notes_mode == enabled:
            return
        self.notes_mode = enabled
        self._persist()

    def toggle_notes_mode(self) -> bool:
        self.set_notes_mode(not self.notes_mode)
        return self.notes_mode

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------
    def enter_digit(self, digit: int, index: Optional[int] = None) -> bool:
        """
        Enter ``digit`` at ``index`` (or the selected cell).

        In notes mode the digit's pencil mark is toggled. Otherwise the value is
        placed, the cell's notes are cleared and, depending on settings, the
        digit is removed from peer notes and a wrong entry counts as a mistake.

        Returns:
            bool: True if a new snapshot was recorded.
        """

        if digit not in DIGITS:
            raise ValueError(f"Digit must be between 1 and 9, got {digit!r}.")
        index = self._editable_target(index)
        if index is None:
            return False

        present = self.history.present
        notes = list(present.notes)

        if self.notes_mode:
            notes[index] = notes_codec.toggle(notes[index], digit)
            self._commit(GameSnapshot(present.values, tuple(notes), present.mistakes))
            return True

        if present.values[index] == digit:
            return False

        values = list(present.values)
        values[index] = digit
        notes[index] = notes_codec.EMPTY
        if self.settings.auto_remove_notes:
            for peer in peers_of(index):
                notes[peer] = notes_codec.clear(notes[peer], digit)

        mistakes = present.mistakes
        if self.settings.count_mistakes and digit != self.puzzle.solution[index]:
            mistakes += 1
            logger.debug("Wrong digit {} at cell {} (mistakes={})", digit, index, mistakes)

        self._commit(GameSnapshot(tuple(values), tuple(notes), mistakes))
        return True

    def clear_cell(self, index: Optional[int] = None) -> bool:
        index = self._editable_target(index)
        if index is None:
            return False

        present = self.history.present
        if present.values[index] == 0 and present.notes[index] == notes_codec.EMPTY:
            return False

        values = list(present.values)
        notes = list(present.notes)
        values[index] = 0
        notes[index] = notes_codec.EMPTY
        self._commit(GameSnapshot(tuple(values), tuple(notes), present.mistakes))
        return True

    def undo(self) -> bool:
        if self.completed or not self.history.undo():
            return False
        self._after_change()
        return True

    def redo(self) -> bool:
        if self.completed or not self.history.redo():
            return False
        self._after_change()
        return True

    def restart(self) -> None:
        self.history.restart()
        self.elapsed_seconds = 0
        self.completed_at = None
        self._persist()

    def add_elapsed(self, seconds: int) -> None:
        """Credit time reported by the host's timer; ignored once solved."""
        if seconds <= 0 or self.completed:
            return
        self.elapsed_seconds += seconds
        self._persist()

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------
    def to_record(self) -> GameRecord:
        completed = self.completed
        present = self.history.present
        return GameRecord(
            date=self.puzzle.date,
            difficulty=self.puzzle.difficulty,
            values=present.values,
            notes=present.notes,
            mistakes=present.mistakes,
            elapsed_seconds=self.elapsed_seconds,
            notes_mode=self.notes_mode,
            completed=completed,
            completed_at=self.completed_at if completed else None,
            updated_at=self._timestamp(),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _rehydrate(
        self, record: Optional[Union[GameRecord, Dict[str, Any]]]
    ) -> Optional[GameRecord]:
        if record is None:
            return None
        payload = record.to_dict() if isinstance(record, GameRecord) else record
        try:
            stored = GameRecord.from_dict(payload)
            if stored.date != self.puzzle.date or stored.difficulty != self.puzzle.difficulty:
                raise ValueError(
                    f"record is for {stored.date} {stored.difficulty}, "
                    f"not {self.puzzle.date} {self.puzzle.difficulty}"
                )
            for index, clue in enumerate(self.puzzle.given):
                if clue and stored.values[index] != clue:
                    raise ValueError(f"record overwrites given cell {index}")
            solved = is_solved(stored.values, self.puzzle.solution)
            if stored.completed != solved or (stored.completed_at is not None and not solved):
                raise ValueError(
                    f"record completion (completed={stored.completed}, "
                    f"completedAt={stored.completed_at!r}) disagrees with its board"
                )
        except ValueError as exc:
            logger.warning("Ignoring stored game for {}: {}", self.puzzle.id, exc)
            return None
        return stored

    @staticmethod
    def _check_index(index: int) -> None:
        if not 0 <= index < CELL_COUNT:
            raise ValueError(f"Cell index must be between 0 and {CELL_COUNT - 1}, got {index}.")

    def _editable_target(self, index: Optional[int]) -> Optional[int]:
        if index is None:
            index = self.selected_index
        if index is None:
            return None
        self._check_index(index)
        if self.puzzle.is_given(index) or self.completed:
            return None
        return index

    def _commit(self, snapshot: GameSnapshot) -> None:
        if self.history.apply(snapshot):
            self._after_change()

    def _after_change(self) -> None:
        just_completed = self.completed and self.completed_at is None
        if just_completed:
            self.completed_at = self._timestamp()
            logger.info(
                "Puzzle {} solved in {}s with {} mistake(s)",
                self.puzzle.id,
                self.elapsed_seconds,
                self.mistakes,
            )
        self._persist()
        if just_completed and self.on_complete is not None:
            self.on_complete(self.elapsed_seconds)

    def _persist(self) -> None:
        if self.on_persist is not None:
            self.on_persist(self.to_record())

    def _timestamp(self) -> str:
        return self.clock().isoformat(timespec="seconds")


__all__ = ["GameRecord", "GameSession"]
