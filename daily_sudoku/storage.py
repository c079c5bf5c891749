"""
JSON-file progress store.

Stores per-puzzle records and aggregate stats in a single JSON document. The
engine never calls this module itself; hosts wire ``GameSession.on_persist``
and ``on_complete`` to ``save_game`` and ``mark_completed``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger

from .daily_puzzle import parse_date_key
from .game_session import GameRecord

GAME_KEY_PREFIX = "sudoku:game:"
STATS_KEY = "sudoku:stats"


def game_key(date_key: str, difficulty: str) -> str:
    return f"{GAME_KEY_PREFIX}{date_key}:{difficulty}"


@dataclass
class GameStats:
    completed_games: int = 0
    best_streak: int = 0
    current_streak: int = 0
    total_time_seconds: int = 0
    last_completed_date: Optional[str] = None

    @property
    def average_seconds(self) -> int:
        if not self.completed_games:
            return 0
        return round(self.total_time_seconds / self.completed_games)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completedGames": self.completed_games,
            "bestStreak": self.best_streak,
            "currentStreak": self.current_streak,
            "totalTimeSeconds": self.total_time_seconds,
            "lastCompletedDate": self.last_completed_date,
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "GameStats":
        stats = cls()
        if not isinstance(payload, dict):
            return stats
        for attr, key in (
            ("completed_games", "completedGames"),
            ("best_streak", "bestStreak"),
            ("current_streak", "currentStreak"),
            ("total_time_seconds", "totalTimeSeconds"),
        ):
            value = payload.get(key)
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                setattr(stats, attr, value)
        last = payload.get("lastCompletedDate")
        if isinstance(last, str):
            stats.last_completed_date = last
        return stats


class ProgressStore:
    """Per-puzzle records and stats kept in one JSON document."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load_game(self, date_key: str, difficulty: str) -> Optional[Dict[str, Any]]:
        payload = self._read()
        entry = payload.get(game_key(date_key, difficulty))
        if isinstance(entry, dict):
            return entry

        # Records written before difficulties existed were keyed by date only.
        legacy = payload.get(f"{GAME_KEY_PREFIX}{date_key}")
        if not isinstance(legacy, dict):
            return None
        return {**legacy, "difficulty": difficulty}

    def save_game(self, record: Union[GameRecord, Dict[str, Any]]) -> None:
        entry = record.to_dict() if isinstance(record, GameRecord) else dict(record)
        payload = self._read()
        payload[game_key(entry["date"], entry["difficulty"])] = entry
        self._write(payload)

    def load_stats(self) -> GameStats:
        return GameStats.from_dict(self._read().get(STATS_KEY))

    def mark_completed(self, date_key: str, elapsed_seconds: int) -> GameStats:
        """
        Count a completed daily puzzle towards the aggregate stats.

        A date is only counted once. The current streak grows when the previous
        completion was the day before and restarts at 1 otherwise.
        """

        payload = self._read()
        stats = GameStats.from_dict(payload.get(STATS_KEY))
        counted_key = f"{GAME_KEY_PREFIX}{date_key}:counted"
        if payload.get(counted_key):
            return stats

        previous = stats.last_completed_date
        stats.completed_games += 1
        stats.total_time_seconds += max(0, elapsed_seconds)
        stats.last_completed_date = date_key

        if previous is None:
            stats.current_streak = 1
        else:
            gap = (parse_date_key(date_key) - parse_date_key(previous)).days
            stats.current_streak = stats.current_streak + 1 if gap == 1 else 1
        stats.best_streak = max(stats.best_streak, stats.current_streak)

        payload[STATS_KEY] = stats.to_dict()
        payload[counted_key] = True
        self._write(payload)
        logger.info(
            "Recorded completion for {} (streak {}, best {})",
            date_key,
            stats.current_streak,
            stats.best_streak,
        )
        return stats

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable progress file {}: {}", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring progress file {}: top level is not an object", self.path)
            return {}
        return payload

    def _write(self, payload: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)


__all__ = ["GAME_KEY_PREFIX", "GameStats", "ProgressStore", "game_key"]
