"""
Configuration for the daily Sudoku engine.

Difficulty tiers live in the ``DIFFICULTIES`` registry; add a tier by adding an
entry there. Player-facing toggles are grouped in ``GameSettings`` and can be
loaded from a JSON file (path from ``DAILY_SUDOKU_SETTINGS`` by default).
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger

SETTINGS_ENV = "DAILY_SUDOKU_SETTINGS"


@dataclass(frozen=True)
class DifficultyConfig:
    name: str
    min_clues: int
    max_clues: int

    def contains(self, clue_count: int) -> bool:
        return self.min_clues <= clue_count <= self.max_clues


DIFFICULTIES: Dict[str, DifficultyConfig] = {
    "easy": DifficultyConfig(name="easy", min_clues=36, max_clues=40),
    "medium": DifficultyConfig(name="medium", min_clues=30, max_clues=35),
    "hard": DifficultyConfig(name="hard", min_clues=26, max_clues=29),
    "expert": DifficultyConfig(name="expert", min_clues=22, max_clues=25),
}


def get_difficulty(name: str) -> DifficultyConfig:
    try:
        return DIFFICULTIES[name]
    except KeyError as exc:
        raise ValueError(
            f"Unsupported difficulty: {name!r} (expected one of {', '.join(DIFFICULTIES)})"
        ) from exc


@dataclass(frozen=True)
class GameSettings:
    auto_remove_notes: bool = True
    count_mistakes: bool = True
    default_difficulty: str = "medium"
    history_limit: int = 100


# camelCase keys written by the web client.
_LEGACY_KEYS = {
    "autoRemoveNotes": "auto_remove_notes",
    "autoCheckConflicts": "count_mistakes",
    "defaultDifficulty": "default_difficulty",
    "historyLimit": "history_limit",
}


def settings_from_dict(payload: Dict[str, Any]) -> GameSettings:
    settings = GameSettings()
    known = set(asdict(settings))
    overrides: Dict[str, Any] = {}

    for key, value in payload.items():
        field_name = _LEGACY_KEYS.get(key, key)
        if field_name in known:
            overrides[field_name] = value

    settings = replace(settings, **overrides)
    get_difficulty(settings.default_difficulty)
    for flag in ("auto_remove_notes", "count_mistakes"):
        if not isinstance(getattr(settings, flag), bool):
            raise ValueError(f"{flag} must be true or false, got {getattr(settings, flag)!r}")
    if isinstance(settings.history_limit, bool) or not isinstance(settings.history_limit, int) or settings.history_limit < 1:
        raise ValueError(f"history_limit must be a positive int, got {settings.history_limit!r}")
    return settings


def default_settings_path() -> Optional[Path]:
    value = os.getenv(SETTINGS_ENV)
    return Path(value) if value else None


def load_settings(path: Optional[Union[str, Path]] = None) -> GameSettings:
    """
    Load settings from a JSON file, falling back to defaults.

    Args:
        path: Settings file; defaults to ``$DAILY_SUDOKU_SETTINGS``.

    Returns:
        GameSettings: defaults overlaid with whatever the file provides.
    """

    settings_path = Path(path) if path is not None else default_settings_path()
    if settings_path is None or not settings_path.exists():
        return GameSettings()

    try:
        with settings_path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
        if not isinstance(payload, dict):
            raise ValueError("settings file must contain a JSON object")
        return settings_from_dict(payload)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Ignoring unreadable settings file {}: {}", settings_path, exc)
        return GameSettings()


def save_settings(settings: GameSettings, path: Union[str, Path]) -> Path:
    settings_path = Path(path)
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    with settings_path.open("w", encoding="utf-8") as fh:
        json.dump(asdict(settings), fh, ensure_ascii=False, indent=2)
    return settings_path


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file is not None:
        logger.add(log_file, level="DEBUG", encoding="utf-8")


__all__ = [
    "DIFFICULTIES",
    "DifficultyConfig",
    "GameSettings",
    "SETTINGS_ENV",
    "configure_logging",
    "get_difficulty",
    "load_settings",
    "save_settings",
    "settings_from_dict",
]
