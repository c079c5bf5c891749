# tests/conftest.py
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from loguru import logger

# Add project root to sys.path so "daily_sudoku" imports without an install
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from daily_sudoku.board import parse_board  # noqa: E402
from daily_sudoku.daily_puzzle import PuzzleDefinition  # noqa: E402

# Classic 30-clue puzzle and its unique solution
CLASSIC_GIVEN = (
    "530070000"
    "600195000"
    "098000060"
    "800060003"
    "400803001"
    "700020006"
    "060000280"
    "000419005"
    "000080079"
)
CLASSIC_SOLUTION = (
    "534678912"
    "672195348"
    "198342567"
    "859761423"
    "426853791"
    "713924856"
    "961537284"
    "287419635"
    "345286179"
)


@pytest.fixture
def classic_given():
    return parse_board(CLASSIC_GIVEN)


@pytest.fixture
def classic_solution():
    return parse_board(CLASSIC_SOLUTION)


@pytest.fixture
def classic_puzzle(classic_given, classic_solution):
    return PuzzleDefinition(
        id="2024-05-01:medium",
        date="2024-05-01",
        difficulty="medium",
        given=classic_given,
        solution=classic_solution,
        clue_count=30,
    )


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def log_messages():
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
