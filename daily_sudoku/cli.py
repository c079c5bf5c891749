"""
Command line entry points for the daily Sudoku engine.

Examples:

    daily-sudoku generate --difficulty hard
    daily-sudoku export --days 30 --difficulty medium --output-dir daily_dataset
    daily-sudoku check --date 2024-05-01 --board my_answer.txt
    daily-sudoku archive --days 14 --store progress.json
"""

from __future__ import annotations

import argparse
import json
import re
import time
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger

from .board import board_to_text, rows_of
from .config import DIFFICULTIES, configure_logging, load_settings
from .daily_puzzle import DailyPuzzleFactory, PuzzleDefinition, format_date_key, list_dates
from .game_session import GameRecord
from .storage import ProgressStore
from .validator import describe_issues, is_solved


def format_duration(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def slice_rows_with_digits(text: str, expected: int = 9) -> List[List[int]]:
    """Pick out the lines holding exactly ``expected`` digits ('.' counts as 0)."""

    rows: List[List[int]] = []
    for line in text.splitlines():
        tokens = re.findall(r"[0-9.]", line)
        if len(tokens) == expected:
            rows.append([0 if token == "." else int(token) for token in tokens])
    return rows


def save_puzzles(
    puzzles: Sequence[PuzzleDefinition],
    output_dir: Path,
    difficulty: str,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    dataset_path = output_dir / f"daily_{difficulty}.json"
    generated_at = time.strftime("%Y-%m-%d %H:%M:%S")
    count = len(puzzles)

    with dataset_path.open("w", encoding="utf-8") as fp:
        fp.write("{\n")
        fp.write(f'  "difficulty": {json.dumps(difficulty)},\n')
        fp.write(f'  "count": {count},\n')
        fp.write(f'  "generated_at": "{generated_at}",\n')
        fp.write('  "puzzles": [\n')
        for entry_index, puzzle in enumerate(puzzles):
            fp.write("    {\n")
            fp.write(f'      "id": {json.dumps(puzzle.id)},\n')
            fp.write(f'      "date": {json.dumps(puzzle.date)},\n')
            fp.write(f'      "clue_count": {puzzle.clue_count},\n')
            for field_name, board, trailing in (
                ("puzzle", puzzle.given, ","),
                ("solution", puzzle.solution, ""),
            ):
                fp.write(f'      "{field_name}": [\n')
                rows = rows_of(board)
                for row_index, row in enumerate(rows):
                    row_trailing = "," if row_index < len(rows) - 1 else ""
                    fp.write(f"        {json.dumps(row)}{row_trailing}\n")
                fp.write(f"      ]{trailing}\n")
            entry_trailing = "," if entry_index < count - 1 else ""
            fp.write(f"    }}{entry_trailing}\n")
        fp.write("  ]\n")
        fp.write("}\n")

    return dataset_path


def cmd_generate(args: argparse.Namespace) -> int:
    puzzle = DailyPuzzleFactory().build(args.date, args.difficulty)
    print(f"{puzzle.date} · {puzzle.difficulty} · {puzzle.clue_count} clues")
    print(board_to_text(puzzle.given))
    if args.show_solution:
        print("\nSolution:")
        print(board_to_text(puzzle.solution))
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    if args.days <= 0:
        print("Nothing to export (days <= 0).")
        return 0

    start_time = time.time()
    dates = list_dates(args.days, args.today)
    factory = DailyPuzzleFactory()
    puzzles: List[PuzzleDefinition] = []
    progress_step = max(1, len(dates) // 10)

    for index, date_key in enumerate(dates):
        puzzles.append(factory.build(date_key, args.difficulty))
        if (index + 1) % progress_step == 0 or index == len(dates) - 1:
            logger.info("[{}] Generated {}/{} puzzles", args.difficulty, index + 1, len(dates))

    path = save_puzzles(puzzles, args.output_dir.resolve(), args.difficulty)
    print(f"Saved {len(puzzles)} puzzle(s) to {path} in {time.time() - start_time:.1f}s.")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    puzzle = DailyPuzzleFactory().build(args.date, args.difficulty)
    rows = slice_rows_with_digits(args.board.read_text(encoding="utf-8"))
    if len(rows) < 9:
        print("✗ Failed to detect 9 valid lines. Each line needs exactly 9 digits ('.' or 0 for blanks).")
        return 2

    values = [value for row in rows[:9] for value in row]
    issues = describe_issues(values, puzzle.given)
    if is_solved(values, puzzle.solution):
        print(f"✓ Solved {puzzle.id}.")
        return 0

    if issues:
        print(f"✗ Found {len(issues)} problem(s):")
        for issue in issues:
            print(f"  - {issue}")
    else:
        remaining = sum(1 for value in values if value == 0)
        print(f"No rule violations so far; {remaining} cell(s) still empty.")
    return 1


def cmd_archive(args: argparse.Namespace) -> int:
    store = ProgressStore(args.store)
    for date_key in list_dates(args.days, args.today):
        status = "not started"
        game = store.load_game(date_key, args.difficulty)
        if game is not None:
            try:
                record = GameRecord.from_dict(game)
            except ValueError as exc:
                logger.warning("Skipping stored game for {}: {}", date_key, exc)
            else:
                elapsed = format_duration(record.elapsed_seconds)
                status = f"completed · {elapsed}" if record.completed else f"in progress · {elapsed}"
        print(f"{date_key}  {status}")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    stats = ProgressStore(args.store).load_stats()
    print(f"Completed games: {stats.completed_games}")
    print(f"Current streak:  {stats.current_streak}")
    print(f"Best streak:     {stats.best_streak}")
    average = format_duration(stats.average_seconds) if stats.average_seconds else "-"
    print(f"Average time:    {average}")
    return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    settings = load_settings()
    today = format_date_key(date.today())

    parser = argparse.ArgumentParser(
        description="Generate and check deterministic daily Sudoku puzzles."
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level for console output (default: WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_puzzle_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--date",
            default=today,
            help="Puzzle date as YYYY-MM-DD (default: today).",
        )
        sub.add_argument(
            "--difficulty",
            choices=list(DIFFICULTIES),
            default=settings.default_difficulty,
            help=f"Difficulty tier (default: {settings.default_difficulty}).",
        )

    generate = subparsers.add_parser("generate", help="Print the puzzle for a date.")
    add_puzzle_options(generate)
    generate.add_argument(
        "--show-solution",
        action="store_true",
        help="Also print the solution grid.",
    )
    generate.set_defaults(handler=cmd_generate)

    check = subparsers.add_parser("check", help="Validate a filled-in board against a daily puzzle.")
    add_puzzle_options(check)
    check.add_argument(
        "--board",
        type=Path,
        required=True,
        help="Text file with 9 lines of 9 digits ('.' or 0 for blanks).",
    )
    check.set_defaults(handler=cmd_check)

    export = subparsers.add_parser("export", help="Write the last N daily puzzles to JSON.")
    export.add_argument("--days", type=int, default=30, help="Number of days to export (default: 30).")
    export.add_argument(
        "--difficulty",
        choices=list(DIFFICULTIES),
        default=settings.default_difficulty,
        help="Difficulty tier to export.",
    )
    export.add_argument(
        "--output-dir",
        type=Path,
        default=Path.cwd() / "daily_dataset",
        help="Directory to store the exported puzzles.",
    )
    export.set_defaults(handler=cmd_export)

    archive = subparsers.add_parser("archive", help="List recent dates with saved progress.")
    archive.add_argument("--days", type=int, default=90, help="Number of days to list (default: 90).")
    archive.add_argument(
        "--difficulty",
        choices=list(DIFFICULTIES),
        default=settings.default_difficulty,
        help="Difficulty tier to look up.",
    )
    archive.add_argument("--store", type=Path, required=True, help="Progress JSON file.")
    archive.set_defaults(handler=cmd_archive)

    stats = subparsers.add_parser("stats", help="Show completion stats.")
    stats.add_argument("--store", type=Path, required=True, help="Progress JSON file.")
    stats.set_defaults(handler=cmd_stats)

    args = parser.parse_args(argv)
    args.today = date.today()
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        return args.handler(args)
    except ValueError as exc:
        print(f"✗ {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
