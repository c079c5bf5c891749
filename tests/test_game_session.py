import pytest

from daily_sudoku import notes
from daily_sudoku.board import peers_of, rows_of
from daily_sudoku.config import GameSettings
from daily_sudoku.game_session import GameRecord, GameSession


def make_session(puzzle, clock, **kwargs):
    return GameSession(puzzle, clock=clock, **kwargs)


def test_correct_digit_updates_value_without_mistake(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    assert session.puzzle.clue_count == 30

    assert session.enter_digit(4, index=2)
    assert session.values[2] == 4
    assert session.mistakes == 0
    assert session.can_undo


def test_wrong_digit_counts_one_mistake(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    assert classic_puzzle.solution[3] == 6

    assert session.enter_digit(1, index=3)
    assert session.values[3] == 1
    assert session.mistakes == 1


def test_mistakes_not_counted_when_disabled(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock, settings=GameSettings(count_mistakes=False))
    session.enter_digit(1, index=3)
    assert session.mistakes == 0


def test_same_digit_twice_adds_no_history(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    session.select(2)
    assert session.enter_digit(4)
    assert not session.enter_digit(4)
    assert len(session.history.past) == 1


def test_given_cells_are_immutable(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    assert not session.enter_digit(9, index=0)
    assert not session.clear_cell(index=0)
    session.set_notes_mode(True)
    assert not session.enter_digit(9, index=0)
    assert session.values[0] == 5
    assert not session.can_undo


def test_nothing_happens_without_selection(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    assert not session.enter_digit(4)
    assert not session.clear_cell()


def test_notes_mode_toggles_marks_only(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    session.toggle_notes_mode()
    session.select(2)

    assert session.enter_digit(5)
    assert notes.has(session.notes[2], 5)
    assert session.values[2] == 0

    assert session.enter_digit(5)
    assert session.notes[2] == notes.EMPTY
    assert len(session.history.past) == 2


def test_value_entry_clears_own_and_peer_notes(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    session.set_notes_mode(True)
    session.enter_digit(4, index=2)
    session.enter_digit(7, index=2)
    session.enter_digit(4, index=11)  # same box as cell 2
    session.enter_digit(4, index=54)  # not a peer of cell 2
    assert 11 in peers_of(2) and 54 not in peers_of(2)

    session.set_notes_mode(False)
    session.enter_digit(4, index=2)
    assert session.notes[2] == notes.EMPTY
    assert not notes.has(session.notes[11], 4)
    assert notes.has(session.notes[54], 4)


def test_peer_notes_kept_when_auto_remove_disabled(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock, settings=GameSettings(auto_remove_notes=False))
    session.set_notes_mode(True)
    session.enter_digit(4, index=11)
    session.set_notes_mode(False)
    session.enter_digit(4, index=2)
    assert notes.has(session.notes[11], 4)


def test_clear_cell(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    assert not session.clear_cell(index=2)
    session.enter_digit(1, index=2)
    assert session.clear_cell(index=2)
    assert session.values[2] == 0
    assert session.mistakes == 1


def test_conflicts_follow_values(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    session.enter_digit(5, index=2)  # row 0 already has a 5 at cell 0
    assert {0, 2} <= session.conflicts
    session.undo()
    assert session.conflicts == set()


def test_undo_redo_through_session(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    session.enter_digit(4, index=2)
    session.enter_digit(1, index=3)
    assert session.undo()
    assert session.values[3] == 0
    assert session.mistakes == 0
    assert session.redo()
    assert session.values[3] == 1
    assert session.mistakes == 1

    session.undo()
    session.enter_digit(6, index=3)
    assert not session.can_redo


def test_restart_resets_everything(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    session.enter_digit(1, index=3)
    session.set_notes_mode(True)
    session.enter_digit(2, index=5)
    session.add_elapsed(30)

    session.restart()
    assert session.values == classic_puzzle.given
    assert session.notes == (0,) * 81
    assert session.mistakes == 0
    assert session.elapsed_seconds == 0
    assert not session.can_undo
    assert not session.can_redo


def fill_solution(session, puzzle):
    for index, value in enumerate(puzzle.solution):
        if not puzzle.given[index]:
            session.enter_digit(value, index=index)


def test_completion_fires_once_and_freezes_board(classic_puzzle, fixed_clock):
    completions = []
    session = make_session(classic_puzzle, fixed_clock, on_complete=completions.append)
    session.add_elapsed(95)
    fill_solution(session, classic_puzzle)

    assert session.completed
    assert completions == [95]
    record = session.to_record()
    assert record.completed
    assert record.completed_at == "2024-05-01T12:00:00+00:00"

    empty_index = classic_puzzle.given.index(0)
    assert not session.clear_cell(index=empty_index)
    assert not session.enter_digit(1, index=empty_index)
    assert not session.undo()
    assert not session.can_undo
    session.add_elapsed(10)
    assert session.elapsed_seconds == 95
    assert completions == [95]


def test_every_change_is_persisted(classic_puzzle, fixed_clock):
    records = []
    session = make_session(classic_puzzle, fixed_clock, on_persist=records.append)
    session.enter_digit(4, index=2)
    session.enter_digit(4, index=2)  # no-op, not persisted
    session.toggle_notes_mode()
    session.undo()
    assert len(records) == 3
    assert records[0].values[2] == 4
    assert records[1].notes_mode
    assert records[2].values[2] == 0
    assert records[-1].updated_at == "2024-05-01T12:00:00+00:00"


def test_rehydrates_matching_record(classic_puzzle, fixed_clock):
    first = make_session(classic_puzzle, fixed_clock)
    first.enter_digit(1, index=3)
    first.set_notes_mode(True)
    first.enter_digit(8, index=5)
    first.add_elapsed(42)
    stored = first.to_record().to_dict()

    second = make_session(classic_puzzle, fixed_clock, record=stored)
    assert second.values == first.values
    assert second.notes == first.notes
    assert second.mistakes == 1
    assert second.elapsed_seconds == 42
    assert second.notes_mode
    assert not second.can_undo


def test_record_round_trip(classic_puzzle, fixed_clock):
    record = make_session(classic_puzzle, fixed_clock).to_record()
    assert GameRecord.from_dict(record.to_dict()) == record
    assert set(record.to_dict()) == {
        "date",
        "difficulty",
        "values",
        "notes",
        "mistakes",
        "elapsedSeconds",
        "notesMode",
        "completed",
        "completedAt",
        "updatedAt",
    }


@pytest.mark.parametrize(
    "change",
    [
        {"date": "2024-05-02"},
        {"difficulty": "hard"},
        {"values": [0] * 80},
        {"values": [12] + [0] * 80},
        {"values": [[0] * 9 for _ in range(9)]},
        {"values": [True] + [0] * 80},
        {"completed": True},
        {"completedAt": "2024-01-01T00:00:00+00:00"},
        {"notes": [1 << 10] * 81},
        {"mistakes": -1},
        {"notesMode": "yes"},
    ],
)
def test_malformed_records_fall_back_to_fresh_state(classic_puzzle, fixed_clock, log_messages, change):
    seed_session = make_session(classic_puzzle, fixed_clock)
    seed_session.enter_digit(4, index=2)
    payload = {**seed_session.to_record().to_dict(), **change}

    session = make_session(classic_puzzle, fixed_clock, record=payload)
    assert session.values == classic_puzzle.given
    assert session.mistakes == 0
    assert any("Ignoring stored game" in message for message in log_messages)


def test_record_overwriting_a_given_is_ignored(classic_puzzle, fixed_clock):
    payload = make_session(classic_puzzle, fixed_clock).to_record().to_dict()
    payload["values"][0] = 9
    session = make_session(classic_puzzle, fixed_clock, record=payload)
    assert session.values[0] == 5


def test_move_selection_wraps(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    assert session.move_selection(-1, 0) == 72
    assert session.move_selection(0, -1) == 80
    assert session.move_selection(1, 1) == 0
    with pytest.raises(ValueError):
        session.select(81)


def test_digit_out_of_range_is_rejected(classic_puzzle, fixed_clock):
    session = make_session(classic_puzzle, fixed_clock)
    with pytest.raises(ValueError):
        session.enter_digit(0, index=2)


def test_nested_rows_record_is_not_reshaped(classic_puzzle, fixed_clock):
    payload = make_session(classic_puzzle, fixed_clock).to_record().to_dict()
    payload["values"] = [list(row) for row in rows_of(classic_puzzle.given)]
    payload["mistakes"] = 3
    session = make_session(classic_puzzle, fixed_clock, record=payload)
    assert session.mistakes == 0


def test_stale_completion_stamp_does_not_suppress_completion(classic_puzzle, fixed_clock):
    last = classic_puzzle.given.index(0)
    values = list(classic_puzzle.solution)
    values[last] = 0
    payload = make_session(classic_puzzle, fixed_clock).to_record().to_dict()
    payload.update(
        values=values,
        mistakes=2,
        completed=True,
        completedAt="2024-01-01T00:00:00+00:00",
    )

    completions = []
    session = make_session(classic_puzzle, fixed_clock, record=payload, on_complete=completions.append)
    assert session.mistakes == 0
    assert session.completed_at is None

    fill_solution(session, classic_puzzle)
    assert completions == [0]
    assert session.to_record().completed_at == "2024-05-01T12:00:00+00:00"


def test_solved_record_is_restored_as_completed(classic_puzzle, fixed_clock):
    payload = make_session(classic_puzzle, fixed_clock).to_record().to_dict()
    payload.update(
        values=list(classic_puzzle.solution),
        completed=True,
        completedAt="2024-01-01T00:00:00+00:00",
    )
    completions = []
    session = make_session(classic_puzzle, fixed_clock, record=payload, on_complete=completions.append)
    assert session.completed
    assert session.completed_at == "2024-01-01T00:00:00+00:00"
    assert completions == []
