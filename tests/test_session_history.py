import pytest

from daily_sudoku.session_history import GameSnapshot, SessionHistory


def snapshot(marker: int, mistakes: int = 0) -> GameSnapshot:
    values = (marker,) + (0,) * 80
    return GameSnapshot(values=values, notes=(0,) * 81, mistakes=mistakes)


def test_initial_snapshot_from_given(classic_given):
    initial = GameSnapshot.initial(classic_given)
    assert initial.values == classic_given
    assert initial.notes == (0,) * 81
    assert initial.mistakes == 0


def test_undo_redo_round_trip():
    start = snapshot(0)
    history = SessionHistory(start)
    steps = [snapshot(i) for i in range(1, 6)]
    for step in steps:
        history.apply(step)

    for _ in steps:
        assert history.undo()
    assert history.present == start
    assert not history.can_undo

    for _ in steps:
        assert history.redo()
    assert history.present == steps[-1]
    assert not history.can_redo


def test_apply_after_undo_discards_future():
    history = SessionHistory(snapshot(0))
    history.apply(snapshot(1))
    history.apply(snapshot(2))
    history.undo()
    assert history.can_redo

    history.apply(snapshot(3))
    assert not history.can_redo
    assert not history.redo()
    assert history.present == snapshot(3)
    assert list(history.past) == [snapshot(0), snapshot(1)]


def test_undo_and_redo_are_noops_on_empty_stacks():
    history = SessionHistory(snapshot(0))
    assert not history.undo()
    assert not history.redo()
    assert history.present == snapshot(0)


def test_stacks_are_bounded():
    history = SessionHistory(snapshot(0), limit=3)
    for i in range(1, 6):
        history.apply(snapshot(i))
    assert list(history.past) == [snapshot(2), snapshot(3), snapshot(4)]

    while history.undo():
        pass
    assert history.present == snapshot(2)
    assert list(history.future) == [snapshot(3), snapshot(4), snapshot(5)]


def test_restart_returns_to_initial_and_clears_stacks():
    start = snapshot(0)
    history = SessionHistory(start, present=snapshot(9, mistakes=2))
    history.apply(snapshot(10))
    history.undo()
    history.restart()
    assert history.present == start
    assert not history.can_undo
    assert not history.can_redo


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        SessionHistory(snapshot(0), limit=0)


def test_apply_reports_whether_state_changed():
    history = SessionHistory(snapshot(0))
    history.apply(snapshot(1))
    history.undo()
    assert not history.apply(snapshot(0))
    assert history.can_redo
    assert list(history.past) == []

    assert history.apply(snapshot(2))
    assert list(history.past) == [snapshot(0)]
