# tests/test_self_action.py

from __future__ import annotations

import pytest

from client.self_action import ADD, DELETE, UPDATE, SelfActionTracker, marker_key

from .fakes import ManualClock


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def tracker(clock: ManualClock) -> SelfActionTracker:
    return SelfActionTracker(clock=clock)


def test_marker_key_format() -> None:
    assert marker_key(UPDATE, 42) == "update-42"
    assert marker_key(ADD, "7") == "add-7"


def test_armed_marker_suppresses_exactly_one_echo(tracker: SelfActionTracker) -> None:
    tracker.arm(UPDATE, 42)

    assert tracker.should_notify("TaskUpdated", 42) is False
    # 同一个标记只抑制一次
    assert tracker.should_notify("TaskUpdated", 42) is True


def test_echo_after_window_fires(tracker: SelfActionTracker, clock: ManualClock) -> None:
    tracker.arm(UPDATE, 42)
    clock.advance(1.0)

    assert tracker.current is None
    assert tracker.should_notify("TaskUpdated", 42) is True


def test_echo_just_inside_window_is_suppressed(tracker: SelfActionTracker, clock: ManualClock) -> None:
    tracker.arm(UPDATE, 42)
    clock.advance(0.999)

    assert tracker.should_notify("TaskUpdated", 42) is False


def test_second_update_after_window_notifies(tracker: SelfActionTracker, clock: ManualClock) -> None:
    tracker.arm(UPDATE, 42)
    assert tracker.should_notify("TaskUpdated", 42) is False

    clock.advance(5)

    assert tracker.should_notify("TaskUpdated", 42) is True


def test_add_window_is_longer_than_update_and_delete(tracker: SelfActionTracker, clock: ManualClock) -> None:
    tracker.arm(ADD, 7)
    clock.advance(1.5)
    assert tracker.should_notify("TaskAdded", 7) is False

    tracker.arm(DELETE, 7)
    clock.advance(1.5)
    assert tracker.should_notify("TaskDeleted", 7) is True


def test_other_operation_or_id_does_not_match(tracker: SelfActionTracker) -> None:
    tracker.arm(UPDATE, 42)

    assert tracker.should_notify("TaskUpdated", 43) is True
    assert tracker.should_notify("TaskDeleted", 42) is True
    # 不匹配的事件不会消耗标记
    assert tracker.current == "update-42"


def test_new_marker_replaces_previous_one(tracker: SelfActionTracker) -> None:
    tracker.arm(UPDATE, 1)
    tracker.arm(DELETE, 2)

    assert tracker.should_notify("TaskUpdated", 1) is True
    assert tracker.should_notify("TaskDeleted", 2) is False


def test_custom_windows(clock: ManualClock) -> None:
    tracker = SelfActionTracker(clock=clock, windows={UPDATE: 2.0})
    tracker.arm(UPDATE, 42)
    clock.advance(1.5)

    assert tracker.should_notify("TaskUpdated", 42) is False
    assert tracker.windows[ADD] == 2.0
    assert tracker.windows[DELETE] == 1.0


def test_unknown_operation_or_event(tracker: SelfActionTracker) -> None:
    with pytest.raises(ValueError):
        tracker.arm("rename", 1)
    with pytest.raises(ValueError):
        tracker.should_notify("TaskRenamed", 1)


def test_clear(tracker: SelfActionTracker) -> None:
    tracker.arm(ADD, 3)
    tracker.clear()

    assert tracker.current is None
    assert tracker.should_notify("TaskAdded", 3) is True
