"""Tests for ingredient change tracking."""

from macro_log.domain.models import FoodComponent
from macro_log.services.changes import ChangeTracker

OATS = FoodComponent(name="Oats", amount=40, unit="g")
NUTS = FoodComponent(name="Nuts", amount=20, unit="g")


def test_fresh_log_has_no_unsaved_changes() -> None:
    tracker = ChangeTracker()

    state = tracker.start("log-1", (OATS, NUTS))

    assert state.changes_count == 0
    assert state.has_unsaved_changes is False
    assert tracker.should_warn_before_save("log-1") is False


def test_change_then_estimate_resets_counters() -> None:
    tracker = ChangeTracker()
    tracker.start("log-1", (OATS, NUTS))

    state = tracker.record_change("log-1", (OATS, NUTS))
    assert state.changes_count == 1
    assert state.has_unsaved_changes is True
    assert tracker.should_warn_before_save("log-1") is True

    state = tracker.mark_estimated("log-1", (OATS,))
    assert state.changes_count == 0
    assert state.has_unsaved_changes is False
    assert state.has_reestimated is True
    assert state.last_estimated_components == (OATS,)
    assert tracker.should_warn_before_save("log-1") is False


def test_start_keeps_existing_counters() -> None:
    tracker = ChangeTracker()
    tracker.record_change("log-1", (OATS,))
    tracker.record_change("log-1", (OATS, NUTS))

    state = tracker.start("log-1", (NUTS,))

    assert state.changes_count == 2
    assert state.last_estimated_components == (OATS,)


def test_forget_and_reset() -> None:
    tracker = ChangeTracker()
    tracker.record_change("log-1", ())
    tracker.record_change("log-2", ())

    tracker.forget("log-1")
    assert tracker.state("log-1").changes_count == 0
    assert tracker.state("log-2").changes_count == 1

    tracker.reset()
    assert tracker.state("log-2").changes_count == 0
