# tests/test_tracker_tasks.py

from __future__ import annotations

import math
import re

import pytest

from oqool_progress.errors import NotFoundError, PersistenceError
from oqool_progress.tracker.models import TaskPriority, TaskStatus
from oqool_progress.tracker.tracker import ProgressTracker

from .fakes import HOUR_MS, FailingTrackerStore, FakeClock, MemoryTrackerStore


def test_create_task_defaults_and_persists(tracker: ProgressTracker, memory_store: MemoryTrackerStore, clock) -> None:
    task = tracker.create_task("Write parser", tags=["core"], estimated_hours=3)

    assert re.fullmatch(r"task_\d+_[0-9a-z]{9}", task.id)
    assert task.status == TaskStatus.PENDING
    assert task.priority == TaskPriority.MEDIUM
    assert task.progress == 0
    assert task.created_at == task.updated_at == clock.now
    assert task.started_at is None and task.completed_at is None

    assert len(memory_store.saves) == 1
    (saved_id, record), = memory_store.document["tasks"]
    assert saved_id == task.id
    assert record["title"] == "Write parser"
    assert record["estimatedHours"] == 3


def test_task_ids_are_unique(tracker: ProgressTracker) -> None:
    ids = {tracker.create_task(f"t{i}").id for i in range(50)}
    assert len(ids) == 50


def test_returned_tasks_do_not_alias_internal_state(tracker: ProgressTracker) -> None:
    task = tracker.create_task("a", tags=["x"])
    task.tags.append("y")
    task.progress = 99

    stored = tracker.get_task(task.id)
    assert stored is not None
    assert stored.tags == ["x"]
    assert stored.progress == 0

    listing = tracker.get_all_tasks()
    listing.clear()
    assert len(tracker.get_all_tasks()) == 1


def test_progress_100_completes_task(tracker: ProgressTracker) -> None:
    task = tracker.create_task("a")
    done = tracker.update_task_progress(task.id, 100)

    assert done.status == TaskStatus.COMPLETED
    assert done.progress == 100
    assert done.completed_at is not None


def test_status_completed_forces_progress(tracker: ProgressTracker) -> None:
    task = tracker.create_task("a")
    tracker.update_task_progress(task.id, 30)
    done = tracker.update_task_status(task.id, TaskStatus.COMPLETED)

    assert done.progress == 100
    assert done.completed_at is not None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(-10, 0), (150, 100), (42, 42), (42.6, 43), (math.inf, 100), (-math.inf, 0)],
)
def test_progress_is_clamped(tracker: ProgressTracker, raw: float, expected: int) -> None:
    task = tracker.create_task("a")
    assert tracker.update_task_progress(task.id, raw).progress == expected


def test_nan_progress_is_rejected(tracker: ProgressTracker, memory_store: MemoryTrackerStore) -> None:
    task = tracker.create_task("a")
    tracker.update_task_progress(task.id, 30)
    saves = len(memory_store.saves)

    with pytest.raises(ValueError, match="NaN"):
        tracker.update_task_progress(task.id, math.nan)

    after = tracker.get_task(task.id)
    assert after.progress == 30
    assert after.status == TaskStatus.IN_PROGRESS
    assert len(memory_store.saves) == saves


def test_positive_progress_starts_pending_task(tracker: ProgressTracker, clock: FakeClock) -> None:
    task = tracker.create_task("a")
    clock.advance(1000)
    updated = tracker.update_task_progress(task.id, 10)

    assert updated.status == TaskStatus.IN_PROGRESS
    assert updated.started_at == clock.now

    clock.advance(1000)
    again = tracker.update_task_progress(task.id, 20)
    assert again.started_at == updated.started_at


def test_zero_progress_keeps_task_pending(tracker: ProgressTracker) -> None:
    task = tracker.create_task("a")
    assert tracker.update_task_progress(task.id, 0).status == TaskStatus.PENDING


def test_reentering_in_progress_keeps_started_at(tracker: ProgressTracker, clock: FakeClock) -> None:
    task = tracker.create_task("a")
    first = tracker.update_task_status(task.id, "in_progress")
    clock.advance(HOUR_MS)
    tracker.update_task_status(task.id, TaskStatus.BLOCKED)
    clock.advance(HOUR_MS)
    again = tracker.update_task_status(task.id, TaskStatus.IN_PROGRESS)

    assert again.started_at == first.started_at
    assert again.updated_at == clock.now


def test_actual_hours_from_started_to_completed(tracker: ProgressTracker, clock: FakeClock) -> None:
    task = tracker.create_task("a", estimated_hours=2)
    tracker.update_task_status(task.id, TaskStatus.IN_PROGRESS)
    clock.advance(3 * HOUR_MS)
    done = tracker.update_task_status(task.id, TaskStatus.COMPLETED)

    assert done.actual_hours == pytest.approx(3.0)


def test_actual_hours_via_progress_path(tracker: ProgressTracker, clock: FakeClock) -> None:
    task = tracker.create_task("a")
    tracker.update_task_progress(task.id, 50)
    clock.advance(HOUR_MS // 2)
    done = tracker.update_task_progress(task.id, 100)

    assert done.actual_hours == pytest.approx(0.5)


def test_completing_unstarted_task_leaves_actual_hours_unset(tracker: ProgressTracker) -> None:
    task = tracker.create_task("a")
    done = tracker.update_task_status(task.id, TaskStatus.COMPLETED)
    assert done.actual_hours is None


def test_completed_at_is_stamped_once(tracker: ProgressTracker, clock: FakeClock) -> None:
    task = tracker.create_task("a")
    first = tracker.update_task_progress(task.id, 100)
    clock.advance(HOUR_MS)
    second = tracker.update_task_status(task.id, TaskStatus.COMPLETED)

    assert second.completed_at == first.completed_at


def test_both_completion_paths_converge(tracker: ProgressTracker) -> None:
    a = tracker.create_task("a")
    b = tracker.create_task("b")
    via_progress = tracker.update_task_progress(a.id, 100)
    via_status = tracker.update_task_status(b.id, TaskStatus.COMPLETED)

    for t in (via_progress, via_status):
        assert (t.status, t.progress) == (TaskStatus.COMPLETED, 100)
        assert t.completed_at is not None


def test_update_unknown_task_raises_not_found(tracker: ProgressTracker, memory_store: MemoryTrackerStore) -> None:
    tracker.create_task("a")
    before = tracker.get_all_tasks()
    saves = len(memory_store.saves)

    with pytest.raises(NotFoundError) as exc:
        tracker.update_task_status("unknown-id", TaskStatus.COMPLETED)
    assert exc.value.kind == "task"
    assert exc.value.item_id == "unknown-id"

    with pytest.raises(NotFoundError):
        tracker.update_task_progress("unknown-id", 50)

    assert tracker.get_all_tasks() == before
    assert len(memory_store.saves) == saves


def test_invalid_status_is_rejected(tracker: ProgressTracker) -> None:
    task = tracker.create_task("a")
    with pytest.raises(ValueError):
        tracker.update_task_status(task.id, "done")
    assert tracker.get_task(task.id).status == TaskStatus.PENDING


def test_delete_task(tracker: ProgressTracker) -> None:
    task = tracker.create_task("a")
    assert tracker.delete_task(task.id) is True
    assert tracker.get_task(task.id) is None
    assert tracker.delete_task(task.id) is False


def test_get_task_with_empty_id(tracker: ProgressTracker) -> None:
    assert tracker.get_task(None) is None
    assert tracker.get_task("") is None


def test_filter_by_status_independent_of_insertion_order(tracker: ProgressTracker) -> None:
    ids = [tracker.create_task(f"t{i}").id for i in range(6)]
    for tid in (ids[4], ids[1], ids[5]):
        tracker.update_task_status(tid, TaskStatus.BLOCKED)

    blocked = tracker.get_all_tasks(status="blocked")
    assert {t.id for t in blocked} == {ids[1], ids[4], ids[5]}
    assert all(t.status == TaskStatus.BLOCKED for t in blocked)


def test_filters_are_conjunctive(tracker: ProgressTracker) -> None:
    tracker.create_task("a", priority="high", tags=["api"], assignee="sara")
    tracker.create_task("b", priority="high", tags=["ui"], assignee="sara")
    tracker.create_task("c", priority="low", tags=["api"], assignee="omar")

    assert [t.title for t in tracker.get_all_tasks(priority=TaskPriority.HIGH, tag="api")] == ["a"]
    assert [t.title for t in tracker.get_all_tasks(assignee="omar")] == ["c"]
    assert {t.title for t in tracker.get_all_tasks(tag="api")} == {"a", "c"}
    assert len(tracker.get_all_tasks()) == 3
    assert tracker.get_all_tasks(assignee="nobody") == []


def test_dependencies_are_stored_but_not_enforced(tracker: ProgressTracker) -> None:
    first = tracker.create_task("first")
    second = tracker.create_task("second", dependencies=[first.id])

    done = tracker.update_task_status(second.id, TaskStatus.COMPLETED)
    assert done.dependencies == [first.id]
    assert done.status == TaskStatus.COMPLETED


def test_write_failure_propagates_as_persistence_error(tmp_path, clock: FakeClock) -> None:
    tracker = ProgressTracker(tmp_path, store=FailingTrackerStore(), clock=clock)
    tracker.initialize()

    with pytest.raises(PersistenceError):
        tracker.create_task("a")
