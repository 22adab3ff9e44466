# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from oqool_progress.core.state import AppState
from oqool_progress.tracker.store import JsonTrackerStore
from oqool_progress.tracker.tracker import ProgressTracker

from .fakes import FakeClock, MemoryTrackerStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    data_dir = tmp_path / ".oqool"
    return SimpleNamespace(
        app_name="oqool-test",
        log_level="DEBUG",
        console_enabled=False,
        report_format="markdown",
        project_dir=tmp_path,
        data_dir=data_dir,
        log_dir=data_dir / "logs",
        tracker_path=data_dir / "progress" / "tracker.json",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_store() -> MemoryTrackerStore:
    return MemoryTrackerStore()


@pytest.fixture()
def tracker(tmp_path: Path, memory_store: MemoryTrackerStore, clock: FakeClock) -> ProgressTracker:
    """Tracker on an in-memory store with a pinned clock."""
    t = ProgressTracker(tmp_path, store=memory_store, clock=clock)
    t.initialize()
    return t


@pytest.fixture()
def file_tracker(settings: SimpleNamespace, clock: FakeClock) -> ProgressTracker:
    """
    Tracker on the real JSON store.

    NOTE: We keep the real file store here because the on-disk shape is part
    of what we want to test.
    """
    t = ProgressTracker(settings.project_dir, store=JsonTrackerStore(settings.tracker_path), clock=clock)
    t.initialize()
    return t


@pytest.fixture()
def state(settings: SimpleNamespace, file_tracker: ProgressTracker) -> AppState:
    return AppState(settings=settings, tracker=file_tracker)
