# src/oqool_progress/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- wires the JSON store into a ProgressTracker,
- loads persisted tracker state into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tracker.store import JsonTrackerStore
from ..tracker.tracker import ProgressTracker

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    tracker = ProgressTracker(
        settings.project_dir,
        store=JsonTrackerStore(settings.tracker_path),
    )
    tracker.initialize()
    logger.debug("Tracker ready project=%s store=%s", settings.project_dir, settings.tracker_path)

    return AppState(settings=settings, tracker=tracker)
