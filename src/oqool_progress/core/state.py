# src/oqool_progress/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tracker.tracker import ProgressTracker


@dataclass
class AppState:
    """
    Per-session context handed to command handlers.

    Holds the one tracker instance for the session; nothing reads it from a global.
    """

    # Store Settings on the state for easy access in command handlers.
    settings: object

    tracker: ProgressTracker
