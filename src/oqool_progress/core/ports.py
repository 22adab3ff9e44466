# src/oqool_progress/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the tracker.

The tracker depends on Protocols instead of concrete implementations.
This keeps persistence swappable and lets tests pin the clock.
"""

from typing import Any, Protocol

TrackerDocument = dict[str, list[list[Any]]]
# Persisted shape: {"tasks": [[id, record], ...], "milestones": [[id, record], ...]}.


class TrackerStorage(Protocol):
    """Whole-document persistence for tracker state."""

    def prepare(self) -> None: ...

    def load(self) -> TrackerDocument | None: ...

    def save(self, document: TrackerDocument) -> None: ...


class Clock(Protocol):
    """Returns the current time in milliseconds since the epoch."""

    def __call__(self) -> int: ...
