# src/oqool_progress/errors.py

from __future__ import annotations

from pathlib import Path


class TrackerError(Exception):
    """Base class for errors surfaced by the progress tracker."""


class NotFoundError(TrackerError, KeyError):
    """A task or milestone id does not resolve."""

    def __init__(self, kind: str, item_id: str) -> None:
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind.capitalize()} {item_id} not found")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return str(self.args[0])


class PersistenceError(TrackerError):
    """Tracker state could not be written to (or prepared on) disk."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)
