# src/oqool_progress/tracker/store.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from ..core.ports import TrackerDocument
from ..errors import PersistenceError

logger = logging.getLogger(__name__)

TRACKER_FILENAME = "tracker.json"


def default_tracker_path(working_dir: str | Path) -> Path:
    return Path(working_dir) / ".oqool" / "progress" / TRACKER_FILENAME


class JsonTrackerStore:
    """
    JSON file store for tracker state.

    The whole state is one document, rewritten on every save:
    - write to a sibling .tmp file
    - os.replace() it over the real file

    load() raises on unreadable or malformed content; the tracker decides
    what to do about that.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def prepare(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.exception("Failed to create tracker directory %s", self._path.parent)
            raise PersistenceError(
                f"Cannot create tracker directory {self._path.parent}: {e}", self._path
            ) from e

    def load(self) -> TrackerDocument | None:
        if not self._path.exists():
            return None

        data = json.loads(self._path.read_text("utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"tracker document must be an object, got {type(data).__name__}")

        doc: TrackerDocument = {}
        for key in ("tasks", "milestones"):
            pairs = data.get(key) or []
            if not isinstance(pairs, list):
                raise ValueError(f"'{key}' must be a list of [id, record] pairs")
            for pair in pairs:
                if not isinstance(pair, list) or len(pair) != 2 or not isinstance(pair[1], dict):
                    raise ValueError(f"malformed entry in '{key}': {pair!r}")
            doc[key] = pairs
        return doc

    def save(self, document: TrackerDocument) -> None:
        tmp = self._path.with_suffix(".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(document, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            logger.exception("Failed to save tracker state to %s", self._path)
            raise PersistenceError(f"Cannot write tracker state to {self._path}: {e}", self._path) from e
        logger.debug(
            "Tracker state saved tasks=%d milestones=%d path=%s",
            len(document.get("tasks", [])),
            len(document.get("milestones", [])),
            self._path,
        )
