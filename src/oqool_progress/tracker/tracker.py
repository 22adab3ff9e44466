# src/oqool_progress/tracker/tracker.py

from __future__ import annotations

import logging
import math
import secrets
import string
import time
from pathlib import Path

from ..core.ports import Clock, TrackerDocument, TrackerStorage
from ..errors import NotFoundError, PersistenceError
from .insights import (
    HOUR_MS,
    WEEK_MS,
    calculate_stats,
    days_until,
    generate_recommendations,
    round_half_up,
)
from .models import Milestone, ProgressReport, ProjectStats, ReportPeriod, Task, TaskPriority, TaskStatus
from .report import REPORT_FORMATS, render_report
from .store import JsonTrackerStore, default_tracker_path

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _now_ms() -> int:
    return int(time.time() * 1000)


def _clamp_progress(progress: float) -> int:
    if math.isnan(progress):
        raise ValueError("progress must be a number, got NaN")
    # Clamp before rounding so infinities land on the bounds.
    return round_half_up(min(100.0, max(0.0, float(progress))))


class ProgressTracker:
    """
    In-memory task/milestone graph for one project.

    State lives in two dicts (id -> record) and is written out as a single
    JSON document after every mutation. Single process, single caller: there
    is no locking around the read-modify-write cycle.

    Records handed out by the public API are copies; mutate through the
    update_* methods.

    Milestone task lists are weak references: deleting a task does not touch
    milestones, and ids that no longer resolve are skipped wherever they are read.
    """

    def __init__(
        self,
        working_dir: str | Path,
        *,
        store: TrackerStorage | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._working_dir = Path(working_dir)
        self._store: TrackerStorage = store or JsonTrackerStore(default_tracker_path(self._working_dir))
        self._clock: Clock = clock or _now_ms
        self._tasks: dict[str, Task] = {}
        self._milestones: dict[str, Milestone] = {}

    @property
    def working_dir(self) -> Path:
        return self._working_dir

    @property
    def store(self) -> TrackerStorage:
        return self._store

    # ---- persistence ----

    def initialize(self) -> None:
        """
        Prepare the data directory and load persisted state.

        A missing or unreadable document never blocks startup: the tracker
        starts empty instead.
        """
        self._store.prepare()
        self._tasks = {}
        self._milestones = {}

        try:
            doc = self._store.load()
        except Exception:
            logger.warning("Tracker state unreadable; starting empty.", exc_info=True)
            return

        if doc is None:
            logger.debug("No tracker state found; starting empty.")
            return

        try:
            tasks = {str(k): Task.from_dict(v) for k, v in doc.get("tasks", [])}
            milestones = {str(k): Milestone.from_dict(v) for k, v in doc.get("milestones", [])}
        except Exception:
            logger.warning("Tracker state has invalid records; starting empty.", exc_info=True)
            return

        self._tasks = tasks
        self._milestones = milestones
        logger.info("Tracker loaded tasks=%d milestones=%d", len(tasks), len(milestones))

    def _document(self) -> TrackerDocument:
        return {
            "tasks": [[k, t.to_dict()] for k, t in self._tasks.items()],
            "milestones": [[k, m.to_dict()] for k, m in self._milestones.items()],
        }

    def _save(self) -> None:
        try:
            self._store.save(self._document())
        except PersistenceError:
            raise
        except OSError as e:
            logger.exception("Tracker save failed.")
            raise PersistenceError(f"Cannot save tracker state: {e}") from e

    def _generate_id(self, prefix: str) -> str:
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
        return f"{prefix}_{self._clock()}_{suffix}"

    def _require_task(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return task

    def _require_milestone(self, milestone_id: str) -> Milestone:
        milestone = self._milestones.get(milestone_id)
        if milestone is None:
            raise NotFoundError("milestone", milestone_id)
        return milestone

    # ---- tasks ----

    def create_task(
        self,
        title: str,
        *,
        description: str = "",
        priority: TaskPriority | str = TaskPriority.MEDIUM,
        estimated_hours: float | None = None,
        tags: list[str] | None = None,
        assignee: str | None = None,
        dependencies: list[str] | None = None,
    ) -> Task:
        now = self._clock()
        task = Task(
            id=self._generate_id("task"),
            title=title,
            description=description or "",
            status=TaskStatus.PENDING,
            priority=TaskPriority(priority),
            created_at=now,
            updated_at=now,
            estimated_hours=estimated_hours,
            tags=list(tags or []),
            assignee=assignee,
            dependencies=list(dependencies or []),
            progress=0,
        )
        self._tasks[task.id] = task
        logger.debug("Task created id=%s priority=%s", task.id, task.priority)
        self._save()
        return task.copy()

    def _mark_started(self, task: Task, now: int) -> None:
        if task.started_at is None:
            task.started_at = now

    def _mark_completed(self, task: Task, now: int) -> None:
        task.status = TaskStatus.COMPLETED
        task.progress = 100
        if task.completed_at is None:
            task.completed_at = now
        if task.started_at is not None:
            task.actual_hours = (task.completed_at - task.started_at) / HOUR_MS

    def update_task_status(self, task_id: str, status: TaskStatus | str) -> Task:
        task = self._require_task(task_id)
        new_status = TaskStatus(status)
        now = self._clock()

        task.updated_at = now
        if new_status == TaskStatus.COMPLETED:
            self._mark_completed(task, now)
        else:
            task.status = new_status
            if new_status == TaskStatus.IN_PROGRESS:
                self._mark_started(task, now)

        logger.debug("Task status id=%s status=%s progress=%s", task.id, task.status, task.progress)
        self._save()
        return task.copy()

    def update_task_progress(self, task_id: str, progress: float) -> Task:
        task = self._require_task(task_id)
        now = self._clock()

        task.progress = _clamp_progress(progress)
        task.updated_at = now

        if task.progress == 100 and task.status != TaskStatus.COMPLETED:
            self._mark_completed(task, now)
        elif task.progress > 0 and task.status == TaskStatus.PENDING:
            task.status = TaskStatus.IN_PROGRESS
            self._mark_started(task, now)

        logger.debug("Task progress id=%s progress=%s status=%s", task.id, task.progress, task.status)
        self._save()
        return task.copy()

    def delete_task(self, task_id: str) -> bool:
        if self._tasks.pop(task_id, None) is None:
            logger.debug("Delete ignored: unknown task id=%s", task_id)
            return False
        logger.debug("Task deleted id=%s", task_id)
        self._save()
        return True

    def get_task(self, task_id: str | None) -> Task | None:
        if not task_id:
            return None
        task = self._tasks.get(task_id)
        return task.copy() if task is not None else None

    def get_all_tasks(
        self,
        *,
        status: TaskStatus | str | None = None,
        priority: TaskPriority | str | None = None,
        tag: str | None = None,
        assignee: str | None = None,
    ) -> list[Task]:
        out: list[Task] = []
        for t in self._tasks.values():
            if status and t.status != status:
                continue
            if priority and t.priority != priority:
                continue
            if tag and tag not in t.tags:
                continue
            if assignee and t.assignee != assignee:
                continue
            out.append(t.copy())
        return out

    # ---- milestones ----

    def create_milestone(
        self,
        name: str,
        *,
        description: str = "",
        due_date: int | None = None,
        tasks: list[str] | None = None,
    ) -> Milestone:
        now = self._clock()
        milestone = Milestone(
            id=self._generate_id("milestone"),
            name=name,
            description=description or "",
            due_date=due_date if due_date else now + WEEK_MS,
            tasks=list(tasks or []),
            completed=False,
            progress=0,
        )
        self._milestones[milestone.id] = milestone
        logger.debug("Milestone created id=%s tasks=%d", milestone.id, len(milestone.tasks))
        self._save()
        return milestone.copy()

    def get_milestone(self, milestone_id: str | None) -> Milestone | None:
        if not milestone_id:
            return None
        milestone = self._milestones.get(milestone_id)
        return milestone.copy() if milestone is not None else None

    def get_all_milestones(self) -> list[Milestone]:
        return [m.copy() for m in self._milestones.values()]

    def _refresh_milestone(self, milestone: Milestone) -> None:
        members = [self._tasks[tid] for tid in milestone.tasks if tid in self._tasks]
        if not members:
            return
        milestone.progress = round_half_up(sum(t.progress for t in members) / len(members))
        milestone.completed = milestone.progress == 100

    def update_milestone(self, milestone_id: str) -> Milestone:
        milestone = self._require_milestone(milestone_id)
        self._refresh_milestone(milestone)
        self._save()
        return milestone.copy()

    def add_task_to_milestone(self, milestone_id: str, task_id: str) -> Milestone:
        milestone = self._require_milestone(milestone_id)
        if task_id not in milestone.tasks:
            milestone.tasks.append(task_id)
            return self.update_milestone(milestone_id)
        return milestone.copy()

    # ---- stats & reports ----

    def calculate_stats(self) -> ProjectStats:
        return calculate_stats(self._tasks.values(), now_ms=self._clock())

    def summary(self) -> tuple[ProjectStats, int | None]:
        """Stats plus whole days until the projected completion (None when there is no projection)."""
        now = self._clock()
        stats = calculate_stats(self._tasks.values(), now_ms=now)
        days_left = None
        if stats.estimated_completion is not None:
            days_left = days_until(stats.estimated_completion, now_ms=now)
        return stats, days_left

    def generate_report(self, period: ReportPeriod | None = None) -> ProgressReport:
        now = self._clock()
        period = period or ReportPeriod(start=now - WEEK_MS, end=now)

        all_tasks = list(self._tasks.values())
        recent = [t.copy() for t in all_tasks if period.contains(t.updated_at)]
        blockers = [t.copy() for t in all_tasks if t.status == TaskStatus.BLOCKED]

        for milestone in self._milestones.values():
            self._refresh_milestone(milestone)
        if self._milestones:
            self._save()

        stats = calculate_stats(all_tasks, now_ms=now)
        return ProgressReport(
            generated_at=now,
            period=period,
            stats=stats,
            milestones=self.get_all_milestones(),
            recent_tasks=recent,
            blockers=blockers,
            recommendations=generate_recommendations(all_tasks, stats),
        )

    def export_report(self, fmt: str, output_path: str | Path | None = None) -> str:
        fmt = (fmt or "").strip().lower()
        if fmt not in REPORT_FORMATS:
            raise ValueError(f"Unknown report format: {fmt!r} (expected one of {', '.join(REPORT_FORMATS)})")
        content = render_report(self.generate_report(), fmt)
        if output_path is None:
            return content

        path = Path(output_path)
        try:
            path.write_text(content, "utf-8")
        except OSError as e:
            logger.exception("Failed to write report to %s", path)
            raise PersistenceError(f"Cannot write report to {path}: {e}", path) from e
        logger.info("Report written format=%s path=%s", fmt, path)
        return str(path)


def create_progress_tracker(working_dir: str | Path) -> ProgressTracker:
    return ProgressTracker(working_dir)
