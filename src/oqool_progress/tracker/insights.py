# src/oqool_progress/tracker/insights.py

"""
Derived statistics and recommendation heuristics.

Everything here is a pure function of the task list and "now"; nothing is
persisted. The estimated completion date is a straight-line projection from
last week's velocity, not a forecast.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from .models import ProjectStats, Task, TaskPriority, TaskStatus

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS
WEEK_MS = 7 * DAY_MS

OVERRUN_FACTOR = 1.5
LOW_VELOCITY = 5
LOW_COMPLETION_RATE = 50


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_stats(tasks: Iterable[Task], *, now_ms: int) -> ProjectStats:
    all_tasks = list(tasks)
    total = len(all_tasks)
    completed = sum(1 for t in all_tasks if t.status == TaskStatus.COMPLETED)
    in_progress = sum(1 for t in all_tasks if t.status == TaskStatus.IN_PROGRESS)
    blocked = sum(1 for t in all_tasks if t.status == TaskStatus.BLOCKED)

    completion_rate = (completed / total) * 100 if total > 0 else 0.0

    timed = [t.actual_hours for t in all_tasks if t.actual_hours is not None]
    average_task_time = sum(timed) / len(timed) if timed else 0.0

    week_ago = now_ms - WEEK_MS
    velocity = sum(1 for t in all_tasks if t.completed_at is not None and t.completed_at >= week_ago)

    estimated_completion: int | None = None
    if velocity > 0 and in_progress + blocked > 0:
        remaining = total - completed
        weeks_needed = remaining / velocity
        estimated_completion = now_ms + int(weeks_needed * WEEK_MS)

    return ProjectStats(
        total_tasks=total,
        completed_tasks=completed,
        in_progress_tasks=in_progress,
        blocked_tasks=blocked,
        completion_rate=completion_rate,
        average_task_time=average_task_time,
        velocity=velocity,
        estimated_completion=estimated_completion,
    )


def generate_recommendations(tasks: Iterable[Task], stats: ProjectStats) -> list[str]:
    """
    Fixed rule set, evaluated in order; any subset may fire:
    blocked tasks, open critical tasks, estimate overruns, low velocity, low completion rate.
    """
    all_tasks = list(tasks)
    out: list[str] = []

    blocked = sum(1 for t in all_tasks if t.status == TaskStatus.BLOCKED)
    if blocked > 0:
        out.append(f"You have {blocked} blocked task(s) - try to resolve the blockers.")

    critical = sum(
        1
        for t in all_tasks
        if t.priority == TaskPriority.CRITICAL and t.status != TaskStatus.COMPLETED
    )
    if critical > 0:
        out.append(f"You have {critical} critical task(s) open - focus on them first.")

    overrun = any(
        t.estimated_hours is not None
        and t.actual_hours is not None
        and t.actual_hours > t.estimated_hours * OVERRUN_FACTOR
        for t in all_tasks
    )
    if overrun:
        out.append("Some tasks are taking longer than estimated - review your estimates.")

    if stats.velocity < LOW_VELOCITY:
        out.append("Velocity is low - try breaking tasks into smaller pieces.")

    if stats.completion_rate < LOW_COMPLETION_RATE:
        out.append("Completion rate is below 50% - review the plan.")

    return out


def days_until(ts_ms: int, *, now_ms: int) -> int:
    return math.ceil((ts_ms - now_ms) / DAY_MS)
