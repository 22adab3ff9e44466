# src/oqool_progress/tracker/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """Task lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, raw: str | None) -> TaskPriority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM


def _opt_int(raw: Any) -> int | None:
    return int(raw) if raw is not None else None


def _opt_float(raw: Any) -> float | None:
    return float(raw) if raw is not None else None


def _put_opt(out: dict[str, Any], key: str, value: Any) -> None:
    # Unset optionals are omitted, the way the JSON document has always been written.
    if value is not None:
        out[key] = value


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    created_at: int
    updated_at: int

    started_at: int | None = None
    completed_at: int | None = None
    estimated_hours: float | None = None
    actual_hours: float | None = None

    tags: list[str] = field(default_factory=list)
    assignee: str | None = None
    dependencies: list[str] = field(default_factory=list)
    progress: int = 0

    def copy(self) -> Task:
        return Task.from_dict(self.to_dict())

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        _put_opt(out, "startedAt", self.started_at)
        _put_opt(out, "completedAt", self.completed_at)
        _put_opt(out, "estimatedHours", self.estimated_hours)
        _put_opt(out, "actualHours", self.actual_hours)
        out["tags"] = list(self.tags)
        _put_opt(out, "assignee", self.assignee)
        out["dependencies"] = list(self.dependencies)
        out["progress"] = self.progress
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("title") or ""),
            description=str(raw.get("description") or ""),
            status=TaskStatus.parse(raw.get("status")),
            priority=TaskPriority.parse(raw.get("priority")),
            created_at=int(raw.get("createdAt") or 0),
            updated_at=int(raw.get("updatedAt") or 0),
            started_at=_opt_int(raw.get("startedAt")),
            completed_at=_opt_int(raw.get("completedAt")),
            estimated_hours=_opt_float(raw.get("estimatedHours")),
            actual_hours=_opt_float(raw.get("actualHours")),
            tags=[str(t) for t in raw.get("tags") or []],
            assignee=raw.get("assignee"),
            dependencies=[str(d) for d in raw.get("dependencies") or []],
            progress=max(0, min(100, int(raw.get("progress") or 0))),
        )


@dataclass(slots=True)
class Milestone:
    id: str
    name: str
    description: str
    due_date: int
    tasks: list[str] = field(default_factory=list)
    completed: bool = False
    progress: int = 0

    def copy(self) -> Milestone:
        return Milestone.from_dict(self.to_dict())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "dueDate": self.due_date,
            "tasks": list(self.tasks),
            "completed": self.completed,
            "progress": self.progress,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Milestone:
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name") or ""),
            description=str(raw.get("description") or ""),
            due_date=int(raw.get("dueDate") or 0),
            tasks=[str(t) for t in raw.get("tasks") or []],
            completed=bool(raw.get("completed", False)),
            progress=max(0, min(100, int(raw.get("progress") or 0))),
        )


@dataclass(slots=True, frozen=True)
class ProjectStats:
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    blocked_tasks: int
    completion_rate: float
    average_task_time: float
    velocity: int
    estimated_completion: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "totalTasks": self.total_tasks,
            "completedTasks": self.completed_tasks,
            "inProgressTasks": self.in_progress_tasks,
            "blockedTasks": self.blocked_tasks,
            "completionRate": self.completion_rate,
            "averageTaskTime": self.average_task_time,
        }
        _put_opt(out, "estimatedCompletion", self.estimated_completion)
        out["velocity"] = self.velocity
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ProjectStats:
        return cls(
            total_tasks=int(raw["totalTasks"]),
            completed_tasks=int(raw["completedTasks"]),
            in_progress_tasks=int(raw["inProgressTasks"]),
            blocked_tasks=int(raw["blockedTasks"]),
            completion_rate=float(raw["completionRate"]),
            average_task_time=float(raw["averageTaskTime"]),
            velocity=int(raw["velocity"]),
            estimated_completion=_opt_int(raw.get("estimatedCompletion")),
        )


@dataclass(slots=True, frozen=True)
class ReportPeriod:
    start: int
    end: int

    def contains(self, ts: int) -> bool:
        return self.start <= ts <= self.end

    def to_dict(self) -> dict[str, int]:
        return {"from": self.start, "to": self.end}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ReportPeriod:
        return cls(start=int(raw["from"]), end=int(raw["to"]))


@dataclass(slots=True)
class ProgressReport:
    generated_at: int
    period: ReportPeriod
    stats: ProjectStats
    milestones: list[Milestone]
    recent_tasks: list[Task]
    blockers: list[Task]
    recommendations: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "period": self.period.to_dict(),
            "stats": self.stats.to_dict(),
            "milestones": [m.to_dict() for m in self.milestones],
            "recentTasks": [t.to_dict() for t in self.recent_tasks],
            "blockers": [t.to_dict() for t in self.blockers],
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ProgressReport:
        return cls(
            generated_at=int(raw["generatedAt"]),
            period=ReportPeriod.from_dict(raw["period"]),
            stats=ProjectStats.from_dict(raw["stats"]),
            milestones=[Milestone.from_dict(m) for m in raw.get("milestones") or []],
            recent_tasks=[Task.from_dict(t) for t in raw.get("recentTasks") or []],
            blockers=[Task.from_dict(t) for t in raw.get("blockers") or []],
            recommendations=[str(r) for r in raw.get("recommendations") or []],
        )
