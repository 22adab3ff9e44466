# tests/test_commands.py

from __future__ import annotations

import json

import pytest

from oqool_progress.cli.commands import CommandRegistry, parse_options, registry
from oqool_progress.connectors.console_connector import run_command_line
from oqool_progress.errors import NotFoundError
from oqool_progress.tracker.models import TaskPriority, TaskStatus


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called["h2"] == 1
    assert called["h3"] == 1


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")


def test_parse_options() -> None:
    names = {"-p": "priority", "--priority": "priority", "--tags": "tags"}
    pos, opts = parse_options(["Fix", "bug", "-p", "high", "--tags=a,b"], names)
    assert pos == ["Fix", "bug"]
    assert opts == {"priority": "high", "tags": "a,b"}

    with pytest.raises(ValueError):
        parse_options(["--bogus", "1"], names)
    with pytest.raises(ValueError):
        parse_options(["-p"], names)


def test_task_create_and_list(state) -> None:
    reply = registry.handle(
        state, '/task-create "Write the parser" --priority critical --estimate 4 --tags core,api --assignee sara'
    )
    assert "Task created." in reply

    (task,) = state.tracker.get_all_tasks()
    assert task.title == "Write the parser"
    assert task.priority == TaskPriority.CRITICAL
    assert task.estimated_hours == 4
    assert task.tags == ["core", "api"]
    assert task.assignee == "sara"

    listing = registry.handle(state, "/tasks --tag core")
    assert "Write the parser" in listing
    assert task.id in listing
    assert "No tasks." in registry.handle(state, "/task-list --status blocked")


def test_task_update_and_progress(state) -> None:
    task = state.tracker.create_task("a")

    assert "in_progress" in registry.handle(state, f"/task-progress {task.id} 30")
    assert "completed" in registry.handle(state, f"/task-update {task.id} completed")
    assert state.tracker.get_task(task.id).progress == 100


def test_task_progress_out_of_range_values(state) -> None:
    task = state.tracker.create_task("a")

    reply, ok = run_command_line(state, f"/task-progress {task.id} inf")
    assert ok
    assert "100%" in reply
    assert state.tracker.get_task(task.id).status == TaskStatus.COMPLETED

    other = state.tracker.create_task("b")
    reply, ok = run_command_line(state, f"/task-progress {other.id} nan")
    assert not ok
    assert state.tracker.get_task(other.id).progress == 0


def test_task_update_unknown_id_raises(state) -> None:
    with pytest.raises(NotFoundError):
        registry.handle(state, "/task-update missing completed")

    reply, ok = run_command_line(state, "/task-update missing completed")
    assert not ok
    assert reply == "Not found: Task missing not found"


def test_invalid_status_is_reported(state) -> None:
    task = state.tracker.create_task("a")
    reply, ok = run_command_line(state, f"/task-update {task.id} done")
    assert not ok
    assert "Invalid status" in reply
    assert state.tracker.get_task(task.id).status == TaskStatus.PENDING


def test_task_delete(state) -> None:
    task = state.tracker.create_task("a")
    assert "deleted" in registry.handle(state, f"/task-delete {task.id}")
    assert "No task" in registry.handle(state, f"/task-delete {task.id}")


def test_milestone_commands(state) -> None:
    task = state.tracker.create_task("a")
    state.tracker.update_task_progress(task.id, 100)

    reply = registry.handle(state, '/milestone-create "Public beta" --due 2027-01-15')
    assert "Milestone created." in reply
    (milestone,) = state.tracker.get_all_milestones()

    added = registry.handle(state, f"/milestone-add {milestone.id} {task.id}")
    assert "100% done" in added
    assert "[done]" in registry.handle(state, "/milestones")

    reply, ok = run_command_line(state, "/milestone-create Beta --due tomorrow")
    assert not ok
    assert "YYYY-MM-DD" in reply


def test_progress_report_command(state, tmp_path) -> None:
    state.tracker.create_task("a")

    assert registry.handle(state, "/progress-report").startswith("# Progress Report")
    data = json.loads(registry.handle(state, "/report --format json"))
    assert data["stats"]["totalTasks"] == 1

    out = tmp_path / "report.html"
    notes: list[str] = []
    reply = registry.handle(state, f"/progress-report -f html -o {out}", emit=notes.append)
    assert reply == f"Report saved to {out}"
    assert out.read_text("utf-8").startswith("<!DOCTYPE html>")
    assert notes

    reply, ok = run_command_line(state, "/progress-report --format pdf")
    assert not ok


def test_progress_show(state) -> None:
    task = state.tracker.create_task("a")
    state.tracker.update_task_status(task.id, TaskStatus.COMPLETED)

    summary = registry.handle(state, "/progress")
    assert "Total tasks" in summary
    assert "100.0%" in summary
    assert "1 tasks/week" in summary


def test_help_lists_commands(state) -> None:
    text = registry.handle(state, "/help")
    for name in ("task-create", "task-list", "milestone-create", "progress-report", "progress-show"):
        assert f"/{name}" in text
