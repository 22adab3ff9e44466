# src/oqool_progress/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..errors import NotFoundError, PersistenceError
from ..tracker.models import TaskPriority, TaskStatus
from ..tracker.report import REPORT_FORMATS
from .display import render_summary_panel, render_task_table, to_text

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console and the one-shot CLI (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Tracker errors (NotFoundError, PersistenceError) and bad arguments
        (ValueError) propagate; callers decide how to report them.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            raise ValueError(f"Cannot parse command line: {e}") from e
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def describe_error(exc: Exception) -> str:
    if isinstance(exc, NotFoundError):
        return f"Not found: {exc}"
    if isinstance(exc, PersistenceError):
        return f"Could not save progress data: {exc}"
    return f"Error: {exc}"


def parse_options(
    args: list[str],
    names: dict[str, str],
) -> tuple[list[str], dict[str, str]]:
    """
    Split args into positionals and options.

    `names` maps every accepted spelling ("-p", "--priority") to its key ("priority").
    Accepts "--key value" and "--key=value".
    """
    positional: list[str] = []
    options: dict[str, str] = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg.startswith("-") and len(arg) > 1 and not _is_number(arg):
            flag, eq, inline = arg.partition("=")
            key = names.get(flag)
            if key is None:
                raise ValueError(f"Unknown option: {flag}")
            if eq:
                options[key] = inline
            else:
                if i + 1 >= len(args):
                    raise ValueError(f"Option {flag} requires a value")
                options[key] = args[i + 1]
                i += 1
        else:
            positional.append(arg)
        i += 1
    return positional, options


def _is_number(raw: str) -> bool:
    try:
        float(raw)
    except ValueError:
        return False
    return True


def _split_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def _parse_choice(raw: str, enum_cls, label: str):
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValueError(f"Invalid {label} {raw!r} (expected one of: {allowed})") from None


def _parse_due_date(raw: str) -> int:
    try:
        due = datetime.strptime(raw.strip(), "%Y-%m-%d").astimezone()
    except ValueError:
        raise ValueError(f"Invalid due date {raw!r} (expected YYYY-MM-DD)") from None
    return int(due.timestamp() * 1000)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_task_create(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /task-create <title> [--description D] [--priority P] [--estimate H] [--tags a,b] [--assignee A]
    """
    positional, opts = parse_options(
        args,
        {
            "-d": "description",
            "--description": "description",
            "-p": "priority",
            "--priority": "priority",
            "-e": "estimate",
            "--estimate": "estimate",
            "-t": "tags",
            "--tags": "tags",
            "-a": "assignee",
            "--assignee": "assignee",
        },
    )
    title = " ".join(positional).strip()
    if not title:
        return "Usage: /task-create <title> [--priority P] [--estimate H] [--tags a,b] [--assignee A]"

    priority = _parse_choice(opts.get("priority", "medium"), TaskPriority, "priority")
    estimate = None
    if "estimate" in opts:
        try:
            estimate = float(opts["estimate"])
        except ValueError:
            raise ValueError(f"Invalid estimate {opts['estimate']!r} (expected hours)") from None

    task = state.tracker.create_task(
        title,
        description=opts.get("description", ""),
        priority=priority,
        estimated_hours=estimate,
        tags=_split_csv(opts.get("tags")),
        assignee=opts.get("assignee"),
    )
    return f"Task created.\n  ID: {task.id}\n  Title: {task.title}\n  Priority: {task.priority}"


def cmd_task_list(state: AppState, args: list[str]) -> str:
    _, opts = parse_options(
        args,
        {
            "-s": "status",
            "--status": "status",
            "-p": "priority",
            "--priority": "priority",
            "-t": "tag",
            "--tag": "tag",
            "-a": "assignee",
            "--assignee": "assignee",
        },
    )
    status = _parse_choice(opts["status"], TaskStatus, "status") if "status" in opts else None
    priority = _parse_choice(opts["priority"], TaskPriority, "priority") if "priority" in opts else None

    tasks = state.tracker.get_all_tasks(
        status=status,
        priority=priority,
        tag=opts.get("tag"),
        assignee=opts.get("assignee"),
    )
    return to_text(render_task_table(tasks))


def cmd_task_update(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /task-update <task-id> <pending|in_progress|completed|blocked|cancelled>"
    status = _parse_choice(args[1], TaskStatus, "status")
    task = state.tracker.update_task_status(args[0], status)
    return f"Task {task.id} is now {task.status} ({task.progress}%)."


def cmd_task_progress(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /task-progress <task-id> <0-100>"
    try:
        value = float(args[1])
    except ValueError:
        raise ValueError(f"Invalid progress {args[1]!r} (expected a number 0-100)") from None
    task = state.tracker.update_task_progress(args[0], value)
    return f"Task {task.id} progress: {task.progress}% ({task.status})."


def cmd_task_delete(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /task-delete <task-id>"
    if state.tracker.delete_task(args[0]):
        return f"Task {args[0]} deleted."
    return f"No task with id {args[0]}."


def cmd_milestone_create(state: AppState, args: list[str]) -> str:
    positional, opts = parse_options(
        args,
        {
            "-d": "description",
            "--description": "description",
            "--due": "due",
            "--tasks": "tasks",
        },
    )
    name = " ".join(positional).strip()
    if not name:
        return "Usage: /milestone-create <name> [--description D] [--due YYYY-MM-DD] [--tasks id1,id2]"

    due = _parse_due_date(opts["due"]) if "due" in opts else None
    milestone = state.tracker.create_milestone(
        name,
        description=opts.get("description", ""),
        due_date=due,
        tasks=_split_csv(opts.get("tasks")),
    )
    return f"Milestone created.\n  ID: {milestone.id}\n  Name: {milestone.name}"


def cmd_milestone_add(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /milestone-add <milestone-id> <task-id>"
    milestone = state.tracker.add_task_to_milestone(args[0], args[1])
    return f"Milestone {milestone.name}: {len(milestone.tasks)} task(s), {milestone.progress}% done."


def cmd_milestone_list(state: AppState, args: list[str]) -> str:
    milestones = state.tracker.get_all_milestones()
    if not milestones:
        return "No milestones."
    lines = [f"Milestones ({len(milestones)}):"]
    for i, m in enumerate(milestones, start=1):
        mark = "done" if m.completed else f"{m.progress}%"
        lines.append(f"{i}. {m.name} [{mark}] ({len(m.tasks)} task(s)) id={m.id}")
    return "\n".join(lines)


def cmd_progress_report(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /progress-report [--format json|markdown|html] [--output PATH]
    """
    _, opts = parse_options(
        args,
        {"-f": "format", "--format": "format", "-o": "output", "--output": "output"},
    )
    default_fmt = str(getattr(state.settings, "report_format", "markdown"))
    fmt = opts.get("format", default_fmt).strip().lower()
    if fmt not in REPORT_FORMATS:
        raise ValueError(f"Invalid format {fmt!r} (expected one of: {', '.join(REPORT_FORMATS)})")

    output = opts.get("output")
    if output and emit:
        emit(f"Generating {fmt} report...")
    result = state.tracker.export_report(fmt, output)
    if output:
        return f"Report saved to {result}"
    return result


def cmd_progress_show(state: AppState, args: list[str]) -> str:
    stats, days_left = state.tracker.summary()
    return to_text(render_summary_panel(stats, days_left))


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "task-create",
    cmd_task_create,
    help_text="Create a task: /task-create <title> [--priority P] [--estimate H] [--tags a,b] [--assignee A].",
)
registry.register(
    "task-list",
    cmd_task_list,
    help_text="List tasks: /task-list [--status S] [--priority P] [--tag T] [--assignee A].",
    aliases=["tasks"],
)
registry.register("task-update", cmd_task_update, help_text="Set task status: /task-update <id> <status>.")
registry.register("task-progress", cmd_task_progress, help_text="Set task progress: /task-progress <id> <0-100>.")
registry.register("task-delete", cmd_task_delete, help_text="Delete a task: /task-delete <id>.")
registry.register(
    "milestone-create",
    cmd_milestone_create,
    help_text="Create a milestone: /milestone-create <name> [--due YYYY-MM-DD] [--tasks id1,id2].",
)
registry.register(
    "milestone-add", cmd_milestone_add, help_text="Add a task to a milestone: /milestone-add <milestone-id> <task-id>."
)
registry.register("milestone-list", cmd_milestone_list, help_text="List milestones.", aliases=["milestones"])
registry.register(
    "progress-report",
    cmd_progress_report,
    help_text="Export a report: /progress-report [--format json|markdown|html] [--output PATH].",
    aliases=["report"],
)
registry.register("progress-show", cmd_progress_show, help_text="Show the progress summary.", aliases=["progress"])
