# src/oqool_progress/cli/display.py

from __future__ import annotations

from rich import box
from rich.console import Console, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..tracker.models import ProjectStats, Task

ICON = {
    "pending": "○",
    "in_progress": "◔",
    "completed": "✓",
    "blocked": "✗",
    "cancelled": "–",
}
STATUS_STYLE = {
    "pending": "dim",
    "in_progress": "yellow",
    "completed": "green",
    "blocked": "red",
    "cancelled": "dim",
}
PRIORITY_STYLE = {"critical": "bold red", "high": "yellow", "medium": "cyan", "low": "dim"}


def render_summary_panel(stats: ProjectStats, days_left: int | None = None) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(justify="right")

    table.add_row("Total tasks", str(stats.total_tasks))
    table.add_row("Completed", Text(str(stats.completed_tasks), style="green"))
    table.add_row("In progress", Text(str(stats.in_progress_tasks), style="yellow"))
    table.add_row("Blocked", Text(str(stats.blocked_tasks), style="red"))
    table.add_row("Completion rate", f"{stats.completion_rate:.1f}%")
    table.add_row("Velocity", f"{stats.velocity} tasks/week")
    if days_left is not None:
        table.add_row("Expected completion", f"in {days_left} day(s)")

    return Panel(table, title="Progress", border_style="blue", box=box.ROUNDED, padding=(1, 1))


def render_task_table(tasks: list[Task]) -> RenderableType:
    if not tasks:
        return Panel(Text("No tasks.", style="dim"), title="Tasks", border_style="blue", box=box.ROUNDED)

    table = Table(box=box.SIMPLE_HEAD, title=f"Tasks ({len(tasks)})", title_justify="left")
    table.add_column("", width=1, no_wrap=True)
    table.add_column("Title")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Priority", no_wrap=True)
    table.add_column("Progress", justify="right", no_wrap=True)
    table.add_column("Assignee")

    for task in tasks:
        status = task.status.value
        title = Text(task.title, style=STATUS_STYLE.get(status, ""))
        if status == "completed":
            title.stylize("strike")
        table.add_row(
            Text(ICON.get(status, "?"), style=STATUS_STYLE.get(status, "")),
            title,
            task.id,
            Text(task.priority.value, style=PRIORITY_STYLE.get(task.priority.value, "")),
            f"{task.progress}%",
            task.assignee or "",
        )
    return table


def to_text(renderable: RenderableType, width: int = 100) -> str:
    """Render to plain text so command handlers can return strings."""
    console = Console(width=width, color_system=None, force_terminal=False)
    with console.capture() as capture:
        console.print(renderable)
    return capture.get().rstrip("\n")
