# src/oqool_progress/tracker/report.py

"""
Report renderers.

Pure string templates over ProgressReport. Section order is fixed for every
format: header, statistics, milestones, blocked tasks, recommendations.
"""

from __future__ import annotations

import html
import json
from collections.abc import Callable
from datetime import datetime

from .models import ProgressReport

REPORT_FORMATS = ("json", "markdown", "html")

_HTML_STYLE = """\
    body { font-family: Arial, sans-serif; margin: 20px; line-height: 1.6; }
    h1 { color: #007bff; border-bottom: 2px solid #007bff; padding-bottom: 10px; }
    .stats { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 15px; margin: 20px 0; }
    .stat-card { background: #f8f9fa; padding: 15px; border-radius: 8px; border-left: 4px solid #007bff; }
    .stat-value { font-size: 2em; font-weight: bold; color: #007bff; }
    .milestone { background: #e7f3ff; padding: 15px; margin: 10px 0; border-radius: 5px; }
    .progress-bar { background: #e0e0e0; height: 20px; border-radius: 10px; overflow: hidden; }
    .progress-fill { background: #007bff; height: 100%; transition: width 0.3s; }
    .blocker { background: #fff3cd; padding: 10px; margin: 5px 0; border-left: 4px solid #ffc107; }
    .recommendation { background: #d1ecf1; padding: 10px; margin: 5px 0; border-left: 4px solid #17a2b8; }"""


def format_timestamp(ts_ms: int) -> str:
    return datetime.fromtimestamp(ts_ms / 1000).astimezone().strftime("%Y-%m-%d %H:%M")


def format_date(ts_ms: int) -> str:
    return datetime.fromtimestamp(ts_ms / 1000).astimezone().strftime("%Y-%m-%d")


def render_json(report: ProgressReport) -> str:
    return json.dumps(report.to_dict(), ensure_ascii=False, indent=2)


def _stat_rows(report: ProgressReport) -> list[tuple[str, str]]:
    s = report.stats
    return [
        ("Total tasks", str(s.total_tasks)),
        ("Completed", str(s.completed_tasks)),
        ("In progress", str(s.in_progress_tasks)),
        ("Blocked", str(s.blocked_tasks)),
        ("Completion rate", f"{s.completion_rate:.1f}%"),
        ("Average task time", f"{s.average_task_time:.1f} h"),
        ("Velocity", f"{s.velocity} tasks/week"),
    ]


def render_markdown(report: ProgressReport) -> str:
    lines = ["# Progress Report", "", f"**Generated:** {format_timestamp(report.generated_at)}", ""]

    lines += ["## Statistics", ""]
    lines += [f"- **{label}:** {value}" for label, value in _stat_rows(report)]
    lines.append("")

    if report.milestones:
        lines += ["## Milestones", ""]
        for m in report.milestones:
            status = "✅ Completed" if m.completed else "⏳ In progress"
            lines += [
                f"### {m.name}",
                f"- **Progress:** {m.progress}%",
                f"- **Due:** {format_date(m.due_date)}",
                f"- **Status:** {status}",
                "",
            ]

    if report.blockers:
        lines += ["## Blocked Tasks ⚠️", ""]
        lines += [f"- **{t.title}** ({t.priority})" for t in report.blockers]
        lines.append("")

    if report.recommendations:
        lines += ["## Recommendations 💡", ""]
        lines += [f"- {rec}" for rec in report.recommendations]
        lines.append("")

    return "\n".join(lines)


def render_html(report: ProgressReport) -> str:
    esc = html.escape
    s = report.stats
    cards = [
        (str(s.total_tasks), "Total tasks"),
        (str(s.completed_tasks), "Completed"),
        (f"{s.completion_rate:.1f}%", "Completion rate"),
        (str(s.velocity), "Tasks/week"),
    ]

    parts = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '  <meta charset="UTF-8">',
        "  <title>Progress Report</title>",
        "  <style>",
        _HTML_STYLE,
        "  </style>",
        "</head>",
        "<body>",
        "  <h1>Progress Report</h1>",
        f"  <p><strong>Generated:</strong> {format_timestamp(report.generated_at)}</p>",
        "",
        "  <h2>Statistics</h2>",
        '  <div class="stats">',
    ]
    for value, label in cards:
        parts += [
            '    <div class="stat-card">',
            f'      <div class="stat-value">{value}</div>',
            f"      <div>{label}</div>",
            "    </div>",
        ]
    parts.append("  </div>")

    parts += ["", "  <h2>Milestones</h2>"]
    for m in report.milestones:
        done = " ✅" if m.completed else ""
        parts += [
            '  <div class="milestone">',
            f"    <h3>{esc(m.name)}{done}</h3>",
            '    <div class="progress-bar">',
            f'      <div class="progress-fill" style="width: {m.progress}%"></div>',
            "    </div>",
            f"    <p>{m.progress}% - Due: {format_date(m.due_date)}</p>",
            "  </div>",
        ]

    if report.blockers:
        parts.append("  <h2>Blocked Tasks ⚠️</h2>")
        for t in report.blockers:
            parts.append(f'  <div class="blocker"><strong>{esc(t.title)}</strong> ({t.priority})</div>')

    if report.recommendations:
        parts.append("  <h2>Recommendations 💡</h2>")
        for rec in report.recommendations:
            parts.append(f'  <div class="recommendation">{esc(rec)}</div>')

    parts += ["</body>", "</html>", ""]
    return "\n".join(parts)


RENDERERS: dict[str, Callable[[ProgressReport], str]] = {
    "json": render_json,
    "markdown": render_markdown,
    "html": render_html,
}


def render_report(report: ProgressReport, fmt: str) -> str:
    renderer = RENDERERS.get((fmt or "").strip().lower())
    if renderer is None:
        raise ValueError(f"Unknown report format: {fmt!r} (expected one of {', '.join(REPORT_FORMATS)})")
    return renderer(report)
