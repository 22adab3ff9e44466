"""
OqoolAI progress tracker.

Tasks and milestones for one project, persisted under <project>/.oqool/progress,
with statistics, recommendations and JSON / Markdown / HTML reports.
"""

__version__ = "0.1.0"
