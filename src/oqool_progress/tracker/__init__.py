"""
Progress tracking subsystem.

Components:
- models.py: data structures (Task, Milestone, ProjectStats, ProgressReport)
- store.py: JSON-file storage of the tracker document
- insights.py: statistics and recommendation rules
- report.py: JSON / Markdown / HTML renderers
- tracker.py: ProgressTracker, the public API used by the CLI
"""
