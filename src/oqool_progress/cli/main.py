# src/oqool_progress/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- runs a single command given on the command line (`oqool-progress task-list --status blocked`), or
- starts the interactive console REPL.
"""

from __future__ import annotations

import logging
import shlex
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_command_line, run_console_loop
from ..errors import PersistenceError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    # Command output goes to stdout; keep the console handler below that unless asked.
    if argv:
        console_level = max(console_level, logging.WARNING)

    setup_logging(log_dir=settings.log_dir, console_level=console_level)
    logger.info("Starting %s (project=%s)...", settings.app_name, settings.project_dir)

    try:
        state = create_initial_state(settings=settings)
    except PersistenceError as e:
        print(f"Cannot open progress data: {e}", file=sys.stderr)
        return 1

    if argv:
        name = argv[0].lstrip("/")
        line = "/" + " ".join([name, *(shlex.quote(a) for a in argv[1:])])
        reply, ok = run_command_line(state, line)
        if reply is not None:
            print(reply, file=sys.stdout if ok else sys.stderr)
        return 0 if ok else 1

    if not settings.console_enabled:
        logger.info("Console disabled and no command given; nothing to do.")
        return 0

    run_console_loop(state)
    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
