# src/oqool_progress/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import describe_error
from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..errors import TrackerError

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def run_command_line(state: AppState, line: str) -> tuple[str | None, bool]:
    """
    Run one command line through the registry.

    Returns (reply, ok). Tracker errors and bad arguments become a reply with ok=False.
    """

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations.
        print(f"[{_ts_local()}] {text}", flush=True)

    try:
        return command_registry.handle(state, line, emit=emit), True
    except (TrackerError, ValueError) as e:
        logger.info("Command failed line=%r error=%s", line, e)
        return describe_error(e), False


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (project=%s).", getattr(state.settings, "project_dir", "?"))
    _print_ts("[CONSOLE] Type a command. Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input("oqool> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            user_input = "/" + user_input

        try:
            reply, _ok = run_command_line(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            print(reply)

    logger.info("Console connector finished.")
