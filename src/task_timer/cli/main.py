# src/task_timer/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console screen on an
asyncio event loop (countdowns tick on the same loop).
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.board.shutdown()
    except Exception:
        logger.exception("Failed to persist task statuses on shutdown.")

    close = getattr(state.kv, "close", None)
    if close is not None:
        try:
            close()
        except Exception:
            logger.debug("Store close failed.", exc_info=True)


async def _run(state: AppState) -> None:
    try:
        await run_console_loop(state)
    finally:
        await _shutdown(state)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="task-timer", description="Task list with countdown timers.")
    parser.add_argument(
        "--memory",
        action="store_true",
        help="keep tasks in memory only (nothing is saved)",
    )
    args = parser.parse_args(argv)

    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    # plyer backends can be chatty on import
    logging.getLogger("plyer").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings, in_memory=args.memory)

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
