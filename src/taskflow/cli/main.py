# src/taskflow/cli/main.py

"""
CLI entrypoint: `taskflow` (or `python -m taskflow.cli.main`).

Sets up logging, then runs the console board on one asyncio loop until
/exit, EOF or Ctrl+C. The store client is closed on the way out.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    state = create_initial_state(settings=settings)
    try:
        await run_console_loop(state)
    finally:
        await shutdown_state(state)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(
        log_dir=settings.data_dir,
        console_level=level_from_name(settings.log_level),
    )
    mode = "offline" if settings.offline else settings.api_base_url
    logger.info("Starting %s (store=%s, log=%s)", settings.app_name, mode, log_file)

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
