# src/taskflow/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import format_board
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

PROMPT = "board> "


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _handle_logged_out(state: AppState) -> None:
    """The session ended (rejected credential or /logout): forget the token and ask for a login."""
    logout = getattr(state.store, "logout", None)
    if logout is not None:
        logout()
    _print_ts("[AUTH] Not logged in. Use /login <username> <password> to continue.")


async def run_console_loop(state: AppState) -> None:
    """
    Interactive board REPL.

    input() runs in a worker thread, so store requests already in flight keep
    progressing on the event loop while the prompt waits.
    """
    logger.info("Console connector started.")
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "taskflow"))
    _print_ts(f"[{app_name}] Type /help for commands, /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    result = await state.board.refresh()
    if result.ok:
        print(format_board(state))
    else:
        _print_ts(result.message)
    if not state.authenticated:
        _handle_logged_out(state)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, PROMPT)).strip()
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

        was_authenticated = state.authenticated
        try:
            reply = await command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Commands start with '/'. Use /help to list them."

        print(reply)
        if was_authenticated and not state.authenticated:
            _handle_logged_out(state)

    logger.info("Console connector finished.")
