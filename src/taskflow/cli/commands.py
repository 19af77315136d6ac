# src/taskflow/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.state import AppState
from ..tasks.kanban import LANE_TITLES, LANES, lane_for
from ..tasks.task_errors import HierarchyCycleError, StoreError, user_message
from ..tasks.task_models import OperationResult, Task

CommandEmitter = Callable[[str], None]
CommandReply = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandReply]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandReply]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

RELEASE_WORDS = ("none", "-", "out")
CONFIRM_WORDS = ("-y", "--yes", "yes")


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /mv, ...)."""

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

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            reply = cast(CommandHandler3, handler)(state, args, emit)
        else:
            reply = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(reply):
            return await reply
        return reply

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def format_card(state: AppState, task: Task) -> str:
    parts = [task.label]
    if task.parent_id is not None:
        parent = state.board.index.parent_of(task)
        if parent is None:
            parts.append(f"(orphan of TASK-{task.parent_id})")
        else:
            ptitle = parent.title if len(parent.title) <= 15 else parent.title[:15] + "..."
            parts.append(f"↳ {parent.label} {ptitle}")
    if state.board.has_pending(task.id):
        parts.append("[saving]")
    line = f"  {' '.join(parts)}: {task.title}"
    if task.description:
        desc = task.description.splitlines()[0]
        line += f"\n      {desc[:60]}{'...' if len(desc) > 60 else ''}"
    return line


def format_board(state: AppState) -> str:
    lanes = state.board.lanes()
    blocks: list[str] = []
    for status in LANES:
        tasks = lanes[status]
        lines = [f"{LANE_TITLES[status]} ({len(tasks)})"]
        if tasks:
            lines.extend(format_card(state, t) for t in tasks)
        else:
            lines.append("  No tasks")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _result_text(result: OperationResult) -> str:
    return result.message if result.ok else f"Error: {result.message}"


def _parse_id(raw: str) -> int | None:
    s = raw.strip().upper().removeprefix("TASK-").rstrip(".")
    if not s.isdigit():
        return None
    return int(s)


def _find(state: AppState, raw: str) -> Task | str:
    task_id = _parse_id(raw)
    if task_id is None:
        return f"Invalid task id: {raw}"
    task = state.board.get(task_id)
    if task is None:
        return f"TASK-{task_id} not found. Use /refresh to reload the board."
    return task


def _form_text(state: AppState) -> str:
    session = state.form.session
    if session is None:
        return "No task form is open. Use /new or /edit <id>."
    head = "Create New Task" if session.is_create else f"Edit TASK-{session.task_id}"
    parent = f"TASK-{session.parent_id}" if session.parent_id is not None else "None - This is a main task"
    return (
        f"{head}:\n"
        f"  Title: {session.title or '<empty>'}\n"
        f"  Description: {session.description or '<empty>'}\n"
        f"  Parent: {parent}\n"
        "Use /title, /desc, /parent to change fields; /save to submit, /cancel to close."
    )


# ---- command handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_board(state: AppState, args: list[str]) -> str:
    return format_board(state)


async def cmd_refresh(state: AppState, args: list[str]) -> str:
    result = await state.board.refresh()
    if not result.ok:
        return _result_text(result)
    return format_board(state)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title...>           -> create a main task
    /add ^<id> <title...>     -> create a subtask of TASK-<id>
    """
    parent_id: int | None = None
    if args and args[0].startswith("^"):
        parent_id = _parse_id(args[0][1:])
        if parent_id is None:
            return "Usage: /add [^<parent id>] <title...>"
        args = args[1:]

    session = state.form.open_create(parent_id=parent_id)
    session.title = " ".join(args)
    result = await state.form.submit()
    if not result.ok:
        return _result_text(result) + "\n" + _form_text(state)
    return _result_text(result)


def cmd_new(state: AppState, args: list[str]) -> str:
    session = state.form.open_create()
    if args:
        session.title = " ".join(args)
    return _form_text(state)


def cmd_edit(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /edit <id>"
    found = _find(state, args[0])
    if isinstance(found, str):
        return found
    state.form.open_edit(found)
    return _form_text(state)


def cmd_title(state: AppState, args: list[str]) -> str:
    if state.form.session is None:
        return _form_text(state)
    state.form.session.title = " ".join(args)
    return _form_text(state)


def cmd_desc(state: AppState, args: list[str]) -> str:
    if state.form.session is None:
        return _form_text(state)
    state.form.session.description = " ".join(args)
    return _form_text(state)


def cmd_parent(state: AppState, args: list[str]) -> str:
    """
    /parent          -> list legal parents for the open form
    /parent <id>     -> choose a parent (must be listed)
    /parent none     -> make it a main task
    """
    session = state.form.session
    if session is None:
        return _form_text(state)

    if not args:
        return _parents_text(state, session.task_id)

    if args[0].lower() in ("none", "-", "0"):
        session.parent_id = None
        return _form_text(state)

    parent_id = _parse_id(args[0])
    if parent_id is None:
        return "Usage: /parent <id> | /parent none"
    session.parent_id = parent_id
    return _form_text(state)


async def cmd_save(state: AppState, args: list[str]) -> str:
    result = await state.form.submit()
    if not result.ok:
        return _result_text(result) + "\n" + _form_text(state)
    return _result_text(result) + "\n\n" + format_board(state)


def cmd_cancel(state: AppState, args: list[str]) -> str:
    if state.form.session is None and state.mover.drag is None:
        return "Nothing to cancel."
    state.form.close()
    state.mover.cancel_drag()
    return "Cancelled."


def _parents_text(state: AppState, task_id: int | None) -> str:
    try:
        choices = state.board.legal_parents(task_id)
    except HierarchyCycleError as e:
        return f"Error: {e}"
    lines = ["Parent choices:", "  none: None - This is a main task"]
    lines.extend(f"  {t.label}: {t.title}" for t in choices)
    return "\n".join(lines)


def cmd_parents(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /parents <id>"
    found = _find(state, args[0])
    if isinstance(found, str):
        return found
    return _parents_text(state, found.id)


async def cmd_mv(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /mv <id> <lane>; lanes: t/ip/d"
    found = _find(state, args[0])
    if isinstance(found, str):
        return found
    lane = lane_for(args[1])
    if lane is None:
        return f"Invalid lane: {args[1]}"
    return _result_text(await state.mover.move_task(found, lane))


def cmd_drag(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /drag <id>"
    found = _find(state, args[0])
    if isinstance(found, str):
        return found
    state.mover.start_drag(found)
    return f"Dragging {found.label}. Use /drop <lane> (or /drop none to release outside the board)."


async def cmd_drop(state: AppState, args: list[str]) -> str:
    if state.mover.drag is None:
        return "Nothing is being dragged. Use /drag <id> first."
    lane = None
    if args and args[0].lower() not in RELEASE_WORDS:
        lane = lane_for(args[0])
        if lane is None:
            return f"Invalid lane: {args[0]}. Use t/ip/d, or /drop none to release."
    dragged = state.mover.drag.task
    result = await state.mover.drop(lane)
    if result is None:
        return f"Released {dragged.label} outside the lanes; nothing changed."
    return _result_text(result)


async def cmd_rm(state: AppState, args: list[str]) -> str:
    """
    /rm <id>        -> ask for confirmation
    /rm <id> -y     -> delete
    """
    if len(args) not in (1, 2) or (len(args) == 2 and args[1].lower() not in CONFIRM_WORDS):
        return "Usage: /rm <id> [-y]"
    found = _find(state, args[0])
    if isinstance(found, str):
        return found
    if len(args) == 1:
        return (
            f"Are you sure you want to delete {found.label} ({found.title})? "
            f"Repeat with /rm {found.id} -y to confirm."
        )
    return _result_text(await state.board.delete_task(found.id))


async def cmd_login(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 2:
        return "Usage: /login <username> <password>"
    login = getattr(state.store, "login", None)
    if login is None:
        return "This task store does not need a login."
    if emit:
        emit("Logging in...")
    # Never log the password.
    logger.debug("Login requested user=%s", args[0])

    try:
        await login(args[0], args[1])
    except StoreError as e:
        return f"Error: {user_message(e, 'Login failed')}"

    state.authenticated = True
    result = await state.board.refresh()
    if not result.ok:
        return _result_text(result)
    return "Logged in.\n\n" + format_board(state)


def cmd_logout(state: AppState, args: list[str]) -> str:
    logout = getattr(state.store, "logout", None)
    if logout is not None:
        logout()
    state.authenticated = False
    state.form.close()
    state.mover.cancel_drag()
    logger.info("Logged out by user command")
    return "Logged out successfully!"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("board", cmd_board, help_text="Show the board.", aliases=["b", "ls"])
registry.register("refresh", cmd_refresh, help_text="Reload tasks from the store.", aliases=["r"])
registry.register("add", cmd_add, help_text="Create a task: /add [^<parent id>] <title...>")
registry.register("new", cmd_new, help_text="Open the create form: /new [title...]")
registry.register("edit", cmd_edit, help_text="Open the edit form: /edit <id>")
registry.register("title", cmd_title, help_text="Set the form title: /title <text>")
registry.register("desc", cmd_desc, help_text="Set the form description: /desc <text>")
registry.register("parent", cmd_parent, help_text="Set the form parent: /parent [<id> | none]")
registry.register("save", cmd_save, help_text="Submit the open form.")
registry.register("cancel", cmd_cancel, help_text="Close the form / abandon a drag.")
registry.register("parents", cmd_parents, help_text="List legal parents of a task: /parents <id>")
registry.register("mv", cmd_mv, help_text="Move a task: /mv <id> <t|ip|d>", aliases=["move"])
registry.register("drag", cmd_drag, help_text="Pick up a task: /drag <id>")
registry.register("drop", cmd_drop, help_text="Drop the dragged task: /drop <t|ip|d|none>")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id> [-y]", aliases=["delete"])
registry.register("login", cmd_login, help_text="Log in: /login <username> <password>")
registry.register("logout", cmd_logout, help_text="Forget the session token.")
