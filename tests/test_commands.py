# tests/test_commands.py

from __future__ import annotations

import pytest

from taskflow.cli.commands import CommandRegistry, format_board, registry
from taskflow.core.state import build_state
from taskflow.tasks.task_models import TaskStatus

from .fakes import FakeTaskStore, make_task


@pytest.mark.asyncio
async def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    async def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bb"])

    assert await reg.handle(state, "/a x") == "h2"
    assert await reg.handle(state, "/BB y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")
    assert "Empty command" in (await reg.handle(state, "/") or "")


@pytest.mark.asyncio
async def test_board_renders_three_lanes(state) -> None:
    await state.board.refresh()

    text = format_board(state)

    assert text.index("TO DO (3)") < text.index("IN PROGRESS (1)") < text.index("DONE (1)")
    assert "TASK-3" in text
    assert "↳ TASK-2 Write notes" in text


@pytest.mark.asyncio
async def test_empty_lane_placeholder(state, store) -> None:
    await store.delete_task(3)
    await state.board.refresh()

    assert "IN PROGRESS (0)\n  No tasks" in format_board(state)


@pytest.mark.asyncio
async def test_mv_command_moves_task(state) -> None:
    await state.board.refresh()

    reply = await registry.handle(state, "/mv TASK-5 d")

    assert reply == "Task moved to done!"
    assert state.board.get(5).status is TaskStatus.DONE


@pytest.mark.asyncio
async def test_mv_rejects_unknown_lane_and_task(state) -> None:
    await state.board.refresh()

    assert "Invalid lane" in await registry.handle(state, "/mv 5 later")
    assert "not found" in await registry.handle(state, "/mv 42 d")


@pytest.mark.asyncio
async def test_add_subtask(state) -> None:
    await state.board.refresh()

    reply = await registry.handle(state, "/add ^4 Announce release")

    assert reply == "Task created successfully!"
    assert [t.title for t in state.board.index.children_of(4)] == ["Announce release"]


@pytest.mark.asyncio
async def test_add_without_title_keeps_form_open(state, store) -> None:
    await state.board.refresh()
    store.calls.clear()

    reply = await registry.handle(state, "/add")

    assert reply.startswith("Error: Task title cannot be empty")
    assert state.form.session is not None
    assert store.mutations() == []


@pytest.mark.asyncio
async def test_edit_form_flow(state) -> None:
    await state.board.refresh()

    await registry.handle(state, "/edit 3")
    await registry.handle(state, "/title Proofread twice")
    await registry.handle(state, "/parent none")
    reply = await registry.handle(state, "/save")

    assert reply.startswith("Task updated successfully!")
    task = state.board.get(3)
    assert task.title == "Proofread twice"
    assert task.parent_id is None


@pytest.mark.asyncio
async def test_parents_lists_only_legal_choices(state) -> None:
    await state.board.refresh()

    reply = await registry.handle(state, "/parents 1")

    assert "TASK-4" in reply and "TASK-5" in reply
    assert "TASK-2" not in reply and "TASK-3" not in reply


@pytest.mark.asyncio
async def test_drag_and_drop_commands(state, store) -> None:
    await state.board.refresh()

    await registry.handle(state, "/drag 5")
    store.calls.clear()
    reply = await registry.handle(state, "/drop none")

    assert "nothing changed" in reply
    assert store.calls == []

    await registry.handle(state, "/drag 5")
    assert await registry.handle(state, "/drop ip") == "Task moved to in-progress!"


@pytest.mark.asyncio
async def test_rm_asks_before_deleting(state, store) -> None:
    await state.board.refresh()
    store.calls.clear()

    reply = await registry.handle(state, "/rm 4")

    assert reply.startswith("Are you sure you want to delete TASK-4")
    assert store.mutations() == []
    assert state.board.get(4) is not None

    assert await registry.handle(state, "/rm 4 -y") == "Task deleted successfully!"
    assert state.board.get(4) is None


@pytest.mark.asyncio
async def test_rm_rejects_unknown_flag(state, store) -> None:
    await state.board.refresh()

    assert (await registry.handle(state, "/rm 4 now")).startswith("Usage")
    assert store.mutations() == []


@pytest.mark.asyncio
async def test_login_without_login_support(state) -> None:
    reply = await registry.handle(state, "/login ana secret")
    assert reply == "This task store does not need a login."


@pytest.mark.asyncio
async def test_help_lists_commands(state) -> None:
    reply = await registry.handle(state, "/help")
    assert "/mv" in reply and "/drop" in reply


@pytest.mark.asyncio
async def test_drop_on_unknown_lane_keeps_drag(state, store) -> None:
    await state.board.refresh()
    await registry.handle(state, "/drag 5")
    store.calls.clear()

    reply = await registry.handle(state, "/drop dnoe")

    assert reply.startswith("Invalid lane: dnoe")
    assert state.mover.drag is not None
    assert store.calls == []

    assert "nothing changed" in await registry.handle(state, "/drop")
    assert state.mover.drag is None


class _LoginStore(FakeTaskStore):
    def __init__(self, tasks=None) -> None:
        super().__init__(tasks)
        self.token: str | None = "tok"

    def logout(self) -> None:
        self.token = None


@pytest.mark.asyncio
async def test_logout_forgets_token(settings) -> None:
    store = _LoginStore(tasks=[make_task(1)])
    state = build_state(settings, store)
    await state.board.refresh()
    state.form.open_create()

    reply = await registry.handle(state, "/logout")

    assert reply == "Logged out successfully!"
    assert store.token is None
    assert state.authenticated is False
    assert state.form.session is None


@pytest.mark.asyncio
async def test_logout_with_offline_store(state) -> None:
    assert await registry.handle(state, "/logout") == "Logged out successfully!"
    assert state.authenticated is False


@pytest.mark.asyncio
async def test_new_prefills_title_and_save_creates(state) -> None:
    await state.board.refresh()

    reply = await registry.handle(state, "/new Draft agenda")
    assert "Title: Draft agenda" in reply

    assert (await registry.handle(state, "/save")).startswith("Task created successfully!")
    assert state.form.session is None
