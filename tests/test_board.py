# tests/test_board.py

from __future__ import annotations

import asyncio

import pytest

from taskflow.tasks.board import MSG_DELETE_FAILED, MSG_DELETED, MSG_FETCH_FAILED, Board
from taskflow.tasks.task_errors import StoreError, UnauthenticatedError
from taskflow.tasks.task_models import TaskInput, TaskStatus, TaskUpdate

from .fakes import FakeTaskStore, make_task


class GatedStore(FakeTaskStore):
    """Holds one list_tasks response (already computed) until the gate opens."""

    def __init__(self, tasks=None) -> None:
        super().__init__(tasks)
        self.gate = asyncio.Event()
        self.hold_next = False

    async def list_tasks(self, status=None):
        forest = await super().list_tasks(status)
        if self.hold_next:
            self.hold_next = False
            await self.gate.wait()
        return forest


@pytest.mark.asyncio
async def test_refresh_loads_forest_and_lanes(state) -> None:
    res = await state.board.refresh()

    assert res.ok
    assert state.board.loaded
    assert [t.id for t in state.board.all_tasks()] == [1, 2, 3, 4, 5]
    assert [t.id for t in state.board.lane(TaskStatus.TODO)] == [1, 2, 5]
    assert state.board.lane_counts() == {
        TaskStatus.TODO: 3,
        TaskStatus.IN_PROGRESS: 1,
        TaskStatus.DONE: 1,
    }


@pytest.mark.asyncio
async def test_refresh_failure_keeps_previous_view(state, store) -> None:
    await state.board.refresh()
    store.fail_next("list_tasks", StoreError(detail="boom"))

    res = await state.board.refresh()

    assert not res.ok
    assert res.message == MSG_FETCH_FAILED
    assert len(state.board.index) == 5


@pytest.mark.asyncio
async def test_older_refresh_is_dropped_when_newer_was_applied() -> None:
    store = GatedStore(tasks=[make_task(1)])
    board = Board(store)

    store.hold_next = True
    slow = asyncio.create_task(board.refresh())
    for _ in range(3):
        await asyncio.sleep(0)

    await store.create_task(TaskInput(title="added meanwhile"))
    fast = await board.refresh()
    assert fast.ok
    assert len(board.index) == 2

    store.gate.set()
    stale = await slow

    assert stale.ok
    assert stale.message == "superseded"
    assert len(board.index) == 2


@pytest.mark.asyncio
async def test_listeners_fire_on_applied_refresh(state) -> None:
    seen = []
    state.board.add_listener(lambda b: seen.append(len(b.index)))

    await state.board.refresh()

    assert seen == [5]


@pytest.mark.asyncio
async def test_delete_parent_refetches_store_outcome(state, store) -> None:
    await state.board.refresh()

    res = await state.board.delete_task(1)

    assert res.ok
    assert res.message == MSG_DELETED
    assert state.board.get(1) is None
    # the in-memory store promotes direct children to roots
    assert [t.id for t in state.board.index.roots()] == [2, 4, 5]
    assert state.board.index.child_ids(2) == [3]


@pytest.mark.asyncio
async def test_delete_does_not_remove_locally_before_refetch(state, store) -> None:
    await state.board.refresh()
    seen_during_delete = []

    async def _delete(task_id):
        seen_during_delete.append(state.board.get(task_id) is not None)

    store.delete_task = _delete  # type: ignore[method-assign]

    await state.board.delete_task(2)

    assert seen_during_delete == [True]


@pytest.mark.asyncio
async def test_delete_failure_keeps_task(state, store) -> None:
    await state.board.refresh()
    store.fail_next("delete_task", StoreError("task is locked", status_code=409))

    res = await state.board.delete_task(4)

    assert not res.ok
    assert res.message == MSG_DELETE_FAILED
    assert state.board.get(4) is not None


@pytest.mark.asyncio
async def test_unauthenticated_refresh_flips_state(state, store) -> None:
    store.fail_next("list_tasks", UnauthenticatedError())

    res = await state.board.refresh()

    assert not res.ok
    assert res.unauthenticated
    assert state.authenticated is False


@pytest.mark.asyncio
async def test_unauthenticated_delete_does_not_refetch(state, store) -> None:
    await state.board.refresh()
    store.calls.clear()
    store.fail_next("delete_task", UnauthenticatedError("token expired"))

    res = await state.board.delete_task(4)

    assert res.unauthenticated
    assert res.message == "token expired"
    assert [c.op for c in store.calls] == ["delete_task"]
    assert state.authenticated is False


@pytest.mark.asyncio
async def test_refresh_issued_before_update_result_is_dropped() -> None:
    store = GatedStore(tasks=[make_task(5)])
    board = Board(store)
    await board.refresh()

    store.hold_next = True
    slow = asyncio.create_task(board.refresh())
    for _ in range(3):
        await asyncio.sleep(0)

    board.apply_optimistic(5, TaskStatus.DONE)
    updated = await store.update_task(5, TaskUpdate(status=TaskStatus.DONE))
    board.apply_authoritative(updated)

    store.gate.set()
    stale = await slow

    assert stale.message == "superseded"
    assert board.get(5).status is TaskStatus.DONE

    await board.refresh()
    assert board.get(5).status is TaskStatus.DONE
    assert not board.loading
