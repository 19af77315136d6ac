# src/taskflow/tasks/board.py

"""
Board view state.

Owns the TaskIndex of the latest applied fetch, the optimistic status
overlay and the refresh cycle. Everything the presentation layer reads goes
through here; mutations are issued by the transition controller and the
form coordinator, which call back into refresh().

Key invariants:
- the store is the single source of truth; every mutation ends with a full
  refetch so a failed request cannot leave the view diverged,
- refresh results are applied in ticket order: a response older than an
  already applied one is dropped ("supersede on newer refetch"),
- the overlay never outlives the mutation that created it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.ports import TaskStoreClient, UnauthenticatedHook
from .ancestry import legal_parents
from .kanban import LANES, by_status, partition
from .task_errors import StoreError, UnauthenticatedError, user_message
from .task_index import TaskIndex
from .task_models import OperationResult, Task, TaskStatus

logger = logging.getLogger(__name__)

MSG_FETCH_FAILED = "Failed to fetch tasks"
MSG_DELETED = "Task deleted successfully!"
MSG_DELETE_FAILED = "Failed to delete task"


class Board:
    def __init__(
        self,
        store: TaskStoreClient,
        *,
        on_unauthenticated: UnauthenticatedHook | None = None,
    ) -> None:
        self._store = store
        self._index = TaskIndex()
        self._overrides: dict[int, TaskStatus] = {}

        self._next_ticket = 0
        self._applied_ticket = -1

        self._in_flight = 0
        self.loading = False
        self.loaded = False
        self.on_unauthenticated = on_unauthenticated
        self._listeners: list[Callable[[Board], None]] = []

    @property
    def store(self) -> TaskStoreClient:
        return self._store

    # ---- read-only accessors ----

    @property
    def index(self) -> TaskIndex:
        return self._index

    def all_tasks(self) -> list[Task]:
        return self._index.flat

    def get(self, task_id: int) -> Task | None:
        return self._index.get(task_id)

    def status_of(self, task: Task) -> TaskStatus:
        return self._overrides.get(task.id, task.status)

    def lane(self, status: TaskStatus) -> list[Task]:
        return by_status(self._index, status, self._overrides)

    def lanes(self) -> dict[TaskStatus, list[Task]]:
        return partition(self._index, self._overrides)

    def lane_counts(self) -> dict[TaskStatus, int]:
        lanes = self.lanes()
        return {s: len(lanes[s]) for s in LANES}

    def legal_parents(self, task_id: int | None) -> list[Task]:
        return legal_parents(self._index, task_id)

    def add_listener(self, fn: Callable[[Board], None]) -> None:
        """Called after every applied refresh or local view change."""
        self._listeners.append(fn)

    # ---- refresh cycle ----

    async def refresh(self) -> OperationResult:
        ticket = self._next_ticket
        self._next_ticket += 1
        self._in_flight += 1
        self.loading = True
        try:
            forest = await self._store.list_tasks()
        except UnauthenticatedError as e:
            logger.info("Refresh rejected: unauthenticated (ticket=%s)", ticket)
            self.notify_unauthenticated()
            return OperationResult.failure(user_message(e, MSG_FETCH_FAILED), unauthenticated=True)
        except StoreError as e:
            logger.warning("Refresh failed ticket=%s: %s", ticket, e)
            return OperationResult.failure(MSG_FETCH_FAILED)
        finally:
            self._in_flight -= 1
            self.loading = self._in_flight > 0

        if ticket < self._applied_ticket:
            logger.debug(
                "Dropping superseded refresh ticket=%s (applied=%s)", ticket, self._applied_ticket
            )
            return OperationResult.success("superseded")

        self._applied_ticket = ticket
        self._index = TaskIndex(forest)
        self.loaded = True
        logger.debug("Board refreshed ticket=%s tasks=%s", ticket, len(self._index))
        self._changed()
        return OperationResult.success(f"Loaded {len(self._index)} tasks")

    # ---- optimistic overlay (used by the transition controller) ----

    def apply_optimistic(self, task_id: int, status: TaskStatus) -> None:
        self._overrides[task_id] = status
        self._changed()

    def rollback(self, task_id: int) -> None:
        if self._overrides.pop(task_id, None) is not None:
            self._changed()

    def apply_authoritative(self, task: Task) -> None:
        """
        Adopt a single-task store result until the next refetch replaces it.

        The result is newer than any refresh already in flight, so those are
        dropped when they land; only refreshes issued after this call apply.
        """
        self._overrides.pop(task.id, None)
        self._index = self._index.with_task(task)
        self._applied_ticket = self._next_ticket
        self._next_ticket += 1
        self._changed()

    def has_pending(self, task_id: int) -> bool:
        return task_id in self._overrides

    # ---- deletion ----

    async def delete_task(self, task_id: int) -> OperationResult:
        """
        Ask the store to delete a task.

        Nothing is removed locally: the task (and any children) stay where
        they are until a refetch shows the store's post-delete state,
        whatever its policy for orphaned children is.
        """
        try:
            await self._store.delete_task(task_id)
        except UnauthenticatedError as e:
            self.notify_unauthenticated()
            return OperationResult.failure(user_message(e, MSG_DELETE_FAILED), unauthenticated=True)
        except StoreError as e:
            logger.warning("delete_task failed task_id=%s: %s", task_id, e)
            await self.refresh()
            return OperationResult.failure(MSG_DELETE_FAILED)

        logger.info("Task deleted task_id=%s", task_id)
        await self.refresh()
        return OperationResult.success(MSG_DELETED)

    # ---- helpers ----

    def notify_unauthenticated(self) -> None:
        if self.on_unauthenticated is None:
            return
        try:
            self.on_unauthenticated()
        except Exception:
            logger.exception("on_unauthenticated hook failed")

    def _changed(self) -> None:
        for fn in list(self._listeners):
            try:
                fn(self)
            except Exception:
                logger.exception("Board listener failed")
