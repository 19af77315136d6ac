# src/taskflow/store/offline.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime

from ..tasks.task_errors import StoreError
from ..tasks.task_index import build_forest
from ..tasks.task_models import Task, TaskInput, TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class InMemoryTaskStore:
    """
    In-memory TaskStoreClient used for offline demos and tests.

    Behavior:
    - ids are sequential, starting at 1,
    - new tasks start in to-do and belong to owner_id,
    - list_tasks returns a forest nested by parent_id, in id order,
    - deleting a task promotes its direct children to roots (no cascade),
    - the store re-checks the hierarchy: a parent update that would create
      a cycle is rejected with a StoreError (the core never sends one).
    """

    def __init__(self, *, owner_id: int = 1, tasks: list[Task] | None = None) -> None:
        self.owner_id = owner_id
        self._tasks: dict[int, Task] = {}
        self._next_id = 1
        for t in tasks or []:
            self._tasks[t.id] = t.without_children()
            self._next_id = max(self._next_id, t.id + 1)
        logger.info("InMemoryTaskStore ready total=%s", len(self._tasks))

    async def aclose(self) -> None:
        return

    def snapshot(self) -> dict[int, Task]:
        """Flat copy of stored tasks (no children), keyed by id."""
        return dict(self._tasks)

    # ---- TaskStoreClient ----

    async def list_tasks(self, status: TaskStatus | str | None = None) -> list[Task]:
        ordered = [self._tasks[k] for k in sorted(self._tasks)]
        forest = build_forest(ordered)
        if status is None:
            return forest
        st = status if isinstance(status, TaskStatus) else TaskStatus.parse(status)
        return [t for t in ordered if t.status == st]

    async def create_task(self, data: TaskInput) -> Task:
        title = (data.title or "").strip()
        if not title:
            raise StoreError("title is required", status_code=400)
        if data.parent_id is not None and data.parent_id not in self._tasks:
            raise StoreError("parent task not found", status_code=400)

        now = _now_iso()
        task = Task(
            id=self._next_id,
            owner_id=self.owner_id,
            title=title,
            description=data.description or "",
            parent_id=data.parent_id,
            status=TaskStatus.TODO,
            created_at=now,
            updated_at=now,
        )
        self._next_id += 1
        self._tasks[task.id] = task
        logger.debug("Task added id=%s parent_id=%s", task.id, task.parent_id)
        return task

    async def update_task(self, task_id: int, data: TaskUpdate) -> Task:
        current = self._tasks.get(task_id)
        if current is None:
            raise StoreError("task not found", status_code=404)

        changes: dict[str, object] = {}
        if data.title is not None:
            if not data.title.strip():
                raise StoreError("title is required", status_code=400)
            changes["title"] = data.title.strip()
        if data.description is not None:
            changes["description"] = data.description
        if data.status is not None:
            changes["status"] = data.status
        if data.set_parent:
            self._check_parent(task_id, data.parent_id)
            changes["parent_id"] = data.parent_id

        if not changes:
            return current

        updated = replace(current, updated_at=_now_iso(), **changes)  # type: ignore[arg-type]
        self._tasks[task_id] = updated
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
        return updated

    async def delete_task(self, task_id: int) -> None:
        if task_id not in self._tasks:
            raise StoreError("task not found", status_code=404)
        del self._tasks[task_id]
        for tid, t in list(self._tasks.items()):
            if t.parent_id == task_id:
                self._tasks[tid] = replace(t, parent_id=None, updated_at=_now_iso())
        logger.debug("Task deleted id=%s", task_id)

    # ---- helpers ----

    def _check_parent(self, task_id: int, parent_id: int | None) -> None:
        if parent_id is None:
            return
        if parent_id not in self._tasks:
            raise StoreError("parent task not found", status_code=400)
        # Walk up from the new parent; reaching task_id means a cycle.
        seen: set[int] = set()
        cur: int | None = parent_id
        while cur is not None and cur not in seen:
            if cur == task_id:
                raise StoreError("circular parent relationship", status_code=400)
            seen.add(cur)
            nxt = self._tasks.get(cur)
            cur = nxt.parent_id if nxt is not None else None
