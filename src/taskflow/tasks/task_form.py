# src/taskflow/tasks/task_form.py

"""
Create/edit form coordination.

Validation happens before any request is made:
- the trimmed title must be non-empty,
- the chosen parent must be a legal parent of the task being edited
  (never the task itself or one of its descendants); an edit that keeps the
  stored parent is neither re-checked nor re-sent, so orphans stay editable.

On success the edit session is closed and the board refetched.
On failure the session stays open so the user can fix and retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .ancestry import is_legal_parent
from .board import Board
from .task_errors import (
    HierarchyCycleError,
    StoreError,
    TaskValidationError,
    UnauthenticatedError,
    user_message,
)
from .task_models import OperationResult, Task, TaskInput, TaskUpdate

logger = logging.getLogger(__name__)

MSG_EMPTY_TITLE = "Task title cannot be empty"
MSG_CREATED = "Task created successfully!"
MSG_UPDATED = "Task updated successfully!"
MSG_SAVE_FAILED = "Failed to save task"


@dataclass(slots=True)
class EditSession:
    """
    An open form. task_id is None while creating a new task.
    """

    task_id: int | None = None
    title: str = ""
    description: str = ""
    parent_id: int | None = None

    @property
    def is_create(self) -> bool:
        return self.task_id is None

    def to_input(self) -> TaskInput:
        return TaskInput(title=self.title, description=self.description, parent_id=self.parent_id)


class TaskFormCoordinator:
    def __init__(self, board: Board) -> None:
        self._board = board
        self.session: EditSession | None = None

    # ---- session lifecycle ----

    def open_create(self, *, parent_id: int | None = None) -> EditSession:
        self.session = EditSession(parent_id=parent_id)
        return self.session

    def open_edit(self, task: Task) -> EditSession:
        self.session = EditSession(
            task_id=task.id,
            title=task.title,
            description=task.description or "",
            parent_id=task.parent_id,
        )
        return self.session

    def close(self) -> None:
        self.session = None

    def parent_choices(self) -> list[Task]:
        """Legal parents for the open session (everything when creating)."""
        task_id = self.session.task_id if self.session is not None else None
        return self._board.legal_parents(task_id)

    async def submit(self) -> OperationResult:
        session = self.session
        if session is None:
            return OperationResult.failure("No task form is open")
        if session.task_id is None:
            return await self.create_task(session.to_input())
        return await self.update_task(session.task_id, session.to_input())

    # ---- operations ----

    async def create_task(self, data: TaskInput) -> OperationResult:
        try:
            clean = self._validate(None, data)
        except TaskValidationError as e:
            return OperationResult.failure(str(e))

        try:
            created = await self._board.store.create_task(clean)
        except StoreError as e:
            return self._store_failure("create", None, e)

        logger.info("Task created task_id=%s parent_id=%s", created.id, created.parent_id)
        self.close()
        await self._board.refresh()
        return OperationResult.success(MSG_CREATED, task=created)

    async def update_task(self, task_id: int, data: TaskInput) -> OperationResult:
        try:
            clean = self._validate(task_id, data)
        except TaskValidationError as e:
            return OperationResult.failure(str(e))

        update = TaskUpdate(
            title=clean.title,
            description=clean.description,
            parent_id=clean.parent_id,
            set_parent=not self._keeps_parent(task_id, clean.parent_id),
        )
        try:
            updated = await self._board.store.update_task(task_id, update)
        except StoreError as e:
            return self._store_failure("update", task_id, e)

        logger.info("Task updated task_id=%s parent_id=%s", task_id, clean.parent_id)
        self.close()
        await self._board.refresh()
        return OperationResult.success(MSG_UPDATED, task=updated)

    # ---- helpers ----

    def _validate(self, task_id: int | None, data: TaskInput) -> TaskInput:
        title = (data.title or "").strip()
        if not title:
            raise TaskValidationError(MSG_EMPTY_TITLE)

        parent_id = data.parent_id
        if parent_id is not None and not self._keeps_parent(task_id, parent_id):
            try:
                legal = is_legal_parent(self._board.index, task_id, parent_id)
            except HierarchyCycleError as e:
                raise TaskValidationError(str(e)) from e
            if not legal:
                if parent_id == task_id:
                    raise TaskValidationError("A task cannot be its own parent")
                if parent_id not in self._board.index:
                    raise TaskValidationError(f"Parent task TASK-{parent_id} not found")
                raise TaskValidationError(
                    f"TASK-{parent_id} is a subtask of TASK-{task_id}; "
                    "circular relationships are not allowed"
                )

        return TaskInput(title=title, description=data.description or "", parent_id=parent_id)

    def _keeps_parent(self, task_id: int | None, parent_id: int | None) -> bool:
        """True when an edit leaves the stored parent as it is (an orphan's missing one included)."""
        if task_id is None:
            return False
        current = self._board.get(task_id)
        return current is not None and current.parent_id == parent_id

    def _store_failure(self, op: str, task_id: int | None, e: StoreError) -> OperationResult:
        if isinstance(e, UnauthenticatedError):
            self._board.notify_unauthenticated()
            return OperationResult.failure(user_message(e, MSG_SAVE_FAILED), unauthenticated=True)
        logger.warning("%s_task failed task_id=%s: %s", op, task_id, e)
        return OperationResult.failure(user_message(e, MSG_SAVE_FAILED))
