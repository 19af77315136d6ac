# src/taskflow/tasks/transitions.py

"""
Status transitions (direct moves and drag-and-drop).

The lane state machine is unrestricted: any status may move to
any other one, backwards included. A move:
- is skipped when the target equals the current lane (no request),
- shows the task in the target lane at once (optimistic overlay),
- sends a status-only update to the store,
- on success adopts the returned task and refetches,
- on failure rolls the overlay back and refetches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .board import Board
from .kanban import LANE_TITLES
from .task_errors import StoreError, UnauthenticatedError, user_message
from .task_models import OperationResult, Task, TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)

MSG_MOVE_FAILED = "Failed to update task status"


@dataclass(slots=True, frozen=True)
class DragSession:
    """Exactly one dragged task, captured when the drag starts."""

    task: Task


class StatusTransitionController:
    def __init__(self, board: Board) -> None:
        self._board = board
        self._drag: DragSession | None = None

    @property
    def drag(self) -> DragSession | None:
        return self._drag

    async def move_task(self, task: Task, new_status: TaskStatus | str) -> OperationResult:
        try:
            target = new_status if isinstance(new_status, TaskStatus) else TaskStatus.parse(new_status)
        except ValueError as e:
            return OperationResult.failure(str(e))

        current = self._board.status_of(self._board.get(task.id) or task)
        if target == current:
            logger.debug("Move skipped task_id=%s already in %s", task.id, target)
            result = OperationResult.success(f"{task.label} is already in {LANE_TITLES[target]}")
            result.skipped = True
            return result

        self._board.apply_optimistic(task.id, target)
        logger.info("Moving task_id=%s %s -> %s", task.id, current, target)

        try:
            updated = await self._board.store.update_task(task.id, TaskUpdate(status=target))
        except UnauthenticatedError as e:
            self._board.rollback(task.id)
            self._board.notify_unauthenticated()
            return OperationResult.failure(user_message(e, MSG_MOVE_FAILED), unauthenticated=True)
        except StoreError as e:
            logger.warning("Move failed task_id=%s -> %s: %s", task.id, target, e)
            self._board.rollback(task.id)
            await self._board.refresh()
            return OperationResult.failure(MSG_MOVE_FAILED)

        self._board.apply_authoritative(updated)
        await self._board.refresh()
        return OperationResult.success(f"Task moved to {target.value}!", task=updated)

    # ---- drag and drop ----

    def start_drag(self, task: Task) -> DragSession:
        """Begin dragging a task. A new drag replaces an unfinished one."""
        if self._drag is not None:
            logger.debug("Replacing unfinished drag of task_id=%s", self._drag.task.id)
        self._drag = DragSession(task=task)
        return self._drag

    def cancel_drag(self) -> None:
        self._drag = None

    async def drop(self, lane: TaskStatus | None) -> OperationResult | None:
        """
        Finish the drag session on a lane.

        lane=None means the task was released outside any lane: the session
        is abandoned without a mutation. Returns None when nothing was being
        dragged or the drag was abandoned.
        """
        session = self._drag
        self._drag = None
        if session is None:
            return None
        if lane is None:
            logger.debug("Drag of task_id=%s abandoned outside lanes", session.task.id)
            return None
        return await self.move_task(session.task, lane)
