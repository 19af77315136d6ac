# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the remote store swappable (HTTP API, in-memory demo store)
and makes testing easier.
"""

from typing import Any, Awaitable, Callable, Protocol

from ..tasks.task_models import Task, TaskInput, TaskUpdate

UnauthenticatedHook = Callable[[], None]
# Called when the store reports that the credential is invalid or expired.


class TaskStoreClient(Protocol):
    """
    Remote source of truth for tasks.

    Failures are raised, never returned:
    - StoreError for any remote failure,
    - UnauthenticatedError (a StoreError) when the credential is rejected.
    Implementations must not retry on their own.
    """

    def list_tasks(self, status: Any | None = None) -> Awaitable[list[Task]]: ...
    # Returns the forest: root tasks with nested children.

    def create_task(self, data: TaskInput) -> Awaitable[Task]: ...

    def update_task(self, task_id: int, data: TaskUpdate) -> Awaitable[Task]: ...

    def delete_task(self, task_id: int) -> Awaitable[None]: ...

    def aclose(self) -> Awaitable[None]: ...
