# src/taskflow/tasks/task_errors.py

"""
Error taxonomy shared by the core and the store adapters.

- TaskValidationError: rejected locally, never sent to the store.
- StoreError: any remote failure (network, server, not found, bad payload).
- UnauthenticatedError: the store rejected the credential; the session must
  be treated as logged out. Never retried automatically.
- HierarchyCycleError: the stored parent relation already contains a cycle.
"""

from __future__ import annotations


class TaskValidationError(ValueError):
    pass


class HierarchyCycleError(RuntimeError):
    def __init__(self, task_id: int, repeated_id: int) -> None:
        super().__init__(
            f"Task hierarchy contains a cycle (TASK-{repeated_id} reached again "
            f"while expanding TASK-{task_id})"
        )
        self.task_id = task_id
        self.repeated_id = repeated_id


class StoreError(Exception):
    """
    Remote failure.

    `message` is the store's own human-readable message (if it sent one);
    it is shown to the user verbatim. `status_code` is informational only.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message or detail or "task store request failed")
        self.message = message
        self.status_code = status_code


class UnauthenticatedError(StoreError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, status_code=401)


def user_message(exc: StoreError, fallback: str) -> str:
    """The store's message when present, else the caller's generic text."""
    msg = (exc.message or "").strip()
    return msg or fallback
