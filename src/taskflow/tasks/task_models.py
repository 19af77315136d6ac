# src/taskflow/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Kanban lane of a task.

    Notes:
    - transitions are unrestricted (any lane -> any other lane),
    - the remote API spells the values with a space ("to do", "in progress");
      use to_wire()/parse() at the boundary.
    """

    TODO = "to-do"
    IN_PROGRESS = "in-progress"
    DONE = "done"

    @classmethod
    def parse(cls, raw: str | None) -> TaskStatus:
        """Accept canonical and wire spellings; anything else is a ValueError."""
        if not raw:
            raise ValueError("empty task status")
        key = raw.strip().lower().replace(" ", "-").replace("_", "-")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"unknown task status: {raw!r}") from None

    def to_wire(self) -> str:
        return self.value.replace("-", " ")


@dataclass(slots=True, frozen=True)
class Task:
    id: int
    owner_id: int | None
    title: str
    status: TaskStatus = TaskStatus.TODO
    parent_id: int | None = None
    description: str = ""

    created_at: str | None = None
    updated_at: str | None = None

    children: tuple[Task, ...] = ()

    @property
    def label(self) -> str:
        return f"TASK-{self.id}"

    def without_children(self) -> Task:
        return replace(self, children=())


@dataclass(slots=True, frozen=True)
class TaskInput:
    """Create request: the store assigns id, owner, status and timestamps."""

    title: str
    description: str = ""
    parent_id: int | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": self.title, "description": self.description}
        if self.parent_id is not None:
            payload["parent_id"] = self.parent_id
        return payload


@dataclass(slots=True, frozen=True)
class TaskUpdate:
    """
    Partial update. Only fields that are set are sent.

    parent_id is sent only when set_parent is True, so "make it a root task"
    (parent_id=None, set_parent=True) differs from "leave the parent alone".
    """

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    parent_id: int | None = None
    set_parent: bool = False

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.title is not None:
            payload["title"] = self.title
        if self.description is not None:
            payload["description"] = self.description
        if self.status is not None:
            payload["status"] = self.status.to_wire()
        if self.set_parent:
            payload["parent_id"] = self.parent_id
        return payload

    def is_empty(self) -> bool:
        return not self.to_payload()


@dataclass(slots=True)
class OperationResult:
    """What the presentation layer gets back from every mutating operation."""

    ok: bool
    message: str
    unauthenticated: bool = False
    task: Task | None = None
    skipped: bool = False

    @classmethod
    def success(cls, message: str, *, task: Task | None = None) -> OperationResult:
        return cls(ok=True, message=message, task=task)

    @classmethod
    def failure(cls, message: str, *, unauthenticated: bool = False) -> OperationResult:
        return cls(ok=False, message=message, unauthenticated=unauthenticated)


def task_from_payload(raw: dict[str, Any]) -> Task:
    """
    Decode one task (and its nested sub_tasks) from the remote JSON shape.

    Raises ValueError/TypeError/KeyError on malformed input; adapters wrap it.
    """
    subs = raw.get("sub_tasks") or raw.get("children") or []
    if not isinstance(subs, list):
        raise TypeError("sub_tasks must be a list")

    title = raw.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValueError(f"task {raw.get('id')!r} has no title")
    status = raw.get("status")
    if not isinstance(status, str):
        raise ValueError(f"task {raw.get('id')!r} has no status")

    parent_raw = raw.get("parent_id")
    owner_raw = raw.get("user_id", raw.get("owner_id"))

    return Task(
        id=int(raw["id"]),
        owner_id=int(owner_raw) if owner_raw is not None else None,
        title=title,
        status=TaskStatus.parse(status),
        parent_id=int(parent_raw) if parent_raw is not None else None,
        description=str(raw.get("description") or ""),
        created_at=raw.get("created_at"),
        updated_at=raw.get("updated_at"),
        children=tuple(task_from_payload(s) for s in subs),
    )


def task_to_payload(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "user_id": task.owner_id,
        "parent_id": task.parent_id,
        "title": task.title,
        "description": task.description,
        "status": task.status.to_wire(),
        "created_at": task.created_at,
        "updated_at": task.updated_at,
        "sub_tasks": [task_to_payload(c) for c in task.children],
    }
