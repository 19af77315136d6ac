# src/taskflow/tasks/kanban.py

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .task_models import Task, TaskStatus

LANES: tuple[TaskStatus, ...] = (TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE)

LANE_TITLES: dict[TaskStatus, str] = {
    TaskStatus.TODO: "TO DO",
    TaskStatus.IN_PROGRESS: "IN PROGRESS",
    TaskStatus.DONE: "DONE",
}

LANE_ALIASES: dict[str, TaskStatus] = {
    "t": TaskStatus.TODO,
    "todo": TaskStatus.TODO,
    "to-do": TaskStatus.TODO,
    "ip": TaskStatus.IN_PROGRESS,
    "progress": TaskStatus.IN_PROGRESS,
    "in-progress": TaskStatus.IN_PROGRESS,
    "d": TaskStatus.DONE,
    "done": TaskStatus.DONE,
}


def lane_for(name: str | None) -> TaskStatus | None:
    """Resolve a user-typed lane name; None when it names no lane."""
    if not name:
        return None
    key = name.strip().lower().replace(" ", "-").replace("_", "-")
    return LANE_ALIASES.get(key)


def effective_status(task: Task, overrides: Mapping[int, TaskStatus] | None = None) -> TaskStatus:
    if overrides:
        return overrides.get(task.id, task.status)
    return task.status


def by_status(
    tasks: Iterable[Task],
    status: TaskStatus,
    overrides: Mapping[int, TaskStatus] | None = None,
) -> list[Task]:
    """Subsequence of tasks in the given lane, order preserved."""
    return [t for t in tasks if effective_status(t, overrides) == status]


def partition(
    tasks: Iterable[Task],
    overrides: Mapping[int, TaskStatus] | None = None,
) -> dict[TaskStatus, list[Task]]:
    """
    Disjoint, exhaustive split into the three lanes.

    One pass; every task lands in exactly one lane because status is a
    closed enum.
    """
    lanes: dict[TaskStatus, list[Task]] = {s: [] for s in LANES}
    for t in tasks:
        lanes[effective_status(t, overrides)].append(t)
    return lanes
