# src/taskflow/tasks/ancestry.py

"""
Ancestry resolver: which tasks may become the parent of which.

A parent assignment is legal when it cannot create a cycle:
    legal_parents(T) = all tasks - {T} - descendants_of(T)

Expansion is breadth-first over the child adjacency of a TaskIndex and is
guarded by a visited set, so corrupted stored data (an existing cycle)
raises HierarchyCycleError instead of looping.
"""

from __future__ import annotations

import logging
from collections import deque

from .task_errors import HierarchyCycleError
from .task_index import TaskIndex
from .task_models import Task

logger = logging.getLogger(__name__)


def descendants_of(index: TaskIndex, task_id: int) -> set[int]:
    """Ids reachable from task_id through parent_id == id edges (task_id excluded)."""
    found: set[int] = set()
    queue: deque[int] = deque(index.child_ids(task_id))

    while queue:
        cid = queue.popleft()
        if cid == task_id or cid in found:
            logger.error("Parent cycle detected under task_id=%s at task_id=%s", task_id, cid)
            raise HierarchyCycleError(task_id, cid)
        found.add(cid)
        queue.extend(index.child_ids(cid))

    return found


def legal_parents(index: TaskIndex, task_id: int | None) -> list[Task]:
    """
    Candidate parents for the task being edited, in flattened order.

    task_id=None means a new task: it has no descendants yet, so every
    existing task is a legal parent.
    """
    if task_id is None:
        return _unique(index.flat)

    excluded = descendants_of(index, task_id)
    excluded.add(task_id)
    return [t for t in _unique(index.flat) if t.id not in excluded]


def is_legal_parent(index: TaskIndex, task_id: int | None, parent_id: int | None) -> bool:
    if parent_id is None:
        return True
    if parent_id not in index:
        return False
    if task_id is None:
        return True
    if parent_id == task_id:
        return False
    return parent_id not in descendants_of(index, task_id)


def ancestors_of(index: TaskIndex, task_id: int) -> list[int]:
    """Parent chain of task_id, nearest first. Stops at a missing parent."""
    chain: list[int] = []
    seen = {task_id}
    task = index.get(task_id)
    while task is not None and task.parent_id is not None:
        pid = task.parent_id
        if pid in seen:
            raise HierarchyCycleError(task_id, pid)
        seen.add(pid)
        parent = index.get(pid)
        if parent is None:
            break
        chain.append(pid)
        task = parent
    return chain


def _unique(tasks: list[Task]) -> list[Task]:
    seen: set[int] = set()
    out: list[Task] = []
    for t in tasks:
        if t.id in seen:
            continue
        seen.add(t.id)
        out.append(t)
    return out
