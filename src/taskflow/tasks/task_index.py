# src/taskflow/tasks/task_index.py

"""
Flattened, read-only view of one fetched forest.

The forest as returned by the store nests children under their parents.
The index keeps an arena of tasks keyed by id plus an id -> child ids
adjacency built from `parent_id`, so nothing in the core holds a
parent <-> child object cycle.

Key invariants:
- `flat` is pre-order: each parent is immediately followed by its subtree,
- every task of the input appears in `flat` exactly once per occurrence
  (duplicate ids are not deduplicated; the store guarantees uniqueness),
- a task whose parent_id does not resolve is treated as a root ("orphan").

An index lives for exactly one fetch cycle and is rebuilt on every refresh.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import replace

from .task_models import Task


def flatten(forest: Iterable[Task]) -> list[Task]:
    """Pre-order flattening with an explicit stack (no recursion limit)."""
    out: list[Task] = []
    stack: list[Task] = list(reversed(list(forest)))
    while stack:
        task = stack.pop()
        out.append(task)
        if task.children:
            stack.extend(reversed(task.children))
    return out


class TaskIndex:
    def __init__(self, forest: Sequence[Task] = ()) -> None:
        self._forest: tuple[Task, ...] = tuple(forest)
        self._flat: list[Task] = flatten(self._forest)
        self._by_id: dict[int, Task] = {t.id: t for t in self._flat}
        self._children: dict[int, list[int]] = {}

        seen: set[int] = set()
        for task in self._flat:
            if task.id in seen or task.parent_id is None:
                continue
            seen.add(task.id)
            self._children.setdefault(task.parent_id, []).append(task.id)

    @classmethod
    def from_flat(cls, tasks: Iterable[Task]) -> TaskIndex:
        """Build an index from childless tasks, nesting them by parent_id."""
        return cls(build_forest(tasks))

    # ---- lookups ----

    @property
    def forest(self) -> tuple[Task, ...]:
        return self._forest

    @property
    def flat(self) -> list[Task]:
        return list(self._flat)

    def __len__(self) -> int:
        return len(self._flat)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._flat)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._by_id

    def get(self, task_id: int) -> Task | None:
        return self._by_id.get(task_id)

    def ids(self) -> list[int]:
        return [t.id for t in self._flat]

    def child_ids(self, task_id: int) -> list[int]:
        return list(self._children.get(task_id, ()))

    def children_of(self, task_id: int) -> list[Task]:
        return [self._by_id[cid] for cid in self._children.get(task_id, ())]

    def parent_of(self, task: Task) -> Task | None:
        if task.parent_id is None:
            return None
        return self._by_id.get(task.parent_id)

    def is_orphan(self, task: Task) -> bool:
        return task.parent_id is not None and task.parent_id not in self._by_id

    def roots(self) -> list[Task]:
        """Tasks without a resolvable parent, in flattened order."""
        out: list[Task] = []
        seen: set[int] = set()
        for task in self._flat:
            if task.id in seen:
                continue
            seen.add(task.id)
            if task.parent_id is None or task.parent_id not in self._by_id:
                out.append(task)
        return out

    # ---- derived structures ----

    def rebuild_forest(self) -> list[Task]:
        """Regroup the flat set by parent_id (inverse of flatten)."""
        return build_forest(self._by_id[tid] for tid in self._unique_ids())

    def with_task(self, updated: Task) -> TaskIndex:
        """
        Copy of this index with one task's own fields replaced.

        The nested children of the existing task are kept: single-task store
        responses are not guaranteed to carry them. Used to apply an
        authoritative update result before the next refetch lands.
        """
        if updated.id not in self._by_id:
            return self
        flat = [
            replace(updated, children=()) if t.id == updated.id else t.without_children()
            for t in self._flat
        ]
        return TaskIndex.from_flat(flat)

    def _unique_ids(self) -> list[int]:
        seen: set[int] = set()
        out: list[int] = []
        for task in self._flat:
            if task.id not in seen:
                seen.add(task.id)
                out.append(task.id)
        return out


def build_forest(tasks: Iterable[Task]) -> list[Task]:
    """
    Nest tasks under their parents by parent_id, keeping input order.

    Input children are ignored. Tasks whose parent is missing become roots.
    Tasks caught in a parent cycle are unreachable from any root and are
    dropped; descendants_of() reports such data explicitly.
    """
    items = [t.without_children() for t in tasks]
    known = {t.id for t in items}
    kids: dict[int | None, list[Task]] = {}
    for t in items:
        parent = t.parent_id if t.parent_id in known else None
        kids.setdefault(parent, []).append(t)

    # Post-order assembly without recursion: children must be built first.
    built: dict[int, Task] = {}
    order: list[Task] = []
    stack: list[Task] = list(reversed(kids.get(None, [])))
    visited: set[int] = set()
    while stack:
        t = stack.pop()
        if t.id in visited:
            continue
        visited.add(t.id)
        order.append(t)
        stack.extend(reversed(kids.get(t.id, [])))

    for t in reversed(order):
        children = tuple(built[c.id] for c in kids.get(t.id, []) if c.id in built)
        built[t.id] = replace(t, children=children)

    return [built[t.id] for t in kids.get(None, []) if t.id in built]
