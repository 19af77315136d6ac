# tests/test_kanban.py

from __future__ import annotations

from taskflow.tasks.kanban import LANES, by_status, lane_for, partition
from taskflow.tasks.task_models import TaskStatus

from .fakes import make_task


def _tasks():
    return [
        make_task(1, status=TaskStatus.DONE),
        make_task(2),
        make_task(3, status=TaskStatus.IN_PROGRESS),
        make_task(4),
        make_task(5, status=TaskStatus.DONE),
    ]


def test_partition_is_disjoint_and_exhaustive() -> None:
    tasks = _tasks()
    lanes = partition(tasks)

    assert set(lanes) == set(LANES)
    ids = [t.id for lane in lanes.values() for t in lane]
    assert sorted(ids) == [1, 2, 3, 4, 5]
    assert len(ids) == len(set(ids))


def test_lane_keeps_input_order() -> None:
    tasks = _tasks()
    assert [t.id for t in by_status(tasks, TaskStatus.TODO)] == [2, 4]
    assert [t.id for t in by_status(tasks, TaskStatus.DONE)] == [1, 5]


def test_empty_lanes_are_present() -> None:
    lanes = partition([make_task(1)])
    assert lanes[TaskStatus.IN_PROGRESS] == []
    assert lanes[TaskStatus.DONE] == []


def test_overrides_move_task_between_lanes() -> None:
    tasks = _tasks()
    lanes = partition(tasks, {2: TaskStatus.DONE})

    assert [t.id for t in lanes[TaskStatus.TODO]] == [4]
    assert [t.id for t in lanes[TaskStatus.DONE]] == [1, 2, 5]


def test_lane_for_aliases() -> None:
    assert lane_for("ip") is TaskStatus.IN_PROGRESS
    assert lane_for("In Progress") is TaskStatus.IN_PROGRESS
    assert lane_for("to_do") is TaskStatus.TODO
    assert lane_for("d") is TaskStatus.DONE
    assert lane_for("later") is None
    assert lane_for("") is None


def test_status_parse_accepts_wire_spelling() -> None:
    assert TaskStatus.parse("to do") is TaskStatus.TODO
    assert TaskStatus.IN_PROGRESS.to_wire() == "in progress"
