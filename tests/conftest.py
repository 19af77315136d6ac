# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.core.state import AppState, build_state
from taskflow.tasks.task_models import TaskStatus

from .fakes import FakeTaskStore, make_task


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskflow-test",
        log_level="DEBUG",
        api_base_url="http://tasks.test/api",
        api_token=None,
        request_timeout_seconds=1.0,
        offline=True,
        data_dir=tmp_path / "data",
    )


@pytest.fixture()
def store() -> FakeTaskStore:
    """
    Seeded store:

        1 Plan release        (to-do)
        └─ 2 Write notes      (to-do)
           └─ 3 Proofread     (in-progress)
        4 Ship v1             (done)
        5 Fix login bug       (to-do)
    """
    return FakeTaskStore(
        tasks=[
            make_task(1, title="Plan release"),
            make_task(2, parent_id=1, title="Write notes"),
            make_task(3, parent_id=2, status=TaskStatus.IN_PROGRESS, title="Proofread"),
            make_task(4, status=TaskStatus.DONE, title="Ship v1"),
            make_task(5, title="Fix login bug"),
        ]
    )


@pytest.fixture()
def state(settings: SimpleNamespace, store: FakeTaskStore) -> AppState:
    """AppState wired around the recording fake store (not yet refreshed)."""
    return build_state(settings, store)
