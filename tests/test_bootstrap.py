# tests/test_bootstrap.py

from __future__ import annotations

import pytest

from taskflow.cli.bootstrap import create_initial_state, create_store, shutdown_state
from taskflow.store.client import HttpTaskStore
from taskflow.store.offline import InMemoryTaskStore


def test_offline_settings_pick_in_memory_store(settings) -> None:
    assert isinstance(create_store(settings), InMemoryTaskStore)


@pytest.mark.asyncio
async def test_online_settings_pick_http_store(settings) -> None:
    settings.offline = False
    settings.api_token = "abc"

    store = create_store(settings)

    assert isinstance(store, HttpTaskStore)
    assert store.base_url == "http://tasks.test/api"
    assert store.token == "abc"
    await store.aclose()


@pytest.mark.asyncio
async def test_initial_state_creates_data_dir_and_shuts_down(settings) -> None:
    state = create_initial_state(settings=settings)

    assert settings.data_dir.is_dir()
    assert state.authenticated
    assert (await state.board.refresh()).ok

    state.form.open_create()
    await shutdown_state(state)
    assert state.form.session is None
