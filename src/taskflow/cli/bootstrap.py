# src/taskflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the task store (HTTP API, or the in-memory demo store when offline),
- wires the board, transition controller and form coordinator into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import TaskStoreClient
from ..core.state import AppState, build_state
from ..store.client import HttpTaskStore
from ..store.offline import InMemoryTaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_store(settings) -> TaskStoreClient:
    if getattr(settings, "offline", False):
        logger.info("Offline mode: using in-memory task store")
        return InMemoryTaskStore()
    logger.info("Using task API at %s", settings.api_base_url)
    return HttpTaskStore.from_settings(settings)


def create_initial_state(*, settings=None, store: TaskStoreClient | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the store) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to
    get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if store is None:
        store = create_store(settings)

    return build_state(settings, store)


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    state.form.close()
    state.mover.cancel_drag()
    try:
        await state.store.aclose()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)
