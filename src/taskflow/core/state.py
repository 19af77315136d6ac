# src/taskflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.board import Board
from ..tasks.task_form import TaskFormCoordinator
from ..tasks.transitions import StatusTransitionController
from .ports import TaskStoreClient


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    store: TaskStoreClient
    board: Board
    mover: StatusTransitionController
    form: TaskFormCoordinator

    # Flipped to False when the store rejects the credential.
    authenticated: bool = True


def build_state(settings: object, store: TaskStoreClient) -> AppState:
    """Wire the core components around one store."""
    board = Board(store)
    state = AppState(
        settings=settings,
        store=store,
        board=board,
        mover=StatusTransitionController(board),
        form=TaskFormCoordinator(board),
    )

    def _logged_out() -> None:
        state.authenticated = False

    board.on_unauthenticated = _logged_out
    return state
