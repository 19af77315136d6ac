# src/taskflow/store/client.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..tasks.task_errors import StoreError, UnauthenticatedError
from ..tasks.task_models import Task, TaskInput, TaskStatus, TaskUpdate, task_from_payload

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api"


@dataclass(slots=True, frozen=True)
class LoginResult:
    token: str
    user_id: int | None


def _error_message(response: httpx.Response) -> str | None:
    """The API reports failures as {"error": "..."}; anything else has no user message."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        msg = body.get("error") or body.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return None


def _make_timeout(seconds: float) -> httpx.Timeout:
    connect = min(5.0, seconds)
    return httpx.Timeout(seconds, connect=connect)


class HttpTaskStore:
    """
    TaskStoreClient over the board's REST API.

    Endpoints (relative to base_url):
      GET    /tasks[?status=]   -> {"tasks": [...]}   (forest, nested "sub_tasks")
      POST   /tasks             -> {"task": {...}}
      PUT    /tasks/{id}        -> {"task": {...}}
      DELETE /tasks/{id}
      POST   /login             -> {"token": "...", "user_id": N}

    IMPORTANT:
    - HTTP 401 is raised as UnauthenticatedError; nothing is retried.
    - the bearer token lives only in memory; storing it is the caller's concern.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        token: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Content-Type": "application/json"},
            timeout=_make_timeout(float(timeout_seconds)),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings) -> HttpTaskStore:
        return cls(
            getattr(settings, "api_base_url", DEFAULT_BASE_URL),
            token=getattr(settings, "api_token", None),
            timeout_seconds=float(getattr(settings, "request_timeout_seconds", 10.0)),
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- transport ----

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out", method, path)
            raise StoreError(detail=f"request timed out: {e}") from e
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise StoreError(detail=f"request failed: {e}") from e

        if response.status_code == 401:
            logger.info("%s %s -> 401 unauthenticated", method, path)
            raise UnauthenticatedError(_error_message(response))

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            msg = _error_message(response)
            logger.warning("%s %s -> %s %s", method, path, response.status_code, msg or "")
            raise StoreError(
                msg,
                status_code=response.status_code,
                detail=f"HTTP {response.status_code}",
            ) from e

        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise StoreError(detail="response is not JSON") from e
        if not isinstance(body, dict):
            raise StoreError(detail="unexpected response shape")
        return body

    @staticmethod
    def _decode_task(raw: Any) -> Task:
        if not isinstance(raw, dict):
            raise StoreError(detail="task payload is not an object")
        try:
            return task_from_payload(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Undecodable task payload: %s", e)
            raise StoreError(detail=f"bad task payload: {e}") from e

    # ---- TaskStoreClient ----

    async def list_tasks(self, status: TaskStatus | str | None = None) -> list[Task]:
        params: dict[str, str] = {}
        if status is not None:
            st = status if isinstance(status, TaskStatus) else TaskStatus.parse(status)
            params["status"] = st.to_wire()

        body = self._json(await self._request("GET", "/tasks", params=params))
        raw_tasks = body.get("tasks") or []
        if not isinstance(raw_tasks, list):
            raise StoreError(detail="tasks is not a list")
        tasks = [self._decode_task(t) for t in raw_tasks]
        logger.debug("Fetched %d root tasks", len(tasks))
        return tasks

    async def create_task(self, data: TaskInput) -> Task:
        body = self._json(await self._request("POST", "/tasks", json=data.to_payload()))
        return self._decode_task(body.get("task"))

    async def update_task(self, task_id: int, data: TaskUpdate) -> Task:
        body = self._json(
            await self._request("PUT", f"/tasks/{int(task_id)}", json=data.to_payload())
        )
        return self._decode_task(body.get("task"))

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", f"/tasks/{int(task_id)}")

    # ---- auth ----

    async def login(self, username: str, password: str) -> LoginResult:
        body = self._json(
            await self._request("POST", "/login", json={"username": username, "password": password})
        )
        token = body.get("token")
        if not isinstance(token, str) or not token:
            raise StoreError(detail="login response has no token")
        user_raw = body.get("user_id")
        self.token = token
        logger.info("Logged in user_id=%s", user_raw)
        return LoginResult(token=token, user_id=int(user_raw) if user_raw is not None else None)

    def logout(self) -> None:
        self.token = None
