"""httpx-backed transport to the task REST service.

Every failure (non-2xx status, timeout, connection problem, malformed body)
surfaces as ``TransportError``; a 404 surfaces as ``NotFoundError``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from taskboard.app.config import get_settings
from taskboard.core.errors import GENERIC_ERROR_MESSAGE, NotFoundError, TransportError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pick the server-supplied message out of an error body, if any."""
    try:
        data = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE
    if not isinstance(data, dict):
        return GENERIC_ERROR_MESSAGE
    message = data.get("message")
    if isinstance(message, str) and message:
        return message
    detail = data.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list) and detail:
        first = detail[0]
        if isinstance(first, dict) and first.get("msg"):
            return str(first["msg"]).removeprefix("Value error, ")
    return GENERIC_ERROR_MESSAGE


class HttpTaskTransport:
    """Talks to ``/api/tasks`` on the task service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        settings = get_settings()
        if client is None:
            client = httpx.AsyncClient(
                base_url=(base_url or settings.api_base_url).rstrip("/"),
                timeout=timeout if timeout is not None else settings.http_timeout_seconds,
            )
        self._client = client

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("task service timeout method=%s url=%s", method, url)
            raise TransportError("Request timed out", cause=exc) from exc
        except httpx.HTTPError as exc:
            logger.warning("task service unreachable method=%s url=%s: %s", method, url, exc)
            raise TransportError(f"Could not reach the task service: {exc}", cause=exc) from exc

        if response.status_code == 404:
            raise NotFoundError(_error_message(response))
        if response.is_error:
            message = _error_message(response)
            logger.info(
                "task service rejected method=%s url=%s status=%s message=%s",
                method,
                url,
                response.status_code,
                message,
            )
            raise TransportError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError("Invalid response from the task service", cause=exc) from exc

    async def list(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/api/tasks")
        if not isinstance(data, list):
            raise TransportError("Invalid response from the task service")
        return data

    async def _record(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        data = await self._request(method, url, **kwargs)
        if not isinstance(data, dict):
            raise TransportError("Invalid response from the task service")
        return data

    async def get(self, task_id: str) -> dict[str, Any]:
        return await self._record("GET", f"/api/tasks/{task_id}")

    async def create(self, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._record("POST", "/api/tasks", json=fields)

    async def update(self, task_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._record("PUT", f"/api/tasks/{task_id}", json=fields)

    async def delete(self, task_id: str) -> None:
        await self._request("DELETE", f"/api/tasks/{task_id}")

    async def aclose(self) -> None:
        await self._client.aclose()
