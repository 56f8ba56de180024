"""Client HTTP do tracker de execução (API compatível com ClickUp v2).

Endpoints usados:
- POST /list/{list_id}/task      cria tarefa
- PUT  /task/{task_id}           atualiza nome/descrição
- POST /task/{task_id}/comment   anota comentário
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.observability import get_correlation_id
from app.protocols.tracker import TrackerClientProtocol
from utils.errors import ExternalServiceError

logger = logging.getLogger(__name__)

_COMPONENT = "tracker_client"


class TrackerHttpClient(TrackerClientProtocol):
    """Implementação do protocolo de tracker via httpx.

    Args:
        http_client: Cliente HTTP async compartilhado
        base_url: URL base da API (sem barra final)
        api_token: Token enviado no header Authorization
        list_id: Lista onde as tarefas são criadas
        timeout_seconds: Timeout por requisição
    """

    __slots__ = ("_base_url", "_http", "_list_id", "_timeout", "_token")

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_token: str,
        list_id: str,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._token = api_token
        self._list_id = list_id
        self._timeout = timeout_seconds

    async def create_task(self, name: str, description: str, tags: list[str]) -> str:
        data = await self._request(
            "POST",
            f"/list/{self._list_id}/task",
            {"name": name, "markdown_content": description, "tags": tags},
            action="create_task",
        )
        task_id = data.get("id")
        if not task_id:
            raise ExternalServiceError("Resposta do tracker sem id de tarefa", service="tracker")
        return str(task_id)

    async def update_task(self, task_id: str, name: str, description: str) -> None:
        await self._request(
            "PUT",
            f"/task/{task_id}",
            {"name": name, "markdown_content": description},
            action="update_task",
        )

    async def add_comment(self, task_id: str, text: str) -> None:
        await self._request(
            "POST",
            f"/task/{task_id}/comment",
            {"comment_text": text, "notify_all": False},
            action="add_comment",
        )

    async def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any],
        *,
        action: str,
    ) -> dict[str, Any]:
        headers = {"Authorization": self._token, "Content-Type": "application/json"}
        try:
            response = await self._http.request(
                method,
                f"{self._base_url}{path}",
                json=payload,
                headers=headers,
                timeout=self._timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            self._log_error(action=action, status_code=status_code, exc=exc)
            raise ExternalServiceError(
                f"Tracker respondeu {status_code}", service="tracker", status_code=status_code
            ) from exc
        except httpx.HTTPError as exc:
            self._log_error(action=action, status_code=None, exc=exc)
            raise ExternalServiceError("Falha de conexão com o tracker", service="tracker") from exc

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise ExternalServiceError("Resposta do tracker não é JSON", service="tracker") from exc
        return data if isinstance(data, dict) else {}

    def _log_error(self, *, action: str, status_code: int | None, exc: Exception) -> None:
        logger.error(
            "tracker_http_error",
            extra={
                "component": _COMPONENT,
                "action": action,
                "status_code": status_code,
                "error_type": type(exc).__name__,
                "correlation_id": get_correlation_id(),
            },
        )
