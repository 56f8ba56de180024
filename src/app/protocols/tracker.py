"""Protocolo do cliente do tracker de execução (tarefas)."""

from __future__ import annotations

from typing import Protocol


class TrackerClientProtocol(Protocol):
    """Operações mínimas do tracker usadas pela projeção."""

    async def create_task(self, name: str, description: str, tags: list[str]) -> str:
        """Cria tarefa e retorna o id."""
        ...

    async def update_task(self, task_id: str, name: str, description: str) -> None:
        """Atualiza nome e descrição de uma tarefa existente."""
        ...

    async def add_comment(self, task_id: str, text: str) -> None:
        """Anota um comentário na tarefa."""
        ...
