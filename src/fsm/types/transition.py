"""
Tipos para transições de estado do Receipt.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fsm.states.receipt import ReceiptState


class InvalidReceiptTransitionError(ValueError):
    """Transição de estado não permitida pela tabela de transições."""

    def __init__(self, from_state: ReceiptState, to_state: ReceiptState) -> None:
        super().__init__(f"Transição inválida: {from_state.name} → {to_state.name}")
        self.from_state = from_state
        self.to_state = to_state


@dataclass(frozen=True, slots=True)
class StateTransition:
    """
    Registro imutável de uma mudança de estado.

    Attributes:
        from_state: Estado de origem
        to_state: Estado de destino
        trigger: Gatilho (ex: 'pre_write', 'retry', 'commit', 'fail')
        metadata: Dados de auditoria (nunca PII)
        timestamp: Momento da transição (UTC)
    """

    from_state: ReceiptState
    to_state: ReceiptState
    trigger: str
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.trigger or not self.trigger.strip():
            raise ValueError("trigger não pode ser vazio")

    def to_log_dict(self) -> dict[str, Any]:
        """Representação segura para logs."""
        return {
            "from_state": self.from_state.name,
            "to_state": self.to_state.name,
            "trigger": self.trigger,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }
