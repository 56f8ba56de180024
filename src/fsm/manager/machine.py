"""
Máquina de estados de um Receipt.

Aplica a tabela de transições e mantém histórico rastreável da
execução corrente do pipeline.
"""

from typing import Any

from fsm.states.receipt import DEFAULT_INITIAL_STATE, ReceiptState, is_terminal
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import InvalidReceiptTransitionError, StateTransition


class ReceiptStateMachine:
    """
    Máquina de estados de um Receipt.

    Attributes:
        current_state: Estado atual
        history: Transições realizadas nesta instância
    """

    __slots__ = ("_current_state", "_history", "_receipt_key")

    def __init__(
        self,
        initial_state: ReceiptState | None = None,
        receipt_key: str = "",
    ) -> None:
        self._current_state = initial_state or DEFAULT_INITIAL_STATE
        self._history: list[StateTransition] = []
        self._receipt_key = receipt_key

    @property
    def current_state(self) -> ReceiptState:
        """Estado atual da máquina."""
        return self._current_state

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia)."""
        return list(self._history)

    @property
    def receipt_key(self) -> str:
        """Chave lógica do receipt (receipts/{source}/{eventId})."""
        return self._receipt_key

    @property
    def is_terminal(self) -> bool:
        """Verifica se está em estado terminal."""
        return is_terminal(self._current_state)

    def can_transition_to(self, target: ReceiptState) -> bool:
        """Verifica se pode transitar para o estado alvo."""
        return is_transition_valid(self._current_state, target)

    def get_valid_targets(self) -> frozenset[ReceiptState]:
        """Estados de destino válidos a partir do atual."""
        return get_valid_targets(self._current_state)

    def transition(
        self,
        target: ReceiptState,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> StateTransition:
        """
        Realiza a transição ou levanta erro.

        Raises:
            InvalidReceiptTransitionError: Se a tabela não permite a transição
        """
        if not is_transition_valid(self._current_state, target):
            raise InvalidReceiptTransitionError(self._current_state, target)

        transition = StateTransition(
            from_state=self._current_state,
            to_state=target,
            trigger=trigger,
            metadata=metadata or {},
        )
        self._current_state = target
        self._history.append(transition)
        return transition

    def get_state_summary(self) -> dict[str, Any]:
        """Resumo do estado atual para observability."""
        return {
            "receipt_key": self._receipt_key,
            "current_state": self._current_state.name,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
        }
