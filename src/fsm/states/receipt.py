"""
Estados canônicos de um Receipt no ledger.

O flag booleano `processed` é derivado destes estados; transições
válidas ficam em fsm/transitions.
"""

from enum import StrEnum


class ReceiptState(StrEnum):
    """
    Estados de processamento de um Receipt.

    - PENDING: receipt gravado (pre-write), pipeline em andamento ou interrompido
    - COMMITTED: escrita canônica confirmada; redelivery vira no-op
    - FAILED: pipeline falhou; erro registrado, replay seguro
    """

    PENDING = "PENDING"
    COMMITTED = "COMMITTED"
    FAILED = "FAILED"

    def __str__(self) -> str:
        return self.value

    @property
    def processed(self) -> bool:
        """Equivalente do flag `processed` do ledger."""
        return self is ReceiptState.COMMITTED


# Uma vez COMMITTED, o receipt nunca volta a outro estado
TERMINAL_STATES: frozenset[ReceiptState] = frozenset({ReceiptState.COMMITTED})

DEFAULT_INITIAL_STATE: ReceiptState = ReceiptState.PENDING


def is_terminal(state: ReceiptState) -> bool:
    """Verifica se o estado é terminal."""
    return state in TERMINAL_STATES


def is_valid_state(value: str) -> bool:
    """Verifica se a string corresponde a um ReceiptState."""
    try:
        ReceiptState(value)
    except ValueError:
        return False
    return True
