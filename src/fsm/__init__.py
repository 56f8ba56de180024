"""
Módulo FSM — máquina de estados dos Receipts do ledger.

Estrutura:
    - states/: ReceiptState (PENDING, COMMITTED, FAILED)
    - transitions/: tabela VALID_TRANSITIONS
    - manager/: ReceiptStateMachine
    - types/: StateTransition, InvalidReceiptTransitionError
"""

from fsm.manager import ReceiptStateMachine
from fsm.states import (
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    ReceiptState,
    is_terminal,
    is_valid_state,
)
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)
from fsm.types import InvalidReceiptTransitionError, StateTransition

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "TERMINAL_STATES",
    "VALID_TRANSITIONS",
    "InvalidReceiptTransitionError",
    "ReceiptState",
    "ReceiptStateMachine",
    "StateTransition",
    "get_valid_targets",
    "is_terminal",
    "is_transition_valid",
    "is_valid_state",
    "validate_transition_map",
]
