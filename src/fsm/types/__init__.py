"""
Exports públicos do módulo fsm/types.
"""

from fsm.types.transition import InvalidReceiptTransitionError, StateTransition

__all__ = [
    "InvalidReceiptTransitionError",
    "StateTransition",
]
