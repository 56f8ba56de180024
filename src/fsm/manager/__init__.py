"""
Exports públicos do módulo fsm/manager.
"""

from fsm.manager.machine import ReceiptStateMachine

__all__ = ["ReceiptStateMachine"]
