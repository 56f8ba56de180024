"""
Regras de transição válidas entre estados do Receipt.

PENDING → PENDING e FAILED → PENDING representam uma nova tentativa do
pipeline (redelivery/resubmissão do mesmo eventId). COMMITTED é terminal:
COMMITTED → PENDING não é representável.
"""

from fsm.states.receipt import TERMINAL_STATES, ReceiptState

TransitionMap = dict[ReceiptState, frozenset[ReceiptState]]

VALID_TRANSITIONS: TransitionMap = {
    ReceiptState.PENDING: frozenset({
        ReceiptState.PENDING,
        ReceiptState.COMMITTED,
        ReceiptState.FAILED,
    }),
    ReceiptState.FAILED: frozenset({
        ReceiptState.PENDING,
        ReceiptState.COMMITTED,
        ReceiptState.FAILED,
    }),
    ReceiptState.COMMITTED: frozenset(),
}


def get_valid_targets(state: ReceiptState) -> frozenset[ReceiptState]:
    """Retorna os estados de destino válidos (vazio se terminal)."""
    return VALID_TRANSITIONS.get(state, frozenset())


def is_transition_valid(from_state: ReceiptState, to_state: ReceiptState) -> bool:
    """Verifica se a transição é permitida pela tabela."""
    if from_state in TERMINAL_STATES:
        return False
    return to_state in get_valid_targets(from_state)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade do mapa de transições.

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for state in ReceiptState:
        if state not in VALID_TRANSITIONS:
            errors.append(f"Estado {state.name} ausente em VALID_TRANSITIONS")

    for state in TERMINAL_STATES:
        if VALID_TRANSITIONS.get(state, frozenset()):
            errors.append(f"Estado terminal {state.name} não deveria ter transições")

    for from_state, targets in VALID_TRANSITIONS.items():
        for target in targets:
            if not isinstance(target, ReceiptState):
                errors.append(f"Transição {from_state.name} → {target}: destino inválido")

    return errors
