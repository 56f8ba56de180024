"""Settings do Firestore.

Nomes de collections do ledger, dos documentos canônicos e do throttle.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class FirestoreSettings:
    """Configurações do Firestore.

    Attributes:
        project_id: ID do projeto GCP (usa GCP_PROJECT se vazio)
        collection_receipts: Collection raiz do ledger de receipts
        collection_accounts: Collection de Accounts
        collection_orders: Collection de Orders
        collection_support: Collection de tickets de suporte
        collection_payment_refs: Collection de vínculos pagamento → order
        collection_throttle: Collection de estado do throttle
    """

    project_id: str = ""
    collection_receipts: str = "receipts"
    collection_accounts: str = "accounts"
    collection_orders: str = "orders"
    collection_support: str = "support"
    collection_payment_refs: str = "payment_refs"
    collection_throttle: str = "throttle"

    def validate(self, gcp_project: str) -> list[str]:
        """Valida que existe projeto efetivo configurado."""
        if not (self.project_id or gcp_project):
            return ["FIRESTORE_PROJECT_ID ou GCP_PROJECT deve estar configurado"]
        return []


def load_firestore_settings() -> FirestoreSettings:
    """Carrega FirestoreSettings de variáveis de ambiente."""
    return FirestoreSettings(
        project_id=os.getenv("FIRESTORE_PROJECT_ID", ""),
        collection_receipts=os.getenv("FIRESTORE_COLLECTION_RECEIPTS", "receipts"),
        collection_accounts=os.getenv("FIRESTORE_COLLECTION_ACCOUNTS", "accounts"),
        collection_orders=os.getenv("FIRESTORE_COLLECTION_ORDERS", "orders"),
        collection_support=os.getenv("FIRESTORE_COLLECTION_SUPPORT", "support"),
        collection_payment_refs=os.getenv(
            "FIRESTORE_COLLECTION_PAYMENT_REFS", "payment_refs"
        ),
        collection_throttle=os.getenv("FIRESTORE_COLLECTION_THROTTLE", "throttle"),
    )
