"""Protocolos e contratos do core da aplicação."""

from .canonical_store import CanonicalStoreProtocol, VersionedDocument
from .notifier import MailSenderProtocol
from .receipt_ledger import ReceiptLedgerProtocol
from .throttle_store import ThrottleStoreProtocol
from .tracker import TrackerClientProtocol

__all__ = [
    "CanonicalStoreProtocol",
    "MailSenderProtocol",
    "ReceiptLedgerProtocol",
    "ThrottleStoreProtocol",
    "TrackerClientProtocol",
    "VersionedDocument",
]
