"""Services package."""

from spinspend.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryLedger,
    InMemorySubscriptionRegistry,
    LedgerInterface,
    NotFoundError,
    StorageError,
    SubscriptionRegistryInterface,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryLedger",
    "InMemorySubscriptionRegistry",
    "LedgerInterface",
    "NotFoundError",
    "StorageError",
    "SubscriptionRegistryInterface",
]
