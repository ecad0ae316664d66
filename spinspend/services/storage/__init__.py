"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently everything is kept in memory, but the backend is swappable.
"""

from spinspend.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerInterface,
    NotFoundError,
    StorageError,
    SubscriptionRegistryInterface,
)
from spinspend.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedger,
    InMemorySubscriptionRegistry,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerInterface",
    "SubscriptionRegistryInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryLedger",
    "InMemorySubscriptionRegistry",
]
