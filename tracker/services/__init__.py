"""Services package."""

from tracker.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    StorageConnectionError,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStorage",
    "InMemoryTransactionStorage",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    "TransactionStorageInterface",
]
