"""
Storage Services Package

Provides the abstract storage interface and its implementations.
Google Sheets is the remote backend; the in-memory store backs
tests and unconfigured runs.
"""

from tracker.services.storage.interface import (
    NotFoundError,
    StorageConnectionError,
    StorageError,
    TransactionStorageInterface,
)
from tracker.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
)
from tracker.services.storage.memory import InMemoryTransactionStorage

__all__ = [
    # Interface
    "TransactionStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStorage",
    "InMemoryTransactionStorage",
]
