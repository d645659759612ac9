"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the spreadsheet backend out of the ledger logic
2. Use in-memory storage for testing
3. Swap the remote store later without touching the manager

The interface is intentionally tiny - four calls, keyed by an
opaque id the backend assigns.
"""

from abc import ABC, abstractmethod

from tracker.models.transaction import (
    NewTransaction,
    Transaction,
    TransactionChanges,
)


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage operations.

    Any storage implementation must implement these methods and
    must raise StorageError (or a subclass) on backend failure.
    """

    @abstractmethod
    async def list_all(self) -> list[Transaction]:
        """
        Fetch every stored transaction.

        Returns:
            All transactions, in no guaranteed order

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def create(self, record: NewTransaction) -> str:
        """
        Store a new transaction.

        Args:
            record: The transaction to store (without id)

        Returns:
            The id assigned by storage

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def update(self, transaction_id: str, changes: TransactionChanges) -> None:
        """
        Overwrite amount, description and type of a transaction.

        The stored date is left untouched.

        Raises:
            NotFoundError: If no transaction has this id
            StorageError: If update fails
        """
        pass

    @abstractmethod
    async def delete(self, transaction_id: str) -> bool:
        """
        Delete a transaction by id.

        Returns:
            True if a record was removed, False if none had this id
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
