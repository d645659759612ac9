"""
In-Memory Storage Implementation

Used by the test suite and as the fallback when no spreadsheet
is configured. Data lives only as long as the process.
"""

from typing import Optional
from uuid import uuid4

from tracker.models.transaction import (
    NewTransaction,
    Transaction,
    TransactionChanges,
)
from tracker.services.storage.interface import (
    NotFoundError,
    TransactionStorageInterface,
)


class InMemoryTransactionStorage(TransactionStorageInterface):
    """Dict-backed storage keeping insertion order."""

    def __init__(self, transactions: Optional[list[Transaction]] = None):
        self._records: dict[str, Transaction] = {}
        for transaction in transactions or []:
            self._records[transaction.id] = transaction

    async def list_all(self) -> list[Transaction]:
        return [record.model_copy() for record in self._records.values()]

    async def create(self, record: NewTransaction) -> str:
        transaction_id = uuid4().hex
        self._records[transaction_id] = Transaction(
            id=transaction_id,
            **record.model_dump(),
        )
        return transaction_id

    async def update(self, transaction_id: str, changes: TransactionChanges) -> None:
        existing = self._records.get(transaction_id)
        if existing is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        self._records[transaction_id] = existing.model_copy(
            update=changes.model_dump()
        )

    async def delete(self, transaction_id: str) -> bool:
        return self._records.pop(transaction_id, None) is not None
