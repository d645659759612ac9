"""
Ledger Engine

Pure functions over a collection of transactions: no storage,
no logging, no state. Everything the manager decides about money
goes through here.
"""

from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel

from tracker.models.transaction import (
    ErrorKind,
    Transaction,
    TransactionChanges,
    TransactionType,
)


ZERO_AMOUNT_MESSAGE = "Cannot record a transaction of 0 amount"
INSUFFICIENT_BALANCE_MESSAGE = "Insufficient balance for this expense!"


class MutationCheck(BaseModel):
    """Outcome of checking a proposed add or update against the balance."""

    ok: bool
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def passed(cls) -> "MutationCheck":
        return cls(ok=True)

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> "MutationCheck":
        return cls(ok=False, error_kind=kind, message=message)


def compute_balance(transactions: Iterable[TransactionChanges]) -> Decimal:
    """
    Sum of Income amounts minus sum of Expense amounts.

    Order of the input does not matter.
    """
    return sum(
        (transaction.signed_amount for transaction in transactions),
        Decimal("0"),
    )


def balance_excluding(transactions: Iterable[Transaction], transaction_id: str) -> Decimal:
    """Balance with the contribution of one transaction removed."""
    return compute_balance(t for t in transactions if t.id != transaction_id)


def sort_by_date_descending(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Most recent first; transactions with equal dates keep their input order."""
    # sorted() is stable with reverse=True as well
    return sorted(transactions, key=lambda t: t.date, reverse=True)


def validate_mutation(
    existing_balance: Decimal,
    proposed_type: TransactionType,
    proposed_amount: Decimal,
) -> MutationCheck:
    """
    Check a proposed amount against the current balance.

    Zero is rejected for both types. An expense may not exceed the
    balance; income is always accepted.
    """
    if proposed_amount == 0:
        return MutationCheck.failed(ErrorKind.ZERO_AMOUNT, ZERO_AMOUNT_MESSAGE)

    if proposed_type == TransactionType.EXPENSE and proposed_amount > existing_balance:
        return MutationCheck.failed(
            ErrorKind.INSUFFICIENT_BALANCE,
            INSUFFICIENT_BALANCE_MESSAGE,
        )

    return MutationCheck.passed()
