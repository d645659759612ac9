"""
Core Data Models for Transaction Tracker

These models define the schemas for everything flowing through the system.
They are designed to:
1. Enforce the ledger invariants at runtime (positive amount, non-empty text)
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Amounts are Decimal, never float.
A float amount compared to zero or to a balance is exactly
the kind of silent rounding issue a ledger must not have.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


DESCRIPTION_MAX_LENGTH = 500


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Direction of a transaction.

    The values are the strings written to storage, so existing
    records stay readable.
    """
    INCOME = "Income"
    EXPENSE = "Expense"


class ErrorKind(str, Enum):
    """Every error the ledger can surface to the user."""
    MISSING_FIELD = "missing_field"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_DESCRIPTION = "invalid_description"
    ZERO_AMOUNT = "zero_amount"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    NOT_FOUND = "not_found"
    STORAGE_FAILURE = "storage_failure"


class FormMode(str, Enum):
    """Whether the entry form adds a new record or edits an existing one."""
    IDLE = "idle"
    EDITING = "editing"


# =============================================================================
# CORE TRANSACTION MODELS
# =============================================================================

class TransactionChanges(BaseModel):
    """
    The mutable part of a transaction.

    This is exactly what an update may touch: id and date are
    fixed once the record exists.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in currency units"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="What the money was for"
    )
    type: TransactionType = Field(
        ...,
        description="Income or Expense"
    )

    @property
    def signed_amount(self) -> Decimal:
        """Contribution of this record to the balance."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


class NewTransaction(TransactionChanges):
    """A transaction that has not been stored yet (no id)."""

    date: datetime = Field(
        default_factory=utc_now,
        description="When the transaction was recorded"
    )

    @field_validator('date')
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are taken to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class Transaction(NewTransaction):
    """
    A stored transaction.

    The id is assigned by storage on creation and never changes.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque storage-assigned identifier"
    )


# =============================================================================
# APPLICATION STATE
# =============================================================================

class LedgerError(BaseModel):
    """A single user-visible error. A new one replaces the previous one."""

    kind: ErrorKind
    message: str


class FormState(BaseModel):
    """
    In-progress input of the entry form.

    Fields are kept as the raw text the user typed; they are only
    parsed when the form is submitted.
    """

    amount: str = ""
    description: str = ""
    type: TransactionType = TransactionType.INCOME
    editing_id: Optional[str] = None

    @property
    def mode(self) -> FormMode:
        return FormMode.EDITING if self.editing_id else FormMode.IDLE


class LedgerState(BaseModel):
    """
    Everything the presentation layer needs to render.

    Owned by the TransactionManager and replaced after every
    refresh; observers receive it as-is.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    balance: Decimal = Decimal("0")
    form: FormState = Field(default_factory=FormState)
    error: Optional[LedgerError] = None
    refreshed_at: Optional[datetime] = None

    def find(self, transaction_id: str) -> Optional[Transaction]:
        """Look up a loaded transaction by id."""
        for transaction in self.transactions:
            if transaction.id == transaction_id:
                return transaction
        return None
