"""
Data Models Package

This package contains all Pydantic models used in the Transaction Tracker.
All data flowing through the system must conform to these schemas.
"""

from tracker.models.transaction import (
    ErrorKind,
    FormMode,
    FormState,
    LedgerError,
    LedgerState,
    NewTransaction,
    Transaction,
    TransactionChanges,
    TransactionType,
    utc_now,
)

__all__ = [
    "ErrorKind",
    "FormMode",
    "FormState",
    "LedgerError",
    "LedgerState",
    "NewTransaction",
    "Transaction",
    "TransactionChanges",
    "TransactionType",
    "utc_now",
]
