"""Ledger engine package."""

from tracker.ledger.engine import (
    MutationCheck,
    balance_excluding,
    compute_balance,
    sort_by_date_descending,
    validate_mutation,
)

__all__ = [
    "MutationCheck",
    "balance_excluding",
    "compute_balance",
    "sort_by_date_descending",
    "validate_mutation",
]
