"""Form validation package."""

from tracker.validation.validator import TransactionValidator, ValidationResult

__all__ = ["TransactionValidator", "ValidationResult"]
