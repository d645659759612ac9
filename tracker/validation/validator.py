"""
Two-Stage Form Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - FIELD VALIDATION:
- Required field presence
- Description length
- Amount parses as a finite, non-negative decimal
- Amount rounded to the configured precision (values above the
  maximum are left unrounded and rejected)
- This catches typos and empty submits

STAGE 2 - LEDGER VALIDATION:
- Zero amounts
- Expenses larger than the balance
- This is delegated to the ledger engine

Stage 2 only runs when stage 1 passes: there is no balance rule
to check for an amount we could not read.

IMPORTANT: Validation NEVER silently fixes input beyond rounding
to the ledger's precision. It reports one message for the user.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import BaseModel

from tracker.config import AppSettings, get_settings
from tracker.ledger.engine import validate_mutation
from tracker.models.transaction import (
    DESCRIPTION_MAX_LENGTH,
    ErrorKind,
    TransactionChanges,
    TransactionType,
)


MISSING_FIELD_MESSAGE = "Amount and description are required!"
INVALID_AMOUNT_MESSAGE = "Amount must be a positive number"
DESCRIPTION_TOO_LONG_MESSAGE = f"Description cannot be longer than {DESCRIPTION_MAX_LENGTH} characters"

AmountInput = Union[str, int, float, Decimal, None]


class ValidationResult(BaseModel):
    """
    Result of validating one form submission.

    On success `changes` holds the parsed, ready-to-store fields.
    On failure `error_kind` and `message` describe the first problem.
    """

    ok: bool
    changes: Optional[TransactionChanges] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None


class TransactionValidator:
    """Turns raw form input into TransactionChanges, or a single error."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def parse_amount(self, amount: AmountInput) -> Optional[Decimal]:
        """
        Parse user input into a Decimal at ledger precision.

        Returns None if the input is not a finite number.
        Floats go through str() so 0.1 stays 0.1.
        """
        if isinstance(amount, float):
            amount = str(amount)
        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation:
            return None
        if not value.is_finite():
            return None
        if abs(value) > self._settings.max_transaction_amount:
            # Left unrounded; the caller rejects it as too large
            return value
        try:
            return value.quantize(self._settings.amount_quantum, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return None

    def _validate_fields(
        self,
        amount: AmountInput,
        description: Optional[str],
    ) -> tuple[Optional[Decimal], Optional[ErrorKind], Optional[str]]:
        """
        Stage 1: field validation.

        Returns: (parsed_amount, error_kind, message)
        """
        amount_text = "" if amount is None else str(amount).strip()
        if not amount_text or not (description or "").strip():
            return None, ErrorKind.MISSING_FIELD, MISSING_FIELD_MESSAGE

        if len(description.strip()) > DESCRIPTION_MAX_LENGTH:
            return None, ErrorKind.INVALID_DESCRIPTION, DESCRIPTION_TOO_LONG_MESSAGE

        parsed = self.parse_amount(amount)
        if parsed is None or parsed < 0:
            return None, ErrorKind.INVALID_AMOUNT, INVALID_AMOUNT_MESSAGE

        if parsed > self._settings.max_transaction_amount:
            return (
                None,
                ErrorKind.INVALID_AMOUNT,
                f"Amount cannot exceed {self._settings.max_transaction_amount:,}",
            )

        return parsed, None, None

    def validate(
        self,
        amount: AmountInput,
        description: Optional[str],
        transaction_type: Union[TransactionType, str],
        balance: Decimal,
    ) -> ValidationResult:
        """
        Run both stages.

        Args:
            amount: Raw amount input
            description: Raw description input
            transaction_type: Income or Expense
            balance: Balance the proposal is checked against

        Returns:
            ValidationResult, with parsed changes on success
        """
        transaction_type = TransactionType(transaction_type)

        parsed, kind, message = self._validate_fields(amount, description)
        if kind is not None:
            return ValidationResult(ok=False, error_kind=kind, message=message)

        check = validate_mutation(balance, transaction_type, parsed)
        if not check.ok:
            return ValidationResult(
                ok=False,
                error_kind=check.error_kind,
                message=check.message,
            )

        return ValidationResult(
            ok=True,
            changes=TransactionChanges(
                amount=parsed,
                description=description,
                type=transaction_type,
            ),
        )
