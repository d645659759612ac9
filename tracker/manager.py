"""
Transaction Manager

This module ties storage, validation and the ledger engine together
and owns the application state the UI renders.

DESIGN DECISION: The manager enforces the boundaries:
- Nothing is written before validation passes
- After every write the whole ledger is re-fetched and the balance
  recomputed, so in-memory state never drifts from storage
- Storage failures become a visible message, never a crash

Flows:
1. Add    (validate → create → refresh)
2. Update (validate against balance without the edited record → update → refresh)
3. Delete (delete → refresh)
"""

from typing import Callable, Optional, Union

from pydantic import ValidationError
from structlog.contextvars import bound_contextvars

from tracker.config import get_settings
from tracker.ledger.engine import (
    balance_excluding,
    compute_balance,
    sort_by_date_descending,
)
from tracker.logger import configure_logging, create_correlation_id, get_logger
from tracker.models.transaction import (
    ErrorKind,
    FormMode,
    FormState,
    LedgerError,
    LedgerState,
    NewTransaction,
    TransactionType,
    utc_now,
)
from tracker.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)
from tracker.validation import TransactionValidator, ValidationResult
from tracker.validation.validator import AmountInput


NOT_FOUND_MESSAGE = "This transaction no longer exists."
STORAGE_FAILURE_MESSAGE = "Could not reach storage. Please try again."

Observer = Callable[[LedgerState], None]

logger = get_logger(__name__)


class FormStateError(Exception):
    """An operation was requested that the current form state does not allow."""
    pass


class TransactionManager:
    """
    Orchestrates every read and write of the ledger.

    State machine of the entry form:
        Idle --begin_edit(id)--> Editing(id)
        Editing(id) --update succeeds / cancel_edit--> Idle
    `add` is only allowed while Idle.
    """

    def __init__(
        self,
        storage: TransactionStorageInterface,
        validator: Optional[TransactionValidator] = None,
    ):
        self._storage = storage
        self._validator = validator or TransactionValidator()
        self._state = LedgerState()
        self._observers: list[Observer] = []

    @property
    def state(self) -> LedgerState:
        return self._state

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, observer: Observer) -> None:
        """Call `observer` with the new state after each refresh or error."""
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _publish(self) -> None:
        for observer in list(self._observers):
            observer(self._state)

    def _set(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)

    # -------------------------------------------------------------------------
    # Error surfacing
    # -------------------------------------------------------------------------

    def _surface(self, kind: ErrorKind, message: str) -> bool:
        """Replace the current error message and notify observers."""
        self._set(error=LedgerError(kind=kind, message=message))
        self._publish()
        return False

    def _reject(self, result: ValidationResult, form: FormState) -> bool:
        logger.info(
            "mutation_rejected",
            error_kind=result.error_kind.value,
            reason=result.message,
        )
        self._set(form=form)
        return self._surface(result.error_kind, result.message)

    def _storage_failed(self, error: StorageError) -> bool:
        if isinstance(error, NotFoundError):
            logger.warning("transaction_missing", error=str(error))
            return self._surface(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        logger.error("storage_failed", error=str(error))
        return self._surface(ErrorKind.STORAGE_FAILURE, STORAGE_FAILURE_MESSAGE)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def refresh(self) -> bool:
        """
        Re-fetch every transaction, sort them and recompute the balance.

        Called at startup and after every successful mutation.
        On failure the previous list and balance are kept.
        """
        try:
            transactions = await self._storage.list_all()
        except StorageError as e:
            return self._storage_failed(e)

        ordered = sort_by_date_descending(transactions)
        balance = compute_balance(ordered)
        self._set(
            transactions=ordered,
            balance=balance,
            refreshed_at=utc_now(),
        )
        logger.debug(
            "ledger_refreshed",
            count=len(ordered),
            balance=str(balance),
        )
        self._publish()
        return True

    async def add(
        self,
        amount: AmountInput,
        description: Optional[str],
        transaction_type: Union[TransactionType, str] = TransactionType.INCOME,
    ) -> bool:
        """
        Validate and store a new transaction dated now.

        Returns:
            True if the transaction was stored and the ledger refreshed

        Raises:
            FormStateError: If a transaction is being edited
        """
        if self._state.form.mode == FormMode.EDITING:
            raise FormStateError(
                "Cannot add while editing; update or cancel the edit first"
            )

        with bound_contextvars(correlation_id=create_correlation_id(), operation="add"):
            result = self._validator.validate(
                amount, description, transaction_type, self._state.balance
            )
            if not result.ok:
                return self._reject(result, FormState(
                    amount="" if amount is None else str(amount),
                    description=description or "",
                    type=TransactionType(transaction_type),
                ))

            record = NewTransaction(**result.changes.model_dump())
            try:
                transaction_id = await self._storage.create(record)
            except StorageError as e:
                return self._storage_failed(e)

            logger.info(
                "transaction_created",
                transaction_id=transaction_id,
                type=record.type.value,
                amount=str(record.amount),
            )
            self._set(form=FormState(), error=None)
            return await self.refresh()

    async def update(
        self,
        transaction_id: str,
        amount: AmountInput,
        description: Optional[str],
        transaction_type: Union[TransactionType, str],
    ) -> bool:
        """
        Validate and apply new amount, description and type.

        The check runs against the balance without the edited
        transaction, so shrinking an expense is always allowed.
        The stored date is never changed.
        """
        with bound_contextvars(
            correlation_id=create_correlation_id(),
            operation="update",
            transaction_id=transaction_id,
        ):
            balance = balance_excluding(self._state.transactions, transaction_id)
            result = self._validator.validate(
                amount, description, transaction_type, balance
            )
            if not result.ok:
                return self._reject(result, FormState(
                    amount="" if amount is None else str(amount),
                    description=description or "",
                    type=TransactionType(transaction_type),
                    editing_id=self._state.form.editing_id,
                ))

            try:
                await self._storage.update(transaction_id, result.changes)
            except StorageError as e:
                if isinstance(e, NotFoundError):
                    # Deleted by another writer; nothing left to edit
                    self._set(form=FormState())
                return self._storage_failed(e)

            logger.info(
                "transaction_updated",
                type=result.changes.type.value,
                amount=str(result.changes.amount),
            )
            self._set(form=FormState(), error=None)
            return await self.refresh()

    async def delete(self, transaction_id: str) -> bool:
        """Delete unconditionally, whatever it does to the balance."""
        with bound_contextvars(
            correlation_id=create_correlation_id(),
            operation="delete",
            transaction_id=transaction_id,
        ):
            try:
                removed = await self._storage.delete(transaction_id)
            except StorageError as e:
                return self._storage_failed(e)

            logger.info("transaction_deleted", removed=removed)
            if self._state.form.editing_id == transaction_id:
                self._set(form=FormState())
            return await self.refresh()

    def begin_edit(self, transaction_id: str) -> bool:
        """
        Load a transaction into the form and enter Editing mode.

        The record is not locked; another writer may still change it.
        """
        transaction = self._state.find(transaction_id)
        if transaction is None:
            return self._surface(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)

        self._set(form=FormState(
            amount=str(transaction.amount),
            description=transaction.description,
            type=transaction.type,
            editing_id=transaction.id,
        ))
        self._publish()
        return True

    def cancel_edit(self) -> None:
        """Leave Editing mode and clear the form."""
        self._set(form=FormState())
        self._publish()

    def set_form(
        self,
        amount: Optional[str] = None,
        description: Optional[str] = None,
        transaction_type: Optional[Union[TransactionType, str]] = None,
    ) -> None:
        """Record in-progress input without validating it."""
        form = self._state.form
        self._set(form=form.model_copy(update={
            "amount": form.amount if amount is None else amount,
            "description": form.description if description is None else description,
            "type": form.type if transaction_type is None else TransactionType(transaction_type),
        }))


def create_manager(use_storage: bool = True) -> TransactionManager:
    """
    Factory function to create the manager with its storage.

    Args:
        use_storage: Whether to connect to Google Sheets.
                    Falls back to in-memory storage when False or
                    when the spreadsheet is not configured.
    """
    configure_logging(get_settings().app.effective_log_level)

    storage: Optional[TransactionStorageInterface] = None
    if use_storage:
        try:
            storage = GoogleSheetsTransactionStorage(GoogleSheetsClient())
        except ValidationError as e:
            logger.warning("storage_not_configured", error=str(e))

    if storage is None:
        storage = InMemoryTransactionStorage()

    return TransactionManager(storage)
