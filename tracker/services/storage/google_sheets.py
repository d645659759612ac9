"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the remote document store because:
1. The user can view and export their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (fine for a personal ledger)
- No server-assigned ids, so this adapter generates them
- No query capabilities (we always read the whole sheet, which is
  what the manager wants anyway)

The implementation follows the abstract interface, so the manager
never sees a gspread type.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    Retrying,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from tracker.config import GoogleSheetsSettings, get_settings
from tracker.logger import get_logger
from tracker.models.transaction import (
    NewTransaction,
    Transaction,
    TransactionChanges,
    TransactionType,
)
from tracker.services.storage.interface import (
    NotFoundError,
    StorageConnectionError,
    StorageError,
    TransactionStorageInterface,
)


# Column layout of the Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "amount",
    "description",
    "type",
    "date",
]

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

logger = get_logger(__name__)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and retries the connection handshake.
    Reads and writes are never retried here.
    """

    def __init__(
        self,
        settings: Optional[GoogleSheetsSettings] = None,
        connect_attempts: Optional[int] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        self._settings = settings or get_settings().google_sheets
        self._connect_attempts = (
            connect_attempts or get_settings().app.storage_connect_attempts
        )
        self._retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)
        self._spreadsheet: Optional[gspread.Spreadsheet] = None

    def _load_credentials(self) -> Credentials:
        try:
            return Credentials.from_service_account_file(
                self._settings.credentials_path,
                scopes=SCOPES,
            )
        except FileNotFoundError:
            raise StorageConnectionError(
                f"Google credentials file not found: {self._settings.credentials_path}"
            )
        except ValueError as e:
            raise StorageConnectionError(f"Invalid Google credentials file: {e}")

    def connect(self) -> gspread.Spreadsheet:
        """
        Open the configured spreadsheet.

        Uses service account credentials for authentication.
        A missing spreadsheet fails immediately; other errors are
        retried with exponential backoff.
        """
        if self._spreadsheet is not None:
            return self._spreadsheet

        credentials = self._load_credentials()
        retrying = Retrying(
            stop=stop_after_attempt(self._connect_attempts),
            wait=self._retry_wait,
            retry=retry_if_not_exception_type(gspread.SpreadsheetNotFound),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    client = gspread.authorize(credentials)
                    self._spreadsheet = client.open_by_key(
                        self._settings.spreadsheet_id
                    )
        except gspread.SpreadsheetNotFound:
            raise StorageConnectionError(
                f"Spreadsheet not found: {self._settings.spreadsheet_id}"
            )
        except Exception as e:
            raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        logger.info(
            "sheets_connected",
            spreadsheet_id=self._settings.spreadsheet_id,
        )
        return self._spreadsheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        spreadsheet = self.connect()
        try:
            sheet = spreadsheet.worksheet(self._settings.transactions_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.transactions_sheet_name,
                rows=1000,
                cols=len(TRANSACTION_COLUMNS),
            )
            sheet.append_row(TRANSACTION_COLUMNS)
        return sheet


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing 'Z'."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


class GoogleSheetsTransactionStorage(TransactionStorageInterface):
    """
    Google Sheets implementation of transaction storage.

    Transactions are stored one per row, below a header row.
    Amounts are written as plain decimal text so they read back exactly.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _transaction_to_row(self, transaction_id: str, record: NewTransaction) -> list:
        """Convert a transaction to a spreadsheet row."""
        return [
            transaction_id,
            str(record.amount),
            record.description,
            record.type.value,
            record.date.isoformat(),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return Transaction(
            id=safe_get(0),
            amount=Decimal(safe_get(1)),
            description=safe_get(2),
            type=TransactionType(safe_get(3)),
            date=parse_timestamp(safe_get(4)),
        )

    def _find_row(self, sheet: gspread.Worksheet, transaction_id: str) -> Optional[int]:
        """1-based sheet row index of a transaction, or None."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is the header
            if row and row[0] == transaction_id:
                return idx
        return None

    async def list_all(self) -> list[Transaction]:
        """Read every transaction row."""
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list transactions: {e}")

        transactions = []
        for row_number, row in enumerate(all_rows, start=2):
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                transactions.append(self._row_to_transaction(row))
            except Exception as e:
                logger.warning(
                    "malformed_row_skipped",
                    row=row_number,
                    error=str(e),
                )
        return transactions

    async def create(self, record: NewTransaction) -> str:
        """Append a new transaction row."""
        transaction_id = uuid4().hex
        try:
            sheet = self._client.get_transactions_sheet()
            row = self._transaction_to_row(transaction_id, record)
            sheet.append_row(row, value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}")
        return transaction_id

    async def update(self, transaction_id: str, changes: TransactionChanges) -> None:
        """Overwrite amount, description and type; id and date stay."""
        try:
            sheet = self._client.get_transactions_sheet()
            idx = self._find_row(sheet, transaction_id)
            if idx is None:
                raise NotFoundError(f"Transaction not found: {transaction_id}")

            values = {
                "amount": str(changes.amount),
                "description": changes.description,
                "type": changes.type.value,
            }
            for column, value in values.items():
                col_idx = TRANSACTION_COLUMNS.index(column) + 1
                sheet.update_cell(idx, col_idx, value)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update transaction: {e}")

    async def delete(self, transaction_id: str) -> bool:
        """Delete a transaction row by id."""
        try:
            sheet = self._client.get_transactions_sheet()
            idx = self._find_row(sheet, transaction_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}")
