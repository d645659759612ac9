"""Tests for the Google Sheets adapter, against a fake worksheet."""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import gspread
import pytest
from tenacity import wait_none

from tracker.config import GoogleSheetsSettings

from tracker.models.transaction import (
    NewTransaction,
    TransactionChanges,
    TransactionType,
)
from tracker.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from tracker.services.storage.google_sheets import TRANSACTION_COLUMNS, parse_timestamp


def run(coro):
    return asyncio.run(coro)


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the adapter."""

    def __init__(self, rows=None):
        self.rows = [list(TRANSACTION_COLUMNS)] + [list(r) for r in rows or []]

    def get_all_values(self):
        return [list(r) for r in self.rows]

    def append_row(self, values, value_input_option=None):
        self.rows.append([str(v) for v in values])

    def update_cell(self, row, col, value):
        self.rows[row - 1][col - 1] = str(value)

    def delete_rows(self, index):
        del self.rows[index - 1]


@pytest.fixture
def sheet():
    return FakeWorksheet([
        ["a1", "100.00", "Salary", "Income", "2024-06-01T09:00:00+00:00"],
        ["b2", "30.00", "Food", "Expense", "2024-06-02T12:30:00.000Z"],
    ])


@pytest.fixture
def storage(sheet):
    client = MagicMock()
    client.get_transactions_sheet.return_value = sheet
    return GoogleSheetsTransactionStorage(client)


class TestRowConversion:
    """Reading rows back into transactions."""

    def test_list_all(self, storage):
        transactions = run(storage.list_all())
        assert [t.id for t in transactions] == ["a1", "b2"]
        assert transactions[0].amount == Decimal("100.00")
        assert transactions[1].type == TransactionType.EXPENSE
        assert transactions[1].date == datetime(2024, 6, 2, 12, 30, tzinfo=timezone.utc)

    def test_skips_empty_and_malformed_rows(self, sheet, storage):
        sheet.rows.append([])
        sheet.rows.append(["", "", "", "", ""])
        sheet.rows.append(["c3", "not-a-number", "Broken", "Income", "2024-06-03"])
        sheet.rows.append(["d4", "5", "Bad type", "Transfer", "2024-06-03"])
        assert [t.id for t in run(storage.list_all())] == ["a1", "b2"]

    def test_parse_timestamp_accepts_z_suffix(self):
        assert parse_timestamp("2024-01-01T00:00:00Z").tzinfo is not None


class TestWrites:
    """create / update / delete against the fake sheet."""

    def test_create_appends_row_and_returns_id(self, sheet, storage):
        record = NewTransaction(
            amount=Decimal("12.50"),
            description="Lunch",
            type=TransactionType.EXPENSE,
            date=datetime(2024, 6, 5, tzinfo=timezone.utc),
        )
        transaction_id = run(storage.create(record))

        assert transaction_id
        assert sheet.rows[-1] == [
            transaction_id,
            "12.50",
            "Lunch",
            "Expense",
            "2024-06-05T00:00:00+00:00",
        ]

    def test_created_ids_are_unique(self, storage):
        record = NewTransaction(
            amount=Decimal("1"), description="x", type=TransactionType.INCOME
        )
        ids = {run(storage.create(record)) for _ in range(5)}
        assert len(ids) == 5

    def test_update_leaves_id_and_date(self, sheet, storage):
        run(storage.update("b2", TransactionChanges(
            amount=Decimal("25.00"),
            description="Groceries",
            type=TransactionType.EXPENSE,
        )))
        assert sheet.rows[2] == [
            "b2", "25.00", "Groceries", "Expense", "2024-06-02T12:30:00.000Z",
        ]

    def test_update_missing_raises_not_found(self, storage):
        with pytest.raises(NotFoundError):
            run(storage.update("zz", TransactionChanges(
                amount=Decimal("1"), description="x", type=TransactionType.INCOME,
            )))

    def test_delete(self, sheet, storage):
        assert run(storage.delete("a1")) is True
        assert [row[0] for row in sheet.rows[1:]] == ["b2"]

    def test_delete_missing_returns_false(self, sheet, storage):
        assert run(storage.delete("zz")) is False
        assert len(sheet.rows) == 3


class TestErrorWrapping:
    """Backend exceptions never leak past the adapter."""

    def test_backend_error_becomes_storage_error(self, sheet, storage):
        sheet.get_all_values = MagicMock(side_effect=RuntimeError("quota exceeded"))
        with pytest.raises(StorageError, match="quota exceeded"):
            run(storage.list_all())

    def test_connection_error_passes_through(self):
        client = MagicMock()
        client.get_transactions_sheet.side_effect = StorageConnectionError("offline")
        storage = GoogleSheetsTransactionStorage(client)
        with pytest.raises(StorageConnectionError):
            run(storage.create(NewTransaction(
                amount=Decimal("1"), description="x", type=TransactionType.INCOME,
            )))


class TestConnect:
    """The connection handshake is retried, but only so far."""

    @pytest.fixture
    def sheets_settings(self, tmp_path):
        credentials = tmp_path / "service_account.json"
        credentials.write_text("{}")
        return GoogleSheetsSettings(
            credentials_path=str(credentials),
            spreadsheet_id="sheet-123",
        )

    @pytest.fixture
    def gspread_client(self):
        with patch("tracker.services.storage.google_sheets.Credentials"), \
                patch("tracker.services.storage.google_sheets.gspread.authorize") as authorize:
            client = MagicMock()
            authorize.return_value = client
            yield client

    def make_client(self, sheets_settings, attempts):
        return GoogleSheetsClient(
            sheets_settings, connect_attempts=attempts, retry_wait=wait_none()
        )

    def test_gives_up_after_configured_attempts(self, sheets_settings, gspread_client):
        """A persistent failure stops at the attempt limit."""
        gspread_client.open_by_key.side_effect = RuntimeError("timeout")
        client = self.make_client(sheets_settings, attempts=2)
        with pytest.raises(StorageConnectionError, match="timeout"):
            client.connect()
        assert gspread_client.open_by_key.call_count == 2

    def test_recovers_from_transient_failures(self, sheets_settings, gspread_client):
        spreadsheet = MagicMock()
        gspread_client.open_by_key.side_effect = [
            RuntimeError("timeout"),
            RuntimeError("timeout"),
            spreadsheet,
        ]
        client = self.make_client(sheets_settings, attempts=3)
        assert client.connect() is spreadsheet
        assert gspread_client.open_by_key.call_count == 3

    def test_missing_spreadsheet_is_not_retried(self, sheets_settings, gspread_client):
        """A wrong spreadsheet id fails on the first attempt."""
        gspread_client.open_by_key.side_effect = gspread.SpreadsheetNotFound("sheet-123")
        client = self.make_client(sheets_settings, attempts=3)
        with pytest.raises(StorageConnectionError, match="Spreadsheet not found"):
            client.connect()
        assert gspread_client.open_by_key.call_count == 1

    def test_spreadsheet_is_cached(self, sheets_settings, gspread_client):
        client = self.make_client(sheets_settings, attempts=3)
        first = client.connect()
        assert client.connect() is first
        assert gspread_client.open_by_key.call_count == 1
