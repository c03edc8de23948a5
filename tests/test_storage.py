"""
Tests for storage implementations.

Google Sheets is never contacted: worksheets are MagicMocks returning
canned rows.
"""

import asyncio
import pytest
from datetime import datetime
from unittest.mock import MagicMock

import gspread

from finance_tracker.models.audit import AuditEvent, AuditEventType
from finance_tracker.models.finance import (
    CreditCard,
    SalaryAdjustment,
    Transaction,
    TransactionType,
)
from finance_tracker.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsDataSource,
    InMemoryDataSource,
    NotFoundError,
    StorageError,
)
from finance_tracker.services.storage.google_sheets import (
    ADJUSTMENT_COLUMNS,
    CARD_COLUMNS,
    TRANSACTION_COLUMNS,
    model_to_row,
    row_to_model,
)


def run(coro):
    return asyncio.run(coro)


def sheet_with(rows: list[list[str]], columns: list[str]) -> MagicMock:
    sheet = MagicMock()
    sheet.title = "Test"
    sheet.get_all_values.return_value = [columns, *rows]
    return sheet


def transaction_row(**overrides) -> list[str]:
    values = {
        "id": "t1",
        "description": "Mercado",
        "amount": "120.5",
        "type": "expense",
        "category": "mercado",
        "date": "2024-03-10T00:00:00",
        "is_recurring": "False",
        "is_paid": "True",
    }
    values.update(overrides)
    return [values.get(column, "") for column in TRANSACTION_COLUMNS]


class TestInMemoryDataSource:
    """Tests for the dict-backed source."""

    def test_update_transaction(self, make_expense):
        """Test changes are validated and applied."""
        source = InMemoryDataSource(transactions=[make_expense(10, id="t1")])
        run(source.update_transaction("t1", {"amount": 25}))
        assert run(source.list_transactions())[0].amount == 25

    def test_update_missing_transaction(self):
        """Test updating an unknown id raises NotFoundError."""
        with pytest.raises(NotFoundError):
            run(InMemoryDataSource().update_transaction("nope", {"amount": 1}))

    def test_update_rejects_invalid_change(self, make_expense):
        """Test invalid changes surface as StorageError."""
        source = InMemoryDataSource(transactions=[make_expense(10, id="t1")])
        with pytest.raises(StorageError):
            run(source.update_transaction("t1", {"amount": -1}))

    def test_adjustment_upsert(self):
        """Test saving the same key twice keeps only the last write."""
        source = InMemoryDataSource()
        run(source.save_salary_adjustment(SalaryAdjustment(salary_id="s", year=2024, month=2, amount=1)))
        run(source.save_salary_adjustment(SalaryAdjustment(salary_id="s", year=2024, month=2, amount=2)))
        adjustments = run(source.list_salary_adjustments(2024, 2))
        assert [a.amount for a in adjustments] == [2]

    def test_adjustment_filters(self):
        """Test year/month filters."""
        source = InMemoryDataSource(adjustments=[
            SalaryAdjustment(salary_id="s", year=2024, month=1, amount=1),
            SalaryAdjustment(salary_id="s", year=2024, month=2, amount=2),
        ])
        assert len(run(source.list_salary_adjustments())) == 2
        assert len(run(source.list_salary_adjustments(month=1))) == 1

    def test_deletes_report_existence(self, salary):
        """Test deletes return whether something was removed."""
        source = InMemoryDataSource(salaries=[salary])
        assert run(source.delete_salary("sal-1")) is True
        assert run(source.delete_salary("sal-1")) is False


class TestRowConversion:
    """Tests for sheet row <-> model conversion."""

    def test_row_to_transaction(self):
        """Test text cells are parsed into typed fields."""
        t = row_to_model(transaction_row(), TRANSACTION_COLUMNS, Transaction)
        assert t.amount == 120.5
        assert t.type == TransactionType.EXPENSE
        assert t.is_paid is True
        assert t.is_recurring is False
        assert t.due_date is None

    def test_short_row_is_padded(self):
        """Test rows missing trailing cells still parse."""
        row = transaction_row()[:6]
        assert row_to_model(row, TRANSACTION_COLUMNS, Transaction).is_paid is False

    def test_card_paid_months_json(self):
        """Test list columns round-trip through JSON."""
        card = CreditCard(id="c1", name="Nubank", due_day=10, paid_months=["2024-03"])
        row = model_to_row(card, CARD_COLUMNS)
        assert row[CARD_COLUMNS.index("paid_months")] == '["2024-03"]'
        assert row_to_model(row, CARD_COLUMNS, CreditCard) == card

    def test_blank_optional_fields(self):
        """Test None becomes an empty cell."""
        row = model_to_row(
            SalaryAdjustment(salary_id="s", year=2024, month=2, amount=10),
            ADJUSTMENT_COLUMNS,
        )
        assert row == ["s", "2024", "2", "10.0", "", ""]


class TestGoogleSheetsDataSource:
    """Tests for the Sheets-backed source with a mocked client."""

    def test_list_transactions_skips_bad_rows(self):
        """Test malformed rows are skipped, not fatal."""
        client = MagicMock()
        client.get_transactions_sheet.return_value = sheet_with(
            [transaction_row(), transaction_row(id="t2", amount="abc"), ["", ""]],
            TRANSACTION_COLUMNS,
        )
        transactions = run(GoogleSheetsDataSource(client).list_transactions())
        assert [t.id for t in transactions] == ["t1"]

    def test_list_failure_wraps_storage_error(self):
        """Test backend errors become StorageError."""
        client = MagicMock()
        client.get_salaries_sheet.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(StorageError):
            run(GoogleSheetsDataSource(client).list_salaries())

    def test_update_transaction_rewrites_row(self):
        """Test updates merge changes and write every cell of the row."""
        sheet = sheet_with([transaction_row()], TRANSACTION_COLUMNS)
        client = MagicMock()
        client.get_transactions_sheet.return_value = sheet

        run(GoogleSheetsDataSource(client).update_transaction("t1", {"amount": 99.9}))

        amount_col = TRANSACTION_COLUMNS.index("amount") + 1
        sheet.update_cell.assert_any_call(2, amount_col, "99.9")
        assert sheet.update_cell.call_count == len(TRANSACTION_COLUMNS)

    def test_update_missing_transaction(self):
        """Test NotFoundError passes through unwrapped."""
        client = MagicMock()
        client.get_transactions_sheet.return_value = sheet_with([], TRANSACTION_COLUMNS)
        with pytest.raises(NotFoundError):
            run(GoogleSheetsDataSource(client).update_transaction("ghost", {"amount": 1}))

    def test_delete_transaction(self):
        """Test deleting removes the matching sheet row."""
        sheet = sheet_with([transaction_row(), transaction_row(id="t2")], TRANSACTION_COLUMNS)
        client = MagicMock()
        client.get_transactions_sheet.return_value = sheet

        assert run(GoogleSheetsDataSource(client).delete_transaction("t2")) is True
        sheet.delete_rows.assert_called_once_with(3)

    def test_save_adjustment_appends_new_key(self):
        """Test a new key is appended."""
        sheet = sheet_with([], ADJUSTMENT_COLUMNS)
        client = MagicMock()
        client.get_adjustments_sheet.return_value = sheet

        adjustment = SalaryAdjustment(salary_id="s", year=2024, month=2, amount=5500)
        run(GoogleSheetsDataSource(client).save_salary_adjustment(adjustment))

        sheet.append_row.assert_called_once()
        assert sheet.append_row.call_args[0][0][:4] == ["s", "2024", "2", "5500.0"]

    def test_save_adjustment_updates_existing_key(self):
        """Test an existing key is overwritten in place."""
        sheet = sheet_with([["s", "2024", "2", "5000.0", "", ""]], ADJUSTMENT_COLUMNS)
        client = MagicMock()
        client.get_adjustments_sheet.return_value = sheet

        adjustment = SalaryAdjustment(salary_id="s", year=2024, month=2, amount=5500)
        run(GoogleSheetsDataSource(client).save_salary_adjustment(adjustment))

        sheet.append_row.assert_not_called()
        sheet.update_cell.assert_any_call(2, 4, "5500.0")


class TestGoogleSheetsClient:
    """Tests for worksheet creation."""

    def test_missing_worksheet_is_created_with_headers(self, monkeypatch):
        """Test get-or-create writes the header row."""
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", "credentials.json")
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-id")

        client = GoogleSheetsClient()
        spreadsheet = MagicMock()
        spreadsheet.worksheet.side_effect = gspread.WorksheetNotFound("Transactions")
        client._spreadsheet = spreadsheet

        sheet = client.get_transactions_sheet()

        spreadsheet.add_worksheet.assert_called_once()
        sheet.append_row.assert_called_once_with(TRANSACTION_COLUMNS)


class TestGoogleSheetsAuditStorage:
    """Tests for the audit sheet."""

    def test_append_event(self):
        """Test events are appended as sheet rows."""
        sheet = MagicMock()
        client = MagicMock()
        client.get_audit_sheet.return_value = sheet

        event = AuditEvent(event_type=AuditEventType.DATA_LOADED, description="ok")
        assert run(GoogleSheetsAuditStorage(client).append_event(event)) is True
        sheet.append_row.assert_called_once()

    def test_append_failure_does_not_raise(self):
        """Test audit writes never break the caller."""
        client = MagicMock()
        client.get_audit_sheet.side_effect = RuntimeError("offline")
        event = AuditEvent(event_type=AuditEventType.DATA_LOADED, description="ok")
        assert run(GoogleSheetsAuditStorage(client).append_event(event)) is False

    def test_recent_events_newest_first(self):
        """Test events are read back newest first."""
        older = AuditEvent(
            event_type=AuditEventType.DATA_LOADED, description="a",
            timestamp=datetime(2024, 3, 1),
        )
        newer = AuditEvent(
            event_type=AuditEventType.SALARY_DELETED, description="b",
            timestamp=datetime(2024, 3, 2),
        )
        sheet = MagicMock()
        sheet.get_all_values.return_value = [["header"], older.to_sheets_row(), newer.to_sheets_row()]
        client = MagicMock()
        client.get_audit_sheet.return_value = sheet

        events = run(GoogleSheetsAuditStorage(client).get_recent_events(limit=1))
        assert [e.description for e in events] == ["b"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
