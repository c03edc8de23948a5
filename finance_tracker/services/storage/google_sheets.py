"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the shared household backend because:
1. Every member of the household can view the data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (a refresh reads each sheet once)
- Limited query capabilities (we filter in Python)

One worksheet per collection, one record per row. Rows that fail
validation are skipped with a warning so one bad row never blocks a
refresh.
"""

import json
from datetime import datetime
from typing import Any, Optional, Type, TypeVar

import gspread
import structlog
from google.oauth2.service_account import Credentials
from pydantic import BaseModel
from tenacity import retry, stop_after_attempt, wait_exponential

from finance_tracker.config import get_settings
from finance_tracker.models.audit import AuditEvent, AuditEventType, AuditSeverity
from finance_tracker.models.finance import (
    CreditCard,
    Salary,
    SalaryAdjustment,
    Transaction,
)
from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    FinanceDataSource,
    NotFoundError,
    StorageError,
)


logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# Column mappings for each sheet
TRANSACTION_COLUMNS = [
    "id",
    "description",
    "amount",
    "type",
    "category",
    "date",
    "is_recurring",
    "is_paid",
    "due_date",
    "received_date",
    "card_id",
    "card_name",
    "card_type",
    "original_amount",
    "recurrence_id",
    "installments",
    "installment_number",
    "installment_id",
    "user_id",
    "group_id",
    "created_at",
]

SALARY_COLUMNS = [
    "id",
    "description",
    "company",
    "amount",
    "original_amount",
    "salary_type",
    "is_active",
    "payment_date",
    "created_at",
    "user_id",
    "group_id",
]

ADJUSTMENT_COLUMNS = [
    "salary_id",
    "year",
    "month",
    "amount",
    "description",
    "updated_at",
]

CARD_COLUMNS = [
    "id",
    "name",
    "card_type",
    "due_day",
    "paid_months",
    "created_at",
    "user_id",
    "group_id",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

# Columns holding JSON-encoded lists
JSON_COLUMNS = {"paid_months"}


def model_to_row(model: BaseModel, columns: list[str]) -> list[str]:
    """Serialize a model into the sheet's column order."""
    data = model.model_dump(mode="json")
    row = []
    for column in columns:
        value = data.get(column)
        if value is None:
            row.append("")
        elif column in JSON_COLUMNS:
            row.append(json.dumps(value))
        else:
            row.append(str(value))
    return row


def row_to_model(row: list, columns: list[str], model: Type[ModelT]) -> ModelT:
    """Parse a sheet row back into a model. Blank cells become missing fields."""
    data: dict[str, Any] = {}
    for index, column in enumerate(columns):
        cell = row[index] if index < len(row) else ""
        if cell == "":
            continue
        data[column] = json.loads(cell) if column in JSON_COLUMNS else cell
    return model.model_validate(data)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_sheet(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        """Get or create a worksheet, writing the header row on creation."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        return self.get_sheet(self._settings.transactions_sheet_name, TRANSACTION_COLUMNS)

    def get_salaries_sheet(self) -> gspread.Worksheet:
        return self.get_sheet(self._settings.salaries_sheet_name, SALARY_COLUMNS)

    def get_adjustments_sheet(self) -> gspread.Worksheet:
        return self.get_sheet(self._settings.adjustments_sheet_name, ADJUSTMENT_COLUMNS)

    def get_cards_sheet(self) -> gspread.Worksheet:
        return self.get_sheet(self._settings.cards_sheet_name, CARD_COLUMNS)

    def get_audit_sheet(self) -> gspread.Worksheet:
        # More rows for audit log
        return self.get_sheet(self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000)


class GoogleSheetsDataSource(FinanceDataSource):
    """
    Google Sheets implementation of the finance data source.

    Reads are whole-sheet scans; filtering happens in Python.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _read_rows(self, sheet: gspread.Worksheet) -> list[list]:
        """All data rows (header excluded, blank rows dropped)."""
        return [row for row in sheet.get_all_values()[1:] if row and row[0]]

    def _parse_rows(
        self,
        sheet: gspread.Worksheet,
        columns: list[str],
        model: Type[ModelT],
    ) -> list[ModelT]:
        records = []
        for row in self._read_rows(sheet):
            try:
                records.append(row_to_model(row, columns, model))
            except ValueError as e:
                logger.warning(
                    "sheet_row_skipped",
                    sheet=sheet.title,
                    row_id=row[0],
                    error=str(e),
                )
        return records

    @staticmethod
    def _find_row_index(rows: list[list], predicate) -> Optional[int]:
        """1-based sheet row index of the first matching data row."""
        for idx, row in enumerate(rows[1:], start=2):  # Row 1 is the header
            if row and predicate(row):
                return idx
        return None

    async def list_transactions(self) -> list[Transaction]:
        try:
            sheet = self._client.get_transactions_sheet()
            return self._parse_rows(sheet, TRANSACTION_COLUMNS, Transaction)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list transactions: {e}")

    async def list_salaries(self) -> list[Salary]:
        try:
            sheet = self._client.get_salaries_sheet()
            return self._parse_rows(sheet, SALARY_COLUMNS, Salary)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list salaries: {e}")

    async def list_salary_adjustments(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> list[SalaryAdjustment]:
        try:
            sheet = self._client.get_adjustments_sheet()
            adjustments = self._parse_rows(sheet, ADJUSTMENT_COLUMNS, SalaryAdjustment)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list salary adjustments: {e}")

        return [
            a for a in adjustments
            if (year is None or a.year == year)
            and (month is None or a.month == month)
        ]

    async def list_credit_cards(self) -> list[CreditCard]:
        try:
            sheet = self._client.get_cards_sheet()
            return self._parse_rows(sheet, CARD_COLUMNS, CreditCard)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list cards: {e}")

    async def update_transaction(
        self,
        transaction_id: str,
        changes: dict[str, Any],
    ) -> bool:
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = sheet.get_all_values()
            idx = self._find_row_index(all_rows, lambda row: row[0] == transaction_id)
            if idx is None:
                raise NotFoundError(f"Transaction not found: {transaction_id}")

            current = row_to_model(all_rows[idx - 1], TRANSACTION_COLUMNS, Transaction)
            updated = Transaction.model_validate({**current.model_dump(), **changes})
            new_row = model_to_row(updated, TRANSACTION_COLUMNS)

            # Update each cell in the row
            for col_idx, value in enumerate(new_row, start=1):
                sheet.update_cell(idx, col_idx, value)
            return True
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update transaction: {e}")

    async def delete_transaction(self, transaction_id: str) -> bool:
        try:
            sheet = self._client.get_transactions_sheet()
            idx = self._find_row_index(
                sheet.get_all_values(),
                lambda row: row[0] == transaction_id,
            )
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}")

    async def delete_salary(self, salary_id: str) -> bool:
        try:
            sheet = self._client.get_salaries_sheet()
            idx = self._find_row_index(
                sheet.get_all_values(),
                lambda row: row[0] == salary_id,
            )
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete salary: {e}")

    async def save_salary_adjustment(self, adjustment: SalaryAdjustment) -> bool:
        """Upsert on (salary_id, year, month)."""
        key = [adjustment.salary_id, str(adjustment.year), str(adjustment.month)]
        try:
            sheet = self._client.get_adjustments_sheet()
            if adjustment.updated_at is None:
                adjustment = adjustment.model_copy(update={"updated_at": datetime.utcnow()})
            new_row = model_to_row(adjustment, ADJUSTMENT_COLUMNS)

            idx = self._find_row_index(sheet.get_all_values(), lambda row: row[:3] == key)
            if idx is None:
                sheet.append_row(new_row, value_input_option="RAW")
            else:
                for col_idx, value in enumerate(new_row, start=1):
                    sheet.update_cell(idx, col_idx, value)
            return True
        except Exception as e:
            raise StorageError(f"Failed to save salary adjustment: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=safe_get(0),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=safe_get(5) or None,
            correlation_id=safe_get(6) or None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            # Audit logging should not break the main flow
            logger.warning("audit_sheet_write_failed", error=str(e), event_id=str(event.event_id))
            return False

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except ValueError as e:
                    logger.warning("audit_row_skipped", row_id=row[0], error=str(e))

        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
