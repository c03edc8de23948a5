"""
Main Orchestrator for Finance Tracker

This module ties the data source, the reporting engine and the audit
trail together into the flow the screens use:

1. Load (fetch all four collections → snapshot)
2. Select month (summary → previous → comparison → score → stats → insights)
3. Edit/delete an entry (delegate to the data source → reload → recompute)

DESIGN DECISION: The orchestrator enforces the boundaries:
- A refresh is all-or-nothing. If any collection fails to load, the
  previous snapshot stays in place and nothing is recomputed
- Reports are only ever computed from a complete snapshot
- Every load and every edit is audited

The reporting functions themselves stay pure; this is the only place
that reads a clock or talks to storage.
"""

import asyncio
from datetime import datetime
from typing import Callable, Optional, Union
from uuid import UUID
from zoneinfo import ZoneInfo

import structlog
from pydantic import BaseModel, ConfigDict, Field

from finance_tracker.audit import AuditLogger, configure_logging, create_correlation_id
from finance_tracker.config import get_settings
from finance_tracker.models.categories import DEFAULT_CATALOG, CategoryCatalog
from finance_tracker.models.finance import (
    CreditCard,
    Salary,
    SalaryAdjustment,
    SalaryEntryRef,
    Transaction,
    TransactionRef,
    parse_entry_id,
)
from finance_tracker.models.report import (
    CardInvoice,
    MonthReport,
    MonthSummary,
    TrendSeries,
)
from finance_tracker.reports import (
    aggregate_month,
    card_uses_invoice,
    compare_months,
    compute_score,
    compute_stats,
    generate_insights,
    group_card_invoices,
    month_label,
    new_card_invoice,
    open_invoice_period,
    unpaid_total,
)
from finance_tracker.services.storage import (
    FinanceDataSource,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsDataSource,
    InMemoryDataSource,
    NotFoundError,
    StorageError,
)


logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]
Ref = Union[TransactionRef, SalaryEntryRef, str]


class DataLoadError(Exception):
    """One of the collections could not be loaded; no report was computed."""
    pass


class ReportNotReadyError(Exception):
    """A report was requested before any successful load."""
    pass


class FinanceSnapshot(BaseModel):
    """The four collections as of one successful load."""
    model_config = ConfigDict(frozen=True)

    transactions: tuple[Transaction, ...] = ()
    salaries: tuple[Salary, ...] = ()
    salary_adjustments: tuple[SalaryAdjustment, ...] = ()
    credit_cards: tuple[CreditCard, ...] = ()
    loaded_at: datetime = Field(default_factory=datetime.utcnow)

    def counts(self) -> dict[str, int]:
        return {
            "transactions": len(self.transactions),
            "salaries": len(self.salaries),
            "salary_adjustments": len(self.salary_adjustments),
            "credit_cards": len(self.credit_cards),
        }


def previous_month(month: int, year: int) -> tuple[int, int]:
    """(month, year) before the given one; January rolls back to December."""
    if month == 0:
        return 11, year - 1
    return month - 1, year


def default_clock(timezone_name: Optional[str] = None) -> Clock:
    """Wall clock in the configured timezone."""
    tz = ZoneInfo(timezone_name or get_settings().report.timezone)
    return lambda: datetime.now(tz)


class ReportingFlow:
    """
    Orchestrates loading and month reporting.

    Flow:
    1. load() → all four collections fetched together
    2. select_month() → full MonthReport for the chosen month
    3. trend_series() → January..selected month for charting
    4. edit_entry()/delete_entry() → delegated write, then refresh

    Salary rows are never edited in place: an edit saves a monthly
    adjustment and leaves the base salary untouched.
    """

    def __init__(
        self,
        data_source: FinanceDataSource,
        audit_logger: Optional[AuditLogger] = None,
        catalog: CategoryCatalog = DEFAULT_CATALOG,
        clock: Optional[Clock] = None,
        top_expenses_limit: Optional[int] = None,
        due_soon_days: Optional[int] = None,
    ):
        settings = get_settings().report

        self._data_source = data_source
        self._audit_logger = audit_logger
        self._catalog = catalog
        self._clock = clock or default_clock(settings.timezone)
        self._top_expenses_limit = (
            top_expenses_limit if top_expenses_limit is not None else settings.top_expenses_limit
        )
        self._due_soon_days = (
            due_soon_days if due_soon_days is not None else settings.due_soon_days
        )

        self._snapshot: Optional[FinanceSnapshot] = None
        self._selected: Optional[tuple[int, int]] = None
        self._report: Optional[MonthReport] = None

    @property
    def snapshot(self) -> Optional[FinanceSnapshot]:
        return self._snapshot

    @property
    def report(self) -> Optional[MonthReport]:
        """Report of the selected month, as last computed."""
        return self._report

    @property
    def selected_month(self) -> tuple[int, int]:
        """(month, year) currently selected; defaults to the clock's month."""
        if self._selected is not None:
            return self._selected
        now = self._clock()
        return now.month - 1, now.year

    # =========================================================================
    # LOADING
    # =========================================================================

    async def load(self, correlation_id: Optional[UUID] = None) -> FinanceSnapshot:
        """
        Fetch all four collections.

        Either every fetch succeeds and the snapshot is replaced, or
        DataLoadError is raised and the previous snapshot is kept.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            transactions, salaries, adjustments, cards = await asyncio.gather(
                self._data_source.list_transactions(),
                self._data_source.list_salaries(),
                self._data_source.list_salary_adjustments(),
                self._data_source.list_credit_cards(),
            )
        except Exception as e:
            logger.error("data_load_failed", error=str(e), correlation_id=str(correlation_id))
            if self._audit_logger:
                await self._audit_logger.log_data_load_failed(
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise DataLoadError(f"Failed to load finance data: {e}") from e

        snapshot = FinanceSnapshot(
            transactions=tuple(transactions),
            salaries=tuple(salaries),
            salary_adjustments=tuple(adjustments),
            credit_cards=tuple(cards),
        )
        self._snapshot = snapshot

        if self._audit_logger:
            await self._audit_logger.log_data_loaded(
                counts=snapshot.counts(),
                correlation_id=correlation_id,
            )

        return snapshot

    async def refresh(self, correlation_id: Optional[UUID] = None) -> Optional[MonthReport]:
        """Reload, then recompute the selected month if one was selected."""
        correlation_id = correlation_id or create_correlation_id()
        await self.load(correlation_id)
        if self._selected is None:
            return None
        month, year = self._selected
        return await self.select_month(month, year, correlation_id)

    # =========================================================================
    # REPORTS
    # =========================================================================

    def _require_snapshot(self) -> FinanceSnapshot:
        if self._snapshot is None:
            raise ReportNotReadyError("No data loaded yet. Call load() first.")
        return self._snapshot

    def summarize(self, month: int, year: int) -> MonthSummary:
        """MonthSummary of any month of the current snapshot."""
        snapshot = self._require_snapshot()
        return aggregate_month(
            snapshot.transactions,
            snapshot.salaries,
            snapshot.salary_adjustments,
            snapshot.credit_cards,
            target_month=month,
            target_year=year,
            now=self._clock(),
            catalog=self._catalog,
        )

    async def select_month(
        self,
        month: int,
        year: int,
        correlation_id: Optional[UUID] = None,
    ) -> MonthReport:
        """
        Recompute everything shown for a month.

        Summary, previous month, comparison, score, stats and insights
        are always computed together from the same snapshot.
        """
        if not 0 <= month <= 11:
            raise ValueError(f"Month must be between 0 and 11, got {month}")
        self._require_snapshot()

        current = self.summarize(month, year)
        previous = self.summarize(*previous_month(month, year))
        comparison = compare_months(current, previous)

        report = MonthReport(
            summary=current,
            previous=previous,
            comparison=comparison,
            score=compute_score(current, comparison),
            stats=compute_stats(current, previous, self._top_expenses_limit),
            insights=generate_insights(
                current,
                comparison,
                catalog=self._catalog,
                due_soon_days=self._due_soon_days,
            ),
            generated_at=self._clock(),
        )

        self._selected = (month, year)
        self._report = report

        if self._audit_logger:
            await self._audit_logger.log_month_selected(
                month=month,
                year=year,
                score=report.score.score,
                correlation_id=correlation_id,
            )

        return report

    def trend_series(self) -> TrendSeries:
        """Expense and income totals from January to the selected month."""
        self._require_snapshot()
        selected, year = self.selected_month

        series = TrendSeries()
        for month in range(selected + 1):
            summary = self.summarize(month, year)
            series.labels.append(month_label(month))
            series.expenses.append(summary.total_expenses)
            series.income.append(summary.total_income)
        return series

    # =========================================================================
    # CARDS
    # =========================================================================

    def _find_card(self, card_id: str) -> CreditCard:
        snapshot = self._require_snapshot()
        for card in snapshot.credit_cards:
            if card.id == card_id:
                return card
        raise NotFoundError(f"Card not found: {card_id}")

    def card_invoices(self, card_id: str) -> list[CardInvoice]:
        """Every invoice of a card, newest first."""
        card = self._find_card(card_id)
        return group_card_invoices(card, self._snapshot.transactions, self._clock())

    def card_unpaid_total(self, card_id: str) -> float:
        """Total of the card's invoices not yet marked paid; debit cards have none."""
        card = self._find_card(card_id)
        if not card_uses_invoice(card):
            return 0.0
        return unpaid_total(group_card_invoices(card, self._snapshot.transactions, self._clock()))

    def open_invoice(self, card_id: str) -> CardInvoice:
        """The invoice currently accepting purchases (empty if it has none yet)."""
        card = self._find_card(card_id)
        today = self._clock()
        period = open_invoice_period(card, today)

        for invoice in group_card_invoices(card, self._snapshot.transactions, today):
            if invoice.period == period.period_key:
                return invoice

        return new_card_invoice(card, period, today)

    # =========================================================================
    # EDITS
    # =========================================================================

    async def edit_entry(
        self,
        ref: Ref,
        amount: float,
        description: Optional[str] = None,
    ) -> Optional[MonthReport]:
        """
        Change the amount (and optionally the description) of a row.

        Salary rows become a SalaryAdjustment for that month; real
        transactions are updated in place. Reloads afterwards.
        """
        if isinstance(ref, str):
            ref = parse_entry_id(ref)
        correlation_id = create_correlation_id()

        try:
            if isinstance(ref, SalaryEntryRef):
                adjustment = SalaryAdjustment(
                    salary_id=ref.salary_id,
                    year=ref.year,
                    month=ref.month,
                    amount=amount,
                    description=description,
                    updated_at=self._clock(),
                )
                await self._data_source.save_salary_adjustment(adjustment)
                if self._audit_logger:
                    await self._audit_logger.log_salary_adjustment_saved(
                        salary_id=ref.salary_id,
                        year=ref.year,
                        month=ref.month,
                        amount=amount,
                        correlation_id=correlation_id,
                    )
            else:
                changes: dict = {"amount": amount}
                if description is not None:
                    changes["description"] = description
                await self._data_source.update_transaction(ref.id, changes)
                if self._audit_logger:
                    await self._audit_logger.log_transaction_updated(
                        transaction_id=ref.id,
                        changes=changes,
                        correlation_id=correlation_id,
                    )
        except (StorageError, ValueError) as e:
            await self._log_edit_failure("edit_failed", ref, e, correlation_id)
            raise

        return await self.refresh(correlation_id)

    async def delete_entry(self, ref: Ref) -> Optional[MonthReport]:
        """
        Delete a row.

        Deleting a salary row deletes the salary itself, so it disappears
        from every month. Reloads afterwards.
        """
        if isinstance(ref, str):
            ref = parse_entry_id(ref)
        correlation_id = create_correlation_id()

        try:
            if isinstance(ref, SalaryEntryRef):
                await self._data_source.delete_salary(ref.salary_id)
                if self._audit_logger:
                    await self._audit_logger.log_salary_deleted(
                        salary_id=ref.salary_id,
                        correlation_id=correlation_id,
                    )
            else:
                await self._data_source.delete_transaction(ref.id)
                if self._audit_logger:
                    await self._audit_logger.log_transaction_deleted(
                        transaction_id=ref.id,
                        correlation_id=correlation_id,
                    )
        except StorageError as e:
            await self._log_edit_failure("delete_failed", ref, e, correlation_id)
            raise

        return await self.refresh(correlation_id)

    async def _log_edit_failure(
        self,
        error_type: str,
        ref: Union[TransactionRef, SalaryEntryRef],
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        logger.error(error_type, entry_id=ref.entry_id, error=str(error))
        if self._audit_logger:
            await self._audit_logger.log_error(
                error_type=error_type,
                error_message=str(error),
                details={"entry_id": ref.entry_id},
                correlation_id=correlation_id,
            )


def create_app_components(
    use_storage: bool = True,
) -> tuple[ReportingFlow, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to run on an empty in-memory source.

    Returns:
        (reporting_flow, sheets_client)
    """
    configure_logging(get_settings().app.log_level)
    sheets_client = None

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            data_source: FinanceDataSource = GoogleSheetsDataSource(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            data_source = InMemoryDataSource()
            audit_logger = AuditLogger()  # Local-only logging
    else:
        data_source = InMemoryDataSource()
        audit_logger = AuditLogger()  # Local-only logging

    reporting_flow = ReportingFlow(
        data_source=data_source,
        audit_logger=audit_logger,
    )

    return reporting_flow, sheets_client
