"""
In-Memory Storage Implementation

Keeps every collection in plain dicts. Used by tests and by
create_app_components(use_storage=False); nothing survives the process.
"""

from typing import Any, Iterable, Optional

from finance_tracker.models.audit import AuditEvent
from finance_tracker.models.finance import (
    CreditCard,
    Salary,
    SalaryAdjustment,
    Transaction,
)
from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    FinanceDataSource,
    NotFoundError,
    StorageError,
)


class InMemoryDataSource(FinanceDataSource):
    """Dict-backed data source."""

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        salaries: Iterable[Salary] = (),
        adjustments: Iterable[SalaryAdjustment] = (),
        cards: Iterable[CreditCard] = (),
    ):
        self._transactions = {t.id: t for t in transactions}
        self._salaries = {s.id: s for s in salaries}
        # Keyed on (salary_id, year, month); later entries overwrite earlier ones
        self._adjustments = {a.key: a for a in adjustments}
        self._cards = {c.id: c for c in cards}

    async def list_transactions(self) -> list[Transaction]:
        return list(self._transactions.values())

    async def list_salaries(self) -> list[Salary]:
        return list(self._salaries.values())

    async def list_salary_adjustments(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> list[SalaryAdjustment]:
        return [
            a for a in self._adjustments.values()
            if (year is None or a.year == year)
            and (month is None or a.month == month)
        ]

    async def list_credit_cards(self) -> list[CreditCard]:
        return list(self._cards.values())

    async def update_transaction(
        self,
        transaction_id: str,
        changes: dict[str, Any],
    ) -> bool:
        current = self._transactions.get(transaction_id)
        if current is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        try:
            updated = Transaction.model_validate({**current.model_dump(), **changes})
        except ValueError as e:
            raise StorageError(f"Failed to update transaction: {e}")
        self._transactions[transaction_id] = updated
        return True

    async def delete_transaction(self, transaction_id: str) -> bool:
        return self._transactions.pop(transaction_id, None) is not None

    async def delete_salary(self, salary_id: str) -> bool:
        return self._salaries.pop(salary_id, None) is not None

    async def save_salary_adjustment(self, adjustment: SalaryAdjustment) -> bool:
        self._adjustments[adjustment.key] = adjustment
        return True


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed, append-only audit log."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
