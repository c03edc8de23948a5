"""
Abstract Data Source Interface

DESIGN DECISION: The reporting engine never talks to a backend directly.
It reads four collections through this interface. This allows us to:
1. Swap Google Sheets for Firestore or a real database later
2. Use in-memory storage for testing
3. Keep report logic decoupled from storage implementation

The interface is intentionally small: the four bulk reads the reports
need, plus the handful of writes the edit screens delegate verbatim.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from finance_tracker.models.audit import AuditEvent
from finance_tracker.models.finance import (
    CreditCard,
    Salary,
    SalaryAdjustment,
    Transaction,
)


class FinanceDataSource(ABC):
    """
    Abstract interface for finance record storage.

    Every list_* call returns everything visible to the current user or
    group; access control is the implementation's concern.
    """

    @abstractmethod
    async def list_transactions(self) -> list[Transaction]:
        """
        List every visible transaction.

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def list_salaries(self) -> list[Salary]:
        """
        List every salary definition, active or not.

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def list_salary_adjustments(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> list[SalaryAdjustment]:
        """
        List monthly salary overrides.

        Args:
            year: Only adjustments of this year
            month: Only adjustments of this month (0-indexed)

        Returns:
            Matching adjustments; all of them when no filter is given
        """
        pass

    @abstractmethod
    async def list_credit_cards(self) -> list[CreditCard]:
        """
        List every visible card.

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def update_transaction(
        self,
        transaction_id: str,
        changes: dict[str, Any],
    ) -> bool:
        """
        Apply field changes to a stored transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> bool:
        """
        Delete a transaction by ID.

        Returns:
            True if deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def delete_salary(self, salary_id: str) -> bool:
        """
        Delete a salary definition (removes it from every month).

        Returns:
            True if deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def save_salary_adjustment(self, adjustment: SalaryAdjustment) -> bool:
        """
        Upsert an adjustment on (salary_id, year, month).

        Raises:
            StorageError: If save fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
