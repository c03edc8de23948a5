"""
Audit Logger

DESIGN DECISION: Every data refresh and every edit routed through the
reporting facade is logged. This provides:
1. Traceability of what data a report was computed from
2. Debugging capability when a refresh fails
3. A visible history of salary adjustments and deletions

The audit logger:
- Is async so it fits the facade's async flows
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to tie the events of one refresh together
"""

import logging
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from finance_tracker.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog through stdlib logging at the given level."""
    logging.basicConfig(format="%(message)s", level=level)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_data_loaded(
        self,
        counts: dict[str, int],
        correlation_id: UUID,
    ) -> None:
        """Log a successful load of all four collections."""
        await self.log(AuditEventBuilder.data_loaded(counts, correlation_id))

    async def log_data_load_failed(
        self,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.data_load_failed(error_message, correlation_id))

    async def log_month_selected(
        self,
        month: int,
        year: int,
        score: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.month_selected(month, year, score, correlation_id)
        )

    async def log_transaction_updated(
        self,
        transaction_id: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.transaction_updated(transaction_id, changes, correlation_id)
        )

    async def log_transaction_deleted(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.transaction_deleted(transaction_id, correlation_id)
        )

    async def log_salary_adjustment_saved(
        self,
        salary_id: str,
        year: int,
        month: int,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a monthly salary override."""
        await self.log(
            AuditEventBuilder.salary_adjustment_saved(
                salary_id=salary_id,
                year=year,
                month=month,
                amount=amount,
                correlation_id=correlation_id,
            )
        )

    async def log_salary_deleted(
        self,
        salary_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.salary_deleted(salary_id, correlation_id))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a refresh or an edit and pass it through
    every event that operation produces.
    """
    return uuid4()
