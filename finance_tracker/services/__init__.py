"""Services package."""

from finance_tracker.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    FinanceDataSource,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsDataSource,
    InMemoryAuditStorage,
    InMemoryDataSource,
    NotFoundError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "FinanceDataSource",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsDataSource",
    "InMemoryAuditStorage",
    "InMemoryDataSource",
    "NotFoundError",
    "StorageError",
]
