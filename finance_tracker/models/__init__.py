"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker system.
All data flowing through the reporting engine must conform to these schemas.
"""

from finance_tracker.models.finance import (
    CardType,
    CreditCard,
    EntryRef,
    Salary,
    SalaryAdjustment,
    SalaryEntryRef,
    SalaryType,
    Transaction,
    TransactionRef,
    TransactionType,
    parse_entry_id,
)
from finance_tracker.models.categories import (
    CARD_PAYMENT_CATEGORY,
    DEFAULT_CATALOG,
    CategoryCatalog,
)
from finance_tracker.models.report import (
    CardExpense,
    CardInvoice,
    CategoryData,
    CategoryGrowth,
    DayOfWeekStat,
    DueItem,
    FinancialScore,
    Insight,
    InsightType,
    InvoicePeriod,
    MonthComparison,
    MonthReport,
    MonthSummary,
    PeriodStats,
    TopExpense,
    Trend,
    TrendSeries,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Records
    "CardType",
    "CreditCard",
    "EntryRef",
    "Salary",
    "SalaryAdjustment",
    "SalaryEntryRef",
    "SalaryType",
    "Transaction",
    "TransactionRef",
    "TransactionType",
    "parse_entry_id",
    # Categories
    "CARD_PAYMENT_CATEGORY",
    "DEFAULT_CATALOG",
    "CategoryCatalog",
    # Reports
    "CardExpense",
    "CardInvoice",
    "CategoryData",
    "CategoryGrowth",
    "DayOfWeekStat",
    "DueItem",
    "FinancialScore",
    "Insight",
    "InsightType",
    "InvoicePeriod",
    "MonthComparison",
    "MonthReport",
    "MonthSummary",
    "PeriodStats",
    "TopExpense",
    "Trend",
    "TrendSeries",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
