"""
Reporting Engine

Pure functions from raw records to report models. No I/O, no clock:
the facade in finance_tracker.orchestrator feeds them data and `now`.
"""

from finance_tracker.reports.aggregator import aggregate_month, build_salary_entries
from finance_tracker.reports.comparator import compare_months
from finance_tracker.reports.formatting import (
    format_currency,
    format_date,
    month_label,
    month_name,
)
from finance_tracker.reports.insights import generate_insights
from finance_tracker.reports.invoice import (
    card_uses_invoice,
    group_card_invoices,
    invoice_due_date,
    new_card_invoice,
    open_invoice_period,
    resolve_invoice_period,
    transaction_period,
    unpaid_total,
)
from finance_tracker.reports.score import compute_score
from finance_tracker.reports.stats import compute_stats

__all__ = [
    # Aggregation
    "aggregate_month",
    "build_salary_entries",
    "compare_months",
    "compute_score",
    "compute_stats",
    "generate_insights",
    # Invoices
    "card_uses_invoice",
    "group_card_invoices",
    "invoice_due_date",
    "new_card_invoice",
    "open_invoice_period",
    "resolve_invoice_period",
    "transaction_period",
    "unpaid_total",
    # Formatting
    "format_currency",
    "format_date",
    "month_label",
    "month_name",
]
