"""
Month-over-month comparison.

The trend threshold is 10% of the PREVIOUS month's balance. When that
balance is negative the threshold changes sign, so small drops in balance
still classify as "improving". Scores and insights are calibrated against
this rule; do not special-case it here.
"""

from finance_tracker.models.report import MonthComparison, MonthSummary, Trend


TREND_THRESHOLD = 0.1


def _change_percent(change: float, previous: float) -> float:
    return (change / previous * 100) if previous != 0 else 0.0


def compare_months(current: MonthSummary, previous: MonthSummary) -> MonthComparison:
    """Deltas from `previous` to `current`."""
    expense_change = current.total_expenses - previous.total_expenses
    income_change = current.total_income - previous.total_income
    balance_change = current.balance - previous.balance

    threshold = previous.balance * TREND_THRESHOLD
    if balance_change > threshold:
        trend = Trend.IMPROVING
    elif balance_change < -threshold:
        trend = Trend.WORSENING
    else:
        trend = Trend.STABLE

    return MonthComparison(
        expense_change=expense_change,
        expense_change_percent=_change_percent(expense_change, previous.total_expenses),
        income_change=income_change,
        income_change_percent=_change_percent(income_change, previous.total_income),
        balance_change=balance_change,
        trend=trend,
    )
