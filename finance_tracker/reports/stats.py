"""
Period Statistics

Weekday distribution, category growth against the previous month and
the largest expenses of a month. Computed from MonthSummary only.
"""

from collections import defaultdict
from typing import Optional

from finance_tracker.models.categories import CARD_PAYMENT_CATEGORY
from finance_tracker.models.report import (
    CategoryGrowth,
    DayOfWeekStat,
    MonthSummary,
    PeriodStats,
    TopExpense,
)
from finance_tracker.reports.formatting import (
    DAY_NAMES,
    format_date,
    sunday_first_weekday,
)


# Categories that moved less than this (in %) are not reported
GROWTH_THRESHOLD = 10


def day_of_week_stats(summary: MonthSummary) -> list[DayOfWeekStat]:
    """Expenses per weekday, biggest day first. Days without expenses are left out."""
    totals: dict[int, float] = defaultdict(float)
    counts: dict[int, int] = defaultdict(int)
    for t in summary.expenses:
        day = sunday_first_weekday(t.date)
        totals[day] += t.amount
        counts[day] += 1

    stats = [
        DayOfWeekStat(day=day, day_name=DAY_NAMES[day], total=total, count=counts[day])
        for day, total in totals.items()
    ]
    stats.sort(key=lambda s: s.total, reverse=True)
    return stats


def category_growth(current: MonthSummary, previous: MonthSummary) -> list[CategoryGrowth]:
    """Categories that moved more than 10% either way, biggest move first."""
    previous_amounts = {c.category: c.amount for c in previous.categories}

    growth = []
    for c in current.categories:
        previous_amount = previous_amounts.get(c.category, 0.0)
        change = c.amount - previous_amount
        if previous_amount > 0:
            percent = change / previous_amount * 100
        else:
            percent = 100.0 if change > 0 else 0.0

        if abs(percent) > GROWTH_THRESHOLD:
            growth.append(
                CategoryGrowth(
                    category=c.category,
                    current_amount=c.amount,
                    previous_amount=previous_amount,
                    growth=change,
                    growth_percent=percent,
                )
            )

    growth.sort(key=lambda g: abs(g.growth_percent), reverse=True)
    return growth


def top_expenses(summary: MonthSummary, limit: int = 5) -> list[TopExpense]:
    """Largest expenses of the month, card payments excluded."""
    expenses = [t for t in summary.expenses if t.category != CARD_PAYMENT_CATEGORY]
    expenses.sort(key=lambda t: t.amount, reverse=True)

    return [
        TopExpense(
            id=t.id,
            description=t.description,
            category=t.category,
            amount=t.amount,
            date=t.date,
            formatted_date=format_date(t.date),
        )
        for t in expenses[:limit]
    ]


def compute_stats(
    current: MonthSummary,
    previous: Optional[MonthSummary] = None,
    top_limit: int = 5,
) -> PeriodStats:
    """All statistics of a month; growth only when a previous month is given."""
    return PeriodStats(
        day_of_week_stats=day_of_week_stats(current),
        category_growth=category_growth(current, previous) if previous is not None else [],
        top_expenses=top_expenses(current, top_limit),
    )
