"""
Month Aggregator

Builds the MonthSummary of one (month, year) out of the raw records:
real transactions in scope, plus one synthesized income row per active
salary paid that month.

DESIGN DECISION: This module is pure. It never reads a clock or a data
source; `now` is passed in, so running it twice on the same inputs gives
the same summary.
"""

import calendar
import math
import re
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

import structlog

from finance_tracker.models.categories import (
    CARD_PAYMENT_CATEGORY,
    DEFAULT_CATALOG,
    CategoryCatalog,
)
from finance_tracker.models.finance import (
    CardType,
    CreditCard,
    Salary,
    SalaryAdjustment,
    SalaryEntryRef,
    Transaction,
    TransactionType,
)
from finance_tracker.models.report import (
    CardExpense,
    CategoryData,
    DueItem,
    MonthSummary,
)
from finance_tracker.reports.formatting import month_name
from finance_tracker.reports.invoice import as_utc, transaction_period


logger = structlog.get_logger(__name__)

SALARY_CATEGORY = "salario"

SECONDS_PER_DAY = 86400

_DAY_OF_MONTH = re.compile(r"^\d{1,2}$")


# =============================================================================
# SALARY ROWS
# =============================================================================

def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month + 1)[1]


def _parse_payment_date(raw: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def salary_payment_date(
    salary: Salary,
    target_month: int,
    target_year: int,
) -> Optional[datetime]:
    """
    Date the salary is paid in the target month, or None if it is not paid.

    - no payment_date: every month, on day 1
    - full date: only in that date's month
    - bare day of month ("5"): every month on that day, clamped to the
      month's last day
    - anything else: every month, on day 1
    """
    first_day = datetime(target_year, target_month + 1, 1)
    raw = salary.payment_date
    if raw is None:
        return first_day

    if _DAY_OF_MONTH.match(raw):
        day = int(raw)
        if not 1 <= day <= 31:
            logger.warning("salary_payment_day_out_of_range", salary_id=salary.id, payment_date=raw)
            day = max(day, 1)
        day = min(day, _days_in_month(target_year, target_month))
        return first_day.replace(day=day)

    paid_at = _parse_payment_date(raw)
    if paid_at is None:
        logger.warning("salary_payment_date_unparseable", salary_id=salary.id, payment_date=raw)
        return first_day

    if paid_at.month - 1 == target_month and paid_at.year == target_year:
        return paid_at
    return None


def build_salary_entries(
    salaries: Iterable[Salary],
    salary_adjustments: Iterable[SalaryAdjustment],
    target_month: int,
    target_year: int,
) -> list[Transaction]:
    """
    One income row per active salary paid in the month.

    A matching adjustment replaces the amount (and the description, when
    it has one); the base amount is kept in original_amount.
    """
    # Last adjustment written for a key wins
    adjustments = {a.key: a for a in salary_adjustments}
    entries = []

    for salary in salaries:
        if not salary.is_active:
            continue

        paid_at = salary_payment_date(salary, target_month, target_year)
        if paid_at is None:
            continue

        adjustment = adjustments.get((salary.id, target_year, target_month))
        amount = adjustment.amount if adjustment else salary.amount
        description = (adjustment.description if adjustment else None) or salary.description

        ref = SalaryEntryRef(salary_id=salary.id, year=target_year, month=target_month)
        entries.append(
            Transaction(
                id=ref.entry_id,
                description=description,
                amount=amount,
                type=TransactionType.INCOME,
                category=SALARY_CATEGORY,
                date=paid_at,
                is_recurring=True,
                is_paid=True,
                original_amount=salary.amount,
                user_id=salary.user_id,
                group_id=salary.group_id,
                is_salary=True,
                salary_ref=ref,
            )
        )

    return entries


# =============================================================================
# BREAKDOWNS
# =============================================================================

def _category_breakdown(
    expenses: list[Transaction],
    total_expenses: float,
    catalog: CategoryCatalog,
) -> list[CategoryData]:
    """Expenses per category, card payments left out, largest first."""
    totals: dict[str, float] = defaultdict(float)
    for t in expenses:
        if t.category == CARD_PAYMENT_CATEGORY:
            continue
        totals[t.category] += t.amount

    categories = [
        CategoryData(
            category=category,
            amount=amount,
            percentage=(amount / total_expenses * 100) if total_expenses > 0 else 0.0,
            color=catalog.color_for(category),
            icon=catalog.icon_for(category),
        )
        for category, amount in totals.items()
    ]
    categories.sort(key=lambda c: c.amount, reverse=True)
    return categories


def _card_breakdown(expenses: list[Transaction]) -> list[CardExpense]:
    cards: dict[str, CardExpense] = {}
    for t in expenses:
        if not (t.card_id and t.card_name):
            continue
        card = cards.get(t.card_id)
        if card is None:
            card = CardExpense(
                card_id=t.card_id,
                card_name=t.card_name,
                card_type=t.card_type or CardType.CREDIT,
                total=0.0,
                count=0,
            )
            cards[t.card_id] = card
        card.total += t.amount
        card.count += 1

    return sorted(cards.values(), key=lambda c: c.total, reverse=True)


def days_until(due_date: datetime, now: datetime) -> int:
    """Whole days from now to due_date, rounded up (negative when past)."""
    seconds = (as_utc(due_date) - as_utc(now)).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def _due_items(expenses: list[Transaction], now: datetime) -> list[DueItem]:
    """Every expense with a due date, soonest first."""
    items = []
    for t in expenses:
        if t.due_date is None:
            continue
        days = days_until(t.due_date, now)
        items.append(
            DueItem(
                id=t.id,
                description=t.description,
                amount=t.amount,
                due_date=t.due_date,
                is_paid=t.is_paid,
                is_overdue=not t.is_paid and days < 0,
                days_until_due=days,
            )
        )
    items.sort(key=lambda d: d.days_until_due)
    return items


# =============================================================================
# AGGREGATION
# =============================================================================

def aggregate_month(
    transactions: Iterable[Transaction],
    salaries: Iterable[Salary],
    salary_adjustments: Iterable[SalaryAdjustment],
    credit_cards: Iterable[CreditCard],
    target_month: int,
    target_year: int,
    now: datetime,
    catalog: CategoryCatalog = DEFAULT_CATALOG,
) -> MonthSummary:
    """
    Summarize one month.

    Args:
        transactions: Every known transaction; only those in scope are kept
        salaries: Salary definitions (inactive ones are ignored)
        salary_adjustments: Monthly overrides, any month
        credit_cards: Cards referenced by credit transactions
        target_month: 0-indexed month
        target_year: Year
        now: Reference time for due-date math
        catalog: Category colors

    Returns:
        MonthSummary with totals, breakdowns and due items
    """
    if not 0 <= target_month <= 11:
        raise ValueError(f"Month must be between 0 and 11, got {target_month}")

    cards_by_id = {card.id: card for card in credit_cards}

    in_scope = []
    for t in transactions:
        period = transaction_period(t, cards_by_id)
        if period.month == target_month and period.year == target_year:
            in_scope.append(t)

    salary_entries = build_salary_entries(salaries, salary_adjustments, target_month, target_year)

    expenses = [t for t in in_scope if t.is_expense]
    incomes = [t for t in in_scope if t.is_income]

    total_expenses = sum(t.amount for t in expenses)
    total_income = sum(t.amount for t in incomes) + sum(s.amount for s in salary_entries)
    paid_expenses = sum(t.amount for t in expenses if t.is_paid)
    pending_expenses = sum(t.amount for t in expenses if not t.is_paid)

    balance = total_income - total_expenses
    savings_rate = (balance / total_income * 100) if total_income > 0 else 0.0

    due_items = _due_items(expenses, now)

    return MonthSummary(
        month=target_month,
        year=target_year,
        month_name=month_name(target_month),
        total_expenses=total_expenses,
        total_income=total_income,
        balance=balance,
        paid_expenses=paid_expenses,
        pending_expenses=pending_expenses,
        categories=_category_breakdown(expenses, total_expenses, catalog),
        card_expenses=_card_breakdown(expenses),
        upcoming_dues=[d for d in due_items if not d.is_paid and not d.is_overdue],
        overdue_dues=[d for d in due_items if not d.is_paid and d.is_overdue],
        transactions=in_scope,
        salary_entries=salary_entries,
        savings_rate=savings_rate,
        transaction_count=len(in_scope),
        average_expense_per_day=total_expenses / _days_in_month(target_year, target_month),
    )
