"""
Report Models for Finance Tracker

Everything in this module is DERIVED data. Nothing here is persisted;
each model is recomputed from the raw records on every query.

Months are 0-indexed (0 = January) in every report contract.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from finance_tracker.models.finance import CardType, Transaction


class Trend(str, Enum):
    """Direction of the balance between two months."""
    IMPROVING = "improving"
    WORSENING = "worsening"
    STABLE = "stable"


class InsightType(str, Enum):
    """Display severity of an insight."""
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    INFO = "info"


# =============================================================================
# MONTH SUMMARY
# =============================================================================

class CategoryData(BaseModel):
    """Spending of one category in a month."""

    category: str
    amount: float
    percentage: float = Field(
        ...,
        description="Share of the month's total expenses (0-100)"
    )
    color: str
    icon: str = ""


class CardExpense(BaseModel):
    """Spending attributed to one card in a month."""

    card_id: str
    card_name: str
    card_type: CardType
    total: float
    count: int = Field(ge=0)


class DueItem(BaseModel):
    """An expense with a due date, as seen from `now`."""

    id: str
    description: str
    amount: float
    due_date: datetime
    is_paid: bool
    is_overdue: bool
    days_until_due: int


class InvoicePeriod(BaseModel):
    """The invoice a credit purchase is billed in."""

    month: int = Field(..., ge=0, le=11)
    year: int

    @property
    def period_key(self) -> str:
        """YYYY-MM, 1-indexed month (same format as CreditCard.paid_months)."""
        return f"{self.year}-{self.month + 1:02d}"


class MonthSummary(BaseModel):
    """
    Aggregation of one (month, year).

    `transactions` holds the real transactions in scope;
    `salary_entries` the rows synthesized from active salaries.
    """

    month: int = Field(..., ge=0, le=11)
    year: int
    month_name: str

    total_expenses: float = 0.0
    total_income: float = 0.0
    balance: float = 0.0
    paid_expenses: float = 0.0
    pending_expenses: float = 0.0

    categories: list[CategoryData] = Field(default_factory=list)
    card_expenses: list[CardExpense] = Field(default_factory=list)
    upcoming_dues: list[DueItem] = Field(default_factory=list)
    overdue_dues: list[DueItem] = Field(default_factory=list)

    transactions: list[Transaction] = Field(default_factory=list)
    salary_entries: list[Transaction] = Field(default_factory=list)

    savings_rate: float = 0.0
    transaction_count: int = 0
    average_expense_per_day: float = 0.0

    @property
    def entries(self) -> list[Transaction]:
        """Every row shown for the month, salaries first."""
        return [*self.salary_entries, *self.transactions]

    @property
    def expenses(self) -> list[Transaction]:
        return [t for t in self.transactions if t.is_expense]


# =============================================================================
# COMPARISON / SCORE / STATS
# =============================================================================

class MonthComparison(BaseModel):
    """Deltas from a previous month to the current one."""

    expense_change: float
    expense_change_percent: float
    income_change: float
    income_change_percent: float
    balance_change: float
    trend: Trend


class FinancialScore(BaseModel):
    """Weighted health score of a month and what to do about it."""

    score: int = Field(..., ge=0, le=100)
    savings_score: int = Field(..., ge=0, le=30)
    payment_score: int = Field(..., ge=0, le=30)
    diversification_score: int = Field(..., ge=0, le=20)
    credit_usage_score: int = Field(..., ge=0, le=20)
    recommendations: list[str] = Field(default_factory=list)


class DayOfWeekStat(BaseModel):
    """Spending on one weekday (0 = Sunday)."""

    day: int = Field(..., ge=0, le=6)
    day_name: str
    total: float
    count: int


class CategoryGrowth(BaseModel):
    """How much a category moved against the previous month."""

    category: str
    current_amount: float
    previous_amount: float
    growth: float
    growth_percent: float


class TopExpense(BaseModel):
    """One of the largest expenses of the month."""

    id: str
    description: str
    category: str
    amount: float
    date: datetime
    formatted_date: str


class PeriodStats(BaseModel):
    """Derived statistics of a month."""

    day_of_week_stats: list[DayOfWeekStat] = Field(default_factory=list)
    category_growth: list[CategoryGrowth] = Field(default_factory=list)
    top_expenses: list[TopExpense] = Field(default_factory=list)


class Insight(BaseModel):
    """A human-readable observation about the month."""

    type: InsightType
    title: str
    message: str
    icon: str


# =============================================================================
# FACADE OUTPUTS
# =============================================================================

class TrendSeries(BaseModel):
    """Parallel arrays for the monthly trend chart."""

    labels: list[str] = Field(default_factory=list)
    expenses: list[float] = Field(default_factory=list)
    income: list[float] = Field(default_factory=list)


class CardInvoice(BaseModel):
    """All purchases of a card billed in one invoice period."""

    period: str = Field(..., description="YYYY-MM")
    display_month: str
    due_date: date
    total_amount: float = 0.0
    transaction_count: int = 0
    is_paid: bool = False
    is_overdue: bool = Field(False, description="Unpaid and past its due date")
    transactions: list[Transaction] = Field(default_factory=list)


class MonthReport(BaseModel):
    """Everything recomputed when a month is selected."""

    summary: MonthSummary
    previous: MonthSummary
    comparison: MonthComparison
    score: FinancialScore
    stats: PeriodStats
    insights: list[Insight] = Field(default_factory=list)
    generated_at: Optional[datetime] = None
