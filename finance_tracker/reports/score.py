"""
Financial Score Engine

Scores a month from 0 to 100 across four dimensions:

    savings          0-30   how much of the income was kept
    payment          0-30   how much of the spending is already paid
    diversification  0-20   how concentrated spending is in one category
    credit usage     0-20   how much of the spending went on credit

Every threshold below is a business rule; `>=` and `>` are not
interchangeable.
"""

from typing import Optional

from finance_tracker.models.finance import CardType
from finance_tracker.models.report import FinancialScore, MonthComparison, MonthSummary


# =============================================================================
# SUB-SCORES
# =============================================================================

def savings_score(savings_rate: float) -> int:
    if savings_rate >= 30:
        return 30
    if savings_rate >= 20:
        return 25
    if savings_rate >= 10:
        return 15
    if savings_rate >= 5:
        return 10
    if savings_rate > 0:
        return 5
    return 0


def payment_rate(summary: MonthSummary) -> float:
    """Share of expenses already paid; 100 when there is nothing to pay."""
    if summary.total_expenses == 0:
        return 100.0
    return summary.paid_expenses / summary.total_expenses * 100


def payment_score(rate: float, overdue_count: int) -> int:
    if rate >= 95:
        score = 30
    elif rate >= 80:
        score = 20
    elif rate >= 60:
        score = 10
    else:
        score = 5

    if overdue_count > 0:
        score = max(score - 10, 0)
    return score


def top_category_percentage(summary: MonthSummary) -> float:
    # Categories are sorted largest first
    return summary.categories[0].percentage if summary.categories else 0.0


def diversification_score(top_percentage: float, category_count: int) -> int:
    if top_percentage < 30 and category_count >= 5:
        return 20
    if top_percentage < 40 and category_count >= 4:
        return 15
    if top_percentage < 50:
        return 10
    return 5


def credit_usage_rate(summary: MonthSummary) -> float:
    """Share of expenses made on credit cards; 0 when there are no expenses."""
    if summary.total_expenses == 0:
        return 0.0
    credit_total = sum(
        c.total for c in summary.card_expenses if c.card_type == CardType.CREDIT
    )
    return credit_total / summary.total_expenses * 100


def credit_usage_score(rate: float) -> int:
    if rate < 30:
        return 20
    if rate < 50:
        return 15
    if rate < 70:
        return 10
    return 5


# =============================================================================
# SCORE
# =============================================================================

def compute_score(
    summary: MonthSummary,
    comparison: Optional[MonthComparison] = None,
) -> FinancialScore:
    """
    Score a month and list what to improve.

    Recommendations come in a fixed order: savings, overdue bills,
    category concentration, credit usage, rising expenses, investing.
    """
    recommendations: list[str] = []

    savings = savings_score(summary.savings_rate)
    if summary.savings_rate < 20:
        recommendations.append(
            "Tente economizar pelo menos 20% da sua renda todo mês."
        )

    overdue_count = len(summary.overdue_dues)
    payment = payment_score(payment_rate(summary), overdue_count)
    if overdue_count > 0:
        recommendations.append(
            f"Você tem {overdue_count} conta(s) atrasada(s). Regularize para evitar juros e multas."
        )

    top_percentage = top_category_percentage(summary)
    diversification = diversification_score(top_percentage, len(summary.categories))
    if top_percentage > 50:
        recommendations.append(
            "Mais da metade dos gastos está em uma única categoria. Avalie onde é possível reduzir."
        )

    credit_rate = credit_usage_rate(summary)
    credit = credit_usage_score(credit_rate)
    if credit_rate > 60:
        recommendations.append(
            "Uso alto do cartão de crédito. Prefira o débito para ter mais controle dos gastos."
        )

    if comparison is not None and comparison.expense_change_percent > 15:
        recommendations.append(
            f"Seus gastos aumentaram {comparison.expense_change_percent:.0f}% em relação ao mês anterior."
        )

    if summary.savings_rate > 25:
        recommendations.append(
            "Ótima taxa de poupança! Considere investir o excedente."
        )

    return FinancialScore(
        score=savings + payment + diversification + credit,
        savings_score=savings,
        payment_score=payment,
        diversification_score=diversification,
        credit_usage_score=credit,
        recommendations=recommendations,
    )
