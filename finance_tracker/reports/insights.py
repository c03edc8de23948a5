"""
Insight Generator

Rule-based, ordered list of observations about a month. The order is the
display priority and is fixed:

1. comparison with the previous month
2. balance sign
3. savings tips (food out, 50/30/20, subscriptions, leisure, impulse
   buys, credit vs debit, transport, missing income, celebration)
4. overdue bills, then bills due soon
5. credit card spend
6. top category

Category rules match keywords as case-insensitive substrings of the
category name (see CategoryCatalog.matches), so they are deliberately
fuzzy.
"""

from typing import Optional

from finance_tracker.models.categories import DEFAULT_CATALOG, CategoryCatalog
from finance_tracker.models.finance import CardType
from finance_tracker.models.report import (
    Insight,
    InsightType,
    MonthComparison,
    MonthSummary,
    Trend,
)
from finance_tracker.reports.formatting import format_currency


FOOD_OUT_LIMIT = 15
LEISURE_LIMIT = 10
TRANSPORT_LIMIT = 15
SAVINGS_TARGET = 20
SAVINGS_CELEBRATION = 30
SMALL_PURCHASE_AMOUNT = 50
SMALL_PURCHASE_COUNT = 15
CREDIT_MIN_TOTAL = 500
TOP_CATEGORY_SHARE = 25
EXPENSE_RISE_LIMIT = 10


def _category_total(summary: MonthSummary, keywords: tuple[str, ...]) -> tuple[float, int]:
    """Total and number of categories matching any keyword."""
    matched = [
        c for c in summary.categories
        if CategoryCatalog.matches(c.category, keywords)
    ]
    return sum(c.amount for c in matched), len(matched)


def _share_of_income(amount: float, summary: MonthSummary) -> float:
    return (amount / summary.total_income * 100) if summary.total_income > 0 else 0.0


def _card_total(summary: MonthSummary, card_type: CardType) -> float:
    return sum(c.total for c in summary.card_expenses if c.card_type == card_type)


def comparison_insights(comparison: MonthComparison) -> list[Insight]:
    insights = []

    if comparison.trend == Trend.IMPROVING:
        insights.append(Insight(
            type=InsightType.SUCCESS,
            title="Saldo Melhorou",
            message=f"Seu saldo subiu {format_currency(comparison.balance_change)} em relação ao mês anterior.",
            icon="trending-up",
        ))
    elif comparison.trend == Trend.WORSENING:
        insights.append(Insight(
            type=InsightType.WARNING,
            title="Saldo Piorou",
            message=f"Seu saldo caiu {format_currency(abs(comparison.balance_change))} em relação ao mês anterior.",
            icon="trending-down",
        ))

    if comparison.expense_change_percent > EXPENSE_RISE_LIMIT:
        insights.append(Insight(
            type=InsightType.WARNING,
            title="Gastos em Alta",
            message=f"Despesas {comparison.expense_change_percent:.0f}% maiores que no mês anterior.",
            icon="arrow-up",
        ))

    return insights


def balance_insight(summary: MonthSummary) -> Optional[Insight]:
    """Nothing when the month breaks exactly even."""
    if summary.balance < 0:
        return Insight(
            type=InsightType.DANGER,
            title="Saldo Negativo",
            message=f"Despesas superam receitas em {format_currency(abs(summary.balance))} neste mês.",
            icon="alert-circle",
        )
    if summary.balance > 0:
        return Insight(
            type=InsightType.SUCCESS,
            title="Saldo Positivo",
            message=f"Você está economizando {format_currency(summary.balance)} este mês!",
            icon="checkmark-circle",
        )
    return None


def savings_tips(summary: MonthSummary, catalog: CategoryCatalog) -> list[Insight]:
    tips = []
    savings = summary.savings_rate

    food_total, _ = _category_total(summary, catalog.food_out_keywords)
    food_share = _share_of_income(food_total, summary)
    if food_share > FOOD_OUT_LIMIT:
        tips.append(Insight(
            type=InsightType.WARNING,
            title="💡 Dica: Alimentação",
            message=(
                f"{food_share:.0f}% da renda em alimentação fora. "
                "Cozinhar em casa pode economizar até 70%!"
            ),
            icon="restaurant",
        ))

    if 0 <= savings < SAVINGS_TARGET and summary.total_income > 0:
        tips.append(Insight(
            type=InsightType.INFO,
            title="💡 Regra 50/30/20",
            message=(
                f"Você está poupando {savings:.0f}%. "
                "Tente guardar 20% da renda para emergências e investimentos."
            ),
            icon="bulb",
        ))

    subscriptions_total, subscription_count = _category_total(summary, catalog.subscription_keywords)
    if subscription_count > 0:
        tips.append(Insight(
            type=InsightType.INFO,
            title="💡 Revise Assinaturas",
            message=(
                f"{format_currency(subscriptions_total)} em assinaturas. "
                "Cancele as que não usa frequentemente."
            ),
            icon="refresh",
        ))

    leisure_total, _ = _category_total(summary, catalog.leisure_keywords)
    leisure_share = _share_of_income(leisure_total, summary)
    if leisure_share > LEISURE_LIMIT:
        tips.append(Insight(
            type=InsightType.WARNING,
            title="💡 Lazer Consciente",
            message=(
                f"{leisure_share:.0f}% em lazer. "
                "Busque alternativas gratuitas como parques e eventos públicos."
            ),
            icon="game-controller",
        ))

    small = [t for t in summary.expenses if t.amount < SMALL_PURCHASE_AMOUNT]
    if len(small) > SMALL_PURCHASE_COUNT:
        tips.append(Insight(
            type=InsightType.WARNING,
            title="💡 Compras por Impulso",
            message=(
                f"{len(small)} compras abaixo de R$50 totalizaram "
                f"{format_currency(sum(t.amount for t in small))}. Pequenos gastos somam!"
            ),
            icon="cart",
        ))

    credit_total = _card_total(summary, CardType.CREDIT)
    debit_total = _card_total(summary, CardType.DEBIT)
    if credit_total > debit_total * 2 and credit_total > CREDIT_MIN_TOTAL:
        ratio = credit_total / (debit_total or 1)
        tips.append(Insight(
            type=InsightType.WARNING,
            title="💡 Prefira o Débito",
            message=(
                f"Crédito é {ratio:.1f}x maior que débito. "
                "Use débito para ter mais controle dos gastos."
            ),
            icon="swap-horizontal",
        ))

    transport_total, _ = _category_total(summary, catalog.transport_keywords)
    transport_share = _share_of_income(transport_total, summary)
    if transport_share > TRANSPORT_LIMIT:
        tips.append(Insight(
            type=InsightType.INFO,
            title="💡 Economize no Transporte",
            message=(
                f"{transport_share:.0f}% em transporte. "
                "Considere caronas, transporte público ou bicicleta."
            ),
            icon="car",
        ))

    if summary.total_income == 0 and summary.total_expenses > 0:
        tips.append(Insight(
            type=InsightType.WARNING,
            title="💡 Registre suas Receitas",
            message="Cadastre seus salários e rendas para ter uma visão completa das finanças.",
            icon="cash",
        ))

    if savings >= SAVINGS_CELEBRATION:
        tips.append(Insight(
            type=InsightType.SUCCESS,
            title="🎉 Excelente!",
            message=(
                f"Você está guardando {savings:.0f}% da renda. "
                "Continue assim e considere investir!"
            ),
            icon="trophy",
        ))

    return tips


def due_insights(summary: MonthSummary, due_soon_days: int = 7) -> list[Insight]:
    insights = []

    if summary.overdue_dues:
        total = sum(d.amount for d in summary.overdue_dues)
        insights.append(Insight(
            type=InsightType.DANGER,
            title=f"{len(summary.overdue_dues)} Conta(s) Atrasada(s)",
            message=f"Total de {format_currency(total)} em atraso.",
            icon="warning",
        ))

    due_soon = [d for d in summary.upcoming_dues if 0 <= d.days_until_due <= due_soon_days]
    if due_soon:
        total = sum(d.amount for d in due_soon)
        insights.append(Insight(
            type=InsightType.WARNING,
            title=f"{len(due_soon)} Conta(s) Vencendo",
            message=f"{format_currency(total)} vencem em {due_soon_days} dias.",
            icon="time",
        ))

    return insights


def generate_insights(
    summary: MonthSummary,
    comparison: Optional[MonthComparison] = None,
    catalog: CategoryCatalog = DEFAULT_CATALOG,
    due_soon_days: int = 7,
) -> list[Insight]:
    """
    Build the ordered insight list for a month.

    Args:
        summary: The month to describe
        comparison: Against the previous month, if known
        catalog: Keyword lists and category labels
        due_soon_days: Window for the "bills due soon" insight

    Returns:
        Insights in display order
    """
    insights: list[Insight] = []

    if comparison is not None:
        insights.extend(comparison_insights(comparison))

    balance = balance_insight(summary)
    if balance is not None:
        insights.append(balance)

    insights.extend(savings_tips(summary, catalog))
    insights.extend(due_insights(summary, due_soon_days))

    if any(c.card_type == CardType.CREDIT for c in summary.card_expenses):
        insights.append(Insight(
            type=InsightType.INFO,
            title="Gastos no Crédito",
            message=f"{format_currency(_card_total(summary, CardType.CREDIT))} no cartão de crédito.",
            icon="card",
        ))

    if summary.categories:
        top = summary.categories[0]
        if top.percentage > TOP_CATEGORY_SHARE:
            insights.append(Insight(
                type=InsightType.INFO,
                title=f"Maior Gasto: {catalog.label_for(top.category)}",
                message=f"{top.percentage:.0f}% das despesas.",
                icon=top.icon or "pie-chart",
            ))

    return insights
