"""Tests for the insight generator."""

import pytest
from datetime import datetime, timedelta

from finance_tracker.models.finance import CardType
from finance_tracker.models.report import InsightType, MonthComparison, Trend
from finance_tracker.reports.aggregator import aggregate_month
from finance_tracker.reports.formatting import format_currency
from finance_tracker.reports.insights import generate_insights


NOW = datetime(2024, 3, 15, 12, 0)


def month(transactions):
    return aggregate_month(transactions, [], [], [], 2, 2024, NOW)


def titles(insights):
    return [i.title for i in insights]


class TestFormatting:
    """Tests for pt-BR currency formatting."""

    def test_format_currency(self):
        """Test thousands and decimal separators."""
        assert format_currency(600) == "R$ 600,00"
        assert format_currency(1234.5) == "R$ 1.234,50"
        assert format_currency(1234567.891) == "R$ 1.234.567,89"


class TestSavingsTips:
    """Tests for the savings tip rules."""

    def test_scenario_impulse_purchases(self, make_expense):
        """Test 20 small purchases trigger the impulse insight with count and total."""
        categories = ["mercado", "farmacia", "padaria", "pets"]
        summary = month([
            make_expense(30, category=categories[i % 4]) for i in range(20)
        ])
        insights = generate_insights(summary)
        impulse = next(i for i in insights if i.title == "💡 Compras por Impulso")
        assert impulse.type == InsightType.WARNING
        assert impulse.message.startswith("20 compras abaixo de R$50")
        assert "R$ 600,00" in impulse.message

    def test_fifteen_small_purchases_is_not_enough(self, make_expense):
        """Test the impulse rule needs more than 15 purchases."""
        summary = month([make_expense(30) for _ in range(15)])
        assert "💡 Compras por Impulso" not in titles(generate_insights(summary))

    def test_food_out_matches_substring(self, make_expense, make_income):
        """Test category keywords match as substrings."""
        summary = month([make_income(1000), make_expense(200, category="Restaurante_Japones")])
        food = next(i for i in generate_insights(summary) if i.icon == "restaurant")
        assert food.message.startswith("20% da renda")

    def test_leisure_matches_cinema(self, make_expense, make_income):
        """Test any category containing 'cinema' counts as leisure."""
        summary = month([make_income(1000), make_expense(150, category="cinema")])
        assert "💡 Lazer Consciente" in titles(generate_insights(summary))

    def test_savings_nudge_and_celebration(self, make_expense, make_income):
        """Test the 50/30/20 nudge below 20% and the celebration at 30%."""
        low = month([make_income(1000), make_expense(900, category="mercado")])
        assert "💡 Regra 50/30/20" in titles(generate_insights(low))

        high = month([make_income(1000), make_expense(700, category="mercado")])
        high_titles = titles(generate_insights(high))
        assert "🎉 Excelente!" in high_titles
        assert "💡 Regra 50/30/20" not in high_titles

    def test_prefer_debit(self, make_expense):
        """Test credit more than twice debit and above 500."""
        summary = month([
            make_expense(900, card_id="c", card_name="Crédito", card_type=CardType.CREDIT),
            make_expense(100, card_id="d", card_name="Débito", card_type=CardType.DEBIT),
        ])
        debit_tip = next(i for i in generate_insights(summary) if i.title == "💡 Prefira o Débito")
        assert debit_tip.message.startswith("Crédito é 9.0x maior")

    def test_no_income(self, make_expense):
        """Test the missing income reminder."""
        summary = month([make_expense(10)])
        assert "💡 Registre suas Receitas" in titles(generate_insights(summary))

    def test_subscriptions_match_substring(self, make_expense, make_income):
        """Test every category containing a subscription keyword is summed."""
        summary = month([
            make_income(1000),
            make_expense(55.9, category="Netflix_Familia"),
            make_expense(99.1, category="academia"),
        ])
        tip = next(i for i in generate_insights(summary) if i.title == "💡 Revise Assinaturas")
        assert tip.type == InsightType.INFO
        assert tip.message.startswith("R$ 155,00 em assinaturas")

    def test_no_subscriptions(self, make_expense, make_income):
        """Test the subscription tip needs at least one matching category."""
        summary = month([make_income(1000), make_expense(100, category="mercado")])
        assert "💡 Revise Assinaturas" not in titles(generate_insights(summary))

    def test_transport_above_limit(self, make_expense, make_income):
        """Test transport over 15% of income, matched through the '99' keyword."""
        summary = month([make_income(1000), make_expense(200, category="99_taxi")])
        tip = next(i for i in generate_insights(summary) if i.title == "💡 Economize no Transporte")
        assert tip.message.startswith("20% em transporte")

    @pytest.mark.parametrize("title, category, amount", [
        ("💡 Dica: Alimentação", "lanche", 150),
        ("💡 Lazer Consciente", "cinema", 100),
        ("💡 Economize no Transporte", "uber", 150),
    ])
    def test_share_rules_need_strictly_more(self, make_expense, make_income, title, category, amount):
        """Test exactly 15% food out, 10% leisure or 15% transport does not fire."""
        summary = month([make_income(1000), make_expense(amount, category=category)])
        assert title not in titles(generate_insights(summary))


class TestComparisonInsights:
    """Tests for insights built from the previous month."""

    def test_worsening_trend(self, make_expense, make_income):
        """Test a falling balance produces a warning with the absolute drop."""
        summary = month([make_income(1000), make_expense(500, category="mercado")])
        comparison = MonthComparison(
            expense_change=0, expense_change_percent=0,
            income_change=-300, income_change_percent=-23,
            balance_change=-300, trend=Trend.WORSENING,
        )
        insights = generate_insights(summary, comparison)
        assert insights[0].title == "Saldo Piorou"
        assert insights[0].type == InsightType.WARNING
        assert "R$ 300,00" in insights[0].message
        assert "Gastos em Alta" not in titles(insights)

    def test_stable_trend_adds_nothing(self, make_expense, make_income):
        """Test a stable trend adds no comparison insight."""
        summary = month([make_income(1000), make_expense(500, category="mercado")])
        comparison = MonthComparison(
            expense_change=0, expense_change_percent=0,
            income_change=0, income_change_percent=0,
            balance_change=0, trend=Trend.STABLE,
        )
        assert generate_insights(summary, comparison)[0].title == "Saldo Positivo"


class TestOrdering:
    """Tests for the fixed insight order."""

    def test_full_order(self, make_expense, make_income):
        """Test comparison, balance, tips, dues, credit and top category order."""
        summary = month([
            make_income(1000),
            make_expense(200, category="delivery", card_id="c", card_name="Nubank", card_type=CardType.CREDIT),
            make_expense(50, category="mercado", due_date=NOW - timedelta(days=2)),
            make_expense(40, category="mercado", due_date=NOW + timedelta(days=3)),
        ])
        comparison = MonthComparison(
            expense_change=100, expense_change_percent=50,
            income_change=0, income_change_percent=0,
            balance_change=300, trend=Trend.IMPROVING,
        )
        insights = generate_insights(summary, comparison)
        assert titles(insights) == [
            "Saldo Melhorou",
            "Gastos em Alta",
            "Saldo Positivo",
            "💡 Dica: Alimentação",
            "🎉 Excelente!",
            "1 Conta(s) Atrasada(s)",
            "1 Conta(s) Vencendo",
            "Gastos no Crédito",
            "Maior Gasto: Delivery",
        ]
        assert insights[-1].icon == "bicycle"

    def test_break_even_has_no_balance_insight(self, make_expense, make_income):
        """Test a zero balance yields no balance insight."""
        summary = month([make_income(100), make_expense(100, category="mercado")])
        insight_titles = titles(generate_insights(summary))
        assert "Saldo Positivo" not in insight_titles
        assert "Saldo Negativo" not in insight_titles

    def test_idempotent(self, make_expense, make_income):
        """Test the same summary always yields the same list."""
        summary = month([make_income(500), make_expense(600, category="lazer")])
        assert generate_insights(summary) == generate_insights(summary)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
