"""Tests for the financial score engine."""

import pytest
from datetime import datetime

from finance_tracker.models.finance import CardType
from finance_tracker.models.report import (
    CardExpense,
    CategoryData,
    DueItem,
    MonthComparison,
    MonthSummary,
    Trend,
)
from finance_tracker.reports.score import (
    compute_score,
    credit_usage_score,
    diversification_score,
    payment_score,
    savings_score,
)


def categories(*percentages: float) -> list[CategoryData]:
    return [
        CategoryData(category=f"c{i}", amount=p, percentage=p, color="#000")
        for i, p in enumerate(percentages)
    ]


def overdue_item() -> DueItem:
    return DueItem(
        id="d1", description="Luz", amount=100, due_date=datetime(2024, 3, 1),
        is_paid=False, is_overdue=True, days_until_due=-5,
    )


class TestSubScores:
    """Tests for each sub-score's boundaries."""

    @pytest.mark.parametrize("rate,expected", [
        (30, 30), (29.99, 25), (20, 25), (10, 15), (5, 10), (0.01, 5), (0, 0), (-50, 0),
    ])
    def test_savings_boundaries(self, rate, expected):
        """Test savings steps use >= except the last one."""
        assert savings_score(rate) == expected

    @pytest.mark.parametrize("rate,overdue,expected", [
        (95, 0, 30), (94.9, 0, 20), (80, 0, 20), (60, 0, 10), (59, 0, 5),
        (95, 1, 20), (59, 2, 0),
    ])
    def test_payment_boundaries(self, rate, overdue, expected):
        """Test payment steps and the overdue penalty floor."""
        assert payment_score(rate, overdue) == expected

    @pytest.mark.parametrize("top,count,expected", [
        (29, 5, 20), (30, 5, 15), (39, 4, 15), (29, 3, 10), (49, 1, 10), (50, 5, 5),
    ])
    def test_diversification_boundaries(self, top, count, expected):
        """Test diversification needs both low concentration and enough categories."""
        assert diversification_score(top, count) == expected

    @pytest.mark.parametrize("rate,expected", [
        (0, 20), (29.9, 20), (30, 15), (50, 10), (70, 5),
    ])
    def test_credit_usage_boundaries(self, rate, expected):
        """Test credit usage steps are strict upper bounds."""
        assert credit_usage_score(rate) == expected


class TestComputeScore:
    """Tests for compute_score."""

    def test_empty_month(self):
        """Test a month without data."""
        score = compute_score(MonthSummary(month=0, year=2024, month_name="Janeiro"))
        # savings 0, payment 30 (nothing to pay), diversification 10, credit 20
        assert score.score == 60
        assert score.recommendations[0].startswith("Tente economizar")

    def test_healthy_month(self):
        """Test a month that scores full marks."""
        summary = MonthSummary(
            month=2, year=2024, month_name="Março",
            total_expenses=1000, total_income=5000, balance=4000,
            paid_expenses=1000, savings_rate=80,
            categories=categories(25, 20, 20, 20, 15),
        )
        score = compute_score(summary)
        assert score.score == 100
        assert score.recommendations == ["Ótima taxa de poupança! Considere investir o excedente."]

    def test_recommendation_order(self):
        """Test recommendations follow a fixed order."""
        summary = MonthSummary(
            month=2, year=2024, month_name="Março",
            total_expenses=1000, total_income=1000, balance=0,
            paid_expenses=0, savings_rate=0,
            categories=categories(100),
            card_expenses=[CardExpense(card_id="c", card_name="C", card_type=CardType.CREDIT, total=900, count=3)],
            overdue_dues=[overdue_item()],
        )
        comparison = MonthComparison(
            expense_change=500, expense_change_percent=100,
            income_change=0, income_change_percent=0,
            balance_change=-500, trend=Trend.WORSENING,
        )
        score = compute_score(summary, comparison)
        assert len(score.recommendations) == 5
        assert "20%" in score.recommendations[0]
        assert "1 conta(s) atrasada(s)" in score.recommendations[1]
        assert "única categoria" in score.recommendations[2]
        assert "crédito" in score.recommendations[3]
        assert "100%" in score.recommendations[4]
        assert score.payment_score == 0
        assert score.credit_usage_score == 5

    def test_bounds(self):
        """Test every sub-score stays within its maximum."""
        summary = MonthSummary(
            month=2, year=2024, month_name="Março",
            total_expenses=300, total_income=100, balance=-200,
            paid_expenses=150, savings_rate=-200,
            categories=categories(60, 40),
        )
        score = compute_score(summary)
        assert 0 <= score.savings_score <= 30
        assert 0 <= score.payment_score <= 30
        assert 0 <= score.diversification_score <= 20
        assert 0 <= score.credit_usage_score <= 20
        assert 0 <= score.score <= 100


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
