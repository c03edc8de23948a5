"""Tests for period statistics."""

import pytest
from datetime import datetime

from finance_tracker.reports.aggregator import aggregate_month
from finance_tracker.reports.stats import compute_stats


NOW = datetime(2024, 3, 31)


def month(transactions, month_index=2):
    return aggregate_month(transactions, [], [], [], month_index, 2024, NOW)


class TestDayOfWeek:
    """Tests for the weekday distribution."""

    def test_sunday_first_and_sorted(self, make_expense):
        """Test weekday indexes start on Sunday and the biggest day comes first."""
        current = month([
            make_expense(10, datetime(2024, 3, 10)),  # Sunday
            make_expense(15, datetime(2024, 3, 17)),  # Sunday
            make_expense(40, datetime(2024, 3, 11)),  # Monday
        ])
        stats = compute_stats(current).day_of_week_stats
        assert [(s.day, s.day_name, s.total, s.count) for s in stats] == [
            (1, "Seg", 40, 1),
            (0, "Dom", 25, 2),
        ]

    def test_income_is_ignored(self, make_expense, make_income):
        """Test only expenses are counted."""
        current = month([make_income(1000, datetime(2024, 3, 16)), make_expense(5, datetime(2024, 3, 16))])
        stats = compute_stats(current).day_of_week_stats
        assert len(stats) == 1
        assert stats[0].day_name == "Sáb"


class TestCategoryGrowth:
    """Tests for growth against the previous month."""

    def test_growth_requires_previous(self, make_expense):
        """Test no growth is reported without a previous month."""
        assert compute_stats(month([make_expense(10, category="lazer")])).category_growth == []

    def test_growth_threshold_and_order(self, make_expense):
        """Test small moves are dropped and the rest sorted by magnitude."""
        previous = month([
            make_expense(100, datetime(2024, 2, 10), category="mercado"),
            make_expense(100, datetime(2024, 2, 10), category="lazer"),
            make_expense(100, datetime(2024, 2, 10), category="transporte"),
        ], month_index=1)
        current = month([
            make_expense(105, category="mercado"),
            make_expense(150, category="lazer"),
            make_expense(20, category="transporte"),
            make_expense(30, category="pets"),
        ])
        growth = compute_stats(current, previous).category_growth
        assert [(g.category, round(g.growth_percent)) for g in growth] == [
            ("pets", 100),
            ("transporte", -80),
            ("lazer", 50),
        ]
        assert growth[0].previous_amount == 0


class TestTopExpenses:
    """Tests for the largest expenses."""

    def test_top_five_without_card_payments(self, make_expense):
        """Test the top list skips 'cartao' and formats the date."""
        current = month([
            make_expense(amount, datetime(2024, 3, 5), category="mercado")
            for amount in (10, 20, 30, 40, 50, 60)
        ] + [make_expense(1000, category="cartao")])
        top = compute_stats(current).top_expenses
        assert [t.amount for t in top] == [60, 50, 40, 30, 20]
        assert top[0].formatted_date == "05/03/2024"

    def test_custom_limit(self, make_expense):
        """Test the top list length is configurable."""
        current = month([make_expense(a) for a in (1, 2, 3)])
        assert len(compute_stats(current, top_limit=2).top_expenses) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
