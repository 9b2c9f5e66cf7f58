"""Tests for the budget calculator."""

import math
from datetime import date, datetime

import pytest

from budget_tracker.engine import (
    aggregate_expenses,
    build_dashboard,
    compute_metrics,
    daily_allowance,
    remaining_days,
    safe_percentage,
    start_of_month,
)
from budget_tracker.models import MAX_AMOUNT


class TestDateHelpers:
    """Tests for calendar helpers."""

    @pytest.mark.parametrize(
        "today, expected",
        [
            (date(2024, 3, 1), 31),
            (date(2024, 3, 15), 17),
            (date(2024, 3, 31), 1),
            (date(2024, 2, 29), 1),
            (date(2023, 2, 1), 28),
        ],
    )
    def test_remaining_days_counts_today(self, today, expected):
        """Test remaining days includes today."""
        assert remaining_days(today) == expected

    def test_start_of_month_is_midnight(self):
        """Test the month starts at local midnight on the 1st."""
        assert start_of_month(date(2024, 3, 15)) == datetime(2024, 3, 1, 0, 0)


class TestSafeArithmetic:
    """Tests for division guards."""

    def test_safe_percentage(self):
        """Test ordinary percentages."""
        assert safe_percentage(25, 200) == 12.5

    def test_safe_percentage_zero_whole(self):
        """Test zero denominator gives 0."""
        assert safe_percentage(100, 0) == 0.0

    def test_daily_allowance(self):
        """Test remaining is spread over the days left."""
        assert daily_allowance(300, 10) == 30

    def test_daily_allowance_no_days_left(self):
        """Test zero days gives the whole remaining amount, never infinity."""
        assert daily_allowance(300, 0) == 300
        assert daily_allowance(-50, 0) == -50


class TestComputeMetrics:
    """Tests for compute_metrics."""

    def test_basic_figures(self, make_budget, make_expense):
        """Test every derived figure for a simple month."""
        budget = make_budget(monthly_income=50000, savings_goal=5000)
        aggregate = aggregate_expenses([make_expense(6000), make_expense(4000)])

        metrics = compute_metrics(budget, aggregate, today=date(2024, 3, 22))

        assert metrics.total_budget == 50000
        assert metrics.total_expenses == 10000
        assert metrics.total_savings == 5000
        assert metrics.remaining_budget_net == 35000
        assert metrics.current_savings == 40000
        assert metrics.monthly_savings == 40000
        assert metrics.remaining_days == 10
        assert metrics.daily_budget == 3500
        assert metrics.savings_ratio == pytest.approx(80.0)
        assert metrics.expenses_ratio == pytest.approx(20.0)
        assert metrics.savings_progress == 100.0

    def test_remaining_definitions_differ_by_goal(self, make_budget, make_expense):
        """Test remaining budget net and current savings differ by exactly the goal."""
        budget = make_budget(monthly_income=30000, savings_goal=4000)
        aggregate = aggregate_expenses([make_expense(12345.5)])

        metrics = compute_metrics(budget, aggregate, today=date(2024, 3, 1))

        assert metrics.current_savings - metrics.remaining_budget_net == pytest.approx(4000)

    def test_overspending_clamps_monthly_savings(self, make_budget, make_expense):
        """Test monthly savings never goes below zero."""
        budget = make_budget(monthly_income=1000, savings_goal=100)
        aggregate = aggregate_expenses([make_expense(1500)])

        metrics = compute_metrics(budget, aggregate, today=date(2024, 3, 1))

        assert metrics.current_savings == -500
        assert metrics.monthly_savings == 0
        assert metrics.remaining_budget_net == -600
        assert metrics.savings_progress == 0.0

    def test_zero_income(self, make_budget, make_expense):
        """Test zero income gives 0% ratios instead of dividing by zero."""
        budget = make_budget(monthly_income=0, savings_goal=0)
        aggregate = aggregate_expenses([make_expense(10)])

        metrics = compute_metrics(budget, aggregate, today=date(2024, 3, 1))

        assert metrics.savings_ratio == 0.0
        assert metrics.expenses_ratio == 0.0
        assert metrics.savings_progress == 0.0

    def test_last_day_of_month_is_finite(self, make_budget):
        """Test the last day of the month gives a finite daily budget."""
        budget = make_budget(monthly_income=50000, savings_goal=5000)

        metrics = compute_metrics(budget, aggregate_expenses([]), today=date(2024, 1, 31))

        assert metrics.remaining_days == 1
        assert math.isfinite(metrics.daily_budget)
        assert metrics.daily_budget == 45000

    def test_mandatory_expenses_not_used(self, make_budget):
        """Test mandatory expenses do not change any figure."""
        today = date(2024, 3, 1)
        without = compute_metrics(make_budget(mandatory_expenses=0), aggregate_expenses([]), today)
        with_fixed = compute_metrics(
            make_budget(mandatory_expenses=20000), aggregate_expenses([]), today
        )
        assert without == with_fixed


class TestBuildDashboard:
    """Tests for build_dashboard."""

    def test_dashboard(self, make_budget, make_expense):
        """Test dashboard figures and category breakdown."""
        budget = make_budget(monthly_income=20000, savings_goal=2000)
        aggregate = aggregate_expenses([
            make_expense(1000, "Food"),
            make_expense(500, "Travel"),
            make_expense(1000, "Food"),
        ])

        dashboard = build_dashboard(budget, aggregate, today=date(2024, 4, 21))

        assert dashboard.total_budget == 20000
        assert dashboard.total_expenses == 2500
        assert dashboard.total_savings == 2000
        assert dashboard.remaining_budget == 15500
        assert dashboard.remaining_days == 10
        assert dashboard.daily_budget == 1550
        assert [c.category for c in dashboard.expenses_by_category] == ["Food", "Travel"]
        assert dashboard.expenses_by_category[0].amount == 2000
        assert dashboard.expenses_by_category[0].percentage_of_income == pytest.approx(10.0)

    def test_dashboard_response_shape(self, make_budget, make_expense):
        """Test the category rows serialize as category and amount."""
        dashboard = build_dashboard(
            make_budget(), aggregate_expenses([make_expense(10, "Food")]), date(2024, 3, 1)
        )
        row = dashboard.to_response_dict()["expensesByCategory"][0]
        assert row["category"] == "Food"
        assert row["amount"] == 10


class TestLargeAmounts:
    """Tests that totals stay finite at the amount cap."""

    def test_dashboard_at_cap_is_finite(self, make_budget, make_expense):
        """Test many maximum-size expenses still give finite figures."""
        budget = make_budget(monthly_income=MAX_AMOUNT, savings_goal=MAX_AMOUNT)
        aggregate = aggregate_expenses(make_expense(MAX_AMOUNT) for _ in range(1000))

        dashboard = build_dashboard(budget, aggregate, today=date(2024, 3, 1))

        for value in (
            dashboard.total_expenses,
            dashboard.remaining_budget,
            dashboard.daily_budget,
            dashboard.expenses_by_category[0].percentage_of_income,
        ):
            assert math.isfinite(value)
