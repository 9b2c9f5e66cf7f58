"""Calculation engine package."""

from budget_tracker.engine.aggregator import aggregate_expenses
from budget_tracker.engine.calculator import (
    build_dashboard,
    category_totals,
    compute_metrics,
    daily_allowance,
    remaining_days,
    safe_percentage,
    start_of_month,
)
from budget_tracker.engine.recommendations import (
    SavingsRecommendationEngine,
    format_currency,
)

__all__ = [
    "aggregate_expenses",
    "build_dashboard",
    "category_totals",
    "compute_metrics",
    "daily_allowance",
    "remaining_days",
    "safe_percentage",
    "start_of_month",
    "SavingsRecommendationEngine",
    "format_currency",
]
