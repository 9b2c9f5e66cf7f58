"""
Budget Calculator

Combines a Budget with aggregated expenses into the derived figures
shown on the dashboard and savings views.

GUARANTEES:
- Never returns NaN or Infinity (every amount is bounded by MAX_AMOUNT)
- Zero income gives 0% for every percentage-of-income figure
- Zero remaining days gives the whole remaining budget as the daily figure
- The dashboard's and the savings view's "remaining" figures stay separate
"""

import calendar
from datetime import date, datetime, time
from typing import Optional

from budget_tracker.models.budget import Budget
from budget_tracker.models.summary import (
    BudgetMetrics,
    CategoryTotal,
    DashboardSummary,
    ExpenseAggregate,
)


def safe_percentage(part: float, whole: float) -> float:
    """part / whole x 100, or 0.0 when whole is zero."""
    if whole == 0:
        return 0.0
    return (part / whole) * 100


def last_day_of_month(today: date) -> int:
    return calendar.monthrange(today.year, today.month)[1]


def remaining_days(today: date) -> int:
    """Days left in the month, counting today."""
    return last_day_of_month(today) - today.day + 1


def start_of_month(today: date) -> datetime:
    """Midnight (local, naive) on the first of today's month."""
    return datetime.combine(today.replace(day=1), time.min)


def daily_allowance(remaining: float, days: int) -> float:
    """
    Spread what is left over the days left.

    With no days left the whole remaining amount is the allowance.
    """
    if days <= 0:
        return remaining
    return remaining / days


def category_totals(
    aggregate: ExpenseAggregate,
    monthly_income: float,
) -> list[CategoryTotal]:
    """Per-category rows with each category's share of monthly income."""
    return [
        CategoryTotal(
            category=category,
            amount=amount,
            percentage_of_income=safe_percentage(amount, monthly_income),
        )
        for category, amount in aggregate.by_category.items()
    ]


def compute_metrics(
    budget: Budget,
    aggregate: ExpenseAggregate,
    today: Optional[date] = None,
) -> BudgetMetrics:
    """
    Derive every figure from one budget and one expense aggregate.

    mandatory_expenses is deliberately not used here.
    """
    today = today or date.today()

    income = budget.monthly_income
    total_expenses = aggregate.total_amount
    goal = budget.savings_goal

    remaining_budget_net = income - total_expenses - goal
    current_savings = income - total_expenses
    monthly_savings = max(current_savings, 0.0)
    days_left = remaining_days(today)

    progress = safe_percentage(current_savings, goal)
    progress = min(max(progress, 0.0), 100.0)

    return BudgetMetrics(
        total_budget=income,
        total_expenses=total_expenses,
        total_savings=goal,
        remaining_budget_net=remaining_budget_net,
        current_savings=current_savings,
        monthly_savings=monthly_savings,
        remaining_days=days_left,
        daily_budget=daily_allowance(remaining_budget_net, days_left),
        savings_ratio=safe_percentage(monthly_savings, income),
        expenses_ratio=safe_percentage(total_expenses, income),
        savings_progress=progress,
    )


def build_dashboard(
    budget: Budget,
    aggregate: ExpenseAggregate,
    today: Optional[date] = None,
) -> DashboardSummary:
    """Dashboard figures; remaining budget here subtracts the savings goal too."""
    metrics = compute_metrics(budget, aggregate, today)

    return DashboardSummary(
        total_budget=metrics.total_budget,
        total_expenses=metrics.total_expenses,
        total_savings=metrics.total_savings,
        remaining_budget=metrics.remaining_budget_net,
        daily_budget=metrics.daily_budget,
        remaining_days=metrics.remaining_days,
        expenses_by_category=category_totals(aggregate, budget.monthly_income),
    )
