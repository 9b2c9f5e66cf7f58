"""
Derived result models.

These are what the calculation engine hands back to the calling layer.
None of them are stored; they are rebuilt on every request.
"""

from enum import Enum

from pydantic import Field

from budget_tracker.models.budget import RecordModel


class CategoryTotal(RecordModel):
    """Total spent in one category."""

    category: str
    amount: float
    percentage_of_income: float = Field(
        default=0.0,
        description="amount / monthly income x 100 (0 when income is 0)"
    )


class ExpenseAggregate(RecordModel):
    """Grand total and per-category totals for a set of expenses."""

    total_amount: float = 0.0
    by_category: dict[str, float] = Field(
        default_factory=dict,
        description="Category -> total, in first-seen order"
    )
    expense_count: int = Field(default=0, ge=0)


class BudgetMetrics(RecordModel):
    """
    Every figure derived from one Budget and one expense aggregate.

    remaining_budget_net and current_savings are two different
    definitions of "what is left" and are kept apart on purpose:
    - remaining_budget_net = income - expenses - savings goal (dashboard)
    - current_savings      = income - expenses                (savings view)
    """

    total_budget: float
    total_expenses: float
    total_savings: float
    remaining_budget_net: float
    current_savings: float
    monthly_savings: float
    remaining_days: int
    daily_budget: float
    savings_ratio: float
    expenses_ratio: float
    savings_progress: float


class DashboardSummary(RecordModel):
    """Dashboard view over the full expense history."""

    total_budget: float
    total_expenses: float
    total_savings: float
    remaining_budget: float
    daily_budget: float
    remaining_days: int
    expenses_by_category: list[CategoryTotal] = Field(default_factory=list)


class RecommendationKind(str, Enum):
    """The fixed set of savings rules, in evaluation order."""
    LOW_SAVINGS_RATIO = "low_savings_ratio"
    HIGH_EXPENSES = "high_expenses"
    BELOW_GOAL = "below_goal"
    GOAL_MET = "goal_met"


class Recommendation(RecordModel):
    """One piece of advice produced by the savings rules."""

    kind: RecommendationKind
    message: str


class SavingsSummary(RecordModel):
    """Savings view over the current month's expenses."""

    current_savings: float
    savings_goal: float
    monthly_savings: float
    savings_ratio: float = 0.0
    expenses_ratio: float = Field(
        default=0.0,
        description="month's expenses as a percentage of income, 0 when income is 0"
    )
    savings_progress: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="current savings as a share of the goal, clamped to 0-100"
    )
    recommendations: list[str] = Field(default_factory=list)
