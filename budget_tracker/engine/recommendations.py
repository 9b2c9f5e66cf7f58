"""
Savings Recommendation Engine

Evaluates a fixed set of rules over one snapshot of savings figures.

RULES (always checked in this order):
1. Savings ratio under 20% of income
2. Expenses over 80% of income
3. Savings below the goal  (shows the deficit)
4. Savings at or above the goal

Rules 1 and 2 are independent. Rules 3 and 4 are an if/else pair, so
every evaluation yields between one and three recommendations.
There is no state between evaluations.
"""

from datetime import date
from typing import Optional

from budget_tracker.engine.calculator import compute_metrics, safe_percentage
from budget_tracker.models.budget import Budget
from budget_tracker.models.summary import (
    ExpenseAggregate,
    Recommendation,
    RecommendationKind,
    SavingsSummary,
)


MIN_SAVINGS_RATIO = 20.0
HIGH_EXPENSE_SHARE = 0.8

LOW_SAVINGS_MESSAGE = "Try to save at least 20% of your monthly income"
HIGH_EXPENSES_MESSAGE = "Your expenses are high. Consider reviewing non-essential expenses"
BELOW_GOAL_MESSAGE = "You're {deficit} below your savings goal. Look for areas to reduce spending"
GOAL_MET_MESSAGE = "Great job! You're meeting or exceeding your savings goal"


def format_currency(amount: float, symbol: str = "₹") -> str:
    """Render an amount with a currency symbol and thousands separators."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


class SavingsRecommendationEngine:
    """
    Turns savings figures into ordered, human-readable advice.

    The engine only formats the deficit amount; everything else it
    returns is fixed text.
    """

    def __init__(self, currency_symbol: str = "₹"):
        self._currency_symbol = currency_symbol

    def evaluate(
        self,
        monthly_savings: float,
        monthly_income: float,
        total_expenses: float,
        savings_goal: float,
    ) -> list[Recommendation]:
        """Run every rule in order and collect what fires."""
        recommendations = []

        # Rule 1: zero income counts as a 0% ratio
        savings_ratio = safe_percentage(monthly_savings, monthly_income)
        if savings_ratio < MIN_SAVINGS_RATIO:
            recommendations.append(Recommendation(
                kind=RecommendationKind.LOW_SAVINGS_RATIO,
                message=LOW_SAVINGS_MESSAGE,
            ))

        # Rule 2
        if total_expenses > monthly_income * HIGH_EXPENSE_SHARE:
            recommendations.append(Recommendation(
                kind=RecommendationKind.HIGH_EXPENSES,
                message=HIGH_EXPENSES_MESSAGE,
            ))

        # Rules 3 / 4
        if monthly_savings < savings_goal:
            deficit = savings_goal - monthly_savings
            recommendations.append(Recommendation(
                kind=RecommendationKind.BELOW_GOAL,
                message=BELOW_GOAL_MESSAGE.format(
                    deficit=format_currency(deficit, self._currency_symbol)
                ),
            ))
        else:
            recommendations.append(Recommendation(
                kind=RecommendationKind.GOAL_MET,
                message=GOAL_MET_MESSAGE,
            ))

        return recommendations

    def build_summary(
        self,
        budget: Budget,
        month_aggregate: ExpenseAggregate,
        today: Optional[date] = None,
    ) -> SavingsSummary:
        """
        Savings view for one budget and the current month's expenses.

        current_savings here is income minus expenses, without the
        savings goal taken off (unlike the dashboard's remaining budget).
        """
        metrics = compute_metrics(budget, month_aggregate, today)

        recommendations = self.evaluate(
            monthly_savings=metrics.monthly_savings,
            monthly_income=budget.monthly_income,
            total_expenses=metrics.total_expenses,
            savings_goal=budget.savings_goal,
        )

        return SavingsSummary(
            current_savings=metrics.current_savings,
            savings_goal=budget.savings_goal,
            monthly_savings=metrics.monthly_savings,
            savings_ratio=metrics.savings_ratio,
            expenses_ratio=metrics.expenses_ratio,
            savings_progress=metrics.savings_progress,
            recommendations=[rec.message for rec in recommendations],
        )
