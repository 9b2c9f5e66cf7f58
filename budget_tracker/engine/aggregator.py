"""
Expense Aggregator

Reduces a sequence of expenses to a grand total and per-category totals.

Grouping is exact: no case folding and no whitespace trimming, so
"Food" and "food" are two categories. Categories come out in the order
they are first seen in the input.
"""

from typing import Iterable

from budget_tracker.models.budget import Expense
from budget_tracker.models.summary import ExpenseAggregate


def aggregate_expenses(expenses: Iterable[Expense]) -> ExpenseAggregate:
    """Sum amounts overall and per category."""
    total = 0.0
    by_category: dict[str, float] = {}
    count = 0

    for expense in expenses:
        total += expense.amount
        by_category[expense.category] = by_category.get(expense.category, 0.0) + expense.amount
        count += 1

    return ExpenseAggregate(
        total_amount=total,
        by_category=by_category,
        expense_count=count,
    )
