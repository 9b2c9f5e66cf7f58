"""
In-Memory Storage Implementation

Used when no external backend is configured, and by the test suite.
Data lives for the lifetime of the process only.

Records are copied on the way in and on the way out so callers can
never mutate stored state by holding on to a returned object.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from budget_tracker.models.audit import AuditEvent
from budget_tracker.models.budget import Budget, Expense, utc_now
from budget_tracker.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ExpenseStorageInterface,
    NotFoundError,
    dated_from,
)


class InMemoryBudgetStorage(BudgetStorageInterface):
    """Budgets keyed by user_id; one entry per user."""

    def __init__(self):
        self._budgets: dict[str, Budget] = {}

    async def get_budget(self, user_id: str) -> Optional[Budget]:
        budget = self._budgets.get(user_id)
        return budget.model_copy(deep=True) if budget else None

    async def set_budget(self, budget: Budget) -> Budget:
        existing = self._budgets.get(budget.user_id)
        if existing:
            stored = existing.model_copy(
                update={
                    "monthly_income": budget.monthly_income,
                    "mandatory_expenses": budget.mandatory_expenses,
                    "savings_goal": budget.savings_goal,
                    "days_in_month": budget.days_in_month,
                    "updated_at": utc_now(),
                }
            )
        else:
            stored = budget.model_copy(deep=True)

        self._budgets[budget.user_id] = stored
        return stored.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._budgets)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """Expenses keyed by id; ownership is checked on every access."""

    def __init__(self):
        self._expenses: dict[UUID, Expense] = {}

    async def add_expense(self, expense: Expense) -> Expense:
        self._expenses[expense.id] = expense.model_copy(deep=True)
        return expense.model_copy(deep=True)

    async def get_expense(self, user_id: str, expense_id: UUID) -> Optional[Expense]:
        expense = self._expenses.get(expense_id)
        if expense is None or expense.user_id != user_id:
            return None
        return expense.model_copy(deep=True)

    async def update_expense(self, expense: Expense) -> Expense:
        existing = self._expenses.get(expense.id)
        if existing is None or existing.user_id != expense.user_id:
            raise NotFoundError(f"Expense not found: {expense.id}")

        self._expenses[expense.id] = expense.model_copy(deep=True)
        return expense.model_copy(deep=True)

    async def delete_expense(self, user_id: str, expense_id: UUID) -> bool:
        existing = self._expenses.get(expense_id)
        if existing is None or existing.user_id != user_id:
            return False

        del self._expenses[expense_id]
        return True

    async def list_expenses(
        self,
        user_id: str,
        date_from: Optional[datetime] = None,
    ) -> list[Expense]:
        expenses = [
            expense.model_copy(deep=True)
            for expense in self._expenses.values()
            if expense.user_id == user_id and dated_from(expense, date_from)
        ]
        # Newest first
        expenses.sort(key=lambda e: e.date, reverse=True)
        return expenses


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
