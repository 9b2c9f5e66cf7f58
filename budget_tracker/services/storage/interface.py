"""
Record Store interfaces.

The flows only ever talk to these ABCs. Two backends implement them:
in-memory (default, tests) and Google Sheets.

Every expense operation takes the owning user_id, and a record that
belongs to someone else is treated exactly like a missing one.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from budget_tracker.models.audit import AuditEvent
from budget_tracker.models.budget import Budget, Expense


class BudgetStorageInterface(ABC):
    """
    Abstract interface for budget storage operations.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must keep at most one budget per user.
    """

    @abstractmethod
    async def get_budget(self, user_id: str) -> Optional[Budget]:
        """
        Retrieve a user's budget.

        Args:
            user_id: The owning user

        Returns:
            The budget if one exists, None otherwise
        """
        pass

    @abstractmethod
    async def set_budget(self, budget: Budget) -> Budget:
        """
        Replace-or-insert the budget for budget.user_id.

        If the user already has a budget, its numeric fields are
        overwritten in place; its id and created_at are kept.

        Args:
            budget: The budget to store

        Returns:
            The stored budget

        Raises:
            StorageError: If the write fails
        """
        pass


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Every lookup, update and delete is scoped to the owning user.
    """

    @abstractmethod
    async def add_expense(self, expense: Expense) -> Expense:
        """
        Save a new expense.

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_expense(self, user_id: str, expense_id: UUID) -> Optional[Expense]:
        """
        Retrieve one expense owned by user_id.

        Returns:
            The expense if found for that user, None otherwise
        """
        pass

    @abstractmethod
    async def update_expense(self, expense: Expense) -> Expense:
        """
        Overwrite an existing expense.

        Matches on both expense.id and expense.user_id.

        Raises:
            NotFoundError: If no expense matches id and user
            StorageError: If update fails
        """
        pass

    @abstractmethod
    async def delete_expense(self, user_id: str, expense_id: UUID) -> bool:
        """
        Delete one expense owned by user_id.

        Returns:
            True if something was deleted
        """
        pass

    @abstractmethod
    async def list_expenses(
        self,
        user_id: str,
        date_from: Optional[datetime] = None,
    ) -> list[Expense]:
        """
        List a user's expenses, newest first.

        Args:
            user_id: The owning user
            date_from: Only expenses on or after this moment

        Returns:
            Matching expenses sorted by date descending
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one form submission).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


def dated_from(expense: Expense, date_from: Optional[datetime]) -> bool:
    """Shared date filter for list_expenses implementations."""
    return date_from is None or expense.date >= date_from


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
