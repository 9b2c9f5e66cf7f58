"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
In-memory storage is the default; Google Sheets is available when configured.
"""

from budget_tracker.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ExpenseStorageInterface,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from budget_tracker.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryExpenseStorage,
)
from budget_tracker.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "ExpenseStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryBudgetStorage",
    "InMemoryExpenseStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsBudgetStorage",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
]
