"""
Data Models Package

This package contains all Pydantic models used in Budget Tracker.
All data flowing through the system must conform to these schemas.
"""

from budget_tracker.models.budget import (
    MAX_AMOUNT,
    VALID_DAYS_IN_MONTH,
    Budget,
    BudgetInput,
    Expense,
    ExpenseInput,
    RecordModel,
)
from budget_tracker.models.summary import (
    BudgetMetrics,
    CategoryTotal,
    DashboardSummary,
    ExpenseAggregate,
    Recommendation,
    RecommendationKind,
    SavingsSummary,
)
from budget_tracker.models.session import SessionContext
from budget_tracker.models.validation import ValidationIssue, ValidationResult
from budget_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Records
    "MAX_AMOUNT",
    "VALID_DAYS_IN_MONTH",
    "Budget",
    "BudgetInput",
    "Expense",
    "ExpenseInput",
    "RecordModel",
    # Results
    "BudgetMetrics",
    "CategoryTotal",
    "DashboardSummary",
    "ExpenseAggregate",
    "Recommendation",
    "RecommendationKind",
    "SavingsSummary",
    # Session
    "SessionContext",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
