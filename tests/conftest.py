"""Shared fixtures for the Budget Tracker test suite."""

from datetime import datetime

import pytest

from budget_tracker.audit import AuditLogger
from budget_tracker.config import AppSettings
from budget_tracker.engine import SavingsRecommendationEngine
from budget_tracker.models import Budget, Expense, SessionContext
from budget_tracker.orchestrator import BudgetFlow, ExpenseFlow, ExportFlow, InsightsFlow
from budget_tracker.services.storage import (
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryExpenseStorage,
)
from budget_tracker.validation import InputValidator


def make_expense(amount, category="Food & Dining", user_id="alice", **kwargs):
    kwargs.setdefault("date", datetime(2024, 3, 10, 12, 0))
    return Expense(user_id=user_id, amount=amount, category=category, **kwargs)


def make_budget(monthly_income=50000.0, savings_goal=5000.0, user_id="alice", **kwargs):
    kwargs.setdefault("mandatory_expenses", 0.0)
    kwargs.setdefault("days_in_month", 31)
    return Budget(
        user_id=user_id,
        monthly_income=monthly_income,
        savings_goal=savings_goal,
        **kwargs,
    )


@pytest.fixture
def session():
    return SessionContext(user_id="alice")


@pytest.fixture
def other_session():
    return SessionContext(user_id="bob")


@pytest.fixture
def app_settings():
    return AppSettings()


@pytest.fixture
def budget_storage():
    return InMemoryBudgetStorage()


@pytest.fixture
def expense_storage():
    return InMemoryExpenseStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def validator(app_settings):
    return InputValidator(app_settings)


@pytest.fixture
def budget_flow(budget_storage, validator, audit_logger):
    return BudgetFlow(budget_storage, validator, audit_logger)


@pytest.fixture
def expense_flow(expense_storage, validator, audit_logger):
    return ExpenseFlow(expense_storage, validator, audit_logger)


@pytest.fixture
def insights_flow(budget_storage, expense_storage, audit_logger):
    return InsightsFlow(
        budget_storage,
        expense_storage,
        SavingsRecommendationEngine("₹"),
        audit_logger,
    )


@pytest.fixture
def export_flow(budget_storage, expense_storage, audit_logger):
    return ExportFlow(budget_storage, expense_storage, audit_logger=audit_logger)


@pytest.fixture(name="make_expense")
def make_expense_fixture():
    return make_expense


@pytest.fixture(name="make_budget")
def make_budget_fixture():
    return make_budget
