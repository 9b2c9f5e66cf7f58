"""
Main Orchestrator for Budget Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Budget setup (submission → validate → upsert)
2. Expense tracking (submission → validate → add / update / delete)
3. Insights (records → aggregate → calculate → recommend)
4. Export (records → CSV / JSON)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is written unless the submission validated
- No dashboard or savings figures without a stored budget
- Every user is only ever shown and allowed to touch their own records
- Every step is audited

The calculation engine itself never sees storage; the flows load the
records and hand plain models to it.
"""

from datetime import date
from typing import Any, Mapping, NamedTuple, Optional, Union
from uuid import UUID

import structlog

from budget_tracker.audit import AuditLogger, configure_logging
from budget_tracker.config import get_settings
from budget_tracker.engine import (
    SavingsRecommendationEngine,
    aggregate_expenses,
    build_dashboard,
    start_of_month,
)
from budget_tracker.export import DataExporter, ExportFormat, parse_format
from budget_tracker.models.budget import Budget, BudgetInput, Expense, ExpenseInput
from budget_tracker.models.session import SessionContext
from budget_tracker.models.summary import DashboardSummary, SavingsSummary
from budget_tracker.models.validation import ValidationResult
from budget_tracker.services.storage import (
    BudgetStorageInterface,
    ExpenseStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryExpenseStorage,
    NotFoundError,
    StorageError,
)
from budget_tracker.validation import InputValidator


logger = structlog.get_logger(__name__)

BudgetSubmission = Union[Mapping[str, Any], BudgetInput]
ExpenseSubmission = Union[Mapping[str, Any], ExpenseInput]


class BudgetTrackerError(Exception):
    """Base exception for conditions reported to the calling layer."""
    pass


class BudgetNotFoundError(BudgetTrackerError):
    """The user has no budget yet (HTTP-equivalent: 404)."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Budget not found for user {user_id}")


class ExpenseNotFoundError(BudgetTrackerError):
    """No expense with this id belongs to the user."""

    def __init__(self, expense_id: UUID):
        self.expense_id = expense_id
        super().__init__(f"Expense not found: {expense_id}")


class InvalidInputError(BudgetTrackerError):
    """A submission failed schema validation. Nothing was written."""

    def __init__(self, result: ValidationResult):
        self.result = result
        fields = ", ".join(result.error_fields) or "submission"
        super().__init__(f"Invalid {result.entity_type} input: {fields}")


def _issue_dicts(result: ValidationResult) -> list[dict]:
    return [
        {"field": i.field, "type": i.issue_type, "message": i.message}
        for i in result.issues
        if i.severity == "error"
    ]


class BudgetFlow:
    """
    Orchestrates reading and setting a user's budget.

    Flow:
    1. Check → validate submission, show warnings (optional preview)
    2. Set → validate again, then one replace-or-insert keyed by user
    """

    def __init__(
        self,
        budget_storage: BudgetStorageInterface,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._budget_storage = budget_storage
        self._validator = validator or InputValidator()
        self._audit_logger = audit_logger

    def check_budget(self, data: BudgetSubmission) -> tuple[ValidationResult, str]:
        """
        Validate a submission without saving it.

        Returns:
            (validation_result, user_message)
        """
        _, result = self._validator.validate_budget(data)
        return result, self._validator.get_user_friendly_summary(result)

    async def get_budget(self, session: SessionContext) -> Budget:
        """
        Get the user's budget.

        Raises:
            BudgetNotFoundError: If the user has not set one up
        """
        try:
            budget = await self._budget_storage.get_budget(session.user_id)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation="get_budget",
                    error_message=str(e),
                    user_id=session.user_id,
                    correlation_id=session.correlation_id,
                )
            raise

        if budget is None:
            raise BudgetNotFoundError(session.user_id)
        return budget

    async def set_budget(
        self,
        session: SessionContext,
        data: BudgetSubmission,
    ) -> Budget:
        """
        Create or replace the user's budget.

        A second call for the same user overwrites the four numeric
        fields of the existing record; it never creates another one.

        Raises:
            InvalidInputError: If the submission is rejected (nothing is written)
        """
        parsed, result = self._validator.validate_budget(data)

        if parsed is None:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    entity_type="budget",
                    user_id=session.user_id,
                    issues=_issue_dicts(result),
                    correlation_id=session.correlation_id,
                )
            raise InvalidInputError(result)

        try:
            stored = await self._budget_storage.set_budget(
                Budget.from_input(session.user_id, parsed)
            )
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation="set_budget",
                    error_message=str(e),
                    user_id=session.user_id,
                    correlation_id=session.correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_budget_saved(
                budget_id=stored.id,
                user_id=session.user_id,
                monthly_income=stored.monthly_income,
                savings_goal=stored.savings_goal,
                correlation_id=session.correlation_id,
            )

        return stored


class ExpenseFlow:
    """
    Orchestrates expense tracking.

    Updates and deletes only ever match an expense that belongs to the
    session's user; anything else is reported as not found.
    """

    def __init__(
        self,
        expense_storage: ExpenseStorageInterface,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._expense_storage = expense_storage
        self._validator = validator or InputValidator()
        self._audit_logger = audit_logger

    def check_expense(self, data: ExpenseSubmission) -> tuple[ValidationResult, str]:
        """
        Validate a submission without saving it.

        Returns:
            (validation_result, user_message)
        """
        _, result = self._validator.validate_expense(data)
        return result, self._validator.get_user_friendly_summary(result)

    async def _parse(self, session: SessionContext, data: ExpenseSubmission) -> ExpenseInput:
        parsed, result = self._validator.validate_expense(data)
        if parsed is None:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    entity_type="expense",
                    user_id=session.user_id,
                    issues=_issue_dicts(result),
                    correlation_id=session.correlation_id,
                )
            raise InvalidInputError(result)
        return parsed

    async def _storage_failed(
        self,
        session: SessionContext,
        operation: str,
        error: StorageError,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_storage_error(
                operation=operation,
                error_message=str(error),
                user_id=session.user_id,
                correlation_id=session.correlation_id,
            )

    async def _not_found(self, session: SessionContext, expense_id: UUID) -> ExpenseNotFoundError:
        if self._audit_logger:
            await self._audit_logger.log_expense_not_found(
                expense_id=expense_id,
                user_id=session.user_id,
                correlation_id=session.correlation_id,
            )
        return ExpenseNotFoundError(expense_id)

    async def add_expense(
        self,
        session: SessionContext,
        data: ExpenseSubmission,
    ) -> Expense:
        """
        Record a new expense for the session's user.

        Raises:
            InvalidInputError: If the submission is rejected (nothing is written)
        """
        parsed = await self._parse(session, data)
        expense = Expense.from_input(session.user_id, parsed)

        try:
            stored = await self._expense_storage.add_expense(expense)
        except StorageError as e:
            await self._storage_failed(session, "add_expense", e)
            raise

        if self._audit_logger:
            await self._audit_logger.log_expense_added(
                expense_id=stored.id,
                user_id=session.user_id,
                category=stored.category,
                amount=stored.amount,
                correlation_id=session.correlation_id,
            )

        return stored

    async def update_expense(
        self,
        session: SessionContext,
        expense_id: UUID,
        data: ExpenseSubmission,
    ) -> Expense:
        """
        Replace amount, category, description and tags of one expense.

        Raises:
            InvalidInputError: If the submission is rejected
            ExpenseNotFoundError: If the expense does not belong to the user
        """
        parsed = await self._parse(session, data)

        try:
            existing = await self._expense_storage.get_expense(session.user_id, expense_id)
            if existing is None:
                raise await self._not_found(session, expense_id)

            updated = existing.with_changes(parsed)
            stored = await self._expense_storage.update_expense(updated)
        except NotFoundError:
            raise await self._not_found(session, expense_id)
        except StorageError as e:
            await self._storage_failed(session, "update_expense", e)
            raise

        if self._audit_logger:
            changes = {
                field: getattr(stored, field)
                for field in ("amount", "category", "description", "tags")
                if getattr(existing, field) != getattr(stored, field)
            }
            await self._audit_logger.log_expense_updated(
                expense_id=stored.id,
                user_id=session.user_id,
                changes=changes,
                correlation_id=session.correlation_id,
            )

        return stored

    async def delete_expense(self, session: SessionContext, expense_id: UUID) -> None:
        """
        Delete one expense.

        Raises:
            ExpenseNotFoundError: If the expense does not belong to the user
        """
        try:
            deleted = await self._expense_storage.delete_expense(session.user_id, expense_id)
        except StorageError as e:
            await self._storage_failed(session, "delete_expense", e)
            raise

        if not deleted:
            raise await self._not_found(session, expense_id)

        if self._audit_logger:
            await self._audit_logger.log_expense_deleted(
                expense_id=expense_id,
                user_id=session.user_id,
                correlation_id=session.correlation_id,
            )

    async def list_expenses(self, session: SessionContext) -> list[Expense]:
        """All of the user's expenses, newest first."""
        try:
            return await self._expense_storage.list_expenses(session.user_id)
        except StorageError as e:
            await self._storage_failed(session, "list_expenses", e)
            raise


class InsightsFlow:
    """
    Orchestrates the dashboard and savings views.

    FLOW:
    1. Load the budget (missing budget → BudgetNotFoundError, never defaults)
    2. Load expenses (dashboard: full history; savings: current month)
    3. Aggregate → calculate → (savings) recommend

    Nothing is cached: every call recomputes from the stored records.
    """

    def __init__(
        self,
        budget_storage: BudgetStorageInterface,
        expense_storage: ExpenseStorageInterface,
        engine: Optional[SavingsRecommendationEngine] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._budget_storage = budget_storage
        self._expense_storage = expense_storage
        self._engine = engine or SavingsRecommendationEngine(
            currency_symbol=get_settings().app.currency_symbol
        )
        self._audit_logger = audit_logger

    async def _load(
        self,
        session: SessionContext,
        view: str,
        today: date,
    ) -> tuple[Budget, list[Expense]]:
        date_from = start_of_month(today) if view == "savings" else None

        try:
            budget = await self._budget_storage.get_budget(session.user_id)
            if budget is None:
                if self._audit_logger:
                    await self._audit_logger.log_budget_not_found(
                        user_id=session.user_id,
                        view=view,
                        correlation_id=session.correlation_id,
                    )
                raise BudgetNotFoundError(session.user_id)

            expenses = await self._expense_storage.list_expenses(
                session.user_id,
                date_from=date_from,
            )
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation=f"load_{view}",
                    error_message=str(e),
                    user_id=session.user_id,
                    correlation_id=session.correlation_id,
                )
            raise

        return budget, expenses

    async def get_dashboard(
        self,
        session: SessionContext,
        today: Optional[date] = None,
    ) -> DashboardSummary:
        """
        Dashboard figures over the user's full expense history.

        Raises:
            BudgetNotFoundError: If the user has not set up a budget
        """
        today = today or date.today()
        budget, expenses = await self._load(session, "dashboard", today)

        summary = build_dashboard(budget, aggregate_expenses(expenses), today)

        if self._audit_logger:
            await self._audit_logger.log_view_computed(
                view="dashboard",
                user_id=session.user_id,
                expense_count=len(expenses),
                correlation_id=session.correlation_id,
            )

        return summary

    async def get_savings(
        self,
        session: SessionContext,
        today: Optional[date] = None,
    ) -> SavingsSummary:
        """
        Savings figures and recommendations for the current month.

        Only expenses dated on or after midnight on the 1st count.

        Raises:
            BudgetNotFoundError: If the user has not set up a budget
        """
        today = today or date.today()
        budget, expenses = await self._load(session, "savings", today)

        summary = self._engine.build_summary(budget, aggregate_expenses(expenses), today)

        logger.debug(
            "savings_evaluated",
            user_id=session.user_id,
            recommendation_count=len(summary.recommendations),
        )
        if self._audit_logger:
            await self._audit_logger.log_view_computed(
                view="savings",
                user_id=session.user_id,
                expense_count=len(expenses),
                correlation_id=session.correlation_id,
            )

        return summary


class ExportFlow:
    """Orchestrates downloading a user's records."""

    def __init__(
        self,
        budget_storage: BudgetStorageInterface,
        expense_storage: ExpenseStorageInterface,
        exporter: Optional[DataExporter] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._budget_storage = budget_storage
        self._expense_storage = expense_storage
        self._exporter = exporter or DataExporter()
        self._audit_logger = audit_logger

    async def export(
        self,
        session: SessionContext,
        export_format: Union[str, ExportFormat],
    ) -> tuple[str, str, str]:
        """
        Export the user's budget (if any) and all expenses.

        Returns:
            (content, filename, mime_type)

        Raises:
            ExportError: If the format is not csv or json
        """
        if not isinstance(export_format, ExportFormat):
            export_format = parse_format(export_format)

        try:
            budget = await self._budget_storage.get_budget(session.user_id)
            expenses = await self._expense_storage.list_expenses(session.user_id)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation="export",
                    error_message=str(e),
                    user_id=session.user_id,
                    correlation_id=session.correlation_id,
                )
            raise

        content = self._exporter.export(budget, expenses, export_format)

        if self._audit_logger:
            await self._audit_logger.log_data_exported(
                user_id=session.user_id,
                export_format=export_format.value,
                expense_count=len(expenses),
                correlation_id=session.correlation_id,
            )

        return content, self._exporter.filename(export_format), export_format.mime_type


class AppComponents(NamedTuple):
    budget_flow: BudgetFlow
    expense_flow: ExpenseFlow
    insights_flow: InsightsFlow
    export_flow: ExportFlow
    storage_backend: str


def create_app_components(
    use_storage: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured external storage.
                    Set to False for in-memory storage (tests, demos).

    Returns:
        AppComponents with every flow wired to the same stores
    """
    app_settings = get_settings().app
    configure_logging(app_settings.log_level)

    budget_storage = None
    expense_storage = None
    audit_storage = None
    backend = "memory"

    if use_storage and app_settings.storage_backend == "google_sheets":
        try:
            sheets_client = GoogleSheetsClient()
            budget_storage = GoogleSheetsBudgetStorage(sheets_client)
            expense_storage = GoogleSheetsExpenseStorage(sheets_client)
            audit_storage = GoogleSheetsAuditStorage(sheets_client)
            backend = "google_sheets"
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e), fallback="memory")

    if budget_storage is None:
        budget_storage = InMemoryBudgetStorage()
        expense_storage = InMemoryExpenseStorage()
        audit_storage = InMemoryAuditStorage()

    audit_logger = AuditLogger(audit_storage)
    validator = InputValidator(app_settings)

    return AppComponents(
        budget_flow=BudgetFlow(budget_storage, validator, audit_logger),
        expense_flow=ExpenseFlow(expense_storage, validator, audit_logger),
        insights_flow=InsightsFlow(
            budget_storage,
            expense_storage,
            SavingsRecommendationEngine(app_settings.currency_symbol),
            audit_logger,
        ),
        export_flow=ExportFlow(budget_storage, expense_storage, audit_logger=audit_logger),
        storage_backend=backend,
    )
