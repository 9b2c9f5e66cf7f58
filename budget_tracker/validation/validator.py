"""
Two-Stage Input Validation

DESIGN DECISION: Submissions are validated in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Numeric fields are numbers (and finite)
- Range checks (non-negative budget figures, 28-31 days)
- Failures here reject the submission; nothing is written

STAGE 2 - SEMANTIC CHECKS:
- Savings goal larger than income
- Negative or unusually large expenses
- Expense dates in the future
- These only produce warnings for the user to look at

IMPORTANT: Validation NEVER silently fixes issues.
It reports them, and the caller decides.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_snake

from budget_tracker.config import AppSettings, get_settings
from budget_tracker.models.budget import BudgetInput, ExpenseInput
from budget_tracker.models.validation import ValidationIssue, ValidationResult


Submission = Union[Mapping[str, Any], BaseModel]


def _as_mapping(data: Submission) -> Mapping[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return data


def _schema_issues(error: ValidationError) -> list[ValidationIssue]:
    """Turn pydantic errors into user-facing issues."""
    issues = []
    for err in error.errors():
        field = ".".join(to_snake(str(part)) for part in err["loc"]) or "submission"
        if err["type"] == "missing":
            message = f"{field.replace('_', ' ').capitalize()} is required"
            suggested_fix = "Fill in this field"
        else:
            message = f"{field.replace('_', ' ').capitalize()}: {err['msg']}"
            suggested_fix = "Enter a valid value"
        issues.append(ValidationIssue(
            field=field,
            issue_type=err["type"],
            message=message,
            severity="error",
            suggested_fix=suggested_fix,
        ))
    return issues


class InputValidator:
    """
    Validates budget and expense submissions.

    Each validate_* method returns the parsed submission (None if it was
    rejected) together with the full ValidationResult.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def validate_budget(
        self,
        data: Submission,
        today: Optional[date] = None,
    ) -> tuple[Optional[BudgetInput], ValidationResult]:
        """Run both stages on a budget submission."""
        try:
            parsed = BudgetInput.model_validate(_as_mapping(data))
        except ValidationError as e:
            return None, self._result("budget", _schema_issues(e))

        issues = self._check_budget(parsed, today or date.today())
        return parsed, self._result("budget", issues)

    def validate_expense(
        self,
        data: Submission,
        today: Optional[date] = None,
    ) -> tuple[Optional[ExpenseInput], ValidationResult]:
        """Run both stages on an expense submission."""
        try:
            parsed = ExpenseInput.model_validate(_as_mapping(data))
        except ValidationError as e:
            return None, self._result("expense", _schema_issues(e))

        issues = self._check_expense(parsed, today or date.today())
        return parsed, self._result("expense", issues)

    def _check_budget(self, budget: BudgetInput, today: date) -> list[ValidationIssue]:
        """
        Stage 2 for budgets.

        Checks:
        - Goal vs income
        - Mandatory expenses + goal vs income
        - Days in month vs the actual calendar
        """
        issues = []

        if budget.savings_goal > budget.monthly_income:
            issues.append(ValidationIssue(
                field="savings_goal",
                issue_type="suspicious_value",
                message="Savings goal is larger than your monthly income",
                severity="warning",
                suggested_fix="Check the savings goal and income figures",
            ))
        elif budget.mandatory_expenses + budget.savings_goal > budget.monthly_income:
            issues.append(ValidationIssue(
                field="mandatory_expenses",
                issue_type="over_commitment",
                message="Mandatory expenses plus savings goal exceed your monthly income",
                severity="warning",
                suggested_fix="Lower the savings goal or review mandatory expenses",
            ))

        actual_days = calendar.monthrange(today.year, today.month)[1]
        if budget.days_in_month != actual_days:
            issues.append(ValidationIssue(
                field="days_in_month",
                issue_type="calendar_mismatch",
                message=f"This month has {actual_days} days, budget says {budget.days_in_month}",
                severity="info",
            ))

        return issues

    def _check_expense(self, expense: ExpenseInput, today: date) -> list[ValidationIssue]:
        """
        Stage 2 for expenses.

        Checks:
        - Zero / negative amounts (kept, but flagged)
        - Absurd amounts
        - Future dates
        - Categories outside the suggested list
        """
        issues = []

        if expense.amount < 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="negative_amount",
                message=f"Amount ({expense.amount:,.2f}) is negative and will reduce your totals",
                severity="warning",
                suggested_fix="Use a positive amount unless this is a refund",
            ))
        elif expense.amount == 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="zero_amount",
                message="Amount is zero",
                severity="warning",
            ))

        if abs(expense.amount) > self._settings.max_expense_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({expense.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if expense.date is not None:
            latest = datetime.combine(
                today + timedelta(days=self._settings.future_date_tolerance_days + 1),
                datetime.min.time(),
            )
            if expense.date >= latest:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Expense date ({expense.date:%d %b %Y}) is in the future",
                    severity="warning",
                    suggested_fix="Please verify the date is correct",
                ))

        if expense.category not in self._settings.expense_categories_list:
            issues.append(ValidationIssue(
                field="category",
                issue_type="custom_category",
                message=f"'{expense.category}' is a new category",
                severity="info",
            ))

        return issues

    def _result(self, entity_type: str, issues: list[ValidationIssue]) -> ValidationResult:
        schema_valid = not any(issue.severity == "error" for issue in issues)
        return ValidationResult(
            entity_type=entity_type,
            schema_valid=schema_valid,
            is_valid=schema_valid,
            issues=issues,
            warnings=[issue.message for issue in issues if issue.severity == "warning"],
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what we show next to the form.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if not result.is_valid:
            lines.append("❌ Some information is missing or invalid:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        if result.is_valid:
            lines.append("")
            lines.append("Saved, but please double-check the values above.")
        else:
            lines.append("")
            lines.append("Please fix the issues above before saving.")

        return "\n".join(lines)
