"""Tests for two-stage input validation."""

from datetime import date, datetime

import pytest

from budget_tracker.config import AppSettings
from budget_tracker.validation import InputValidator


TODAY = date(2024, 3, 15)


def budget_data(**overrides):
    data = {
        "monthlyIncome": 50000,
        "mandatoryExpenses": 10000,
        "savingsGoal": 5000,
        "daysInMonth": 31,
    }
    data.update(overrides)
    return data


class TestBudgetValidation:
    """Tests for InputValidator.validate_budget."""

    def test_valid_budget(self, validator):
        """Test a sensible budget passes with no warnings."""
        parsed, result = validator.validate_budget(budget_data(), today=TODAY)
        assert parsed is not None
        assert result.is_valid
        assert result.warnings == []
        assert validator.get_user_friendly_summary(result) == "✅ All checks passed!"

    def test_missing_field(self, validator):
        """Test a missing field is reported by its Python name."""
        data = budget_data()
        del data["savingsGoal"]

        parsed, result = validator.validate_budget(data, today=TODAY)

        assert parsed is None
        assert not result.is_valid
        assert result.error_fields == ["savings_goal"]
        assert result.issues[0].message == "Savings goal is required"
        assert result.issues[0].issue_type == "missing"

    def test_non_numeric_field(self, validator):
        """Test text in a numeric field is an error."""
        parsed, result = validator.validate_budget(
            budget_data(monthlyIncome="a lot"), today=TODAY
        )
        assert parsed is None
        assert "monthly_income" in result.error_fields

    def test_negative_field(self, validator):
        """Test negative budget figures are errors."""
        parsed, result = validator.validate_budget(budget_data(savingsGoal=-1), today=TODAY)
        assert parsed is None
        assert result.error_count == 1

    def test_goal_above_income_warns(self, validator):
        """Test a goal larger than income is accepted with a warning."""
        parsed, result = validator.validate_budget(
            budget_data(savingsGoal=60000), today=TODAY
        )
        assert parsed is not None
        assert result.is_valid
        assert result.warnings == ["Savings goal is larger than your monthly income"]

    def test_over_commitment_warns(self, validator):
        """Test mandatory plus goal above income is flagged."""
        parsed, result = validator.validate_budget(
            budget_data(mandatoryExpenses=48000, savingsGoal=5000), today=TODAY
        )
        assert parsed is not None
        assert len(result.warnings) == 1
        assert result.issues[0].field == "mandatory_expenses"

    def test_calendar_mismatch_is_info(self, validator):
        """Test a days_in_month that differs from the calendar is informational."""
        parsed, result = validator.validate_budget(budget_data(daysInMonth=30), today=TODAY)
        assert parsed is not None
        assert result.warnings == []
        assert result.issues[0].issue_type == "calendar_mismatch"
        assert result.issues[0].severity == "info"

    def test_summary_for_errors(self, validator):
        """Test the user-facing summary lists errors and a fix hint."""
        _, result = validator.validate_budget({}, today=TODAY)
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("❌")
        assert "Monthly income is required" in summary
        assert summary.endswith("Please fix the issues above before saving.")


class TestExpenseValidation:
    """Tests for InputValidator.validate_expense."""

    def test_valid_expense(self, validator):
        """Test a plain expense in a known category."""
        parsed, result = validator.validate_expense(
            {"amount": 250, "category": "Food & Dining", "date": datetime(2024, 3, 14, 9)},
            today=TODAY,
        )
        assert parsed is not None
        assert result.is_valid
        assert result.issues == []

    def test_missing_category(self, validator):
        """Test category is required."""
        parsed, result = validator.validate_expense({"amount": 250}, today=TODAY)
        assert parsed is None
        assert result.error_fields == ["category"]

    def test_blank_category(self, validator):
        """Test a whitespace-only category is an error."""
        parsed, result = validator.validate_expense(
            {"amount": 250, "category": "  "}, today=TODAY
        )
        assert parsed is None
        assert result.error_fields == ["category"]

    def test_negative_amount_warns(self, validator):
        """Test negative amounts are accepted with a warning."""
        parsed, result = validator.validate_expense(
            {"amount": -40, "category": "Shopping"}, today=TODAY
        )
        assert parsed is not None
        assert result.is_valid
        assert result.issues[0].issue_type == "negative_amount"

    def test_zero_amount_warns(self, validator):
        """Test zero amounts are flagged."""
        _, result = validator.validate_expense({"amount": 0, "category": "Shopping"}, today=TODAY)
        assert result.issues[0].issue_type == "zero_amount"

    def test_large_amount_warns(self):
        """Test amounts above the configured maximum are flagged."""
        validator = InputValidator(AppSettings(max_expense_amount=1000))
        _, result = validator.validate_expense(
            {"amount": 5000, "category": "Shopping"}, today=TODAY
        )
        assert [i.issue_type for i in result.issues] == ["suspicious_value"]

    @pytest.mark.parametrize(
        "when, flagged",
        [
            (datetime(2024, 3, 15, 23, 59), False),
            (datetime(2024, 3, 16, 23, 59), False),
            (datetime(2024, 3, 17, 0, 0), True),
            (datetime(2024, 4, 1), True),
        ],
    )
    def test_future_date(self, validator, when, flagged):
        """Test dates past tomorrow are flagged."""
        _, result = validator.validate_expense(
            {"amount": 10, "category": "Shopping", "date": when}, today=TODAY
        )
        assert any(i.issue_type == "future_date" for i in result.issues) is flagged

    def test_custom_category_is_info(self, validator):
        """Test a category outside the suggested list is allowed."""
        parsed, result = validator.validate_expense(
            {"amount": 10, "category": "Pets"}, today=TODAY
        )
        assert parsed is not None
        assert result.warnings == []
        assert result.issues[0].issue_type == "custom_category"

    def test_accepts_model_input(self, validator):
        """Test an ExpenseInput can be passed instead of a dict."""
        from budget_tracker.models import ExpenseInput

        parsed, result = validator.validate_expense(
            ExpenseInput(amount=10, category="Shopping"), today=TODAY
        )
        assert parsed.amount == 10
        assert result.is_valid


class TestNumericStrictness:
    """Tests that only real numbers pass as amounts."""

    @pytest.mark.parametrize(
        "field, python_name",
        [
            ("monthlyIncome", "monthly_income"),
            ("mandatoryExpenses", "mandatory_expenses"),
            ("savingsGoal", "savings_goal"),
        ],
    )
    def test_budget_rejects_booleans(self, validator, field, python_name):
        """Test true/false are not read as 1/0 in budget figures."""
        parsed, result = validator.validate_budget(budget_data(**{field: True}), today=TODAY)
        assert parsed is None
        assert result.error_fields == [python_name]

    def test_expense_rejects_boolean_amount(self, validator):
        """Test a boolean expense amount is an error."""
        parsed, result = validator.validate_expense(
            {"amount": True, "category": "Shopping"}, today=TODAY
        )
        assert parsed is None
        assert result.error_fields == ["amount"]

    def test_expense_rejects_huge_amount(self, validator):
        """Test amounts beyond the hard cap are errors, not warnings."""
        parsed, result = validator.validate_expense(
            {"amount": 1e308, "category": "Shopping"}, today=TODAY
        )
        assert parsed is None
        assert result.error_fields == ["amount"]

    def test_budget_rejects_huge_income(self, validator):
        """Test budget figures beyond the hard cap are errors."""
        parsed, _ = validator.validate_budget(budget_data(monthlyIncome=1e300), today=TODAY)
        assert parsed is None
