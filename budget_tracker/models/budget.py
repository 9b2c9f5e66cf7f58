"""
Core Data Models for Budget Tracker

These models define the strict schemas for all records flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and for the calling layer (camelCase keys)

DESIGN DECISION: Amounts are plain floats. Totals use native float
arithmetic and accept its rounding behaviour.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


VALID_DAYS_IN_MONTH = (28, 29, 30, 31)

# Largest magnitude accepted for any single amount. Totals of any
# realistic number of records stay finite under this bound.
MAX_AMOUNT = 1e12


def utc_now() -> datetime:
    """Timestamp used for created_at / updated_at fields."""
    return datetime.now(timezone.utc)


def reject_bool(value: Any) -> Any:
    """JSON true/false must not be read as 1/0."""
    if isinstance(value, bool):
        raise ValueError("Must be a number, not true/false")
    return value


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Expense dates are compared as naive local times."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class RecordModel(BaseModel):
    """
    Base for every record and result model.

    Fields are snake_case in Python and camelCase on the wire.
    Either spelling is accepted on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_response_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys and JSON-safe values."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# BUDGET
# =============================================================================

class BudgetInput(RecordModel):
    """
    A budget submission from the user.

    All four numeric fields are required. Submitting again for the same
    user overwrites the stored values.
    """

    monthly_income: float = Field(
        ...,
        ge=0,
        le=MAX_AMOUNT,
        allow_inf_nan=False,
        description="Monthly income"
    )
    mandatory_expenses: float = Field(
        ...,
        ge=0,
        le=MAX_AMOUNT,
        allow_inf_nan=False,
        description="Fixed monthly outgoings (stored, not used in calculations)"
    )
    savings_goal: float = Field(
        ...,
        ge=0,
        le=MAX_AMOUNT,
        allow_inf_nan=False,
        description="Target amount to save each month"
    )
    days_in_month: int = Field(
        ...,
        description="Days in the budgeted month (28-31)"
    )

    @field_validator(
        'monthly_income', 'mandatory_expenses', 'savings_goal', 'days_in_month',
        mode='before',
    )
    @classmethod
    def reject_bool_figures(cls, v: Any) -> Any:
        return reject_bool(v)

    @field_validator('days_in_month')
    @classmethod
    def validate_days_in_month(cls, v: int) -> int:
        if v not in VALID_DAYS_IN_MONTH:
            raise ValueError(f"Days in month must be one of {VALID_DAYS_IN_MONTH}, got {v}")
        return v


class Budget(BudgetInput):
    """
    A user's single active monthly budget.

    CRITICAL: There is at most one Budget per user_id.
    The store replaces it in place; it never appends a second one.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique budget ID (kept across updates)"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Owning user"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the budget was first stored"
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        description="Last update timestamp"
    )

    @classmethod
    def from_input(cls, user_id: str, data: BudgetInput) -> "Budget":
        return cls(user_id=user_id, **data.model_dump())


# =============================================================================
# EXPENSE
# =============================================================================

class ExpenseInput(RecordModel):
    """
    An expense submission from the user.

    The category is kept exactly as typed: "Food" and "food " are
    different categories. Negative amounts are accepted.
    """

    amount: float = Field(
        ...,
        ge=-MAX_AMOUNT,
        le=MAX_AMOUNT,
        allow_inf_nan=False,
        description="Amount spent"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Free-text category label"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Optional note"
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Free-text labels, in the order given"
    )
    date: Optional[datetime] = Field(
        default=None,
        description="When the money was spent (defaults to now)"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def reject_bool_amount(cls, v: Any) -> Any:
        return reject_bool(v)

    @field_validator('category')
    @classmethod
    def reject_blank_category(cls, v: str) -> str:
        """Blank categories are missing categories. Value is not stripped."""
        if not v.strip():
            raise ValueError("Category cannot be blank")
        return v

    @field_validator('tags', mode='before')
    @classmethod
    def default_tags(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


class Expense(RecordModel):
    """A single dated spending record owned by one user."""

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Owning user"
    )
    amount: float = Field(
        ...,
        ge=-MAX_AMOUNT,
        le=MAX_AMOUNT,
        allow_inf_nan=False,
    )
    category: str = Field(
        ...,
        min_length=1,
    )
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    date: datetime = Field(
        default_factory=datetime.now,
        description="Local time the money was spent"
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return to_local_naive(v)

    @classmethod
    def from_input(cls, user_id: str, data: ExpenseInput) -> "Expense":
        fields = data.model_dump(exclude={"date"})
        if data.date is not None:
            fields["date"] = data.date
        return cls(user_id=user_id, **fields)

    def with_changes(self, data: ExpenseInput) -> "Expense":
        """
        Apply an update submission.

        Only amount, category, description and tags change.
        The original date is kept.
        """
        return self.model_copy(
            update={
                "amount": data.amount,
                "category": data.category,
                "description": data.description,
                "tags": list(data.tags),
                "updated_at": utc_now(),
            }
        )
