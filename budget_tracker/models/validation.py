"""
Validation result models.

Produced by the input validator before anything is written.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from budget_tracker.models.budget import utc_now


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'float_parsing', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating one submission.

    Stage 1: Schema validation (types, required fields)
    Stage 2: Semantic checks (warnings only, never block a write)
    """

    entity_type: str = Field(
        ...,
        pattern="^(budget|expense)$",
        description="What kind of submission was validated"
    )
    validated_at: datetime = Field(
        default_factory=utc_now
    )

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_fields(self) -> list[str]:
        return [issue.field for issue in self.issues if issue.severity == "error"]
