"""
Data Export

Produces a downloadable copy of one user's budget and expenses, as
CSV or JSON. The output is built only from stored records; nothing is
recomputed or estimated.

CSV layout is one flat table. The first column says whether a row is
the budget or an expense; columns that do not apply are left empty.
"""

import csv
import io
import json
from datetime import datetime
from enum import Enum
from typing import Optional

from budget_tracker.models.budget import Budget, Expense, utc_now


CSV_COLUMNS = [
    "record_type",
    "id",
    "date",
    "category",
    "amount",
    "description",
    "tags",
    "monthly_income",
    "mandatory_expenses",
    "savings_goal",
    "days_in_month",
]


class ExportFormat(str, Enum):
    """Supported download formats."""
    CSV = "csv"
    JSON = "json"

    @property
    def mime_type(self) -> str:
        return "text/csv" if self is ExportFormat.CSV else "application/json"


class ExportError(Exception):
    """Requested export format is not supported."""
    pass


def parse_format(value: str) -> ExportFormat:
    try:
        return ExportFormat(value.strip().lower())
    except ValueError:
        supported = ", ".join(f.value for f in ExportFormat)
        raise ExportError(f"Unsupported export format: {value}. Use one of: {supported}")


class DataExporter:
    """Serializes a budget and its expenses for download."""

    def export(
        self,
        budget: Optional[Budget],
        expenses: list[Expense],
        export_format: ExportFormat,
        exported_at: Optional[datetime] = None,
    ) -> str:
        if export_format is ExportFormat.JSON:
            return self._to_json(budget, expenses, exported_at or utc_now())
        return self._to_csv(budget, expenses)

    def filename(self, export_format: ExportFormat) -> str:
        return f"budget-tracker-export.{export_format.value}"

    def _to_json(
        self,
        budget: Optional[Budget],
        expenses: list[Expense],
        exported_at: datetime,
    ) -> str:
        payload = {
            "exportedAt": exported_at.isoformat(),
            "budget": budget.to_response_dict() if budget else None,
            "expenses": [expense.to_response_dict() for expense in expenses],
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def _to_csv(self, budget: Optional[Budget], expenses: list[Expense]) -> str:
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS)
        writer.writeheader()

        if budget:
            writer.writerow({
                "record_type": "budget",
                "id": str(budget.id),
                "date": budget.updated_at.isoformat(),
                "monthly_income": budget.monthly_income,
                "mandatory_expenses": budget.mandatory_expenses,
                "savings_goal": budget.savings_goal,
                "days_in_month": budget.days_in_month,
            })

        for expense in expenses:
            writer.writerow({
                "record_type": "expense",
                "id": str(expense.id),
                "date": expense.date.isoformat(),
                "category": expense.category,
                "amount": expense.amount,
                "description": expense.description or "",
                "tags": "|".join(expense.tags),
            })

        return buffer.getvalue()
