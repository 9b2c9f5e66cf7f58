"""
Google Sheets Storage Backend

One spreadsheet, three worksheets:
- Budgets: one row per user, rewritten in place on every save
- Expenses: one row per expense, tags kept as a JSON list
- AuditLog: append-only

Every read pulls the whole worksheet and filters in Python. That is
fine for one household's records and keeps the sheets readable by hand.
Writes are retried with exponential backoff; reads are not.
"""

import json
from datetime import datetime
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from budget_tracker.config import get_settings
from budget_tracker.models.audit import AuditEvent, AuditEventType, AuditSeverity
from budget_tracker.models.budget import Budget, Expense, utc_now
from budget_tracker.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ExpenseStorageInterface,
    NotFoundError,
    StorageConnectionError,
    StorageError,
    dated_from,
)


# Column mappings for Budgets sheet
BUDGET_COLUMNS = [
    "id",
    "user_id",
    "monthly_income",
    "mandatory_expenses",
    "savings_goal",
    "days_in_month",
    "created_at",
    "updated_at",
]

# Column mappings for Expenses sheet
EXPENSE_COLUMNS = [
    "id",
    "user_id",
    "amount",
    "category",
    "description",
    "tags_json",
    "date",
    "created_at",
    "updated_at",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "user_id",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


def _safe_getter(row: list):
    """Read cells by index, tolerating short rows."""
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default
    return safe_get


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_budgets_sheet(self) -> gspread.Worksheet:
        """Get or create the Budgets worksheet."""
        return self._get_or_create_sheet(
            self._settings.budgets_sheet_name, BUDGET_COLUMNS, rows=200
        )

    def get_expenses_sheet(self) -> gspread.Worksheet:
        """Get or create the Expenses worksheet."""
        return self._get_or_create_sheet(
            self._settings.expenses_sheet_name, EXPENSE_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


class GoogleSheetsBudgetStorage(BudgetStorageInterface):
    """
    Google Sheets implementation of budget storage.

    One row per user. set_budget rewrites that row in place.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _budget_to_row(self, budget: Budget) -> list:
        return [
            str(budget.id),
            budget.user_id,
            str(budget.monthly_income),
            str(budget.mandatory_expenses),
            str(budget.savings_goal),
            str(budget.days_in_month),
            budget.created_at.isoformat(),
            budget.updated_at.isoformat(),
        ]

    def _row_to_budget(self, row: list) -> Budget:
        safe_get = _safe_getter(row)
        return Budget(
            id=UUID(safe_get(0)),
            user_id=safe_get(1),
            monthly_income=float(safe_get(2, "0")),
            mandatory_expenses=float(safe_get(3, "0")),
            savings_goal=float(safe_get(4, "0")),
            days_in_month=int(safe_get(5, "30")),
            created_at=datetime.fromisoformat(safe_get(6)),
            updated_at=datetime.fromisoformat(safe_get(7)),
        )

    def _find_row(self, all_rows: list[list], user_id: str) -> Optional[int]:
        """1-based sheet row index of the user's budget, if any."""
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
            if len(row) > 1 and row[1] == user_id:
                return idx
        return None

    async def get_budget(self, user_id: str) -> Optional[Budget]:
        try:
            sheet = self._client.get_budgets_sheet()
            all_rows = sheet.get_all_values()
            idx = self._find_row(all_rows, user_id)
            if idx is None:
                return None
            return self._row_to_budget(all_rows[idx - 1])
        except Exception as e:
            raise StorageError(f"Failed to get budget: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def set_budget(self, budget: Budget) -> Budget:
        try:
            sheet = self._client.get_budgets_sheet()
            all_rows = sheet.get_all_values()
            idx = self._find_row(all_rows, budget.user_id)

            if idx is None:
                sheet.append_row(self._budget_to_row(budget), value_input_option="RAW")
                return budget

            existing = self._row_to_budget(all_rows[idx - 1])
            stored = existing.model_copy(
                update={
                    "monthly_income": budget.monthly_income,
                    "mandatory_expenses": budget.mandatory_expenses,
                    "savings_goal": budget.savings_goal,
                    "days_in_month": budget.days_in_month,
                    "updated_at": utc_now(),
                }
            )
            sheet.update(
                range_name=f"A{idx}",
                values=[self._budget_to_row(stored)],
                value_input_option="RAW",
            )
            return stored
        except Exception as e:
            raise StorageError(f"Failed to save budget: {e}")


class GoogleSheetsExpenseStorage(ExpenseStorageInterface):
    """
    Google Sheets implementation of expense storage.

    Expenses are stored as rows with one expense per row.
    Tags are JSON-serialized.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _expense_to_row(self, expense: Expense) -> list:
        return [
            str(expense.id),
            expense.user_id,
            str(expense.amount),
            expense.category,
            expense.description or "",
            json.dumps(expense.tags),
            expense.date.isoformat(),
            expense.created_at.isoformat(),
            expense.updated_at.isoformat(),
        ]

    def _row_to_expense(self, row: list) -> Expense:
        safe_get = _safe_getter(row)
        return Expense(
            id=UUID(safe_get(0)),
            user_id=safe_get(1),
            amount=float(safe_get(2, "0")),
            category=safe_get(3),
            description=safe_get(4) or None,
            tags=json.loads(safe_get(5, "[]")),
            date=datetime.fromisoformat(safe_get(6)),
            created_at=datetime.fromisoformat(safe_get(7)),
            updated_at=datetime.fromisoformat(safe_get(8)),
        )

    def _find_row(
        self,
        all_rows: list[list],
        user_id: str,
        expense_id: UUID,
    ) -> Optional[int]:
        for idx, row in enumerate(all_rows[1:], start=2):
            if len(row) > 1 and row[0] == str(expense_id) and row[1] == user_id:
                return idx
        return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def add_expense(self, expense: Expense) -> Expense:
        try:
            sheet = self._client.get_expenses_sheet()
            sheet.append_row(self._expense_to_row(expense), value_input_option="RAW")
            return expense
        except Exception as e:
            raise StorageError(f"Failed to save expense: {e}")

    async def get_expense(self, user_id: str, expense_id: UUID) -> Optional[Expense]:
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()
            idx = self._find_row(all_rows, user_id, expense_id)
            if idx is None:
                return None
            return self._row_to_expense(all_rows[idx - 1])
        except Exception as e:
            raise StorageError(f"Failed to get expense: {e}")

    async def update_expense(self, expense: Expense) -> Expense:
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()
            idx = self._find_row(all_rows, expense.user_id, expense.id)
            if idx is None:
                raise NotFoundError(f"Expense not found: {expense.id}")

            sheet.update(
                range_name=f"A{idx}",
                values=[self._expense_to_row(expense)],
                value_input_option="RAW",
            )
            return expense
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update expense: {e}")

    async def delete_expense(self, user_id: str, expense_id: UUID) -> bool:
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()
            idx = self._find_row(all_rows, user_id, expense_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete expense: {e}")

    async def list_expenses(
        self,
        user_id: str,
        date_from: Optional[datetime] = None,
    ) -> list[Expense]:
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header

            expenses = []
            for row in all_rows:
                if len(row) < 2 or row[1] != user_id:
                    continue

                expense = self._row_to_expense(row)
                if dated_from(expense, date_from):
                    expenses.append(expense)

            # Sort by date descending (newest first)
            expenses.sort(key=lambda e: e.date, reverse=True)
            return expenses
        except Exception as e:
            raise StorageError(f"Failed to list expenses: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        safe_get = _safe_getter(row)
        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            user_id=safe_get(4) or None,
            entity_type=safe_get(5) or None,
            entity_id=UUID(safe_get(6)) if safe_get(6) else None,
            correlation_id=UUID(safe_get(7)) if safe_get(7) else None,
            description=safe_get(8),
            details=json.loads(safe_get(9)) if safe_get(9) else {},
            error_message=safe_get(10) or None,
            is_user_action=safe_get(11).lower() == "true",
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]

            events = [
                self._row_to_event(row)
                for row in all_rows
                if len(row) > 7 and row[7] == str(correlation_id)
            ]

            # Sort chronologically
            events.sort(key=lambda e: e.timestamp)
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]

            events = [self._row_to_event(row) for row in all_rows if row and row[0]]

            # Sort newest first
            events.sort(key=lambda e: e.timestamp, reverse=True)
            return events[:limit]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
