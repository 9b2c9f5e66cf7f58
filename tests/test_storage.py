"""
Tests for storage backends.

The in-memory stores are exercised directly. The Google Sheets stores
are run against a fake worksheet so no network access is needed.
"""

import asyncio
import json
from datetime import datetime
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from budget_tracker.models import AuditEventBuilder
from budget_tracker.services.storage import (
    GoogleSheetsBudgetStorage,
    GoogleSheetsExpenseStorage,
    NotFoundError,
)
from budget_tracker.services.storage.google_sheets import BUDGET_COLUMNS, EXPENSE_COLUMNS


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the storage classes."""

    def __init__(self, header):
        self.rows = [list(header)]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, values, value_input_option=None):
        self.rows.append(list(values))

    def update(self, range_name, values, value_input_option=None):
        idx = int(range_name[1:]) - 1
        self.rows[idx] = list(values[0])

    def delete_rows(self, index):
        del self.rows[index - 1]


class TestInMemoryBudgetStorage:
    """Tests for InMemoryBudgetStorage."""

    def test_get_missing_budget(self, budget_storage):
        """Test an unknown user has no budget."""
        assert asyncio.run(budget_storage.get_budget("nobody")) is None

    def test_second_set_overwrites(self, budget_storage, make_budget):
        """Test saving twice keeps one record with the latest values."""
        first = asyncio.run(budget_storage.set_budget(make_budget(monthly_income=40000)))
        second = asyncio.run(budget_storage.set_budget(make_budget(monthly_income=55000)))

        stored = asyncio.run(budget_storage.get_budget("alice"))

        assert len(budget_storage) == 1
        assert stored.monthly_income == 55000
        assert second.id == first.id
        assert stored.created_at == first.created_at
        assert stored.updated_at >= first.updated_at

    def test_budgets_are_per_user(self, budget_storage, make_budget):
        """Test two users keep separate budgets."""
        asyncio.run(budget_storage.set_budget(make_budget(monthly_income=1000, user_id="alice")))
        asyncio.run(budget_storage.set_budget(make_budget(monthly_income=2000, user_id="bob")))

        assert len(budget_storage) == 2
        assert asyncio.run(budget_storage.get_budget("alice")).monthly_income == 1000
        assert asyncio.run(budget_storage.get_budget("bob")).monthly_income == 2000

    def test_returned_copy_is_detached(self, budget_storage, make_budget):
        """Test mutating a returned budget does not change the store."""
        asyncio.run(budget_storage.set_budget(make_budget(monthly_income=1000)))
        fetched = asyncio.run(budget_storage.get_budget("alice"))
        fetched.monthly_income = 1
        assert asyncio.run(budget_storage.get_budget("alice")).monthly_income == 1000


class TestInMemoryExpenseStorage:
    """Tests for InMemoryExpenseStorage."""

    def test_list_newest_first(self, expense_storage, make_expense):
        """Test expenses are listed by date, newest first."""
        older = make_expense(1, date=datetime(2024, 3, 1))
        newer = make_expense(2, date=datetime(2024, 3, 20))
        asyncio.run(expense_storage.add_expense(older))
        asyncio.run(expense_storage.add_expense(newer))

        listed = asyncio.run(expense_storage.list_expenses("alice"))

        assert [e.id for e in listed] == [newer.id, older.id]

    def test_list_filters_by_user(self, expense_storage, make_expense):
        """Test one user never sees another user's expenses."""
        asyncio.run(expense_storage.add_expense(make_expense(1, user_id="alice")))
        asyncio.run(expense_storage.add_expense(make_expense(2, user_id="bob")))

        listed = asyncio.run(expense_storage.list_expenses("alice"))

        assert [e.amount for e in listed] == [1]

    def test_list_date_from_is_inclusive(self, expense_storage, make_expense):
        """Test an expense at exactly date_from is included."""
        on_boundary = make_expense(1, date=datetime(2024, 3, 1, 0, 0))
        before = make_expense(2, date=datetime(2024, 2, 29, 23, 59))
        asyncio.run(expense_storage.add_expense(on_boundary))
        asyncio.run(expense_storage.add_expense(before))

        listed = asyncio.run(
            expense_storage.list_expenses("alice", date_from=datetime(2024, 3, 1))
        )

        assert [e.id for e in listed] == [on_boundary.id]

    def test_get_is_scoped_to_owner(self, expense_storage, make_expense):
        """Test fetching someone else's expense returns None."""
        expense = asyncio.run(expense_storage.add_expense(make_expense(1, user_id="alice")))
        assert asyncio.run(expense_storage.get_expense("bob", expense.id)) is None
        assert asyncio.run(expense_storage.get_expense("alice", expense.id)) is not None

    def test_update_other_users_expense_fails(self, expense_storage, make_expense):
        """Test an update for the wrong owner raises NotFoundError."""
        expense = asyncio.run(expense_storage.add_expense(make_expense(1, user_id="alice")))
        hijacked = expense.model_copy(update={"user_id": "bob", "amount": 999})

        with pytest.raises(NotFoundError):
            asyncio.run(expense_storage.update_expense(hijacked))

        assert asyncio.run(expense_storage.get_expense("alice", expense.id)).amount == 1

    def test_delete_is_scoped_to_owner(self, expense_storage, make_expense):
        """Test deleting someone else's expense does nothing."""
        expense = asyncio.run(expense_storage.add_expense(make_expense(1, user_id="alice")))

        assert asyncio.run(expense_storage.delete_expense("bob", expense.id)) is False
        assert asyncio.run(expense_storage.delete_expense("alice", expense.id)) is True
        assert asyncio.run(expense_storage.delete_expense("alice", expense.id)) is False


class TestInMemoryAuditStorage:
    """Tests for InMemoryAuditStorage."""

    def test_events_by_correlation_id(self, audit_storage):
        """Test events are grouped by correlation id in time order."""
        correlation_id = uuid4()
        first = AuditEventBuilder.expense_deleted(uuid4(), "alice", correlation_id)
        second = AuditEventBuilder.expense_deleted(uuid4(), "alice", correlation_id)
        other = AuditEventBuilder.expense_deleted(uuid4(), "alice", uuid4())
        for event in (first, second, other):
            asyncio.run(audit_storage.append_event(event))

        events = asyncio.run(audit_storage.get_events_by_correlation_id(correlation_id))

        assert [e.event_id for e in events] == [first.event_id, second.event_id]

    def test_recent_events_limit(self, audit_storage):
        """Test the most recent events come first, up to the limit."""
        for _ in range(5):
            asyncio.run(audit_storage.append_event(
                AuditEventBuilder.expense_deleted(uuid4(), "alice", uuid4())
            ))
        assert len(asyncio.run(audit_storage.get_recent_events(limit=3))) == 3


class TestGoogleSheetsBudgetStorage:
    """Tests for GoogleSheetsBudgetStorage against a fake sheet."""

    @pytest.fixture
    def sheet(self):
        return FakeWorksheet(BUDGET_COLUMNS)

    @pytest.fixture
    def storage(self, sheet):
        client = MagicMock()
        client.get_budgets_sheet.return_value = sheet
        return GoogleSheetsBudgetStorage(client)

    def test_set_then_get(self, storage, make_budget):
        """Test a budget round-trips through sheet rows."""
        budget = make_budget(monthly_income=50000, mandatory_expenses=12000)
        asyncio.run(storage.set_budget(budget))

        stored = asyncio.run(storage.get_budget("alice"))

        assert stored.id == budget.id
        assert stored.monthly_income == 50000
        assert stored.mandatory_expenses == 12000

    def test_second_set_updates_row_in_place(self, storage, sheet, make_budget):
        """Test the same user never gets a second row."""
        first = asyncio.run(storage.set_budget(make_budget(monthly_income=1000)))
        asyncio.run(storage.set_budget(make_budget(monthly_income=2000)))

        assert len(sheet.rows) == 2  # header + one budget
        stored = asyncio.run(storage.get_budget("alice"))
        assert stored.monthly_income == 2000
        assert stored.id == first.id

    def test_missing_budget(self, storage):
        """Test an unknown user has no budget."""
        assert asyncio.run(storage.get_budget("nobody")) is None


class TestGoogleSheetsExpenseStorage:
    """Tests for GoogleSheetsExpenseStorage against a fake sheet."""

    @pytest.fixture
    def sheet(self):
        return FakeWorksheet(EXPENSE_COLUMNS)

    @pytest.fixture
    def storage(self, sheet):
        client = MagicMock()
        client.get_expenses_sheet.return_value = sheet
        return GoogleSheetsExpenseStorage(client)

    def test_tags_stored_as_json(self, storage, sheet, make_expense):
        """Test tags are written as a JSON list."""
        asyncio.run(storage.add_expense(make_expense(10, tags=["work", "lunch"])))
        assert json.loads(sheet.rows[1][5]) == ["work", "lunch"]

    def test_add_and_list(self, storage, make_expense):
        """Test expenses come back for their owner only, newest first."""
        older = make_expense(10, date=datetime(2024, 3, 1))
        newer = make_expense(20, date=datetime(2024, 3, 5))
        for expense in (older, newer, make_expense(30, user_id="bob")):
            asyncio.run(storage.add_expense(expense))

        listed = asyncio.run(storage.list_expenses("alice"))

        assert [e.id for e in listed] == [newer.id, older.id]

    def test_update_and_delete_scoped_to_owner(self, storage, make_expense):
        """Test another user can neither update nor delete."""
        expense = asyncio.run(storage.add_expense(make_expense(10)))

        with pytest.raises(NotFoundError):
            asyncio.run(storage.update_expense(expense.model_copy(update={"user_id": "bob"})))
        assert asyncio.run(storage.delete_expense("bob", expense.id)) is False

        updated = asyncio.run(storage.update_expense(expense.model_copy(update={"amount": 99})))
        assert updated.amount == 99
        assert asyncio.run(storage.get_expense("alice", expense.id)).amount == 99
        assert asyncio.run(storage.delete_expense("alice", expense.id)) is True
        assert asyncio.run(storage.list_expenses("alice")) == []
