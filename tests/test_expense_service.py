"""Tests for ExpenseService."""
from decimal import Decimal

import pytest

from workforce.errors import (
    InvalidTransitionError,
    NotAuthorizedError,
    NotFoundError,
    RecordLockedError,
    ValidationError,
)
from workforce.services.expense_service import clean_expense_fields, parse_amount
from workforce.services.notification_service import EXPENSE_SUBMITTED

from conftest import EMPLOYEE, MANAGER, OTHER_EMPLOYEE

BASE = {"expenseDate": "2024-06-12", "amount": "42.10", "category": "Travel", "vendor": " Acme Cabs "}


class TestFieldCleaning:
    def test_amount(self):
        assert parse_amount("12.345") == Decimal("12.345")
        assert parse_amount(0) == Decimal("0")
        for bad in ("-1", "abc", "Infinity"):
            with pytest.raises(ValidationError):
                parse_amount(bad)

    def test_required_fields(self):
        with pytest.raises(ValidationError) as exc:
            clean_expense_fields({"vendor": "x"})
        assert set(exc.value.fields) == {"expenseDate", "amount", "category"}

    def test_partial_update(self):
        assert clean_expense_fields({"amount": 5}, partial=True) == {"amount": Decimal("5")}

    def test_normalizes(self):
        fields = clean_expense_fields({**BASE, "expenseDate": "2024-06-12T10:00:00"})
        assert fields["expenseDate"] == "2024-06-12"
        assert fields["vendor"] == "Acme Cabs"


class TestLifecycle:
    def test_create_draft(self, expense_service, store):
        expense = expense_service.create_expense(EMPLOYEE, BASE)
        assert expense["status"] == "draft"
        assert expense["amount"] == Decimal("42.10")
        assert store.notifications.items == []

    def test_create_submitted_notifies_manager(self, expense_service, store):
        expense = expense_service.create_expense(EMPLOYEE, {**BASE, "submit": True})
        assert expense["status"] == "submitted"
        assert store.notifications.of_type(EXPENSE_SUBMITTED, "mgr-1")[0]["relatedID"] == expense["expenseID"]

    def test_edit_then_submit(self, expense_service):
        expense = expense_service.create_expense(EMPLOYEE, BASE)
        updated = expense_service.update_expense(EMPLOYEE, expense["expenseID"], {"amount": "50", "submit": True})
        assert updated["amount"] == Decimal("50")
        assert updated["status"] == "submitted"

    def test_submitted_is_read_only(self, expense_service):
        expense = expense_service.create_expense(EMPLOYEE, {**BASE, "submit": True})
        with pytest.raises(InvalidTransitionError):
            expense_service.update_expense(EMPLOYEE, expense["expenseID"], {"amount": "1"})
        with pytest.raises(ValidationError):
            expense_service.delete_expense(EMPLOYEE, expense["expenseID"])

    def test_approved_is_locked(self, expense_service, approval_service):
        expense = expense_service.create_expense(EMPLOYEE, {**BASE, "submit": True})
        approval_service.decide(MANAGER, "expense", [expense["expenseID"]], "approved")
        with pytest.raises(RecordLockedError):
            expense_service.update_expense(EMPLOYEE, expense["expenseID"], {"amount": "1"})
        with pytest.raises(RecordLockedError):
            expense_service.delete_expense(EMPLOYEE, expense["expenseID"])

    def test_only_owner_changes(self, expense_service):
        expense = expense_service.create_expense(EMPLOYEE, BASE)
        with pytest.raises(NotAuthorizedError):
            expense_service.update_expense(MANAGER, expense["expenseID"], {"amount": "1"})

    def test_delete_draft(self, expense_service, store):
        expense = expense_service.create_expense(EMPLOYEE, BASE)
        expense_service.delete_expense(EMPLOYEE, expense["expenseID"])
        assert store.expenses.items == {}


class TestVisibility:
    def test_manager_cannot_see_drafts(self, expense_service):
        expense = expense_service.create_expense(EMPLOYEE, BASE)
        with pytest.raises(NotFoundError):
            expense_service.get_expense(MANAGER, expense["expenseID"])
        assert expense_service.list_expenses(MANAGER, employee_id="emp-1")["items"] == []

    def test_other_employee_cannot_look(self, expense_service):
        expense = expense_service.create_expense(EMPLOYEE, {**BASE, "submit": True})
        with pytest.raises(NotAuthorizedError):
            expense_service.get_expense(OTHER_EMPLOYEE, expense["expenseID"])

    def test_owner_lists_own(self, expense_service):
        expense_service.create_expense(EMPLOYEE, BASE)
        assert len(expense_service.list_expenses(EMPLOYEE)["items"]) == 1


class TestProjects:
    def test_known_project(self, expense_service):
        assert expense_service.create_expense(EMPLOYEE, {**BASE, "projectID": "p1"})["projectID"] == "p1"

    def test_unknown_project(self, expense_service, store):
        with pytest.raises(ValidationError) as exc:
            expense_service.create_expense(EMPLOYEE, {**BASE, "projectID": "p-nope"})
        assert exc.value.fields == {"projectID:p-nope": "not found"}
        assert store.expenses.items == {}

    def test_edit_to_inactive_project(self, expense_service):
        expense = expense_service.create_expense(EMPLOYEE, BASE)
        with pytest.raises(ValidationError):
            expense_service.update_expense(EMPLOYEE, expense["expenseID"], {"projectID": "p-old"})
