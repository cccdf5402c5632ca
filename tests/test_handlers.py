"""Tests for the directory, report and notification handlers."""
import json
from unittest.mock import MagicMock

import pytest

from workforce.errors import ValidationError
from workforce.handlers.common import normalize_ids, page_limit
from workforce.handlers.directory_handlers import handle_clients, handle_employees, handle_projects
from workforce.handlers.expense_handlers import handle_create_expense
from workforce.handlers.notification_handlers import handle_list_notifications, handle_mark_read
from workforce.handlers.report_handlers import handle_client_report, handle_export
from workforce.services.notification_service import TIMESHEET_APPROVED

from conftest import ADMIN, EMPLOYEE, MANAGER, create_event


def _body(resp):
    return json.loads(resp["body"])


class TestCommon:
    def test_page_limit(self):
        assert page_limit({}) == 50
        assert page_limit({"limit": "10"}) == 10
        assert page_limit({"limit": "5000"}) == 50
        with pytest.raises(ValidationError):
            page_limit({"limit": "ten"})

    def test_normalize_ids(self):
        assert normalize_ids(["a", " a ", None, "", "b"]) == ["a", "b"]
        assert normalize_ids("a") == ["a"]
        with pytest.raises(ValidationError):
            normalize_ids({"a": 1})


class TestDirectory:
    def test_employee_crud(self, directory_service):
        created = handle_employees(create_event("POST", "/employees", user=ADMIN), "POST", {
            "firstName": "Eve", "lastName": "Evans", "email": "eve@example.com", "role": "employee",
        }, ADMIN, service=directory_service)
        assert created["statusCode"] == 201
        employee_id = _body(created)["employee"]["employeeID"]

        event = create_event("DELETE", f"/employees/{employee_id}", path_params={"id": employee_id}, user=ADMIN)
        deleted = handle_employees(event, "DELETE", {}, ADMIN, service=directory_service)
        assert _body(deleted)["employee"]["isActive"] is False

    def test_non_admin_write_is_403(self, directory_service):
        resp = handle_clients(create_event("POST", "/clients", user=MANAGER), "POST", {"name": "X"}, MANAGER,
                              service=directory_service)
        assert resp["statusCode"] == 403

    def test_get_missing_client_is_404(self, directory_service):
        event = create_event("GET", "/clients/nope", path_params={"id": "nope"})
        assert handle_clients(event, "GET", {}, EMPLOYEE, service=directory_service)["statusCode"] == 404

    def test_project_list_and_create(self, directory_service):
        event = create_event("GET", "/projects", query_params={"clientID": "cli-a"})
        listed = handle_projects(event, "GET", {}, EMPLOYEE, service=directory_service)
        assert [p["projectID"] for p in _body(listed)["items"]] == ["p2", "p1"]

        created = handle_projects(create_event("POST", "/projects", user=ADMIN), "POST",
                                  {"name": "Audit", "code": "aud"}, ADMIN, service=directory_service)
        assert created["statusCode"] == 201
        duplicate = handle_projects(create_event("POST", "/projects", user=ADMIN), "POST",
                                    {"name": "Audit again", "code": "AUD"}, ADMIN, service=directory_service)
        assert duplicate["statusCode"] == 400

    def test_project_put_needs_id(self, directory_service):
        resp = handle_projects(create_event("PUT", "/projects", user=ADMIN), "PUT", {"name": "X"}, ADMIN,
                               service=directory_service)
        assert resp["statusCode"] == 400


class TestReports:
    def test_report_query_parameters(self):
        service = MagicMock()
        service.client_report.return_value = {"groups": []}
        event = create_event("GET", "/reports/clients", query_params={"kind": "Expense", "from": "2024-06-01",
                                                                       "to": "2024-06-30"}, user=MANAGER)
        assert handle_client_report(event, MANAGER, service=service)["statusCode"] == 200
        service.client_report.assert_called_once_with(MANAGER, "expense", "2024-06-01", "2024-06-30")

    def test_export_created(self):
        service = MagicMock()
        service.export_csv.return_value = {"url": "https://x"}
        resp = handle_export(create_event("POST", "/reports/export"), {"from": "2024-06-01", "to": "2024-06-30"},
                             MANAGER, service=service)
        assert resp["statusCode"] == 201
        service.export_csv.assert_called_once_with(MANAGER, "timesheet", "2024-06-01", "2024-06-30")


class TestNotifications:
    def test_list_and_mark(self, notification_service):
        notification_id = notification_service.notify("emp-1", TIMESHEET_APPROVED)
        listed = _body(handle_list_notifications(create_event(query_params={"unread": "true"}), EMPLOYEE,
                                                 service=notification_service))
        assert listed["stats"]["unread"] == 1

        resp = handle_mark_read(create_event("PUT", "/notifications"), {"notificationIDs": [notification_id]},
                                EMPLOYEE, service=notification_service)
        assert _body(resp)["updated"] == 1

    def test_mark_read_needs_ids(self, notification_service):
        resp = handle_mark_read(create_event("PUT", "/notifications"), {}, EMPLOYEE, service=notification_service)
        assert resp["statusCode"] == 400


def test_create_expense_validation_is_400(expense_service):
    resp = handle_create_expense(create_event("POST", "/expenses"), {"amount": "-4"}, EMPLOYEE,
                                 service=expense_service)
    assert resp["statusCode"] == 400
    assert _body(resp)["fields"]["amount"] == "must be >= 0"
