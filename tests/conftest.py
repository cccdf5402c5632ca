"""
Shared pytest fixtures for the workforce test suite.

``workforce.models.database`` creates boto3 resources at import time, so the
region and table names are set before anything from ``workforce`` is
imported. Services are exercised against the in-memory models below; the
DynamoDB request shapes themselves are covered with MagicMock tables in
test_base_model.py.
"""
import copy
import json
import os
from decimal import Decimal

import pytest

os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from workforce.errors import StateConflictError  # noqa: E402


# ---------------------------------------------------------------------------
# In-memory models
# ---------------------------------------------------------------------------

class FakeModel:
    key_name = "id"

    def __init__(self):
        self.items = {}

    def get(self, record_id):
        item = self.items.get(record_id)
        return copy.deepcopy(item) if item else None

    def put(self, item, only_if_new=False):
        if only_if_new and item[self.key_name] in self.items:
            raise StateConflictError(f"{self.key_name}={item[self.key_name]} already exists")
        self.items[item[self.key_name]] = copy.deepcopy(item)

    def update_fields(self, record_id, fields, expected_status=None):
        item = self.items.get(record_id)
        if item is None or (expected_status is not None and item.get("status") != expected_status):
            raise StateConflictError(f"{self.key_name}={record_id} changed before the update")
        item.update(copy.deepcopy(fields))
        return copy.deepcopy(item)

    def delete(self, record_id, expected_status=None):
        item = self.items.get(record_id)
        if expected_status is not None and (item is None or item.get("status") != expected_status):
            raise StateConflictError(f"{self.key_name}={record_id} changed before the delete")
        self.items.pop(record_id, None)

    def _all(self):
        return [copy.deepcopy(i) for i in self.items.values()]


class FakeTimesheetModel(FakeModel):
    key_name = "timesheetID"

    def find_for_week(self, employee_id, week_ending):
        for item in self._all():
            if item["employeeID"] == employee_id and item["weekEnding"] == week_ending:
                return item
        return None

    def list_by_employee(self, employee_id, limit, start_key=None, status=None):
        items = [i for i in self._all() if i["employeeID"] == employee_id and (not status or i["status"] == status)]
        items.sort(key=lambda i: i["weekEnding"], reverse=True)
        return items[:limit], None

    def list_by_status(self, status):
        return [i for i in self._all() if i["status"] == status]

    def list_for_week(self, week_ending):
        return [i for i in self._all() if i["weekEnding"] == week_ending]

    def list_in_range(self, start, end):
        return [i for i in self._all() if start <= i["weekEnding"] <= end]


class FakeTimeEntryModel:
    def __init__(self):
        self.by_timesheet = {}

    def list_for_timesheet(self, timesheet_id):
        return copy.deepcopy(self.by_timesheet.get(timesheet_id, []))

    def replace_for_timesheet(self, timesheet_id, entries):
        self.by_timesheet[timesheet_id] = copy.deepcopy(entries)

    def delete_for_timesheet(self, timesheet_id):
        self.by_timesheet.pop(timesheet_id, None)


class FakeExpenseModel(FakeModel):
    key_name = "expenseID"

    def list_by_employee(self, employee_id, limit, start_key=None, status=None):
        items = [i for i in self._all() if i["employeeID"] == employee_id and (not status or i["status"] == status)]
        return items[:limit], None

    def list_by_status(self, status):
        return [i for i in self._all() if i["status"] == status]

    def list_in_range(self, start, end):
        return [i for i in self._all() if start <= i["expenseDate"] <= end]


class FakeEmployeeModel(FakeModel):
    key_name = "employeeID"

    def list_all(self):
        return self._all()

    def list_active(self):
        return [i for i in self._all() if i.get("isActive") is True]

    def list_by_manager(self, manager_id):
        return [i for i in self._all() if i.get("managerID") == manager_id]

    def get_many(self, employee_ids):
        return {eid: self.get(eid) for eid in employee_ids if eid in self.items}


class FakeClientModel(FakeModel):
    key_name = "clientID"

    def list_all(self):
        return self._all()

    def name_exists(self, name, exclude_client_id=None):
        return any(i["name"] == name and i["clientID"] != exclude_client_id for i in self._all())


class FakeProjectModel(FakeModel):
    key_name = "projectID"

    def list_all(self):
        return self._all()

    def list_for_client(self, client_id):
        return [i for i in self._all() if i.get("clientID") == client_id]

    def get_many(self, project_ids):
        return {pid: self.get(pid) for pid in project_ids if pid in self.items}

    def code_exists(self, code, exclude_project_id=None):
        return any(i["code"] == code and i["projectID"] != exclude_project_id for i in self._all())


class FakeNotificationModel:
    def __init__(self):
        self.items = []
        self.fail_puts = False

    def put(self, item):
        if self.fail_puts:
            from botocore.exceptions import ClientError
            raise ClientError({"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
                              "PutItem")
        self.items.append(copy.deepcopy(item))

    def list_for_user(self, user_id, unread_only=False):
        return [copy.deepcopy(n) for n in self.items
                if n["userID"] == user_id and (not unread_only or not n["isRead"])]

    def mark_read(self, user_id, notification_ids, read_at):
        updated = 0
        for n in self.items:
            if n["userID"] == user_id and n["notificationID"] in notification_ids:
                n.update(isRead=True, readAt=read_at)
                updated += 1
        return updated

    def of_type(self, notification_type, user_id=None):
        return [n for n in self.items
                if n["type"] == notification_type and (user_id is None or n["userID"] == user_id)]


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

WEEK_ENDING = "2024-06-15"  # Saturday; week is Sun 06-09 .. Sat 06-15

ADMIN = {"user_id": "adm-1", "role": "admin", "email": "admin@example.com"}
MANAGER = {"user_id": "mgr-1", "role": "manager", "email": "manager@example.com"}
EMPLOYEE = {"user_id": "emp-1", "role": "employee", "email": "ana@example.com"}
CA_EMPLOYEE = {"user_id": "emp-2", "role": "employee", "email": "ben@example.com"}
OTHER_EMPLOYEE = {"user_id": "emp-3", "role": "employee", "email": "cy@example.com"}

EMPLOYEES = [
    {"employeeID": "adm-1", "firstName": "Ada", "lastName": "Admin", "role": "admin", "isActive": True},
    {"employeeID": "mgr-1", "firstName": "Mia", "lastName": "Manager", "role": "manager", "isActive": True,
     "managerID": "adm-1", "clientID": "cli-a"},
    {"employeeID": "emp-1", "firstName": "Ana", "lastName": "Alvarez", "role": "employee", "isActive": True,
     "managerID": "mgr-1", "clientID": "cli-a", "state": "NY", "isExempt": False, "hourlyRate": Decimal("40")},
    {"employeeID": "emp-2", "firstName": "Ben", "lastName": "Brooks", "role": "employee", "isActive": True,
     "managerID": "mgr-1", "clientID": "cli-a", "state": "CA", "isExempt": False},
    {"employeeID": "emp-3", "firstName": "Cy", "lastName": "Chen", "role": "employee", "isActive": True,
     "managerID": "adm-1", "state": "TX", "isExempt": True},
    {"employeeID": "emp-9", "firstName": "Old", "lastName": "Timer", "role": "employee", "isActive": False,
     "managerID": "mgr-1"},
]

CLIENTS = [
    {"clientID": "cli-a", "name": "ClientA", "isActive": True},
    {"clientID": "cli-b", "name": "beta corp", "isActive": True},
]

PROJECTS = [
    {"projectID": "p0", "name": "Internal", "code": "INT", "isActive": True},
    {"projectID": "p1", "name": "Portal rebuild", "code": "PRT", "clientID": "cli-a", "isActive": True},
    {"projectID": "p2", "name": "Data migration", "code": "MIG", "clientID": "cli-a", "isActive": True},
    {"projectID": "p-old", "name": "Legacy support", "code": "OLD", "isActive": False},
]


def week_hours(**days):
    """Hours keyed by weekday name for the WEEK_ENDING week, e.g. week_hours(mon=8)."""
    offsets = {"sun": "09", "mon": "10", "tue": "11", "wed": "12", "thu": "13", "fri": "14", "sat": "15"}
    return {f"2024-06-{offsets[k]}": v for k, v in days.items()}


def create_event(method="GET", path="/timesheets", body=None, query_params=None, path_params=None, user=None):
    """Create a mock API Gateway proxy event."""
    user = user or EMPLOYEE
    return {
        "httpMethod": method,
        "path": path,
        "body": json.dumps(body) if body is not None else None,
        "queryStringParameters": query_params,
        "pathParameters": path_params,
        "requestContext": {"authorizer": dict(user)},
        "headers": {"Content-Type": "application/json", "Origin": "http://localhost:3000"},
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    """All in-memory models, seeded with employees, clients and projects."""
    employees = FakeEmployeeModel()
    for e in EMPLOYEES:
        employees.put(e)
    clients = FakeClientModel()
    for c in CLIENTS:
        clients.put(c)

    class Store:
        pass

    s = Store()
    s.timesheets = FakeTimesheetModel()
    s.entries = FakeTimeEntryModel()
    s.expenses = FakeExpenseModel()
    s.employees = employees
    s.clients = clients
    s.projects = FakeProjectModel()
    for p in PROJECTS:
        s.projects.put(p)
    s.notifications = FakeNotificationModel()
    return s


@pytest.fixture
def notification_service(store):
    from workforce.services import NotificationService
    return NotificationService(store.notifications)


@pytest.fixture
def timesheet_service(store, notification_service):
    from workforce.services import TimesheetService
    return TimesheetService(store.timesheets, store.entries, store.employees, notification_service,
                            project_model=store.projects)


@pytest.fixture
def expense_service(store, notification_service):
    from workforce.services import ExpenseService
    return ExpenseService(store.expenses, store.employees, notification_service, project_model=store.projects)


@pytest.fixture
def approval_service(store, notification_service):
    from workforce.services import ApprovalService
    return ApprovalService(store.timesheets, store.entries, store.expenses, store.employees, notification_service)


@pytest.fixture
def directory_service(store):
    from workforce.services import DirectoryService
    return DirectoryService(store.employees, store.clients, project_model=store.projects)


@pytest.fixture
def reminder_service(store, notification_service):
    from workforce.services import ReminderService
    return ReminderService(store.timesheets, store.expenses, store.employees, notification_service)
