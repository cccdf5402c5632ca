# Scheduled reminder sweep: overdue timesheets and pending approvals
from collections import Counter
from datetime import date, timedelta
from typing import Any, Dict, Optional

from ..lifecycle import APPROVED, SUBMITTED, normalize_status
from ..logging_config import create_logger
from ..models import EmployeeModel, ExpenseModel, TimesheetModel
from ..utils import today
from ..week import parse_date, week_ending_for
from .notification_service import MANAGER_PENDING_REMINDER, TIMESHEET_OVERDUE, NotificationService

logger = create_logger("services.reminder_service")


def last_completed_week_ending(as_of: Optional[date] = None) -> date:
    """The Saturday of the most recent week that has fully ended."""
    as_of = as_of or today()
    return week_ending_for(as_of) - timedelta(days=7)


class ReminderService:
    """Creates reminder notifications; run from the scheduled handler"""

    def __init__(self, timesheet_model: Optional[TimesheetModel] = None,
                 expense_model: Optional[ExpenseModel] = None,
                 employee_model: Optional[EmployeeModel] = None,
                 notification_service: Optional[NotificationService] = None):
        self.timesheet_model = timesheet_model or TimesheetModel()
        self.expense_model = expense_model or ExpenseModel()
        self.employee_model = employee_model or EmployeeModel()
        self.notification_service = notification_service or NotificationService()

    def run(self, week_ending: Optional[Any] = None) -> Dict[str, Any]:
        week = parse_date(week_ending) if week_ending else last_completed_week_ending()
        week_iso = week.isoformat()

        overdue = self._overdue_timesheets(week_iso)
        managers = self._pending_for_managers()

        logger.info(f"Reminder sweep for week {week_iso}: {len(overdue)} overdue, {len(managers)} managers reminded")
        return {"weekEnding": week_iso, "overdueEmployees": overdue, "managersReminded": managers}

    def _overdue_timesheets(self, week_iso: str) -> list:
        done = {
            t.get("employeeID")
            for t in self.timesheet_model.list_for_week(week_iso)
            if normalize_status(t.get("status")) in (SUBMITTED, APPROVED)
        }
        overdue = []
        for employee in self.employee_model.list_active():
            employee_id = employee.get("employeeID")
            if not employee_id or employee_id in done:
                continue
            self.notification_service.notify(
                employee_id, TIMESHEET_OVERDUE, related_type="timesheet", metadata={"weekEnding": week_iso}
            )
            overdue.append(employee_id)
        return sorted(overdue)

    def _pending_for_managers(self) -> Dict[str, Dict[str, int]]:
        timesheets = self.timesheet_model.list_by_status(SUBMITTED)
        expenses = self.expense_model.list_by_status(SUBMITTED)
        employees = self.employee_model.get_many(
            {r.get("employeeID") for r in timesheets + expenses if r.get("employeeID")}
        )

        def _by_manager(records) -> Counter:
            counts: Counter = Counter()
            for r in records:
                manager_id = (employees.get(r.get("employeeID")) or {}).get("managerID")
                if manager_id:
                    counts[manager_id] += 1
            return counts

        ts_counts, ex_counts = _by_manager(timesheets), _by_manager(expenses)
        reminded: Dict[str, Dict[str, int]] = {}
        for manager_id in sorted(set(ts_counts) | set(ex_counts)):
            counts = {"timesheets": ts_counts[manager_id], "expenses": ex_counts[manager_id]}
            self.notification_service.notify(
                manager_id, MANAGER_PENDING_REMINDER, related_type="approval", metadata=counts
            )
            reminded[manager_id] = counts
        return reminded
