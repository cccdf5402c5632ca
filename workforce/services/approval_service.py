# Business logic for approval operations
from typing import Any, Dict, List, Optional

from ..errors import StateConflictError, ValidationError, WorkforceError
from ..lifecycle import (
    APPROVED,
    APPROVER,
    KINDS,
    REJECTED,
    SUBMITTED,
    TIMESHEET,
    check_transition,
    normalize_status,
)
from ..logging_config import create_logger
from ..models import EmployeeModel, ExpenseModel, TimeEntryModel, TimesheetModel, full_name
from ..utils import now_iso, to_dynamo
from .notification_service import DECISION_TYPES, NotificationService
from .policy_service import PolicyService
from .timesheet_service import rows_from_entries, summarize

logger = create_logger("services.approval_service")


class ApprovalService:
    """Service class containing business logic for approval operations"""

    def __init__(self, timesheet_model: Optional[TimesheetModel] = None,
                 entry_model: Optional[TimeEntryModel] = None,
                 expense_model: Optional[ExpenseModel] = None,
                 employee_model: Optional[EmployeeModel] = None,
                 notification_service: Optional[NotificationService] = None,
                 policy_service: Optional[PolicyService] = None):
        self.timesheet_model = timesheet_model or TimesheetModel()
        self.entry_model = entry_model or TimeEntryModel()
        self.expense_model = expense_model or ExpenseModel()
        self.employee_model = employee_model or EmployeeModel()
        self.notification_service = notification_service or NotificationService()
        self.policy_service = policy_service or PolicyService()

    def _model_for(self, kind: str):
        return self.timesheet_model if kind == TIMESHEET else self.expense_model

    def pending_queue(self, user: Dict[str, Any]) -> Dict[str, Any]:
        """
        Submitted timesheets and expenses awaiting a decision.

        Admins see everything; managers see their direct reports. Drafts never
        appear here because only the submitted status is queried.
        """
        self.policy_service.require(user, "Approvals", "view")

        timesheets = self.timesheet_model.list_by_status(SUBMITTED)
        expenses = self.expense_model.list_by_status(SUBMITTED)

        employees = self.employee_model.get_many(
            {r.get("employeeID") for r in timesheets + expenses if r.get("employeeID")}
        )
        if not self.policy_service.can_do(user, "Approvals", "view_all"):
            reports = {eid for eid, emp in employees.items() if emp.get("managerID") == user["user_id"]}
            timesheets = [t for t in timesheets if t.get("employeeID") in reports]
            expenses = [e for e in expenses if e.get("employeeID") in reports]

        def _decorate(record):
            employee = employees.get(record.get("employeeID")) or {}
            return {**record, "employeeName": full_name(employee) if employee else record.get("employeeID")}

        timesheets = sorted((_decorate(t) for t in timesheets),
                            key=lambda t: (str(t.get("weekEnding", "")), t["employeeName"].casefold()), reverse=True)
        expenses = sorted((_decorate(e) for e in expenses),
                          key=lambda e: (str(e.get("expenseDate", "")), e["employeeName"].casefold()), reverse=True)

        logger.info(f"Pending queue for {user['user_id']}: {len(timesheets)} timesheets, {len(expenses)} expenses")
        return {
            "timesheets": timesheets,
            "expenses": expenses,
            "summary": {"pendingTimesheets": len(timesheets), "pendingExpenses": len(expenses)},
        }

    def decide(self, user: Dict[str, Any], kind: str, record_ids: List[str], status: str,
               comments: str = "") -> Dict[str, Any]:
        """
        Approve or reject a batch of submitted records.

        Each record is handled independently; the result lists what succeeded,
        what failed and which ids were blocked as self-approvals.
        """
        self.policy_service.require(user, "Approvals", "approve_reject")
        if kind not in KINDS:
            raise ValidationError(f"Unknown record kind: {kind!r}", fields={"kind": "must be timesheet or expense"})
        status = normalize_status(status)

        user_id = user["user_id"]
        model = self._model_for(kind)
        results = {"succeeded": [], "failed": [], "self_approval_blocked": []}

        for record_id in record_ids:
            record = model.get(record_id)
            if not record:
                results["failed"].append({"id": record_id, "error": f"{kind.capitalize()} not found"})
                continue

            if record.get("employeeID") == user_id:
                logger.warning(f"Self-approval blocked: {user_id} on {kind} {record_id}")
                results["self_approval_blocked"].append({"id": record_id, "error": "Cannot approve your own request"})
                results["failed"].append({"id": record_id, "error": "Self-approval not permitted"})
                continue

            try:
                check_transition(kind, record.get("status"), status, APPROVER, actor_role=user.get("role"))
                updated = self._apply_decision(kind, record, status, comments, user_id)
            except StateConflictError as e:
                logger.warning(f"Lost approval race on {kind} {record_id}: {e}")
                results["failed"].append({"id": record_id, "error": "State already changed", "conflict": True})
                continue
            except WorkforceError as e:
                results["failed"].append({
                    "id": record_id,
                    "error": str(e),
                    "errorType": type(e).__name__,
                    "currentStatus": record.get("status"),
                })
                continue

            self.notification_service.notify(
                record.get("employeeID"), DECISION_TYPES[(kind, status)], related_id=record_id,
                related_type=kind, metadata={"comments": comments, "decidedBy": user_id},
            )
            results["succeeded"].append({
                "id": record_id,
                "status": status,
                "employeeID": record.get("employeeID"),
                "approvedBy": updated.get("approvedBy"),
                "processedAt": updated.get("updatedAt"),
            })
            logger.info(f"{kind} {record_id} {status} by {user_id}")

        return results

    def _apply_decision(self, kind: str, record: Dict[str, Any], status: str, comments: str,
                        user_id: str) -> Dict[str, Any]:
        now = now_iso()
        fields: Dict[str, Any] = {"status": status, "updatedAt": now}
        if comments:
            fields["comments"] = comments
        if status == APPROVED:
            fields.update({"approvedAt": now, "approvedBy": user_id})
            if kind == TIMESHEET:
                fields.update(self._recomputed_totals(record))
        elif status == REJECTED:
            fields.update({"rejectedAt": now, "rejectedBy": user_id})

        record_id = record["timesheetID"] if kind == TIMESHEET else record["expenseID"]
        model = self._model_for(kind)
        updated = model.update_fields(record_id, to_dynamo(fields), expected_status=record["status"])
        return updated or {**record, **fields}

    def _recomputed_totals(self, header: Dict[str, Any]) -> Dict[str, Any]:
        """Derived hours recomputed from the stored entries at approval time."""
        employee = self.employee_model.get(header["employeeID"]) or {}
        entries = self.entry_model.list_for_timesheet(header["timesheetID"])
        totals, split = summarize(rows_from_entries(entries, header["weekEnding"]), employee)
        return {
            "dailyTotals": list(totals.daily_totals),
            "totalHours": totals.week_total,
            "regularHours": split.regular_hours,
            "overtimeHours": split.overtime_hours,
        }
