# Business logic for timesheet entry, totals and submission
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from ..config import DEFAULT_PAGE_SIZE
from ..errors import NotAuthorizedError, NotFoundError, ValidationError
from ..lifecycle import (
    DRAFT,
    OWNER,
    SUBMITTED,
    TIMESHEET,
    check_transition,
    ensure_editable,
    ensure_mutable,
    normalize_status,
)
from ..logging_config import create_logger
from ..models import EmployeeModel, ProjectModel, TimeEntryModel, TimesheetModel
from ..overtime import OvertimeSplit, policy_for_employee, price_split, resolve_overtime
from ..totals import WeekTotals, compute_totals
from ..utils import decode_token, encode_token, now_iso, to_dynamo
from ..week import as_date_map, is_week_ending, normalize_week, parse_date, week_dates
from .directory_service import require_active_projects
from .notification_service import SUBMITTED_TYPES, NotificationService
from .policy_service import PolicyService

logger = create_logger("services.timesheet_service")


def parse_rows(raw_rows: Any, week_ending: str) -> List[Dict[str, Any]]:
    """
    Validate TimesheetRow payloads and normalize each row's hours.

    Rows without any hours are dropped; rows with hours must name a project.
    Returns [{"projectID", "days": 7-tuple, "notes": {date: text}}].
    """
    if raw_rows is None:
        raw_rows = []
    if not isinstance(raw_rows, list):
        raise ValidationError("rows must be a list", fields={"rows": "must be a list"})

    rows = []
    for i, raw in enumerate(raw_rows):
        if not isinstance(raw, dict):
            raise ValidationError(f"rows[{i}] must be an object", fields={f"rows[{i}]": "must be an object"})
        hours = raw.get("hours") or {}
        if not isinstance(hours, (dict, list)):
            raise ValidationError(f"rows[{i}].hours must be an object", fields={f"rows[{i}].hours": "invalid"})
        days = normalize_week(hours, week_ending)
        if not any(days):
            continue
        project_id = str(raw.get("projectID") or "").strip()
        if not project_id:
            raise ValidationError(f"rows[{i}] has hours but no project", fields={f"rows[{i}].projectID": "required"})
        notes = raw.get("notes") or {}
        rows.append({
            "projectID": project_id,
            "days": days,
            "notes": {parse_date(k).isoformat(): str(v) for k, v in notes.items() if v} if isinstance(notes, dict) else {},
        })
    return rows


def timesheet_id_for(employee_id: str, week_ending: str) -> str:
    """One timesheet per employee and week; the key itself enforces it."""
    return f"{employee_id}_{week_ending}"


def summarize(rows: List[Dict[str, Any]], employee: Dict[str, Any]) -> Tuple[WeekTotals, OvertimeSplit]:
    totals = compute_totals([r["days"] for r in rows])
    split = resolve_overtime(totals.daily_totals, policy_for_employee(employee))
    return totals, split


def _row_key(entry: Dict[str, Any]) -> Tuple[int, str]:
    # entryID is "{date}#{row index}#{projectID}"
    project_id = str(entry.get("projectID") or "")
    parts = str(entry.get("entryID") or "").split("#", 2)
    if len(parts) == 3 and parts[1].isdigit():
        return int(parts[1]), project_id
    return -1, project_id


def rows_from_entries(entries: List[Dict[str, Any]], week_ending: str) -> List[Dict[str, Any]]:
    """Rebuild TimesheetRows from stored entries, keeping the rows they were saved as."""
    by_row: Dict[Tuple[int, str], Dict[str, Any]] = {}
    for e in entries:
        key = _row_key(e)
        row = by_row.setdefault(key, {"projectID": key[1], "hours": {}, "notes": {}})
        day = parse_date(e["date"]).isoformat()
        row["hours"][day] = row["hours"].get(day, Decimal("0")) + Decimal(str(e.get("hours", 0)))
        if e.get("description"):
            row["notes"][day] = e["description"]
    return parse_rows([by_row[k] for k in sorted(by_row)], week_ending)


class TimesheetService:
    """Service class containing business logic for timesheet operations"""

    def __init__(self, timesheet_model: Optional[TimesheetModel] = None,
                 entry_model: Optional[TimeEntryModel] = None,
                 employee_model: Optional[EmployeeModel] = None,
                 notification_service: Optional[NotificationService] = None,
                 policy_service: Optional[PolicyService] = None,
                 project_model: Optional[ProjectModel] = None):
        self.timesheet_model = timesheet_model or TimesheetModel()
        self.entry_model = entry_model or TimeEntryModel()
        self.employee_model = employee_model or EmployeeModel()
        self.notification_service = notification_service or NotificationService()
        self.policy_service = policy_service or PolicyService()
        self.project_model = project_model or ProjectModel()

    # -------------------------
    # Read-only calculation
    # -------------------------
    def calculate(self, user: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        """Preview daily/weekly totals and the overtime split without saving."""
        employee_id = self._target_employee_id(user, payload, action="view_others")
        employee = self._load_employee(employee_id)
        week_ending = self._week_ending(payload)
        rows = parse_rows(payload.get("rows"), week_ending)
        totals, split = summarize(rows, employee)
        policy = policy_for_employee(employee)
        return {
            "employeeID": employee_id,
            "weekEnding": week_ending,
            "dailyTotals": as_date_map(totals.daily_totals, week_ending),
            "weekTotal": totals.week_total,
            "policy": {"isExempt": policy.is_exempt, "rule": policy.rule},
            **split.to_dict(),
            "pay": price_split(split, employee.get("hourlyRate")).to_dict(),
        }

    # -------------------------
    # Create / update
    # -------------------------
    def save_timesheet(self, user: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Save the week's timesheet as a draft, or submit it.

        An employee has at most one timesheet per week ending; saving a week
        that already exists edits that timesheet.
        """
        self.policy_service.require(user, "Timesheets", "create")
        employee_id = self._target_employee_id(user, payload, action="act_for_others")
        week_ending = self._week_ending(payload)

        existing = self.timesheet_model.find_for_week(employee_id, week_ending)
        if existing:
            return self._write(user, existing, payload)

        employee = self._load_employee(employee_id)
        rows = parse_rows(payload.get("rows"), week_ending)
        require_active_projects(self.project_model, [r["projectID"] for r in rows])
        target = SUBMITTED if payload.get("submit") else DRAFT
        check_transition(TIMESHEET, DRAFT, target, OWNER, attestation=payload.get("attestation"))
        if target == SUBMITTED and not rows:
            raise ValidationError("Add at least one project with hours before submitting", fields={"rows": "empty"})

        totals, split = summarize(rows, employee)
        now = now_iso()
        timesheet_id = timesheet_id_for(employee_id, week_ending)
        header = {
            "timesheetID": timesheet_id,
            "employeeID": employee_id,
            "weekEnding": week_ending,
            "status": target,
            "attestation": bool(payload.get("attestation")),
            "createdAt": now,
            "updatedAt": now,
            "createdBy": user["user_id"],
            **self._derived_fields(totals, split),
        }
        if target == SUBMITTED:
            header["submittedAt"] = now

        self.timesheet_model.put(to_dynamo(header), only_if_new=True)
        self.entry_model.replace_for_timesheet(timesheet_id, self._entries(timesheet_id, rows, week_ending))
        logger.info(f"Created timesheet {timesheet_id} for {employee_id} week {week_ending} as {target}")

        if target == SUBMITTED:
            self._notify_manager(employee, timesheet_id, week_ending)
        return self._present(header, rows, week_ending)

    def update_timesheet(self, user: Dict[str, Any], timesheet_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        existing = self._load(timesheet_id)
        return self._write(user, existing, payload)

    def _write(self, user: Dict[str, Any], existing: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        self._require_owner(user, existing)
        ensure_editable(existing)

        current = normalize_status(existing.get("status"))
        if payload.get("submit"):
            target = SUBMITTED
        elif normalize_status(payload.get("status")) == DRAFT:
            target = DRAFT
        else:
            target = current
        check_transition(TIMESHEET, current, target, OWNER, attestation=payload.get("attestation"))

        week_ending = existing["weekEnding"]
        employee = self._load_employee(existing["employeeID"])
        if "rows" in payload:
            rows = parse_rows(payload.get("rows"), week_ending)
            require_active_projects(self.project_model, [r["projectID"] for r in rows])
        else:
            rows = rows_from_entries(self.entry_model.list_for_timesheet(existing["timesheetID"]), week_ending)
        if target == SUBMITTED and not rows:
            raise ValidationError("Add at least one project with hours before submitting", fields={"rows": "empty"})

        totals, split = summarize(rows, employee)
        now = now_iso()
        fields = {
            "status": target,
            "attestation": bool(payload.get("attestation", existing.get("attestation"))),
            "updatedAt": now,
            **self._derived_fields(totals, split),
        }
        if target == SUBMITTED:
            fields["submittedAt"] = now

        timesheet_id = existing["timesheetID"]
        updated = self.timesheet_model.update_fields(timesheet_id, to_dynamo(fields), expected_status=existing["status"])
        self.entry_model.replace_for_timesheet(timesheet_id, self._entries(timesheet_id, rows, week_ending))
        logger.info(f"Updated timesheet {timesheet_id}: {current} -> {target}, total={totals.week_total}, overtime={split.overtime_hours}")

        if target == SUBMITTED:
            self._notify_manager(employee, timesheet_id, week_ending)
        return self._present(updated or {**existing, **fields}, rows, week_ending)

    # -------------------------
    # Read / delete
    # -------------------------
    def get_timesheet(self, user: Dict[str, Any], timesheet_id: str) -> Dict[str, Any]:
        header = self._load(timesheet_id)
        self._require_viewer(user, header)
        entries = self.entry_model.list_for_timesheet(timesheet_id)
        return {**header, "entries": entries}

    def list_timesheets(self, user: Dict[str, Any], employee_id: Optional[str] = None,
                        status: Optional[str] = None, limit: int = DEFAULT_PAGE_SIZE,
                        next_token: Optional[str] = None,
                        week_ending: Optional[str] = None) -> Dict[str, Any]:
        employee_id = employee_id or user["user_id"]
        if employee_id != user["user_id"]:
            self.policy_service.require(user, "Timesheets", "view_others")
        if week_ending:
            header = self.timesheet_model.find_for_week(employee_id, parse_date(week_ending).isoformat())
            if header and employee_id != user["user_id"] and normalize_status(header.get("status")) == DRAFT:
                header = None
            return {"items": [header] if header else [], "nextToken": None}
        items, lek = self.timesheet_model.list_by_employee(
            employee_id, limit, decode_token(next_token), status=normalize_status(status) or None
        )
        if employee_id != user["user_id"]:
            items = [t for t in items if normalize_status(t.get("status")) != DRAFT]
        return {"items": items, "nextToken": encode_token(lek)}

    def delete_timesheet(self, user: Dict[str, Any], timesheet_id: str) -> None:
        header = self._load(timesheet_id)
        self._require_owner(user, header)
        ensure_mutable(header)
        if normalize_status(header.get("status")) == SUBMITTED:
            raise ValidationError("Submitted timesheets cannot be deleted while awaiting review")
        self.timesheet_model.delete(timesheet_id, expected_status=header["status"])
        self.entry_model.delete_for_timesheet(timesheet_id)
        logger.info(f"Deleted timesheet {timesheet_id}")

    # -------------------------
    # Helpers
    # -------------------------
    @staticmethod
    def _derived_fields(totals: WeekTotals, split: OvertimeSplit) -> Dict[str, Any]:
        return {
            "dailyTotals": list(totals.daily_totals),
            "totalHours": totals.week_total,
            "regularHours": split.regular_hours,
            "overtimeHours": split.overtime_hours,
        }

    @staticmethod
    def _entries(timesheet_id: str, rows: List[Dict[str, Any]], week_ending: str) -> List[Dict[str, Any]]:
        dates = week_dates(week_ending)
        entries = []
        for index, row in enumerate(rows):
            for d, hours in zip(dates, row["days"]):
                if not hours:
                    continue
                day = d.isoformat()
                entry = {
                    "timesheetID": timesheet_id,
                    "entryID": f"{day}#{index:03d}#{row['projectID']}",
                    "date": day,
                    "projectID": row["projectID"],
                    "hours": hours,
                }
                if row["notes"].get(day):
                    entry["description"] = row["notes"][day]
                entries.append(entry)
        return entries

    @staticmethod
    def _present(header: Dict[str, Any], rows: List[Dict[str, Any]], week_ending: str) -> Dict[str, Any]:
        return {
            **header,
            "rows": [
                {"projectID": r["projectID"], "hours": as_date_map(r["days"], week_ending), "notes": r["notes"]}
                for r in rows
            ],
        }

    @staticmethod
    def _week_ending(payload: Dict[str, Any]) -> str:
        raw = payload.get("weekEnding")
        if not raw:
            raise ValidationError("weekEnding is required", fields={"weekEnding": "required"})
        week_ending = parse_date(raw)
        if not is_week_ending(week_ending):
            raise ValidationError("weekEnding must be a Saturday", fields={"weekEnding": "must be a Saturday"})
        return week_ending.isoformat()

    def _target_employee_id(self, user: Dict[str, Any], payload: Dict[str, Any], action: str) -> str:
        employee_id = str(payload.get("employeeID") or user["user_id"])
        if employee_id != user["user_id"]:
            self.policy_service.require(user, "Timesheets", action)
        return employee_id

    def _load(self, timesheet_id: str) -> Dict[str, Any]:
        header = self.timesheet_model.get(timesheet_id)
        if not header:
            raise NotFoundError(f"Timesheet {timesheet_id} not found")
        return header

    def _load_employee(self, employee_id: str) -> Dict[str, Any]:
        employee = self.employee_model.get(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def _require_owner(self, user: Dict[str, Any], header: Dict[str, Any]) -> None:
        if header.get("employeeID") == user["user_id"]:
            return
        if self.policy_service.can_do(user, "Timesheets", "act_for_others"):
            return
        raise NotAuthorizedError("Only the owner can change this timesheet")

    def _require_viewer(self, user: Dict[str, Any], header: Dict[str, Any]) -> None:
        if header.get("employeeID") == user["user_id"]:
            return
        self.policy_service.require(user, "Timesheets", "view_others")
        # drafts stay private to their owner
        if normalize_status(header.get("status")) == DRAFT:
            raise NotFoundError(f"Timesheet {header.get('timesheetID')} not found")

    def _notify_manager(self, employee: Dict[str, Any], timesheet_id: str, week_ending: str) -> None:
        self.notification_service.notify(
            employee.get("managerID"), SUBMITTED_TYPES[TIMESHEET], related_id=timesheet_id,
            related_type=TIMESHEET, metadata={"employeeID": employee.get("employeeID"), "weekEnding": week_ending},
        )
