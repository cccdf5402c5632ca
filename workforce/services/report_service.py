# Business logic for client roll-up reports and CSV export
import csv
import io
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from ..aggregation import ClientGroup, aggregate_by_client
from ..config import EXPORT_URL_TTL, EXPORTS_BUCKET
from ..errors import ValidationError
from ..lifecycle import EXPENSE, TIMESHEET
from ..logging_config import create_logger
from ..models import ClientModel, EmployeeModel, ExpenseModel, TimesheetModel, full_name
from ..models.database import S3_CLIENT
from ..overtime import OvertimeSplit, price_split
from ..utils import now_iso
from ..week import parse_date
from .policy_service import PolicyService

logger = create_logger("services.report_service")

BILLING = "billing"
REPORT_KINDS = (TIMESHEET, EXPENSE, BILLING)

VALUE_FIELDS = {TIMESHEET: "totalHours", EXPENSE: "amount", BILLING: "totalPay"}

CSV_COLUMNS = [
    "Client",
    "Employee",
    "Pending Count",
    "Approved Count",
    "Pending Total",
    "Approved Total",
    "Total",
]


def priced_timesheet(record: Dict[str, Any], hourly_rate: Any) -> Dict[str, Any]:
    """Copy of a timesheet with totalPay priced from its stored regular/overtime hours."""
    split = OvertimeSplit(
        regular_hours=Decimal(str(record.get("regularHours") or 0)),
        overtime_hours=Decimal(str(record.get("overtimeHours") or 0)),
    )
    return {**record, **price_split(split, hourly_rate).to_dict()}


def groups_to_rows(groups: List[ClientGroup]) -> List[List[Any]]:
    """One row per (client, employee) plus a subtotal row per client."""
    rows: List[List[Any]] = []
    for group in groups:
        for emp in group.employees:
            rows.append([
                group.client_name, emp.employee_name, emp.pending_count, emp.approved_count,
                emp.pending_total, emp.approved_total, emp.total,
            ])
        rows.append([
            group.client_name, "Subtotal", group.total_pending, group.total_approved,
            group.pending_total, group.approved_total, group.total,
        ])
    return rows


def render_csv(groups: List[ClientGroup]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_COLUMNS)
    writer.writerows(groups_to_rows(groups))
    return buf.getvalue()


class ReportService:
    """Service class containing business logic for reports"""

    def __init__(self, timesheet_model: Optional[TimesheetModel] = None,
                 expense_model: Optional[ExpenseModel] = None,
                 employee_model: Optional[EmployeeModel] = None,
                 client_model: Optional[ClientModel] = None,
                 policy_service: Optional[PolicyService] = None,
                 s3_client=None):
        self.timesheet_model = timesheet_model or TimesheetModel()
        self.expense_model = expense_model or ExpenseModel()
        self.employee_model = employee_model or EmployeeModel()
        self.client_model = client_model or ClientModel()
        self.policy_service = policy_service or PolicyService()
        self.s3_client = s3_client or S3_CLIENT

    def build_groups(self, kind: str, start: str, end: str) -> List[ClientGroup]:
        if kind not in REPORT_KINDS:
            raise ValidationError(f"Unknown report kind: {kind!r}",
                                  fields={"kind": f"must be one of {', '.join(REPORT_KINDS)}"})
        if not start or not end:
            raise ValidationError("from and to are required", fields={"from": "required", "to": "required"})
        start_d, end_d = parse_date(start), parse_date(end)
        if start_d > end_d:
            raise ValidationError("from must not be after to", fields={"from": "after to"})

        model = self.expense_model if kind == EXPENSE else self.timesheet_model
        records = model.list_in_range(start_d.isoformat(), end_d.isoformat())

        employees = self.employee_model.list_all()
        if kind == BILLING:
            rates = {e["employeeID"]: e.get("hourlyRate") for e in employees}
            records = [priced_timesheet(r, rates.get(r.get("employeeID"))) for r in records]
        employee_to_client = {e["employeeID"]: e.get("clientID") or None for e in employees}
        employee_names = {e["employeeID"]: full_name(e) for e in employees}
        client_names = {c["clientID"]: c.get("name") or c["clientID"] for c in self.client_model.list_all()}

        # a client id that no longer resolves is reported as unassigned
        employee_to_client = {eid: cid if cid in client_names else None for eid, cid in employee_to_client.items()}

        return aggregate_by_client(records, employee_to_client, employee_names, client_names,
                                   value_field=VALUE_FIELDS[kind])

    def client_report(self, user: Dict[str, Any], kind: str, start: str, end: str) -> Dict[str, Any]:
        self.policy_service.require(user, "Reports", "view")
        groups = self.build_groups(kind, start, end)
        logger.info(f"Client report {kind} {start}..{end}: {len(groups)} groups")
        return {
            "kind": kind,
            "from": start,
            "to": end,
            "groups": [g.to_dict() for g in groups],
        }

    def export_csv(self, user: Dict[str, Any], kind: str, start: str, end: str) -> Dict[str, Any]:
        """Write the client report as CSV to the exports bucket and return a download link."""
        self.policy_service.require(user, "Reports", "export")
        groups = self.build_groups(kind, start, end)
        body = render_csv(groups)

        key = f"reports/{kind}/{start}_{end}_{uuid.uuid4().hex[:8]}.csv"
        try:
            self.s3_client.put_object(Bucket=EXPORTS_BUCKET, Key=key, Body=body.encode("utf-8"),
                                      ContentType="text/csv")
            url = self.s3_client.generate_presigned_url(
                "get_object", Params={"Bucket": EXPORTS_BUCKET, "Key": key}, ExpiresIn=EXPORT_URL_TTL
            )
        except ClientError as e:
            logger.error(f"Failed to export {kind} report to s3://{EXPORTS_BUCKET}/{key}: {e}")
            raise

        logger.info(f"Exported {kind} report to s3://{EXPORTS_BUCKET}/{key}")
        return {"key": key, "url": url, "expiresIn": EXPORT_URL_TTL, "generatedAt": now_iso()}
