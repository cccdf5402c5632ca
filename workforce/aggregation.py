"""
Client -> employee roll-ups for timesheet and expense reports.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .errors import ValidationError

PENDING = "submitted"
APPROVED = "approved"
UNASSIGNED_NAME = "Unassigned"
ZERO = Decimal("0")


@dataclass
class EmployeeSubtotal:
    employee_id: str
    employee_name: str
    pending_count: int = 0
    approved_count: int = 0
    pending_total: Decimal = ZERO
    approved_total: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.pending_total + self.approved_total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employeeID": self.employee_id,
            "employeeName": self.employee_name,
            "pendingCount": self.pending_count,
            "approvedCount": self.approved_count,
            "pendingTotal": self.pending_total,
            "approvedTotal": self.approved_total,
            "total": self.total,
        }


@dataclass
class ClientGroup:
    client_id: Optional[str]
    client_name: str
    employees: List[EmployeeSubtotal] = field(default_factory=list)

    @property
    def is_unassigned(self) -> bool:
        return self.client_id is None

    @property
    def total_pending(self) -> int:
        return sum(e.pending_count for e in self.employees)

    @property
    def total_approved(self) -> int:
        return sum(e.approved_count for e in self.employees)

    @property
    def pending_total(self) -> Decimal:
        return sum((e.pending_total for e in self.employees), ZERO)

    @property
    def approved_total(self) -> Decimal:
        return sum((e.approved_total for e in self.employees), ZERO)

    @property
    def total(self) -> Decimal:
        return self.pending_total + self.approved_total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clientID": self.client_id,
            "clientName": self.client_name,
            "totalPending": self.total_pending,
            "totalApproved": self.total_approved,
            "pendingTotal": self.pending_total,
            "approvedTotal": self.approved_total,
            "total": self.total,
            "employees": [e.to_dict() for e in self.employees],
        }


def _name_key(name: str, ident: Optional[str]):
    return (name.casefold(), name, ident or "")


def _amount(record: Mapping[str, Any], value_field: str) -> Decimal:
    raw = record.get(value_field)
    try:
        amount = raw if isinstance(raw, Decimal) else Decimal(str(raw or 0))
    except (InvalidOperation, ValueError):
        amount = None
    if amount is None or not amount.is_finite():
        raise ValidationError(f"{value_field} must be a number, got {raw!r}", fields={value_field: "must be a number"})
    return amount


def aggregate_by_client(records: Iterable[Mapping[str, Any]],
                        employee_to_client: Mapping[str, Optional[str]],
                        employee_names: Optional[Mapping[str, str]] = None,
                        client_names: Optional[Mapping[str, str]] = None,
                        value_field: str = "totalHours") -> List[ClientGroup]:
    """
    Group submitted/approved records by client, then by employee.

    Args:
        records: timesheet or expense records with employeeID and status.
        employee_to_client: employeeID -> clientID (None for no client).
        employee_names: employeeID -> display name; falls back to the id.
        client_names: clientID -> display name; falls back to the id.
        value_field: record field summed per employee ("totalHours" or "amount").

    Returns:
        Client groups sorted by name with "Unassigned" last; employees
        sorted by name inside each group.
    """
    employee_names = employee_names or {}
    client_names = client_names or {}

    # client_id -> employee_id -> subtotal
    buckets: Dict[Optional[str], Dict[str, EmployeeSubtotal]] = defaultdict(dict)

    for record in records or []:
        status = str(record.get("status") or "").strip().lower()
        if status not in (PENDING, APPROVED):
            continue
        employee_id = str(record.get("employeeID") or "")
        if not employee_id:
            continue

        client_id = employee_to_client.get(employee_id)
        sub = buckets[client_id].get(employee_id)
        if sub is None:
            sub = EmployeeSubtotal(employee_id=employee_id,
                                   employee_name=employee_names.get(employee_id) or employee_id)
            buckets[client_id][employee_id] = sub

        amount = _amount(record, value_field)
        if status == PENDING:
            sub.pending_count += 1
            sub.pending_total += amount
        else:
            sub.approved_count += 1
            sub.approved_total += amount

    groups = []
    for client_id, subs in buckets.items():
        name = UNASSIGNED_NAME if client_id is None else (client_names.get(client_id) or client_id)
        employees = sorted(subs.values(), key=lambda s: _name_key(s.employee_name, s.employee_id))
        groups.append(ClientGroup(client_id=client_id, client_name=name, employees=employees))

    groups.sort(key=lambda g: (g.is_unassigned,) + _name_key(g.client_name, g.client_id))
    return groups
