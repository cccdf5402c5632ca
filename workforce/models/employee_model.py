"""
Data access layer for employees.
"""
from typing import Any, Dict, Iterable, List

from boto3.dynamodb.conditions import Attr

from .base_model import DynamoModel
from .database import EMPLOYEES_TBL


def full_name(employee: Dict[str, Any]) -> str:
    """firstName + lastName, falling back to email, then the id."""
    first = (employee.get("firstName") or "").strip()
    last = (employee.get("lastName") or "").strip()
    if first or last:
        return f"{first} {last}".strip()
    return (employee.get("email") or "").strip() or str(employee.get("employeeID", ""))


class EmployeeModel(DynamoModel):
    """Employees keyed by employeeID"""

    key_name = "employeeID"
    default_table = EMPLOYEES_TBL

    def list_all(self) -> List[Dict[str, Any]]:
        return self._scan_all()

    def list_active(self) -> List[Dict[str, Any]]:
        return self._scan_all(FilterExpression=Attr("isActive").eq(True))

    def list_by_manager(self, manager_id: str) -> List[Dict[str, Any]]:
        return self._scan_all(FilterExpression=Attr("managerID").eq(manager_id))

    def get_many(self, employee_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """employeeID -> record for the ids that exist."""
        out: Dict[str, Dict[str, Any]] = {}
        for employee_id in sorted(set(employee_ids)):
            item = self.get(employee_id)
            if item:
                out[employee_id] = item
        return out
