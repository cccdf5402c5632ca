"""
Data access layer for expense records.
"""
from typing import Any, Dict, List, Optional, Tuple

from boto3.dynamodb.conditions import Attr, Key

from ..config import TABLE_CONFIG
from .base_model import DynamoModel
from .database import EXPENSES_TBL


class ExpenseModel(DynamoModel):
    """Expenses keyed by expenseID"""

    key_name = "expenseID"
    default_table = EXPENSES_TBL

    def list_by_employee(self, employee_id: str, limit: int, start_key: Optional[Dict[str, Any]] = None,
                         status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        kwargs = {
            "IndexName": TABLE_CONFIG["employee_index"],
            "KeyConditionExpression": Key("employeeID").eq(employee_id),
            "ScanIndexForward": False,
        }
        if status:
            kwargs["FilterExpression"] = Attr("status").eq(status)
        return self._query_page(limit, start_key, **kwargs)

    def list_by_status(self, status: str) -> List[Dict[str, Any]]:
        return self._query_all(
            IndexName=TABLE_CONFIG["status_index"],
            KeyConditionExpression=Key("status").eq(status),
        )

    def list_in_range(self, start: str, end: str) -> List[Dict[str, Any]]:
        """All expenses dated in [start, end] (ISO dates)."""
        return self._scan_all(FilterExpression=Attr("expenseDate").between(start, end))
