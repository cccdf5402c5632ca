"""
Data access layer for timesheet headers and their time entries.
"""
from typing import Any, Dict, List, Optional, Tuple

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from ..config import TABLE_CONFIG
from ..logging_config import create_logger
from .base_model import DynamoModel
from .database import TIMESHEETS_TBL, TIME_ENTRIES_TBL

logger = create_logger("models.timesheet_model")


class TimesheetModel(DynamoModel):
    """Timesheet headers keyed by timesheetID"""

    key_name = "timesheetID"
    default_table = TIMESHEETS_TBL

    def find_for_week(self, employee_id: str, week_ending: str) -> Optional[Dict[str, Any]]:
        """Return the employee's timesheet for the given week ending, if any."""
        items = self._query_all(
            IndexName=TABLE_CONFIG["employee_index"],
            KeyConditionExpression=Key("employeeID").eq(employee_id),
            FilterExpression=Attr("weekEnding").eq(week_ending),
        )
        return items[0] if items else None

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

    def list_for_week(self, week_ending: str) -> List[Dict[str, Any]]:
        return self._query_all(
            IndexName=TABLE_CONFIG["week_index"],
            KeyConditionExpression=Key("weekEnding").eq(week_ending),
        )

    def list_in_range(self, start: str, end: str) -> List[Dict[str, Any]]:
        """All timesheets whose week ending lies in [start, end] (ISO dates)."""
        return self._scan_all(FilterExpression=Attr("weekEnding").between(start, end))


class TimeEntryModel(DynamoModel):
    """Time entries keyed by (timesheetID, entryID)"""

    key_name = "timesheetID"
    default_table = TIME_ENTRIES_TBL

    def list_for_timesheet(self, timesheet_id: str) -> List[Dict[str, Any]]:
        items = self._query_all(KeyConditionExpression=Key("timesheetID").eq(timesheet_id))
        return sorted(items, key=lambda e: (str(e.get("date", "")), str(e.get("projectID", ""))))

    def replace_for_timesheet(self, timesheet_id: str, entries: List[Dict[str, Any]]) -> None:
        """Delete every stored entry for the timesheet and write ``entries``."""
        try:
            existing = self._query_all(
                KeyConditionExpression=Key("timesheetID").eq(timesheet_id),
                ProjectionExpression="timesheetID,entryID",
            )
            with self.table.batch_writer() as batch:
                for item in existing:
                    batch.delete_item(Key={"timesheetID": item["timesheetID"], "entryID": item["entryID"]})
                for entry in entries:
                    batch.put_item(Item=entry)
            logger.debug(f"Replaced {len(existing)} entries with {len(entries)} for timesheet {timesheet_id}")
        except ClientError as e:
            logger.error(f"Error replacing entries for timesheet {timesheet_id}: {e}")
            raise

    def delete_for_timesheet(self, timesheet_id: str) -> None:
        self.replace_for_timesheet(timesheet_id, [])
