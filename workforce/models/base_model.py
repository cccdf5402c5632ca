"""
Shared DynamoDB access helpers: paginated reads and status-guarded writes.
"""
from typing import Any, Dict, List, Optional, Tuple

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from ..errors import StateConflictError
from ..logging_config import create_logger

logger = create_logger("models.base_model")

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def is_conditional_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED


class DynamoModel:
    """Base data access class; subclasses set ``key_name`` and a default table."""

    key_name = "id"
    default_table = None

    def __init__(self, table=None):
        self.table = table if table is not None else self.default_table

    # ---------- reads ----------

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self.table.get_item(Key={self.key_name: record_id}).get("Item")
        except ClientError as e:
            logger.error(f"Error getting {self.key_name}={record_id}: {e}")
            raise

    def _scan_all(self, **kwargs) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        resp = self.table.scan(**kwargs)
        items.extend(resp.get("Items", []))
        while "LastEvaluatedKey" in resp:
            resp = self.table.scan(ExclusiveStartKey=resp["LastEvaluatedKey"], **kwargs)
            items.extend(resp.get("Items", []))
        return items

    def _query_all(self, **kwargs) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        resp = self.table.query(**kwargs)
        items.extend(resp.get("Items", []))
        while "LastEvaluatedKey" in resp:
            resp = self.table.query(ExclusiveStartKey=resp["LastEvaluatedKey"], **kwargs)
            items.extend(resp.get("Items", []))
        return items

    def _query_page(self, limit: int, start_key: Optional[Dict[str, Any]] = None,
                    **kwargs) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        request = dict(kwargs, Limit=limit)
        if start_key:
            request["ExclusiveStartKey"] = start_key
        resp = self.table.query(**request)
        return resp.get("Items", []), resp.get("LastEvaluatedKey")

    # ---------- writes ----------

    def put(self, item: Dict[str, Any], only_if_new: bool = False) -> None:
        """With ``only_if_new`` an existing key raises StateConflictError instead of being overwritten."""
        request = {"Item": item}
        if only_if_new:
            request["ConditionExpression"] = Attr(self.key_name).not_exists()
        try:
            self.table.put_item(**request)
            logger.debug(f"Put {self.key_name}={item.get(self.key_name)}")
        except ClientError as e:
            if only_if_new and is_conditional_failure(e):
                raise StateConflictError(f"{self.key_name}={item.get(self.key_name)} already exists")
            logger.error(f"Error putting {self.key_name}={item.get(self.key_name)}: {e}")
            raise

    def update_fields(self, record_id: str, fields: Dict[str, Any],
                      expected_status: Optional[str] = None) -> Dict[str, Any]:
        """
        SET the given fields. When ``expected_status`` is given the write only
        happens if the stored status still matches; otherwise StateConflictError.
        """
        names = {f"#f{i}": k for i, k in enumerate(fields)}
        values = {f":v{i}": v for i, v in enumerate(fields.values())}
        request = {
            "Key": {self.key_name: record_id},
            "UpdateExpression": "SET " + ", ".join(f"#f{i} = :v{i}" for i in range(len(fields))),
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
            "ReturnValues": "ALL_NEW",
        }
        if expected_status is not None:
            request["ConditionExpression"] = Attr("status").eq(expected_status)
        else:
            request["ConditionExpression"] = Attr(self.key_name).exists()

        try:
            return self.table.update_item(**request).get("Attributes", {})
        except ClientError as e:
            if is_conditional_failure(e):
                raise StateConflictError(
                    f"{self.key_name}={record_id} changed before the update"
                    + (f" (expected status {expected_status})" if expected_status else "")
                )
            logger.error(f"Error updating {self.key_name}={record_id}: {e}")
            raise

    def delete(self, record_id: str, expected_status: Optional[str] = None) -> None:
        request = {"Key": {self.key_name: record_id}}
        if expected_status is not None:
            request["ConditionExpression"] = Attr("status").eq(expected_status)
        try:
            self.table.delete_item(**request)
        except ClientError as e:
            if is_conditional_failure(e):
                raise StateConflictError(f"{self.key_name}={record_id} changed before the delete")
            logger.error(f"Error deleting {self.key_name}={record_id}: {e}")
            raise
