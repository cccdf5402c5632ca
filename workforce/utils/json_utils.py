"""
JSON serialization utilities for DynamoDB types.
"""
from decimal import Decimal
from datetime import date, datetime
from typing import Any


def json_clean(obj: Any) -> Any:
    """
    Recursively convert boto3/DynamoDB types to JSON-safe types.
    """
    if isinstance(obj, dict):
        return {k: json_clean(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [json_clean(v) for v in obj]
    if isinstance(obj, set):
        return [json_clean(v) for v in sorted(obj, key=str)]
    if isinstance(obj, Decimal):
        return int(obj) if obj % 1 == 0 else float(obj)
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    return obj


def to_dynamo(obj: Any) -> Any:
    """
    Recursively convert floats to Decimal (DynamoDB rejects floats) and dates
    to ISO strings. None values inside dicts are dropped.
    """
    if isinstance(obj, dict):
        return {k: to_dynamo(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, (list, tuple)):
        return [to_dynamo(v) for v in obj]
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    return obj
