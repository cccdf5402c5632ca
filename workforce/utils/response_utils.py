"""
Response utilities for API responses and CORS handling.
"""
import json
from typing import Any, Dict, Optional

from ..config import ALLOWED_ORIGINS
from .json_utils import json_clean


def get_cors_headers(event: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    CORS headers for the request's origin.

    Reads both 'origin' and 'Origin', drops a trailing slash and echoes the
    origin back only if it is in ALLOWED_ORIGINS; otherwise "null".
    """
    headers = (event or {}).get("headers") or {}
    origin = (headers.get("origin") or headers.get("Origin") or "").rstrip("/")
    return {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": origin if origin in ALLOWED_ORIGINS else "null",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Allow-Methods": "OPTIONS,GET,POST,PUT,DELETE",
        "Access-Control-Allow-Credentials": "true",
    }


def build_response(event: Optional[Dict[str, Any]] = None, data: Any = None, *,
                   status: int = 200, error: Optional[str] = None,
                   fields: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build a standard API response with CORS headers and JSON body.

    On error the body is {"error": ..., "fields": ...}; a bare 200 with an
    error is bumped to 400.
    """
    if error:
        body = {"error": error}
        if fields:
            body["fields"] = fields
        if status == 200:
            status = 400
    else:
        body = data if data is not None else {}

    return {
        "statusCode": status,
        "headers": get_cors_headers(event),
        "body": json.dumps(json_clean(body), default=str),
    }
