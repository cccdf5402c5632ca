"""
Shared request plumbing for the route handlers.
"""
from typing import Any, Dict, List, Optional

from ..config import DEFAULT_PAGE_SIZE
from ..errors import (
    InvalidTransitionError,
    NotAuthorizedError,
    NotFoundError,
    RecordLockedError,
    StateConflictError,
    ValidationError,
    WorkforceError,
)
from ..logging_config import create_logger
from ..utils import build_response

logger = create_logger("handlers.common")

# most specific first; PolicyResolutionError is a server-side misconfiguration
ERROR_STATUS = (
    (ValidationError, 400),
    (NotAuthorizedError, 403),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (StateConflictError, 409),
    (RecordLockedError, 423),
)


def error_status(exc: Exception) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return 500


def error_response(event: Dict[str, Any], exc: WorkforceError) -> Dict[str, Any]:
    """
    Map a domain error onto an HTTP response.

    Anything that maps to 500 is re-raised so the entrypoint can log it with
    an error id.
    """
    status = error_status(exc)
    if status == 500:
        raise exc
    logger.warning(f"{type(exc).__name__} -> {status}: {exc}")
    return build_response(event, error=str(exc), status=status, fields=getattr(exc, "fields", None))


def query_params(event: Dict[str, Any]) -> Dict[str, str]:
    return event.get("queryStringParameters") or {}


def path_id(event: Dict[str, Any], name: str = "id") -> Optional[str]:
    params = event.get("pathParameters") or {}
    value = str(params.get(name) or params.get("proxy") or "").strip()
    return value or None


def page_limit(params: Dict[str, str]) -> int:
    try:
        limit = int(params.get("limit") or DEFAULT_PAGE_SIZE)
    except ValueError:
        raise ValidationError("limit must be an integer", fields={"limit": "must be an integer"})
    if limit < 1:
        raise ValidationError("limit must be positive", fields={"limit": "must be >= 1"})
    return min(limit, DEFAULT_PAGE_SIZE)


def as_bool(value: Any) -> bool:
    return str(value or "").strip().lower() in ("true", "1", "yes")


def normalize_ids(raw: Any) -> List[str]:
    """Strip empties and dedupe while keeping the original order."""
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise ValidationError("ids must be a list", fields={"ids": "must be a list"})
    ids: List[str] = []
    seen = set()
    for item in raw:
        if item is None:
            continue
        s = str(item).strip()
        if not s or s in seen:
            continue
        seen.add(s)
        ids.append(s)
    return ids
