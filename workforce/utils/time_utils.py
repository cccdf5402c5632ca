"""
Time and date utilities.
"""
import time
from datetime import date, datetime, timezone


def now_iso() -> str:
    """Get current timestamp in ISO format."""
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def today() -> date:
    return datetime.now(timezone.utc).date()
