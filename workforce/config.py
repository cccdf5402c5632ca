import os
from decimal import Decimal

# ========= CONFIGURATION =========
TABLE_CONFIG = {
    "timesheets":     os.environ.get("TIMESHEETS_TABLE",     "dev.Timesheets.ddb-table"),
    "time_entries":   os.environ.get("TIME_ENTRIES_TABLE",   "dev.TimeEntries.ddb-table"),
    "expenses":       os.environ.get("EXPENSES_TABLE",       "dev.Expenses.ddb-table"),
    "employees":      os.environ.get("EMPLOYEES_TABLE",      "dev.Employees.ddb-table"),
    "clients":        os.environ.get("CLIENTS_TABLE",        "dev.Clients.ddb-table"),
    "projects":       os.environ.get("PROJECTS_TABLE",       "dev.Projects.ddb-table"),
    "notifications":  os.environ.get("NOTIFICATIONS_TABLE",  "dev.Notifications.ddb-table"),
    "employee_index": os.environ.get("EMPLOYEE_INDEX",       "employeeID-index"),    # GSI on employeeID
    "status_index":   os.environ.get("STATUS_INDEX",         "status-index"),        # GSI on status
    "week_index":     os.environ.get("WEEK_INDEX",           "weekEnding-index"),    # GSI on weekEnding
}

EXPORTS_BUCKET = os.environ.get("EXPORTS_BUCKET", "dev-workforce-exports")
EXPORT_URL_TTL = int(os.environ.get("EXPORT_URL_TTL", "3600"))

ALLOWED_ORIGINS = [
    o.strip().rstrip("/")
    for o in os.environ.get("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if o.strip()
]

# ========= CONSTANTS =========
DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", "50"))
MAX_BATCH_IDS = int(os.environ.get("MAX_BATCH_IDS", "200"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

MAX_DAILY_HOURS = 24
DAILY_OVERTIME_THRESHOLD = 8
WEEKLY_OVERTIME_THRESHOLD = 40
OVERTIME_PAY_MULTIPLIER = Decimal(os.environ.get("OVERTIME_PAY_MULTIPLIER", "1.5"))

DAILY_THRESHOLD = "daily-threshold"
WEEKLY_THRESHOLD = "weekly-threshold"

# state/jurisdiction -> overtime rule; anything not listed is weekly
JURISDICTION_POLICIES = {
    "CA": DAILY_THRESHOLD,
}
DEFAULT_OVERTIME_RULE = WEEKLY_THRESHOLD

ROLES = ("employee", "manager", "admin")
APPROVER_ROLES = ("manager", "admin")
