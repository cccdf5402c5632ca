"""
Database connection and table configuration.
"""
import boto3
from ..config import TABLE_CONFIG

_ddb = boto3.resource("dynamodb")

# Table instances
TIMESHEETS_TBL = _ddb.Table(TABLE_CONFIG["timesheets"])
TIME_ENTRIES_TBL = _ddb.Table(TABLE_CONFIG["time_entries"])
EXPENSES_TBL = _ddb.Table(TABLE_CONFIG["expenses"])
EMPLOYEES_TBL = _ddb.Table(TABLE_CONFIG["employees"])
CLIENTS_TBL = _ddb.Table(TABLE_CONFIG["clients"])
PROJECTS_TBL = _ddb.Table(TABLE_CONFIG["projects"])
NOTIFICATIONS_TBL = _ddb.Table(TABLE_CONFIG["notifications"])

# Report exports
S3_CLIENT = boto3.client("s3")
