"""Tests for the DynamoDB access helpers using MagicMock tables."""
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from workforce.errors import StateConflictError
from workforce.models import NotificationModel, TimeEntryModel, TimesheetModel
from workforce.models.base_model import is_conditional_failure


def _client_error(code="ConditionalCheckFailedException", op="UpdateItem"):
    return ClientError({"Error": {"Code": code, "Message": code}}, op)


@pytest.fixture
def table():
    return MagicMock()


def test_is_conditional_failure():
    assert is_conditional_failure(_client_error())
    assert not is_conditional_failure(_client_error("ThrottlingException"))


def test_get(table):
    table.get_item.return_value = {"Item": {"timesheetID": "t1"}}
    assert TimesheetModel(table).get("t1") == {"timesheetID": "t1"}
    table.get_item.assert_called_once_with(Key={"timesheetID": "t1"})


def test_scan_follows_pagination(table):
    table.scan.side_effect = [
        {"Items": [{"n": 1}], "LastEvaluatedKey": {"timesheetID": "a"}},
        {"Items": [{"n": 2}]},
    ]
    assert TimesheetModel(table).list_in_range("2024-06-01", "2024-06-30") == [{"n": 1}, {"n": 2}]
    assert table.scan.call_args_list[1].kwargs["ExclusiveStartKey"] == {"timesheetID": "a"}


def test_query_page_returns_last_key(table):
    table.query.return_value = {"Items": [{"n": 1}], "LastEvaluatedKey": {"k": "v"}}
    items, lek = TimesheetModel(table).list_by_employee("emp-1", 10, {"k": "start"}, status="submitted")
    assert items == [{"n": 1}]
    assert lek == {"k": "v"}
    kwargs = table.query.call_args.kwargs
    assert kwargs["Limit"] == 10
    assert kwargs["ExclusiveStartKey"] == {"k": "start"}
    assert kwargs["ScanIndexForward"] is False
    assert kwargs["IndexName"] == "employeeID-index"


class TestUpdateFields:
    def test_builds_placeholder_expression(self, table):
        table.update_item.return_value = {"Attributes": {"status": "approved"}}
        result = TimesheetModel(table).update_fields("t1", {"status": "approved", "approvedBy": "m1"},
                                                     expected_status="submitted")
        assert result == {"status": "approved"}
        kwargs = table.update_item.call_args.kwargs
        assert kwargs["UpdateExpression"] == "SET #f0 = :v0, #f1 = :v1"
        assert kwargs["ExpressionAttributeNames"] == {"#f0": "status", "#f1": "approvedBy"}
        assert kwargs["ExpressionAttributeValues"] == {":v0": "approved", ":v1": "m1"}
        assert kwargs["ReturnValues"] == "ALL_NEW"
        assert "ConditionExpression" in kwargs

    def test_conditional_failure_is_a_state_conflict(self, table):
        table.update_item.side_effect = _client_error()
        with pytest.raises(StateConflictError):
            TimesheetModel(table).update_fields("t1", {"status": "approved"}, expected_status="submitted")

    def test_other_errors_propagate(self, table):
        table.update_item.side_effect = _client_error("ThrottlingException")
        with pytest.raises(ClientError):
            TimesheetModel(table).update_fields("t1", {"status": "approved"})


class TestPut:
    def test_plain_put_has_no_condition(self, table):
        TimesheetModel(table).put({"timesheetID": "t1"})
        table.put_item.assert_called_once_with(Item={"timesheetID": "t1"})

    def test_only_if_new_guards_the_key(self, table):
        TimesheetModel(table).put({"timesheetID": "t1"}, only_if_new=True)
        assert "ConditionExpression" in table.put_item.call_args.kwargs

    def test_existing_key_is_a_state_conflict(self, table):
        table.put_item.side_effect = _client_error(op="PutItem")
        with pytest.raises(StateConflictError):
            TimesheetModel(table).put({"timesheetID": "t1"}, only_if_new=True)

    def test_other_put_errors_propagate(self, table):
        table.put_item.side_effect = _client_error("ThrottlingException", op="PutItem")
        with pytest.raises(ClientError):
            TimesheetModel(table).put({"timesheetID": "t1"}, only_if_new=True)


def test_conditional_delete(table):
    table.delete_item.side_effect = _client_error(op="DeleteItem")
    with pytest.raises(StateConflictError):
        TimesheetModel(table).delete("t1", expected_status="draft")


def test_replace_entries_uses_batch_writer(table):
    table.query.return_value = {"Items": [{"timesheetID": "t1", "entryID": "old"}]}
    batch = table.batch_writer.return_value.__enter__.return_value
    TimeEntryModel(table).replace_for_timesheet("t1", [{"timesheetID": "t1", "entryID": "new"}])
    batch.delete_item.assert_called_once_with(Key={"timesheetID": "t1", "entryID": "old"})
    batch.put_item.assert_called_once_with(Item={"timesheetID": "t1", "entryID": "new"})


def test_mark_read_skips_missing(table):
    table.update_item.side_effect = [None, _client_error()]
    assert NotificationModel(table).mark_read("emp-1", ["n1", "n2"], "2024-06-15T00:00:00Z") == 1
