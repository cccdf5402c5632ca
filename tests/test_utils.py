"""Tests for response, JSON and pagination helpers."""
import json
from datetime import date
from decimal import Decimal

from workforce.utils import build_response, decode_token, encode_token, json_clean, to_dynamo


def test_json_clean_converts_decimals_and_dates():
    cleaned = json_clean({"a": Decimal("2"), "b": Decimal("2.5"), "c": [date(2024, 6, 15)], "d": {"x"}})
    assert cleaned == {"a": 2, "b": 2.5, "c": ["2024-06-15"], "d": ["x"]}
    assert isinstance(cleaned["a"], int)


def test_to_dynamo_drops_none_and_converts_floats():
    assert to_dynamo({"a": 1.5, "b": None, "c": [0.1], "d": True}) == {"a": Decimal("1.5"), "c": [Decimal("0.1")], "d": True}


def test_token_round_trip():
    lek = {"timesheetID": "t1", "employeeID": "emp-1"}
    assert decode_token(encode_token(lek)) == lek
    assert encode_token(None) is None
    assert decode_token("not-a-token!!") is None


def test_build_response_cors_and_errors():
    event = {"headers": {"origin": "http://localhost:3000/"}}
    ok = build_response(event, data={"hours": Decimal("7.5")})
    assert ok["statusCode"] == 200
    assert ok["headers"]["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert json.loads(ok["body"]) == {"hours": 7.5}

    err = build_response({"headers": {"Origin": "https://evil.example"}}, error="bad", fields={"x": "y"})
    assert err["statusCode"] == 400
    assert err["headers"]["Access-Control-Allow-Origin"] == "null"
    assert json.loads(err["body"]) == {"error": "bad", "fields": {"x": "y"}}
