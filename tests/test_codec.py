# Lookup Tables MCP Server
# File: tests/test_codec.py
# Version: v1

"""Tests for JSON row -> CSV line and JSON text formatting."""

import json
from decimal import Decimal

import pytest

from lookup_tables_mcp.codec import csv_header, parse_select, row_to_csv, row_to_json
from lookup_tables_mcp.errors import InvalidArgumentError


def test_row_to_csv_quotes_commas_and_formats_scalars() -> None:
    assert row_to_csv({"a": "x,y", "b": 3, "c": True}) == '"x,y",3,true'


def test_row_to_csv_doubles_inner_quotes() -> None:
    assert row_to_csv({"a": 'say "hi"', "b": "plain"}) == '"say ""hi""",plain'


def test_row_to_csv_keeps_row_order() -> None:
    row = {"z": "last-declared-first", "a": "second"}
    assert row_to_csv(row) == "last-declared-first,second"


def test_row_to_csv_numbers_are_fixed_point() -> None:
    row = {"f": 1.5, "big": 1e20, "neg": -0.25, "d": Decimal("1.50"), "i": -7}
    assert row_to_csv(row) == "1.5,100000000000000000000,-0.25,1.50,-7"


def test_row_to_csv_empty_for_null_and_nested() -> None:
    row = {"n": None, "o": {"x": 1}, "l": [1, 2], "f": False}
    assert row_to_csv(row) == ",,,false"


def test_row_to_csv_no_terminator_for_empty_row() -> None:
    assert row_to_csv({}) == ""


@pytest.mark.parametrize("value", [[1, 2], "text", 3, None])
def test_row_to_csv_rejects_non_objects(value) -> None:
    with pytest.raises(InvalidArgumentError):
        row_to_csv(value)


def test_select_helpers() -> None:
    assert parse_select(" Name , City,, ") == ["Name", "City"]
    assert parse_select(None) == []
    assert csv_header([" Name", "City "]) == "Name,City"


def test_row_to_json_matches_json_dumps_for_plain_values() -> None:
    row = {"Name": "Zoë", "Score": 1.5, "Active": True, "Tags": ["a", None], "Meta": {"n": 1}}
    assert row_to_json(row) == json.dumps(row, ensure_ascii=False)


def test_row_to_json_writes_decimals_as_numbers() -> None:
    row = {"Price": Decimal("0.10"), "Nested": [Decimal("1E+2")], "Bad": Decimal("NaN")}
    assert row_to_json(row) == '{"Price": 0.10, "Nested": [100], "Bad": null}'
    assert json.loads(row_to_json(row), parse_float=Decimal)["Price"] == Decimal("0.10")


@pytest.mark.parametrize("value", [[1, 2], "text", None])
def test_row_to_json_rejects_non_objects(value) -> None:
    with pytest.raises(InvalidArgumentError):
        row_to_json(value)
