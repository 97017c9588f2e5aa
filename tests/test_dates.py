"""
Unit tests for date conversion.
"""
from datetime import date, datetime

import pytest

from ledger.dates import format_ofx_date, parse_date, split_iso_date


@pytest.mark.parametrize("raw,expected", [
    ("01/03/2024", "2024-03-01"),
    ("1/3/2024", "2024-03-01"),
    (" 15/12/1999 ", "1999-12-15"),
    ("31/02/2024", "2024-02-31"),
])
def test_parse_date_valid(raw, expected):
    assert parse_date(raw) == expected


@pytest.mark.parametrize("raw", [
    "",
    None,
    "32/13/2024",
    "00/01/2024",
    "10/00/2024",
    "10/13/2024",
    "01/03/24",
    "01/03/02024",
    "aa/03/2024",
    "01-03-2024",
    "01/03/2024/1",
    "2024/03/01",
])
def test_parse_date_invalid(raw):
    assert parse_date(raw) is None


def test_format_ofx_date():
    assert format_ofx_date("20240115") == "2024-01-15"
    assert format_ofx_date("20240115120000[+1:CET]") == "2024-01-15"
    # No calendar validation
    assert format_ofx_date("20241399") == "2024-13-99"


@pytest.mark.parametrize("raw", ["", None, "2024011", "2024-01-15", "abcdefgh"])
def test_format_ofx_date_invalid(raw):
    assert format_ofx_date(raw) is None


@pytest.mark.parametrize("value,expected", [
    ("2024-02-31", (2024, 2, 31)),
    ("2024-01-05T10:00:00", (2024, 1, 5)),
    ("2024-01-05 00:00:00", (2024, 1, 5)),
    (date(2024, 4, 30), (2024, 4, 30)),
    (datetime(2023, 12, 1, 9, 0), (2023, 12, 1)),
])
def test_split_iso_date(value, expected):
    assert split_iso_date(value) == expected


@pytest.mark.parametrize("value", [None, "", "2024-13-01", "2024-01-32", "2024-1-5", "05/01/2024", "2024-01-051"])
def test_split_iso_date_invalid(value):
    assert split_iso_date(value) is None
