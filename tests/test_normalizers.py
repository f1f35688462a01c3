"""Pruebas de los conversores de campos (fechas, versiones, categorías, espacios)."""

from datetime import date, datetime, timezone

import pytest

from arxiv_harvester.errors import ParseError
from arxiv_harvester.services.normalizers import (
    normalize_space,
    parse_categories,
    parse_datestamp,
    parse_optional_int,
    parse_response_date,
    parse_submission_time,
    parse_version_number,
)


# ── Whitespace ───────────────────────────────────────────────────────


def test_normalize_space_collapses_line_breaks():
    assert normalize_space("  Quantum   curl\nforces \r\n\t ") == "Quantum curl forces"


def test_normalize_space_none():
    assert normalize_space(None) is None


def test_normalize_space_blank():
    assert normalize_space(" \n ") == ""


# ── Datestamp ────────────────────────────────────────────────────────


def test_parse_datestamp():
    assert parse_datestamp("2015-01-06") == date(2015, 1, 6)


@pytest.mark.parametrize("value", ["2015-01-", "2015-1-6", "2015-01-06T00:00:00Z", "", None, "2015-02-30"])
def test_parse_datestamp_bad_format(value):
    with pytest.raises(ParseError):
        parse_datestamp(value)


# ── Version number ───────────────────────────────────────────────────


@pytest.mark.parametrize("value,expected", [("v1", 1), ("v3", 3), ("v12", 12), ("v007", 7)])
def test_parse_version_number(value, expected):
    assert parse_version_number(value) == expected


@pytest.mark.parametrize("value", [None, "", "3", "v", "vFaaaail", "V3", "v3a", "v-1", "v0", "v²"])
def test_parse_version_number_invalid(value):
    with pytest.raises(ParseError):
        parse_version_number(value)


# ── Submission time ──────────────────────────────────────────────────


def test_parse_submission_time():
    result = parse_submission_time("Fri, 8 Feb 2013 21:00:01 GMT")
    assert result == datetime(2013, 2, 8, 21, 0, 1, tzinfo=timezone.utc)
    assert result.utcoffset().total_seconds() == 0


def test_parse_submission_time_with_offset_is_converted_to_utc():
    result = parse_submission_time("Fri, 8 Feb 2013 23:00:01 +0200")
    assert result == datetime(2013, 2, 8, 21, 0, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value",
    [
        "Fri, 8 Feb 2013 21:00:01 GM",
        "2013-02-08T21:00:01Z",
        "Fri, 32 Feb 2013 21:00:01 GMT",
        "",
        None,
    ],
)
def test_parse_submission_time_bad_format(value):
    with pytest.raises(ParseError):
        parse_submission_time(value)


def test_parse_submission_time_rejects_wrong_weekday():
    # El 8 de febrero de 2013 fue viernes
    with pytest.raises(ParseError):
        parse_submission_time("Mon, 8 Feb 2013 21:00:01 GMT")


def test_parse_submission_time_weekday_is_checked_in_original_zone():
    # Sábado 9 en +0200 sigue siendo viernes 8 en UTC
    result = parse_submission_time("Sat, 9 Feb 2013 01:00:01 +0200")
    assert result == datetime(2013, 2, 8, 23, 0, 1, tzinfo=timezone.utc)


def test_parse_submission_time_without_weekday():
    result = parse_submission_time("8 Feb 2013 21:00:01 GMT")
    assert result == datetime(2013, 2, 8, 21, 0, 1, tzinfo=timezone.utc)


# ── Response date ────────────────────────────────────────────────────


def test_parse_response_date():
    assert parse_response_date("2015-01-06T13:51:59Z") == datetime(
        2015, 1, 6, 13, 51, 59, tzinfo=timezone.utc
    )


def test_parse_response_date_converts_to_utc():
    assert parse_response_date("2015-01-06T15:51:59+02:00") == datetime(
        2015, 1, 6, 13, 51, 59, tzinfo=timezone.utc
    )


def test_parse_response_date_bad_format():
    with pytest.raises(ParseError):
        parse_response_date("2015-01-T13:51:59Z")


# ── Categories ───────────────────────────────────────────────────────


def test_parse_categories():
    value = "quant-ph cond-mat.other hep-th math-ph math.CA math.MP nlin.SI"
    assert parse_categories(value) == [
        "quant-ph",
        "cond-mat.other",
        "hep-th",
        "math-ph",
        "math.CA",
        "math.MP",
        "nlin.SI",
    ]


def test_parse_categories_two():
    assert parse_categories("quant-ph cond-mat.other") == ["quant-ph", "cond-mat.other"]


@pytest.mark.parametrize("value", ["", "  ", None])
def test_parse_categories_empty(value):
    assert parse_categories(value) == []


# ── Optional integers ────────────────────────────────────────────────


def test_parse_optional_int():
    assert parse_optional_int("46") == 46
    assert parse_optional_int("24247247") == 24247247


@pytest.mark.parametrize("value", [None, "s", ""])
def test_parse_optional_int_bad_format_returns_none(value):
    assert parse_optional_int(value) is None
