"""Tests for raw value parsing (numbers, times, durations)."""

import pytest

from habit_wizard.core.domain.parsing import (
    format_duration,
    format_number,
    parse_duration,
    parse_number,
    parse_optional_number,
    parse_time,
    time_to_minutes,
)
from habit_wizard.core.errors import ConditionParseError
from habit_wizard.models import NumericKind


def test_parse_number_accepts_decimals() -> None:
    assert parse_number("15") == 15.0
    assert parse_number(" 2.5 ") == 2.5
    assert parse_number("-3", NumericKind.decimal) == -3.0


@pytest.mark.parametrize(
    "raw,numeric_kind,fragment",
    [
        ("abc", NumericKind.decimal, "not a valid number"),
        ("", NumericKind.decimal, "required"),
        ("nan", NumericKind.decimal, "not a valid number"),
        ("-1", NumericKind.unsigned_int, "must not be negative"),
        ("-0.5", NumericKind.unsigned_decimal, "must not be negative"),
        ("2.5", NumericKind.unsigned_int, "whole number"),
    ],
)
def test_parse_number_rejects(raw, numeric_kind, fragment) -> None:
    """Errors should keep the raw input for inline display."""
    with pytest.raises(ConditionParseError, match=fragment) as exc_info:
        parse_number(raw, numeric_kind)
    assert exc_info.value.raw == raw


def test_parse_optional_number_blank_is_none() -> None:
    assert parse_optional_number("") is None
    assert parse_optional_number(None) is None
    assert parse_optional_number("4", NumericKind.unsigned_int) == 4.0


def test_parse_time_pads_hours() -> None:
    assert parse_time("7:05") == "07:05"
    assert parse_time("23:59") == "23:59"
    assert parse_time("00:00") == "00:00"


@pytest.mark.parametrize(
    "raw", ["24:00", "12:60", "1200", "12:00:00", "ab:cd", "", "-1:30", "²:00", "①:30", "１２:00"]
)
def test_parse_time_rejects(raw) -> None:
    with pytest.raises(ConditionParseError):
        parse_time(raw)


def test_time_to_minutes() -> None:
    assert time_to_minutes("07:30") == 450
    assert time_to_minutes("00:00") == 0


@pytest.mark.parametrize(
    "raw,literal,minutes",
    [
        ("30m", "30m", 30.0),
        ("1h30m", "1h30m", 90.0),
        ("1h 30m", "1h30m", 90.0),
        ("2H", "2h", 120.0),
        ("90s", "90s", 1.5),
    ],
)
def test_parse_duration(raw, literal, minutes) -> None:
    parsed = parse_duration(raw)
    assert parsed.literal == literal
    assert parsed.minutes == pytest.approx(minutes)


def test_parse_duration_requires_unit_suffix() -> None:
    """A bare number is ambiguous and must be rejected."""
    with pytest.raises(ConditionParseError, match="missing a unit suffix") as exc_info:
        parse_duration("45")
    assert "'45'" in str(exc_info.value)


@pytest.mark.parametrize("raw", ["", "abc", "30 minutes", "m30"])
def test_parse_duration_rejects_garbage(raw) -> None:
    with pytest.raises(ConditionParseError):
        parse_duration(raw)


def test_format_duration() -> None:
    assert format_duration(90) == "1h30m"
    assert format_duration(60) == "1h"
    assert format_duration(0.5) == "30s"
    assert format_duration(0) == "0m"


def test_format_number_always_shows_decimal() -> None:
    assert format_number(15) == "15.0"
    assert format_number(12.25) == "12.25"
