"""
Value Parsing - pure functions that turn raw user input into typed values.

AICODE-NOTE: pure functions, no I/O. Every failure raises ConditionParseError
whose message names the offending raw string, so handlers can show it inline.

Literal formats:
- numbers: decimal notation ("15", "2.5", "-3")
- time of day: 24-hour "HH:MM"
- duration: one or more "<number><unit>" parts with unit h, m or s
  ("30m", "1h30m", "1h 30m", "90s"); stored conditions use minutes
"""

import math
import re
from dataclasses import dataclass

from habit_wizard.core.errors import ConditionParseError
from habit_wizard.models import NumericKind

_TIME = re.compile(r"(\d{1,2}):(\d{1,2})", re.ASCII)
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)\s*([hms])", re.IGNORECASE | re.ASCII)
_DURATION_FULL = re.compile(r"\s*(?:\d+(?:\.\d+)?\s*[hms]\s*)+", re.IGNORECASE | re.ASCII)

_MINUTES_PER_UNIT: dict[str, float] = {"h": 60.0, "m": 1.0, "s": 1.0 / 60.0}


@dataclass(frozen=True)
class ParsedDuration:
    """Duration literal in canonical form plus its value in minutes."""

    literal: str
    minutes: float


def parse_number(raw: str, numeric_kind: NumericKind = NumericKind.decimal) -> float:
    """
    Parse a decimal number and check it against the numeric subkind.

    Args:
        raw: User input
        numeric_kind: unsigned kinds reject negatives, unsigned_int rejects fractions

    Returns:
        Parsed value as float

    Examples:
        >>> parse_number("15", NumericKind.unsigned_int)
        15.0
        >>> parse_number("-2.5")
        -2.5
    """
    text = (raw or "").strip()
    if not text:
        raise ConditionParseError(raw, "a value is required")
    try:
        value = float(text)
    except ValueError:
        raise ConditionParseError(raw, f"'{raw}' is not a valid number") from None
    if not math.isfinite(value):
        raise ConditionParseError(raw, f"'{raw}' is not a valid number")

    if numeric_kind in (NumericKind.unsigned_int, NumericKind.unsigned_decimal) and value < 0:
        raise ConditionParseError(raw, f"'{raw}' must not be negative")
    if numeric_kind == NumericKind.unsigned_int and not value.is_integer():
        raise ConditionParseError(raw, f"'{raw}' must be a whole number")
    return value


def parse_optional_number(
    raw: str | None, numeric_kind: NumericKind = NumericKind.decimal
) -> float | None:
    """Same as parse_number, but blank input means "not set"."""
    if raw is None or not str(raw).strip():
        return None
    return parse_number(str(raw), numeric_kind)


def parse_time(raw: str) -> str:
    """
    Validate a 24-hour time of day and return it zero-padded.

    Examples:
        >>> parse_time("7:05")
        "07:05"
        >>> parse_time("24:00")
        Traceback (most recent call last):
        ConditionParseError: '24:00' is not a valid time (hour must be 0-23)
    """
    match = _TIME.fullmatch((raw or "").strip())
    if match is None:
        raise ConditionParseError(raw, f"'{raw}' is not a valid time, use HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if not 0 <= hour <= 23:
        raise ConditionParseError(raw, f"'{raw}' is not a valid time (hour must be 0-23)")
    if not 0 <= minute <= 59:
        raise ConditionParseError(
            raw, f"'{raw}' is not a valid time (minute must be 0-59)"
        )
    return f"{hour:02d}:{minute:02d}"


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for a canonical HH:MM string."""
    hour, minute = parse_time(value).split(":")
    return int(hour) * 60 + int(minute)


def parse_duration(raw: str) -> ParsedDuration:
    """
    Parse a duration literal with explicit unit suffixes.

    Examples:
        >>> parse_duration("1h 30m")
        ParsedDuration(literal="1h30m", minutes=90.0)
        >>> parse_duration("45")
        Traceback (most recent call last):
        ConditionParseError: '45' is missing a unit suffix (h, m or s)
    """
    text = (raw or "").strip()
    if not text:
        raise ConditionParseError(raw, "a duration is required")
    if not _DURATION_FULL.fullmatch(text):
        if re.fullmatch(r"\d+(?:\.\d+)?", text):
            raise ConditionParseError(
                raw, f"'{raw}' is missing a unit suffix (h, m or s)"
            )
        raise ConditionParseError(
            raw, f"'{raw}' is not a valid duration, use forms like 30m or 1h30m"
        )

    minutes = 0.0
    literal_parts: list[str] = []
    for amount, unit in _DURATION_PART.findall(text):
        unit = unit.lower()
        minutes += float(amount) * _MINUTES_PER_UNIT[unit]
        literal_parts.append(f"{amount}{unit}")
    return ParsedDuration(literal="".join(literal_parts), minutes=minutes)


def format_duration(minutes: float) -> str:
    """
    Render minutes as a duration literal.

    Examples:
        >>> format_duration(90)
        "1h30m"
        >>> format_duration(0.5)
        "30s"
    """
    total_seconds = int(round(minutes * 60))
    hours, rest = divmod(total_seconds, 3600)
    mins, secs = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if mins:
        parts.append(f"{mins}m")
    if secs:
        parts.append(f"{secs}s")
    return "".join(parts) or "0m"


def format_number(value: float) -> str:
    """
    Render a number the way criteria descriptions and messages show it.

    Examples:
        >>> format_number(15)
        "15.0"
        >>> format_number(12.25)
        "12.25"
    """
    return str(float(value))
