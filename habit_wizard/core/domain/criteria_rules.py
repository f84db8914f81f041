"""
Criteria Domain Rules - condition builder for automatic scoring.

AICODE-NOTE: pure functions, no I/O.
build_condition() returns the typed Condition and its description in one call:
the description embeds the tier label and unit, which the Condition itself
does not carry, so it cannot be derived later.
"""

from dataclasses import dataclass

from habit_wizard.core.domain.parsing import (
    format_duration,
    format_number,
    parse_duration,
    parse_number,
    parse_time,
)
from habit_wizard.core.errors import ConditionParseError
from habit_wizard.models import (
    THRESHOLD_CONDITIONS,
    AfterCondition,
    BeforeCondition,
    ChecklistCompletionCondition,
    ComparisonKind,
    Condition,
    EqualsCondition,
    FieldKind,
    NumericKind,
    RangeCondition,
    Tier,
)

DEFAULT_UNIT = "units"

# Comparison choices offered per field kind (text is absent: never automatic)
COMPARISONS_BY_FIELD_KIND: dict[FieldKind, tuple[ComparisonKind, ...]] = {
    FieldKind.boolean: (ComparisonKind.equals,),
    FieldKind.numeric: (
        ComparisonKind.greater_than,
        ComparisonKind.greater_than_or_equal,
        ComparisonKind.less_than,
        ComparisonKind.less_than_or_equal,
        ComparisonKind.range,
    ),
    FieldKind.time: (ComparisonKind.before, ComparisonKind.after),
    FieldKind.duration: (
        ComparisonKind.greater_than_or_equal,
        ComparisonKind.less_than,
        ComparisonKind.equals,
        ComparisonKind.range,
    ),
}

COMPARISON_SYMBOLS: dict[ComparisonKind, str] = {
    ComparisonKind.greater_than: ">",
    ComparisonKind.greater_than_or_equal: ">=",
    ComparisonKind.less_than: "<",
    ComparisonKind.less_than_or_equal: "<=",
}


@dataclass(frozen=True)
class BuiltCondition:
    """Condition plus the description stored next to it."""

    condition: Condition
    description: str


@dataclass(frozen=True)
class ConditionInputs:
    """Raw inputs that rebuild a condition (used to pre-fill edit forms)."""

    comparison: ComparisonKind
    raw_value: str = ""
    raw_value2: str = ""
    inclusive: bool = True


def supports_automatic_scoring(field_kind: FieldKind) -> bool:
    """
    Check whether a field kind can be scored automatically.

    Examples:
        >>> supports_automatic_scoring(FieldKind.numeric)
        True
        >>> supports_automatic_scoring(FieldKind.text)
        False
    """
    return field_kind in COMPARISONS_BY_FIELD_KIND or field_kind == FieldKind.checklist


def criteria_prefix(tier: Tier | None) -> str:
    """
    Leading words of a criteria description.

    Examples:
        >>> criteria_prefix(Tier.mini)
        "Mini achievement when"
        >>> criteria_prefix(None)
        "Habit achieved when"
    """
    if tier is None:
        return "Habit achieved when"
    return f"{tier.value.capitalize()} achievement when"


def build_condition(
    field_kind: FieldKind,
    comparison: ComparisonKind,
    raw_value: str = "",
    raw_value2: str = "",
    *,
    numeric_kind: NumericKind = NumericKind.decimal,
    unit: str = "",
    tier: Tier | None = None,
    inclusive: bool = True,
) -> BuiltCondition:
    """
    Build a typed condition from raw user input.

    Args:
        field_kind: Kind of the habit's field
        comparison: Chosen comparison
        raw_value: First (or only) raw value
        raw_value2: Upper bound for range comparisons
        numeric_kind: Numeric subkind, used for number parsing
        unit: Unit shown in the description (numeric only)
        tier: Tier label, None for the single criteria slot
        inclusive: Whether range bounds are inclusive

    Returns:
        BuiltCondition with condition and description

    Raises:
        ConditionParseError: a raw value does not parse
        ValueError: the comparison is not offered for this field kind

    Examples:
        >>> build_condition(FieldKind.numeric, ComparisonKind.greater_than_or_equal,
        ...                 "15", unit="minutes", tier=Tier.mini).description
        "Mini achievement when value >= 15.0 minutes"
    """
    allowed = COMPARISONS_BY_FIELD_KIND.get(field_kind)
    if allowed is None:
        raise ValueError(f"automatic criteria are not offered for {field_kind.value} fields")
    if comparison not in allowed:
        raise ValueError(
            f"comparison '{comparison.value}' is not offered for {field_kind.value} fields"
        )

    prefix = criteria_prefix(tier)

    if field_kind == FieldKind.boolean:
        return BuiltCondition(
            condition=EqualsCondition(value=True),
            description=f"{prefix} answer is yes",
        )
    if field_kind == FieldKind.numeric:
        return _build_numeric(
            comparison, raw_value, raw_value2, numeric_kind, unit, prefix, inclusive
        )
    if field_kind == FieldKind.time:
        return _build_time(comparison, raw_value, prefix)
    return _build_duration(comparison, raw_value, raw_value2, prefix, inclusive)


def build_checklist_condition() -> BuiltCondition:
    """Automatic criteria of a checklist habit: every item checked."""
    return BuiltCondition(
        condition=ChecklistCompletionCondition(),
        description="All checklist items completed",
    )


def _inclusive_text(inclusive: bool) -> str:
    return "inclusive" if inclusive else "exclusive"


def _build_numeric(
    comparison: ComparisonKind,
    raw_value: str,
    raw_value2: str,
    numeric_kind: NumericKind,
    unit: str,
    prefix: str,
    inclusive: bool,
) -> BuiltCondition:
    unit = unit.strip() or DEFAULT_UNIT
    low = parse_number(raw_value, numeric_kind)

    if comparison == ComparisonKind.range:
        high = parse_number(raw_value2, numeric_kind)
        if low > high:
            raise ConditionParseError(
                raw_value2,
                f"range minimum ({format_number(low)}) must be ≤ "
                f"maximum ({format_number(high)})",
            )
        return BuiltCondition(
            condition=RangeCondition(
                min=low, max=high, min_inclusive=inclusive, max_inclusive=inclusive
            ),
            description=(
                f"{prefix} value is within {format_number(low)} to "
                f"{format_number(high)} {unit} ({_inclusive_text(inclusive)})"
            ),
        )

    condition_cls = THRESHOLD_CONDITIONS[comparison]
    return BuiltCondition(
        condition=condition_cls(value=low),
        description=(
            f"{prefix} value {COMPARISON_SYMBOLS[comparison]} {format_number(low)} {unit}"
        ),
    )


def _build_time(comparison: ComparisonKind, raw_value: str, prefix: str) -> BuiltCondition:
    value = parse_time(raw_value)
    if comparison == ComparisonKind.before:
        condition: Condition = BeforeCondition(time=value)
    else:
        condition = AfterCondition(time=value)
    return BuiltCondition(
        condition=condition,
        description=f"{prefix} time is {comparison.value} {value}",
    )


def _build_duration(
    comparison: ComparisonKind,
    raw_value: str,
    raw_value2: str,
    prefix: str,
    inclusive: bool,
) -> BuiltCondition:
    first = parse_duration(raw_value)

    if comparison == ComparisonKind.range:
        second = parse_duration(raw_value2)
        if first.minutes > second.minutes:
            raise ConditionParseError(
                raw_value2,
                f"range minimum ({first.literal}) must be ≤ maximum ({second.literal})",
            )
        return BuiltCondition(
            condition=RangeCondition(
                min=first.minutes,
                max=second.minutes,
                min_inclusive=inclusive,
                max_inclusive=inclusive,
            ),
            description=(
                f"{prefix} duration is between {first.literal} and {second.literal} "
                f"({_inclusive_text(inclusive)})"
            ),
        )

    if comparison == ComparisonKind.equals:
        # exact duration: a closed range of width zero
        return BuiltCondition(
            condition=RangeCondition(min=first.minutes, max=first.minutes),
            description=f"{prefix} duration equals {first.literal}",
        )

    condition_cls = THRESHOLD_CONDITIONS[comparison]
    return BuiltCondition(
        condition=condition_cls(value=first.minutes),
        description=f"{prefix} duration {COMPARISON_SYMBOLS[comparison]} {first.literal}",
    )


def condition_to_inputs(condition: Condition, field_kind: FieldKind) -> ConditionInputs:
    """
    Reverse-map a stored condition to the raw inputs that would rebuild it.

    Examples:
        >>> condition_to_inputs(GreaterThanOrEqualCondition(value=30), FieldKind.duration)
        ConditionInputs(comparison=ComparisonKind.greater_than_or_equal, raw_value="30m")
    """
    if isinstance(condition, EqualsCondition):
        return ConditionInputs(ComparisonKind.equals, "true" if condition.value else "false")
    if isinstance(condition, BeforeCondition):
        return ConditionInputs(ComparisonKind.before, condition.time)
    if isinstance(condition, AfterCondition):
        return ConditionInputs(ComparisonKind.after, condition.time)

    render = format_duration if field_kind == FieldKind.duration else _plain_number

    if isinstance(condition, RangeCondition):
        if (
            field_kind == FieldKind.duration
            and condition.min == condition.max
            and condition.min_inclusive
            and condition.max_inclusive
        ):
            return ConditionInputs(ComparisonKind.equals, render(condition.min))
        return ConditionInputs(
            ComparisonKind.range,
            render(condition.min),
            render(condition.max),
            inclusive=condition.min_inclusive and condition.max_inclusive,
        )

    for comparison, condition_cls in THRESHOLD_CONDITIONS.items():
        if isinstance(condition, condition_cls):
            return ConditionInputs(comparison, render(condition.value))

    raise ValueError(f"condition '{condition.kind}' has no raw input form")


def _plain_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)
