"""
Tier Domain Rules - cross-tier ordering checks for elastic habits.

AICODE-NOTE: pure functions, no I/O.
Tiers go from easiest (mini) to hardest (maxi). Which way "harder" points
depends on the comparison: ">= 30" gets harder as the number grows,
"before 07:00" gets harder as the clock time shrinks. Only adjacent pairs are
checked (mini/midi, then midi/maxi), and each violated pair is reported on its
own line so the user can fix them one by one.
"""

from dataclasses import dataclass, field

from habit_wizard.core.domain.parsing import format_duration, format_number, time_to_minutes
from habit_wizard.models import (
    ORDERED_FIELD_KINDS,
    AfterCondition,
    BeforeCondition,
    Condition,
    FieldKind,
    GreaterThanCondition,
    GreaterThanOrEqualCondition,
    HabitKind,
    LessThanCondition,
    LessThanOrEqualCondition,
    RangeCondition,
    ScoringMode,
    Tier,
)

TIER_ORDER: tuple[Tier, ...] = (Tier.mini, Tier.midi, Tier.maxi)


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of the cross-tier check."""

    ok: bool
    violations: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class _TierValue:
    value: float
    display: str
    ascending: bool


def requires_tier_validation(
    habit_kind: HabitKind, scoring_mode: ScoringMode | None, field_kind: FieldKind | None
) -> bool:
    """
    Check if a habit's tiers must be ordered.

    Examples:
        >>> requires_tier_validation(HabitKind.elastic, ScoringMode.automatic, FieldKind.numeric)
        True
        >>> requires_tier_validation(HabitKind.elastic, ScoringMode.automatic, FieldKind.text)
        False
    """
    return (
        habit_kind == HabitKind.elastic
        and scoring_mode == ScoringMode.automatic
        and field_kind in ORDERED_FIELD_KINDS
    )


def validate_tier_order(
    mini: Condition | None,
    midi: Condition | None,
    maxi: Condition | None,
    field_kind: FieldKind,
) -> ValidationResult:
    """
    Check that mini, midi and maxi grow in difficulty.

    Args:
        mini: Mini tier condition
        midi: Midi tier condition
        maxi: Maxi tier condition
        field_kind: Kind of the habit's field

    Returns:
        ValidationResult, ok when every adjacent pair is ordered

    Examples:
        >>> validate_tier_order(gte(45), gte(30), gte(60), FieldKind.numeric).violations
        ("mini criteria value (45.0) must be ≤ midi criteria value (30.0)",)
    """
    if field_kind not in ORDERED_FIELD_KINDS:
        return ValidationResult(ok=True)

    conditions = dict(zip(TIER_ORDER, (mini, midi, maxi)))
    if any(c is None for c in conditions.values()):
        return ValidationResult(ok=True)

    kinds = {c.kind for c in conditions.values()}
    if len(kinds) > 1:
        listed = ", ".join(f"{tier.value}: {c.kind}" for tier, c in conditions.items())
        return ValidationResult(
            ok=False,
            violations=(f"all tiers should use the same comparison ({listed})",),
        )

    values = {
        tier: _orderable_value(condition, field_kind)
        for tier, condition in conditions.items()
    }

    violations: list[str] = []
    for lower, upper in zip(TIER_ORDER, TIER_ORDER[1:]):
        a, b = values[lower], values[upper]
        if a.ascending and a.value > b.value:
            violations.append(
                f"{lower.value} criteria value ({a.display}) must be ≤ "
                f"{upper.value} criteria value ({b.display})"
            )
        elif not a.ascending and a.value < b.value:
            violations.append(
                f"{lower.value} criteria value ({a.display}) must be ≥ "
                f"{upper.value} criteria value ({b.display})"
            )

    return ValidationResult(ok=not violations, violations=tuple(violations))


def _orderable_value(condition: Condition, field_kind: FieldKind) -> _TierValue:
    """Single representative value of a tier, plus which way is harder."""
    if isinstance(condition, (BeforeCondition, AfterCondition)):
        return _TierValue(
            value=time_to_minutes(condition.time),
            display=condition.time,
            ascending=isinstance(condition, AfterCondition),
        )

    render = format_duration if field_kind == FieldKind.duration else format_number

    if isinstance(condition, RangeCondition):
        return _TierValue(condition.min, render(condition.min), ascending=True)
    if isinstance(condition, (GreaterThanCondition, GreaterThanOrEqualCondition)):
        return _TierValue(condition.value, render(condition.value), ascending=True)
    if isinstance(condition, (LessThanCondition, LessThanOrEqualCondition)):
        return _TierValue(condition.value, render(condition.value), ascending=False)

    raise ValueError(f"condition '{condition.kind}' has no orderable value")
