"""
Наборы вариантов для select-полей визарда.

AICODE-NOTE: набор вариантов - единственное место, где решается,
что пользователю вообще предлагают. Например, текстовому полю не
предлагается автоматическая оценка, а elastic-привычке - boolean.
"""

from habit_wizard.core.domain.criteria_rules import (
    COMPARISONS_BY_FIELD_KIND,
    supports_automatic_scoring,
)
from habit_wizard.models import (
    ComparisonKind,
    Direction,
    FieldKind,
    HabitKind,
    NumericKind,
    ScoringMode,
)
from habit_wizard.wizard.prompts import PromptOption

HABIT_KIND_LABELS: dict[HabitKind, tuple[str, str]] = {
    HabitKind.simple: ("Simple", "Pass/fail habit"),
    HabitKind.elastic: ("Elastic", "Mini, midi and maxi achievement levels"),
    HabitKind.informational: ("Informational", "Data collection without scoring"),
    HabitKind.checklist: ("Checklist", "Complete items from a checklist"),
}

FIELD_KIND_LABELS: dict[FieldKind, tuple[str, str]] = {
    FieldKind.boolean: ("Yes/No", "Simple completion tracking"),
    FieldKind.text: ("Text", "Free-form notes"),
    FieldKind.numeric: ("Numeric", "Counts, amounts, measurements"),
    FieldKind.time: ("Time", "Time of day (HH:MM)"),
    FieldKind.duration: ("Duration", "Length of time (30m, 1h30m)"),
}

NUMERIC_KIND_LABELS: dict[NumericKind, tuple[str, str]] = {
    NumericKind.unsigned_int: ("Whole numbers", "0, 1, 2, ..."),
    NumericKind.unsigned_decimal: ("Decimal numbers", "0.5, 1.25, ..."),
    NumericKind.decimal: ("Any number", "Negative values allowed"),
}

DIRECTION_LABELS: dict[Direction, tuple[str, str]] = {
    Direction.higher_better: ("Higher is better", "More is an improvement"),
    Direction.lower_better: ("Lower is better", "Less is an improvement"),
    Direction.neutral: ("Neutral", "No preferred direction"),
}

COMPARISON_LABELS: dict[tuple[FieldKind, ComparisonKind], str] = {
    (FieldKind.numeric, ComparisonKind.greater_than): "Greater than (>)",
    (FieldKind.numeric, ComparisonKind.greater_than_or_equal): "At least (>=)",
    (FieldKind.numeric, ComparisonKind.less_than): "Less than (<)",
    (FieldKind.numeric, ComparisonKind.less_than_or_equal): "At most (<=)",
    (FieldKind.numeric, ComparisonKind.range): "Within a range",
    (FieldKind.time, ComparisonKind.before): "Before a time",
    (FieldKind.time, ComparisonKind.after): "After a time",
    (FieldKind.duration, ComparisonKind.greater_than_or_equal): "At least (>=)",
    (FieldKind.duration, ComparisonKind.less_than): "Less than (<)",
    (FieldKind.duration, ComparisonKind.equals): "Exactly",
    (FieldKind.duration, ComparisonKind.range): "Within a range",
}

# choices of the tier validation step
PROCEED = "proceed"
FIX = "fix"
CANCEL = "cancel"


def _from_labels(labels: dict, keys) -> tuple[PromptOption, ...]:
    return tuple(
        PromptOption(value=k.value, label=labels[k][0], description=labels[k][1])
        for k in keys
    )


def habit_kind_options() -> tuple[PromptOption, ...]:
    return _from_labels(HABIT_KIND_LABELS, HabitKind)


def field_kind_options(habit_kind: HabitKind) -> tuple[PromptOption, ...]:
    """Field kinds offered for a habit kind (boolean makes no sense for tiers)."""
    kinds = [
        FieldKind.boolean,
        FieldKind.text,
        FieldKind.numeric,
        FieldKind.time,
        FieldKind.duration,
    ]
    if habit_kind == HabitKind.elastic:
        kinds.remove(FieldKind.boolean)
    return _from_labels(FIELD_KIND_LABELS, kinds)


def numeric_kind_options() -> tuple[PromptOption, ...]:
    return _from_labels(NUMERIC_KIND_LABELS, NumericKind)


def direction_options() -> tuple[PromptOption, ...]:
    return _from_labels(DIRECTION_LABELS, Direction)


def scoring_options(field_kind: FieldKind | None) -> tuple[PromptOption, ...]:
    """Manual is always offered; automatic only where a condition can be built."""
    options = [
        PromptOption(
            value=ScoringMode.manual.value,
            label="Manual",
            description="You decide each time whether the goal was met",
        )
    ]
    if field_kind is None or supports_automatic_scoring(field_kind):
        options.append(
            PromptOption(
                value=ScoringMode.automatic.value,
                label="Automatic",
                description="Achievement is checked against criteria",
            )
        )
    return tuple(options)


def comparison_options(field_kind: FieldKind) -> tuple[PromptOption, ...]:
    return tuple(
        PromptOption(value=c.value, label=COMPARISON_LABELS[(field_kind, c)])
        for c in COMPARISONS_BY_FIELD_KIND.get(field_kind, ())
        if (field_kind, c) in COMPARISON_LABELS
    )


def checklist_options(checklist_ids: list[str]) -> tuple[PromptOption, ...]:
    return tuple(PromptOption(value=cid, label=cid) for cid in checklist_ids)


def tier_validation_options(allow_proceed: bool) -> tuple[PromptOption, ...]:
    options = []
    if allow_proceed:
        options.append(
            PromptOption(PROCEED, "Proceed anyway", "Keep the criteria as entered")
        )
    options.append(PromptOption(FIX, "Go back and fix", "Return to the mini criteria"))
    options.append(PromptOption(CANCEL, "Cancel", "Discard this habit"))
    return tuple(options)
