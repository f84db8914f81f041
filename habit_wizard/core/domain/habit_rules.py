"""
Habit Domain Rules - strict checks applied before a schema is saved.

AICODE-NOTE: pure functions, no I/O.
Unlike the wizard, where tier ordering is only a warning, these rules are
hard: a schema with any problem is not written.
"""

import re

from habit_wizard.core.domain.criteria_rules import supports_automatic_scoring
from habit_wizard.core.domain.parsing import parse_time
from habit_wizard.core.domain.tier_rules import requires_tier_validation, validate_tier_order
from habit_wizard.core.errors import ConditionParseError
from habit_wizard.models import (
    AfterCondition,
    BeforeCondition,
    FieldKind,
    Habit,
    HabitKind,
    Schema,
    ScoringMode,
)

MAX_TITLE_LENGTH = 100

_INVALID_ID_CHARS = re.compile(r"[^a-z0-9_]")
_REPEATED_UNDERSCORES = re.compile(r"_+")
_VALID_ID = re.compile(r"^[a-z0-9_]+$")

# field types each habit kind may use
ALLOWED_FIELD_KINDS: dict[HabitKind, frozenset[FieldKind]] = {
    HabitKind.simple: frozenset({FieldKind.boolean}),
    HabitKind.elastic: frozenset(
        {FieldKind.text, FieldKind.numeric, FieldKind.time, FieldKind.duration}
    ),
    HabitKind.informational: frozenset(
        {
            FieldKind.boolean,
            FieldKind.text,
            FieldKind.numeric,
            FieldKind.time,
            FieldKind.duration,
        }
    ),
    HabitKind.checklist: frozenset({FieldKind.checklist}),
}


def slugify_title(title: str) -> str:
    """
    Turn a title into an identifier.

    Examples:
        >>> slugify_title("Morning Run (5k)!")
        "morning_run_5k"
        >>> slugify_title("!!!")
        "unnamed_habit"
    """
    slug = _INVALID_ID_CHARS.sub("_", title.lower())
    slug = _REPEATED_UNDERSCORES.sub("_", slug).strip("_")
    return slug or "unnamed_habit"


def generate_id_from_title(title: str, taken: set[str] | frozenset[str] = frozenset()) -> str:
    """
    Slug of the title, suffixed with _2, _3... while it collides with `taken`.

    Examples:
        >>> generate_id_from_title("Read", {"read"})
        "read_2"
    """
    base = slugify_title(title)
    candidate = base
    n = 2
    while candidate in taken:
        candidate = f"{base}_{n}"
        n += 1
    return candidate


def is_valid_id(habit_id: str | None) -> bool:
    return bool(habit_id) and bool(_VALID_ID.match(habit_id))


def validate_habit(habit: Habit) -> list[str]:
    """
    Strict problems of a single habit.

    Args:
        habit: Habit to check

    Returns:
        Problem messages, empty when the habit is valid
    """
    name = habit.id or habit.title or "<untitled>"
    problems: list[str] = []

    def problem(message: str) -> None:
        problems.append(f"habit '{name}': {message}")

    if not habit.title.strip():
        problem("title is required")
    elif len(habit.title) > MAX_TITLE_LENGTH:
        problem(f"title must be at most {MAX_TITLE_LENGTH} characters")
    if habit.id is not None and not is_valid_id(habit.id):
        problem(f"id '{habit.id}' may only contain a-z, 0-9 and _")

    field_type = habit.field_type
    field_kind = field_type.field_kind
    if field_kind not in ALLOWED_FIELD_KINDS[habit.habit_kind]:
        problem(f"{habit.habit_kind.value} habits cannot use {field_type.type} fields")
    if field_type.min is not None and field_type.max is not None:
        if field_type.min > field_type.max:
            problem(f"field min ({field_type.min}) must be ≤ max ({field_type.max})")
    if field_kind == FieldKind.checklist and not field_type.checklist_id:
        problem("checklist habits need a checklist_id")

    if habit.scoring_mode == ScoringMode.automatic:
        if habit.habit_kind == HabitKind.informational:
            problem("informational habits are always scored manually")
        elif not supports_automatic_scoring(field_kind):
            problem(f"{field_type.type} fields cannot be scored automatically")
        elif habit.habit_kind == HabitKind.elastic:
            missing = [t.value for t, c in habit.tier_criteria().items() if c is None]
            if missing:
                problem(f"automatic elastic habits need {', '.join(missing)} criteria")
        elif habit.criteria is None:
            problem("automatic scoring needs criteria")

    for criteria in (habit.criteria, *habit.tier_criteria().values()):
        if criteria is None:
            continue
        condition = criteria.condition
        if isinstance(condition, (BeforeCondition, AfterCondition)):
            try:
                parse_time(condition.time)
            except ConditionParseError as e:
                problem(str(e))

    if requires_tier_validation(habit.habit_kind, habit.scoring_mode, field_kind):
        tiers = habit.tier_criteria()
        try:
            result = validate_tier_order(
                *(c.condition if c else None for c in tiers.values()), field_kind=field_kind
            )
        except (ConditionParseError, ValueError) as e:
            # malformed tier values were reported above
            problem(f"tier order cannot be checked: {e}")
        else:
            for violation in result.violations:
                problem(violation)

    return problems


def validate_schema(schema: Schema) -> list[str]:
    """Strict problems of every habit plus identifier uniqueness."""
    problems: list[str] = []
    seen: set[str] = set()
    for habit in schema.habits:
        problems.extend(validate_habit(habit))
        if habit.id is None:
            problems.append(f"habit '{habit.title}': id is required")
        elif habit.id in seen:
            problems.append(f"duplicate habit ID: {habit.id}")
        else:
            seen.add(habit.id)
    return problems
