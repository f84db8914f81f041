"""
Pydantic-модели записи привычки.

Habit - контракт, который визард отдаёт слою хранения.
Condition - закрытое размеченное объединение (поле ``kind``).
"""

from datetime import date
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class HabitKind(str, Enum):
    simple = "simple"
    elastic = "elastic"
    informational = "informational"
    checklist = "checklist"


class FieldKind(str, Enum):
    boolean = "boolean"
    text = "text"
    numeric = "numeric"
    time = "time"
    duration = "duration"
    checklist = "checklist"  # только для checklist-привычек


class NumericKind(str, Enum):
    unsigned_int = "unsigned_int"
    unsigned_decimal = "unsigned_decimal"
    decimal = "decimal"


class ScoringMode(str, Enum):
    manual = "manual"
    automatic = "automatic"


class Direction(str, Enum):
    higher_better = "higher_better"
    lower_better = "lower_better"
    neutral = "neutral"


class Tier(str, Enum):
    mini = "mini"
    midi = "midi"
    maxi = "maxi"


class ComparisonKind(str, Enum):
    greater_than = "greater_than"
    greater_than_or_equal = "greater_than_or_equal"
    less_than = "less_than"
    less_than_or_equal = "less_than_or_equal"
    equals = "equals"
    range = "range"
    before = "before"
    after = "after"


# Field kinds that carry a total order and therefore tiers that can be compared
ORDERED_FIELD_KINDS: frozenset[FieldKind] = frozenset(
    {FieldKind.numeric, FieldKind.time, FieldKind.duration}
)


# ============================================================================
# CONDITIONS
# ============================================================================


class _ConditionBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class EqualsCondition(_ConditionBase):
    kind: Literal["equals"] = "equals"
    value: bool = True


class GreaterThanCondition(_ConditionBase):
    kind: Literal["greater_than"] = "greater_than"
    value: float


class GreaterThanOrEqualCondition(_ConditionBase):
    kind: Literal["greater_than_or_equal"] = "greater_than_or_equal"
    value: float


class LessThanCondition(_ConditionBase):
    kind: Literal["less_than"] = "less_than"
    value: float


class LessThanOrEqualCondition(_ConditionBase):
    kind: Literal["less_than_or_equal"] = "less_than_or_equal"
    value: float


class RangeCondition(_ConditionBase):
    kind: Literal["range"] = "range"
    min: float
    max: float
    min_inclusive: bool = True
    max_inclusive: bool = True

    @model_validator(mode="after")
    def check_bounds(self) -> "RangeCondition":
        if self.min > self.max:
            raise ValueError(
                f"range minimum ({self.min}) must be ≤ maximum ({self.max})"
            )
        return self


class BeforeCondition(_ConditionBase):
    kind: Literal["before"] = "before"
    time: str  # HH:MM


class AfterCondition(_ConditionBase):
    kind: Literal["after"] = "after"
    time: str  # HH:MM


class ChecklistCompletionCondition(_ConditionBase):
    kind: Literal["checklist_completion"] = "checklist_completion"
    required_items: Literal["all"] = "all"


Condition = Annotated[
    Union[
        EqualsCondition,
        GreaterThanCondition,
        GreaterThanOrEqualCondition,
        LessThanCondition,
        LessThanOrEqualCondition,
        RangeCondition,
        BeforeCondition,
        AfterCondition,
        ChecklistCompletionCondition,
    ],
    Field(discriminator="kind"),
]

# Single-threshold numeric comparisons, keyed by their comparison kind
THRESHOLD_CONDITIONS: dict[ComparisonKind, type[_ConditionBase]] = {
    ComparisonKind.greater_than: GreaterThanCondition,
    ComparisonKind.greater_than_or_equal: GreaterThanOrEqualCondition,
    ComparisonKind.less_than: LessThanCondition,
    ComparisonKind.less_than_or_equal: LessThanOrEqualCondition,
}


class Criteria(BaseModel):
    """Условие вместе с человекочитаемым описанием."""

    model_config = ConfigDict(frozen=True)

    description: str
    condition: Condition


# ============================================================================
# HABIT
# ============================================================================


class FieldType(BaseModel):
    """Тип поля в том виде, в каком он хранится (type - строковый литерал)."""

    model_config = ConfigDict(frozen=True)

    type: Literal[
        "boolean",
        "text",
        "unsigned_int",
        "unsigned_decimal",
        "decimal",
        "time",
        "duration",
        "checklist",
    ]
    unit: str | None = None
    min: float | None = None
    max: float | None = None
    multiline: bool | None = None
    checklist_id: str | None = None

    @property
    def field_kind(self) -> FieldKind:
        if self.type in {k.value for k in NumericKind}:
            return FieldKind.numeric
        return FieldKind(self.type)

    @property
    def numeric_kind(self) -> NumericKind | None:
        if self.field_kind == FieldKind.numeric:
            return NumericKind(self.type)
        return None


class Habit(BaseModel):
    """Готовая запись привычки."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    id: str | None = None
    title: str
    description: str = ""
    habit_kind: HabitKind
    field_type: FieldType
    scoring_mode: ScoringMode
    direction: Direction | None = None
    prompt: str = ""
    # hint shown next to the prompt when recording
    help_text: str = ""
    criteria: Criteria | None = None
    mini_criteria: Criteria | None = None
    midi_criteria: Criteria | None = None
    maxi_criteria: Criteria | None = None

    def tier_criteria(self) -> dict[Tier, Criteria | None]:
        return {
            Tier.mini: self.mini_criteria,
            Tier.midi: self.midi_criteria,
            Tier.maxi: self.maxi_criteria,
        }


class Schema(BaseModel):
    """Коллекция привычек, которую загружает и сохраняет слой хранения."""

    version: str = "1.0.0"
    created_date: date = Field(default_factory=date.today)
    habits: list[Habit] = Field(default_factory=list)
