"""
Данные, собранные на каждом шаге визарда.

Один вариант на вид шага; WizardState хранит их по StepKind.
"""

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from habit_wizard.models import (
    ComparisonKind,
    Condition,
    Direction,
    FieldKind,
    HabitKind,
    NumericKind,
    ScoringMode,
    Tier,
)

MAX_TITLE_LENGTH = 100


class _StepDataBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class BasicInfoData(_StepDataBase):
    title: str = Field(max_length=MAX_TITLE_LENGTH)
    description: str = ""
    habit_kind: HabitKind
    prompt: str = ""
    help_text: str = ""

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title is required")
        return v


class FieldConfigData(_StepDataBase):
    field_kind: FieldKind
    numeric_kind: NumericKind | None = None
    unit: str = ""
    min: float | None = None
    max: float | None = None
    multiline: bool = False
    direction: Direction | None = None

    @model_validator(mode="after")
    def check_numeric(self) -> "FieldConfigData":
        if self.field_kind == FieldKind.numeric and self.numeric_kind is None:
            raise ValueError("numeric fields need a numeric kind")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min ({self.min}) must be ≤ max ({self.max})")
        return self


class ChecklistData(_StepDataBase):
    checklist_id: str = Field(min_length=1)


class ScoringData(_StepDataBase):
    mode: ScoringMode
    direction: Direction | None = None


class CriteriaData(_StepDataBase):
    """Criteria of one tier (tier is None for the single slot of simple habits)."""

    tier: Tier | None = None
    comparison: ComparisonKind
    raw_value: str = ""
    raw_value2: str = ""
    inclusive: bool = True
    description: str
    # false: description was generated and is rebuilt on every submit
    custom_description: bool = False
    condition: Condition


class TierValidationData(_StepDataBase):
    ok: bool
    violations: tuple[str, ...] = ()
    acknowledged: bool = False


class ConfirmationData(_StepDataBase):
    confirmed: bool


StepData = Union[
    BasicInfoData,
    FieldConfigData,
    ChecklistData,
    ScoringData,
    CriteriaData,
    TierValidationData,
    ConfirmationData,
]
