"""
Шаг настройки поля: тип поля и его параметры.

Вопросы зависят от выбранного типа:
- numeric: подтип, единица измерения, необязательные границы
- text: многострочный ввод или нет
- time, duration, boolean: без дополнительных вопросов
У информационных привычек здесь же выбирается direction.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from habit_wizard.config import config
from habit_wizard.core.domain.parsing import parse_optional_number
from habit_wizard.core.errors import ConditionParseError, ValidationError
from habit_wizard.models import Direction, FieldKind, HabitKind, NumericKind
from habit_wizard.wizard.handlers.base import (
    StepHandler,
    StepResult,
    as_bool,
    as_text,
    pick,
)
from habit_wizard.wizard.options import (
    direction_options,
    field_kind_options,
    numeric_kind_options,
)
from habit_wizard.wizard.prompts import PromptField, PromptFieldKind
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import StepKind
from habit_wizard.wizard.step_data import FieldConfigData


# informational habits count "times" unless told otherwise
INFORMATIONAL_DEFAULT_UNIT = "times"


def _number_text(value: float | None) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


class FieldConfigHandler(StepHandler):
    step = StepKind.field_config

    def description(self, state: WizardState) -> str:
        return "Choose what kind of value is recorded for this habit."

    def _default_unit(self, state: WizardState) -> str:
        if state.habit_kind == HabitKind.informational:
            return INFORMATIONAL_DEFAULT_UNIT
        return config.DEFAULT_UNIT

    def fields(self, state: WizardState, draft: dict[str, Any]) -> tuple[PromptField, ...]:
        data = state.get_typed(self.step, FieldConfigData)
        options = field_kind_options(state.habit_kind)
        current_kind = data.field_kind.value if data else options[0].value
        numeric = ("numeric",)

        fields = [
            PromptField(
                key="field_kind",
                kind=PromptFieldKind.select,
                label="Field type",
                options=options,
                default=draft.get("field_kind", current_kind),
                required=True,
            ),
            PromptField(
                key="numeric_kind",
                kind=PromptFieldKind.select,
                label="Number format",
                options=numeric_kind_options(),
                default=draft.get(
                    "numeric_kind",
                    data.numeric_kind.value
                    if data and data.numeric_kind
                    else NumericKind.unsigned_int.value,
                ),
                required=True,
                visible_when=("field_kind", numeric),
            ),
            PromptField(
                key="unit",
                kind=PromptFieldKind.text,
                label="Unit",
                description="e.g. minutes, pages, glasses",
                default=draft.get(
                    "unit", data.unit if data and data.unit else self._default_unit(state)
                ),
                visible_when=("field_kind", numeric),
            ),
            PromptField(
                key="min",
                kind=PromptFieldKind.text,
                label="Minimum value",
                description="Optional",
                default=draft.get("min", _number_text(data.min) if data else ""),
                visible_when=("field_kind", numeric),
            ),
            PromptField(
                key="max",
                kind=PromptFieldKind.text,
                label="Maximum value",
                description="Optional",
                default=draft.get("max", _number_text(data.max) if data else ""),
                visible_when=("field_kind", numeric),
            ),
            PromptField(
                key="multiline",
                kind=PromptFieldKind.confirm,
                label="Allow multi-line text?",
                default=draft.get("multiline", data.multiline if data else False),
                visible_when=("field_kind", ("text",)),
            ),
        ]

        if state.habit_kind == HabitKind.informational:
            fields.append(
                PromptField(
                    key="direction",
                    kind=PromptFieldKind.select,
                    label="Direction",
                    description="Which way counts as an improvement",
                    options=direction_options(),
                    default=draft.get(
                        "direction",
                        data.direction.value
                        if data and data.direction
                        else Direction.neutral.value,
                    ),
                )
            )
        return tuple(fields)

    def submit(self, values: dict[str, Any], state: WizardState) -> StepResult:
        offered = {o.value for o in field_kind_options(state.habit_kind)}
        raw_kind = as_text(values.get("field_kind"))
        if raw_kind not in offered:
            return self.reject(
                state,
                [self.error(f"field type '{raw_kind}' is not available", "field_kind")],
                values,
            )
        field_kind = FieldKind(raw_kind)

        errors: list[ValidationError] = []
        attrs: dict[str, Any] = {"field_kind": field_kind}

        if field_kind == FieldKind.numeric:
            errors.extend(self._numeric_attrs(values, attrs, state))
        elif field_kind == FieldKind.text:
            attrs["multiline"] = as_bool(values.get("multiline"))
        elif field_kind in (FieldKind.time, FieldKind.duration, FieldKind.boolean):
            pass
        else:
            raise ValueError(f"unsupported field kind: {field_kind!r}")

        if state.habit_kind == HabitKind.informational:
            raw_direction = as_text(pick(values, "direction", Direction.neutral.value))
            try:
                attrs["direction"] = Direction(raw_direction)
            except ValueError:
                errors.append(self.error(f"unknown direction '{raw_direction}'", "direction"))

        if errors:
            return self.reject(state, errors, values)

        try:
            data = FieldConfigData(**attrs)
        except PydanticValidationError as e:
            return self.reject(state, self.errors_from_pydantic(e), values)
        return self.complete(state, data)

    def _numeric_attrs(
        self, values: dict[str, Any], attrs: dict[str, Any], state: WizardState
    ) -> list[ValidationError]:
        errors: list[ValidationError] = []
        raw_numeric = as_text(pick(values, "numeric_kind", NumericKind.unsigned_int.value))
        try:
            numeric_kind = NumericKind(raw_numeric)
        except ValueError:
            return [self.error(f"unknown number format '{raw_numeric}'", "numeric_kind")]

        attrs["numeric_kind"] = numeric_kind
        attrs["unit"] = as_text(values.get("unit")) or self._default_unit(state)
        for key in ("min", "max"):
            try:
                attrs[key] = parse_optional_number(values.get(key), numeric_kind)
            except ConditionParseError as e:
                errors.append(self.error(str(e), key))

        low, high = attrs.get("min"), attrs.get("max")
        if low is not None and high is not None and low > high:
            errors.append(
                self.error(f"minimum ({low}) must be ≤ maximum ({high})", "max")
            )
        return errors

    def validate(self, state: WizardState) -> list[ValidationError]:
        data = state.get_typed(self.step, FieldConfigData)
        if data is None:
            return [self.error("field type is required", "field_kind")]
        if data.field_kind.value not in {o.value for o in field_kind_options(state.habit_kind)}:
            return [self.error(f"field type '{data.field_kind.value}' is not available")]
        return []
