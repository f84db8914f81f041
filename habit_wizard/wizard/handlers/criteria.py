"""
Шаг критериев автоматической оценки.

Один класс обслуживает четыре шага: единственный критерий simple-привычки
и три уровня (mini, midi, maxi) elastic-привычки. Вопросы зависят от типа
поля; для boolean критерий всегда "ответ да" и показывается как заметка.
"""

from typing import Any

from habit_wizard.core.domain.criteria_rules import (
    COMPARISONS_BY_FIELD_KIND,
    BuiltCondition,
    build_condition,
)
from habit_wizard.core.domain.flow_rules import effective_field_kind, plan_for_state
from habit_wizard.core.errors import ConditionParseError, ValidationError
from habit_wizard.models import ComparisonKind, FieldKind, NumericKind, Tier
from habit_wizard.wizard.handlers.base import (
    StepHandler,
    StepResult,
    as_bool,
    as_text,
)
from habit_wizard.wizard.options import comparison_options
from habit_wizard.wizard.prompts import PromptField, PromptFieldKind
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import STEP_TIERS, StepKind
from habit_wizard.wizard.step_data import CriteriaData, FieldConfigData

VALUE_LABELS: dict[FieldKind, str] = {
    FieldKind.numeric: "Value (minimum for ranges)",
    FieldKind.time: "Time (HH:MM)",
    FieldKind.duration: "Duration (e.g. 30m, 1h30m; minimum for ranges)",
}

RANGE = (ComparisonKind.range.value,)


class CriteriaHandler(StepHandler):
    step = StepKind.criteria

    @property
    def tier(self) -> Tier | None:
        return STEP_TIERS.get(self.step)

    def description(self, state: WizardState) -> str:
        if self.tier is None:
            return "Define when the habit counts as achieved."
        return f"Define when the {self.tier.value} level counts as achieved."

    # --------------------------------------------------------------- context

    def _field_config(self, state: WizardState) -> FieldConfigData | None:
        return state.get_typed(StepKind.field_config, FieldConfigData)

    def _build_args(self, state: WizardState) -> dict[str, Any]:
        field_config = self._field_config(state)
        return {
            "numeric_kind": (
                field_config.numeric_kind
                if field_config and field_config.numeric_kind
                else NumericKind.decimal
            ),
            "unit": field_config.unit if field_config else "",
            "tier": self.tier,
        }

    def _previous_tier_data(self, state: WizardState) -> CriteriaData | None:
        plan = plan_for_state(state)
        if self.step not in plan:
            return None
        previous = plan.previous_step(self.step)
        return state.get_typed(previous, CriteriaData) if previous else None

    # ---------------------------------------------------------------- render

    def fields(self, state: WizardState, draft: dict[str, Any]) -> tuple[PromptField, ...]:
        field_kind = effective_field_kind(state)

        if field_kind == FieldKind.boolean:
            return (
                PromptField(
                    key="boolean_note",
                    kind=PromptFieldKind.note,
                    label="Criteria",
                    description="The habit is achieved when you answer 'yes'.",
                ),
            )
        if field_kind in (FieldKind.numeric, FieldKind.time, FieldKind.duration):
            return self._comparison_fields(state, field_kind, draft)
        raise ValueError(f"criteria are not offered for {field_kind!r} fields")

    def _comparison_fields(
        self, state: WizardState, field_kind: FieldKind, draft: dict[str, Any]
    ) -> tuple[PromptField, ...]:
        data = state.get_typed(self.step, CriteriaData)
        options = comparison_options(field_kind)
        source = data or self._previous_tier_data(state)

        comparison = options[0].value
        if source and source.comparison.value in {o.value for o in options}:
            comparison = source.comparison.value

        fields = [
            PromptField(
                key="comparison",
                kind=PromptFieldKind.select,
                label="Comparison",
                options=options,
                default=draft.get("comparison", comparison),
                required=True,
            ),
            PromptField(
                key="value",
                kind=PromptFieldKind.text,
                label=VALUE_LABELS[field_kind],
                default=draft.get("value", data.raw_value if data else ""),
                required=True,
            ),
        ]
        if field_kind != FieldKind.time:
            fields.extend(
                [
                    PromptField(
                        key="value2",
                        kind=PromptFieldKind.text,
                        label="Maximum",
                        default=draft.get("value2", data.raw_value2 if data else ""),
                        required=True,
                        visible_when=("comparison", RANGE),
                    ),
                    PromptField(
                        key="inclusive",
                        kind=PromptFieldKind.confirm,
                        label="Include the range bounds?",
                        default=draft.get("inclusive", data.inclusive if data else True),
                        visible_when=("comparison", RANGE),
                    ),
                ]
            )
        # generated descriptions are not offered back: they are rebuilt from
        # the current unit on submit
        custom = data.description if data and data.custom_description else ""
        fields.append(
            PromptField(
                key="description",
                kind=PromptFieldKind.text,
                label="Description",
                description="Leave blank to generate one",
                default=draft.get("description", custom),
            )
        )
        return tuple(fields)

    # ---------------------------------------------------------------- ingest

    def submit(self, values: dict[str, Any], state: WizardState) -> StepResult:
        field_kind = effective_field_kind(state)

        if field_kind == FieldKind.boolean:
            built = build_condition(FieldKind.boolean, ComparisonKind.equals, tier=self.tier)
            return self.complete(
                state,
                CriteriaData(
                    tier=self.tier,
                    comparison=ComparisonKind.equals,
                    raw_value="true",
                    description=built.description,
                    condition=built.condition,
                ),
            )
        if field_kind not in (FieldKind.numeric, FieldKind.time, FieldKind.duration):
            raise ValueError(f"criteria are not offered for {field_kind!r} fields")

        raw_comparison = as_text(values.get("comparison"))
        try:
            comparison = ComparisonKind(raw_comparison)
        except ValueError:
            comparison = None
        if comparison not in COMPARISONS_BY_FIELD_KIND[field_kind]:
            return self.reject(
                state,
                [self.error(f"comparison '{raw_comparison}' is not available", "comparison")],
                values,
            )

        raw_value = as_text(values.get("value"))
        raw_value2 = as_text(values.get("value2")) if comparison == ComparisonKind.range else ""
        inclusive = as_bool(values.get("inclusive"), default=True)

        try:
            built = build_condition(
                field_kind,
                comparison,
                raw_value,
                raw_value2,
                inclusive=inclusive,
                **self._build_args(state),
            )
        except ConditionParseError as e:
            field = "value2" if raw_value2 and e.raw == raw_value2 else "value"
            return self.reject(state, [self.error(str(e), field)], values)

        return self.complete(
            state,
            self._criteria_data(built, comparison, raw_value, raw_value2, inclusive, values),
        )

    def _criteria_data(
        self,
        built: BuiltCondition,
        comparison: ComparisonKind,
        raw_value: str,
        raw_value2: str,
        inclusive: bool,
        values: dict[str, Any],
    ) -> CriteriaData:
        typed = as_text(values.get("description"))
        custom = bool(typed) and typed != built.description
        return CriteriaData(
            tier=self.tier,
            comparison=comparison,
            raw_value=raw_value,
            raw_value2=raw_value2,
            inclusive=inclusive,
            description=typed if custom else built.description,
            custom_description=custom,
            condition=built.condition,
        )

    def validate(self, state: WizardState) -> list[ValidationError]:
        data = state.get_typed(self.step, CriteriaData)
        if data is None:
            return [self.error("criteria are required")]
        field_kind = effective_field_kind(state)
        if data.comparison not in COMPARISONS_BY_FIELD_KIND.get(field_kind, ()):
            return [
                self.error(
                    f"comparison '{data.comparison.value}' does not fit this field",
                    "comparison",
                )
            ]
        return []
