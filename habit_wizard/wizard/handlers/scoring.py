"""
Шаг выбора способа оценки: вручную или автоматически по критериям.

Текстовым полям автоматическая оценка не предлагается.
Для elastic-привычек здесь же выбирается direction.
"""

from typing import Any

from habit_wizard.core.domain.flow_rules import effective_field_kind
from habit_wizard.core.errors import ValidationError
from habit_wizard.models import Direction, HabitKind, ScoringMode
from habit_wizard.wizard.handlers.base import StepHandler, StepResult, as_text, pick
from habit_wizard.wizard.options import direction_options, scoring_options
from habit_wizard.wizard.prompts import PromptField, PromptFieldKind
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import StepKind
from habit_wizard.wizard.step_data import ScoringData


class ScoringHandler(StepHandler):
    step = StepKind.scoring

    def description(self, state: WizardState) -> str:
        if state.habit_kind == HabitKind.checklist:
            return "Automatic scoring counts the habit as done when every item is checked."
        return "Choose how achievement is decided."

    def fields(self, state: WizardState, draft: dict[str, Any]) -> tuple[PromptField, ...]:
        data = state.get_typed(self.step, ScoringData)
        options = scoring_options(effective_field_kind(state))

        current = data.mode.value if data else ScoringMode.manual.value
        if current not in {o.value for o in options}:
            current = ScoringMode.manual.value

        fields = [
            PromptField(
                key="mode",
                kind=PromptFieldKind.select,
                label="Scoring",
                options=options,
                default=draft.get("mode", current),
                required=True,
            )
        ]
        if state.habit_kind == HabitKind.elastic:
            fields.append(
                PromptField(
                    key="direction",
                    kind=PromptFieldKind.select,
                    label="Direction",
                    options=direction_options(),
                    default=draft.get(
                        "direction",
                        data.direction.value
                        if data and data.direction
                        else Direction.higher_better.value,
                    ),
                )
            )
        return tuple(fields)

    def submit(self, values: dict[str, Any], state: WizardState) -> StepResult:
        offered = {o.value for o in scoring_options(effective_field_kind(state))}
        raw_mode = as_text(values.get("mode"))
        if raw_mode not in offered:
            return self.reject(
                state,
                [self.error(f"scoring '{raw_mode}' is not available for this field", "mode")],
                values,
            )

        direction = None
        if state.habit_kind == HabitKind.elastic:
            raw_direction = as_text(pick(values, "direction", Direction.higher_better.value))
            try:
                direction = Direction(raw_direction)
            except ValueError:
                return self.reject(
                    state,
                    [self.error(f"unknown direction '{raw_direction}'", "direction")],
                    values,
                )

        return self.complete(state, ScoringData(mode=ScoringMode(raw_mode), direction=direction))

    def validate(self, state: WizardState) -> list[ValidationError]:
        data = state.get_typed(self.step, ScoringData)
        if data is None:
            return [self.error("scoring is required", "mode")]
        offered = {o.value for o in scoring_options(effective_field_kind(state))}
        if data.mode.value not in offered:
            return [self.error(f"scoring '{data.mode.value}' is not available for this field", "mode")]
        return []
