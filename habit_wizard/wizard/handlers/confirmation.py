"""
Последний шаг: предпросмотр привычки и подтверждение.
"""

from typing import Any

from habit_wizard.core.domain.flow_rules import plan_for_state
from habit_wizard.core.errors import MissingStepDataError, ValidationError
from habit_wizard.core.use_cases.materialize_habit import materialize_habit
from habit_wizard.wizard.formatters import format_habit_preview
from habit_wizard.wizard.handlers.base import StepHandler, StepOutcome, StepResult, as_bool
from habit_wizard.wizard.prompts import PromptField, PromptFieldKind
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import STEP_TITLES, StepKind
from habit_wizard.wizard.step_data import ConfirmationData


class ConfirmationHandler(StepHandler):
    step = StepKind.confirmation

    def description(self, state: WizardState) -> str:
        return "Review the habit before it is saved."

    def fields(self, state: WizardState, draft: dict[str, Any]) -> tuple[PromptField, ...]:
        try:
            preview = format_habit_preview(materialize_habit(state))
        except MissingStepDataError as e:
            preview = f"Habit is incomplete: {STEP_TITLES[e.step]} has no answers yet."

        question = "Save changes?" if state.editing_id else "Create this habit?"
        return (
            PromptField(
                key="preview",
                kind=PromptFieldKind.note,
                label="Preview",
                description=preview,
            ),
            PromptField(
                key="confirmed",
                kind=PromptFieldKind.confirm,
                label=question,
                default=draft.get("confirmed", True),
            ),
        )

    def submit(self, values: dict[str, Any], state: WizardState) -> StepResult:
        errors = self.validate(state)
        if errors:
            return self.reject(state, errors, values)

        if not as_bool(values.get("confirmed"), default=True):
            plan = plan_for_state(state)
            return StepResult(
                state=state,
                outcome=StepOutcome.back,
                jump_to=plan.previous_step(self.step),
            )
        return self.complete(state, ConfirmationData(confirmed=True))

    def validate(self, state: WizardState) -> list[ValidationError]:
        plan = plan_for_state(state)
        return [
            self.error(f"{STEP_TITLES[step]} is not completed")
            for step in plan.required_steps()
            if not state.is_completed(step)
        ]
