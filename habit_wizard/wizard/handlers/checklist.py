"""
Шаг выбора чек-листа для checklist-привычек.
"""

from typing import Any

from habit_wizard.config import config
from habit_wizard.core.errors import ValidationError
from habit_wizard.wizard.handlers.base import StepHandler, StepResult, as_text
from habit_wizard.wizard.options import checklist_options
from habit_wizard.wizard.prompts import PromptField, PromptFieldKind
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import StepKind
from habit_wizard.wizard.step_data import ChecklistData


class ChecklistHandler(StepHandler):
    step = StepKind.checklist

    def __init__(self, checklist_ids: list[str] | None = None):
        super().__init__()
        self._checklist_ids = checklist_ids

    @property
    def checklist_ids(self) -> list[str]:
        if self._checklist_ids is not None:
            return self._checklist_ids
        return config.CHECKLIST_IDS

    def description(self, state: WizardState) -> str:
        return "Choose the checklist this habit tracks."

    def fields(self, state: WizardState, draft: dict[str, Any]) -> tuple[PromptField, ...]:
        data = state.get_typed(self.step, ChecklistData)
        default = draft.get("checklist_id", data.checklist_id if data else None)

        if self.checklist_ids:
            return (
                PromptField(
                    key="checklist_id",
                    kind=PromptFieldKind.select,
                    label="Checklist",
                    options=checklist_options(self.checklist_ids),
                    default=default or self.checklist_ids[0],
                    required=True,
                ),
            )
        return (
            PromptField(
                key="checklist_id",
                kind=PromptFieldKind.text,
                label="Checklist ID",
                default=default or "",
                required=True,
            ),
        )

    def submit(self, values: dict[str, Any], state: WizardState) -> StepResult:
        checklist_id = as_text(values.get("checklist_id"))
        if not checklist_id:
            return self.reject(state, [self.error("checklist is required", "checklist_id")], values)
        if self.checklist_ids and checklist_id not in self.checklist_ids:
            return self.reject(
                state,
                [self.error(f"unknown checklist '{checklist_id}'", "checklist_id")],
                values,
            )
        return self.complete(state, ChecklistData(checklist_id=checklist_id))

    def validate(self, state: WizardState) -> list[ValidationError]:
        if state.get_typed(self.step, ChecklistData) is None:
            return [self.error("checklist is required", "checklist_id")]
        return []
