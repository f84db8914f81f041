"""
Шаг 1: название, описание и тип привычки.

Тип привычки выбирается только при первом прохождении шага:
от него зависит весь план, поэтому потом он показывается как заметка.
"""

from dataclasses import replace
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from habit_wizard.config import config
from habit_wizard.core.errors import ValidationError
from habit_wizard.models import HabitKind
from habit_wizard.wizard.handlers.base import StepHandler, StepResult, as_text, pick
from habit_wizard.wizard.options import HABIT_KIND_LABELS, habit_kind_options
from habit_wizard.wizard.prompts import PromptField, PromptFieldKind
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import StepKind
from habit_wizard.wizard.step_data import BasicInfoData


class BasicInfoHandler(StepHandler):
    step = StepKind.basic_info

    def description(self, state: WizardState) -> str:
        return "Name the habit and choose what kind of habit it is."

    def _kind_is_locked(self, state: WizardState) -> bool:
        return state.is_completed(self.step) or state.editing_id is not None

    def fields(self, state: WizardState, draft: dict[str, Any]) -> tuple[PromptField, ...]:
        data = state.get_typed(self.step, BasicInfoData)
        fields = [
            PromptField(
                key="title",
                kind=PromptFieldKind.text,
                label="Title",
                description=f"Required, up to {config.TITLE_MAX_LENGTH} characters",
                default=draft.get("title", data.title if data else ""),
                required=True,
            ),
            PromptField(
                key="description",
                kind=PromptFieldKind.text,
                label="Description",
                default=draft.get("description", data.description if data else ""),
            ),
        ]
        if self._kind_is_locked(state):
            fields.append(
                PromptField(
                    key="habit_kind_note",
                    kind=PromptFieldKind.note,
                    label="Habit type",
                    description=HABIT_KIND_LABELS[state.habit_kind][0],
                )
            )
        else:
            fields.append(
                PromptField(
                    key="habit_kind",
                    kind=PromptFieldKind.select,
                    label="Habit type",
                    options=habit_kind_options(),
                    default=draft.get("habit_kind", state.habit_kind.value),
                    required=True,
                )
            )
        fields.append(
            PromptField(
                key="prompt",
                kind=PromptFieldKind.text,
                label="Prompt",
                description="Question asked when recording; leave blank for the default",
                default=draft.get("prompt", data.prompt if data else ""),
            )
        )
        fields.append(
            PromptField(
                key="help_text",
                kind=PromptFieldKind.text,
                label="Help text",
                description="Optional hint shown with the prompt",
                default=draft.get("help_text", data.help_text if data else ""),
            )
        )
        return tuple(fields)

    def submit(self, values: dict[str, Any], state: WizardState) -> StepResult:
        errors: list[ValidationError] = []

        habit_kind = state.habit_kind
        if not self._kind_is_locked(state):
            raw_kind = as_text(pick(values, "habit_kind", state.habit_kind.value))
            try:
                habit_kind = HabitKind(raw_kind)
            except ValueError:
                errors.append(self.error(f"unknown habit type '{raw_kind}'", "habit_kind"))

        title = as_text(values.get("title"))
        if len(title) > config.TITLE_MAX_LENGTH:
            errors.append(
                self.error(
                    f"title must be at most {config.TITLE_MAX_LENGTH} characters",
                    "title",
                )
            )
        if errors:
            return self.reject(state, errors, values)

        try:
            data = BasicInfoData(
                title=title,
                description=as_text(values.get("description")),
                habit_kind=habit_kind,
                prompt=as_text(values.get("prompt")),
                help_text=as_text(values.get("help_text")),
            )
        except PydanticValidationError as e:
            return self.reject(state, self.errors_from_pydantic(e), values)

        if habit_kind != state.habit_kind:
            state = replace(state, habit_kind=habit_kind)
        return self.complete(state, data)

    def validate(self, state: WizardState) -> list[ValidationError]:
        data = state.get_typed(self.step, BasicInfoData)
        if data is None:
            return [self.error("title is required", "title")]
        if len(data.title) > config.TITLE_MAX_LENGTH:
            return [
                self.error(
                    f"title must be at most {config.TITLE_MAX_LENGTH} characters", "title"
                )
            ]
        return []
