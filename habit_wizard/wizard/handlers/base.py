"""
Базовый класс обработчика шага.

AICODE-NOTE: обработчики не хранят состояния. render() строит форму из
WizardState, ingest() - чистый переход (event, state) -> StepResult.
Ошибки ввода возвращаются списком ValidationError, исключения не бросаются.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from pydantic import ValidationError as PydanticValidationError

from habit_wizard.core.domain.flow_rules import plan_for_state
from habit_wizard.core.errors import ValidationError
from habit_wizard.wizard.events import Cancel, Submit, WizardEvent
from habit_wizard.wizard.prompts import PromptField, RenderContext, StepPrompt
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import STEP_TITLES, StepKind
from habit_wizard.wizard.step_data import StepData

logger = logging.getLogger(__name__)


class StepOutcome(str, Enum):
    active = "active"  # still on this step (e.g. input rejected)
    completed = "completed"
    back = "back"  # leave to an earlier step (StepResult.jump_to)
    cancelled = "cancelled"


@dataclass(frozen=True)
class StepResult:
    state: WizardState
    outcome: StepOutcome
    errors: tuple[ValidationError, ...] = ()
    # rejected answers, used to pre-fill the next render
    draft: dict[str, Any] = field(default_factory=dict)
    jump_to: StepKind | None = None


class StepHandler(ABC):
    """One concrete handler per step kind."""

    step: ClassVar[StepKind]

    def __init__(self, step: StepKind | None = None):
        # criteria handlers serve several step kinds
        if step is not None:
            self.step = step

    # ------------------------------------------------------------------ render

    def title(self, state: WizardState) -> str:
        return STEP_TITLES[self.step]

    def description(self, state: WizardState) -> str:
        return ""

    @abstractmethod
    def fields(self, state: WizardState, draft: dict[str, Any]) -> tuple[PromptField, ...]:
        """Form fields for the current state, pre-filled from data or draft."""

    def render(self, state: WizardState, context: RenderContext | None = None) -> StepPrompt:
        context = context or RenderContext()
        return StepPrompt(
            step=self.step,
            title=self.title(state),
            description=self.description(state),
            position=context.position,
            total=context.total,
            fields=self.fields(state, context.draft),
            errors=context.errors,
            can_go_back=context.can_go_back,
            can_go_forward=context.can_go_forward,
            steps=context.steps,
        )

    # ------------------------------------------------------------------ ingest

    def ingest(self, event: WizardEvent, state: WizardState) -> StepResult:
        if isinstance(event, Cancel):
            return StepResult(state=state, outcome=StepOutcome.cancelled)
        if not isinstance(event, Submit):
            # navigation is the orchestrator's business
            return StepResult(state=state, outcome=StepOutcome.active)
        return self.submit(dict(event.values), state)

    @abstractmethod
    def submit(self, values: dict[str, Any], state: WizardState) -> StepResult:
        """Parse submitted answers into StepData."""

    @abstractmethod
    def validate(self, state: WizardState) -> list[ValidationError]:
        """Errors that keep this step from counting as completed."""

    def can_enter(self, state: WizardState) -> bool:
        """Every earlier step of the current plan is completed."""
        plan = plan_for_state(state)
        if self.step not in plan:
            return False
        return all(state.is_completed(s) for s in plan.steps[: plan.index(self.step)])

    # ----------------------------------------------------------------- helpers

    def error(self, message: str, field: str | None = None) -> ValidationError:
        return ValidationError(step=self.step, field=field, message=message)

    def complete(self, state: WizardState, data: StepData) -> StepResult:
        state = state.set_step(self.step, data).mark_completed(self.step)
        logger.info(f"Step {self.step.value} completed")
        return StepResult(state=state, outcome=StepOutcome.completed)

    def reject(
        self,
        state: WizardState,
        errors: list[ValidationError],
        values: dict[str, Any],
    ) -> StepResult:
        logger.info(f"Step {self.step.value} rejected: {len(errors)} error(s)")
        return StepResult(
            state=state,
            outcome=StepOutcome.active,
            errors=tuple(errors),
            draft=values,
        )

    def errors_from_pydantic(self, exc: PydanticValidationError) -> list[ValidationError]:
        """Map pydantic errors onto step errors, keeping the field name."""
        errors = []
        for item in exc.errors():
            loc = item.get("loc") or ()
            message = str(item.get("msg", "invalid value"))
            message = message.removeprefix("Value error, ")
            errors.append(self.error(message, field=str(loc[0]) if loc else None))
        return errors


def pick(values: dict[str, Any], key: str, default: Any = None) -> Any:
    """Submitted value, or `default` when missing or blank."""
    value = values.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return value


def as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value).strip()


def as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("y", "yes", "true", "1")
