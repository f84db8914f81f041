"""
Wizard Orchestrator - цикл событий визарда.

AICODE-NOTE: единственная точка ожидания - terminal.next_event().
Вся валидация, сборка условий и материализация синхронны.
Состояние принадлежит только оркестратору на время одного запуска;
при отмене оно отбрасывается, ничего не записывается.
"""

import logging
from dataclasses import dataclass
from typing import Any

from habit_wizard.core.domain.flow_rules import (
    FlowPlan,
    clamp_cursor,
    invalidate_dependents,
    plan_for_state,
)
from habit_wizard.core.errors import MissingStepDataError, ValidationError
from habit_wizard.core.use_cases.materialize_habit import materialize_habit
from habit_wizard.models import Habit, HabitKind
from habit_wizard.terminal.base import Terminal
from habit_wizard.wizard import navigation
from habit_wizard.wizard.events import (
    Cancel,
    GoBack,
    GoForward,
    JumpTo,
    Resize,
    Submit,
)
from habit_wizard.wizard.handlers import StepHandler, StepOutcome, build_handlers
from habit_wizard.wizard.prompts import RenderContext
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import STEP_TITLES, StepKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WizardResult:
    """Итог запуска: ровно одно из полей имеет смысл."""

    habit: Habit | None = None
    cancelled: bool = False
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.habit is not None


class HabitWizard:
    """
    Runs one wizard session against a terminal.

    Usage:
        wizard = HabitWizard(terminal, habit_kind=HabitKind.elastic)
        result = await wizard.run()
    """

    def __init__(
        self,
        terminal: Terminal,
        state: WizardState | None = None,
        *,
        habit_kind: HabitKind = HabitKind.simple,
        handlers: dict[StepKind, StepHandler] | None = None,
    ):
        self._terminal = terminal
        self._state: WizardState | None = state or WizardState(habit_kind=habit_kind)
        self._handlers = handlers or build_handlers()

    @property
    def state(self) -> WizardState | None:
        """Current state; None once the run was cancelled."""
        return self._state

    async def run(self) -> WizardResult:
        state = self._state
        if state is None:
            raise RuntimeError("wizard state was discarded, create a new HabitWizard")

        errors: tuple[ValidationError, ...] = ()
        draft: dict[str, Any] = {}
        logger.info(f"Wizard started for a {state.habit_kind.value} habit")

        while True:
            plan = plan_for_state(state)
            state = self._enterable(clamp_cursor(state, plan), plan)
            self._state = state
            step = state.current_step
            handler = self._handlers[step]

            prompt = handler.render(
                state,
                RenderContext(
                    position=plan.position(step),
                    total=len(plan),
                    can_go_back=navigation.can_go_back(state, plan),
                    can_go_forward=navigation.can_go_forward(state, plan),
                    steps=plan.steps,
                    errors=errors,
                    draft=draft,
                ),
            )
            event = await self._terminal.next_event(prompt)

            if isinstance(event, Resize):
                # redraw the same step, keep pending errors and draft
                logger.debug(f"Terminal resized to {event.width}x{event.height}")
                continue

            errors, draft = (), {}

            if isinstance(event, Cancel):
                return self._cancel(step)

            if isinstance(event, GoBack):
                state = navigation.go_back(state, plan)
            elif isinstance(event, GoForward):
                if navigation.can_go_forward(state, plan):
                    state = navigation.go_forward(state, plan)
                else:
                    errors = tuple(handler.validate(state)) or (
                        handler.error("answer this step before moving on"),
                    )
            elif isinstance(event, JumpTo):
                if navigation.can_jump_to(state, event.step, plan):
                    state = navigation.jump_to(state, event.step, plan)
                else:
                    errors = (
                        handler.error(f"cannot jump to {STEP_TITLES[event.step]} yet"),
                    )
            elif isinstance(event, Submit):
                previous = state.get_step(step)
                result = handler.ingest(event, state)

                if result.outcome == StepOutcome.cancelled:
                    return self._cancel(step)
                if result.outcome == StepOutcome.active:
                    state, errors, draft = result.state, result.errors, result.draft
                    continue
                if result.outcome == StepOutcome.back:
                    state = self._back_to(result.state, result.jump_to)
                    continue

                state = invalidate_dependents(result.state, step, previous)
                if step == StepKind.confirmation:
                    return self._finish(state)

                plan = plan_for_state(state)
                next_step = plan.next_step(step) if step in plan else None
                if next_step is not None:
                    state = state.set_current_step(next_step)
            else:
                logger.warning(f"Unknown wizard event ignored: {event!r}")

    # ----------------------------------------------------------------- helpers

    def _enterable(self, state: WizardState, plan: FlowPlan) -> WizardState:
        """Move the cursor to the first open step if the current one is not reachable."""
        if self._handlers[state.current_step].can_enter(state):
            return state
        for step in plan:
            if not state.is_completed(step):
                logger.info(
                    f"Step {state.current_step.value} not reachable yet, "
                    f"moving to {step.value}"
                )
                return state.set_current_step(step)
        return state

    def _back_to(self, state: WizardState, target: StepKind | None) -> WizardState:
        plan = plan_for_state(state)
        if target is None or target not in plan:
            return navigation.go_back(state, plan)
        return state.set_current_step(target)

    def _cancel(self, step: StepKind) -> WizardResult:
        logger.info(f"Wizard cancelled at step {step.value}")
        self._state = None
        return WizardResult(cancelled=True)

    def _finish(self, state: WizardState) -> WizardResult:
        try:
            habit = materialize_habit(state)
        except MissingStepDataError as e:
            logger.exception(f"Wizard reached confirmation without data: {e}")
            return WizardResult(error=e)
        self._state = None
        return WizardResult(habit=habit)
