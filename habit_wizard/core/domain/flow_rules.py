"""
Flow Domain Rules - step planning for the habit wizard.

AICODE-NOTE: pure functions, no I/O.
The plan is recomputed from the answers given so far (habit kind, field kind,
scoring mode). When an answer the plan depends on changes, the steps built on
top of it are invalidated right away and the cursor is clamped back into the
new plan.
"""

import logging
from dataclasses import dataclass

from habit_wizard.core.domain.criteria_rules import supports_automatic_scoring
from habit_wizard.models import FieldKind, HabitKind, ScoringMode
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import STEP_TIERS, StepKind
from habit_wizard.wizard.step_data import FieldConfigData, ScoringData

logger = logging.getLogger(__name__)

TIER_BLOCK: tuple[StepKind, ...] = (
    StepKind.mini_criteria,
    StepKind.midi_criteria,
    StepKind.maxi_criteria,
    StepKind.tier_validation,
)

# Canonical order of every step kind, used to clamp the cursor
STEP_ORDER: tuple[StepKind, ...] = tuple(StepKind)


@dataclass(frozen=True)
class FlowPlan:
    """Ordered step kinds for the answers collected so far."""

    steps: tuple[StepKind, ...]

    def __len__(self) -> int:
        return len(self.steps)

    def __contains__(self, step: object) -> bool:
        return step in self.steps

    def __iter__(self):
        return iter(self.steps)

    @property
    def first(self) -> StepKind:
        return self.steps[0]

    @property
    def terminal(self) -> StepKind:
        return self.steps[-1]

    @property
    def after_basic_info(self) -> tuple[StepKind, ...]:
        """Steps the user walks through once the habit is named."""
        return tuple(s for s in self.steps if s != StepKind.basic_info)

    def index(self, step: StepKind) -> int:
        return self.steps.index(step)

    def position(self, step: StepKind) -> int:
        """1-based display position."""
        return self.steps.index(step) + 1

    def next_step(self, step: StepKind) -> StepKind | None:
        i = self.steps.index(step)
        return self.steps[i + 1] if i + 1 < len(self.steps) else None

    def previous_step(self, step: StepKind) -> StepKind | None:
        i = self.steps.index(step)
        return self.steps[i - 1] if i > 0 else None

    def required_steps(self) -> tuple[StepKind, ...]:
        """Steps that must hold data before a habit can be materialized."""
        return tuple(s for s in self.steps if s != StepKind.confirmation)


def plan_steps(
    habit_kind: HabitKind,
    field_kind: FieldKind | None = None,
    scoring_mode: ScoringMode | None = None,
) -> FlowPlan:
    """
    Compute the step sequence for the given answers.

    Args:
        habit_kind: Habit kind chosen on creation
        field_kind: Field kind, once chosen
        scoring_mode: Scoring mode, once chosen

    Returns:
        FlowPlan

    Raises:
        ValueError: unknown habit kind (programming error)

    Examples:
        >>> len(plan_steps(HabitKind.elastic, FieldKind.numeric, ScoringMode.automatic))
        8
        >>> len(plan_steps(HabitKind.elastic, FieldKind.time, ScoringMode.manual).after_basic_info)
        3
    """
    automatic = scoring_mode == ScoringMode.automatic

    if habit_kind == HabitKind.simple:
        steps = [StepKind.basic_info, StepKind.scoring]
        if automatic:
            steps.append(StepKind.criteria)
    elif habit_kind == HabitKind.elastic:
        steps = [StepKind.basic_info, StepKind.field_config, StepKind.scoring]
        if (
            automatic
            and field_kind is not None
            and field_kind != FieldKind.text
            and supports_automatic_scoring(field_kind)
        ):
            steps.extend(TIER_BLOCK)
    elif habit_kind == HabitKind.informational:
        steps = [StepKind.basic_info, StepKind.field_config]
    elif habit_kind == HabitKind.checklist:
        steps = [StepKind.basic_info, StepKind.checklist, StepKind.scoring]
    else:
        raise ValueError(f"unknown habit kind: {habit_kind!r}")

    steps.append(StepKind.confirmation)
    return FlowPlan(tuple(steps))


def effective_field_kind(state: WizardState) -> FieldKind | None:
    """Field kind implied by the state (simple habits are always boolean)."""
    if state.habit_kind == HabitKind.simple:
        return FieldKind.boolean
    if state.habit_kind == HabitKind.checklist:
        return FieldKind.checklist
    field_config = state.get_typed(StepKind.field_config, FieldConfigData)
    return field_config.field_kind if field_config else None


def effective_scoring_mode(state: WizardState) -> ScoringMode | None:
    """Scoring mode implied by the state (informational habits are always manual)."""
    if state.habit_kind == HabitKind.informational:
        return ScoringMode.manual
    scoring = state.get_typed(StepKind.scoring, ScoringData)
    return scoring.mode if scoring else None


def plan_for_state(state: WizardState) -> FlowPlan:
    return plan_steps(
        state.habit_kind, effective_field_kind(state), effective_scoring_mode(state)
    )


def clamp_cursor(state: WizardState, plan: FlowPlan | None = None) -> WizardState:
    """
    Move the cursor to the nearest earlier step still present in the plan.

    Examples:
        cursor on maxi_criteria, scoring switched to manual -> cursor on scoring
    """
    plan = plan or plan_for_state(state)
    if state.current_step in plan:
        return state

    start = STEP_ORDER.index(state.current_step)
    for step in reversed(STEP_ORDER[: start + 1]):
        if step in plan:
            logger.info(f"Cursor clamped from {state.current_step.value} to {step.value}")
            return state.set_current_step(step)
    return state.set_current_step(plan.first)


def invalidate_dependents(
    state: WizardState, step: StepKind, previous: object | None
) -> WizardState:
    """
    Drop or reopen the steps built on an answer that just changed.

    Args:
        state: State that already holds the new data for `step`
        step: Step that was re-completed
        previous: StepData the step held before, None if it was empty

    Returns:
        New state with dependents reopened
    """
    current = state.get_step(step)
    if previous is None or previous == current:
        return state

    logger.info(f"Answer for {step.value} changed, invalidating dependent steps")

    if step == StepKind.field_config:
        state = _invalidate_field_config(state, previous, current)
    elif step == StepKind.scoring:
        state = _reopen(state, StepKind.tier_validation, clear=True)
    elif step in STEP_TIERS or step == StepKind.criteria:
        state = _reopen(state, StepKind.tier_validation, clear=True)

    return state.mark_incomplete(StepKind.confirmation).clear_step(StepKind.confirmation)


def _invalidate_field_config(
    state: WizardState, previous: object, current: object | None
) -> WizardState:
    kind_changed = not (
        isinstance(previous, FieldConfigData)
        and isinstance(current, FieldConfigData)
        and previous.field_kind == current.field_kind
        and previous.numeric_kind == current.numeric_kind
    )

    # descriptions embed the unit, so tiers are rebuilt on any change;
    # raw values survive only while they still parse for the same kind
    for tier_step in STEP_TIERS:
        state = _reopen(state, tier_step, clear=kind_changed)
    state = _reopen(state, StepKind.tier_validation, clear=True)

    if isinstance(current, FieldConfigData) and not supports_automatic_scoring(
        current.field_kind
    ):
        scoring = state.get_typed(StepKind.scoring, ScoringData)
        if scoring and scoring.mode == ScoringMode.automatic:
            state = _reopen(state, StepKind.scoring, clear=True)
    return state


def _reopen(state: WizardState, step: StepKind, clear: bool) -> WizardState:
    state = state.mark_incomplete(step)
    if clear:
        state = state.clear_step(step)
    return state
