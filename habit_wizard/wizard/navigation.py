"""
Navigation Controller - which cursor moves are legal right now.

AICODE-NOTE: moves only relocate the cursor. Going back never discards
step data, so earlier answers stay pre-filled.
"""

import logging

from habit_wizard.core.domain.flow_rules import FlowPlan, plan_for_state
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import StepKind

logger = logging.getLogger(__name__)


def can_go_back(state: WizardState, plan: FlowPlan | None = None) -> bool:
    plan = plan or plan_for_state(state)
    return state.current_step in plan and state.current_step != plan.first


def can_go_forward(state: WizardState, plan: FlowPlan | None = None) -> bool:
    plan = plan or plan_for_state(state)
    return (
        state.current_step in plan
        and state.is_completed(state.current_step)
        and state.current_step != plan.terminal
    )


def can_jump_to(
    state: WizardState, target: StepKind, plan: FlowPlan | None = None
) -> bool:
    """
    Check if the cursor may jump to `target`.

    Allowed when target is already completed, or when it is the immediate
    successor of the current step and every step before it is completed.
    """
    plan = plan or plan_for_state(state)
    if target not in plan:
        return False
    if state.is_completed(target):
        return True
    if state.current_step not in plan or plan.next_step(state.current_step) != target:
        return False
    return all(state.is_completed(s) for s in plan.steps[: plan.index(target)])


def go_back(state: WizardState, plan: FlowPlan | None = None) -> WizardState:
    plan = plan or plan_for_state(state)
    if not can_go_back(state, plan):
        return state
    return state.set_current_step(plan.previous_step(state.current_step))


def go_forward(state: WizardState, plan: FlowPlan | None = None) -> WizardState:
    plan = plan or plan_for_state(state)
    if not can_go_forward(state, plan):
        return state
    return state.set_current_step(plan.next_step(state.current_step))


def jump_to(
    state: WizardState, target: StepKind, plan: FlowPlan | None = None
) -> WizardState:
    plan = plan or plan_for_state(state)
    if not can_jump_to(state, target, plan):
        logger.info(f"Jump from {state.current_step.value} to {target.value} refused")
        return state
    return state.set_current_step(target)
