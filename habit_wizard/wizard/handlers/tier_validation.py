"""
Шаг проверки порядка уровней mini ≤ midi ≤ maxi.

AICODE-NOTE: проверка рекомендательная. При нарушениях пользователь
выбирает: продолжить как есть, вернуться и исправить, или отменить.
Строгая проверка всё равно выполняется при сохранении схемы.
С STRICT_TIER_ORDERING=true вариант "продолжить" не предлагается.
"""

import logging
from typing import Any

from habit_wizard.config import config
from habit_wizard.core.domain.flow_rules import effective_field_kind
from habit_wizard.core.domain.tier_rules import ValidationResult, validate_tier_order
from habit_wizard.core.errors import ValidationError
from habit_wizard.wizard.formatters import format_violations
from habit_wizard.wizard.handlers.base import StepHandler, StepOutcome, StepResult, as_text
from habit_wizard.wizard.options import CANCEL, FIX, PROCEED, tier_validation_options
from habit_wizard.wizard.prompts import PromptField, PromptFieldKind
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import StepKind
from habit_wizard.wizard.step_data import CriteriaData, TierValidationData

logger = logging.getLogger(__name__)


def check_tiers(state: WizardState) -> ValidationResult:
    """Run the cross-tier check on the tier data held by the state."""
    conditions = []
    for step in (StepKind.mini_criteria, StepKind.midi_criteria, StepKind.maxi_criteria):
        data = state.get_typed(step, CriteriaData)
        conditions.append(data.condition if data else None)
    return validate_tier_order(*conditions, field_kind=effective_field_kind(state))


class TierValidationHandler(StepHandler):
    step = StepKind.tier_validation

    def description(self, state: WizardState) -> str:
        return "Checking that mini, midi and maxi get harder in that order."

    def fields(self, state: WizardState, draft: dict[str, Any]) -> tuple[PromptField, ...]:
        result = check_tiers(state)
        if result.ok:
            return (
                PromptField(
                    key="result",
                    kind=PromptFieldKind.note,
                    label="All criteria levels are ordered correctly",
                ),
            )

        options = tier_validation_options(allow_proceed=not config.STRICT_TIER_ORDERING)
        return (
            PromptField(
                key="violations",
                kind=PromptFieldKind.note,
                label="Criteria levels are out of order",
                description=format_violations(result.violations),
            ),
            PromptField(
                key="choice",
                kind=PromptFieldKind.select,
                label="What do you want to do?",
                options=options,
                default=draft.get("choice", FIX),
                required=True,
            ),
        )

    def submit(self, values: dict[str, Any], state: WizardState) -> StepResult:
        result = check_tiers(state)
        if result.ok:
            return self.complete(state, TierValidationData(ok=True))

        choice = as_text(values.get("choice"))
        allowed = {o.value for o in tier_validation_options(not config.STRICT_TIER_ORDERING)}
        if choice not in allowed:
            return self.reject(
                state, [self.error(f"unknown choice '{choice}'", "choice")], values
            )

        data = TierValidationData(ok=False, violations=result.violations)
        if choice == PROCEED:
            logger.warning(
                f"Tier ordering accepted with {len(result.violations)} violation(s)"
            )
            return self.complete(state, data.model_copy(update={"acknowledged": True}))
        if choice == CANCEL:
            return StepResult(state=state, outcome=StepOutcome.cancelled)

        # FIX: remember the verdict and send the user to the first tier
        state = state.set_step(self.step, data).mark_incomplete(self.step)
        return StepResult(
            state=state, outcome=StepOutcome.back, jump_to=StepKind.mini_criteria
        )

    def validate(self, state: WizardState) -> list[ValidationError]:
        data = state.get_typed(self.step, TierValidationData)
        if data is None:
            return [self.error("criteria levels have not been checked")]
        if data.ok:
            return []
        if not data.acknowledged or config.STRICT_TIER_ORDERING:
            return [self.error(v) for v in data.violations]
        return []
