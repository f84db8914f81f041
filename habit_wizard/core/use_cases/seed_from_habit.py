"""
Seed From Habit Use Case - режим редактирования.

Раскладывает существующий Habit обратно по StepData, чтобы визард
открылся с заполненными шагами. Все шаги плана, кроме подтверждения,
отмечаются завершёнными, так что пользователь может сразу перейти
к нужному шагу. Исключение: при STRICT_TIER_ORDERING привычка с
нарушенным порядком уровней открывается с незавершённой проверкой уровней.

AICODE-NOTE: описание критерия переносится дословно вместе с условием,
поэтому seed → materialize без правок воспроизводит исходную запись.
"""

import logging

from habit_wizard.config import config
from habit_wizard.core.domain.criteria_rules import build_condition, condition_to_inputs
from habit_wizard.core.domain.flow_rules import plan_for_state
from habit_wizard.core.domain.tier_rules import requires_tier_validation, validate_tier_order
from habit_wizard.core.errors import ConditionParseError
from habit_wizard.models import (
    Criteria,
    Direction,
    FieldKind,
    Habit,
    HabitKind,
    NumericKind,
    ScoringMode,
    Tier,
)
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import TIER_STEPS, StepKind
from habit_wizard.wizard.step_data import (
    BasicInfoData,
    ChecklistData,
    CriteriaData,
    FieldConfigData,
    ScoringData,
    TierValidationData,
)

logger = logging.getLogger(__name__)


def criteria_to_step_data(
    criteria: Criteria,
    field_kind: FieldKind,
    tier: Tier | None,
    numeric_kind: NumericKind | None = None,
    unit: str = "",
) -> CriteriaData | None:
    """
    Reverse-map stored criteria, None when the condition has no input form.

    A description equal to the one the wizard would generate is treated as
    generated, so it follows later unit changes.
    """
    try:
        inputs = condition_to_inputs(criteria.condition, field_kind)
    except ValueError:
        logger.warning(f"Criteria '{criteria.description}' cannot be edited in the wizard")
        return None

    try:
        generated = build_condition(
            field_kind,
            inputs.comparison,
            inputs.raw_value,
            inputs.raw_value2,
            numeric_kind=numeric_kind or NumericKind.decimal,
            unit=unit,
            tier=tier,
            inclusive=inputs.inclusive,
        ).description
    except (ConditionParseError, ValueError):
        generated = None
    return CriteriaData(
        tier=tier,
        comparison=inputs.comparison,
        raw_value=inputs.raw_value,
        raw_value2=inputs.raw_value2,
        inclusive=inputs.inclusive,
        description=criteria.description,
        custom_description=criteria.description != generated,
        condition=criteria.condition,
    )


def _field_config(habit: Habit) -> FieldConfigData:
    field_type = habit.field_type
    return FieldConfigData(
        field_kind=field_type.field_kind,
        numeric_kind=field_type.numeric_kind,
        unit=field_type.unit or "",
        min=field_type.min,
        max=field_type.max,
        multiline=bool(field_type.multiline),
        direction=(
            habit.direction or Direction.neutral
            if habit.habit_kind == HabitKind.informational
            else None
        ),
    )


def seed_state_from_habit(habit: Habit) -> WizardState:
    """
    Построить WizardState из существующей привычки.

    Args:
        habit: Привычка для редактирования

    Returns:
        WizardState с курсором на первом шаге
    """
    state = WizardState(habit_kind=habit.habit_kind, editing_id=habit.id)
    field_kind = habit.field_type.field_kind

    state = state.set_step(
        StepKind.basic_info,
        BasicInfoData(
            title=habit.title,
            description=habit.description,
            habit_kind=habit.habit_kind,
            prompt=habit.prompt,
            help_text=habit.help_text,
        ),
    )

    if habit.habit_kind in (HabitKind.elastic, HabitKind.informational):
        state = state.set_step(StepKind.field_config, _field_config(habit))
    if habit.habit_kind == HabitKind.checklist and habit.field_type.checklist_id:
        state = state.set_step(
            StepKind.checklist, ChecklistData(checklist_id=habit.field_type.checklist_id)
        )
    if habit.habit_kind != HabitKind.informational:
        state = state.set_step(
            StepKind.scoring,
            ScoringData(
                mode=habit.scoring_mode,
                direction=habit.direction if habit.habit_kind == HabitKind.elastic else None,
            ),
        )

    if habit.scoring_mode == ScoringMode.automatic:
        if habit.habit_kind == HabitKind.simple and habit.criteria is not None:
            data = criteria_to_step_data(habit.criteria, FieldKind.boolean, None)
            if data is not None:
                state = state.set_step(StepKind.criteria, data)
        elif habit.habit_kind == HabitKind.elastic:
            for tier, criteria in habit.tier_criteria().items():
                if criteria is None:
                    continue
                data = criteria_to_step_data(
                    criteria,
                    field_kind,
                    tier,
                    numeric_kind=habit.field_type.numeric_kind,
                    unit=habit.field_type.unit or "",
                )
                if data is not None:
                    state = state.set_step(TIER_STEPS[tier], data)

    if requires_tier_validation(habit.habit_kind, habit.scoring_mode, field_kind):
        tiers = habit.tier_criteria()
        result = validate_tier_order(
            *(c.condition if c else None for c in tiers.values()), field_kind=field_kind
        )
        if result.ok or not config.STRICT_TIER_ORDERING:
            state = state.set_step(
                StepKind.tier_validation,
                TierValidationData(
                    ok=result.ok, violations=result.violations, acknowledged=not result.ok
                ),
            )
        else:
            # strict ordering: the step stays open until the tiers are fixed
            logger.warning(
                f"Habit '{habit.title}' has misordered tiers: {list(result.violations)}"
            )

    plan = plan_for_state(state)
    for step in plan.required_steps():
        if state.get_step(step) is not None:
            state = state.mark_completed(step)

    logger.info(f"Wizard state seeded from habit '{habit.title}' ({habit.id})")
    return state.set_current_step(plan.first)
