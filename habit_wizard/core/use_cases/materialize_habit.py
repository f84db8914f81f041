"""
Materialize Habit Use Case - сборка итоговой записи Habit из состояния визарда.

AICODE-NOTE: читает WizardState один раз, ничего не пишет.
Отсутствие данных у шага, который требует текущий план, - ошибка
программиста (навигация не должна была пустить на подтверждение),
поэтому бросается MissingStepDataError, а не возвращается сообщение.
"""

import logging

from habit_wizard.core.domain.criteria_rules import build_checklist_condition
from habit_wizard.core.domain.flow_rules import (
    effective_scoring_mode,
    plan_for_state,
)
from habit_wizard.core.errors import MissingStepDataError
from habit_wizard.models import (
    Criteria,
    Direction,
    FieldKind,
    FieldType,
    Habit,
    HabitKind,
    ScoringMode,
)
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import StepKind
from habit_wizard.wizard.step_data import (
    BasicInfoData,
    ChecklistData,
    CriteriaData,
    FieldConfigData,
    ScoringData,
)

logger = logging.getLogger(__name__)

DEFAULT_PROMPTS: dict[HabitKind, str] = {
    HabitKind.simple: "Did you accomplish this habit today?",
    HabitKind.checklist: "Complete your checklist items today",
}

FIELD_PROMPTS: dict[FieldKind, str] = {
    FieldKind.boolean: "Did you do this today?",
    FieldKind.text: "Any notes for today?",
    FieldKind.numeric: "How many {unit} today?",
    FieldKind.time: "What time today?",
    FieldKind.duration: "How long today?",
}


def default_prompt(habit_kind: HabitKind, field_type: FieldType) -> str:
    """
    Prompt used when the user left it blank.

    Examples:
        >>> default_prompt(HabitKind.simple, FieldType(type="boolean"))
        "Did you accomplish this habit today?"
        >>> default_prompt(HabitKind.elastic, FieldType(type="unsigned_int", unit="pages"))
        "How many pages today?"
    """
    if habit_kind in DEFAULT_PROMPTS:
        return DEFAULT_PROMPTS[habit_kind]
    template = FIELD_PROMPTS.get(field_type.field_kind, "How did it go today?")
    return template.format(unit=field_type.unit or "units")


def _require(state: WizardState, step: StepKind, data_type: type):
    data = state.get_typed(step, data_type)
    if data is None:
        raise MissingStepDataError(step)
    return data


def _criteria(data: CriteriaData) -> Criteria:
    return Criteria(description=data.description, condition=data.condition)


def build_field_type(state: WizardState) -> FieldType:
    if state.habit_kind == HabitKind.simple:
        return FieldType(type="boolean")
    if state.habit_kind == HabitKind.checklist:
        checklist = _require(state, StepKind.checklist, ChecklistData)
        return FieldType(type="checklist", checklist_id=checklist.checklist_id)

    field_config: FieldConfigData = _require(state, StepKind.field_config, FieldConfigData)
    kind = field_config.field_kind
    if kind == FieldKind.numeric:
        return FieldType(
            type=field_config.numeric_kind.value,
            unit=field_config.unit or None,
            min=field_config.min,
            max=field_config.max,
        )
    if kind == FieldKind.text:
        return FieldType(type="text", multiline=field_config.multiline)
    if kind in (FieldKind.boolean, FieldKind.time, FieldKind.duration):
        return FieldType(type=kind.value)
    raise ValueError(f"unsupported field kind: {kind!r}")


def _direction(state: WizardState) -> Direction | None:
    if state.habit_kind == HabitKind.informational:
        field_config = state.get_typed(StepKind.field_config, FieldConfigData)
        if field_config and field_config.direction:
            return field_config.direction
        return Direction.neutral
    if state.habit_kind == HabitKind.elastic:
        scoring = state.get_typed(StepKind.scoring, ScoringData)
        return scoring.direction if scoring else None
    return None


def materialize_habit(state: WizardState) -> Habit:
    """
    Собрать Habit из полностью заполненного состояния.

    Args:
        state: Состояние визарда после подтверждения

    Returns:
        Habit

    Raises:
        MissingStepDataError: шаг из текущего плана без данных
    """
    plan = plan_for_state(state)
    for step in plan.required_steps():
        if state.get_step(step) is None:
            logger.error(f"Cannot materialize habit: step {step.value} has no data")
            raise MissingStepDataError(step)

    basic: BasicInfoData = _require(state, StepKind.basic_info, BasicInfoData)
    field_type = build_field_type(state)
    scoring_mode = effective_scoring_mode(state) or ScoringMode.manual

    criteria = None
    tiers: dict[str, Criteria] = {}
    if scoring_mode == ScoringMode.automatic:
        if state.habit_kind == HabitKind.checklist:
            built = build_checklist_condition()
            criteria = Criteria(description=built.description, condition=built.condition)
        elif StepKind.criteria in plan:
            criteria = _criteria(_require(state, StepKind.criteria, CriteriaData))
        elif StepKind.mini_criteria in plan:
            for step, key in (
                (StepKind.mini_criteria, "mini_criteria"),
                (StepKind.midi_criteria, "midi_criteria"),
                (StepKind.maxi_criteria, "maxi_criteria"),
            ):
                tiers[key] = _criteria(_require(state, step, CriteriaData))

    habit = Habit(
        id=state.editing_id,
        title=basic.title,
        description=basic.description,
        habit_kind=state.habit_kind,
        field_type=field_type,
        scoring_mode=scoring_mode,
        direction=_direction(state),
        prompt=basic.prompt or default_prompt(state.habit_kind, field_type),
        help_text=basic.help_text,
        criteria=criteria,
        **tiers,
    )
    logger.info(
        f"Habit materialized: '{habit.title}' ({habit.habit_kind.value}, "
        f"{habit.scoring_mode.value})"
    )
    return habit
