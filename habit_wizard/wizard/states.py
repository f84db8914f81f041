"""
Шаги визарда создания привычки.

Основные потоки:
- Simple: basic_info → scoring → [criteria] → confirmation
- Elastic: basic_info → field_config → scoring → [mini → midi → maxi → tier_validation] → confirmation
- Informational: basic_info → field_config → confirmation
- Checklist: basic_info → checklist → scoring → confirmation

AICODE-NOTE: данные шагов хранятся по StepKind, а не по номеру шага:
план меняется по ходу заполнения, номер вычисляется только при отрисовке.
"""

from enum import Enum

from habit_wizard.models import Tier


class StepKind(str, Enum):
    basic_info = "basic_info"
    field_config = "field_config"
    checklist = "checklist"
    scoring = "scoring"
    criteria = "criteria"
    mini_criteria = "mini_criteria"
    midi_criteria = "midi_criteria"
    maxi_criteria = "maxi_criteria"
    tier_validation = "tier_validation"
    confirmation = "confirmation"


STEP_TITLES: dict[StepKind, str] = {
    StepKind.basic_info: "Basic Information",
    StepKind.field_config: "Field Configuration",
    StepKind.checklist: "Checklist",
    StepKind.scoring: "Scoring",
    StepKind.criteria: "Criteria",
    StepKind.mini_criteria: "Mini Criteria",
    StepKind.midi_criteria: "Midi Criteria",
    StepKind.maxi_criteria: "Maxi Criteria",
    StepKind.tier_validation: "Criteria Validation",
    StepKind.confirmation: "Confirmation",
}

TIER_STEPS: dict[Tier, StepKind] = {
    Tier.mini: StepKind.mini_criteria,
    Tier.midi: StepKind.midi_criteria,
    Tier.maxi: StepKind.maxi_criteria,
}

STEP_TIERS: dict[StepKind, Tier] = {step: tier for tier, step in TIER_STEPS.items()}
