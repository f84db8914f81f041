"""
Регистрация обработчиков шагов.

Каждому StepKind соответствует ровно один обработчик; план выбирает шаг,
реестр - обработчик для него.
"""

from habit_wizard.wizard.handlers.base import StepHandler, StepOutcome, StepResult
from habit_wizard.wizard.handlers.basic_info import BasicInfoHandler
from habit_wizard.wizard.handlers.checklist import ChecklistHandler
from habit_wizard.wizard.handlers.confirmation import ConfirmationHandler
from habit_wizard.wizard.handlers.criteria import CriteriaHandler
from habit_wizard.wizard.handlers.field_config import FieldConfigHandler
from habit_wizard.wizard.handlers.scoring import ScoringHandler
from habit_wizard.wizard.handlers.tier_validation import TierValidationHandler
from habit_wizard.wizard.states import StepKind


def build_handlers(checklist_ids: list[str] | None = None) -> dict[StepKind, StepHandler]:
    """Один экземпляр обработчика на каждый вид шага."""
    return {
        StepKind.basic_info: BasicInfoHandler(),
        StepKind.field_config: FieldConfigHandler(),
        StepKind.checklist: ChecklistHandler(checklist_ids),
        StepKind.scoring: ScoringHandler(),
        StepKind.criteria: CriteriaHandler(StepKind.criteria),
        StepKind.mini_criteria: CriteriaHandler(StepKind.mini_criteria),
        StepKind.midi_criteria: CriteriaHandler(StepKind.midi_criteria),
        StepKind.maxi_criteria: CriteriaHandler(StepKind.maxi_criteria),
        StepKind.tier_validation: TierValidationHandler(),
        StepKind.confirmation: ConfirmationHandler(),
    }


__all__ = [
    "StepHandler",
    "StepOutcome",
    "StepResult",
    "build_handlers",
]
