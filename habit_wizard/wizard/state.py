"""
Wizard State Container.

Чистое хранилище: данные шагов, курсор и набор завершённых шагов.
Никакой логики валидации здесь нет. Каждая операция возвращает новый
WizardState, исходный не меняется.
"""

from dataclasses import dataclass, field, replace
from typing import TypeVar

from habit_wizard.models import HabitKind
from habit_wizard.wizard.states import StepKind
from habit_wizard.wizard.step_data import StepData

T = TypeVar("T")


@dataclass(frozen=True)
class WizardState:
    habit_kind: HabitKind
    current_step: StepKind = StepKind.basic_info
    step_data: dict[StepKind, StepData] = field(default_factory=dict)
    completed_steps: frozenset[StepKind] = frozenset()
    # id of the habit being edited, None for a new habit
    editing_id: str | None = None

    def get_step(self, kind: StepKind) -> StepData | None:
        return self.step_data.get(kind)

    def get_typed(self, kind: StepKind, data_type: type[T]) -> T | None:
        """get_step() narrowed to the expected StepData variant."""
        data = self.step_data.get(kind)
        if isinstance(data, data_type):
            return data
        return None

    def set_step(self, kind: StepKind, data: StepData) -> "WizardState":
        return replace(self, step_data={**self.step_data, kind: data})

    def clear_step(self, kind: StepKind) -> "WizardState":
        if kind not in self.step_data:
            return self
        step_data = {k: v for k, v in self.step_data.items() if k != kind}
        return replace(self, step_data=step_data)

    def mark_completed(self, kind: StepKind) -> "WizardState":
        return replace(self, completed_steps=self.completed_steps | {kind})

    def mark_incomplete(self, kind: StepKind) -> "WizardState":
        return replace(self, completed_steps=self.completed_steps - {kind})

    def is_completed(self, kind: StepKind) -> bool:
        return kind in self.completed_steps

    def set_current_step(self, kind: StepKind) -> "WizardState":
        return replace(self, current_step=kind)
