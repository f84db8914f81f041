"""
Описание формы шага, которую рисует терминал.

Хендлер строит StepPrompt из состояния при каждой отрисовке;
терминал возвращает ответы одним событием Submit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from habit_wizard.core.errors import ValidationError
from habit_wizard.wizard.states import StepKind


class PromptFieldKind(str, Enum):
    text = "text"
    multiline = "multiline"
    select = "select"
    confirm = "confirm"
    note = "note"  # read-only information, no answer


@dataclass(frozen=True)
class PromptOption:
    value: str
    label: str
    description: str = ""


@dataclass(frozen=True)
class PromptField:
    key: str
    kind: PromptFieldKind
    label: str
    description: str = ""
    options: tuple[PromptOption, ...] = ()
    default: Any = None
    required: bool = False
    # (key of an earlier field, values of that field that make this one visible)
    visible_when: tuple[str, tuple[str, ...]] | None = None

    def is_visible(self, answers: dict[str, Any]) -> bool:
        if self.visible_when is None:
            return True
        key, values = self.visible_when
        answer = answers.get(key)
        if isinstance(answer, Enum):
            answer = answer.value
        return answer in values

    def option_values(self) -> tuple[str, ...]:
        return tuple(o.value for o in self.options)


@dataclass(frozen=True)
class StepPrompt:
    step: StepKind
    title: str
    description: str
    position: int
    total: int
    fields: tuple[PromptField, ...] = ()
    errors: tuple[ValidationError, ...] = ()
    can_go_back: bool = False
    can_go_forward: bool = False
    # every step of the current plan, in order
    steps: tuple[StepKind, ...] = ()

    def field_errors(self, key: str) -> list[ValidationError]:
        return [e for e in self.errors if e.field == key]

    def step_errors(self) -> list[ValidationError]:
        return [e for e in self.errors if e.field is None]


@dataclass(frozen=True)
class RenderContext:
    """Per-render information the handler cannot derive from state alone."""

    position: int = 1
    total: int = 1
    can_go_back: bool = False
    can_go_forward: bool = False
    steps: tuple[StepKind, ...] = ()
    errors: tuple[ValidationError, ...] = ()
    draft: dict[str, Any] = field(default_factory=dict)
