"""
Исключения и ошибки валидации визарда.

AICODE-NOTE: ValidationError здесь - обычная запись для показа пользователю,
а не исключение. Исключения (HabitWizardError и наследники) пробрасываются
только для фатальных ситуаций и ошибок ввода-вывода.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from habit_wizard.wizard.states import StepKind


@dataclass(frozen=True)
class ValidationError:
    """Inline error shown on a wizard step."""

    step: "StepKind"
    message: str
    field: str | None = None

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class HabitWizardError(Exception):
    """Base class for every exception raised by habit_wizard."""


class ConditionParseError(HabitWizardError, ValueError):
    """A raw criteria value could not be turned into a condition."""

    def __init__(self, raw: str, message: str):
        self.raw = raw
        super().__init__(message)


class MissingStepDataError(HabitWizardError, AssertionError):
    """A step required by the current plan has no collected data."""

    def __init__(self, step: "StepKind"):
        self.step = step
        super().__init__(f"required step '{step.value}' has no data")


class SchemaValidationError(HabitWizardError):
    """The schema failed strict validation and was not written."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))
