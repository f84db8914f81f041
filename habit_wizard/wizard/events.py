"""
Input events the orchestrator receives from the terminal.
"""

from dataclasses import dataclass, field
from typing import Any, Union

from habit_wizard.wizard.states import StepKind


@dataclass(frozen=True)
class Submit:
    """All fields of the current step were answered."""

    values: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GoBack:
    pass


@dataclass(frozen=True)
class GoForward:
    pass


@dataclass(frozen=True)
class JumpTo:
    step: StepKind


@dataclass(frozen=True)
class Cancel:
    """Interrupt: discard everything and leave the wizard."""


@dataclass(frozen=True)
class Resize:
    width: int = 0
    height: int = 0


WizardEvent = Union[Submit, GoBack, GoForward, JumpTo, Cancel, Resize]
