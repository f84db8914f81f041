"""
Граница с терминалом.

Ядро визарда знает о терминале только этот протокол: отдать форму шага
и дождаться следующего события (ответы, навигация, отмена, resize).
"""

from typing import Protocol

from habit_wizard.wizard.events import WizardEvent
from habit_wizard.wizard.prompts import StepPrompt


class Terminal(Protocol):
    async def next_event(self, prompt: StepPrompt) -> WizardEvent:
        """Show the step and wait for the user's next action."""
        ...

    async def show_message(self, text: str, style: str = "info") -> None:
        """Show a one-off message (style: info, success, warning, error)."""
        ...
