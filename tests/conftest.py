import os
import sys
from typing import Any

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from habit_wizard.models import HabitKind  # noqa: E402
from habit_wizard.wizard.events import Submit, WizardEvent  # noqa: E402
from habit_wizard.wizard.handlers import build_handlers  # noqa: E402
from habit_wizard.wizard.handlers.base import StepOutcome  # noqa: E402
from habit_wizard.wizard.prompts import StepPrompt  # noqa: E402
from habit_wizard.wizard.state import WizardState  # noqa: E402
from habit_wizard.wizard.states import StepKind  # noqa: E402


class ScriptedTerminal:
    """Terminal that replays a fixed list of events and records every prompt."""

    def __init__(self, events: list[WizardEvent | dict[str, Any]]):
        self.events = list(events)
        self.prompts: list[StepPrompt] = []
        self.messages: list[tuple[str, str]] = []

    async def next_event(self, prompt: StepPrompt) -> WizardEvent:
        self.prompts.append(prompt)
        if not self.events:
            raise AssertionError(f"no scripted event left for step {prompt.step.value}")
        event = self.events.pop(0)
        if isinstance(event, dict):
            return Submit(values=event)
        return event

    async def show_message(self, text: str, style: str = "info") -> None:
        self.messages.append((text, style))

    @property
    def steps_seen(self) -> list[StepKind]:
        return [p.step for p in self.prompts]


def complete_step(state: WizardState, step: StepKind, values: dict[str, Any]) -> WizardState:
    """Submit values to the real handler and require success."""
    handler = build_handlers()[step]
    result = handler.submit(values, state)
    assert result.outcome == StepOutcome.completed, result.errors
    return result.state


def elastic_values(
    tiers: tuple[str, str, str] = ("15", "30", "60"),
    field_kind: str = "numeric",
    comparison: str = "greater_than_or_equal",
    unit: str = "minutes",
) -> list[tuple[StepKind, dict[str, Any]]]:
    """Step answers for an automatic elastic habit ("Exercise Duration")."""
    field_values: dict[str, Any] = {"field_kind": field_kind}
    if field_kind == "numeric":
        field_values.update({"numeric_kind": "unsigned_int", "unit": unit})
    steps = [
        (StepKind.basic_info, {"title": "Exercise Duration", "description": "Move every day"}),
        (StepKind.field_config, field_values),
        (StepKind.scoring, {"mode": "automatic", "direction": "higher_better"}),
    ]
    for step, raw in zip(
        (StepKind.mini_criteria, StepKind.midi_criteria, StepKind.maxi_criteria), tiers
    ):
        steps.append((step, {"comparison": comparison, "value": raw}))
    return steps


def build_state(
    habit_kind: HabitKind, answers: list[tuple[StepKind, dict[str, Any]]]
) -> WizardState:
    state = WizardState(habit_kind=habit_kind)
    for step, values in answers:
        state = complete_step(state, step, values)
    return state


class StateBuilder:
    """Helpers exposed to tests through the `builder` fixture."""

    complete = staticmethod(complete_step)
    build = staticmethod(build_state)
    elastic_values = staticmethod(elastic_values)


@pytest.fixture
def builder() -> type[StateBuilder]:
    return StateBuilder


@pytest.fixture
def scripted_terminal():
    """Factory: scripted_terminal([...events]) -> ScriptedTerminal."""
    return ScriptedTerminal


@pytest.fixture
def elastic_state() -> WizardState:
    """Exercise Duration: tiers 15/30/60 minutes, validation passed."""
    state = build_state(HabitKind.elastic, elastic_values())
    return complete_step(state, StepKind.tier_validation, {})


@pytest.fixture(autouse=True)
def lenient_tier_ordering(monkeypatch):
    """Tests start from the default (advisory) tier ordering."""
    from habit_wizard.config import config

    monkeypatch.setattr(config, "STRICT_TIER_ORDERING", False)
    monkeypatch.setattr(config, "CHECKLIST_IDS", [])
    monkeypatch.setattr(config, "TITLE_MAX_LENGTH", 100)
    monkeypatch.setattr(config, "DEFAULT_UNIT", "units")
