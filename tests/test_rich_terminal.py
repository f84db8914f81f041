"""Tests for the rich terminal: command parsing and field prompting."""

import io

import pytest
from rich.console import Console

from habit_wizard.terminal import rich_terminal
from habit_wizard.terminal.rich_terminal import RichTerminal, parse_command
from habit_wizard.wizard.events import Cancel, GoBack, GoForward, JumpTo, Resize, Submit
from habit_wizard.wizard.prompts import PromptField, PromptFieldKind, PromptOption, StepPrompt
from habit_wizard.wizard.states import StepKind

S = StepKind

PROMPT = StepPrompt(
    step=S.scoring,
    title="Scoring",
    description="How is this habit scored?",
    position=2,
    total=3,
    fields=(
        PromptField(
            key="mode",
            kind=PromptFieldKind.select,
            label="Scoring mode",
            options=(
                PromptOption("manual", "Manual"),
                PromptOption("automatic", "Automatic"),
            ),
            default="manual",
        ),
        PromptField(
            key="direction",
            kind=PromptFieldKind.text,
            label="Direction",
            visible_when=("mode", ("automatic",)),
        ),
        PromptField(key="note", kind=PromptFieldKind.note, label="Tip", description="[info]"),
        PromptField(key="sure", kind=PromptFieldKind.confirm, label="Sure?", default=True),
    ),
    steps=(S.basic_info, S.scoring, S.confirmation),
)


@pytest.fixture
def answers(monkeypatch):
    """
    Queue of answers returned by Prompt.ask.

    "" falls back to the default, an exception class is raised and a
    function is called (to simulate a signal arriving mid-prompt).
    """
    queue: list = []

    def fake_ask(label, **kwargs):
        answer = queue.pop(0)
        if isinstance(answer, type) and issubclass(answer, BaseException):
            raise answer()
        if callable(answer):
            return answer()
        if answer == "":
            return kwargs.get("default", "")
        return answer

    monkeypatch.setattr(rich_terminal.Prompt, "ask", fake_ask)
    return queue


@pytest.fixture
def terminal():
    return RichTerminal(Console(file=io.StringIO(), width=100))


@pytest.mark.parametrize(
    "raw,event",
    [
        (":back", GoBack()),
        (" :b ", GoBack()),
        (":next", GoForward()),
        (":cancel", Cancel()),
        (":jump 3", JumpTo(step=S.confirmation)),
        (":jump 9", None),
        (":jump x", None),
        (":dance", None),
        ("back", None),
        ("", None),
    ],
)
def test_parse_command(raw, event) -> None:
    assert parse_command(raw, PROMPT) == event


@pytest.mark.asyncio
async def test_submit_collects_visible_answers(terminal, answers) -> None:
    answers.extend(["", ""])

    event = await terminal.next_event(PROMPT)

    assert event == Submit(values={"mode": "manual", "sure": True})


@pytest.mark.asyncio
async def test_select_by_number_reveals_dependent_field(terminal, answers) -> None:
    answers.extend(["2", "  higher_better ", "x", "n"])

    event = await terminal.next_event(PROMPT)

    assert event.values == {"mode": "automatic", "direction": "higher_better", "sure": False}
    assert "Please answer y or n" in terminal.console.file.getvalue()


@pytest.mark.asyncio
async def test_select_by_value_after_bad_choice(terminal, answers) -> None:
    answers.extend(["7", "Automatic", "", "y"])

    event = await terminal.next_event(PROMPT)

    assert event.values["mode"] == "automatic"
    assert "Please choose 1-2" in terminal.console.file.getvalue()


@pytest.mark.asyncio
async def test_command_inside_field_navigates(terminal, answers) -> None:
    answers.append(":back")
    assert await terminal.next_event(PROMPT) == GoBack()


@pytest.mark.asyncio
@pytest.mark.parametrize("interrupt", [KeyboardInterrupt, EOFError])
async def test_interrupt_cancels(terminal, answers, interrupt) -> None:
    answers.append(interrupt)
    assert await terminal.next_event(PROMPT) == Cancel()


@pytest.mark.asyncio
async def test_resize_is_reported_once(terminal, answers) -> None:
    terminal._on_resize(None, None)
    answers.extend(["", ""])

    first = await terminal.next_event(PROMPT)
    second = await terminal.next_event(PROMPT)

    assert isinstance(first, Resize)
    assert isinstance(second, Submit)


@pytest.mark.asyncio
async def test_resize_while_asking_redraws_step(terminal, answers) -> None:
    """A resize in the middle of a step interrupts it instead of waiting."""
    answers.extend(["2", lambda: terminal._on_resize(None, None), "", ""])

    interrupted = await terminal.next_event(PROMPT)
    redrawn = await terminal.next_event(PROMPT)

    assert isinstance(interrupted, Resize)
    assert redrawn == Submit(values={"mode": "manual", "sure": True})
    assert terminal.console.file.getvalue().count("Step 2 of 3") == 2


@pytest.mark.asyncio
async def test_markup_in_text_is_escaped(terminal, answers) -> None:
    answers.extend(["", ""])

    await terminal.next_event(PROMPT)
    await terminal.show_message("[bold]not bold[/bold]", style="error")

    output = terminal.console.file.getvalue()
    assert "[info]" in output
    assert "[bold]not bold[/bold]" in output
