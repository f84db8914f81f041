"""
Терминал на rich: панель шага, вопросы по полям, команды навигации.

В любом поле можно ввести команду:
    :back      предыдущий шаг
    :next      следующий шаг (если текущий уже заполнен)
    :jump N    перейти к шагу N
    :cancel    отменить визард
Ctrl-C и EOF тоже отменяют визард.

AICODE-NOTE: вопросы задаются блокирующе в потоке event loop - других
задач у цикла нет. На время ввода SIGINT возвращается к стандартному
обработчику, иначе asyncio.run перехватит Ctrl-C и input() не прервётся.
SIGWINCH во время вопроса прерывает ввод и возвращает Resize: шаг
перерисовывается, уже введённые ответы этого шага не сохраняются.
"""

import logging
import signal
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from habit_wizard.wizard.events import (
    Cancel,
    GoBack,
    GoForward,
    JumpTo,
    Resize,
    Submit,
    WizardEvent,
)
from habit_wizard.wizard.formatters import fmt
from habit_wizard.wizard.prompts import PromptField, PromptFieldKind, StepPrompt

logger = logging.getLogger(__name__)

HELP_LINE = "Commands: :back  :next  :jump N  :cancel"

MESSAGE_STYLES = {
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


class _Navigate(Exception):
    """Raised from inside a field prompt when the user typed a command."""

    def __init__(self, event: WizardEvent):
        self.event = event
        super().__init__(repr(event))


def parse_command(raw: str, prompt: StepPrompt) -> WizardEvent | None:
    """
    Turn a ':command' into an event, None for ordinary input.

    Examples:
        >>> parse_command(":back", prompt)
        GoBack()
        >>> parse_command(":jump 2", prompt)
        JumpTo(step=<second step of the plan>)
    """
    text = (raw or "").strip()
    if not text.startswith(":"):
        return None

    command, _, argument = text[1:].partition(" ")
    command = command.lower()
    if command in ("b", "back"):
        return GoBack()
    if command in ("n", "next"):
        return GoForward()
    if command in ("q", "cancel", "quit"):
        return Cancel()
    if command in ("j", "jump"):
        argument = argument.strip()
        if argument.isdigit() and 1 <= int(argument) <= len(prompt.steps):
            return JumpTo(step=prompt.steps[int(argument) - 1])
    return None


class RichTerminal:
    """Terminal implementation on top of rich prompts."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self._resized = False
        self._asking = False
        if hasattr(signal, "SIGWINCH"):
            try:
                signal.signal(signal.SIGWINCH, self._on_resize)
            except ValueError:
                # not the main thread: resize events are simply not reported
                logger.debug("SIGWINCH handler not installed")

    def _on_resize(self, signum, frame) -> None:
        if self._asking:
            # interrupts the blocking prompt, the step is redrawn
            self._asking = False
            raise _Navigate(self._resize_event())
        self._resized = True

    def _resize_event(self) -> Resize:
        width, height = self.console.size
        return Resize(width=width, height=height)

    # ----------------------------------------------------------------- protocol

    async def next_event(self, prompt: StepPrompt) -> WizardEvent:
        if self._resized:
            self._resized = False
            return self._resize_event()
        return self._ask_step(prompt)

    async def show_message(self, text: str, style: str = "info") -> None:
        color = MESSAGE_STYLES.get(style, "white")
        self.console.print(f"[{color}]{fmt.text(text)}[/{color}]")

    # ------------------------------------------------------------------ drawing

    def _render_header(self, prompt: StepPrompt) -> None:
        body = fmt.text(prompt.description) if prompt.description else ""
        self.console.print("")
        self.console.print(
            Panel.fit(
                body or fmt.dim(HELP_LINE),
                title=fmt.bold(f"Step {prompt.position} of {prompt.total}: {prompt.title}"),
                subtitle=fmt.dim(HELP_LINE) if body else None,
                box=box.ROUNDED,
                border_style="cyan",
            )
        )
        for error in prompt.step_errors():
            self.console.print(fmt.error(f"✗ {error.message}"))

    def _ask_step(self, prompt: StepPrompt) -> WizardEvent:
        previous_handler = signal.getsignal(signal.SIGINT)
        signal.signal(signal.SIGINT, signal.default_int_handler)
        self._asking = True
        try:
            self._render_header(prompt)
            answers: dict[str, Any] = {}
            for field in prompt.fields:
                if not field.is_visible(answers):
                    continue
                for error in prompt.field_errors(field.key):
                    self.console.print(fmt.error(f"✗ {field.label}: {error.message}"))
                if field.kind == PromptFieldKind.note:
                    self._show_note(field)
                    continue
                answers[field.key] = self._ask_field(field, prompt)
            return Submit(values=answers)
        except _Navigate as nav:
            return nav.event
        except (KeyboardInterrupt, EOFError):
            self.console.print("")
            return Cancel()
        finally:
            self._asking = False
            signal.signal(signal.SIGINT, previous_handler)

    def _show_note(self, field: PromptField) -> None:
        self.console.print(fmt.bold(field.label))
        if field.description:
            self.console.print(fmt.text(field.description))

    # ------------------------------------------------------------------- fields

    def _ask_raw(self, label: str, prompt: StepPrompt, default: str | None = None) -> str:
        if default:
            raw = Prompt.ask(label, default=default, console=self.console)
        else:
            raw = Prompt.ask(label, console=self.console, default="", show_default=False)
        event = parse_command(raw, prompt)
        if event is not None:
            raise _Navigate(event)
        return raw

    def _ask_field(self, field: PromptField, prompt: StepPrompt) -> Any:
        label = fmt.text(field.label)
        if field.description and field.kind != PromptFieldKind.select:
            label = f"{label} {fmt.dim(f'({field.description})')}"

        if field.kind == PromptFieldKind.text:
            default = "" if field.default is None else str(field.default)
            return self._ask_raw(label, prompt, default).strip()
        if field.kind == PromptFieldKind.multiline:
            return self._ask_multiline(label, field, prompt)
        if field.kind == PromptFieldKind.select:
            return self._ask_select(label, field, prompt)
        if field.kind == PromptFieldKind.confirm:
            return self._ask_confirm(label, field, prompt)
        raise ValueError(f"unsupported prompt field kind: {field.kind!r}")

    def _ask_multiline(self, label: str, field: PromptField, prompt: StepPrompt) -> str:
        self.console.print(f"{label} {fmt.dim('(finish with an empty line)')}")
        if field.default:
            self.console.print(fmt.dim(f"current: {field.default}"))
        lines = []
        while True:
            line = self._ask_raw(">", prompt)
            if not line:
                break
            lines.append(line)
        if not lines and field.default:
            return str(field.default)
        return "\n".join(lines)

    def _ask_select(self, label: str, field: PromptField, prompt: StepPrompt) -> str:
        self.console.print(fmt.bold(field.label))
        default_index = None
        for i, option in enumerate(field.options, start=1):
            line = f"  {i}. {fmt.text(option.label)}"
            if option.description:
                line += f" {fmt.dim('- ' + option.description)}"
            self.console.print(line)
            if option.value == field.default:
                default_index = str(i)

        while True:
            raw = self._ask_raw("Choose", prompt, default_index).strip()
            if raw.isdigit() and 1 <= int(raw) <= len(field.options):
                return field.options[int(raw) - 1].value
            for option in field.options:
                if raw.lower() in (option.value.lower(), option.label.lower()):
                    return option.value
            self.console.print(fmt.error(f"Please choose 1-{len(field.options)}"))

    def _ask_confirm(self, label: str, field: PromptField, prompt: StepPrompt) -> bool:
        default = "y" if field.default else "n"
        while True:
            raw = self._ask_raw(f"{label} [y/n]", prompt, default).strip().lower()
            if raw in ("y", "yes"):
                return True
            if raw in ("n", "no"):
                return False
            self.console.print(fmt.error("Please answer y or n"))
