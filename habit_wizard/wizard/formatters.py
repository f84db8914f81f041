"""
Rich markup formatter and habit preview rendering.

Автоматически экранирует пользовательский текст, чтобы квадратные скобки
в названиях привычек не превращались в теги rich.
"""

from rich.markup import escape

from habit_wizard.models import Criteria, Habit
from habit_wizard.wizard.options import (
    DIRECTION_LABELS,
    FIELD_KIND_LABELS,
    HABIT_KIND_LABELS,
    NUMERIC_KIND_LABELS,
)


class RichMarkupFormatter:
    """
    Rich console markup with automatic escaping.

    Usage:
        from habit_wizard.wizard.formatters import fmt

        console.print(f"Habit: {fmt.bold(habit.title)}")
    """

    @staticmethod
    def bold(*parts: str | int | float) -> str:
        """
        Format text as bold with auto-escaping.

        Example:
            fmt.bold("Habit:", "[daily]")  # "[bold]Habit: \\[daily][/bold]"
        """
        return f"[bold]{RichMarkupFormatter.text(*parts)}[/bold]"

    @staticmethod
    def italic(*parts: str | int | float) -> str:
        return f"[italic]{RichMarkupFormatter.text(*parts)}[/italic]"

    @staticmethod
    def dim(*parts: str | int | float) -> str:
        return f"[dim]{RichMarkupFormatter.text(*parts)}[/dim]"

    @staticmethod
    def error(*parts: str | int | float) -> str:
        return f"[red]{RichMarkupFormatter.text(*parts)}[/red]"

    @staticmethod
    def warning(*parts: str | int | float) -> str:
        return f"[yellow]{RichMarkupFormatter.text(*parts)}[/yellow]"

    @staticmethod
    def text(*parts: str | int | float) -> str:
        """Plain text with automatic escaping."""
        return " ".join(escape(str(p)) for p in parts)


# Global singleton instance for convenient import
fmt = RichMarkupFormatter()


def _criteria_line(criteria: Criteria | None) -> str:
    return criteria.description if criteria else "-"


def habit_summary(habit: Habit) -> list[tuple[str, str]]:
    """
    Label/value rows describing a habit, in display order.

    Plain text: the terminal decides how to style it.
    """
    field_type = habit.field_type
    kind_label = FIELD_KIND_LABELS.get(field_type.field_kind, (field_type.type,))[0]
    if field_type.numeric_kind is not None:
        kind_label = f"{kind_label} ({NUMERIC_KIND_LABELS[field_type.numeric_kind][0]})"

    rows = [
        ("Title", habit.title),
        ("Type", HABIT_KIND_LABELS[habit.habit_kind][0]),
    ]
    if habit.description:
        rows.append(("Description", habit.description))
    rows.append(("Field", kind_label))
    if field_type.unit:
        rows.append(("Unit", field_type.unit))
    if field_type.min is not None or field_type.max is not None:
        low = "-" if field_type.min is None else str(field_type.min)
        high = "-" if field_type.max is None else str(field_type.max)
        rows.append(("Bounds", f"{low} .. {high}"))
    if field_type.multiline:
        rows.append(("Multiline", "yes"))
    if field_type.checklist_id:
        rows.append(("Checklist", field_type.checklist_id))
    rows.append(("Scoring", habit.scoring_mode.value.capitalize()))
    if habit.direction is not None:
        rows.append(("Direction", DIRECTION_LABELS[habit.direction][0]))
    if habit.prompt:
        rows.append(("Prompt", habit.prompt))
    if habit.help_text:
        rows.append(("Help text", habit.help_text))

    if habit.criteria is not None:
        rows.append(("Criteria", _criteria_line(habit.criteria)))
    for tier, criteria in habit.tier_criteria().items():
        if criteria is not None:
            rows.append((f"{tier.value.capitalize()} criteria", _criteria_line(criteria)))
    return rows


def format_habit_preview(habit: Habit) -> str:
    """Plain multi-line preview shown on the confirmation step."""
    rows = habit_summary(habit)
    width = max(len(label) for label, _ in rows)
    return "\n".join(f"{label.ljust(width)} : {value}" for label, value in rows)


def format_violations(violations: tuple[str, ...] | list[str]) -> str:
    return "\n".join(f"• {v}" for v in violations)
