"""
Точка входа Habit Wizard.

    habit-wizard add [--kind elastic] [--schema habits.json]
    habit-wizard edit <habit_id> [--schema habits.json]
"""

import argparse
import asyncio
import logging
import sys

from habit_wizard.config import config
from habit_wizard.core.errors import SchemaValidationError
from habit_wizard.core.use_cases.seed_from_habit import seed_state_from_habit
from habit_wizard.models import HabitKind
from habit_wizard.storage import schema_repo
from habit_wizard.terminal.rich_terminal import RichTerminal
from habit_wizard.wizard.middlewares.error_handler import ErrorHandlingMiddleware
from habit_wizard.wizard.orchestrator import HabitWizard

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CANCELLED = 1
EXIT_ERROR = 2


def setup_logging() -> None:
    """Настройка логов: в файл, если задан LOG_FILE, иначе в stderr."""
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        filename=config.LOG_FILE,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="habit-wizard", description="Create and edit habits interactively"
    )
    parser.add_argument(
        "--schema",
        default=None,
        help=f"Schema file (default: SCHEMA_PATH, currently {config.SCHEMA_PATH})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Create a new habit")
    add.add_argument(
        "--kind",
        choices=[k.value for k in HabitKind],
        default=HabitKind.simple.value,
        help="Habit type pre-selected on the first step",
    )

    edit = sub.add_parser("edit", help="Edit an existing habit")
    edit.add_argument("habit_id", help="ID of the habit to edit")
    return parser


async def main(argv: list[str] | None = None) -> int:
    """Запуск визарда."""
    args = build_parser().parse_args(argv)
    schema_path = args.schema or config.SCHEMA_PATH
    terminal = RichTerminal()

    try:
        if args.command == "edit":
            schema = schema_repo.load_schema(schema_path)
        else:
            schema = schema_repo.load_or_create_schema(schema_path)
    except (OSError, SchemaValidationError) as e:
        logger.error(f"Failed to load schema {schema_path}: {e}")
        await terminal.show_message(f"Could not load {schema_path}: {e}", style="error")
        return EXIT_ERROR

    replace_id = None
    if args.command == "edit":
        habit = schema_repo.find_habit(schema, args.habit_id)
        if habit is None:
            await terminal.show_message(f"Habit '{args.habit_id}' not found", style="error")
            return EXIT_ERROR
        replace_id = habit.id
        wizard = HabitWizard(terminal, seed_state_from_habit(habit))
    else:
        wizard = HabitWizard(terminal, habit_kind=HabitKind(args.kind))

    result = await ErrorHandlingMiddleware(terminal)(wizard.run)

    if result.cancelled:
        await terminal.show_message("Cancelled, nothing was saved.", style="warning")
        return EXIT_CANCELLED
    if result.error is not None or result.habit is None:
        return EXIT_ERROR

    try:
        schema = schema_repo.upsert_habit(schema, result.habit, replace_id=replace_id)
        schema_repo.save_schema(schema, schema_path)
    except SchemaValidationError as e:
        for problem in e.problems:
            await terminal.show_message(problem, style="error")
        return EXIT_ERROR
    except OSError as e:
        logger.exception(f"Failed to save schema {schema_path}: {e}")
        await terminal.show_message(f"Could not save {schema_path}: {e}", style="error")
        return EXIT_ERROR

    verb = "updated" if replace_id else "created"
    await terminal.show_message(f"✓ Habit '{result.habit.title}' {verb}", style="success")
    return EXIT_OK


def run() -> None:
    setup_logging()
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(EXIT_CANCELLED)


if __name__ == "__main__":
    run()
