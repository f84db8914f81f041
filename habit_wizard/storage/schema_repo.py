"""
Schema Repository - load and save the habit schema file.

AICODE-NOTE: This is a dumb repository layer - file access and identifier
bookkeeping only. Strict rules live in core/domain/habit_rules.py.
The wizard never calls this module; the CLI does, after a successful run.

Format: the pydantic Schema model serialized as JSON.
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from habit_wizard.core.domain.habit_rules import generate_id_from_title, validate_schema
from habit_wizard.core.errors import SchemaValidationError
from habit_wizard.models import Habit, Schema

logger = logging.getLogger(__name__)


def assign_missing_ids(schema: Schema) -> tuple[Schema, bool]:
    """
    Give every habit without an id one generated from its title.

    Returns:
        (schema, was_modified)
    """
    taken = {h.id for h in schema.habits if h.id}
    habits = []
    modified = False
    for habit in schema.habits:
        if not habit.id:
            new_id = generate_id_from_title(habit.title, taken)
            taken.add(new_id)
            habit = habit.model_copy(update={"id": new_id})
            modified = True
        habits.append(habit)
    if not modified:
        return schema, False
    return schema.model_copy(update={"habits": habits}), True


def load_schema(path: str | Path) -> Schema:
    """
    Load a schema file, generating missing habit ids.

    Generated ids are written back to the file. A file that cannot be
    written (read-only, permissions) only produces a warning.

    Raises:
        FileNotFoundError: the file does not exist
        SchemaValidationError: the file is not a valid schema
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        schema = Schema.model_validate_json(text)
    except PydanticValidationError as e:
        raise SchemaValidationError([f"{path}: {err['msg']}" for err in e.errors()]) from e

    schema, modified = assign_missing_ids(schema)
    if modified:
        try:
            _write_atomic(path, schema)
            logger.info(f"Generated habit ids persisted to {path}")
        except OSError as e:
            logger.warning(f"Could not persist generated habit ids to {path}: {e}")
    return schema


def load_or_create_schema(path: str | Path) -> Schema:
    """load_schema(), or an empty schema when the file does not exist yet."""
    path = Path(path)
    if not path.exists():
        logger.info(f"Schema file {path} not found, starting a new one")
        return Schema()
    return load_schema(path)


def save_schema(schema: Schema, path: str | Path) -> None:
    """
    Strictly validate and write the schema.

    Raises:
        SchemaValidationError: strict validation failed, nothing was written
        OSError: the file could not be written
    """
    problems = validate_schema(schema)
    if problems:
        logger.error(f"Schema not saved, {len(problems)} problem(s): {problems}")
        raise SchemaValidationError(problems)
    _write_atomic(Path(path), schema)
    logger.info(f"Schema saved to {path} ({len(schema.habits)} habits)")


def upsert_habit(schema: Schema, habit: Habit, replace_id: str | None = None) -> Schema:
    """
    Append a habit, or replace the one with `replace_id`.

    New habits get an id generated from the title when they have none
    (or when theirs is already taken).

    Raises:
        KeyError: replace_id is not in the schema
    """
    habits = list(schema.habits)

    if replace_id is not None:
        for i, existing in enumerate(habits):
            if existing.id == replace_id:
                habits[i] = habit.model_copy(update={"id": replace_id})
                return schema.model_copy(update={"habits": habits})
        raise KeyError(f"habit '{replace_id}' not found")

    taken = {h.id for h in habits if h.id}
    if not habit.id or habit.id in taken:
        habit = habit.model_copy(update={"id": generate_id_from_title(habit.title, taken)})
    habits.append(habit)
    return schema.model_copy(update={"habits": habits})


def find_habit(schema: Schema, habit_id: str) -> Habit | None:
    return next((h for h in schema.habits if h.id == habit_id), None)


def _write_atomic(path: Path, schema: Schema) -> None:
    """Write to a temp file in the same directory, then rename over the target."""
    if path.exists() and not os.access(path, os.W_OK):
        raise PermissionError(f"{path} is read-only")

    data = schema.model_dump_json(indent=2, exclude_none=True)
    directory = path.parent if str(path.parent) else Path(".")
    fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
