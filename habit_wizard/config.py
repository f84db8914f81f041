"""
Конфигурация Habit Wizard.
Загружает переменные окружения и .env файл.
"""

import json
import logging
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "WARNING"
    # Logs go to a file when set, stderr otherwise (prompts use stdout)
    LOG_FILE: str | None = None

    # Schema file used by the CLI when --schema is not given
    SCHEMA_PATH: str = "habits.json"

    # Wizard behaviour
    TITLE_MAX_LENGTH: int = 100
    DEFAULT_UNIT: str = "units"
    # When true the tier validation step offers no "proceed anyway"
    STRICT_TIER_ORDERING: bool = False

    # Checklists available to checklist habits (comma-separated or JSON list)
    CHECKLIST_IDS: Annotated[list[str], NoDecode] = []

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("CHECKLIST_IDS", mode="before")
    @classmethod
    def parse_checklist_ids(cls, v: str | list[Any]) -> list[str]:
        if isinstance(v, str):
            if not v.strip():
                return []
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return [str(x) for x in json.loads(v)]
                except json.JSONDecodeError:
                    pass
            return [x.strip() for x in v.split(",") if x.strip()]
        return v

    @field_validator("TITLE_MAX_LENGTH")
    @classmethod
    def check_title_length(cls, v: int) -> int:
        # BasicInfoData caps titles at 100 characters
        if not 1 <= v <= 100:
            raise ValueError("TITLE_MAX_LENGTH must be between 1 and 100")
        return v

    @property
    def log_level(self) -> int:
        """Numeric logging level, WARNING for unknown names."""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.WARNING


config = Settings()
