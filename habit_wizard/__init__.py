"""Habit Wizard - guided terminal authoring of habit records."""

__version__ = "0.1.0"
