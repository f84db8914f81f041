from habit_wizard.terminal.base import Terminal

__all__ = ["Terminal"]
