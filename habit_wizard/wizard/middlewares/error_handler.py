"""
Error Handling Middleware.

Перехватывает исключения при работе визарда и логирует их.
Показывает пользователю короткое сообщение вместо трейсбека,
а вызывающему коду возвращает WizardResult с ошибкой.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from habit_wizard.terminal.base import Terminal
from habit_wizard.wizard.orchestrator import WizardResult

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "❌ Something went wrong. The habit was not saved."


class ErrorHandlingMiddleware:
    """
    Middleware для обработки ошибок запуска визарда.

    Использование:
        guard = ErrorHandlingMiddleware(terminal)
        result = await guard(wizard.run)
    """

    def __init__(self, terminal: Terminal):
        self._terminal = terminal

    async def __call__(
        self, handler: Callable[[], Awaitable[WizardResult]]
    ) -> WizardResult:
        try:
            return await handler()
        except asyncio.CancelledError:
            # штатная отмена задачи, не ошибка
            raise
        except Exception as e:
            # Логируем полную ошибку с трейсбеком
            logger.exception(f"Error running wizard: {e}")

            try:
                await self._terminal.show_message(ERROR_MESSAGE, style="error")
            except Exception as send_error:
                logger.error(f"Failed to show error message: {send_error}")

            return WizardResult(error=e)
