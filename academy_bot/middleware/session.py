import logging
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from academy_bot.services.quiz_session import SessionRegistry

logger = logging.getLogger(__name__)


class QuizSessionMiddleware(BaseMiddleware):
    """Puts the sender's QuizApp into handler data as ``quiz``."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        user = getattr(event, "from_user", None)
        if user is None:
            logger.debug("Skipping update without a sender: %s", type(event).__name__)
            return  # no user info (e.g. channel post)

        data["quiz"] = self.registry.get(user.id)
        return await handler(event, data)
