import logging

from aiogram import Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import ExceptionTypeFilter
from aiogram.types import CallbackQuery, ErrorEvent

from academy_bot.services.quiz_session import InvalidTransition

logger = logging.getLogger(__name__)

router = Router()

EXPIRED_TEXT = "This button has expired. Send /start to begin again."


@router.callback_query()
async def stale_button(callback: CallbackQuery):
    """Button from an old message that no longer matches the user's screen."""
    await callback.answer(EXPIRED_TEXT)


@router.error(ExceptionTypeFilter(InvalidTransition))
async def on_invalid_transition(event: ErrorEvent):
    logger.warning("Ignored out-of-place action: %s", event.exception)
    callback = event.update.callback_query
    if callback is None:
        return
    try:
        await callback.answer(EXPIRED_TEXT)
    except TelegramBadRequest:
        pass  # callback already answered


@router.error(ExceptionTypeFilter(TelegramBadRequest))
async def on_bad_request(event: ErrorEvent):
    # Same text and keyboard twice in a row, e.g. a double-tapped button
    if "message is not modified" in str(event.exception):
        return
    logger.error("Telegram rejected a request: %s", event.exception)
