"""Main entry point for the CoriMao Academy quiz bot."""
import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand

from academy_bot.config import settings
from academy_bot.handlers import errors, start, topic, quiz, results
from academy_bot.llm.client import LLMClient
from academy_bot.middleware.session import QuizSessionMiddleware
from academy_bot.services.question_provider import QuestionProvider
from academy_bot.services.quiz_session import SessionRegistry

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


async def main():
    if not settings.BOT_TOKEN:
        logger.error("BOT_TOKEN is not set. Create a .env file based on .env.example")
        sys.exit(1)

    logger.info("Starting CoriMao Academy bot...")

    # One API client for the whole process, shared by every user's session
    llm = LLMClient(
        api_key=settings.LLM_API_KEY,
        base_url=settings.LLM_BASE_URL,
        model=settings.LLM_MODEL,
        timeout=settings.LLM_TIMEOUT,
        max_retries=settings.LLM_MAX_RETRIES,
    )
    if llm.configured:
        logger.info(f"Question service: {settings.LLM_MODEL} at {settings.LLM_BASE_URL}")
    registry = SessionRegistry(QuestionProvider(llm))

    bot = Bot(token=settings.BOT_TOKEN)
    dp = Dispatcher(storage=MemoryStorage())

    dp.message.outer_middleware(QuizSessionMiddleware(registry))
    dp.callback_query.outer_middleware(QuizSessionMiddleware(registry))

    # errors goes last: it answers buttons no other router took
    dp.include_router(start.router)
    dp.include_router(topic.router)
    dp.include_router(quiz.router)
    dp.include_router(results.router)
    dp.include_router(errors.router)

    await bot.set_my_commands([
        BotCommand(command="start", description="Choose a subject"),
    ])

    try:
        logger.info("Starting bot polling...")
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await bot.session.close()
        await llm.close()
        logger.info("Bot stopped")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
