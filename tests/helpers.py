"""Test doubles and builders shared by the test modules."""
import asyncio
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

from academy_bot.models import QuizQuestion


class FakeProvider:
    """Question source with canned answers.

    Set ``questions_error`` / ``encouragement_error`` to make a call raise,
    and a ``*_gate`` event to hold the call until the test releases it.
    """

    def __init__(self, questions: list[QuizQuestion]):
        self.questions = questions
        self.questions_error: Optional[Exception] = None
        self.questions_gate: Optional[asyncio.Event] = None
        self.encouragement = "You are a star!"
        self.encouragement_error: Optional[Exception] = None
        self.encouragement_gate: Optional[asyncio.Event] = None
        self.question_calls: list[tuple] = []
        self.encouragement_calls: list[tuple] = []

    async def fetch_questions(self, subject, difficulty, topic=None):
        self.question_calls.append((subject, difficulty, topic))
        if self.questions_gate is not None:
            await self.questions_gate.wait()
        if self.questions_error is not None:
            raise self.questions_error
        return list(self.questions)

    async def fetch_encouragement(self, is_correct, subject):
        self.encouragement_calls.append((is_correct, subject))
        if self.encouragement_gate is not None:
            await self.encouragement_gate.wait()
        if self.encouragement_error is not None:
            raise self.encouragement_error
        return self.encouragement


def make_question(number: int) -> QuizQuestion:
    return QuizQuestion(
        id=f"q{number}",
        question_text=f"What is {number} + {number}?",
        options=(str(number * 2), str(number * 2 + 1), str(number * 2 + 2), str(number * 2 + 3)),
        correct_answer=str(number * 2),
        explanation=f"{number} and {number} make {number * 2}.",
        hint="Count on your fingers!",
    )


def wrong_option(question: QuizQuestion) -> str:
    return next(opt for opt in question.options if opt != question.correct_answer)


def make_callback(data: str, user_id: int = 12345) -> AsyncMock:
    callback = AsyncMock()
    callback.data = data
    callback.from_user = MagicMock(id=user_id)
    callback.message = AsyncMock()
    return callback


def make_message(text: str = "/start", user_id: int = 12345) -> AsyncMock:
    message = AsyncMock()
    message.text = text
    message.from_user = MagicMock(id=user_id)
    return message
