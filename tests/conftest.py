"""Shared fixtures for the quiz bot tests."""
from unittest.mock import AsyncMock

import pytest

from academy_bot.models import Difficulty, Subject
from academy_bot.services.quiz_session import QuizApp
from helpers import FakeProvider, make_question


@pytest.fixture
def sample_questions():
    """Five questions, the first option of each is the right one."""
    return [make_question(n) for n in range(1, 6)]


@pytest.fixture
def provider(sample_questions):
    return FakeProvider(sample_questions)


@pytest.fixture
def quiz(provider):
    """QuizApp on the Mathematics topics screen, intermediate level."""
    app = QuizApp(provider, difficulty=Difficulty.INTERMEDIATE)
    app.select_subject(Subject.MATH)
    return app


@pytest.fixture
def state():
    """Stand-in for aiogram's FSMContext."""
    return AsyncMock()
