import logging
from typing import Optional

from aiogram import Router, F
from aiogram.filters import StateFilter
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext

from academy_bot.config import find_topic
from academy_bot.handlers.errors import stale_button
from academy_bot.handlers.topic import show_topics
from academy_bot.keyboards.quiz_kb import failed_keyboard, feedback_keyboard, question_keyboard
from academy_bot.keyboards.topic_kb import RANDOM_TOPIC
from academy_bot.services.quiz_session import QuizApp, QuizPhase, QuizSession, Screen
from academy_bot.services.screens import FAILED_TEXT, format_feedback, format_loading, format_question
from academy_bot.states.quiz_states import QUIZ_STATES, QuizFlow, state_for

logger = logging.getLogger(__name__)

router = Router()


def _session_for(quiz: QuizApp, data: str) -> Optional[QuizSession]:
    """Current session, if the button was made for the question on screen.

    Quiz buttons carry ``<action>:<token>:<index>[:<choice>]``.
    """
    parts = data.split(":")
    if len(parts) < 3 or not parts[2].isdigit():
        return None
    session = quiz.session
    if session is None or not session.matches(parts[1], int(parts[2])):
        return None
    return session


async def show_new_quiz(message: Message, state: FSMContext, quiz: QuizApp, session: QuizSession):
    """Render a freshly loaded session, unless the user already left it."""
    if quiz.session is not session:
        logger.debug("Session replaced while loading, not rendering it")
        return

    await state.set_state(state_for(quiz))
    if session.phase is QuizPhase.FAILED:
        await message.edit_text(FAILED_TEXT, reply_markup=failed_keyboard(session))
        return

    await message.edit_text(format_question(session), reply_markup=question_keyboard(session))


async def show_feedback(message: Message, session: QuizSession):
    await message.edit_text(format_feedback(session), reply_markup=feedback_keyboard(session))


@router.callback_query(QuizFlow.choosing_topic, F.data.startswith("topic:"))
async def topic_selected(callback: CallbackQuery, state: FSMContext, quiz: QuizApp):
    value = callback.data.split(":", 1)[1]

    if value == RANDOM_TOPIC:
        topic = None
    else:
        found = find_topic(quiz.subject, value)
        if found is None:
            await callback.answer()
            return
        topic = found.name

    await callback.answer()
    await state.set_state(QuizFlow.generating_quiz)
    await callback.message.edit_text(format_loading(quiz.subject, topic))

    session = await quiz.start_quiz(topic)
    await show_new_quiz(callback.message, state, quiz, session)


@router.callback_query(QuizFlow.answering_question, F.data.startswith("ans:"))
async def answer_selected(callback: CallbackQuery, state: FSMContext, quiz: QuizApp):
    session = _session_for(quiz, callback.data)
    if session is None:
        await stale_button(callback)
        return

    question = session.current_question
    choice = callback.data.split(":")[-1]
    if question is None or not choice.isdigit() or int(choice) >= len(question.options):
        await callback.answer()
        return

    await callback.answer()
    if not quiz.submit_answer(question.options[int(choice)]):
        return

    # Feedback goes up at once; the encouragement line replaces the placeholder later
    await state.set_state(state_for(quiz))
    await show_feedback(callback.message, session)

    # False when the user quit or moved on while the line was loading
    if await quiz.load_encouragement(session):
        await show_feedback(callback.message, session)


@router.callback_query(QuizFlow.answering_question, F.data.startswith("hint:"))
async def hint_requested(callback: CallbackQuery, quiz: QuizApp):
    session = _session_for(quiz, callback.data)
    if session is None:
        await stale_button(callback)
        return

    hint = quiz.use_hint()
    await callback.answer()
    if hint is None:
        return

    await callback.message.edit_text(format_question(session), reply_markup=question_keyboard(session))


@router.callback_query(QuizFlow.viewing_feedback, F.data.startswith("next:"))
async def next_selected(callback: CallbackQuery, state: FSMContext, quiz: QuizApp):
    if _session_for(quiz, callback.data) is None:
        await stale_button(callback)
        return

    await callback.answer()
    if not quiz.next_question():
        return

    if quiz.screen is Screen.RESULTS:
        from academy_bot.handlers.results import show_results
        await show_results(callback.message, state, quiz)
        return

    session = quiz.session
    await state.set_state(state_for(quiz))
    await callback.message.edit_text(format_question(session), reply_markup=question_keyboard(session))


@router.callback_query(StateFilter(*QUIZ_STATES), F.data.startswith("quit:"))
async def quit_quiz(callback: CallbackQuery, state: FSMContext, quiz: QuizApp):
    """Quit a running quiz or leave a failed one."""
    if _session_for(quiz, callback.data) is None:
        await stale_button(callback)
        return

    quiz.exit_to_topics()
    await show_topics(callback.message, state, quiz)
    await callback.answer()
