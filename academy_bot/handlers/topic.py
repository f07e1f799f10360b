from aiogram import Router, F
from aiogram.types import CallbackQuery, Message
from aiogram.fsm.context import FSMContext

from academy_bot.keyboards.main_menu import home_keyboard
from academy_bot.keyboards.topic_kb import topic_keyboard
from academy_bot.models import Subject
from academy_bot.services.quiz_session import QuizApp
from academy_bot.services.screens import format_home, format_topics
from academy_bot.states.quiz_states import QuizFlow, state_for

router = Router()


async def show_topics(message: Message, state: FSMContext, quiz: QuizApp):
    await state.set_state(state_for(quiz))
    await message.edit_text(format_topics(quiz.subject), reply_markup=topic_keyboard(quiz.subject))


@router.callback_query(QuizFlow.choosing_subject, F.data.startswith("subject:"))
async def subject_selected(callback: CallbackQuery, state: FSMContext, quiz: QuizApp):
    name = callback.data.split(":", 1)[1]
    if name not in Subject.__members__:
        await callback.answer()
        return

    quiz.select_subject(Subject[name])
    await show_topics(callback.message, state, quiz)
    await callback.answer()


@router.callback_query(QuizFlow.choosing_topic, F.data == "back_to_subjects")
async def back_to_subjects(callback: CallbackQuery, state: FSMContext, quiz: QuizApp):
    quiz.back_to_subjects()
    await state.set_state(state_for(quiz))
    await callback.message.edit_text(format_home(quiz.difficulty), reply_markup=home_keyboard(quiz.difficulty))
    await callback.answer()


@router.callback_query(QuizFlow.viewing_results, F.data == "to_topics")
async def back_to_topics(callback: CallbackQuery, state: FSMContext, quiz: QuizApp):
    """Pick another topic after results."""
    quiz.exit_to_topics()
    await show_topics(callback.message, state, quiz)
    await callback.answer()
