from aiogram import Router, F
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext

from academy_bot.handlers.quiz import show_new_quiz
from academy_bot.keyboards.results_kb import results_keyboard
from academy_bot.services.quiz_session import QuizApp
from academy_bot.services.screens import format_loading, format_results
from academy_bot.states.quiz_states import QuizFlow, state_for

router = Router()


async def show_results(message: Message, state: FSMContext, quiz: QuizApp):
    """Show the final quiz results."""
    await state.set_state(state_for(quiz))
    await message.edit_text(format_results(quiz.result), reply_markup=results_keyboard())


@router.callback_query(QuizFlow.viewing_results, F.data == "retry_quiz")
async def retry_quiz(callback: CallbackQuery, state: FSMContext, quiz: QuizApp):
    await callback.answer()
    await state.set_state(QuizFlow.generating_quiz)
    await callback.message.edit_text(format_loading(quiz.subject, quiz.topic))

    session = await quiz.retry()
    await show_new_quiz(callback.message, state, quiz, session)
