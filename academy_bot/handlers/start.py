from aiogram import Router, F
from aiogram.filters import CommandStart
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext

from academy_bot.keyboards.main_menu import home_keyboard
from academy_bot.models import Difficulty
from academy_bot.services.quiz_session import QuizApp
from academy_bot.services.screens import format_home
from academy_bot.states.quiz_states import QuizFlow, state_for

router = Router()


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext, quiz: QuizApp):
    quiz.go_home()
    await state.set_state(state_for(quiz))
    await message.answer(format_home(quiz.difficulty), reply_markup=home_keyboard(quiz.difficulty))


@router.callback_query(F.data == "go_home")
async def go_home(callback: CallbackQuery, state: FSMContext, quiz: QuizApp):
    quiz.go_home()
    await state.set_state(state_for(quiz))
    await callback.message.edit_text(format_home(quiz.difficulty), reply_markup=home_keyboard(quiz.difficulty))
    await callback.answer()


@router.callback_query(QuizFlow.choosing_subject, F.data.startswith("diff:"))
async def difficulty_selected(callback: CallbackQuery, quiz: QuizApp):
    name = callback.data.split(":", 1)[1]
    if name not in Difficulty.__members__ or Difficulty[name] is quiz.difficulty:
        await callback.answer()
        return

    quiz.select_difficulty(Difficulty[name])
    await callback.message.edit_text(format_home(quiz.difficulty), reply_markup=home_keyboard(quiz.difficulty))
    await callback.answer(f"Level: {quiz.difficulty.label}")
