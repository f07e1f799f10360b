from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton


def results_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🔁 Try Again", callback_data="retry_quiz")],
        [InlineKeyboardButton(text="📚 Choose Another Topic", callback_data="to_topics")],
        [InlineKeyboardButton(text="🏠 Home", callback_data="go_home")],
    ])
