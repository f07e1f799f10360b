from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from academy_bot.services.quiz_session import QuizSession


def quiz_data(session: QuizSession, action: str, *extra) -> str:
    """Callback data tied to the session and the question on screen.

    Looks like ``ans:1f3a9c2e:2:0``; well under the 64 byte limit.
    """
    return ":".join([action, session.token, str(session.current_index), *map(str, extra)])


def _quit_button(session: QuizSession, text: str = "✖ Quit") -> InlineKeyboardButton:
    return InlineKeyboardButton(text=text, callback_data=quiz_data(session, "quit"))


def question_keyboard(session: QuizSession) -> InlineKeyboardMarkup:
    labels = ["A", "B", "C", "D"]
    buttons = []
    for i, option in enumerate(session.current_question.options):
        label = labels[i] if i < len(labels) else str(i + 1)
        # Index instead of text: callback data is limited to 64 bytes
        buttons.append([InlineKeyboardButton(
            text=f"{label}) {option}",
            callback_data=quiz_data(session, "ans", i),
        )])

    bottom_row = []
    if not session.hint_used:
        bottom_row.append(InlineKeyboardButton(text="💡 Hint", callback_data=quiz_data(session, "hint")))
    bottom_row.append(_quit_button(session))
    buttons.append(bottom_row)
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def feedback_keyboard(session: QuizSession) -> InlineKeyboardMarkup:
    text = "🏁 Finish Quiz" if session.is_last_question else "Next Question →"
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text=text, callback_data=quiz_data(session, "next"))],
        [_quit_button(session)],
    ])


def failed_keyboard(session: QuizSession) -> InlineKeyboardMarkup:
    """Only way out of a quiz that has no questions."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [_quit_button(session, text="🔙 Go Back")],
    ])
