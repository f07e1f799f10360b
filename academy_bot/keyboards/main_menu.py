from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from academy_bot.config import SUBJECT_ICONS
from academy_bot.models import Difficulty, Subject


def home_keyboard(selected: Difficulty) -> InlineKeyboardMarkup:
    """Difficulty toggle on top, one button per subject below."""
    difficulty_row = []
    for difficulty in Difficulty:
        mark = "✅ " if difficulty is selected else ""
        difficulty_row.append(InlineKeyboardButton(
            text=f"{mark}{difficulty.label}",
            callback_data=f"diff:{difficulty.name}",
        ))

    buttons = [difficulty_row]
    for subject in Subject:
        buttons.append([InlineKeyboardButton(
            text=f"{SUBJECT_ICONS[subject]} {subject.value}",
            callback_data=f"subject:{subject.name}",
        )])
    return InlineKeyboardMarkup(inline_keyboard=buttons)
