from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from academy_bot.config import SUBJECT_TOPICS
from academy_bot.models import Subject

RANDOM_TOPIC = "random"


def topic_keyboard(subject: Subject) -> InlineKeyboardMarkup:
    buttons = [[InlineKeyboardButton(
        text="🎲 Surprise Me! (mixed questions)",
        callback_data=f"topic:{RANDOM_TOPIC}",
    )]]
    for topic in SUBJECT_TOPICS.get(subject, []):
        buttons.append([InlineKeyboardButton(
            text=f"{topic.icon} {topic.name}: {topic.description}",
            callback_data=f"topic:{topic.id}",
        )])
    buttons.append([InlineKeyboardButton(text="← Back to Subjects", callback_data="back_to_subjects")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)
