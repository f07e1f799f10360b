from typing import Optional

from academy_bot.models import Difficulty, Subject

QUESTION_ITEM_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "questionText": {"type": "string"},
        "options": {
            "type": "array",
            "items": {"type": "string"},
        },
        "correctAnswer": {"type": "string"},
        "explanation": {"type": "string"},
        "hint": {"type": "string"},
    },
    "required": ["id", "questionText", "options", "correctAnswer", "explanation", "hint"],
    "additionalProperties": False,
}

QUIZ_RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "quiz",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "questions": {"type": "array", "items": QUESTION_ITEM_SCHEMA},
            },
            "required": ["questions"],
            "additionalProperties": False,
        },
    },
}


def build_quiz_prompt(subject: Subject, difficulty: Difficulty, count: int, topic: Optional[str] = None) -> str:
    topic_line = f"Specific Topic: {topic}\n" if topic else ""

    return f"""Create a fun, engaging, and educational quiz for children.
Subject: {subject.value}
Difficulty Level: {difficulty.value}
{topic_line}
Generate {count} multiple-choice questions.
The tone should be encouraging and playful.
Ensure the 'options' array contains 4 distinct choices.
The 'correctAnswer' must be the EXACT text of one of the options.
The 'explanation' should be a short, fun fact explaining why the answer is correct, suitable for a child.
The 'hint' should be a helpful nudge without giving the answer away.

Output ONLY a JSON object of the form {{"questions": [...]}}."""


def build_encouragement_prompt(is_correct: bool, subject: Subject) -> str:
    if is_correct:
        return (
            f"Write a short, super enthusiastic 1-sentence celebration for a child "
            f"who just got a {subject.value} question right!"
        )
    return (
        f"Write a short, kind, and encouraging 1-sentence message for a child who got a "
        f"{subject.value} question wrong, telling them it's okay to make mistakes."
    )
