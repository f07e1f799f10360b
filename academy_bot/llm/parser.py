import json
import logging
import re
from typing import Any, Optional

from academy_bot.models import QuizQuestion

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("questionText", "options", "correctAnswer", "explanation", "hint")
OPTIONS_PER_QUESTION = 4

_LETTER_PREFIX_RE = re.compile(r"^[A-Da-d][).:]\s*")


def parse_questions(raw_text: str) -> Optional[list[QuizQuestion]]:
    """Parse LLM output into questions.

    Returns None when the text holds no usable JSON or when every question in
    it is invalid, and an empty list when the service sent zero questions.
    """
    if not raw_text:
        return None

    # Try direct JSON parse
    items = _try_parse_json(raw_text)

    # Try extracting from markdown code block
    if items is None:
        match = re.search(r"```(?:json)?\s*([\[{].+?[\]}])\s*```", raw_text, re.DOTALL)
        if match:
            items = _try_parse_json(match.group(1))

    # Try finding an object or array in the text
    if items is None:
        match = re.search(r"(\{.+}|\[.+])", raw_text, re.DOTALL)
        if match:
            items = _try_parse_json(match.group(1))

    if items is None:
        logger.error("Failed to parse LLM response as JSON")
        return None

    if not items:
        return []

    valid: list[QuizQuestion] = []
    seen_ids: set[str] = set()
    for position, item in enumerate(items, start=1):
        question = _build_question(item, position)
        if question is None:
            logger.warning(f"Skipping invalid question: {item}")
            continue
        if question.id in seen_ids:
            logger.warning(f"Skipping question with duplicate id: {question.id}")
            continue
        seen_ids.add(question.id)
        valid.append(question)

    return valid if valid else None


def _try_parse_json(text: str) -> Optional[list[Any]]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    if isinstance(data, dict):
        data = data.get("questions")
    if isinstance(data, list):
        return data
    return None


def _build_question(item: Any, position: int) -> Optional[QuizQuestion]:
    if not isinstance(item, dict):
        return None
    if not all(item.get(field) for field in REQUIRED_FIELDS):
        return None

    options = item["options"]
    if not isinstance(options, list) or len(options) != OPTIONS_PER_QUESTION:
        return None
    if not all(isinstance(opt, str) and opt.strip() for opt in options):
        return None

    # Strip letter prefixes like "A) ", "b. " from options
    cleaned = [_LETTER_PREFIX_RE.sub("", opt).strip() for opt in options]
    if len(set(cleaned)) != OPTIONS_PER_QUESTION:
        return None

    correct = str(item["correctAnswer"]).strip()
    # A single letter (A/B/C/D) points at an option
    if re.fullmatch(r"[A-Da-d]", correct) and correct not in cleaned:
        correct = cleaned[ord(correct.upper()) - ord("A")]
    elif correct not in cleaned:
        correct = _LETTER_PREFIX_RE.sub("", correct).strip()
    if correct not in cleaned:
        return None

    question_id = str(item.get("id") or "").strip() or f"q{position}"

    return QuizQuestion(
        id=question_id,
        question_text=str(item["questionText"]).strip(),
        options=tuple(cleaned),
        correct_answer=correct,
        explanation=str(item["explanation"]).strip(),
        hint=str(item["hint"]).strip(),
    )
