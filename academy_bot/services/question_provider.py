import logging
from typing import Optional

from academy_bot.config import QUESTIONS_PER_QUIZ
from academy_bot.llm.client import LLMClient
from academy_bot.llm.exceptions import EmptyResult, ProviderUnavailable
from academy_bot.llm.parser import parse_questions
from academy_bot.llm.prompts import QUIZ_RESPONSE_FORMAT, build_encouragement_prompt, build_quiz_prompt
from academy_bot.models import Difficulty, QuizQuestion, Subject

logger = logging.getLogger(__name__)


class QuestionProvider:
    """Generates question batches and encouragement lines through the LLM."""

    def __init__(self, client: LLMClient, count: int = QUESTIONS_PER_QUIZ):
        self.client = client
        self.count = count

    async def fetch_questions(
        self,
        subject: Subject,
        difficulty: Difficulty,
        topic: Optional[str] = None,
    ) -> list[QuizQuestion]:
        """Generate a question batch.

        Raises ProviderUnavailable when the service cannot be reached or
        answers with garbage twice, EmptyResult when it answers with no
        questions at all.
        """
        prompt = build_quiz_prompt(subject, difficulty, self.count, topic)

        # First attempt
        raw = await self.client.chat_completion(prompt, response_format=QUIZ_RESPONSE_FORMAT)
        questions = parse_questions(raw)

        if questions and len(questions) >= self.count:
            return questions[:self.count]

        # Retry once with a stricter prompt
        logger.info("First attempt didn't produce enough questions, retrying...")
        retry_prompt = prompt + "\n\nIMPORTANT: Output ONLY valid JSON. No markdown, no extra text."
        try:
            raw = await self.client.chat_completion(retry_prompt, response_format=QUIZ_RESPONSE_FORMAT)
        except ProviderUnavailable:
            if not questions:
                raise
            logger.warning("Retry failed, using %d questions from the first attempt", len(questions))
            raw = ""
        retried = parse_questions(raw)

        # Keep the better of the two answers
        if retried is None or (questions and len(questions) > len(retried)):
            retried = questions

        if retried:
            return retried[:self.count]
        if retried is None:
            logger.error("Failed to generate questions after 2 attempts")
            raise ProviderUnavailable("Malformed question batch")

        logger.error("Question service returned an empty batch")
        raise EmptyResult(f"No questions for {subject.value} / {topic or 'random'}")

    async def fetch_encouragement(self, is_correct: bool, subject: Subject) -> str:
        """Short cheering line for the feedback panel."""
        prompt = build_encouragement_prompt(is_correct, subject)
        text = await self.client.chat_completion(prompt, temperature=1.0, max_tokens=100)
        text = text.strip()
        if not text:
            return "Awesome job!" if is_correct else "Keep trying!"
        return text
