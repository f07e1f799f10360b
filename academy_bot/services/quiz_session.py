"""Quiz flow state machine.

One ``QuizApp`` per user walks through the screens

    HOME -> TOPICS -> QUIZ -> RESULTS

and, inside QUIZ, cycles every question between answering and feedback.
Question batches and encouragement lines come from an injected provider;
its failures are replaced with local fallbacks here and never reach the
caller. Every async result is applied only if the session that asked for it
is still the current one, so a user who quits mid-request never sees a
stale batch land on a fresh screen.
"""
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol

from academy_bot.llm.exceptions import EmptyResult, ProviderError
from academy_bot.models import FALLBACK_QUESTION, Difficulty, QuizQuestion, QuizResult, Subject

logger = logging.getLogger(__name__)

ENCOURAGEMENT_FALLBACK = {
    True: "Great job!",
    False: "Don't give up!",
}


class Screen(str, Enum):
    HOME = "home"
    TOPICS = "topics"
    QUIZ = "quiz"
    RESULTS = "results"


class QuizPhase(str, Enum):
    LOADING = "loading"
    ANSWERING = "answering"
    FEEDBACK = "feedback"
    FAILED = "failed"


class InvalidTransition(Exception):
    """Operation does not fit the current screen."""
    pass


class QuestionSource(Protocol):
    async def fetch_questions(
        self, subject: Subject, difficulty: Difficulty, topic: Optional[str] = None
    ) -> list[QuizQuestion]: ...

    async def fetch_encouragement(self, is_correct: bool, subject: Subject) -> str: ...


@dataclass
class QuizSession:
    """Payload of the QUIZ screen. Lives until exit, restart or results."""
    subject: Subject
    difficulty: Difficulty
    topic: Optional[str]
    questions: tuple[QuizQuestion, ...] = ()
    current_index: int = 0
    score: int = 0
    selected_answer: Optional[str] = None
    feedback_visible: bool = False
    hint_used: bool = False
    feedback_message: Optional[str] = None
    phase: QuizPhase = QuizPhase.LOADING
    used_fallback: bool = False
    # Stamped into button data so presses on older quiz messages can be told apart
    token: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_index == len(self.questions) - 1

    @property
    def answered_correctly(self) -> Optional[bool]:
        question = self.current_question
        if self.selected_answer is None or question is None:
            return None
        return question.is_correct(self.selected_answer)

    def matches(self, token: str, index: int) -> bool:
        """Whether a button stamped with ``token`` and ``index`` belongs to the question on screen."""
        return self.token == token and self.current_index == index


class QuizApp:
    """Screen state and quiz flow for a single user."""

    def __init__(self, provider: QuestionSource, difficulty: Difficulty = Difficulty.BEGINNER):
        self.provider = provider
        self.difficulty = difficulty
        self.screen = Screen.HOME
        self.subject: Optional[Subject] = None
        self.topic: Optional[str] = None
        self.session: Optional[QuizSession] = None
        self.result: Optional[QuizResult] = None

    # ------------------------------------------------------------------
    # Home / topics
    # ------------------------------------------------------------------

    def select_difficulty(self, difficulty: Difficulty) -> None:
        self._require(Screen.HOME)
        self.difficulty = difficulty

    def select_subject(self, subject: Subject) -> None:
        self._require(Screen.HOME)
        self.subject = subject
        self.topic = None
        self.screen = Screen.TOPICS
        logger.info("Subject selected: %s", subject.value)

    def back_to_subjects(self) -> None:
        self._require(Screen.TOPICS)
        self.subject = None
        self.screen = Screen.HOME

    # ------------------------------------------------------------------
    # Quiz
    # ------------------------------------------------------------------

    async def start_quiz(self, topic: Optional[str] = None) -> QuizSession:
        """Enter the quiz screen and load a question batch.

        ``topic=None`` asks for a mixed batch across the whole subject.
        """
        self._require(Screen.TOPICS)
        return await self._begin(topic)

    async def retry(self) -> QuizSession:
        """Play the same subject, topic and difficulty again."""
        self._require(Screen.RESULTS)
        return await self._begin(self.topic)

    async def _begin(self, topic: Optional[str]) -> QuizSession:
        subject = self.subject
        session = QuizSession(subject=subject, difficulty=self.difficulty, topic=topic)
        self.topic = topic
        self.session = session
        self.result = None
        self.screen = Screen.QUIZ
        logger.info(
            "Starting quiz: %s / %s / %s", subject.value, self.difficulty.label, topic or "random"
        )

        questions: list[QuizQuestion]
        try:
            questions = list(await self.provider.fetch_questions(subject, self.difficulty, topic))
        except EmptyResult:
            questions = []
        except ProviderError as e:
            logger.warning("Question service unavailable (%s), serving fallback question", e)
            questions = [FALLBACK_QUESTION]
            session.used_fallback = True
        except Exception:
            logger.exception("Unexpected error while generating questions, serving fallback question")
            questions = [FALLBACK_QUESTION]
            session.used_fallback = True

        if not self._is_current(session):
            logger.debug("Discarding question batch for an abandoned session")
            return session

        if not questions:
            logger.warning("No questions for %s / %s", subject.value, topic or "random")
            session.phase = QuizPhase.FAILED
            return session

        session.questions = tuple(questions)
        session.phase = QuizPhase.ANSWERING
        return session

    def submit_answer(self, option: str) -> bool:
        """Record an answer and open the feedback panel right away.

        The encouragement line is not part of this step; the panel shows a
        placeholder until ``load_encouragement`` fills it in.
        Returns False when the answer is ignored: feedback is already
        showing, or the quiz is not waiting for an answer.
        """
        session = self._active_session()
        if session.phase is not QuizPhase.ANSWERING:
            return False

        question = session.current_question
        if option not in question.options:
            raise ValueError(f"{option!r} is not an option of question {question.id}")

        session.selected_answer = option
        session.feedback_visible = True
        session.phase = QuizPhase.FEEDBACK
        if question.is_correct(option):
            session.score += 1
        return True

    async def load_encouragement(self, session: QuizSession) -> bool:
        """Fetch the encouragement line for the question answered in ``session``.

        Returns True if the line was applied, False if there was nothing to
        load or the user moved on before or while it was being fetched.
        """
        if not self._is_current(session):
            return False
        if session.phase is not QuizPhase.FEEDBACK or session.feedback_message is not None:
            return False

        index = session.current_index
        is_correct = session.answered_correctly
        try:
            message = await self.provider.fetch_encouragement(is_correct, session.subject)
        except Exception as e:
            logger.warning("Encouragement unavailable (%s), using fallback", e)
            message = ENCOURAGEMENT_FALLBACK[is_correct]

        if not self._is_current(session) or session.current_index != index:
            logger.debug("Discarding encouragement for a question that is no longer shown")
            return False

        session.feedback_message = message
        return True

    async def answer(self, option: str) -> bool:
        """Submit an answer and wait for its encouragement line."""
        if not self.submit_answer(option):
            return False
        await self.load_encouragement(self.session)
        return True

    def use_hint(self) -> Optional[str]:
        """Reveal the hint once per question. Returns None if nothing changed."""
        session = self._active_session()
        if session.phase is not QuizPhase.ANSWERING or session.hint_used:
            return None
        session.hint_used = True
        return session.current_question.hint

    def next_question(self) -> bool:
        """Leave the feedback panel: next question, or results after the last one.

        Returns False when there is no feedback to continue from.
        """
        session = self._active_session()
        if session.phase is not QuizPhase.FEEDBACK:
            return False

        if session.is_last_question:
            self.result = QuizResult(
                subject=session.subject,
                difficulty=session.difficulty,
                topic=session.topic,
                score=session.score,
                total=session.total,
                used_fallback=session.used_fallback,
            )
            self.session = None
            self.screen = Screen.RESULTS
            logger.info("Quiz finished: %d/%d", self.result.score, self.result.total)
            return True

        session.current_index += 1
        session.selected_answer = None
        session.feedback_visible = False
        session.hint_used = False
        session.feedback_message = None
        session.phase = QuizPhase.ANSWERING
        return True

    # ------------------------------------------------------------------
    # Exits
    # ------------------------------------------------------------------

    def exit_to_topics(self) -> None:
        self._require(Screen.TOPICS, Screen.QUIZ, Screen.RESULTS)
        self.session = None
        self.result = None
        self.topic = None
        self.screen = Screen.TOPICS

    def go_home(self) -> None:
        self.session = None
        self.result = None
        self.subject = None
        self.topic = None
        self.screen = Screen.HOME

    # ------------------------------------------------------------------

    def _require(self, *screens: Screen) -> None:
        if self.screen not in screens:
            raise InvalidTransition(f"Not allowed on the {self.screen.value} screen")

    def _active_session(self) -> QuizSession:
        self._require(Screen.QUIZ)
        return self.session

    def _is_current(self, session: QuizSession) -> bool:
        return self.screen is Screen.QUIZ and self.session is session


class SessionRegistry:
    """In-memory QuizApp per Telegram user. Nothing is persisted."""

    def __init__(self, provider: QuestionSource):
        self.provider = provider
        self._apps: dict[int, QuizApp] = {}

    def get(self, user_id: int) -> QuizApp:
        app = self._apps.get(user_id)
        if app is None:
            app = QuizApp(self.provider)
            self._apps[user_id] = app
        return app
