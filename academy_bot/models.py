"""Quiz data models."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Subject(str, Enum):
    MATH = "Mathematics"
    SCIENCE = "Science"
    ENGLISH = "English"


class Difficulty(str, Enum):
    BEGINNER = "Beginner (Ages 5-7)"
    INTERMEDIATE = "Intermediate (Ages 8-10)"
    ADVANCED = "Advanced (Ages 11-13)"

    @property
    def label(self) -> str:
        """Short name without the age band, e.g. 'Beginner'."""
        return self.value.split(" (")[0]


@dataclass(frozen=True)
class Topic:
    """Narrower focus inside a subject."""
    id: str
    name: str
    icon: str
    description: str


@dataclass(frozen=True)
class QuizQuestion:
    """Single multiple-choice question received from the provider."""
    id: str
    question_text: str
    options: tuple[str, ...]
    correct_answer: str
    explanation: str
    hint: str

    def is_correct(self, answer: str) -> bool:
        return answer == self.correct_answer


@dataclass(frozen=True)
class QuizResult:
    """Outcome of a finished quiz."""
    subject: Subject
    difficulty: Difficulty
    topic: Optional[str]
    score: int
    total: int
    used_fallback: bool = False


# Served when the question service is unreachable so the quiz stays playable
FALLBACK_QUESTION = QuizQuestion(
    id="error-fallback",
    question_text="Oops! The question machine is taking a nap. Can you try again later?",
    options=("Okay", "Sure", "Alright", "Yes"),
    correct_answer="Okay",
    explanation="Sometimes even robots need a break!",
    hint="Just click Okay.",
)
