"""Plain-text rendering of every screen."""
from typing import Optional

from academy_bot.config import SUBJECT_ICONS
from academy_bot.models import Difficulty, QuizResult, Subject
from academy_bot.services.quiz_session import QuizSession

WELCOME_TEXT = (
    "✨ CoriMao Academy\n\n"
    "Ready to learn something amazing?\n"
    "Choose a subject and train your brain with our AI-powered tutors!"
)

DAILY_FACT = (
    "🦕 Did you know?\n"
    "The Stegosaurus had a brain the size of a walnut, but it was still one of the coolest "
    "dinosaurs ever! Keep learning to grow your brain much bigger than that!"
)

FAILED_TEXT = (
    "😞 Oh no! We couldn't find any questions for this topic.\n\n"
    "Let's pick another one."
)

PERFECT_NOTE = "Absolute perfection! You're a genius!"
GREAT_NOTE = "Great work! You're getting smarter every second."
TRY_AGAIN_NOTE = "Nice try! Practice makes perfect. Let's go again!"
# Replaces the score-band note after the fallback question
FALLBACK_NOTE = "Our question machine was napping this time. Try again soon for a real quiz!"


def format_home(difficulty: Difficulty) -> str:
    return f"{WELCOME_TEXT}\n\n🎚 Level: {difficulty.value}\n\n{DAILY_FACT}"


def format_topics(subject: Subject) -> str:
    icon = SUBJECT_ICONS.get(subject, "")
    return f"{icon} {subject.value} Challenges\n\nPick a mission to start your training!"


def format_loading(subject: Subject, topic: Optional[str]) -> str:
    return (
        f"⏳ Preparing your {topic or subject.value} quiz...\n\n"
        f"Our robot tutors are writing fresh questions, this takes a few seconds."
    )


def _header(session: QuizSession) -> str:
    badges = session.subject.value
    if session.topic:
        badges += f" • {session.topic}"
    return f"❓ {session.current_index + 1}/{session.total}   {badges}\n\n"


def format_question(session: QuizSession) -> str:
    question = session.current_question
    text = _header(session) + question.question_text
    if session.hint_used:
        text += f"\n\n💡 Hint: {question.hint}"
    return text


def format_feedback(session: QuizSession) -> str:
    """Question followed by the feedback panel."""
    question = session.current_question
    correct = session.answered_correctly
    emoji = "🎉" if correct else "🤔"
    message = session.feedback_message or "..."

    lines = [
        _header(session) + question.question_text,
        "",
        f"Your answer: {session.selected_answer}",
    ]
    if not correct:
        lines.append(f"✅ Correct answer: {question.correct_answer}")
    lines += ["", f"{emoji} {message}", "", f"📖 {question.explanation}"]
    return "\n".join(lines)


def results_emoji(score: int) -> str:
    return "🏆" if score >= 3 else "🌟"


def results_note(score: int, total: int) -> str:
    """Instructor's note for a finished quiz."""
    if total > 0 and score == total:
        return PERFECT_NOTE
    if score >= 3:
        return GREAT_NOTE
    return TRY_AGAIN_NOTE


def format_results(result: QuizResult) -> str:
    if result.used_fallback:
        emoji, note = "🌟", FALLBACK_NOTE
    else:
        emoji, note = results_emoji(result.score), results_note(result.score, result.total)
    return (
        f"{emoji} Training Complete!\n\n"
        f"You scored {result.score} out of {result.total}\n\n"
        f"📝 Instructor's Note:\n"
        f"\"{note}\""
    )
