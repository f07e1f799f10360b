from aiogram.fsm.state import StatesGroup, State

from academy_bot.services.quiz_session import QuizApp, QuizPhase, Screen


class QuizFlow(StatesGroup):
    choosing_subject = State()
    choosing_topic = State()
    generating_quiz = State()
    answering_question = State()
    viewing_feedback = State()
    quiz_failed = State()
    viewing_results = State()


_SCREEN_STATES = {
    Screen.HOME: QuizFlow.choosing_subject,
    Screen.TOPICS: QuizFlow.choosing_topic,
    Screen.RESULTS: QuizFlow.viewing_results,
}

_PHASE_STATES = {
    QuizPhase.LOADING: QuizFlow.generating_quiz,
    QuizPhase.ANSWERING: QuizFlow.answering_question,
    QuizPhase.FEEDBACK: QuizFlow.viewing_feedback,
    QuizPhase.FAILED: QuizFlow.quiz_failed,
}

# States whose message carries a quit button stamped with the session token
QUIZ_STATES = (
    QuizFlow.answering_question,
    QuizFlow.viewing_feedback,
    QuizFlow.quiz_failed,
)


def state_for(quiz: QuizApp) -> State:
    """FSM state mirroring the screen the user is on."""
    if quiz.screen is Screen.QUIZ and quiz.session is not None:
        return _PHASE_STATES[quiz.session.phase]
    return _SCREEN_STATES.get(quiz.screen, QuizFlow.choosing_subject)
