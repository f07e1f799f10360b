"""Tests for the Telegram handlers driving the quiz."""
import asyncio
from unittest.mock import MagicMock

from academy_bot.handlers.errors import EXPIRED_TEXT, stale_button
from academy_bot.handlers.quiz import answer_selected, hint_requested, next_selected, quit_quiz, topic_selected
from academy_bot.handlers.results import retry_quiz
from academy_bot.handlers.start import cmd_start, difficulty_selected
from academy_bot.handlers.topic import back_to_topics, subject_selected
from academy_bot.keyboards.quiz_kb import quiz_data
from academy_bot.llm.exceptions import EmptyResult, ProviderUnavailable
from academy_bot.middleware.session import QuizSessionMiddleware
from academy_bot.models import Difficulty, Subject
from academy_bot.services.quiz_session import QuizApp, QuizPhase, Screen, SessionRegistry
from academy_bot.services.screens import FAILED_TEXT
from academy_bot.states.quiz_states import QuizFlow
from helpers import make_callback, make_message, wrong_option


def _last_text(callback) -> str:
    return callback.message.edit_text.call_args[0][0]


def _last_markup(callback):
    return callback.message.edit_text.call_args.kwargs.get("reply_markup")


def _button_data(markup) -> list[str]:
    return [button.callback_data for row in markup.inline_keyboard for button in row]


def _press(session, action: str, *extra):
    """Callback for a button on the message currently showing ``session``."""
    return make_callback(quiz_data(session, action, *extra))


class TestHomeHandlers:
    """/start, difficulty and subject selection."""

    async def test_cmd_start(self, provider, state):
        """/start shows the welcome screen with subject and level buttons."""
        quiz = QuizApp(provider)
        message = make_message()

        await cmd_start(message, state, quiz)

        state.set_state.assert_awaited_once_with(QuizFlow.choosing_subject)
        message.answer.assert_awaited_once()
        assert "CoriMao Academy" in message.answer.call_args[0][0]
        markup = message.answer.call_args.kwargs["reply_markup"]
        assert "subject:MATH" in _button_data(markup)
        assert "diff:ADVANCED" in _button_data(markup)

    async def test_difficulty_selected(self, provider):
        """Choosing a level re-renders home with the new level."""
        quiz = QuizApp(provider)
        callback = make_callback("diff:ADVANCED")

        await difficulty_selected(callback, quiz)

        assert quiz.difficulty is Difficulty.ADVANCED
        assert "Advanced (Ages 11-13)" in _last_text(callback)

    async def test_same_difficulty_does_not_edit(self, provider):
        """Re-selecting the current level only answers the callback."""
        quiz = QuizApp(provider)
        callback = make_callback("diff:BEGINNER")

        await difficulty_selected(callback, quiz)

        callback.message.edit_text.assert_not_awaited()
        callback.answer.assert_awaited_once()

    async def test_subject_selected(self, provider, state):
        """Choosing a subject opens its topic list."""
        quiz = QuizApp(provider)
        callback = make_callback("subject:SCIENCE")

        await subject_selected(callback, state, quiz)

        assert quiz.screen is Screen.TOPICS
        assert quiz.subject is Subject.SCIENCE
        state.set_state.assert_awaited_once_with(QuizFlow.choosing_topic)
        data = _button_data(_last_markup(callback))
        assert "topic:random" in data
        assert "topic:space" in data

    async def test_unknown_subject_ignored(self, provider, state):
        """Unknown subject names leave the user on home."""
        quiz = QuizApp(provider)
        callback = make_callback("subject:HISTORY")

        await subject_selected(callback, state, quiz)

        assert quiz.screen is Screen.HOME
        callback.message.edit_text.assert_not_awaited()


class TestQuizHandlers:
    """Loading, answering and finishing a quiz."""

    async def test_topic_selected_shows_first_question(self, quiz, state, provider):
        """Picking a topic loads a batch and shows question one with stamped buttons."""
        callback = make_callback("topic:money")

        await topic_selected(callback, state, quiz)

        assert provider.question_calls == [(Subject.MATH, Difficulty.INTERMEDIATE, "Money Math")]
        assert state.set_state.call_args_list[0][0][0] == QuizFlow.generating_quiz
        state.set_state.assert_awaited_with(QuizFlow.answering_question)
        assert "What is 1 + 1?" in _last_text(callback)
        token = quiz.session.token
        assert _button_data(_last_markup(callback)) == [
            f"ans:{token}:0:0", f"ans:{token}:0:1", f"ans:{token}:0:2", f"ans:{token}:0:3",
            f"hint:{token}:0", f"quit:{token}:0",
        ]

    async def test_callback_data_fits_telegram_limit(self, quiz, state):
        """Every quiz button stays within Telegram's 64 byte callback data limit."""
        callback = make_callback("topic:money")

        await topic_selected(callback, state, quiz)

        assert all(len(data.encode()) <= 64 for data in _button_data(_last_markup(callback)))

    async def test_random_topic(self, quiz, state, provider):
        """The surprise button asks for a mixed batch."""
        await topic_selected(make_callback("topic:random"), state, quiz)

        assert provider.question_calls[0][2] is None

    async def test_empty_result_shows_exit_only(self, quiz, state, provider):
        """An empty batch leaves only the Go Back button."""
        provider.questions_error = EmptyResult("nothing")
        callback = make_callback("topic:logic")

        await topic_selected(callback, state, quiz)

        state.set_state.assert_awaited_with(QuizFlow.quiz_failed)
        assert _last_text(callback) == FAILED_TEXT
        assert _button_data(_last_markup(callback)) == [f"quit:{quiz.session.token}:0"]

    async def test_fallback_question_on_provider_failure(self, quiz, state, provider):
        """An unreachable service still gives a playable question."""
        provider.questions_error = ProviderUnavailable("down")
        callback = make_callback("topic:logic")

        await topic_selected(callback, state, quiz)

        assert "question machine is taking a nap" in _last_text(callback)

    async def test_answer_shows_feedback(self, quiz, state):
        """Answering shows feedback, then fills in the encouragement line."""
        session = await quiz.start_quiz()
        callback = _press(session, "ans", 0)

        await answer_selected(callback, state, quiz)

        assert session.score == 1
        state.set_state.assert_awaited_once_with(QuizFlow.viewing_feedback)
        assert callback.message.edit_text.await_count == 2
        assert "🎉 ..." in callback.message.edit_text.call_args_list[0][0][0]
        assert "🎉 You are a star!" in _last_text(callback)
        assert _button_data(_last_markup(callback)) == [f"next:{session.token}:0", f"quit:{session.token}:0"]

    async def test_feedback_shown_before_encouragement_arrives(self, quiz, state, provider):
        """The feedback panel does not wait for the encouragement request."""
        provider.encouragement_gate = asyncio.Event()
        session = await quiz.start_quiz()
        callback = _press(session, "ans", 1)

        task = asyncio.create_task(answer_selected(callback, state, quiz))
        await asyncio.sleep(0)

        assert session.phase is QuizPhase.FEEDBACK
        callback.message.edit_text.assert_awaited_once()
        text = _last_text(callback)
        assert "🤔 ..." in text
        assert "✅ Correct answer: 2" in text
        assert f"next:{session.token}:0" in _button_data(_last_markup(callback))

        provider.encouragement_gate.set()
        await task

        assert callback.message.edit_text.await_count == 2
        assert "🤔 You are a star!" in _last_text(callback)

    async def test_late_encouragement_does_not_edit_after_next(self, quiz, state, provider):
        """An encouragement line arriving after Next leaves the new question alone."""
        provider.encouragement_gate = asyncio.Event()
        session = await quiz.start_quiz()
        answer = _press(session, "ans", 0)

        task = asyncio.create_task(answer_selected(answer, state, quiz))
        await asyncio.sleep(0)
        await next_selected(_press(session, "next"), state, quiz)
        provider.encouragement_gate.set()
        await task

        assert session.current_index == 1
        assert session.feedback_message is None
        answer.message.edit_text.assert_awaited_once()

    async def test_double_answer_is_ignored(self, quiz, state):
        """A second press on the same question does not change the score."""
        session = await quiz.start_quiz()
        first = _press(session, "ans", 1)
        second = _press(session, "ans", 0)
        await answer_selected(first, state, quiz)

        await answer_selected(second, state, quiz)

        assert session.score == 0
        second.message.edit_text.assert_not_awaited()

    async def test_bad_answer_index_ignored(self, quiz, state):
        """An out-of-range option index is dropped."""
        session = await quiz.start_quiz()
        callback = _press(session, "ans", 7)

        await answer_selected(callback, state, quiz)

        assert session.phase is QuizPhase.ANSWERING
        callback.answer.assert_awaited_once()

    async def test_hint(self, quiz):
        """The hint appears in the question text and its button goes away."""
        session = await quiz.start_quiz()
        callback = _press(session, "hint")

        await hint_requested(callback, quiz)

        assert "💡 Hint: Count on your fingers!" in _last_text(callback)
        assert f"hint:{session.token}:0" not in _button_data(_last_markup(callback))

    async def test_encouragement_failure_keeps_next_button(self, quiz, state, provider):
        """A failed encouragement request still leaves a way forward."""
        provider.encouragement_error = ProviderUnavailable("down")
        session = await quiz.start_quiz()
        callback = _press(session, "ans", 0)

        await answer_selected(callback, state, quiz)

        assert "Great job!" in _last_text(callback)
        assert f"next:{session.token}:0" in _button_data(_last_markup(callback))

    async def test_full_quiz_reaches_results(self, quiz, state):
        """Five answers and Next presses end on the results screen."""
        session = await quiz.start_quiz("Fun Addition")
        callback = None
        for i in range(5):
            question = session.current_question
            index = question.options.index(question.correct_answer if i < 2 else wrong_option(question))
            await answer_selected(_press(session, "ans", index), state, quiz)
            callback = _press(session, "next")
            await next_selected(callback, state, quiz)

        assert quiz.screen is Screen.RESULTS
        state.set_state.assert_awaited_with(QuizFlow.viewing_results)
        assert "You scored 2 out of 5" in _last_text(callback)
        assert _button_data(_last_markup(callback)) == ["retry_quiz", "to_topics", "go_home"]

    async def test_retry(self, quiz, state, provider):
        """Retry from results plays the same topic again from zero."""
        session = await quiz.start_quiz("Fun Addition")
        for _ in range(5):
            await quiz.answer(session.current_question.correct_answer)
            quiz.next_question()
        callback = make_callback("retry_quiz")

        await retry_quiz(callback, state, quiz)

        assert quiz.screen is Screen.QUIZ
        assert quiz.session.score == 0
        assert provider.question_calls[-1][2] == "Fun Addition"
        assert "1/5" in _last_text(callback)

    async def test_quit_to_topics(self, quiz, state):
        """Quit during a question returns to the topic list."""
        session = await quiz.start_quiz()
        callback = _press(session, "quit")

        await quit_quiz(callback, state, quiz)

        assert quiz.screen is Screen.TOPICS
        state.set_state.assert_awaited_once_with(QuizFlow.choosing_topic)
        assert "Mathematics Challenges" in _last_text(callback)

    async def test_another_topic_after_results(self, quiz, state):
        """The results screen leads back to the topic list."""
        session = await quiz.start_quiz()
        for _ in range(5):
            await quiz.answer(session.current_question.correct_answer)
            quiz.next_question()
        callback = make_callback("to_topics")

        await back_to_topics(callback, state, quiz)

        assert quiz.screen is Screen.TOPICS
        assert "Mathematics Challenges" in _last_text(callback)


class TestOldMessages:
    """Buttons pressed on a message that no longer shows the current question."""

    async def _restart(self, quiz):
        """Leave the running quiz and start a new one on another subject."""
        quiz.go_home()
        quiz.select_subject(Subject.SCIENCE)
        return await quiz.start_quiz()

    async def test_answer_from_previous_quiz_is_rejected(self, quiz, state):
        """An answer button from an abandoned quiz does not score the new one."""
        old = await quiz.start_quiz()
        old_button = _press(old, "ans", 0)
        new = await self._restart(quiz)

        await answer_selected(old_button, state, quiz)

        assert new.score == 0
        assert new.phase is QuizPhase.ANSWERING
        old_button.answer.assert_awaited_once_with(EXPIRED_TEXT)
        old_button.message.edit_text.assert_not_awaited()

    async def test_hint_from_previous_quiz_is_rejected(self, quiz):
        """A hint button from an abandoned quiz does not use up the new hint."""
        old = await quiz.start_quiz()
        old_button = _press(old, "hint")
        new = await self._restart(quiz)

        await hint_requested(old_button, quiz)

        assert new.hint_used is False
        old_button.answer.assert_awaited_once_with(EXPIRED_TEXT)

    async def test_next_from_previous_quiz_is_rejected(self, quiz, state):
        """A Next button from an abandoned quiz does not advance the new one."""
        old = await quiz.start_quiz()
        await quiz.answer(old.current_question.correct_answer)
        old_button = _press(old, "next")
        new = await self._restart(quiz)
        await quiz.answer(new.current_question.correct_answer)

        await next_selected(old_button, state, quiz)

        assert new.current_index == 0
        assert new.phase is QuizPhase.FEEDBACK
        old_button.answer.assert_awaited_once_with(EXPIRED_TEXT)

    async def test_quit_from_previous_quiz_is_rejected(self, quiz, state):
        """A Quit button from an abandoned quiz leaves the new one running."""
        old = await quiz.start_quiz()
        old_button = _press(old, "quit")
        new = await self._restart(quiz)

        await quit_quiz(old_button, state, quiz)

        assert quiz.screen is Screen.QUIZ
        assert quiz.session is new
        old_button.answer.assert_awaited_once_with(EXPIRED_TEXT)

    async def test_answer_for_an_earlier_question_is_rejected(self, quiz, state):
        """A button stamped with an earlier question index is refused."""
        session = await quiz.start_quiz()
        first_question_button = _press(session, "ans", 0)
        await quiz.answer(session.current_question.correct_answer)
        quiz.next_question()

        await answer_selected(first_question_button, state, quiz)

        assert session.current_index == 1
        assert session.phase is QuizPhase.ANSWERING
        first_question_button.answer.assert_awaited_once_with(EXPIRED_TEXT)


class TestPlumbing:
    """Middleware and fallback handlers."""

    async def test_stale_button(self):
        """Unrouted button presses get the expired notice."""
        callback = make_callback("ans:deadbeef:0:2")

        await stale_button(callback)

        callback.answer.assert_awaited_once_with(EXPIRED_TEXT)

    async def test_middleware_injects_user_app(self, provider):
        """Handlers receive the QuizApp of the pressing user."""
        registry = SessionRegistry(provider)
        middleware = QuizSessionMiddleware(registry)

        async def handler(event, data):
            return data["quiz"]

        result = await middleware(handler, make_callback("hint:deadbeef:0", user_id=42), {})

        assert result is registry.get(42)

    async def test_middleware_skips_anonymous_updates(self, provider):
        """Updates without a sender never reach a handler."""
        middleware = QuizSessionMiddleware(SessionRegistry(provider))
        event = MagicMock(spec=[])
        calls = []

        async def handler(event, data):
            calls.append(data)

        await middleware(handler, event, {})

        assert calls == []
