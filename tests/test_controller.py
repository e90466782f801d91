import pytest

from conftest import FakeSpeech, ScriptedRandom
from core.config import QUESTIONS_PER_SESSION
from core.controller import InterviewSessionController
from core.models import RoleType, SessionStatus
from core.persistence.session_store import InMemorySessionStore, StoreError
from core.roles import get_role_config
from core.services.auth import AuthError
from core.services.question_generator import CLOSING_LINE

SALES = get_role_config(RoleType.SALES)
LONG_TRIGGER = "My experience covers a decade of B2B sales across three regions and teams."


def run_full_interview(controller, role="sales", answer="A solid answer."):
    controller.start_interview(role)
    result = None
    for _ in range(QUESTIONS_PER_SESSION):
        result = controller.submit_response(answer)
    return result


class TestIdentity:
    def test_sign_up_sets_current_user(self, controller):
        user = controller.sign_up("  Ana@Example.com ", "secret123")
        assert controller.current_user == user
        assert user.email == "ana@example.com"

    def test_sign_in_after_sign_out(self, signed_in):
        signed_in.sign_out()
        assert signed_in.current_user is None
        user = signed_in.sign_in("ana@example.com", "secret123")
        assert signed_in.current_user == user

    def test_wrong_password(self, signed_in):
        signed_in.sign_out()
        with pytest.raises(AuthError):
            signed_in.sign_in("ana@example.com", "wrong-password")

    def test_invalid_email_rejected_before_auth(self, controller):
        with pytest.raises(ValueError, match="valid email"):
            controller.sign_up("not-an-email", "secret123")

    def test_start_requires_sign_in(self, controller):
        with pytest.raises(RuntimeError, match="Sign in"):
            controller.start_interview("sales")


class TestInterviewFlow:
    def test_start_returns_first_question_and_creates_session(self, signed_in, store):
        first = signed_in.start_interview("sales")
        assert first == SALES.questions[0]
        session = store.get_session(signed_in.session.id)
        assert session.status is SessionStatus.IN_PROGRESS
        assert session.user_id == signed_in.current_user.id
        assert signed_in.question_number() == 1

    def test_scripted_path_advances_index(self, signed_in, store):
        signed_in.start_interview("sales")
        asked = [signed_in.state.current_question]
        for _ in range(QUESTIONS_PER_SESSION - 1):
            nxt = signed_in.submit_response("Short answer.")
            assert not nxt.is_follow_up
            asked.append(nxt.question)
        assert asked == list(SALES.questions)

        exchanges = store.list_exchanges(signed_in.session.id)
        assert [x.sequence for x in exchanges] == [0, 1, 2, 3, 4]
        assert [x.question for x in exchanges] == list(SALES.questions[:5])

    def test_sixth_answer_completes_session(self, signed_in, store):
        result = run_full_interview(signed_in)
        assert result is None
        assert not signed_in.is_active()
        session = store.get_session(signed_in.session.id)
        assert session.status is SessionStatus.COMPLETED
        assert session.completed_at is not None
        assert len(store.list_exchanges(session.id)) == QUESTIONS_PER_SESSION

    def test_submit_after_completion_rejected(self, signed_in):
        run_full_interview(signed_in)
        with pytest.raises(RuntimeError):
            signed_in.submit_response("one more")

    def test_follow_up_does_not_advance_index(self, store, auth):
        controller = InterviewSessionController(
            store, auth, rng=ScriptedRandom([0.9, 0.0])
        )
        controller.sign_up("ana@example.com", "secret123")
        controller.start_interview("sales")

        follow = controller.submit_response(LONG_TRIGGER)
        assert follow.is_follow_up
        assert follow.question == "Can you give me a specific example?"
        assert controller.state.question_index == 0
        assert controller.state.is_follow_up

        nxt = controller.submit_response("We closed it.")
        assert not nxt.is_follow_up
        assert nxt.question == SALES.questions[1]
        assert controller.state.question_index == 1

        exchanges = store.list_exchanges(controller.session.id)
        assert exchanges[1].question == "Can you give me a specific example?"

    def test_follow_ups_can_exhaust_script_into_closing_line(self, store, auth):
        # pointer on the last scripted question: the next turn is past the script
        controller = InterviewSessionController(store, auth, rng=ScriptedRandom())
        controller.sign_up("ana@example.com", "secret123")
        controller.start_interview("sales")
        controller.state.question_index = len(SALES.questions) - 1
        nxt = controller.submit_response("fine")
        assert nxt.question == CLOSING_LINE

    def test_empty_answer_rejected_and_not_stored(self, signed_in, store):
        signed_in.start_interview("engineer")
        with pytest.raises(ValueError):
            signed_in.submit_response("   ")
        assert store.list_exchanges(signed_in.session.id) == []
        assert signed_in.question_number() == 1

    def test_answers_are_trimmed(self, signed_in, store):
        signed_in.start_interview("engineer")
        signed_in.submit_response("  padded answer \n")
        assert store.list_exchanges(signed_in.session.id)[0].response == "padded answer"

    def test_invalid_role(self, signed_in):
        with pytest.raises(ValueError):
            signed_in.start_interview("wizard")

    def test_reset_returns_to_role_selection(self, signed_in):
        signed_in.start_interview("marketing")
        signed_in.reset()
        assert signed_in.session is None
        assert not signed_in.is_active()


class FlakyCompletionStore(InMemorySessionStore):
    """complete_session fails the first `failures` times."""

    def __init__(self, failures=1):
        super().__init__()
        self.failures = failures

    def complete_session(self, session_id):
        if self.failures:
            self.failures -= 1
            raise StoreError("Could not reach the interview store (interview_sessions).")
        return super().complete_session(session_id)


class RacingFeedbackStore(InMemorySessionStore):
    """Another writer stores feedback between our read and our save."""

    def save_feedback(self, session_id, feedback):
        super().save_feedback(session_id, feedback)
        return super().save_feedback(session_id, feedback)


class TestStoreFailures:
    def test_failed_completion_is_retried_without_a_seventh_exchange(self, auth):
        store = FlakyCompletionStore()
        controller = InterviewSessionController(store, auth, rng=ScriptedRandom())
        controller.sign_up("ana@example.com", "secret123")
        controller.start_interview("sales")
        for _ in range(QUESTIONS_PER_SESSION - 1):
            controller.submit_response("A solid answer.")

        with pytest.raises(StoreError):
            controller.submit_response("My last answer.")
        assert controller.is_active()
        assert controller.question_number() == QUESTIONS_PER_SESSION

        assert controller.submit_response("My last answer.") is None
        assert not controller.is_active()
        exchanges = store.list_exchanges(controller.session.id)
        assert [x.sequence for x in exchanges] == [0, 1, 2, 3, 4, 5]
        assert exchanges[-1].response == "My last answer."
        assert store.get_session(controller.session.id).status is SessionStatus.COMPLETED

    def test_failed_exchange_write_keeps_the_turn(self, signed_in, store, monkeypatch):
        signed_in.start_interview("sales")

        def refuse(*args, **kwargs):
            raise StoreError("down")

        monkeypatch.setattr(store, "add_exchange", refuse)
        with pytest.raises(StoreError):
            signed_in.submit_response("An answer.")
        assert signed_in.state.exchanges == []
        assert signed_in.state.current_question == SALES.questions[0]

    def test_feedback_saved_concurrently_is_reloaded(self, auth):
        store = RacingFeedbackStore()
        controller = InterviewSessionController(store, auth, rng=ScriptedRandom())
        controller.sign_up("ana@example.com", "secret123")
        run_full_interview(controller, role="engineer", answer="abcdefghij")
        session_id = controller.session.id

        feedback = controller.load_or_generate_feedback(session_id, "engineer")
        assert feedback == store.get_feedback(session_id)
        assert feedback.overall_score == 6

    def test_feedback_save_failure_without_stored_row_propagates(
        self, signed_in, store, monkeypatch
    ):
        run_full_interview(signed_in)

        def refuse(*args, **kwargs):
            raise StoreError("down")

        monkeypatch.setattr(store, "save_feedback", refuse)
        with pytest.raises(StoreError):
            signed_in.load_or_generate_feedback(signed_in.session.id, "sales")


class TestFeedback:
    def test_generated_once_then_loaded(self, signed_in, store):
        run_full_interview(signed_in, role="engineer", answer="abcdefghij")
        session_id = signed_in.session.id

        first = signed_in.load_or_generate_feedback(session_id, "engineer")
        assert first.overall_score == 6
        assert first.session_id == session_id

        second = signed_in.load_or_generate_feedback(session_id, "engineer")
        assert second.id == first.id
        assert store.get_feedback(session_id) == first

    def test_no_exchanges_gives_none(self, signed_in, store):
        signed_in.start_interview("sales")
        assert signed_in.load_or_generate_feedback(signed_in.session.id, "sales") is None
        assert store.get_feedback(signed_in.session.id) is None


class TestHistory:
    def test_only_completed_sessions_of_user_newest_first(self, signed_in, auth, store):
        run_full_interview(signed_in, role="sales")
        older = signed_in.session.id
        run_full_interview(signed_in, role="marketing")
        newer = signed_in.session.id
        signed_in.load_or_generate_feedback(newer, "marketing")
        signed_in.start_interview("engineer")

        other = InterviewSessionController(store, auth, rng=ScriptedRandom())
        other.sign_up("bo@example.com", "secret123")
        run_full_interview(other)

        history = signed_in.list_history()
        assert [s.id for s, _ in history] == [newer, older]
        assert history[0][1] is not None
        assert history[1][1] is None

    def test_limit(self, signed_in):
        for _ in range(3):
            run_full_interview(signed_in)
        assert len(signed_in.list_history(limit=2)) == 2

    def test_requires_sign_in(self, controller):
        with pytest.raises(RuntimeError):
            controller.list_history()


class TestSpeech:
    def test_disabled_without_client(self, controller):
        assert not controller.speech_enabled()
        assert controller.speak("hello") == b""
        with pytest.raises(RuntimeError):
            controller.voice_to_text(b"RIFF")

    def test_delegates_to_client(self, store, auth):
        speech = FakeSpeech("I led the project.")
        controller = InterviewSessionController(store, auth, speech=speech)
        assert controller.speak("Question?") == b"mp3:Question?"
        assert controller.voice_to_text(b"RIFF") == "I led the project."
