"""
Purpose: The single orchestration point for an interview. Owns the signed-in
user and the active session state between Streamlit reruns.
Prevents the UI from knowing how questions, scoring, storage or speech work.

Key responsibilities:
- Sign up / sign in / sign out through the AuthProvider.
- Start a session for a role and serve the first scripted question.
- Record each answer as an Exchange, ask the question selector for the next
  turn, and advance the scripted index only on non-follow-up questions.
- Complete the session after QUESTIONS_PER_SESSION answers.
- Load stored feedback or score the transcript once and save it.
- List the user's recent completed sessions with their feedback.

Testing: Pure unit tests with the in-memory store/auth and a seeded random.Random.
"""

from __future__ import annotations

import random
from typing import Optional, Union

from .config import HISTORY_LIMIT, QUESTIONS_PER_SESSION, Settings
from .interfaces import AuthProvider, SessionStore, SpeechClient
from .models import (
    Feedback,
    InterviewSession,
    NextQuestion,
    RoleType,
    SessionState,
    UserAccount,
)
from .persistence.session_store import StoreError
from .roles import to_role_type
from .services.answer_critic import score_interview
from .services.question_generator import get_initial_question, next_question
from .services.security import DefaultSecurity
from .utils.logger import get_logger

logger = get_logger("controller")


class InterviewSessionController:
    def __init__(
        self,
        store: SessionStore,
        auth: AuthProvider,
        speech: Optional[SpeechClient] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.auth = auth
        self.speech = speech
        self.rng = rng or random.Random()
        self.security = DefaultSecurity()
        self.user: Optional[UserAccount] = None
        self.state = SessionState()

    # ---------------------------
    # Identity
    # ---------------------------
    @property
    def current_user(self) -> Optional[UserAccount]:
        return self.user

    def _signed_in(self, user: UserAccount) -> UserAccount:
        self.user = user
        if hasattr(self.store, "set_access_token"):
            self.store.set_access_token(user.access_token)
        logger.info("User %s signed in", user.id)
        return user

    def sign_up(self, email: str, password: str) -> UserAccount:
        email = self.security.validate_credentials(email, password)
        return self._signed_in(self.auth.sign_up(email, password))

    def sign_in(self, email: str, password: str) -> UserAccount:
        email = self.security.validate_credentials(email, password)
        return self._signed_in(self.auth.sign_in(email, password))

    def sign_out(self) -> None:
        user, self.user = self.user, None
        self.reset()
        if hasattr(self.store, "set_access_token"):
            self.store.set_access_token(None)
        if user is not None:
            self.auth.sign_out(user)
            logger.info("User %s signed out", user.id)

    def _require_user(self) -> UserAccount:
        if self.user is None:
            raise RuntimeError("Sign in before starting an interview.")
        return self.user

    # ---------------------------
    # Interview flow
    # ---------------------------
    @property
    def session(self) -> Optional[InterviewSession]:
        return self.state.session

    @property
    def role(self) -> Optional[RoleType]:
        return self.state.session.role_type if self.state.session else None

    def is_active(self) -> bool:
        return self.state.session is not None and not self.state.completed

    def start_interview(self, role: Union[RoleType, str]) -> str:
        """Create a session for role and return the opening question."""
        role = to_role_type(role)
        user = self._require_user()
        session = self.store.create_session(user.id, role)
        self.state = SessionState(
            session=session,
            current_question=get_initial_question(role),
        )
        logger.info("Started %s interview %s", role.value, session.id)
        return self.state.current_question

    def submit_response(self, text: str) -> Optional[NextQuestion]:
        """
        Record the answer to the current question.
        Returns the next question, or None once the interview is complete.
        """
        if not self.is_active():
            raise RuntimeError("No interview in progress.")
        session = self.state.session
        # a previous completion attempt failed: retry it, record nothing new
        if len(self.state.exchanges) >= QUESTIONS_PER_SESSION:
            return self._complete(session)

        answer = self.security.validate_user_input(text)
        exchange = self.store.add_exchange(
            session.id,
            sequence=len(self.state.exchanges),
            question=self.state.current_question,
            response=answer,
        )
        self.state.exchanges.append(exchange)

        if len(self.state.exchanges) >= QUESTIONS_PER_SESSION:
            return self._complete(session)

        nxt = next_question(
            session.role_type, self.state.question_index + 1, answer, rng=self.rng
        )
        if not nxt.is_follow_up:
            self.state.question_index += 1
        self.state.current_question = nxt.question
        self.state.is_follow_up = nxt.is_follow_up
        logger.debug(
            "Session %s turn %d follow_up=%s",
            session.id,
            len(self.state.exchanges),
            nxt.is_follow_up,
        )
        return nxt

    def _complete(self, session: InterviewSession) -> None:
        self.state.session = self.store.complete_session(session.id)
        self.state.completed = True
        logger.info("Completed interview %s", session.id)
        return None

    def question_number(self) -> int:
        """1-based number of the question being asked, as shown in the UI."""
        return min(len(self.state.exchanges) + 1, QUESTIONS_PER_SESSION)

    def load_or_generate_feedback(
        self, session_id: str, role: Union[RoleType, str]
    ) -> Optional[Feedback]:
        existing = self.store.get_feedback(session_id)
        if existing is not None:
            return existing

        exchanges = self.store.list_exchanges(session_id)
        if not exchanges:
            logger.warning("No exchanges recorded for session %s", session_id)
            return None

        feedback = score_interview(role, exchanges)
        try:
            saved = self.store.save_feedback(session_id, feedback)
        except StoreError:
            # another rerun or tab saved it first
            existing = self.store.get_feedback(session_id)
            if existing is None:
                raise
            logger.info("Feedback for session %s was saved concurrently", session_id)
            return existing
        logger.info(
            "Scored session %s overall=%d", session_id, saved.overall_score
        )
        return saved

    def list_history(
        self, limit: int = HISTORY_LIMIT
    ) -> list[tuple[InterviewSession, Optional[Feedback]]]:
        user = self._require_user()
        sessions = self.store.list_completed_sessions(user.id, limit=limit)
        return [(s, self.store.get_feedback(s.id)) for s in sessions]

    def reset(self) -> None:
        """Drop the active session state (back to role selection)."""
        self.state = SessionState()

    # ---------------------------
    # Speech
    # ---------------------------
    def speech_enabled(self) -> bool:
        return self.speech is not None

    def speak(self, text: str) -> bytes:
        if self.speech is None:
            return b""
        return self.speech.synthesize(text)

    def voice_to_text(self, wav_bytes: bytes) -> str:
        if self.speech is None:
            raise RuntimeError("Voice input is not configured (OPENAI_API_KEY).")
        return self.speech.transcribe(wav_bytes)


def build_backends(settings: Settings) -> tuple[SessionStore, AuthProvider]:
    """Store and auth provider for the configured backend."""
    if settings.uses_supabase:
        from .persistence.supabase_store import SupabaseSessionStore
        from .services.auth import SupabaseAuthProvider

        return (
            SupabaseSessionStore(
                settings.supabase_url, settings.supabase_key, timeout=settings.http_timeout
            ),
            SupabaseAuthProvider(
                settings.supabase_url, settings.supabase_key, timeout=settings.http_timeout
            ),
        )

    from .persistence.session_store import InMemorySessionStore
    from .services.auth import InMemoryAuthProvider

    return InMemorySessionStore(), InMemoryAuthProvider()


def build_speech(settings: Settings) -> Optional[SpeechClient]:
    if not settings.speech_enabled:
        return None
    from .services.openai_client import OpenAISpeechClient

    return OpenAISpeechClient(
        settings.openai_api_key,
        tts_model=settings.tts_model,
        tts_voice=settings.tts_voice,
        stt_model=settings.stt_model,
    )
