"""
Abstractions for pluggable services. Inversion of control: the controller
depends on interfaces, not concrete services. Enables fakes/mocks and swapping
the in-memory store for Supabase without touching the controller.

Common protocols:
- SessionStore: sessions, exchanges and feedback keyed by session id.
- AuthProvider.sign_up / sign_in / sign_out -> UserAccount
- SpeechClient.transcribe(wav_bytes) / synthesize(text)

Testing: Use the in-memory implementations or simple fakes; no network calls.
"""

from __future__ import annotations
from typing import Optional, Protocol

from .models import Exchange, Feedback, InterviewSession, RoleType, UserAccount


class SessionStore(Protocol):
    def create_session(self, user_id: str, role: RoleType) -> InterviewSession: ...

    def get_session(self, session_id: str) -> Optional[InterviewSession]: ...

    def complete_session(self, session_id: str) -> InterviewSession: ...

    def list_completed_sessions(
        self, user_id: str, limit: int = 10
    ) -> list[InterviewSession]: ...

    def add_exchange(
        self, session_id: str, sequence: int, question: str, response: str
    ) -> Exchange: ...

    def list_exchanges(self, session_id: str) -> list[Exchange]: ...

    def get_feedback(self, session_id: str) -> Optional[Feedback]: ...

    def save_feedback(self, session_id: str, feedback: Feedback) -> Feedback: ...


class AuthProvider(Protocol):
    def sign_up(self, email: str, password: str) -> UserAccount: ...

    def sign_in(self, email: str, password: str) -> UserAccount: ...

    def sign_out(self, user: UserAccount) -> None: ...


class SpeechClient(Protocol):
    def transcribe(self, wav_bytes: bytes) -> str: ...

    def synthesize(self, text: str) -> bytes: ...
