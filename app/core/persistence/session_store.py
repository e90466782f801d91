"""
Purpose: Session, exchange and feedback storage (in-memory; Supabase lives in
supabase_store.py behind the same SessionStore protocol).
Why: Reopen finished sessions from the history list, keep one Feedback per session.

What is inside:
InMemorySessionStore: dicts keyed by session id, guarded by a lock so several
Streamlit sessions can share one process-wide instance.

Testing:
In-memory: simple state tests; the Supabase store is tested with httpx.MockTransport.
"""

from __future__ import annotations

import dataclasses
import itertools
import threading
import uuid
from typing import Optional

from core.models import (
    Exchange,
    Feedback,
    InterviewSession,
    RoleType,
    SessionStatus,
    utcnow,
)


class StoreError(RuntimeError):
    pass


class InMemorySessionStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, InterviewSession] = {}
        self._exchanges: dict[str, list[Exchange]] = {}
        self._feedback: dict[str, Feedback] = {}
        self._completion_order = itertools.count()
        self._completed_seq: dict[str, int] = {}

    def _require_session(self, session_id: str) -> InterviewSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise StoreError(f"Unknown interview session: {session_id}")
        return session

    def create_session(self, user_id: str, role: RoleType) -> InterviewSession:
        session = InterviewSession(
            id=str(uuid.uuid4()),
            user_id=user_id,
            role_type=RoleType(role),
            status=SessionStatus.IN_PROGRESS,
            created_at=utcnow(),
        )
        with self._lock:
            self._sessions[session.id] = session
            self._exchanges[session.id] = []
        return session

    def get_session(self, session_id: str) -> Optional[InterviewSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def complete_session(self, session_id: str) -> InterviewSession:
        with self._lock:
            session = dataclasses.replace(
                self._require_session(session_id),
                status=SessionStatus.COMPLETED,
                completed_at=utcnow(),
            )
            self._sessions[session_id] = session
            self._completed_seq[session_id] = next(self._completion_order)
        return session

    def list_completed_sessions(
        self, user_id: str, limit: int = 10
    ) -> list[InterviewSession]:
        with self._lock:
            done = [
                s
                for s in self._sessions.values()
                if s.user_id == user_id and s.status is SessionStatus.COMPLETED
            ]
            # ties on completed_at fall back to completion order
            done.sort(
                key=lambda s: (s.completed_at, self._completed_seq[s.id]), reverse=True
            )
        return done[:limit]

    def add_exchange(
        self, session_id: str, sequence: int, question: str, response: str
    ) -> Exchange:
        exchange = Exchange(
            sequence=sequence,
            question=question,
            response=response,
            session_id=session_id,
            id=str(uuid.uuid4()),
            created_at=utcnow(),
        )
        with self._lock:
            self._require_session(session_id)
            rows = self._exchanges[session_id]
            if any(x.sequence == sequence for x in rows):
                raise StoreError(
                    f"Exchange {sequence} already recorded for session {session_id}"
                )
            rows.append(exchange)
        return exchange

    def list_exchanges(self, session_id: str) -> list[Exchange]:
        with self._lock:
            rows = list(self._exchanges.get(session_id, []))
        return sorted(rows, key=lambda x: x.sequence)

    def get_feedback(self, session_id: str) -> Optional[Feedback]:
        with self._lock:
            return self._feedback.get(session_id)

    def save_feedback(self, session_id: str, feedback: Feedback) -> Feedback:
        saved = dataclasses.replace(
            feedback, session_id=session_id, id=str(uuid.uuid4()), created_at=utcnow()
        )
        with self._lock:
            self._require_session(session_id)
            if session_id in self._feedback:
                raise StoreError(f"Feedback already exists for session {session_id}")
            self._feedback[session_id] = saved
        return saved
