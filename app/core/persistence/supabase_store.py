"""
Purpose: SessionStore backed by Supabase (PostgREST over httpx).

Tables:
- interview_sessions  (id, user_id, role_type, status, created_at, completed_at)
- interview_exchanges (id, session_id, sequence, question, response, created_at)
- interview_feedback  (id, session_id, overall_score, communication_score,
                       technical_score, strengths, improvements,
                       detailed_feedback, created_at)

Any HTTP failure becomes StoreError; nothing is retried here.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from core.models import (
    Exchange,
    Feedback,
    InterviewSession,
    RoleType,
    SessionStatus,
    utcnow,
)
from core.utils.logger import get_logger
from .session_store import StoreError

logger = get_logger("persistence.supabase_store")

SESSIONS = "interview_sessions"
EXCHANGES = "interview_exchanges"
FEEDBACK = "interview_feedback"


class SupabaseSessionStore:
    def __init__(
        self,
        url: Optional[str],
        key: Optional[str],
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not url or not key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set.")
        self.key = key
        self.client = httpx.Client(
            base_url=url.rstrip("/"),
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            },
            timeout=timeout,
            transport=transport,
        )

    def set_access_token(self, token: Optional[str]) -> None:
        """Act as the signed-in user so row-level security applies."""
        self.client.headers["Authorization"] = f"Bearer {token or self.key}"

    def _request(self, method: str, table: str, **kwargs) -> list[dict[str, Any]]:
        try:
            response = self.client.request(method, f"/rest/v1/{table}", **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Supabase %s on %s failed: %s", method, table, e)
            raise StoreError(f"Could not reach the interview store ({table}).") from e
        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    def _select(
        self,
        table: str,
        filters: dict[str, str],
        *,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        params = {"select": "*"}
        for key, val in filters.items():
            params[key] = f"eq.{val}"
        if order:
            params["order"] = order
        if limit:
            params["limit"] = str(limit)
        return self._request("GET", table, params=params)

    @staticmethod
    def _single(rows: list[dict[str, Any]], what: str) -> dict[str, Any]:
        if not rows:
            raise StoreError(f"Store returned no {what} row.")
        return rows[0]

    def create_session(self, user_id: str, role: RoleType) -> InterviewSession:
        rows = self._request(
            "POST",
            SESSIONS,
            json={
                "user_id": user_id,
                "role_type": RoleType(role).value,
                "status": SessionStatus.IN_PROGRESS.value,
            },
        )
        return InterviewSession.from_record(self._single(rows, "session"))

    def get_session(self, session_id: str) -> Optional[InterviewSession]:
        rows = self._select(SESSIONS, {"id": session_id}, limit=1)
        return InterviewSession.from_record(rows[0]) if rows else None

    def complete_session(self, session_id: str) -> InterviewSession:
        rows = self._request(
            "PATCH",
            SESSIONS,
            params={"id": f"eq.{session_id}"},
            json={
                "status": SessionStatus.COMPLETED.value,
                "completed_at": utcnow().isoformat(),
            },
        )
        return InterviewSession.from_record(self._single(rows, "session"))

    def list_completed_sessions(
        self, user_id: str, limit: int = 10
    ) -> list[InterviewSession]:
        rows = self._select(
            SESSIONS,
            {"user_id": user_id, "status": SessionStatus.COMPLETED.value},
            order="completed_at.desc",
            limit=limit,
        )
        return [InterviewSession.from_record(r) for r in rows]

    def add_exchange(
        self, session_id: str, sequence: int, question: str, response: str
    ) -> Exchange:
        rows = self._request(
            "POST",
            EXCHANGES,
            json={
                "session_id": session_id,
                "sequence": sequence,
                "question": question,
                "response": response,
            },
        )
        return Exchange.from_record(self._single(rows, "exchange"))

    def list_exchanges(self, session_id: str) -> list[Exchange]:
        rows = self._select(EXCHANGES, {"session_id": session_id}, order="sequence.asc")
        return [Exchange.from_record(r) for r in rows]

    def get_feedback(self, session_id: str) -> Optional[Feedback]:
        rows = self._select(FEEDBACK, {"session_id": session_id}, limit=1)
        return Feedback.from_record(rows[0]) if rows else None

    def save_feedback(self, session_id: str, feedback: Feedback) -> Feedback:
        record = feedback.to_record()
        record["session_id"] = session_id
        rows = self._request("POST", FEEDBACK, json=record)
        return Feedback.from_record(self._single(rows, "feedback"))
