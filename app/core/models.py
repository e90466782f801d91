"""
Canonical data shapes, shared truth for typing/validation between layers.

Typical contents:
- RoleType (the five practice roles) and RoleConfig (static script per role).
- Exchange (one question/answer pair) and Feedback (end-of-session result).
- InterviewSession / UserAccount (records owned by the store and auth layers).
- SessionState (what the controller keeps between Streamlit reruns).

Testing: Trivial; mostly types. Conversions live in from_record helpers.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from enum import Enum
from datetime import datetime, timezone


class RoleType(str, Enum):
    SALES = "sales"
    ENGINEER = "engineer"
    RETAIL_ASSOCIATE = "retail_associate"
    MARKETING = "marketing"
    CUSTOMER_SERVICE = "customer_service"


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass(frozen=True)
class RoleConfig:
    title: str
    description: str
    questions: tuple[str, ...]
    follow_up_triggers: Mapping[str, tuple[str, ...]]


@dataclass(frozen=True)
class NextQuestion:
    question: str
    is_follow_up: bool = False


@dataclass(frozen=True)
class Exchange:
    sequence: int
    question: str
    response: str
    session_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> "Exchange":
        return cls(
            sequence=int(rec["sequence"]),
            question=rec["question"],
            response=rec["response"],
            session_id=rec.get("session_id"),
            id=rec.get("id"),
            created_at=_parse_ts(rec.get("created_at")),
        )


@dataclass(frozen=True)
class Feedback:
    overall_score: int
    communication_score: int
    technical_score: int
    strengths: str
    improvements: str
    detailed_feedback: str
    session_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def scores(self) -> dict[str, int]:
        return {
            "overall_score": self.overall_score,
            "communication_score": self.communication_score,
            "technical_score": self.technical_score,
        }

    def to_record(self) -> dict[str, Any]:
        """Columns written to the feedback table (store fills id/created_at)."""
        return {
            "session_id": self.session_id,
            **self.scores(),
            "strengths": self.strengths,
            "improvements": self.improvements,
            "detailed_feedback": self.detailed_feedback,
        }

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> "Feedback":
        return cls(
            overall_score=int(rec["overall_score"]),
            communication_score=int(rec["communication_score"]),
            technical_score=int(rec["technical_score"]),
            strengths=rec.get("strengths") or "",
            improvements=rec.get("improvements") or "",
            detailed_feedback=rec.get("detailed_feedback") or "",
            session_id=rec.get("session_id"),
            id=rec.get("id"),
            created_at=_parse_ts(rec.get("created_at")),
        )


@dataclass(frozen=True)
class InterviewSession:
    id: str
    user_id: str
    role_type: RoleType
    status: SessionStatus = SessionStatus.IN_PROGRESS
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> "InterviewSession":
        return cls(
            id=rec["id"],
            user_id=rec["user_id"],
            role_type=RoleType(rec["role_type"]),
            status=SessionStatus(rec.get("status") or SessionStatus.IN_PROGRESS),
            created_at=_parse_ts(rec.get("created_at")),
            completed_at=_parse_ts(rec.get("completed_at")),
        )


@dataclass(frozen=True)
class UserAccount:
    id: str
    email: str
    access_token: Optional[str] = None


@dataclass
class SessionState:
    session: Optional[InterviewSession] = None
    exchanges: list[Exchange] = field(default_factory=list)
    current_question: str = ""
    question_index: int = 0
    is_follow_up: bool = False
    completed: bool = False
