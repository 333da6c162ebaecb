"""Domain models for the game."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class SessionStatus(str, Enum):
    """Lifecycle status of a session row."""

    WAITING = "waiting"
    ACTIVE = "active"
    REVEALED = "revealed"
    FINISHED = "finished"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    SessionStatus.WAITING: 0,
    SessionStatus.ACTIVE: 1,
    SessionStatus.REVEALED: 2,
    SessionStatus.FINISHED: 3,
}


class ParticipantStage(str, Enum):
    """What a participant device currently shows."""

    LOADING = "loading"
    ACCEPTING_ANSWER = "accepting-answer"
    WAITING = "waiting"
    REVEALED = "revealed"
    FINISHED = "finished"
    ERROR = "loading-error"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return utc_now()


@dataclass(slots=True)
class Session:
    """One host-run game instance spanning one or more questions."""

    id: str
    questions: list[str]
    current_question_index: int = 0
    status: SessionStatus = SessionStatus.ACTIVE
    created_at: datetime = field(default_factory=utc_now)

    @property
    def question(self) -> str:
        """Legacy single-question field, mirrors the first question."""
        return self.questions[0]

    @property
    def current_question(self) -> str:
        return self.questions[self.current_question_index]

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def is_last_question(self) -> bool:
        return self.current_question_index == len(self.questions) - 1

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "questions": list(self.questions),
            "current_question_index": self.current_question_index,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Session":
        questions = row.get("questions") or []
        if not questions and row.get("question"):
            # Rows written before multi-question sessions only carry `question`.
            questions = [row["question"]]
        return cls(
            id=str(row["id"]),
            questions=list(questions),
            current_question_index=int(row.get("current_question_index") or 0),
            status=SessionStatus(row.get("status") or SessionStatus.WAITING.value),
            created_at=_parse_timestamp(row.get("created_at")),
        )


@dataclass(slots=True)
class Answer:
    """An immutable, append-only answer submitted by a participant."""

    id: str
    session_id: str
    participant_name: str
    answer: str
    question_index: int
    submitted_at: datetime = field(default_factory=utc_now)

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "participant_name": self.participant_name,
            "answer": self.answer,
            "question_index": self.question_index,
            "submitted_at": self.submitted_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Answer":
        return cls(
            id=str(row["id"]),
            session_id=str(row["session_id"]),
            participant_name=row.get("participant_name") or "",
            answer=row.get("answer") or "",
            question_index=int(row.get("question_index") or 0),
            submitted_at=_parse_timestamp(row.get("submitted_at")),
        )


@dataclass(slots=True)
class AnswerGroup:
    """All answers sharing a canonical key, derived fresh on every change."""

    key: str
    display: str
    count: int = 1
    participants: list[str] = field(default_factory=list)
    is_winner: bool = False
    points: int = 0
