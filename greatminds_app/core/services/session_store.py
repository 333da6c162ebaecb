"""Row store with per-session change notification.

The store holds two tables, ``sessions`` and ``answers``. Subscribers receive
the full new row for every update of their session row and every answer
inserted for their session. Delivery is at-least-once and ordered per row;
consumers must not rely on ordering across rows.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
import logging
from threading import Lock
from typing import Any, Callable, Protocol, Sequence
from uuid import uuid4

from greatminds_app.core.errors import StoreError
from greatminds_app.core.models import Answer, Session, SessionStatus, utc_now

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "sessions"
ANSWERS_TABLE = "answers"


class ChangeKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"


@dataclass(slots=True, frozen=True)
class ChangeEvent:
    """One change notification carrying the full new row."""

    sequence: int
    table: str
    kind: ChangeKind
    row: dict[str, Any]
    row_version: int = 1

    @property
    def row_id(self) -> str:
        return str(self.row["id"])

    def to_payload(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "table": self.table,
            "kind": self.kind.value,
            "row": dict(self.row),
            "row_version": self.row_version,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ChangeEvent":
        return cls(
            sequence=int(payload["sequence"]),
            table=payload["table"],
            kind=ChangeKind(payload["kind"]),
            row=dict(payload["row"]),
            row_version=int(payload.get("row_version", 1)),
        )


class Subscription:
    """Queue of pending notifications for one session."""

    def __init__(self, session_id: str, on_unsubscribe: Callable[["Subscription"], None] | None = None) -> None:
        self.session_id = session_id
        self._on_unsubscribe = on_unsubscribe
        self._pending: deque[ChangeEvent] = deque()
        self._lock = Lock()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def push(self, event: ChangeEvent) -> None:
        with self._lock:
            if self._active:
                self._pending.append(event)

    def drain(self) -> list[ChangeEvent]:
        """Return and clear everything delivered since the last drain."""
        with self._lock:
            events = list(self._pending)
            self._pending.clear()
        return events

    def unsubscribe(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
            self._pending.clear()
        if self._on_unsubscribe is not None:
            self._on_unsubscribe(self)


class SessionStore(Protocol):
    """Narrow contract with the persistence/notification substrate."""

    def create_session(self, questions: Sequence[str]) -> Session:
        ...

    def update_session(
        self,
        session_id: str,
        *,
        status: SessionStatus | None = None,
        current_question_index: int | None = None,
    ) -> Session:
        ...

    def fetch_session(self, session_id: str) -> Session | None:
        ...

    def insert_answer(
        self,
        session_id: str,
        participant_name: str,
        answer: str,
        question_index: int,
    ) -> Answer:
        ...

    def fetch_answers(self, session_id: str, question_index: int | None = None) -> list[Answer]:
        ...

    def subscribe(self, session_id: str) -> Subscription:
        ...


@dataclass(slots=True)
class _SessionRecord:
    session: Session
    version: int = 1
    answers: list[Answer] = field(default_factory=list)
    changes: list[ChangeEvent] = field(default_factory=list)


class InMemorySessionStore:
    """Thread-safe in-process store; the host device serves it over HTTP."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._records: dict[str, _SessionRecord] = {}
        self._subscriptions: dict[str, list[Subscription]] = {}
        self._sequence = 0

    def create_session(self, questions: Sequence[str]) -> Session:
        cleaned = list(questions)
        if not cleaned:
            raise StoreError("A session needs at least one question.")
        session = Session(
            id=uuid4().hex,
            questions=cleaned,
            current_question_index=0,
            status=SessionStatus.ACTIVE,
            created_at=utc_now(),
        )
        with self._lock:
            self._records[session.id] = _SessionRecord(session=session)
        logger.info("Created session %s with %d question(s)", session.id, len(cleaned))
        return _copy_session(session)

    def update_session(
        self,
        session_id: str,
        *,
        status: SessionStatus | None = None,
        current_question_index: int | None = None,
    ) -> Session:
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                raise StoreError(f"Session {session_id} does not exist.")
            session = record.session
            new_index = session.current_question_index if current_question_index is None else current_question_index
            if not 0 <= new_index < len(session.questions):
                raise StoreError(f"Question index {new_index} out of range for session {session_id}.")
            if status is not None:
                session.status = SessionStatus(status)
            session.current_question_index = new_index
            record.version += 1
            event = self._record_change(
                record, SESSIONS_TABLE, ChangeKind.UPDATE, session.to_row(), record.version
            )
            subscribers = list(self._subscriptions.get(session_id, []))
            updated = _copy_session(session)
        self._fan_out(subscribers, event)
        return updated

    def fetch_session(self, session_id: str) -> Session | None:
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                return None
            return _copy_session(record.session)

    def insert_answer(
        self,
        session_id: str,
        participant_name: str,
        answer: str,
        question_index: int,
    ) -> Answer:
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                raise StoreError(f"Session {session_id} does not exist.")
            if not 0 <= question_index < len(record.session.questions):
                raise StoreError(f"Question index {question_index} out of range for session {session_id}.")
            stored = Answer(
                id=uuid4().hex,
                session_id=session_id,
                participant_name=participant_name,
                answer=answer,
                question_index=question_index,
                submitted_at=utc_now(),
            )
            record.answers.append(stored)
            event = self._record_change(record, ANSWERS_TABLE, ChangeKind.INSERT, stored.to_row(), 1)
            subscribers = list(self._subscriptions.get(session_id, []))
        self._fan_out(subscribers, event)
        return Answer.from_row(stored.to_row())

    def fetch_answers(self, session_id: str, question_index: int | None = None) -> list[Answer]:
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                return []
            return [
                Answer.from_row(answer.to_row())
                for answer in record.answers
                if question_index is None or answer.question_index == question_index
            ]

    def subscribe(self, session_id: str) -> Subscription:
        subscription = Subscription(session_id, on_unsubscribe=self._remove_subscription)
        with self._lock:
            self._subscriptions.setdefault(session_id, []).append(subscription)
        return subscription

    def changes_since(self, session_id: str, after: int = 0) -> list[ChangeEvent]:
        """Change log for ``session_id`` with sequence numbers greater than ``after``."""
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                return []
            return [event for event in record.changes if event.sequence > after]

    def subscriber_count(self, session_id: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(session_id, []))

    def _record_change(
        self,
        record: _SessionRecord,
        table: str,
        kind: ChangeKind,
        row: dict[str, Any],
        row_version: int,
    ) -> ChangeEvent:
        self._sequence += 1
        event = ChangeEvent(
            sequence=self._sequence,
            table=table,
            kind=kind,
            row=row,
            row_version=row_version,
        )
        record.changes.append(event)
        return event

    def _remove_subscription(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscriptions.get(subscription.session_id, [])
            if subscription in subscribers:
                subscribers.remove(subscription)
            if not subscribers:
                self._subscriptions.pop(subscription.session_id, None)

    @staticmethod
    def _fan_out(subscribers: list[Subscription], event: ChangeEvent) -> None:
        for subscription in subscribers:
            subscription.push(event)


def _copy_session(session: Session) -> Session:
    return Session(
        id=session.id,
        questions=list(session.questions),
        current_question_index=session.current_question_index,
        status=session.status,
        created_at=session.created_at,
    )
