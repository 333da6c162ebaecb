"""Authoritative session lifecycle on the host device.

``waiting -> active -> revealed -> active (next question) -> ... -> revealed -> finished``

Every mutating operation writes the remote row first and only updates local
state once the write succeeded, so a failed write leaves the machine where it
was and the host may simply retry.
"""

from __future__ import annotations

import logging
from typing import Sequence

from greatminds_app.core.answer_aggregator import group_answers
from greatminds_app.core.errors import (
    EndOfSequenceError,
    InvalidTransitionError,
    StoreError,
    SubmissionError,
    ValidationError,
)
from greatminds_app.core.models import Answer, AnswerGroup, Session, SessionStatus
from greatminds_app.core.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class HostSession:
    """Owns the current status, the active question index and the answer cache."""

    def __init__(self, store: SessionStore) -> None:
        self._store = store
        self._session: Session | None = None
        self._status: SessionStatus = SessionStatus.WAITING
        self._answers: dict[str, Answer] = {}
        self._groups: list[AnswerGroup] = []

    # --- Queries ---

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def session_id(self) -> str | None:
        return self._session.id if self._session else None

    @property
    def current_question_index(self) -> int:
        return self._session.current_question_index if self._session else 0

    @property
    def current_question(self) -> str | None:
        return self._session.current_question if self._session else None

    @property
    def question_count(self) -> int:
        return self._session.question_count if self._session else 0

    @property
    def is_last_question(self) -> bool:
        return self._session is not None and self._session.is_last_question

    @property
    def answers(self) -> list[Answer]:
        """Cached answers for the active question in a stable submission order."""
        return sorted(self._answers.values(), key=lambda a: a.submitted_at)

    @property
    def answer_count(self) -> int:
        return len(self._answers)

    @property
    def groups(self) -> list[AnswerGroup]:
        return list(self._groups)

    @property
    def can_reveal(self) -> bool:
        return self._status == SessionStatus.ACTIVE and bool(self._answers)

    @property
    def can_advance(self) -> bool:
        return self._status == SessionStatus.REVEALED and not self.is_last_question

    @property
    def can_end(self) -> bool:
        return self._status == SessionStatus.REVEALED and self.is_last_question

    # --- Transitions ---

    def launch(self, questions: Sequence[str]) -> Session:
        cleaned = [question.strip() for question in questions if question and question.strip()]
        if not cleaned:
            raise ValidationError("Add at least one question before launching.")
        if self._status not in (SessionStatus.WAITING, SessionStatus.FINISHED):
            raise InvalidTransitionError(
                f"Cannot launch while a session is {self._status.value}; reset it first."
            )
        try:
            session = self._store.create_session(cleaned)
        except StoreError as exc:
            logger.warning("Failed to create session: %s", exc)
            raise SubmissionError(f"Failed to create session: {exc}") from exc

        self._session = session
        self._status = session.status
        self._clear_answers()
        logger.info("Launched session %s (%d questions)", session.id, session.question_count)
        return session

    def reveal(self) -> Session:
        if self._status != SessionStatus.ACTIVE:
            raise InvalidTransitionError(f"Cannot reveal while {self._status.value}.")
        if not self._answers:
            raise InvalidTransitionError("Cannot reveal before any answer has arrived.")
        session = self._write(status=SessionStatus.REVEALED)
        self._adopt(session)
        logger.info(
            "Revealed question %d of session %s (%d answers)",
            session.current_question_index,
            session.id,
            len(self._answers),
        )
        return session

    def advance(self) -> Session:
        if self._status != SessionStatus.REVEALED:
            raise InvalidTransitionError(f"Cannot advance while {self._status.value}.")
        if self.is_last_question:
            raise EndOfSequenceError("Already at the last question; end the game instead.")
        session = self._write(
            status=SessionStatus.ACTIVE,
            current_question_index=self.current_question_index + 1,
        )
        self._adopt(session)
        logger.info("Advanced session %s to question %d", session.id, session.current_question_index)
        return session

    def end(self) -> Session:
        if self._status != SessionStatus.REVEALED or not self.is_last_question:
            raise InvalidTransitionError("The game can only end after revealing the last question.")
        session = self._write(status=SessionStatus.FINISHED)
        self._adopt(session)
        logger.info("Finished session %s", session.id)
        return session

    def reset(self) -> None:
        """Abandon the current session locally; the remote row is left as is."""
        if self._session is not None:
            logger.info("Abandoning session %s", self._session.id)
        self._session = None
        self._status = SessionStatus.WAITING
        self._clear_answers()

    # --- Notifications ---

    def apply_session_update(self, session: Session) -> bool:
        """Adopt a notified session row if it moves the machine forward."""
        if self._session is None or session.id != self._session.id:
            return False
        if self._status == SessionStatus.FINISHED:
            return False
        current_index = self.current_question_index
        moves_forward = (
            session.status == SessionStatus.FINISHED
            or session.current_question_index > current_index
            or (
                session.current_question_index == current_index
                and session.status.rank > self._status.rank
            )
        )
        if not moves_forward:
            return False
        self._adopt(session)
        return True

    def accepts_answer(self, answer: Answer) -> bool:
        """Only answers for the active question count; a reveal freezes the set."""
        return (
            self._session is not None
            and self._status == SessionStatus.ACTIVE
            and answer.session_id == self._session.id
            and answer.question_index == self._session.current_question_index
        )

    def record_answer(self, answer: Answer) -> bool:
        """Fold an answer for the active question into the cache and regroup."""
        if not self.accepts_answer(answer) or answer.id in self._answers:
            return False
        self._answers[answer.id] = answer
        self._groups = group_answers(self.answers)
        return True

    # --- Internals ---

    def _write(self, **changes) -> Session:
        if self._session is None:
            raise InvalidTransitionError("No session has been launched.")
        try:
            return self._store.update_session(self._session.id, **changes)
        except StoreError as exc:
            logger.warning("Failed to update session %s: %s", self._session.id, exc)
            raise SubmissionError(f"Failed to update session: {exc}") from exc

    def _adopt(self, session: Session) -> None:
        previous_index = self.current_question_index
        self._session = session
        self._status = session.status
        if session.current_question_index != previous_index:
            self._clear_answers()

    def _clear_answers(self) -> None:
        self._answers = {}
        self._groups = []
