"""Participant view of a session, kept in step with the host by notifications."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from urllib.parse import parse_qs, urlparse

from greatminds_app.constants.game_constants import (
    ANONYMOUS_PARTICIPANT_NAME,
    NO_SESSION_MESSAGE,
    SESSION_NOT_FOUND_MESSAGE,
)
from greatminds_app.constants.network_constants import JOIN_PATH, JOIN_QUERY_PARAMETER
from greatminds_app.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    StoreError,
    SubmissionError,
    ValidationError,
)
from greatminds_app.core.models import Answer, ParticipantStage, Session, SessionStatus
from greatminds_app.core.services.realtime_sync import RealtimeSyncAdapter
from greatminds_app.core.services.session_store import SessionStore

logger = logging.getLogger(__name__)


def join_url(base_url: str, session_id: str) -> str:
    return f"{base_url.rstrip('/')}{JOIN_PATH}?{JOIN_QUERY_PARAMETER}={session_id}"


def session_id_from_join_url(value: str | None) -> str:
    """Extract the session id from a join link; a bare id is returned unchanged."""
    text = (value or "").strip()
    if not text:
        raise NotFoundError(NO_SESSION_MESSAGE)
    if "://" not in text and "?" not in text:
        return text
    query = parse_qs(urlparse(text).query)
    session_ids = [item.strip() for item in query.get(JOIN_QUERY_PARAMETER, []) if item.strip()]
    if not session_ids:
        raise NotFoundError(NO_SESSION_MESSAGE)
    return session_ids[0]


def stage_for_status(status: SessionStatus) -> ParticipantStage:
    if status == SessionStatus.FINISHED:
        return ParticipantStage.FINISHED
    if status == SessionStatus.REVEALED:
        return ParticipantStage.REVEALED
    return ParticipantStage.ACCEPTING_ANSWER


@dataclass(slots=True, frozen=True)
class ParticipantView:
    """Everything a participant screen needs to render."""

    stage: ParticipantStage = ParticipantStage.LOADING
    question_index: int = -1
    session: Session | None = None
    error_message: str | None = None

    @property
    def question(self) -> str | None:
        if self.session is None or self.question_index < 0:
            return None
        return self.session.questions[self.question_index]


def apply_notification(view: ParticipantView, session: Session) -> ParticipantView:
    """Next view after a session-row notification.

    ``finished`` always wins. Otherwise a strictly higher index moves the
    participant to that question, ``revealed`` for the current index is taken
    as is, and anything older or repeated leaves the view untouched.
    """
    if view.session is None or session.id != view.session.id:
        return view
    if view.stage in (ParticipantStage.ERROR, ParticipantStage.FINISHED, ParticipantStage.LOADING):
        return view
    if session.status == SessionStatus.FINISHED:
        return ParticipantView(
            stage=ParticipantStage.FINISHED,
            question_index=max(view.question_index, session.current_question_index),
            session=session,
        )
    if session.current_question_index > view.question_index:
        return ParticipantView(
            stage=stage_for_status(session.status),
            question_index=session.current_question_index,
            session=session,
        )
    if session.current_question_index < view.question_index:
        return view
    if session.status == SessionStatus.REVEALED and view.stage != ParticipantStage.REVEALED:
        return replace(view, stage=ParticipantStage.REVEALED, session=session)
    return view


class ParticipantSession:
    """Join, answer and follow a session from a participant device."""

    def __init__(self, store: SessionStore, participant_name: str = ANONYMOUS_PARTICIPANT_NAME) -> None:
        self._store = store
        self._participant_name = participant_name.strip() or ANONYMOUS_PARTICIPANT_NAME
        self._view = ParticipantView()
        self._submitting = False

    @property
    def view(self) -> ParticipantView:
        return self._view

    @property
    def stage(self) -> ParticipantStage:
        return self._view.stage

    @property
    def session_id(self) -> str | None:
        return self._view.session.id if self._view.session else None

    @property
    def question_index(self) -> int:
        return self._view.question_index

    @property
    def current_question(self) -> str | None:
        return self._view.question

    @property
    def participant_name(self) -> str:
        return self._participant_name

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    def join(self, session_id: str | None) -> ParticipantView:
        """Load the session snapshot and map its status to a stage."""
        if not session_id or not session_id.strip():
            self._view = ParticipantView(stage=ParticipantStage.ERROR, error_message=NO_SESSION_MESSAGE)
            raise NotFoundError(NO_SESSION_MESSAGE)
        try:
            session = self._store.fetch_session(session_id.strip())
        except StoreError as exc:
            logger.warning("Session lookup for %s failed: %s", session_id, exc)
            session = None
        if session is None:
            self._view = ParticipantView(stage=ParticipantStage.ERROR, error_message=SESSION_NOT_FOUND_MESSAGE)
            raise NotFoundError(SESSION_NOT_FOUND_MESSAGE)

        self._view = ParticipantView(
            stage=stage_for_status(session.status),
            question_index=session.current_question_index,
            session=session,
        )
        logger.info("Joined session %s at question %d", session.id, session.current_question_index)
        return self._view

    def submit(self, answer_text: str) -> Answer:
        """Append an answer tagged with the question index this device believes is active."""
        text = (answer_text or "").strip()
        if not text:
            raise ValidationError("Type an answer before submitting.")
        if self._submitting:
            raise InvalidTransitionError("An answer is already being submitted.")
        if self._view.stage != ParticipantStage.ACCEPTING_ANSWER or self._view.session is None:
            raise InvalidTransitionError("This question is not accepting answers right now.")

        self._submitting = True
        try:
            answer = self._store.insert_answer(
                self._view.session.id,
                self._participant_name,
                text,
                self._view.question_index,
            )
        except StoreError as exc:
            logger.warning("Answer submission failed: %s", exc)
            raise SubmissionError(f"Could not submit your answer: {exc}") from exc
        finally:
            self._submitting = False

        # A notification may have moved us on while the insert was in flight.
        if (
            self._view.stage == ParticipantStage.ACCEPTING_ANSWER
            and self._view.question_index == answer.question_index
        ):
            self._view = replace(self._view, stage=ParticipantStage.WAITING)
        return answer

    def apply_session_update(self, session: Session) -> bool:
        updated = apply_notification(self._view, session)
        if updated == self._view:
            return False
        if updated.stage != self._view.stage:
            logger.info(
                "Participant moved to %s (question %d)", updated.stage.value, updated.question_index
            )
        self._view = updated
        return True

    def observe(self) -> RealtimeSyncAdapter:
        """Adapter feeding this session's row updates into the participant; caller starts it."""
        if self.session_id is None:
            raise InvalidTransitionError("Join a session before observing it.")
        return RealtimeSyncAdapter(
            self._store,
            self.session_id,
            on_session_update=self.apply_session_update,
        )
