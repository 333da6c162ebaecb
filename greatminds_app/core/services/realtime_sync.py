"""Bridges store change notifications into state-machine calls.

Notifications arrive at-least-once and are only ordered per row, so every
event is checked before it is applied:

* session updates carry a per-row version; anything not newer than the last
  applied version, or repeating the last applied (status, index) pair, is a
  stale notification and is dropped;
* answer inserts are deduplicated by answer id and passed through an optional
  filter (the host only folds answers for the active question index).
"""

from __future__ import annotations

import logging
from typing import Callable

from greatminds_app.core.models import Answer, Session, SessionStatus
from greatminds_app.core.services.session_store import (
    ANSWERS_TABLE,
    SESSIONS_TABLE,
    ChangeEvent,
    ChangeKind,
    SessionStore,
    Subscription,
)

logger = logging.getLogger(__name__)


class RealtimeSyncAdapter:
    """Per-session subscription that applies each notification at most once."""

    def __init__(
        self,
        store: SessionStore,
        session_id: str,
        on_session_update: Callable[[Session], object],
        on_answer_insert: Callable[[Answer], object] | None = None,
        answer_filter: Callable[[Answer], bool] | None = None,
    ) -> None:
        self._store = store
        self._session_id = session_id
        self._on_session_update = on_session_update
        self._on_answer_insert = on_answer_insert
        self._answer_filter = answer_filter
        self._subscription: Subscription | None = None
        self._session_version = 0
        self._last_session_state: tuple[SessionStatus, int] | None = None
        self._seen_answer_ids: set[str] = set()

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def is_running(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def start(self) -> None:
        if self.is_running:
            return
        self._subscription = self._store.subscribe(self._session_id)
        logger.debug("Subscribed to session %s", self._session_id)

    def stop(self) -> None:
        if self._subscription is None:
            return
        self._subscription.unsubscribe()
        self._subscription = None
        logger.debug("Unsubscribed from session %s", self._session_id)

    def __enter__(self) -> "RealtimeSyncAdapter":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def pump(self) -> int:
        """Apply every pending notification. Returns how many were applied."""
        if self._subscription is None:
            return 0
        applied = 0
        for event in self._subscription.drain():
            # A callback may have stopped the adapter mid-batch.
            if self._subscription is None:
                break
            if self.deliver(event):
                applied += 1
        return applied

    def deliver(self, event: ChangeEvent) -> bool:
        """Apply one notification unless it is a duplicate, stale or foreign."""
        if event.table == SESSIONS_TABLE and event.kind == ChangeKind.UPDATE:
            return self._deliver_session(event)
        if event.table == ANSWERS_TABLE and event.kind == ChangeKind.INSERT:
            return self._deliver_answer(event)
        logger.debug("Ignoring %s event on %s", event.kind.value, event.table)
        return False

    def _deliver_session(self, event: ChangeEvent) -> bool:
        if event.row_id != self._session_id:
            return False
        if event.row_version <= self._session_version:
            logger.debug(
                "Dropping stale session notification v%d (applied v%d)",
                event.row_version,
                self._session_version,
            )
            return False
        session = Session.from_row(event.row)
        state = (session.status, session.current_question_index)
        self._session_version = event.row_version
        if state == self._last_session_state:
            logger.debug("Dropping duplicate session state %s", state)
            return False
        self._last_session_state = state
        self._on_session_update(session)
        return True

    def _deliver_answer(self, event: ChangeEvent) -> bool:
        if str(event.row.get("session_id")) != self._session_id:
            return False
        if event.row_id in self._seen_answer_ids:
            logger.debug("Dropping duplicate answer notification %s", event.row_id)
            return False
        self._seen_answer_ids.add(event.row_id)
        answer = Answer.from_row(event.row)
        if self._answer_filter is not None and not self._answer_filter(answer):
            logger.debug(
                "Skipping answer %s for question %d", answer.id, answer.question_index
            )
            return False
        if self._on_answer_insert is not None:
            self._on_answer_insert(answer)
        return True
