"""Business logic for the host device shared between the UI and the API server."""

from __future__ import annotations

from threading import Lock
from typing import Sequence

from greatminds_app.core.answer_aggregator import ResultRow, ranked_results
from greatminds_app.core.models import AnswerGroup, Session, SessionStatus
from greatminds_app.core.services.host_session import HostSession
from greatminds_app.core.services.participant_session import join_url
from greatminds_app.core.services.realtime_sync import RealtimeSyncAdapter
from greatminds_app.core.services.scoreboard import Scoreboard, ScoreboardRow
from greatminds_app.core.services.session_store import InMemorySessionStore, SessionStore


class GameManager:
    """Facade for game services: HostSession, RealtimeSyncAdapter and Scoreboard."""

    def __init__(self, store: SessionStore | None = None, public_base_url: str | None = None) -> None:
        self._lock = Lock()

        # Services
        self._store: SessionStore = store if store is not None else InMemorySessionStore()
        self._host = HostSession(self._store)
        self._scoreboard = Scoreboard()
        self._sync: RealtimeSyncAdapter | None = None

        self._public_base_url = public_base_url

    @property
    def store(self) -> SessionStore:
        return self._store

    # --- Lifecycle ---

    def launch_session(self, questions: Sequence[str]) -> Session:
        with self._lock:
            session = self._host.launch(questions)
            self._restart_sync(session.id)
            self._scoreboard.clear()
            return session

    def reveal_answers(self) -> list[AnswerGroup]:
        with self._lock:
            session = self._host.reveal()
            groups = self._host.groups
            self._scoreboard.record_round(session.current_question_index, groups)
            return groups

    def advance_question(self) -> Session:
        with self._lock:
            return self._host.advance()

    def end_session(self) -> Session:
        with self._lock:
            return self._host.end()

    def reset_session(self) -> None:
        with self._lock:
            self._stop_sync()
            self._host.reset()
            self._scoreboard.clear()

    def refresh(self) -> int:
        """Apply pending store notifications; returns how many changed something."""
        with self._lock:
            if self._sync is None:
                return 0
            return self._sync.pump()

    def close(self) -> None:
        with self._lock:
            self._stop_sync()

    # --- Queries ---

    def get_status(self) -> SessionStatus:
        with self._lock:
            return self._host.status

    def get_session_id(self) -> str | None:
        with self._lock:
            return self._host.session_id

    def get_current_question(self) -> str | None:
        with self._lock:
            return self._host.current_question

    def get_question_position(self) -> tuple[int, int]:
        """1-based number of the active question and the total count."""
        with self._lock:
            if self._host.session is None:
                return 0, 0
            return self._host.current_question_index + 1, self._host.question_count

    def get_remaining_question_count(self) -> int:
        with self._lock:
            if self._host.session is None:
                return 0
            return self._host.question_count - (self._host.current_question_index + 1)

    def get_answer_count(self) -> int:
        with self._lock:
            return self._host.answer_count

    def get_groups(self) -> list[AnswerGroup]:
        with self._lock:
            return self._host.groups

    def get_ranked_results(self, limit: int | None = None) -> list[ResultRow]:
        with self._lock:
            return ranked_results(self._host.groups, limit)

    def get_top_scorers(self, limit: int) -> list[ScoreboardRow]:
        with self._lock:
            return self._scoreboard.get_top_scorers(limit)

    def can_reveal(self) -> bool:
        with self._lock:
            return self._host.can_reveal

    def can_advance(self) -> bool:
        with self._lock:
            return self._host.can_advance

    def can_end(self) -> bool:
        with self._lock:
            return self._host.can_end

    # --- Join link ---

    def set_public_base_url(self, base_url: str) -> None:
        with self._lock:
            self._public_base_url = base_url

    def get_join_url(self) -> str | None:
        with self._lock:
            session_id = self._host.session_id
            if session_id is None or not self._public_base_url:
                return None
            return join_url(self._public_base_url, session_id)

    # --- Internals ---

    def _restart_sync(self, session_id: str) -> None:
        self._stop_sync()
        self._sync = RealtimeSyncAdapter(
            self._store,
            session_id,
            on_session_update=self._host.apply_session_update,
            on_answer_insert=self._host.record_answer,
            answer_filter=self._host.accepts_answer,
        )
        self._sync.start()

    def _stop_sync(self) -> None:
        if self._sync is not None:
            self._sync.stop()
            self._sync = None
