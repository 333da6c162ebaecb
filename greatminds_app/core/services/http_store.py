"""Session store client that talks to a host's HTTP API.

Construct it explicitly with ``StoreSettings`` (or an existing
``httpx.Client``) and close it when the participant leaves; nothing here is
initialised lazily or shared globally.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Any, Mapping, Sequence

import httpx

from greatminds_app.constants.network_constants import (
    DEFAULT_STORE_TIMEOUT_SECONDS,
    STORE_TIMEOUT_ENV,
    STORE_URL_ENV,
)
from greatminds_app.core.errors import ConfigurationError, StoreError
from greatminds_app.core.models import Answer, Session, SessionStatus
from greatminds_app.core.services.session_store import ChangeEvent, Subscription

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class StoreSettings:
    """Where the store lives. ``base_url`` must point at a running host."""

    base_url: str
    timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> "StoreSettings":
        env = os.environ if environ is None else environ
        base_url = (env.get(STORE_URL_ENV) or "").strip()
        if not base_url:
            raise ConfigurationError(
                f"Missing {STORE_URL_ENV}. Set it to the host address, e.g. http://192.168.1.20:8000."
            )
        raw_timeout = (env.get(STORE_TIMEOUT_ENV) or "").strip()
        if not raw_timeout:
            return cls(base_url=base_url)
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ConfigurationError(f"{STORE_TIMEOUT_ENV} must be a number of seconds.") from exc
        if timeout <= 0:
            raise ConfigurationError(f"{STORE_TIMEOUT_ENV} must be positive.")
        return cls(base_url=base_url, timeout_seconds=timeout)


class HttpSubscription(Subscription):
    """Polls the host's change feed on every ``drain``."""

    def __init__(self, store: "HttpSessionStore", session_id: str) -> None:
        super().__init__(session_id)
        self._store = store
        # Start from the beginning of the log so nothing between join and subscribe is lost.
        self._cursor = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    def drain(self) -> list[ChangeEvent]:
        if not self.active:
            return []
        try:
            events = self._store.fetch_changes(self.session_id, after=self._cursor)
        except StoreError as exc:
            # Missed polls only mean staleness; the next drain catches up.
            logger.warning("Change feed poll failed: %s", exc)
            return []
        if events:
            self._cursor = max(event.sequence for event in events)
        return events


class HttpSessionStore:
    """``SessionStore`` implementation over the host's REST endpoints."""

    def __init__(self, settings: StoreSettings | None = None, client: httpx.Client | None = None) -> None:
        if client is None:
            if settings is None:
                raise ConfigurationError("HttpSessionStore needs StoreSettings or an httpx.Client.")
            client = httpx.Client(base_url=settings.base_url, timeout=settings.timeout_seconds)
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpSessionStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def create_session(self, questions: Sequence[str]) -> Session:
        payload = self._request("POST", "/api/sessions", json={"questions": list(questions)})
        return Session.from_row(payload)

    def update_session(
        self,
        session_id: str,
        *,
        status: SessionStatus | None = None,
        current_question_index: int | None = None,
    ) -> Session:
        body: dict[str, Any] = {}
        if status is not None:
            body["status"] = SessionStatus(status).value
        if current_question_index is not None:
            body["current_question_index"] = current_question_index
        payload = self._request("PATCH", f"/api/sessions/{session_id}", json=body)
        return Session.from_row(payload)

    def fetch_session(self, session_id: str) -> Session | None:
        payload = self._request("GET", f"/api/sessions/{session_id}", allow_missing=True)
        if payload is None:
            return None
        return Session.from_row(payload)

    def insert_answer(
        self,
        session_id: str,
        participant_name: str,
        answer: str,
        question_index: int,
    ) -> Answer:
        payload = self._request(
            "POST",
            "/api/answers",
            json={
                "session_id": session_id,
                "participant_name": participant_name,
                "answer": answer,
                "question_index": question_index,
            },
        )
        return Answer.from_row(payload)

    def fetch_answers(self, session_id: str, question_index: int | None = None) -> list[Answer]:
        params = {} if question_index is None else {"question_index": question_index}
        payload = self._request(
            "GET", f"/api/sessions/{session_id}/answers", params=params, allow_missing=True
        )
        return [Answer.from_row(row) for row in payload or []]

    def fetch_changes(self, session_id: str, after: int = 0) -> list[ChangeEvent]:
        payload = self._request(
            "GET",
            f"/api/sessions/{session_id}/changes",
            params={"after": after},
            allow_missing=True,
        )
        return [ChangeEvent.from_payload(item) for item in payload or []]

    def subscribe(self, session_id: str) -> Subscription:
        return HttpSubscription(self, session_id)

    def _request(self, method: str, url: str, *, allow_missing: bool = False, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(f"Could not reach the host: {exc}") from exc
        if allow_missing and response.status_code == 404:
            return None
        if response.is_error:
            raise StoreError(_error_detail(response))
        return response.json()


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    detail = payload.get("detail") if isinstance(payload, dict) else None
    if isinstance(detail, str) and detail:
        return detail
    return f"Host answered {response.status_code}."
