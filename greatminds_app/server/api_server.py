"""FastAPI server that exposes the host's session store to participant devices."""

from __future__ import annotations

import logging
from threading import Thread

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
import uvicorn

from greatminds_app.constants.game_constants import (
    ANONYMOUS_PARTICIPANT_NAME,
    NO_SESSION_MESSAGE,
    SESSION_NOT_FOUND_MESSAGE,
)
from greatminds_app.constants.network_constants import (
    CHANGE_POLL_INTERVAL_SECONDS,
    DEFAULT_HOST,
    DEFAULT_PORT,
)
from greatminds_app.core.errors import StoreError
from greatminds_app.core.markdown_renderer import renderer
from greatminds_app.core.models import SessionStatus
from greatminds_app.core.services.session_store import InMemorySessionStore

logger = logging.getLogger(__name__)

_PARTICIPANT_PAGE_HTML = """<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>GreatMindsAlike</title>
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <style>
      :root { font-family: 'Inter', system-ui, sans-serif; background: #0a0a0f; color: #f5f7ff; }
      body { margin: 0; padding: 1.5rem; min-height: 100vh; display: flex; align-items: center; justify-content: center; }
      .card { width: 100%; max-width: 24rem; background: #111a30; border-radius: 1rem; padding: 1.5rem; box-shadow: 0 0.5rem 1.5rem rgba(0, 0, 0, 0.4); text-align: center; }
      .hidden { display: none; }
      .eyebrow { color: #94a3b8; font-size: 0.75rem; letter-spacing: 0.2em; text-transform: uppercase; }
      .hint { color: #94a3b8; font-size: 0.9rem; }
      #answer-input { width: 100%; box-sizing: border-box; border: 1px solid #334155; border-radius: 0.75rem; padding: 0.9rem 1rem; font-size: 1rem; background: #0b1120; color: #f5f7ff; text-align: center; }
      .primary-button { width: 100%; margin-top: 0.75rem; border: none; border-radius: 0.75rem; padding: 0.9rem 1.5rem; font-size: 1rem; font-weight: 700; background: #7c3aed; color: #fff; cursor: pointer; }
      .primary-button:disabled { opacity: 0.45; cursor: not-allowed; }
      #status { min-height: 1.25rem; color: #f87171; }
    </style>
  </head>
  <body>
    <section class=\"card\" id=\"loading-card\"><p class=\"hint\">Loading…</p></section>
    <section class=\"card hidden\" id=\"error-card\">
      <h2>Something went wrong</h2>
      <p id=\"error-message\" class=\"hint\"></p>
    </section>
    <section class=\"card hidden\" id=\"answer-card\">
      <p class=\"eyebrow\">Question</p>
      <div id=\"question-container\"></div>
      <p class=\"hint\">What do you think <em>most people</em> will say?</p>
      <input id=\"answer-input\" placeholder=\"Type your answer…\" autocomplete=\"off\" />
      <button id=\"submit-button\" class=\"primary-button\" disabled>Lock In My Answer</button>
      <p id=\"status\"></p>
    </section>
    <section class=\"card hidden\" id=\"waiting-card\">
      <h2>Answer locked!</h2>
      <p class=\"hint\">Waiting for the Great Minds to align…</p>
    </section>
    <section class=\"card hidden\" id=\"revealed-card\">
      <h2>Results are in!</h2>
      <p class=\"hint\">Check the main screen to see the ranking.</p>
    </section>
    <section class=\"card hidden\" id=\"finished-card\">
      <h2>That's a wrap!</h2>
      <p class=\"hint\">Thanks for playing.</p>
    </section>
    <script>
      const POLL_INTERVAL_MS = __POLL_INTERVAL_MS__;
      const ANONYMOUS_NAME = '__ANONYMOUS_NAME__';
      const cards = {
        'loading': document.getElementById('loading-card'),
        'loading-error': document.getElementById('error-card'),
        'accepting-answer': document.getElementById('answer-card'),
        'waiting': document.getElementById('waiting-card'),
        'revealed': document.getElementById('revealed-card'),
        'finished': document.getElementById('finished-card'),
      };
      const questionContainer = document.getElementById('question-container');
      const answerInput = document.getElementById('answer-input');
      const submitButton = document.getElementById('submit-button');
      const statusEl = document.getElementById('status');
      const errorMessage = document.getElementById('error-message');

      const sessionId = new URLSearchParams(window.location.search).get('s');
      let stage = 'loading';
      let questionIndex = -1;
      let cursor = 0;
      let submitting = false;
      let pollHandle = null;

      function showStage(next) {
        stage = next;
        Object.entries(cards).forEach(([name, card]) => card.classList.toggle('hidden', name !== next));
        if (next === 'finished' || next === 'loading-error') {
          if (pollHandle) {
            clearInterval(pollHandle);
            pollHandle = null;
          }
        }
      }

      function fail(message) {
        errorMessage.textContent = message;
        showStage('loading-error');
      }

      function stageForStatus(status) {
        if (status === 'finished') return 'finished';
        if (status === 'revealed') return 'revealed';
        return 'accepting-answer';
      }

      async function loadQuestion(index) {
        const response = await fetch(`/api/sessions/${encodeURIComponent(sessionId)}/question?index=${index}`);
        if (!response.ok) return;
        const payload = await response.json();
        questionContainer.innerHTML = payload.question_html;
      }

      function enterQuestion(index, status) {
        questionIndex = index;
        answerInput.value = '';
        statusEl.textContent = '';
        updateSubmitButton();
        loadQuestion(index);
        showStage(stageForStatus(status));
      }

      // Same guards as the host: finished wins, only a strictly higher index advances,
      // and a reveal only counts for the question this device is on.
      function applyNotification(row) {
        if (stage === 'finished' || stage === 'loading-error' || stage === 'loading') return;
        if (row.status === 'finished') {
          showStage('finished');
          return;
        }
        if (row.current_question_index > questionIndex) {
          enterQuestion(row.current_question_index, row.status);
          return;
        }
        if (row.current_question_index < questionIndex) return;
        if (row.status === 'revealed' && stage !== 'revealed') showStage('revealed');
      }

      async function pollChanges() {
        try {
          const response = await fetch(`/api/sessions/${encodeURIComponent(sessionId)}/changes?after=${cursor}`);
          if (!response.ok) return;
          const events = await response.json();
          for (const event of events) {
            cursor = Math.max(cursor, event.sequence);
            if (event.table === 'sessions' && event.kind === 'UPDATE') applyNotification(event.row);
          }
        } catch (error) {
          console.warn('Change poll failed', error);
        }
      }

      function updateSubmitButton() {
        submitButton.disabled = submitting || !answerInput.value.trim();
        submitButton.textContent = submitting ? 'Submitting…' : 'Lock In My Answer';
      }

      async function submitAnswer() {
        const text = answerInput.value.trim();
        if (!text || submitting || stage !== 'accepting-answer') return;
        submitting = true;
        updateSubmitButton();
        const submittedFor = questionIndex;
        try {
          const response = await fetch('/api/answers', {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({
              session_id: sessionId,
              participant_name: ANONYMOUS_NAME,
              answer: text,
              question_index: submittedFor,
            }),
          });
          if (!response.ok) {
            const body = await response.json().catch(() => ({}));
            statusEl.textContent = 'Could not submit your answer: ' + (typeof body.detail === 'string' ? body.detail : response.status);
            return;
          }
          if (stage === 'accepting-answer' && questionIndex === submittedFor) showStage('waiting');
        } catch (error) {
          statusEl.textContent = 'Could not submit your answer: the host is unreachable.';
        } finally {
          submitting = false;
          updateSubmitButton();
        }
      }

      answerInput.addEventListener('input', updateSubmitButton);
      answerInput.addEventListener('keydown', (event) => { if (event.key === 'Enter') submitAnswer(); });
      submitButton.addEventListener('click', submitAnswer);

      async function join() {
        if (!sessionId) {
          fail('__NO_SESSION_MESSAGE__');
          return;
        }
        try {
          const response = await fetch(`/api/sessions/${encodeURIComponent(sessionId)}`);
          if (!response.ok) {
            fail('__SESSION_NOT_FOUND_MESSAGE__');
            return;
          }
          const session = await response.json();
          enterQuestion(session.current_question_index, session.status);
          if (stage !== 'finished') pollHandle = setInterval(pollChanges, POLL_INTERVAL_MS);
        } catch (error) {
          fail('__SESSION_NOT_FOUND_MESSAGE__');
        }
      }

      join();
    </script>
  </body>
</html>
"""


class SessionCreatePayload(BaseModel):
    """Payload schema for creating a session."""

    questions: list[str]


class SessionUpdatePayload(BaseModel):
    """Payload schema for host-side session updates."""

    status: SessionStatus | None = None
    current_question_index: int | None = None


class AnswerPayload(BaseModel):
    """Payload schema for submitted answers."""

    session_id: str
    answer: str
    question_index: int
    participant_name: str | None = None


def _render_participant_page() -> str:
    return (
        _PARTICIPANT_PAGE_HTML
        .replace("__POLL_INTERVAL_MS__", str(int(CHANGE_POLL_INTERVAL_SECONDS * 1000)))
        .replace("__ANONYMOUS_NAME__", ANONYMOUS_PARTICIPANT_NAME)
        .replace("__NO_SESSION_MESSAGE__", NO_SESSION_MESSAGE)
        .replace("__SESSION_NOT_FOUND_MESSAGE__", SESSION_NOT_FOUND_MESSAGE)
    )


def _get_store_dependency(store: InMemorySessionStore):
    def dependency() -> InMemorySessionStore:
        return store

    return dependency


def create_api_app(store: InMemorySessionStore) -> FastAPI:
    """Create a FastAPI application wired to the provided session store."""
    app = FastAPI(title="GreatMindsAlike API", version="0.1.0")
    store_dep = _get_store_dependency(store)
    participant_page = _render_participant_page()

    def require_session(session_id: str, source: InMemorySessionStore):
        session = source.fetch_session(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found.")
        return session

    @app.get("/join", response_class=HTMLResponse)
    def serve_participant_page() -> str:
        return participant_page

    @app.post("/api/sessions", status_code=201)
    def create_session(
        payload: SessionCreatePayload,
        source: InMemorySessionStore = Depends(store_dep),
    ) -> dict[str, object]:
        questions = [question.strip() for question in payload.questions if question.strip()]
        if not questions:
            raise HTTPException(status_code=422, detail="A session needs at least one question.")
        try:
            session = source.create_session(questions)
        except StoreError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return session.to_row()

    @app.get("/api/sessions/{session_id}")
    def get_session(
        session_id: str,
        source: InMemorySessionStore = Depends(store_dep),
    ) -> dict[str, object]:
        return require_session(session_id, source).to_row()

    @app.patch("/api/sessions/{session_id}")
    def update_session(
        session_id: str,
        payload: SessionUpdatePayload,
        source: InMemorySessionStore = Depends(store_dep),
    ) -> dict[str, object]:
        require_session(session_id, source)
        try:
            session = source.update_session(
                session_id,
                status=payload.status,
                current_question_index=payload.current_question_index,
            )
        except StoreError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return session.to_row()

    @app.get("/api/sessions/{session_id}/question")
    def get_question(
        session_id: str,
        index: int | None = Query(default=None, ge=0),
        source: InMemorySessionStore = Depends(store_dep),
    ) -> dict[str, object]:
        session = require_session(session_id, source)
        question_index = session.current_question_index if index is None else index
        if question_index >= session.question_count:
            raise HTTPException(status_code=404, detail="Question not found.")
        return {
            "question_index": question_index,
            "question_count": session.question_count,
            "question_html": renderer.render_fragment(session.questions[question_index]),
        }

    @app.get("/api/sessions/{session_id}/changes")
    def get_changes(
        session_id: str,
        after: int = Query(default=0, ge=0),
        source: InMemorySessionStore = Depends(store_dep),
    ) -> list[dict[str, object]]:
        require_session(session_id, source)
        return [event.to_payload() for event in source.changes_since(session_id, after)]

    @app.get("/api/sessions/{session_id}/answers")
    def get_answers(
        session_id: str,
        question_index: int | None = Query(default=None, ge=0),
        source: InMemorySessionStore = Depends(store_dep),
    ) -> list[dict[str, object]]:
        require_session(session_id, source)
        return [answer.to_row() for answer in source.fetch_answers(session_id, question_index)]

    @app.post("/api/answers", status_code=201)
    def submit_answer(
        payload: AnswerPayload,
        source: InMemorySessionStore = Depends(store_dep),
    ) -> dict[str, object]:
        text = payload.answer.strip()
        if not text:
            raise HTTPException(status_code=422, detail="Answer must not be blank.")
        require_session(payload.session_id, source)
        participant_name = (payload.participant_name or "").strip() or ANONYMOUS_PARTICIPANT_NAME
        try:
            answer = source.insert_answer(
                payload.session_id,
                participant_name,
                text,
                payload.question_index,
            )
        except StoreError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return answer.to_row()

    return app


def start_api_server(
    store: InMemorySessionStore,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(store)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="GameApiServer", daemon=True)
    thread.start()
    logger.info("API server listening on %s:%d", host, port)
    return thread
