import pytest
from fastapi.testclient import TestClient

from greatminds_app.core.errors import ConfigurationError, NotFoundError, StoreError
from greatminds_app.core.models import ParticipantStage, SessionStatus
from greatminds_app.core.services.http_store import HttpSessionStore, StoreSettings
from greatminds_app.core.services.participant_session import ParticipantSession
from greatminds_app.core.services.session_store import InMemorySessionStore
from greatminds_app.server.api_server import create_api_app


@pytest.fixture
def stores():
    backing = InMemorySessionStore()
    client = TestClient(create_api_app(backing))
    remote = HttpSessionStore(client=client)
    yield backing, remote
    remote.close()


def test_settings_from_environment():
    settings = StoreSettings.from_environment(
        {"GREATMINDS_STORE_URL": "http://10.0.0.5:8000", "GREATMINDS_STORE_TIMEOUT": "2.5"}
    )

    assert settings.base_url == "http://10.0.0.5:8000"
    assert settings.timeout_seconds == 2.5
    assert StoreSettings.from_environment({"GREATMINDS_STORE_URL": "http://h"}).timeout_seconds > 0


def test_settings_require_url_and_sane_timeout():
    with pytest.raises(ConfigurationError):
        StoreSettings.from_environment({})
    with pytest.raises(ConfigurationError):
        StoreSettings.from_environment({"GREATMINDS_STORE_URL": "http://h", "GREATMINDS_STORE_TIMEOUT": "soon"})
    with pytest.raises(ConfigurationError):
        StoreSettings.from_environment({"GREATMINDS_STORE_URL": "http://h", "GREATMINDS_STORE_TIMEOUT": "-1"})
    with pytest.raises(ConfigurationError):
        HttpSessionStore()


def test_session_round_trip_over_http(stores):
    backing, remote = stores

    session = remote.create_session(["Q1", "Q2"])
    assert backing.fetch_session(session.id).questions == ["Q1", "Q2"]

    updated = remote.update_session(session.id, status=SessionStatus.REVEALED)
    assert updated.status == SessionStatus.REVEALED
    assert remote.fetch_session(session.id).status == SessionStatus.REVEALED
    assert remote.fetch_session("missing") is None


def test_errors_become_store_errors(stores):
    _, remote = stores
    session = remote.create_session(["Q1"])

    with pytest.raises(StoreError):
        remote.update_session(session.id, current_question_index=3)
    with pytest.raises(StoreError):
        remote.insert_answer(session.id, "Anonymous", "   ", 0)


def test_answers_and_change_feed_over_http(stores):
    backing, remote = stores
    session = backing.create_session(["Q1"])

    answer = remote.insert_answer(session.id, "Kim", "Pepperoni", 0)
    assert answer.participant_name == "Kim"
    assert [a.id for a in remote.fetch_answers(session.id, 0)] == [answer.id]

    subscription = remote.subscribe(session.id)
    first = subscription.drain()
    assert [event.row_id for event in first] == [answer.id]
    assert subscription.drain() == []

    backing.update_session(session.id, status=SessionStatus.REVEALED)
    assert [event.row["status"] for event in subscription.drain()] == ["revealed"]

    subscription.unsubscribe()
    assert subscription.drain() == []


def test_participant_plays_against_remote_host(stores):
    backing, remote = stores
    session = backing.create_session(["Q1", "Q2"])
    participant = ParticipantSession(remote)
    participant.join(session.id)

    with participant.observe() as adapter:
        participant.submit("Pepperoni")
        assert participant.stage == ParticipantStage.WAITING

        backing.update_session(session.id, status=SessionStatus.REVEALED)
        backing.update_session(session.id, status=SessionStatus.ACTIVE, current_question_index=1)
        adapter.pump()
        # Replaying the whole feed again must not change anything.
        adapter.pump()

    assert participant.stage == ParticipantStage.ACCEPTING_ANSWER
    assert participant.question_index == 1
    assert backing.fetch_answers(session.id, 0)[0].answer == "Pepperoni"

    with pytest.raises(NotFoundError):
        ParticipantSession(remote).join("missing")
