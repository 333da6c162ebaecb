import pytest

from greatminds_app.core.errors import StoreError
from greatminds_app.core.models import Session, SessionStatus
from greatminds_app.core.services.session_store import (
    ANSWERS_TABLE,
    SESSIONS_TABLE,
    ChangeEvent,
    ChangeKind,
    InMemorySessionStore,
)


def test_create_session_starts_active_at_first_question():
    store = InMemorySessionStore()
    session = store.create_session(["Best pizza topping?", "Best pet?"])

    assert session.status == SessionStatus.ACTIVE
    assert session.current_question_index == 0
    assert session.questions == ["Best pizza topping?", "Best pet?"]

    row = session.to_row()
    assert row["question"] == "Best pizza topping?"
    assert Session.from_row(row).questions == session.questions


def test_create_session_requires_a_question():
    with pytest.raises(StoreError):
        InMemorySessionStore().create_session([])


def test_fetch_session_returns_a_copy():
    store = InMemorySessionStore()
    session = store.create_session(["Q1"])

    fetched = store.fetch_session(session.id)
    fetched.questions.append("tampered")

    assert store.fetch_session(session.id).questions == ["Q1"]
    assert store.fetch_session("missing") is None


def test_update_session_notifies_subscribers_with_full_row_and_version():
    store = InMemorySessionStore()
    session = store.create_session(["Q1", "Q2"])
    subscription = store.subscribe(session.id)

    store.update_session(session.id, status=SessionStatus.REVEALED)
    store.update_session(session.id, status=SessionStatus.ACTIVE, current_question_index=1)

    events = subscription.drain()
    assert [event.kind for event in events] == [ChangeKind.UPDATE, ChangeKind.UPDATE]
    assert [event.table for event in events] == [SESSIONS_TABLE, SESSIONS_TABLE]
    assert [event.row_version for event in events] == [2, 3]
    assert events[1].row["current_question_index"] == 1
    assert events[1].row["status"] == "active"
    assert events[1].row["questions"] == ["Q1", "Q2"]
    assert subscription.drain() == []


def test_update_session_rejects_unknown_session_and_bad_index():
    store = InMemorySessionStore()
    session = store.create_session(["Q1"])

    with pytest.raises(StoreError):
        store.update_session("missing", status=SessionStatus.REVEALED)
    with pytest.raises(StoreError):
        store.update_session(session.id, current_question_index=1)
    assert store.fetch_session(session.id).current_question_index == 0


def test_answer_inserts_are_scoped_to_their_session():
    store = InMemorySessionStore()
    first = store.create_session(["Q1"])
    second = store.create_session(["Q1"])
    first_subscription = store.subscribe(first.id)
    second_subscription = store.subscribe(second.id)

    answer = store.insert_answer(first.id, "Anonymous", "Pepperoni", 0)

    events = first_subscription.drain()
    assert len(events) == 1
    assert events[0].table == ANSWERS_TABLE
    assert events[0].kind == ChangeKind.INSERT
    assert events[0].row_id == answer.id
    assert second_subscription.drain() == []


def test_insert_answer_rejects_unknown_session_and_bad_index():
    store = InMemorySessionStore()
    session = store.create_session(["Q1"])

    with pytest.raises(StoreError):
        store.insert_answer("missing", "Anonymous", "x", 0)
    with pytest.raises(StoreError):
        store.insert_answer(session.id, "Anonymous", "x", 3)


def test_fetch_answers_filters_by_question_index():
    store = InMemorySessionStore()
    session = store.create_session(["Q1", "Q2"])
    store.insert_answer(session.id, "a", "one", 0)
    store.insert_answer(session.id, "b", "two", 1)

    assert [answer.answer for answer in store.fetch_answers(session.id)] == ["one", "two"]
    assert [answer.answer for answer in store.fetch_answers(session.id, 1)] == ["two"]
    assert store.fetch_answers("missing") == []


def test_unsubscribe_stops_delivery_and_releases_subscription():
    store = InMemorySessionStore()
    session = store.create_session(["Q1"])
    subscription = store.subscribe(session.id)
    assert store.subscriber_count(session.id) == 1

    subscription.unsubscribe()
    subscription.unsubscribe()
    store.insert_answer(session.id, "a", "late", 0)

    assert not subscription.active
    assert subscription.drain() == []
    assert store.subscriber_count(session.id) == 0


def test_changes_since_replays_the_log_after_a_cursor():
    store = InMemorySessionStore()
    session = store.create_session(["Q1"])
    store.insert_answer(session.id, "a", "one", 0)
    store.update_session(session.id, status=SessionStatus.REVEALED)

    events = store.changes_since(session.id)
    assert [event.kind for event in events] == [ChangeKind.INSERT, ChangeKind.UPDATE]
    assert store.changes_since(session.id, after=events[0].sequence) == [events[1]]
    assert store.changes_since("missing") == []


def test_change_event_payload_round_trip():
    event = ChangeEvent(sequence=4, table=SESSIONS_TABLE, kind=ChangeKind.UPDATE, row={"id": "s"}, row_version=3)

    assert ChangeEvent.from_payload(event.to_payload()) == event
