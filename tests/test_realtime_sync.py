from greatminds_app.core.models import Answer, SessionStatus
from greatminds_app.core.services.realtime_sync import RealtimeSyncAdapter
from greatminds_app.core.services.session_store import (
    ANSWERS_TABLE,
    SESSIONS_TABLE,
    ChangeEvent,
    ChangeKind,
    InMemorySessionStore,
)


def _session_event(session, version, sequence=1):
    return ChangeEvent(
        sequence=sequence,
        table=SESSIONS_TABLE,
        kind=ChangeKind.UPDATE,
        row=session.to_row(),
        row_version=version,
    )


def _answer_event(answer, sequence=1):
    return ChangeEvent(sequence=sequence, table=ANSWERS_TABLE, kind=ChangeKind.INSERT, row=answer.to_row())


def _adapter(store, session_id, **kwargs):
    sessions = []
    answers = []
    adapter = RealtimeSyncAdapter(
        store,
        session_id,
        on_session_update=sessions.append,
        on_answer_insert=answers.append,
        **kwargs,
    )
    return adapter, sessions, answers


def test_duplicate_session_notification_is_applied_once():
    store = InMemorySessionStore()
    session = store.create_session(["Q1", "Q2"])
    adapter, sessions, _ = _adapter(store, session.id)
    session.status = SessionStatus.REVEALED
    event = _session_event(session, version=2)

    assert adapter.deliver(event) is True
    assert adapter.deliver(event) is False
    assert len(sessions) == 1


def test_stale_session_version_is_dropped():
    store = InMemorySessionStore()
    session = store.create_session(["Q1", "Q2"])
    adapter, sessions, _ = _adapter(store, session.id)

    session.current_question_index = 1
    assert adapter.deliver(_session_event(session, version=3))
    session.current_question_index = 0
    session.status = SessionStatus.REVEALED
    assert not adapter.deliver(_session_event(session, version=2))

    assert [s.current_question_index for s in sessions] == [1]


def test_newer_version_repeating_the_same_state_is_a_no_op():
    store = InMemorySessionStore()
    session = store.create_session(["Q1"])
    adapter, sessions, _ = _adapter(store, session.id)
    session.status = SessionStatus.REVEALED

    adapter.deliver(_session_event(session, version=2))
    adapter.deliver(_session_event(session, version=3))

    assert len(sessions) == 1


def test_events_for_other_sessions_are_ignored():
    store = InMemorySessionStore()
    mine = store.create_session(["Q1"])
    other = store.create_session(["Q1"])
    adapter, sessions, answers = _adapter(store, mine.id)

    assert not adapter.deliver(_session_event(other, version=2))
    foreign = Answer(id="x", session_id=other.id, participant_name="a", answer="b", question_index=0)
    assert not adapter.deliver(_answer_event(foreign))
    assert sessions == [] and answers == []


def test_answers_are_deduplicated_and_filtered():
    store = InMemorySessionStore()
    session = store.create_session(["Q1", "Q2"])
    adapter, _, answers = _adapter(store, session.id, answer_filter=lambda answer: answer.question_index == 1)
    stale = Answer(id="a1", session_id=session.id, participant_name="p", answer="old", question_index=0)
    fresh = Answer(id="a2", session_id=session.id, participant_name="p", answer="new", question_index=1)

    assert not adapter.deliver(_answer_event(stale))
    assert adapter.deliver(_answer_event(fresh))
    assert not adapter.deliver(_answer_event(fresh))

    assert [answer.id for answer in answers] == ["a2"]


def test_pump_applies_store_notifications_and_stop_unsubscribes():
    store = InMemorySessionStore()
    session = store.create_session(["Q1"])
    adapter, sessions, answers = _adapter(store, session.id)

    assert adapter.pump() == 0
    adapter.start()
    adapter.start()
    assert store.subscriber_count(session.id) == 1

    store.insert_answer(session.id, "p", "Pepperoni", 0)
    store.update_session(session.id, status=SessionStatus.REVEALED)
    assert adapter.pump() == 2
    assert len(answers) == 1
    assert sessions[0].status == SessionStatus.REVEALED

    adapter.stop()
    assert not adapter.is_running
    assert store.subscriber_count(session.id) == 0
    store.insert_answer(session.id, "q", "Mushroom", 0)
    assert adapter.pump() == 0


def test_context_manager_releases_subscription():
    store = InMemorySessionStore()
    session = store.create_session(["Q1"])
    adapter, _, _ = _adapter(store, session.id)

    with adapter:
        assert adapter.is_running
    assert store.subscriber_count(session.id) == 0
