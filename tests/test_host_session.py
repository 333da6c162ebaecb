import pytest

from greatminds_app.core.errors import (
    EndOfSequenceError,
    InvalidTransitionError,
    StoreError,
    SubmissionError,
    ValidationError,
)
from greatminds_app.core.models import Answer, Session, SessionStatus
from greatminds_app.core.services.host_session import HostSession
from greatminds_app.core.services.session_store import InMemorySessionStore


class FailingStore(InMemorySessionStore):
    def __init__(self) -> None:
        super().__init__()
        self.fail_updates = False
        self.fail_creates = False

    def create_session(self, questions):
        if self.fail_creates:
            raise StoreError("store offline")
        return super().create_session(questions)

    def update_session(self, session_id, **changes):
        if self.fail_updates:
            raise StoreError("store offline")
        return super().update_session(session_id, **changes)


def _answer(host: HostSession, answer_id: str, text: str, question_index: int | None = None) -> Answer:
    return Answer(
        id=answer_id,
        session_id=host.session_id,
        participant_name=f"p-{answer_id}",
        answer=text,
        question_index=host.current_question_index if question_index is None else question_index,
    )


def test_starts_waiting_without_remote_session():
    host = HostSession(InMemorySessionStore())

    assert host.status == SessionStatus.WAITING
    assert host.session is None
    assert not host.can_reveal and not host.can_advance and not host.can_end


def test_launch_creates_active_session_and_drops_blank_questions():
    store = InMemorySessionStore()
    host = HostSession(store)

    session = host.launch(["  Best pizza topping? ", "", "   ", "Best pet?"])

    assert host.status == SessionStatus.ACTIVE
    assert session.questions == ["Best pizza topping?", "Best pet?"]
    assert host.current_question == "Best pizza topping?"
    assert store.fetch_session(session.id).status == SessionStatus.ACTIVE


def test_launch_rejects_empty_question_list():
    store = InMemorySessionStore()
    host = HostSession(store)

    with pytest.raises(ValidationError):
        host.launch([])
    with pytest.raises(ValidationError):
        host.launch(["  ", ""])
    assert host.status == SessionStatus.WAITING


def test_launch_is_rejected_while_a_session_runs():
    host = HostSession(InMemorySessionStore())
    host.launch(["Q1"])

    with pytest.raises(InvalidTransitionError):
        host.launch(["Q2"])


def test_reveal_requires_an_answer():
    host = HostSession(InMemorySessionStore())
    host.launch(["Q1"])

    with pytest.raises(InvalidTransitionError):
        host.reveal()

    host.record_answer(_answer(host, "a1", "Pepperoni"))
    session = host.reveal()

    assert session.status == SessionStatus.REVEALED
    assert host.status == SessionStatus.REVEALED


def test_advance_moves_to_next_question_and_clears_answers():
    store = InMemorySessionStore()
    host = HostSession(store)
    host.launch(["Q1", "Q2"])
    host.record_answer(_answer(host, "a1", "x"))
    host.reveal()

    assert host.can_advance and not host.can_end
    session = host.advance()

    assert session.current_question_index == 1
    assert host.status == SessionStatus.ACTIVE
    assert host.answers == [] and host.groups == []
    assert store.fetch_session(session.id).current_question_index == 1


def test_advance_at_last_question_is_rejected():
    host = HostSession(InMemorySessionStore())
    host.launch(["Only question"])
    host.record_answer(_answer(host, "a1", "x"))
    host.reveal()

    with pytest.raises(EndOfSequenceError):
        host.advance()
    assert host.can_end


def test_end_requires_revealed_last_question():
    host = HostSession(InMemorySessionStore())
    host.launch(["Q1", "Q2"])

    with pytest.raises(InvalidTransitionError):
        host.end()
    host.record_answer(_answer(host, "a1", "x"))
    host.reveal()
    with pytest.raises(InvalidTransitionError):
        host.end()

    host.advance()
    host.record_answer(_answer(host, "a2", "y"))
    host.reveal()
    session = host.end()

    assert session.status == SessionStatus.FINISHED
    assert host.status == SessionStatus.FINISHED


def test_failed_remote_write_leaves_local_state_untouched():
    store = FailingStore()
    host = HostSession(store)
    host.launch(["Q1", "Q2"])
    host.record_answer(_answer(host, "a1", "x"))
    store.fail_updates = True

    with pytest.raises(SubmissionError):
        host.reveal()
    assert host.status == SessionStatus.ACTIVE
    assert host.answer_count == 1

    store.fail_updates = False
    assert host.reveal().status == SessionStatus.REVEALED


def test_failed_create_surfaces_submission_error():
    store = FailingStore()
    store.fail_creates = True
    host = HostSession(store)

    with pytest.raises(SubmissionError):
        host.launch(["Q1"])
    assert host.status == SessionStatus.WAITING


def test_reset_is_local_only():
    store = InMemorySessionStore()
    host = HostSession(store)
    session = host.launch(["Q1"])

    host.reset()

    assert host.status == SessionStatus.WAITING
    assert host.session is None
    assert store.fetch_session(session.id).status == SessionStatus.ACTIVE
    host.launch(["Q2"])
    assert host.status == SessionStatus.ACTIVE


def test_answers_for_other_questions_are_not_folded_in():
    host = HostSession(InMemorySessionStore())
    host.launch(["Q1", "Q2"])
    host.record_answer(_answer(host, "a1", "x"))
    host.reveal()
    host.advance()

    assert not host.record_answer(_answer(host, "late", "x", question_index=0))
    assert host.record_answer(_answer(host, "a2", "Dog"))
    assert not host.record_answer(_answer(host, "a2", "Dog"))
    assert [group.display for group in host.groups] == ["Dog"]


def test_session_notifications_only_move_forward():
    host = HostSession(InMemorySessionStore())
    session = host.launch(["Q1", "Q2"])
    host.record_answer(_answer(host, "a1", "x"))
    host.reveal()

    stale = Session(id=session.id, questions=session.questions, current_question_index=0, status=SessionStatus.ACTIVE)
    assert not host.apply_session_update(stale)
    assert host.status == SessionStatus.REVEALED

    foreign = Session(id="other", questions=["Q"], current_question_index=0, status=SessionStatus.FINISHED)
    assert not host.apply_session_update(foreign)

    finished = Session(id=session.id, questions=session.questions, current_question_index=0, status=SessionStatus.FINISHED)
    assert host.apply_session_update(finished)
    assert host.status == SessionStatus.FINISHED


def test_reveal_freezes_the_answer_set():
    host = HostSession(InMemorySessionStore())
    host.launch(["Q1"])
    host.record_answer(_answer(host, "a1", "Mushroom"))
    host.reveal()

    assert not host.accepts_answer(_answer(host, "a2", "Pepperoni"))
    assert not host.record_answer(_answer(host, "a2", "Pepperoni"))
    assert host.answer_count == 1
    assert [(group.display, group.is_winner) for group in host.groups] == [("Mushroom", True)]


def test_write_without_a_session_is_an_invalid_transition():
    host = HostSession(InMemorySessionStore())

    with pytest.raises(InvalidTransitionError):
        host._write(status=SessionStatus.REVEALED)
