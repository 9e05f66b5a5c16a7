"""Tests for pokeCrew and remindPollNonResponders."""
import pytest

from crewnotify.callables.poke import MSG_ALL_RESPONDED, MSG_NO_TOKENS, MSG_NOT_UP, MSG_POKED, poke_crew
from crewnotify.callables.poll_reminder import remind_poll_non_responders
from crewnotify.core.errors import CallableError

from tests.conftest import TODAY, token


@pytest.fixture()
def statuses(seed):
    def _set(**values):
        for uid, value in values.items():
            seed(f"crews/c1/statuses/{TODAY}/userStatuses/{uid}", {"upForGoingOutTonight": value})

    return _set


def _poke_args(user="alice"):
    return {"crewId": "c1", "date": TODAY, "userId": user}


# --- pokeCrew ---


def test_poke_sends_to_members_without_status(ctx, transport, crew, statuses):
    statuses(alice=True, bob=False)
    result = poke_crew(ctx, "alice", _poke_args())
    assert result == {"success": True, "message": MSG_POKED}
    assert sorted(transport.recipients) == [token("carol"), token("dave")]
    msg = transport.sent[0]
    assert msg.title == "Alice poked you!"
    assert msg.subtitle == "Friday Club"
    assert msg.body == "Alice has poked the Friday Club crew about drinks today!"
    assert msg.data == {"crewId": "c1", "date": TODAY, "screen": "Crew"}


def test_poke_requires_caller_to_be_up(ctx, transport, crew, statuses):
    statuses(alice=False)
    with pytest.raises(CallableError) as exc:
        poke_crew(ctx, "alice", _poke_args())
    assert exc.value.code == "permission-denied"
    assert exc.value.message == MSG_NOT_UP
    assert transport.calls == 0


def test_poke_when_everyone_responded(ctx, transport, crew, statuses):
    statuses(alice=True, bob=True, carol=False, dave=False)
    assert poke_crew(ctx, "alice", _poke_args()) == {"success": True, "message": MSG_ALL_RESPONDED}
    assert transport.calls == 0


def test_poke_without_tokens(ctx, transport, crew, statuses, add_user):
    statuses(alice=True, bob=True, carol=True)
    add_user("dave", "Dave", expoPushToken="not-a-token")
    assert poke_crew(ctx, "alice", _poke_args()) == {"success": False, "message": MSG_NO_TOKENS}


def test_poke_rejects_bad_calls(ctx, crew):
    with pytest.raises(CallableError) as exc:
        poke_crew(ctx, None, _poke_args())
    assert exc.value.code == "unauthenticated"

    with pytest.raises(CallableError) as exc:
        poke_crew(ctx, "alice", {"crewId": "c1", "userId": "alice"})
    assert exc.value.code == "invalid-argument"
    assert exc.value.message == "The function must be called with crewId, date, and userId."

    with pytest.raises(CallableError) as exc:
        poke_crew(ctx, "bob", _poke_args("alice"))
    assert exc.value.code == "permission-denied"


def test_poke_unknown_crew(ctx):
    with pytest.raises(CallableError) as exc:
        poke_crew(ctx, "alice", {"crewId": "nope", "date": TODAY, "userId": "alice"})
    assert exc.value.code == "not-found"


def test_poke_wraps_unexpected_errors(ctx, crew, statuses, monkeypatch):
    statuses(alice=True)

    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(ctx.collector, "collect", boom)
    with pytest.raises(CallableError) as exc:
        poke_crew(ctx, "alice", _poke_args())
    assert exc.value.code == "unknown"
    assert exc.value.http_status == 500


# --- remindPollNonResponders ---


@pytest.fixture()
def poll(seed):
    return seed(
        "event_polls/p1",
        {
            "crewId": "c1",
            "createdBy": "alice",
            "title": "Weekend away",
            "options": [{"date": "2025-03-14", "responses": {"bob": "yes"}}, {"date": "2025-03-15", "responses": {}}],
        },
    )


def test_remind_sends_to_pending_members(ctx, transport, crew, poll):
    result = remind_poll_non_responders(ctx, "alice", {"pollId": "p1", "userId": "alice"})
    assert result == {"success": True, "message": "Reminder sent to 2 crew member(s) who haven't responded."}
    assert sorted(transport.recipients) == [token("carol"), token("dave")]
    msg = transport.sent[0]
    assert msg.title == "Poll Reminder: Friday Club"
    assert msg.body == "Alice wants to remind you to respond to the poll for Weekend away!"
    assert msg.data == {"pollId": "p1", "crewId": "c1", "screen": "EventPollRespond"}


def test_remind_only_by_creator(ctx, crew, poll):
    with pytest.raises(CallableError) as exc:
        remind_poll_non_responders(ctx, "bob", {"pollId": "p1", "userId": "bob"})
    assert exc.value.code == "permission-denied"


def test_remind_missing_poll(ctx, crew):
    with pytest.raises(CallableError) as exc:
        remind_poll_non_responders(ctx, "alice", {"pollId": "nope", "userId": "alice"})
    assert exc.value.code == "not-found"


def test_remind_finalized_poll(ctx, transport, crew, poll, seed):
    seed("event_polls/p1", {**poll, "finalized": True})
    with pytest.raises(CallableError) as exc:
        remind_poll_non_responders(ctx, "alice", {"pollId": "p1", "userId": "alice"})
    assert exc.value.code == "failed-precondition"
    assert transport.calls == 0


def test_remind_when_everyone_responded(ctx, transport, crew, poll, seed):
    options = [{"date": "2025-03-14", "responses": {"bob": "yes", "carol": "no"}}, {"date": "2025-03-15", "responses": {"dave": "maybe"}}]
    seed("event_polls/p1", {**poll, "options": options})
    result = remind_poll_non_responders(ctx, "alice", {"pollId": "p1", "userId": "alice"})
    assert result["success"] is True
    assert transport.calls == 0
