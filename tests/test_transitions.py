"""Tests for the pure transition predicates."""
from crewnotify.notifications import transitions as t


def _poll(responses_per_option, **fields):
    options = [{"date": f"2025-03-{10 + i}", "responses": dict(r)} for i, r in enumerate(responses_per_option)]
    return {"crewId": "c1", "createdBy": "alice", "title": "Trip", "options": options, **fields}


def test_write_kind():
    assert t.write_kind(None, {"a": 1}) == t.CREATED
    assert t.write_kind({"a": 1}, {"a": 2}) == t.UPDATED
    assert t.write_kind({"a": 1}, None) == t.DELETED
    assert t.write_kind(None, None) is None


def test_status_transitions():
    up = {"upForGoingOutTonight": True}
    down = {"upForGoingOutTonight": False}
    cleared = {"upForGoingOutTonight": None}
    assert t.status_transition(down, cleared) is None
    assert t.status_transition(down, None) is None
    assert t.status_transition(up, {"upForGoingOutTonight": True}) is None
    assert t.status_transition(None, up) == t.StatusTransition(None, True)
    assert t.status_transition(up, down) == t.StatusTransition(True, False)
    assert t.status_transition(up, cleared) == t.StatusTransition(True, None)
    assert t.status_transition(None, down) == t.StatusTransition(None, False)


def test_non_boolean_status_counts_as_unset():
    assert t.status_value({"upForGoingOutTonight": "yes"}) is None
    assert t.status_transition({"upForGoingOutTonight": "yes"}, None) is None


def test_poll_finalized_only_on_transition():
    assert t.poll_became_finalized(_poll([{}]), _poll([{}], finalized=True))
    assert not t.poll_became_finalized(_poll([{}], finalized=True), _poll([{}], finalized=True))
    assert not t.poll_became_finalized(_poll([{}]), _poll([{}]))


def test_all_responded_fires_once():
    members = ["alice", "bob", "carol"]
    before = _poll([{"bob": "yes"}, {}])
    after = _poll([{"bob": "yes"}, {"carol": "no"}])
    assert t.poll_crossed_all_responded(before, after, members, "alice")
    # Same responder set written again (e.g. bob changes an answer)
    again = _poll([{"bob": "maybe"}, {"carol": "no"}])
    assert not t.poll_crossed_all_responded(after, again, members, "alice")


def test_all_responded_skips_finalized_single_member_and_empty_polls():
    before = _poll([{}])
    after = _poll([{"bob": "yes"}])
    assert not t.poll_crossed_all_responded(before, {**after, "finalized": True}, ["alice", "bob"], "alice")
    assert not t.poll_crossed_all_responded(before, after, ["alice"], "alice")
    assert not t.poll_crossed_all_responded(_poll([]), _poll([]), ["alice", "bob"], "alice")


def test_new_responder_detection():
    before = _poll([{"bob": "yes"}, {}])
    assert t.poll_new_responder(before, _poll([{"bob": "yes"}, {"carol": "no"}])) == "carol"
    assert t.poll_new_responder(before, _poll([{"bob": "no"}, {}])) == "bob"
    assert t.poll_new_responder(before, before) is None
    # Option list changed length: an edit, not a response
    assert t.poll_new_responder(before, _poll([{"bob": "yes"}, {}, {"carol": "yes"}])) is None
    assert t.poll_new_responder(before, _poll([{"bob": "yes"}, {"carol": "no"}], finalized=True)) is None


def test_poll_edit_priority():
    before = _poll([{}], location="Pub", description="d")
    assert t.poll_edit_kind(before, _poll([{}, {}], title="New", location="Pub", description="d")) == t.POLL_EDIT_NEW_DATES
    assert t.poll_edit_kind(before, _poll([{}], title="New", location="Bar", description="d")) == t.POLL_EDIT_TITLE
    assert t.poll_edit_kind(before, _poll([{}], location="Bar", description="x")) == t.POLL_EDIT_LOCATION
    assert t.poll_edit_kind(before, _poll([{}], location="Pub", description="x")) == t.POLL_EDIT_DESCRIPTION
    assert t.poll_edit_kind(before, _poll([{"bob": "yes"}], location="Pub", description="d")) is None


def test_message_and_phone_predicates():
    assert t.message_has_content({"senderId": "a", "text": "hi"})
    assert t.message_has_content({"senderId": "a", "imageUrl": "x"})
    assert not t.message_has_content({"senderId": "a"})
    assert not t.message_has_content({"text": "hi"})
    assert t.phone_number_added({}, {"hashedPhoneNumber": "h"})
    assert not t.phone_number_added({"hashedPhoneNumber": "h"}, {"hashedPhoneNumber": "h2"})
    assert not t.phone_number_added(None, {"hashedPhoneNumber": "h"})


def _signal(*answers):
    return {"responses": [{"responderId": uid, "response": r} for uid, r in answers]}


def test_signal_new_acceptors():
    before = _signal(("bob", "ignore"), ("carol", "accept"))
    after = _signal(("bob", "accept"), ("carol", "accept"), ("dave", "accept"), ("erin", "ignore"))
    assert t.signal_new_acceptors(before, after) == ["bob", "dave"]
    # Already accepted: redelivering the same write is a no-op
    assert t.signal_new_acceptors(after, after) == []
    assert t.signal_new_acceptors(_signal(), _signal(("bob", "ignore"))) == []
    assert t.signal_new_acceptors(None, after) == []
    assert t.signal_new_acceptors({}, {"responses": [{"response": "accept"}, "junk"]}) == []
