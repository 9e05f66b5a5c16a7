"""Tests for crew-settings, crew-chat and contact-joined triggers."""
from crewnotify.triggers.base import DocumentChange
from crewnotify.triggers.crews import on_crew_activity_updated, on_crew_name_updated, on_crew_photo_updated
from crewnotify.triggers.messages import on_crew_message_created
from crewnotify.triggers.users import on_contact_joined

from tests.conftest import token

CREW_PARAMS = {"crewId": "c1"}


def _crew_change(crew, **after):
    return DocumentChange("crews/c1", dict(crew), {**crew, **after}, CREW_PARAMS)


# --- Crew settings ---


def test_activity_change_skips_updater(ctx, transport, crew):
    assert on_crew_activity_updated(ctx, _crew_change(crew, activity="Bowling", updatedBy="bob")) == 3
    assert token("bob") not in transport.recipients
    msg = transport.sent[0]
    assert msg.title == "Crew activity updated"
    assert msg.body == 'Bob changed the crew activity from "Drinks" to "Bowling"'


def test_activity_first_set(ctx, transport, crew):
    before = {**crew, "activity": None}
    change = DocumentChange("crews/c1", before, {**before, "activity": "Bowling", "updatedBy": "bob"}, CREW_PARAMS)
    on_crew_activity_updated(ctx, change)
    assert transport.sent[0].body == 'Bob set the crew activity to "Bowling"'


def test_unknown_updater_is_someone(ctx, transport, crew):
    on_crew_name_updated(ctx, _crew_change(crew, name="Saturday Club"))
    msg = transport.sent[0]
    assert len(transport.sent) == 4
    assert msg.title == "Saturday Club"
    assert msg.body == 'Someone changed the crew name from "Friday Club" to "Saturday Club"'


def test_photo_change(ctx, transport, crew):
    on_crew_photo_updated(ctx, _crew_change(crew, iconUrl="https://img/1.png", updatedBy="alice"))
    assert transport.sent[0].title == "Friday Club"
    assert transport.sent[0].body == "Alice changed the crew photo!"


def test_unrelated_crew_update_sends_nothing(ctx, transport, crew):
    change = _crew_change(crew, ownerId="bob")
    assert on_crew_activity_updated(ctx, change) == 0
    assert on_crew_name_updated(ctx, change) == 0
    assert on_crew_photo_updated(ctx, change) == 0
    assert transport.calls == 0


# --- Crew chat ---


def _message(**fields):
    return {"senderId": "alice", "text": "Who's in?", "createdAt": "2025-03-07T09:00:00Z", **fields}


def _message_change(message):
    return DocumentChange("crews/c1/messages/m1", None, message, {"crewId": "c1", "messageId": "m1"})


def test_chat_message_skips_sender_readers_and_viewers(ctx, transport, crew, seed, add_user):
    seed("crews/c1/messages/metadata", {"lastRead": {"bob": "2025-03-07T09:05:00Z", "carol": "2025-03-07T08:00:00Z"}})
    add_user("dave", "Dave", isOnline=True, activeChats=["c1"])
    assert on_crew_message_created(ctx, _message_change(_message())) == 1
    msg = transport.sent[0]
    assert msg.to == token("carol")
    assert msg.title == "Friday Club"
    assert msg.body == "Alice: Who's in?"
    assert msg.data == {"screen": "CrewChat", "crewId": "c1", "senderId": "alice"}


def test_chat_offline_viewer_still_notified(ctx, transport, crew, add_user):
    add_user("dave", "Dave", isOnline=False, activeChats=["c1"])
    on_crew_message_created(ctx, _message_change(_message()))
    assert token("dave") in transport.recipients


def test_chat_image_and_poll_bodies(ctx, transport, crew):
    on_crew_message_created(ctx, _message_change(_message(text=None, imageUrl="https://img/2.png")))
    on_crew_message_created(ctx, _message_change(_message(text=None, poll={"question": "Pizza or tacos?"})))
    bodies = {m.body for m in transport.sent}
    assert bodies == {"Alice sent an image", "Alice created a poll: Pizza or tacos?"}


def test_empty_message_is_skipped(ctx, transport, crew):
    assert on_crew_message_created(ctx, _message_change({"senderId": "alice"})) == 0
    assert transport.calls == 0


# --- Contact joined ---


def test_contact_joined_notifies_users_with_hash(ctx, transport, add_user):
    add_user("newbie", "Nina", hashedContacts=["h-newbie"])
    add_user("friend", "Fred", hashedContacts=["h-newbie", "h-other"])
    add_user("stranger", "Sam", hashedContacts=["h-other"])
    change = DocumentChange(
        "users/newbie",
        {"displayName": "Nina"},
        {"displayName": "Nina", "hashedPhoneNumber": "h-newbie"},
        {"uid": "newbie"},
    )
    assert on_contact_joined(ctx, change) == 1
    msg = transport.sent[0]
    assert msg.to == token("friend")
    assert msg.title == "Nina just joined Flock!"
    assert msg.body == "Send them a message to say hi 💬"
    assert msg.data == {"senderId": "newbie", "screen": "DMChat"}


def test_contact_joined_only_on_first_hash(ctx, transport, add_user):
    add_user("friend", "Fred", hashedContacts=["h2"])
    change = DocumentChange("users/newbie", {"hashedPhoneNumber": "h1"}, {"hashedPhoneNumber": "h2"}, {"uid": "newbie"})
    assert on_contact_joined(ctx, change) == 0
