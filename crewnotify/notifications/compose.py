"""
Notification copy and deep-link payloads.

Pure functions: names and documents in, PushContent out. `today` is passed in by
the caller (computed once per invocation) so relative dates ("today", "tomorrow")
are deterministic.
"""
from datetime import date
from typing import Any, NamedTuple

from crewnotify.core.constants import (
    DEFAULT_ACTIVITY,
    DEFAULT_CREW_NAME,
    DEFAULT_DIGEST_EVENT_TITLE,
    DEFAULT_EVENT_TITLE,
    DEFAULT_POLL_TITLE,
    SCREEN_CREW,
    SCREEN_CREW_CHAT,
    SCREEN_CREW_DATE_CHAT,
    SCREEN_DM_CHAT,
    SCREEN_POLL_DETAILS,
    SCREEN_POLL_RESPOND,
)
from crewnotify.core.dates import date_description, event_date_range, formatted_date
from crewnotify.notifications import transitions


class PushContent(NamedTuple):
    title: str
    body: str
    data: dict[str, Any]
    subtitle: str | None = None


def crew_name(crew: dict[str, Any] | None, default: str = DEFAULT_CREW_NAME) -> str:
    return (crew or {}).get("name") or default


def activity_name(crew: dict[str, Any] | None) -> str:
    activity = (crew or {}).get("activity")
    return activity.lower() if isinstance(activity, str) and activity else DEFAULT_ACTIVITY


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def compose_event_write(
    kind: str,
    *,
    actor: str,
    crew_title: str,
    crew_id: str,
    event_id: str,
    event: dict[str, Any],
    today: date,
) -> PushContent:
    title = event.get("title") or DEFAULT_EVENT_TITLE
    if kind == transitions.CREATED:
        date_range = event_date_range(event.get("startDate"), event.get("endDate"), today)
        body = f'{actor} created a new event "{title}" ({date_range}).'
    elif kind == transitions.UPDATED:
        body = f'{actor} updated the event "{title}".'
    else:
        body = f'{actor} deleted the event "{title}".'
    return PushContent(
        crew_title,
        body,
        {"crewId": crew_id, "eventId": event_id, "date": event.get("startDate"), "screen": SCREEN_CREW},
    )


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


def compose_status_change(
    change: "transitions.StatusTransition",
    *,
    user_name: str,
    crew: dict[str, Any],
    crew_id: str,
    user_id: str,
    day: str,
    today: date,
) -> PushContent:
    activity = activity_name(crew)
    when = date_description(day, today)
    if change.after is True:
        body = f"{user_name} is up for {activity} {when}!"
    elif change.before is True:
        body = f"{user_name} is no longer up for {activity} {when}."
    else:
        body = f"{user_name} is not available for {activity} {when}."
    return PushContent(
        crew_name(crew),
        body,
        {
            "crewId": crew_id,
            "userId": user_id,
            "date": day,
            "statusChangedToUp": change.went_up,
            "statusChangedToDown": change.went_down,
            "screen": SCREEN_CREW,
        },
    )


def compose_poke(*, sender: str, crew: dict[str, Any], crew_id: str, day: str, today: date) -> PushContent:
    name = crew_name(crew)
    when = date_description(day, today)
    return PushContent(
        f"{sender} poked you!",
        f"{sender} has poked the {name} crew about {activity_name(crew)} {when}!",
        {"crewId": crew_id, "date": day, "screen": SCREEN_CREW},
        subtitle=name,
    )


# ---------------------------------------------------------------------------
# Polls
# ---------------------------------------------------------------------------


def _poll_title(poll: dict[str, Any]) -> str:
    return poll.get("title") or DEFAULT_POLL_TITLE


def compose_poll_created(*, actor: str, crew_title: str, crew_id: str, poll_id: str, poll: dict[str, Any]) -> PushContent:
    return PushContent(
        crew_title,
        f'{actor} created a new poll "{_poll_title(poll)}" to pick a date.',
        {"crewId": crew_id, "pollId": poll_id, "screen": SCREEN_POLL_RESPOND},
    )


def compose_poll_finalized(
    *,
    actor: str,
    crew_title: str,
    crew_id: str,
    poll_id: str,
    poll: dict[str, Any],
    today: date,
) -> PushContent:
    start = formatted_date(poll.get("selectedDate") or "", today)
    duration = poll.get("duration") or 1
    title = _poll_title(poll)
    if isinstance(duration, (int, float)) and duration > 1:
        end = formatted_date(poll.get("selectedEndDate") or poll.get("selectedDate") or "", today)
        body = f'{actor} finalised the poll "{title}". Selected dates: {start} to {end} ({duration} days).'
    else:
        body = f'{actor} finalised the poll "{title}". The selected date is {start}.'
    return PushContent(crew_title, body, {"crewId": crew_id, "pollId": poll_id, "screen": SCREEN_POLL_DETAILS})


def compose_poll_all_responded(*, crew_title: str, crew_id: str, poll_id: str, poll: dict[str, Any]) -> PushContent:
    return PushContent(
        "Poll Complete",
        f'Everyone in "{crew_title}" has responded to your poll "{_poll_title(poll)}". You can now finalise a date!',
        {"crewId": crew_id, "pollId": poll_id, "screen": SCREEN_POLL_DETAILS},
    )


def compose_poll_response(*, responder: str, crew_title: str, crew_id: str, poll_id: str, poll: dict[str, Any]) -> PushContent:
    return PushContent(
        crew_title,
        f'{responder} responded to the poll "{_poll_title(poll)}".',
        {"crewId": crew_id, "pollId": poll_id, "screen": SCREEN_POLL_DETAILS},
    )


def compose_poll_edited(
    edit_kind: str | None,
    *,
    actor: str,
    crew_title: str,
    crew_id: str,
    poll_id: str,
    before: dict[str, Any],
    after: dict[str, Any],
) -> PushContent:
    title = after.get("title")
    if edit_kind == transitions.POLL_EDIT_NEW_DATES:
        body = f'{actor} added new date options to "{title}"'
    elif edit_kind == transitions.POLL_EDIT_TITLE:
        body = f'{actor} changed the poll "{before.get("title")}" to "{title}"'
    elif edit_kind == transitions.POLL_EDIT_LOCATION:
        body = f'{actor} updated the location for "{title}"'
    elif edit_kind == transitions.POLL_EDIT_DESCRIPTION:
        body = f'{actor} updated the description for "{title}"'
    else:
        body = f'{actor} edited details for the poll "{title}"'
    return PushContent(
        f"{crew_title} - Poll Updated",
        body,
        {
            "crewId": crew_id,
            "pollId": poll_id,
            "screen": SCREEN_POLL_DETAILS,
            "params": {"pollId": poll_id, "crewId": crew_id},
        },
    )


def compose_poll_deleted(*, actor: str, crew_title: str, crew_id: str, poll: dict[str, Any]) -> PushContent:
    return PushContent(
        crew_title,
        f'{actor} deleted the poll "{_poll_title(poll)}".',
        {"crewId": crew_id, "screen": SCREEN_CREW},
    )


def compose_poll_reminder(*, sender: str, crew_title: str, crew_id: str, poll_id: str, poll: dict[str, Any]) -> PushContent:
    title = poll.get("title") or "an event"
    return PushContent(
        f"Poll Reminder: {crew_title}",
        f"{sender} wants to remind you to respond to the poll for {title}!",
        {"pollId": poll_id, "crewId": crew_id, "screen": SCREEN_POLL_RESPOND},
    )


# ---------------------------------------------------------------------------
# Crew settings
# ---------------------------------------------------------------------------


def compose_crew_activity(*, who: str, crew_id: str, old: str | None, new: str | None) -> PushContent:
    if old:
        body = f'{who} changed the crew activity from "{old}" to "{new}"'
    else:
        body = f'{who} set the crew activity to "{new}"'
    return PushContent("Crew activity updated", body, {"crewId": crew_id, "screen": SCREEN_CREW})


def compose_crew_name(*, who: str, crew_id: str, old: str | None, new: str | None) -> PushContent:
    return PushContent(
        new or "Your crew",
        f'{who} changed the crew name from "{old}" to "{new}"',
        {"crewId": crew_id, "screen": SCREEN_CREW},
    )


def compose_crew_photo(*, who: str, crew_id: str, crew: dict[str, Any]) -> PushContent:
    return PushContent(
        crew_name(crew, "Your crew"),
        f"{who} changed the crew photo!",
        {"crewId": crew_id, "screen": SCREEN_CREW},
    )


# ---------------------------------------------------------------------------
# Chat and contacts
# ---------------------------------------------------------------------------


def compose_chat_message(*, sender: str, crew_title: str, crew_id: str, message: dict[str, Any]) -> PushContent:
    if message.get("imageUrl"):
        body = f"{sender} sent an image"
    elif message.get("poll"):
        poll = message.get("poll") or {}
        question = poll.get("question", "") if isinstance(poll, dict) else ""
        body = f"{sender} created a poll: {question}"
    else:
        body = f"{sender}: {message.get('text')}"
    return PushContent(
        crew_title,
        body,
        {"screen": SCREEN_CREW_CHAT, "crewId": crew_id, "senderId": message.get("senderId")},
    )


def compose_contact_joined(*, display_name: str | None, user_id: str, app_name: str) -> PushContent:
    return PushContent(
        f"{display_name or 'A friend'} just joined {app_name}!",
        "Send them a message to say hi 💬",
        {"senderId": user_id, "screen": SCREEN_DM_CHAT},
    )


def compose_signal_accepted(
    *,
    accepter_name: str,
    accepter_id: str,
    crew_title: str,
    crew_id: str,
    signal_id: str,
    message: str | None = None,
) -> PushContent:
    """Sent to a crew member whose crew a signal targeted, once someone accepts it."""
    body = f"Someone from {crew_title} is meeting up right now. Chat with the crew to find out what's happening."
    if message:
        body = f'"{message}" - {body}'
    return PushContent(
        f"{accepter_name} accepted a signal!",
        body,
        {
            "type": "signal_accept",
            "signalId": signal_id,
            "accepterId": accepter_id,
            "accepterName": accepter_name,
            "screen": SCREEN_CREW_CHAT,
            "crewId": crew_id,
        },
    )


# ---------------------------------------------------------------------------
# Digests
# ---------------------------------------------------------------------------

DIGEST_TODAY = "today"
DIGEST_TOMORROW = "tomorrow"


def compose_event_digest(
    which: str,
    *,
    available: bool,
    crew_title: str,
    crew_id: str,
    event_id: str,
    event: dict[str, Any],
    day: str,
) -> PushContent:
    """Reminder about an event on `day`. Available members are sent to the day's chat."""
    title = event.get("title") or DEFAULT_DIGEST_EVENT_TITLE
    if which == DIGEST_TODAY:
        if available:
            body = f"{title} is happening today! Join the chat to finalise the details."
        else:
            body = f"{title} is happening today! Let your crew know if you're joining."
    else:
        if available:
            body = f"{title} is happening tomorrow. Join the chat!"
        else:
            body = f"{title} is happening tomorrow. Set your availability to let your crew know if you can make it!"
    data: dict[str, Any] = {"crewId": crew_id, "date": day, "eventId": event_id}
    if available:
        data = {"screen": SCREEN_CREW_DATE_CHAT, "chatId": f"{crew_id}_{day}", **data}
    else:
        data = {"screen": SCREEN_CREW, **data}
    return PushContent(crew_title, body, data)
