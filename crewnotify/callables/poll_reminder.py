"""remindPollNonResponders: the poll creator nudges members who have not answered any option."""
import logging
from typing import Any

from crewnotify.callables.base import callable_rpc, require_args, require_caller, require_self
from crewnotify.core.constants import DEFAULT_SENDER_NAME, poll_path
from crewnotify.core.errors import (
    FAILED_PRECONDITION,
    INVALID_ARGUMENT,
    NOT_FOUND,
    PERMISSION_DENIED,
    CallableError,
)
from crewnotify.notifications.categories import POLL_REMINDER
from crewnotify.notifications.compose import compose_poll_reminder
from crewnotify.notifications.context import NotificationContext
from crewnotify.notifications.notifier import deliver
from crewnotify.notifications.transitions import responded_user_ids
from crewnotify.triggers.audience import excluding, member_ids

logger = logging.getLogger(__name__)

MSG_ALL_RESPONDED = "All crew members have already responded to the poll."
MSG_NO_TOKENS = "No valid push tokens found for members who have not responded."


@callable_rpc("remindPollNonResponders")
def remind_poll_non_responders(ctx: NotificationContext, caller_id: str | None, data: dict[str, Any]) -> dict[str, Any]:
    caller = require_caller(caller_id)
    poll_id, user_id = require_args(data, "pollId", "userId")
    require_self(caller, user_id)

    poll = ctx.store.get(poll_path(poll_id))
    if poll is None:
        raise CallableError(NOT_FOUND, "Poll not found.")
    if poll.get("createdBy") != user_id:
        raise CallableError(PERMISSION_DENIED, "Only the poll creator can send reminders.")
    if poll.get("finalized"):
        raise CallableError(FAILED_PRECONDITION, "Cannot send reminders for finalized polls.")

    crew_id = poll.get("crewId")
    crew = ctx.crew(crew_id) if crew_id else None
    if crew is None:
        raise CallableError(NOT_FOUND, "Crew not found.")
    if not crew.get("memberIds") or not crew.get("name"):
        raise CallableError(INVALID_ARGUMENT, "Crew data is incomplete.")

    responded = responded_user_ids(poll.data)
    pending = [m for m in excluding(member_ids(crew), user_id) if m not in responded]
    if not pending:
        return {"success": True, "message": MSG_ALL_RESPONDED}

    sender = ctx.user(user_id)
    if sender is None:
        raise CallableError(NOT_FOUND, "User not found.")

    tokens = ctx.collector.collect(pending, POLL_REMINDER)
    if not tokens:
        return {"success": False, "message": MSG_NO_TOKENS}

    content = compose_poll_reminder(
        sender=sender.get("displayName") or DEFAULT_SENDER_NAME,
        crew_title=crew.get("name"),
        crew_id=crew_id,
        poll_id=poll_id,
        poll=poll.data,
    )
    sent = deliver(ctx, tokens, content)
    logger.info("Sent %s poll reminders for poll %s", sent, poll_id)
    return {
        "success": True,
        "message": f"Reminder sent to {len(pending)} crew member(s) who haven't responded.",
    }
