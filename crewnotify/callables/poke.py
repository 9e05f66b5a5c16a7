"""
pokeCrew: a member who is up for a date nudges the members who have not set a
status for that date yet.
"""
import logging
from typing import Any

from crewnotify.callables.base import callable_rpc, require_args, require_caller, require_self
from crewnotify.core.constants import DEFAULT_SENDER_NAME, user_statuses_collection
from crewnotify.core.errors import INVALID_ARGUMENT, NOT_FOUND, PERMISSION_DENIED, CallableError
from crewnotify.notifications.categories import POKE_CREW
from crewnotify.notifications.compose import compose_poke
from crewnotify.notifications.context import NotificationContext
from crewnotify.notifications.notifier import deliver
from crewnotify.notifications.transitions import status_value
from crewnotify.triggers.audience import excluding, member_ids

logger = logging.getLogger(__name__)

MSG_NOT_UP = "You must be marked as up for it to poke the crew."
MSG_ALL_RESPONDED = "All crew members have already responded."
MSG_NO_TOKENS = "The crew members who haven't responded didn't have push notifications set up correctly."
MSG_POKED = "The crew were successfully poked"


@callable_rpc("pokeCrew")
def poke_crew(ctx: NotificationContext, caller_id: str | None, data: dict[str, Any]) -> dict[str, Any]:
    """Returns {"success": bool, "message": str}; raises CallableError for rejected calls."""
    caller = require_caller(caller_id)
    crew_id, day, user_id = require_args(data, "crewId", "date", "userId")
    require_self(caller, user_id)

    crew = ctx.crew(crew_id)
    if crew is None:
        raise CallableError(NOT_FOUND, "Crew not found.")
    if not crew.get("memberIds") or not crew.get("name"):
        raise CallableError(INVALID_ARGUMENT, "Crew data is incomplete.")

    statuses = {
        doc.id: status_value(doc.data)
        for doc in ctx.store.query(user_statuses_collection(crew_id, day))
    }
    if statuses.get(user_id) is not True:
        raise CallableError(PERMISSION_DENIED, MSG_NOT_UP)

    not_responded = [m for m in excluding(member_ids(crew), user_id) if statuses.get(m) is None]
    if not not_responded:
        return {"success": True, "message": MSG_ALL_RESPONDED}

    sender = ctx.user(user_id)
    if sender is None:
        raise CallableError(NOT_FOUND, "User not found.")

    tokens = ctx.collector.collect(not_responded, POKE_CREW)
    if not tokens:
        return {"success": False, "message": MSG_NO_TOKENS}

    content = compose_poke(
        sender=sender.get("displayName") or DEFAULT_SENDER_NAME,
        crew=crew.data,
        crew_id=crew_id,
        day=day,
        today=ctx.today(),
    )
    sent = deliver(ctx, tokens, content)
    logger.info("Sent %s poke notifications in crew %s for %s", sent, crew_id, day)
    return {"success": True, "message": MSG_POKED}
