"""
Per-day availability: when a member marks themselves up / not up for a date, tell
the other members who are up that day.
"""
import logging

from crewnotify.core.constants import DEFAULT_ACTOR_NAME, user_statuses_collection
from crewnotify.notifications.categories import USER_STATUS_CHANGED
from crewnotify.notifications.compose import compose_status_change
from crewnotify.notifications.context import NotificationContext
from crewnotify.notifications.notifier import notify_users
from crewnotify.notifications.transitions import status_transition, status_value
from crewnotify.triggers.audience import excluding, load_crew, member_ids
from crewnotify.triggers.base import DocumentChange

logger = logging.getLogger(__name__)


def available_members(ctx: NotificationContext, crew_id: str, day: str, candidates: list[str]) -> list[str]:
    """Members among `candidates` whose status for `day` is True (batched id lookups)."""
    statuses = ctx.collector.fetch_docs(user_statuses_collection(crew_id, day), candidates)
    return [uid for uid in candidates if uid in statuses and status_value(statuses[uid].data) is True]


def on_status_written(ctx: NotificationContext, change: DocumentChange) -> int:
    crew_id = change.params.get("crewId")
    day = change.params.get("date")
    user_id = change.params.get("userId")

    transition = status_transition(change.before, change.after)
    if transition is None:
        logger.info("Status of %s in crew %s for %s: no notifiable change", user_id, crew_id, day)
        return 0

    crew = load_crew(ctx, crew_id, require_name=True)
    if crew is None:
        return 0
    others = excluding(member_ids(crew), user_id)
    if not others:
        logger.info("No other members in crew %s", crew_id)
        return 0
    user = ctx.user(user_id)
    if user is None:
        logger.warning("User %s not found", user_id)
        return 0

    audience = available_members(ctx, crew_id, day, others)
    if not audience:
        logger.info("No members up for %s in crew %s", day, crew_id)
        return 0

    content = compose_status_change(
        transition,
        user_name=user.get("displayName") or DEFAULT_ACTOR_NAME,
        crew=crew.data,
        crew_id=crew_id,
        user_id=user_id,
        day=day,
        today=ctx.today(),
    )
    return notify_users(ctx, audience, USER_STATUS_CHANGED, content, label=f"status of {user_id} in crew {crew_id}")
