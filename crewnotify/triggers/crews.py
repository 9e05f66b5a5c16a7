"""Crew settings changes (activity, name, photo) announced to everyone but the member who made them."""
import logging
from typing import Callable

from crewnotify.core.constants import DEFAULT_ACTOR_NAME
from crewnotify.notifications.categories import CREW_UPDATED
from crewnotify.notifications.compose import (
    PushContent,
    compose_crew_activity,
    compose_crew_name,
    compose_crew_photo,
)
from crewnotify.notifications.context import NotificationContext
from crewnotify.notifications.notifier import notify_users
from crewnotify.notifications.transitions import field_changed
from crewnotify.triggers.audience import excluding, member_ids
from crewnotify.triggers.base import DocumentChange

logger = logging.getLogger(__name__)


def _notify_crew_update(
    ctx: NotificationContext,
    change: DocumentChange,
    field: str,
    build: Callable[[str], PushContent],
) -> int:
    crew_id = change.params.get("crewId")
    if not field_changed(change.before, change.after, field):
        return 0
    updater = change.after.get("updatedBy")
    who = ctx.display_name(updater, DEFAULT_ACTOR_NAME)
    audience = excluding(member_ids(change.after), updater)
    if not audience:
        logger.info("Crew %s %s changed; nobody else to notify", crew_id, field)
        return 0
    return notify_users(ctx, audience, CREW_UPDATED, build(who), label=f"crew {crew_id} {field}")


def on_crew_activity_updated(ctx: NotificationContext, change: DocumentChange) -> int:
    crew_id = change.params.get("crewId")
    return _notify_crew_update(
        ctx,
        change,
        "activity",
        lambda who: compose_crew_activity(
            who=who, crew_id=crew_id, old=change.before.get("activity"), new=change.after.get("activity")
        ),
    )


def on_crew_name_updated(ctx: NotificationContext, change: DocumentChange) -> int:
    crew_id = change.params.get("crewId")
    return _notify_crew_update(
        ctx,
        change,
        "name",
        lambda who: compose_crew_name(
            who=who, crew_id=crew_id, old=change.before.get("name"), new=change.after.get("name")
        ),
    )


def on_crew_photo_updated(ctx: NotificationContext, change: DocumentChange) -> int:
    crew_id = change.params.get("crewId")
    return _notify_crew_update(
        ctx,
        change,
        "iconUrl",
        lambda who: compose_crew_photo(who=who, crew_id=crew_id, crew=change.after),
    )
