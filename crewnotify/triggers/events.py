"""Crew calendar events: notify every member when an event is created, updated or deleted."""
import logging

from crewnotify.core.constants import DEFAULT_ACTOR_NAME
from crewnotify.notifications import transitions
from crewnotify.notifications.categories import EVENT_CANCELLED, EVENT_CREATED, EVENT_UPDATED
from crewnotify.notifications.compose import compose_event_write, crew_name
from crewnotify.notifications.context import NotificationContext
from crewnotify.notifications.notifier import notify_users
from crewnotify.triggers.audience import load_crew, member_ids
from crewnotify.triggers.base import DocumentChange

logger = logging.getLogger(__name__)

_TYPE_BY_KIND = {
    transitions.CREATED: EVENT_CREATED,
    transitions.UPDATED: EVENT_UPDATED,
    transitions.DELETED: EVENT_CANCELLED,
}


def on_event_written(ctx: NotificationContext, change: DocumentChange) -> int:
    kind = change.kind
    if kind is None:
        return 0
    crew_id = change.params.get("crewId")
    event_id = change.params.get("eventId")
    event = change.data
    # Creator for creates and deletes, last editor for updates
    actor_id = event.get("updatedBy") if kind == transitions.UPDATED else event.get("createdBy")
    if not actor_id:
        logger.info("Event %s %s without an actor; skipping", event_id, kind)
        return 0

    crew = load_crew(ctx, crew_id)
    if crew is None:
        return 0
    actor = ctx.user(actor_id)
    if actor is None:
        logger.warning("Event actor %s not found", actor_id)
        return 0

    content = compose_event_write(
        kind,
        actor=actor.get("displayName") or DEFAULT_ACTOR_NAME,
        crew_title=crew_name(crew.data),
        crew_id=crew_id,
        event_id=event_id,
        event=event,
        today=ctx.today(),
    )
    # Audience includes the actor
    return notify_users(ctx, member_ids(crew), _TYPE_BY_KIND[kind], content, label=f"event {event_id} in crew {crew_id}")
