"""
Date polls (`event_polls/{pollId}`): creation, responses, edits, finalization, deletion,
and the one-time "everyone has responded" notice to the creator.

Several handlers watch the same updates; each decides from its own transition
predicate, so one write can produce e.g. both a response and an all-responded notice.
"""
import logging

from crewnotify.core.constants import DEFAULT_ACTOR_NAME
from crewnotify.notifications import transitions
from crewnotify.notifications.categories import (
    POLL_COMPLETED,
    POLL_CREATED,
    POLL_UPDATED,
    POLL_VOTE_CAST,
)
from crewnotify.notifications.compose import (
    compose_poll_all_responded,
    compose_poll_created,
    compose_poll_deleted,
    compose_poll_edited,
    compose_poll_finalized,
    compose_poll_response,
    crew_name,
)
from crewnotify.notifications.context import NotificationContext
from crewnotify.notifications.notifier import notify_users
from crewnotify.triggers.audience import excluding, load_crew, member_ids
from crewnotify.triggers.base import DocumentChange

logger = logging.getLogger(__name__)


def _actor_name(ctx: NotificationContext, uid: str | None) -> str | None:
    user = ctx.user(uid) if uid else None
    if user is None:
        logger.warning("Poll actor %s not found", uid)
        return None
    return user.get("displayName") or DEFAULT_ACTOR_NAME


def on_poll_created(ctx: NotificationContext, change: DocumentChange) -> int:
    poll_id = change.params.get("pollId")
    poll = change.after or {}
    crew_id, creator = poll.get("crewId"), poll.get("createdBy")
    if not crew_id or not creator:
        logger.info("Poll %s missing crewId or createdBy; skipping", poll_id)
        return 0
    crew = load_crew(ctx, crew_id)
    if crew is None:
        return 0
    actor = _actor_name(ctx, creator)
    if actor is None:
        return 0
    audience = excluding(member_ids(crew), creator)
    if not audience:
        return 0
    content = compose_poll_created(
        actor=actor, crew_title=crew_name(crew.data), crew_id=crew_id, poll_id=poll_id, poll=poll
    )
    return notify_users(ctx, audience, POLL_CREATED, content, label=f"new poll {poll_id}")


def on_poll_finalized(ctx: NotificationContext, change: DocumentChange) -> int:
    poll_id = change.params.get("pollId")
    if not transitions.poll_became_finalized(change.before, change.after):
        return 0
    poll = change.after
    crew_id = poll.get("crewId")
    if not crew_id or not poll.get("selectedDate"):
        logger.info("Finalized poll %s missing crewId or selectedDate; skipping", poll_id)
        return 0
    crew = load_crew(ctx, crew_id)
    if crew is None:
        return 0
    creator = poll.get("createdBy")
    actor = _actor_name(ctx, creator)
    if actor is None:
        return 0
    audience = excluding(member_ids(crew), creator)
    if not audience:
        return 0
    content = compose_poll_finalized(
        actor=actor,
        crew_title=crew_name(crew.data),
        crew_id=crew_id,
        poll_id=poll_id,
        poll=poll,
        today=ctx.today(),
    )
    return notify_users(ctx, audience, POLL_COMPLETED, content, label=f"finalized poll {poll_id}")


def on_poll_all_responded(ctx: NotificationContext, change: DocumentChange) -> int:
    poll_id = change.params.get("pollId")
    before, after = change.before, change.after
    if before is None or after is None or before.get("finalized") or after.get("finalized"):
        return 0
    crew_id, creator = after.get("crewId"), after.get("createdBy")
    if not crew_id or not creator:
        logger.info("Poll %s missing crewId or createdBy; skipping", poll_id)
        return 0
    crew = load_crew(ctx, crew_id)
    if crew is None:
        return 0
    members = member_ids(crew)
    if not transitions.poll_crossed_all_responded(before, after, members, creator):
        logger.info("Poll %s: responder set not newly complete", poll_id)
        return 0
    content = compose_poll_all_responded(
        crew_title=crew_name(crew.data), crew_id=crew_id, poll_id=poll_id, poll=after
    )
    return notify_users(ctx, [creator], POLL_COMPLETED, content, label=f"all responded to poll {poll_id}")


def on_poll_response(ctx: NotificationContext, change: DocumentChange) -> int:
    poll_id = change.params.get("pollId")
    responder = transitions.poll_new_responder(change.before, change.after)
    if responder is None:
        return 0
    poll = change.after
    crew = load_crew(ctx, poll.get("crewId"))
    if crew is None:
        return 0
    name = _actor_name(ctx, responder)
    if name is None:
        return 0
    audience = excluding(member_ids(crew), responder, poll.get("createdBy"))
    if not audience:
        return 0
    content = compose_poll_response(
        responder=name, crew_title=crew_name(crew.data), crew_id=crew.id, poll_id=poll_id, poll=poll
    )
    return notify_users(ctx, audience, POLL_VOTE_CAST, content, label=f"response to poll {poll_id}")


def on_poll_edited(ctx: NotificationContext, change: DocumentChange) -> int:
    poll_id = change.params.get("pollId")
    edit = transitions.poll_edit_kind(change.before, change.after)
    if edit is None:
        return 0
    poll = change.after
    crew_id, creator = poll.get("crewId"), poll.get("createdBy")
    if not crew_id or not creator:
        logger.info("Edited poll %s missing crewId or createdBy; skipping", poll_id)
        return 0
    crew = load_crew(ctx, crew_id)
    if crew is None:
        return 0
    actor = _actor_name(ctx, creator)
    if actor is None:
        return 0
    audience = excluding(member_ids(crew), creator)
    if not audience:
        return 0
    content = compose_poll_edited(
        edit,
        actor=actor,
        crew_title=crew_name(crew.data),
        crew_id=crew_id,
        poll_id=poll_id,
        before=change.before,
        after=poll,
    )
    return notify_users(ctx, audience, POLL_UPDATED, content, label=f"edited poll {poll_id} ({edit})")


def on_poll_deleted(ctx: NotificationContext, change: DocumentChange) -> int:
    poll_id = change.params.get("pollId")
    poll = change.before or {}
    crew_id, creator = poll.get("crewId"), poll.get("createdBy")
    if not crew_id or not creator:
        logger.info("Deleted poll %s missing crewId or createdBy; skipping", poll_id)
        return 0
    crew = load_crew(ctx, crew_id)
    if crew is None:
        return 0
    actor = _actor_name(ctx, creator)
    if actor is None:
        return 0
    audience = excluding(member_ids(crew), creator)
    if not audience:
        return 0
    content = compose_poll_deleted(actor=actor, crew_title=crew_name(crew.data), crew_id=crew_id, poll=poll)
    return notify_users(ctx, audience, POLL_UPDATED, content, label=f"deleted poll {poll_id}")
