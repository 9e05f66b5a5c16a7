"""
Crew chat: push a new message to members who have not seen it.

A member is skipped when their lastRead marker (chat metadata document) is later
than the message, or when they are online with this chat open.
"""
import logging
from typing import Any

from crewnotify.core.constants import DEFAULT_ACTOR_NAME, chat_metadata_path
from crewnotify.core.dates import to_epoch_millis
from crewnotify.notifications.categories import CREW_CHAT_MESSAGE
from crewnotify.notifications.compose import compose_chat_message, crew_name
from crewnotify.notifications.context import NotificationContext
from crewnotify.notifications.notifier import deliver
from crewnotify.notifications.transitions import message_has_content
from crewnotify.store.base import StoredDocument
from crewnotify.triggers.audience import excluding, member_ids
from crewnotify.triggers.base import DocumentChange

logger = logging.getLogger(__name__)


def has_seen_message(user: StoredDocument, crew_id: str, last_read_ms: int | None, message_ms: int) -> bool:
    if last_read_ms is not None and last_read_ms > message_ms:
        return True
    active = user.get("activeChats")
    return user.get("isOnline") is True and isinstance(active, list) and crew_id in active


def on_crew_message_created(ctx: NotificationContext, change: DocumentChange) -> int:
    crew_id = change.params.get("crewId")
    message = change.after or {}
    if not message_has_content(message):
        logger.info("Message %s in crew %s has no sender or content; skipping", change.params.get("messageId"), crew_id)
        return 0
    sender_id = message["senderId"]

    sender = ctx.user(sender_id)
    if sender is None:
        logger.warning("Message sender %s not found", sender_id)
        return 0
    crew = ctx.crew(crew_id)
    if crew is None:
        logger.warning("Crew %s not found", crew_id)
        return 0
    recipients = excluding(member_ids(crew), sender_id)
    if not recipients:
        return 0

    metadata = ctx.store.get(chat_metadata_path(crew_id))
    last_read: dict[str, Any] = (metadata.get("lastRead") if metadata else None) or {}
    message_ms = to_epoch_millis(message.get("createdAt"))
    if message_ms is None:
        message_ms = to_epoch_millis(ctx.now())

    users = ctx.collector.fetch_users(recipients)
    tokens: list[str] = []
    for uid in recipients:
        user = users.get(uid)
        if user is None:
            continue
        if has_seen_message(user, crew_id, to_epoch_millis(last_read.get(uid)), message_ms):
            continue
        for tok in ctx.collector.tokens_for_user(user, CREW_CHAT_MESSAGE):
            if tok not in tokens:
                tokens.append(tok)
    if not tokens:
        logger.info("No chat notifications to send for crew %s", crew_id)
        return 0

    content = compose_chat_message(
        sender=sender.get("displayName") or DEFAULT_ACTOR_NAME,
        crew_title=crew_name(crew.data),
        crew_id=crew_id,
        message=message,
    )
    sent = deliver(ctx, tokens, content)
    logger.info("Sent %s chat notifications for crew %s", sent, crew_id)
    return sent
