"""
Turn composed content into push messages and hand them to the transport.

`notify_users` is the common tail of every handler: collect tokens for an audience,
build one message per token, send. Transport failures propagate from `deliver`;
`deliver_isolated` logs them instead (digest jobs send per member and keep going).
"""
import logging
from typing import Iterable, Sequence

from crewnotify.core.errors import PushTransportError
from crewnotify.notifications.compose import PushContent
from crewnotify.notifications.context import NotificationContext
from crewnotify.services.push import PushMessage

logger = logging.getLogger(__name__)


def build_messages(tokens: Iterable[str], content: PushContent) -> list[PushMessage]:
    return [
        PushMessage(
            to=token,
            title=content.title,
            body=content.body,
            data=dict(content.data),
            subtitle=content.subtitle,
        )
        for token in tokens
    ]


def deliver(ctx: NotificationContext, tokens: Sequence[str], content: PushContent) -> int:
    """Send one message per token. Returns the number of messages handed to the transport."""
    if not tokens:
        return 0
    messages = build_messages(tokens, content)
    ctx.transport.send(messages)
    return len(messages)


def deliver_isolated(ctx: NotificationContext, tokens: Sequence[str], content: PushContent, *, label: str) -> int:
    """Like deliver, but a transport failure is logged and counted as zero sends."""
    try:
        return deliver(ctx, tokens, content)
    except PushTransportError:
        logger.exception("Push send failed for %s", label)
        return 0


def notify_users(
    ctx: NotificationContext,
    user_ids: Iterable[str],
    notification_type: str,
    content: PushContent,
    *,
    label: str = "",
) -> int:
    """Collect tokens for the audience (category filter applied) and send."""
    tokens = ctx.collector.collect(user_ids, notification_type)
    if not tokens:
        logger.info("No valid push tokens for %s (%s)", label or notification_type, notification_type)
        return 0
    sent = deliver(ctx, tokens, content)
    logger.info("Sent %s %s notifications for %s", sent, notification_type, label or "-")
    return sent
