"""
Signals: when someone accepts a crew-targeted signal, tell the other members of the
targeted crews that a meetup is happening.

Only active signals aimed at crews are considered. The sender and the accepter are
never notified. A member of several targeted crews is told about the first one.
"""
import logging

from crewnotify.core.constants import COLLECTION_CREWS, DEFAULT_ACTOR_NAME, DEFAULT_SIGNAL_CREW_NAME
from crewnotify.notifications.categories import SIGNAL_RECEIVED
from crewnotify.notifications.compose import compose_signal_accepted, crew_name
from crewnotify.notifications.context import NotificationContext
from crewnotify.notifications.notifier import build_messages
from crewnotify.notifications.transitions import signal_new_acceptors
from crewnotify.services.push import PushMessage
from crewnotify.triggers.audience import member_ids
from crewnotify.triggers.base import DocumentChange

logger = logging.getLogger(__name__)

SIGNAL_TARGET_CREWS = "crews"
SIGNAL_ACTIVE = "active"


def primary_crews(ctx: NotificationContext, crew_ids: list[str]) -> tuple[dict[str, str], dict[str, str]]:
    """(member id -> first targeted crew id containing them, crew id -> display name). Missing crews are skipped."""
    crews = ctx.collector.fetch_docs(COLLECTION_CREWS, crew_ids)
    names: dict[str, str] = {}
    primary: dict[str, str] = {}
    for crew_id in crew_ids:
        crew = crews.get(crew_id)
        if crew is None:
            logger.warning("Signal target crew %s not found", crew_id)
            continue
        names[crew_id] = crew_name(crew.data, DEFAULT_SIGNAL_CREW_NAME)
        for uid in member_ids(crew):
            primary.setdefault(uid, crew_id)
    return primary, names


def on_signal_accepted(ctx: NotificationContext, change: DocumentChange) -> int:
    signal_id = change.params.get("signalId")
    signal = change.after or {}
    target_ids = [c for c in signal.get("targetIds") or [] if isinstance(c, str) and c]
    if signal.get("targetType") != SIGNAL_TARGET_CREWS or not target_ids:
        logger.info("Signal %s does not target crews; skipping", signal_id)
        return 0
    if signal.get("status") != SIGNAL_ACTIVE:
        logger.info("Signal %s is not active; skipping", signal_id)
        return 0
    acceptors = signal_new_acceptors(change.before, change.after)
    if not acceptors:
        return 0

    primary, names = primary_crews(ctx, target_ids)
    sent = 0
    for accepter_id in acceptors:
        accepter = ctx.user(accepter_id)
        if accepter is None:
            logger.warning("Signal accepter %s not found", accepter_id)
            continue
        accepter_name = accepter.get("displayName") or DEFAULT_ACTOR_NAME
        recipients = [uid for uid in primary if uid not in (signal.get("senderId"), accepter_id)]
        users = ctx.collector.fetch_users(recipients)

        messages: list[PushMessage] = []
        seen: set[str] = set()
        for uid in recipients:
            user = users.get(uid)
            if user is None:
                continue
            tokens = [t for t in ctx.collector.tokens_for_user(user, SIGNAL_RECEIVED) if t not in seen]
            if not tokens:
                continue
            seen.update(tokens)
            crew_id = primary[uid]
            content = compose_signal_accepted(
                accepter_name=accepter_name,
                accepter_id=accepter_id,
                crew_title=names[crew_id],
                crew_id=crew_id,
                signal_id=signal_id,
                message=signal.get("message"),
            )
            messages.extend(build_messages(tokens, content))
        if not messages:
            logger.info("No signal notifications to send for %s accepted by %s", signal_id, accepter_id)
            continue
        ctx.transport.send(messages)
        sent += len(messages)
        logger.info("Sent %s signal accept notifications for signal %s", len(messages), signal_id)
    return sent
