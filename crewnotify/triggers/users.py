"""Contact discovery: when a user verifies their phone number, tell users who have them in their contacts."""
import logging

from crewnotify.core.constants import COLLECTION_USERS
from crewnotify.notifications.categories import CONTACT_JOINED
from crewnotify.notifications.compose import compose_contact_joined
from crewnotify.notifications.context import NotificationContext
from crewnotify.notifications.notifier import deliver
from crewnotify.notifications.transitions import phone_number_added
from crewnotify.triggers.base import DocumentChange

logger = logging.getLogger(__name__)


def on_contact_joined(ctx: NotificationContext, change: DocumentChange) -> int:
    uid = change.params.get("uid")
    if not phone_number_added(change.before, change.after):
        return 0
    hashed = change.after["hashedPhoneNumber"]
    contacts = ctx.store.query(COLLECTION_USERS, [("hashedContacts", "array-contains", hashed)])
    contacts = [doc for doc in contacts if doc.id != uid]
    tokens = ctx.collector.collect_from_docs(contacts, CONTACT_JOINED)
    if not tokens:
        logger.info("No contacts to notify for new user %s", uid)
        return 0
    content = compose_contact_joined(
        display_name=change.after.get("displayName"),
        user_id=uid,
        app_name=ctx.settings.app_name,
    )
    sent = deliver(ctx, tokens, content)
    logger.info("Sent %s contact-joined notifications for user %s", sent, uid)
    return sent
