"""
Per-user notification category filter.

Each notification type belongs to exactly one of seven categories; a user's
`notificationSettings` map holds one boolean per category. A missing map (or a
missing key) means enabled. Types missing from the table are sent (fail-open)
with a warning.
"""
import logging
from typing import Any, Mapping

logger = logging.getLogger(__name__)

MESSAGES_AND_COMMUNICATION = "messagesAndCommunication"
CREW_MANAGEMENT = "crewManagement"
EVENTS_AND_PLANNING = "eventsAndPlanning"
POLLS_AND_VOTING = "pollsAndVoting"
STATUS_AND_ACTIVITY = "statusAndActivity"
SIGNALS_AND_LOCATION = "signalsAndLocation"
SOCIAL_AND_DISCOVERY = "socialAndDiscovery"

CATEGORIES = (
    MESSAGES_AND_COMMUNICATION,
    CREW_MANAGEMENT,
    EVENTS_AND_PLANNING,
    POLLS_AND_VOTING,
    STATUS_AND_ACTIVITY,
    SIGNALS_AND_LOCATION,
    SOCIAL_AND_DISCOVERY,
)

DEFAULT_NOTIFICATION_SETTINGS: dict[str, bool] = {c: True for c in CATEGORIES}

# Notification types emitted by triggers, callables and jobs
NEW_MESSAGE = "new_message"
POKE_CREW = "poke_crew"
CREW_CHAT_MESSAGE = "crew_chat_message"
CREW_UPDATED = "crew_updated"
EVENT_CREATED = "event_created"
EVENT_UPDATED = "event_updated"
EVENT_CANCELLED = "event_cancelled"
EVENT_REMINDER = "event_reminder"
POLL_CREATED = "poll_created"
POLL_VOTE_CAST = "poll_vote_cast"
POLL_COMPLETED = "poll_completed"
POLL_UPDATED = "poll_updated"
POLL_REMINDER = "poll_reminder"
USER_STATUS_CHANGED = "user_status_changed"
CONTACT_JOINED = "contact_joined"
SIGNAL_RECEIVED = "signal_received"

NOTIFICATION_TYPE_TO_CATEGORY: dict[str, str] = {
    # Messages & communication
    NEW_MESSAGE: MESSAGES_AND_COMMUNICATION,
    POKE_CREW: MESSAGES_AND_COMMUNICATION,
    CREW_CHAT_MESSAGE: MESSAGES_AND_COMMUNICATION,
    # Crew management
    "crew_invitation": CREW_MANAGEMENT,
    "crew_member_joined": CREW_MANAGEMENT,
    "crew_member_left": CREW_MANAGEMENT,
    CREW_UPDATED: CREW_MANAGEMENT,
    "crew_disbanded": CREW_MANAGEMENT,
    "crew_role_changed": CREW_MANAGEMENT,
    "crew_member_kicked": CREW_MANAGEMENT,
    # Events & planning
    EVENT_CREATED: EVENTS_AND_PLANNING,
    EVENT_UPDATED: EVENTS_AND_PLANNING,
    EVENT_CANCELLED: EVENTS_AND_PLANNING,
    EVENT_REMINDER: EVENTS_AND_PLANNING,
    # Polls & voting
    POLL_CREATED: POLLS_AND_VOTING,
    POLL_VOTE_CAST: POLLS_AND_VOTING,
    POLL_COMPLETED: POLLS_AND_VOTING,
    POLL_UPDATED: POLLS_AND_VOTING,
    POLL_REMINDER: POLLS_AND_VOTING,
    "poll_deadline_approaching": POLLS_AND_VOTING,
    # Status & activity
    USER_STATUS_CHANGED: STATUS_AND_ACTIVITY,
    "friend_went_online": STATUS_AND_ACTIVITY,
    "activity_summary": STATUS_AND_ACTIVITY,
    # Signals & location
    SIGNAL_RECEIVED: SIGNALS_AND_LOCATION,
    "location_shared": SIGNALS_AND_LOCATION,
    # Social & discovery
    "friend_request": SOCIAL_AND_DISCOVERY,
    CONTACT_JOINED: SOCIAL_AND_DISCOVERY,
}


def get_notification_category(notification_type: str) -> str | None:
    return NOTIFICATION_TYPE_TO_CATEGORY.get(notification_type)


def should_send_notification(
    user_settings: Mapping[str, Any] | None,
    notification_type: str,
) -> bool:
    """True when the user's settings allow this notification type (see module docstring for defaults)."""
    prefs = user_settings if isinstance(user_settings, Mapping) else DEFAULT_NOTIFICATION_SETTINGS
    category = NOTIFICATION_TYPE_TO_CATEGORY.get(notification_type)
    if category is None:
        logger.warning("Unknown notification type: %s. Defaulting to send.", notification_type)
        return True
    return bool(prefs.get(category, True))
