"""
Centralized constants for triggers, jobs and push delivery (Encapsulate What Changes).

Change job IDs, collection names or batch sizes here instead of scattering literals
across handlers and routes. Schedules and windows come from config (env-driven).
"""

# Scheduler job IDs (must match ids used in main.py add_job and /jobs/{job_id}/run)
TODAYS_EVENTS_JOB_ID = "todays_events_digest"
TOMORROWS_EVENTS_JOB_ID = "tomorrows_events_digest"

# Document store: max ids in one "id in list" lookup
STORE_MAX_IDS_PER_LOOKUP = 10

# Expo push API accepts at most 100 messages per request
PUSH_CHUNK_SIZE = 100
PUSH_SOUND = "default"

# Collections (schema-in-code; the store creates them on first write)
COLLECTION_USERS = "users"
COLLECTION_CREWS = "crews"
COLLECTION_EVENT_POLLS = "event_polls"
COLLECTION_SIGNALS = "signals"
SUBCOLLECTION_EVENTS = "events"
SUBCOLLECTION_STATUSES = "statuses"
SUBCOLLECTION_USER_STATUSES = "userStatuses"
SUBCOLLECTION_MESSAGES = "messages"
CHAT_METADATA_DOC_ID = "metadata"

# Document fields read across handlers
FIELD_STATUS = "upForGoingOutTonight"
FIELD_PUSH_TOKEN = "expoPushToken"
FIELD_PUSH_TOKENS = "expoPushTokens"
FIELD_NOTIFICATION_SETTINGS = "notificationSettings"

# Client screens used as deep-link targets
SCREEN_CREW = "Crew"
SCREEN_CREW_CHAT = "CrewChat"
SCREEN_CREW_DATE_CHAT = "CrewDateChat"
SCREEN_DM_CHAT = "DMChat"
SCREEN_POLL_RESPOND = "EventPollRespond"
SCREEN_POLL_DETAILS = "EventPollDetails"

# Display fallbacks
DEFAULT_CREW_NAME = "Your Crew"
DEFAULT_SIGNAL_CREW_NAME = "Unknown Crew"
DEFAULT_ACTOR_NAME = "Someone"
DEFAULT_SENDER_NAME = "A crew member"
DEFAULT_ACTIVITY = "meeting up"
DEFAULT_EVENT_TITLE = "Untitled event"
DEFAULT_DIGEST_EVENT_TITLE = "Untitled Event"
DEFAULT_POLL_TITLE = "Untitled Poll"


def user_path(uid: str) -> str:
    return f"{COLLECTION_USERS}/{uid}"


def crew_path(crew_id: str) -> str:
    return f"{COLLECTION_CREWS}/{crew_id}"


def poll_path(poll_id: str) -> str:
    return f"{COLLECTION_EVENT_POLLS}/{poll_id}"


def events_collection(crew_id: str) -> str:
    return f"{crew_path(crew_id)}/{SUBCOLLECTION_EVENTS}"


def user_statuses_collection(crew_id: str, date_str: str) -> str:
    """crews/{crewId}/statuses/{date}/userStatuses"""
    return f"{crew_path(crew_id)}/{SUBCOLLECTION_STATUSES}/{date_str}/{SUBCOLLECTION_USER_STATUSES}"


def chat_metadata_path(crew_id: str) -> str:
    return f"{crew_path(crew_id)}/{SUBCOLLECTION_MESSAGES}/{CHAT_METADATA_DOC_ID}"
