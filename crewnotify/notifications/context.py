"""
Dependencies for trigger handlers, callables and jobs (injected at call time).
"""
import logging
from datetime import date, datetime, timezone
from typing import Callable

from crewnotify.config import Settings, settings as default_settings
from crewnotify.core.constants import crew_path, user_path
from crewnotify.core.dates import local_today
from crewnotify.core.timezones import CountryTimezoneTable, TimezoneResolver
from crewnotify.notifications.tokens import PushTokenCollector
from crewnotify.services.push import ExpoPushClient, PushTransport
from crewnotify.store.base import DocumentStore, StoredDocument

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationContext:
    """Store, push transport and token collector shared by every handler; plus clock and timezone lookup."""

    def __init__(
        self,
        store: DocumentStore,
        transport: PushTransport,
        *,
        settings: Settings | None = None,
        timezones: TimezoneResolver | None = None,
        clock: Callable[[], datetime] | None = None,
        collector: PushTokenCollector | None = None,
    ):
        self.store = store
        self.transport = transport
        self.settings = settings or default_settings
        self.timezones = timezones or CountryTimezoneTable(default=self.settings.default_timezone)
        self.clock = clock or _utcnow
        self.collector = collector or PushTokenCollector(
            store, transport, max_workers=self.settings.fanout_workers
        )

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        """Calendar day in the service's default timezone."""
        return local_today(self.now(), self.settings.default_timezone)

    def crew(self, crew_id: str) -> StoredDocument | None:
        return self.store.get(crew_path(crew_id)) if crew_id else None

    def user(self, uid: str) -> StoredDocument | None:
        return self.store.get(user_path(uid)) if uid else None

    def display_name(self, uid: str | None, default: str) -> str:
        """Display name of a user, or `default` when the user or the name is missing."""
        if not uid:
            return default
        doc = self.store.get(user_path(uid))
        return (doc.get("displayName") if doc else None) or default


_context: NotificationContext | None = None


def build_context(settings: Settings | None = None) -> NotificationContext:
    """Process-wide context from settings: configured store backend and Expo push client."""
    from crewnotify.store import get_store

    s = settings or default_settings
    transport = ExpoPushClient(
        url=s.expo_push_url,
        access_token=s.expo_access_token,
        timeout=s.push_timeout_seconds,
    )
    logger.info("Notification context: store=%s push=%s", s.store_backend, s.expo_push_url)
    return NotificationContext(get_store(s), transport, settings=s)


def get_context() -> NotificationContext:
    """Lazily built shared context (FastAPI dependency and scheduler jobs)."""
    global _context
    if _context is None:
        _context = build_context()
    return _context


def set_context(ctx: NotificationContext | None) -> None:
    """Replace the shared context (tests, scripts)."""
    global _context
    _context = ctx
