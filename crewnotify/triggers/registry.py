"""
Trigger registry: trigger name -> Trigger. Add new handlers in _init_registry.

`dispatch` runs every trigger whose pattern and kind match a change. Triggers are
independent: one failing does not stop the others; failures are reported back so
the HTTP layer can ask the platform to retry.
"""
import logging
from typing import Any

from crewnotify.notifications.context import NotificationContext
from crewnotify.triggers.base import DocumentChange, Handler, Trigger

logger = logging.getLogger(__name__)

_triggers: dict[str, Trigger] = {}


def register(name: str, pattern: str, kind: str, handler: Handler) -> Trigger:
    """Register a handler for writes of `kind` to documents matching `pattern`."""
    trigger = Trigger(name, pattern, kind, handler)
    _triggers[name] = trigger
    logger.debug("Registered trigger: %s on %s (%s)", name, pattern, kind)
    return trigger


def get_trigger(name: str) -> Trigger:
    """Get trigger by name. Raises KeyError if unknown."""
    if name not in _triggers:
        raise KeyError(f"Unknown trigger: {name}. Available: {list(_triggers.keys())}")
    return _triggers[name]


def list_triggers() -> list[str]:
    return list(_triggers.keys())


def match_triggers(path: str, kind: str | None) -> list[tuple[Trigger, dict[str, str]]]:
    """Triggers whose pattern matches `path` and that react to `kind`, with captured params."""
    out = []
    for trigger in _triggers.values():
        params = trigger.match_path(path)
        if params is not None and trigger.accepts(kind):
            out.append((trigger, params))
    return out


class DispatchResult:
    """Messages sent per trigger, plus the names of triggers that raised."""

    def __init__(self, path: str):
        self.path = path
        self.results: dict[str, int] = {}
        self.failed: dict[str, str] = {}

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def sent(self) -> int:
        return sum(self.results.values())

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "results": self.results, "failed": self.failed}


def run_trigger(
    ctx: NotificationContext,
    name: str,
    *,
    params: dict[str, str] | None = None,
    before: dict[str, Any] | None = None,
    after: dict[str, Any] | None = None,
    path: str = "",
) -> int:
    """Run one trigger directly. Exceptions propagate."""
    trigger = get_trigger(name)
    change = DocumentChange(path or trigger.pattern, before=before, after=after, params=params)
    if not trigger.accepts(change.kind):
        logger.info("Trigger %s ignores %s writes", name, change.kind)
        return 0
    return trigger(ctx, change)


def dispatch(
    ctx: NotificationContext,
    path: str,
    before: dict[str, Any] | None,
    after: dict[str, Any] | None,
) -> DispatchResult:
    """Run every trigger matching this document write."""
    result = DispatchResult(path)
    kind = DocumentChange(path, before, after).kind
    matched = match_triggers(path, kind)
    if not matched:
        logger.info("No trigger for %s write to %s", kind, path)
        return result
    for trigger, params in matched:
        change = DocumentChange(path, before=before, after=after, params=params)
        try:
            result.results[trigger.name] = trigger(ctx, change)
        except Exception as e:
            logger.exception("Trigger %s failed for %s", trigger.name, path)
            result.failed[trigger.name] = str(e)
    return result


def _init_registry() -> None:
    from crewnotify.triggers import crews, events, messages, polls, signals, statuses, users

    register("event_written", "crews/{crewId}/events/{eventId}", "written", events.on_event_written)
    register(
        "status_written",
        "crews/{crewId}/statuses/{date}/userStatuses/{userId}",
        "written",
        statuses.on_status_written,
    )
    register("poll_created", "event_polls/{pollId}", "created", polls.on_poll_created)
    register("poll_finalized", "event_polls/{pollId}", "updated", polls.on_poll_finalized)
    register("poll_all_responded", "event_polls/{pollId}", "updated", polls.on_poll_all_responded)
    register("poll_response", "event_polls/{pollId}", "updated", polls.on_poll_response)
    register("poll_edited", "event_polls/{pollId}", "updated", polls.on_poll_edited)
    register("poll_deleted", "event_polls/{pollId}", "deleted", polls.on_poll_deleted)
    register("crew_activity_updated", "crews/{crewId}", "updated", crews.on_crew_activity_updated)
    register("crew_name_updated", "crews/{crewId}", "updated", crews.on_crew_name_updated)
    register("crew_photo_updated", "crews/{crewId}", "updated", crews.on_crew_photo_updated)
    register("crew_message_created", "crews/{crewId}/messages/{messageId}", "created", messages.on_crew_message_created)
    register("contact_joined", "users/{uid}", "updated", users.on_contact_joined)
    register("signal_accepted", "signals/{signalId}", "updated", signals.on_signal_accepted)


# Register built-in triggers on first import
_init_registry()
