"""Crew lookups shared by trigger handlers and callables."""
import logging
from typing import Any, Iterable

from crewnotify.notifications.context import NotificationContext
from crewnotify.store.base import StoredDocument

logger = logging.getLogger(__name__)


def member_ids(crew: StoredDocument | dict[str, Any] | None) -> list[str]:
    data = crew.data if isinstance(crew, StoredDocument) else (crew or {})
    ids = data.get("memberIds") or []
    return [m for m in ids if isinstance(m, str) and m]


def excluding(ids: Iterable[str], *excluded: str | None) -> list[str]:
    drop = {e for e in excluded if e}
    return [i for i in ids if i not in drop]


def load_crew(ctx: NotificationContext, crew_id: str | None, *, require_name: bool = False) -> StoredDocument | None:
    """Crew document with a member list; None (logged) when missing or incomplete."""
    if not crew_id:
        logger.warning("No crewId on document; skipping")
        return None
    crew = ctx.crew(crew_id)
    if crew is None:
        logger.warning("Crew %s not found", crew_id)
        return None
    if not crew.get("memberIds") or (require_name and not crew.get("name")):
        logger.warning("Crew %s is missing name or memberIds", crew_id)
        return None
    return crew
