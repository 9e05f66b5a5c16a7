"""
Callable RPCs used by the mobile app.

Caller identity comes from the X-Caller-Id header (set by the auth gateway in front
of this service); a missing header is `unauthenticated`. Errors use the
{"error": {"status", "message"}} body from core/errors.py.
"""
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Header

from crewnotify.callables import poke_crew, remind_poll_non_responders
from crewnotify.notifications.context import NotificationContext, get_context

router = APIRouter()
logger = logging.getLogger(__name__)


def _caller_id(x_caller_id: str | None = Header(None, alias="X-Caller-Id")) -> str | None:
    return (x_caller_id or "").strip() or None


def _payload(body: dict[str, Any]) -> dict[str, Any]:
    # Accept both {"data": {...}} (callable SDK envelope) and the bare arguments
    data = body.get("data")
    return data if isinstance(data, dict) else body


@router.post("/pokeCrew")
def poke_crew_route(
    body: dict[str, Any] | None = Body(default=None),
    caller_id: str | None = Depends(_caller_id),
    ctx: NotificationContext = Depends(get_context),
) -> dict[str, Any]:
    return poke_crew(ctx, caller_id, _payload(body or {}))


@router.post("/remindPollNonResponders")
def remind_poll_non_responders_route(
    body: dict[str, Any] | None = Body(default=None),
    caller_id: str | None = Depends(_caller_id),
    ctx: NotificationContext = Depends(get_context),
) -> dict[str, Any]:
    return remind_poll_non_responders(ctx, caller_id, _payload(body or {}))
