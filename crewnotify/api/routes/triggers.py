"""
Document-change delivery: the store's change feed (or a relay) posts every write here.

POST /triggers/documents runs all triggers matching the document path and write
kind; any failed trigger turns the response into a 502 so the sender retries.
A retry re-runs every matching trigger, including the ones that succeeded.
Senders that need per-trigger retries post to /triggers/{trigger_name} instead.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from crewnotify.notifications.context import NotificationContext, get_context
from crewnotify.triggers import registry

router = APIRouter()
logger = logging.getLogger(__name__)


class DocumentWriteBody(BaseModel):
    path: str = Field(..., min_length=1, description="Document path, e.g. crews/c1/events/e1")
    before: dict[str, Any] | None = Field(default=None, description="Data before the write; null if created")
    after: dict[str, Any] | None = Field(default=None, description="Data after the write; null if deleted")


class TriggerRunBody(BaseModel):
    params: dict[str, str] = Field(default_factory=dict, description="Path wildcards, e.g. {crewId, eventId}")
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None


@router.get("/triggers")
def list_triggers() -> dict[str, Any]:
    return {
        "triggers": [
            {"name": t.name, "pattern": t.pattern, "kind": t.kind}
            for t in (registry.get_trigger(n) for n in registry.list_triggers())
        ]
    }


@router.post("/triggers/documents")
def document_written(body: DocumentWriteBody, ctx: NotificationContext = Depends(get_context)):
    result = registry.dispatch(ctx, body.path.strip("/"), body.before, body.after)
    if not result.ok:
        return JSONResponse(status_code=502, content=result.to_dict())
    return result.to_dict()


@router.post("/triggers/{trigger_name}")
def run_trigger(trigger_name: str, body: TriggerRunBody, ctx: NotificationContext = Depends(get_context)) -> dict[str, Any]:
    """Run one trigger with explicit path params. Failures return 502."""
    try:
        registry.get_trigger(trigger_name)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    try:
        sent = registry.run_trigger(ctx, trigger_name, params=body.params, before=body.before, after=body.after)
    except Exception as e:
        logger.exception("Trigger %s failed", trigger_name)
        raise HTTPException(status_code=502, detail=f"Trigger {trigger_name} failed: {e}") from e
    return {"trigger": trigger_name, "sent": sent}
