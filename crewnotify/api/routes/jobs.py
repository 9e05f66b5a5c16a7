"""Run a scheduled digest job on demand (ops / backfill)."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from crewnotify.notifications.context import NotificationContext, get_context
from crewnotify.scheduler.digest_job import JOBS

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/jobs")
def list_jobs() -> dict[str, Any]:
    return {"jobs": list(JOBS.keys())}


@router.post("/jobs/{job_id}/run")
def run_job(job_id: str, ctx: NotificationContext = Depends(get_context)) -> dict[str, Any]:
    runner = JOBS.get(job_id)
    if runner is None:
        raise HTTPException(status_code=404, detail=f"Unknown job: {job_id}. Available: {list(JOBS.keys())}")
    logger.info("Manual run of %s", job_id)
    return {"job_id": job_id, "sent": runner(ctx)}
