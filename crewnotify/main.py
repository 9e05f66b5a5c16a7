"""
FastAPI app entrypoint.

Document-change triggers, callable RPCs and the two daily digest jobs (APScheduler).
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from dotenv import load_dotenv
from fastapi import FastAPI

# Load .env from the project root before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from crewnotify.api.routes import callables, jobs, triggers
from crewnotify.config import settings
from crewnotify.core.constants import TODAYS_EVENTS_JOB_ID, TOMORROWS_EVENTS_JOB_ID
from crewnotify.core.errors import CallableError, callable_error_handler
from crewnotify.scheduler.digest_job import run_todays_events_job, run_tomorrows_events_job

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Scheduler: daily digests, cron evaluated in the default timezone
_scheduler = BackgroundScheduler(timezone=settings.default_timezone)


def schedule_digest_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        run_todays_events_job,
        CronTrigger.from_crontab(settings.todays_events_cron, timezone=settings.default_timezone),
        id=TODAYS_EVENTS_JOB_ID,
        replace_existing=True,
        misfire_grace_time=15 * 60,
    )
    scheduler.add_job(
        run_tomorrows_events_job,
        CronTrigger.from_crontab(settings.tomorrows_events_cron, timezone=settings.default_timezone),
        id=TOMORROWS_EVENTS_JOB_ID,
        replace_existing=True,
        misfire_grace_time=15 * 60,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.scheduler_enabled:
        schedule_digest_jobs(_scheduler)
        _scheduler.start()
        logger.info(
            "Scheduler started: %s (%s), %s (%s) in %s",
            TODAYS_EVENTS_JOB_ID,
            settings.todays_events_cron,
            TOMORROWS_EVENTS_JOB_ID,
            settings.tomorrows_events_cron,
            settings.default_timezone,
        )
    else:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")
    app.state.scheduler = _scheduler
    yield
    if _scheduler.running:
        _scheduler.shutdown(wait=False)


app = FastAPI(title="Crew Notify", version="0.1.0", lifespan=lifespan)

app.add_exception_handler(CallableError, callable_error_handler)

app.include_router(triggers.router, tags=["triggers"])
app.include_router(callables.router, prefix="/callable", tags=["callables"])
app.include_router(jobs.router, tags=["jobs"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Crew Notify API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
