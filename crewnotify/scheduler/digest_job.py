"""
Daily event digests: remind crew members about events happening today (morning run)
or tomorrow (evening run).

The target day is computed in the service's default timezone. Each member is gated
on their own local hour at the job's start instant (country -> timezone lookup), so
one run only reaches members whose local time is inside the configured window.
Members marked unavailable for the day are skipped; members marked available get a
link to the day's chat. Sends are isolated per member: one failure is logged and the
run continues.
"""
import logging
import time
from datetime import timedelta
from typing import NamedTuple

from crewnotify.config import Settings
from crewnotify.core.constants import (
    COLLECTION_CREWS,
    TODAYS_EVENTS_JOB_ID,
    TOMORROWS_EVENTS_JOB_ID,
    events_collection,
    user_statuses_collection,
)
from crewnotify.core.dates import local_today
from crewnotify.core.timezones import local_hour
from crewnotify.notifications.categories import EVENT_REMINDER
from crewnotify.notifications.compose import DIGEST_TODAY, DIGEST_TOMORROW, compose_event_digest, crew_name
from crewnotify.notifications.context import NotificationContext, get_context
from crewnotify.notifications.notifier import deliver_isolated
from crewnotify.notifications.transitions import status_value
from crewnotify.triggers.audience import member_ids

logger = logging.getLogger(__name__)


class DigestPlan(NamedTuple):
    job_id: str
    which: str  # DIGEST_TODAY | DIGEST_TOMORROW
    day_offset: int
    window_start: int  # local hour, inclusive
    window_end: int  # local hour, inclusive


def todays_events_plan(settings: Settings) -> DigestPlan:
    return DigestPlan(
        TODAYS_EVENTS_JOB_ID,
        DIGEST_TODAY,
        0,
        settings.todays_events_window_start,
        settings.todays_events_window_end,
    )


def tomorrows_events_plan(settings: Settings) -> DigestPlan:
    return DigestPlan(
        TOMORROWS_EVENTS_JOB_ID,
        DIGEST_TOMORROW,
        1,
        settings.tomorrows_events_window_start,
        settings.tomorrows_events_window_end,
    )


def run_event_digest(ctx: NotificationContext, plan: DigestPlan) -> int:
    """One digest run. Returns the number of messages sent."""
    t0 = time.monotonic()
    started = ctx.now()
    day = (local_today(started, ctx.settings.default_timezone) + timedelta(days=plan.day_offset)).isoformat()

    sent = 0
    crews_seen = events_seen = members_checked = 0
    for crew in ctx.store.query(COLLECTION_CREWS):
        members = member_ids(crew)
        if not members:
            continue
        crews_seen += 1
        events = ctx.store.query(
            events_collection(crew.id),
            [("startDate", "<=", day), ("endDate", ">=", day)],
        )
        if not events:
            continue
        statuses = ctx.collector.fetch_docs(user_statuses_collection(crew.id, day), members)
        users = ctx.collector.fetch_users(members)
        title = crew_name(crew.data)

        for event in events:
            events_seen += 1
            for uid in members:
                members_checked += 1
                status = status_value(statuses[uid].data) if uid in statuses else None
                if status is False:
                    continue
                user = users.get(uid)
                if user is None:
                    logger.warning("User %s not found (crew %s); skipping", uid, crew.id)
                    continue
                hour = local_hour(started, user.get("country"), ctx.timezones)
                if not plan.window_start <= hour <= plan.window_end:
                    continue
                tokens = ctx.collector.tokens_for_user(user, EVENT_REMINDER)
                if not tokens:
                    continue
                content = compose_event_digest(
                    plan.which,
                    available=status is True,
                    crew_title=title,
                    crew_id=crew.id,
                    event_id=event.id,
                    event=event.data,
                    day=day,
                )
                sent += deliver_isolated(ctx, tokens, content, label=f"user {uid} event {event.id}")

    logger.info(
        "%s for %s: sent=%s crews=%s events=%s member_checks=%s in %.1fs",
        plan.job_id,
        day,
        sent,
        crews_seen,
        events_seen,
        members_checked,
        time.monotonic() - t0,
    )
    return sent


def _run_job(plan: DigestPlan, ctx: NotificationContext) -> int:
    try:
        return run_event_digest(ctx, plan)
    except Exception:
        logger.exception("Digest job %s failed", plan.job_id)
        return 0


def run_todays_events_job(ctx: NotificationContext | None = None) -> int:
    ctx = ctx or get_context()
    return _run_job(todays_events_plan(ctx.settings), ctx)


def run_tomorrows_events_job(ctx: NotificationContext | None = None) -> int:
    ctx = ctx or get_context()
    return _run_job(tomorrows_events_plan(ctx.settings), ctx)


# job_id -> runner (scheduler registration and POST /jobs/{job_id}/run)
JOBS = {
    TODAYS_EVENTS_JOB_ID: run_todays_events_job,
    TOMORROWS_EVENTS_JOB_ID: run_tomorrows_events_job,
}
