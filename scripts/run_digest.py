#!/usr/bin/env python3
"""
Run one event digest now, outside the scheduler (backfill / manual check).
Run: python scripts/run_digest.py todays_events_digest
     python scripts/run_digest.py tomorrows_events_digest
"""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from crewnotify.notifications.context import build_context
from crewnotify.scheduler.digest_job import JOBS


def main():
    if len(sys.argv) != 2 or sys.argv[1] not in JOBS:
        print(f"Usage: {sys.argv[0]} <{'|'.join(JOBS)}>")
        return 2
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    job_id = sys.argv[1]
    sent = JOBS[job_id](build_context())
    print(f"Done. {job_id} sent={sent}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
