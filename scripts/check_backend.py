#!/usr/bin/env python3
"""
Quick checks so the service can start. Run from the repo root:
  python scripts/check_backend.py
"""
import os
import sys
from pathlib import Path

root_dir = Path(__file__).resolve().parent.parent
os.chdir(root_dir)
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))


def main():
    errors = []

    # 1) .env
    env_file = root_dir / ".env"
    if not env_file.exists():
        errors.append(".env missing. Copy from .env.example and set DATABASE_URL / STORE_BACKEND, etc.")
    else:
        print("OK  .env exists")

    # 2) Settings parse (bad windows, unknown backend)
    try:
        from crewnotify.config import settings
        print(f"OK  Settings (store_backend={settings.store_backend}, timezone={settings.default_timezone})")
    except Exception as e:
        errors.append(f"Settings: {e}")
        print("FAIL Settings:", e)
        return 1

    # 3) Store reachable
    try:
        if settings.store_backend == "sql":
            from sqlalchemy import text
            from crewnotify.db.session import get_engine
            with get_engine().connect() as conn:
                conn.execute(text("SELECT 1"))
            print("OK  Database connection (DATABASE_URL)")
        else:
            from crewnotify.store import get_store
            get_store(settings).get("users/__healthcheck__")
            print("OK  Firestore reachable")
    except Exception as e:
        errors.append(f"Store: {e}")
        print("FAIL Store:", e)

    # 4) App import (catches missing deps, bad imports)
    try:
        from crewnotify.main import app  # noqa: F401
        from crewnotify.triggers import list_triggers
        print(f"OK  App import ({len(list_triggers())} triggers registered)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        return 1

    print("\nAll checks passed. Start with: uvicorn crewnotify.main:app --host 0.0.0.0 --port 8000")
    return 0


if __name__ == "__main__":
    sys.exit(main())
