from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import sessionmaker

from crewnotify.config import Settings
from crewnotify.core.errors import PushTransportError
from crewnotify.db.base import Base
from crewnotify.db.session import make_engine
from crewnotify.models.document import DocumentRow  # noqa: F401
from crewnotify.notifications.context import NotificationContext, set_context
from crewnotify.services.push import PushTicket, is_expo_push_token
from crewnotify.store.sql import SqlDocumentStore

# Friday 2025-03-07, 09:00 in London (GMT; BST starts 2025-03-30)
FROZEN_NOW = datetime(2025, 3, 7, 9, 0, tzinfo=timezone.utc)
TODAY = "2025-03-07"
TOMORROW = "2025-03-08"


def token(name: str) -> str:
    return f"ExponentPushToken[{name}]"


class FakeTransport:
    """Records every message; `fail_for` makes sends containing those tokens raise."""

    def __init__(self):
        self.sent = []
        self.calls = 0
        self.fail_all = False
        self.fail_for: set[str] = set()

    def is_valid_token(self, tok):
        return is_expo_push_token(tok)

    def send(self, messages):
        self.calls += 1
        if self.fail_all or any(m.to in self.fail_for for m in messages):
            raise PushTransportError("push service unavailable")
        self.sent.extend(messages)
        return [PushTicket("ok", id=str(i)) for i, _ in enumerate(messages)]

    @property
    def recipients(self) -> list[str]:
        return [m.to for m in self.sent]


class SpyStore:
    """Wraps a store and records get_all batch sizes."""

    def __init__(self, inner):
        self._inner = inner
        self.get_all_sizes: list[int] = []

    def get(self, path):
        return self._inner.get(path)

    def get_all(self, collection, ids):
        self.get_all_sizes.append(len(ids))
        return self._inner.get_all(collection, ids)

    def query(self, collection, where=()):
        return self._inner.query(collection, where)

    def set(self, path, data):
        self._inner.set(path, data)

    def delete(self, path):
        self._inner.delete(path)


@pytest.fixture()
def settings():
    # One fan-out worker: the in-memory SQLite store shares a single connection
    return Settings(_env_file=None, database_url="sqlite://", scheduler_enabled=False, fanout_workers=1)


@pytest.fixture()
def engine():
    eng = make_engine("sqlite://")
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture()
def store(engine):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return SpyStore(SqlDocumentStore(factory))


@pytest.fixture()
def transport():
    return FakeTransport()


@pytest.fixture()
def clock():
    holder = {"now": FROZEN_NOW}

    def now():
        return holder["now"]

    now.set = lambda dt: holder.__setitem__("now", dt)
    return now


@pytest.fixture()
def ctx(store, transport, settings, clock):
    context = NotificationContext(store, transport, settings=settings, clock=clock)
    set_context(context)
    yield context
    set_context(None)


@pytest.fixture()
def seed(store):
    def _seed(path: str, data: dict):
        store.set(path, data)
        return data

    return _seed


@pytest.fixture()
def add_user(seed):
    def _add_user(uid: str, name: str | None = None, **fields):
        data = {"uid": uid, "expoPushToken": token(uid)}
        if name is not None:
            data["displayName"] = name
        data.update(fields)
        return seed(f"users/{uid}", data)

    return _add_user


@pytest.fixture()
def crew(seed, add_user):
    """Crew c1 'Friday Club' with alice, bob, carol, dave (all with one token)."""
    for uid, name in (("alice", "Alice"), ("bob", "Bob"), ("carol", "Carol"), ("dave", "Dave")):
        add_user(uid, name)
    return seed(
        "crews/c1",
        {"name": "Friday Club", "activity": "Drinks", "memberIds": ["alice", "bob", "carol", "dave"], "ownerId": "alice"},
    )
