from crewnotify.db.base import Base
from crewnotify.db.session import get_engine, get_session_factory, make_engine
from crewnotify.db.tables import ALL_TABLE_NAMES

__all__ = ["get_engine", "get_session_factory", "make_engine", "Base", "ALL_TABLE_NAMES"]
