"""
Document stores: SQL (documents table) or Firestore. Handlers only see the DocumentStore protocol.
"""
from crewnotify.config import Settings
from crewnotify.store.base import DocumentStore, StoredDocument, Where, chunked, matches, split_path


def get_store(settings: Settings) -> DocumentStore:
    """Build the configured backend. Imports are local so the unused backend's driver is never loaded."""
    if settings.store_backend == "firestore":
        from crewnotify.store.firestore import FirestoreDocumentStore, init_firestore_client

        client = init_firestore_client(settings.firebase_credentials_path, settings.firebase_project_id)
        return FirestoreDocumentStore(client)

    from crewnotify.db.session import get_session_factory
    from crewnotify.store.sql import SqlDocumentStore

    return SqlDocumentStore(get_session_factory())


__all__ = [
    "DocumentStore",
    "StoredDocument",
    "Where",
    "chunked",
    "get_store",
    "matches",
    "split_path",
]
