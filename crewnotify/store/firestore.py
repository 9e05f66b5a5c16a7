"""Document store backed by Cloud Firestore through firebase-admin."""
import logging
from typing import Any, Sequence

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from crewnotify.store.base import SUPPORTED_OPERATORS, StoredDocument, Where, check_lookup_size

logger = logging.getLogger(__name__)

# Store protocol operator -> Firestore client operator (the Python client spells array ops with "_")
FIRESTORE_OPERATORS: dict[str, str] = {op: op for op in SUPPORTED_OPERATORS}
FIRESTORE_OPERATORS["array-contains"] = "array_contains"


def init_firestore_client(credentials_path: str = "", project_id: str = ""):
    """Initialize the default firebase app once per process and return a Firestore client."""
    try:
        app = firebase_admin.get_app()
    except ValueError:
        cred = credentials.Certificate(credentials_path) if credentials_path else credentials.ApplicationDefault()
        options = {"projectId": project_id} if project_id else None
        app = firebase_admin.initialize_app(cred, options)
        logger.info("Initialized firebase app (project=%s)", project_id or "default")
    return firestore.client(app)


class FirestoreDocumentStore:
    """Thin adapter: Firestore already enforces the 10-id lookup limit on `in` queries; we check it up front."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def get(self, path: str) -> StoredDocument | None:
        snap = self._client.document(path.strip("/")).get()
        if not snap.exists:
            return None
        return StoredDocument(snap.reference.path, snap.to_dict() or {})

    def get_all(self, collection: str, ids: Sequence[str]) -> list[StoredDocument]:
        check_lookup_size(ids)
        if not ids:
            return []
        collection = collection.strip("/")
        refs = [self._client.document(f"{collection}/{doc_id}") for doc_id in ids]
        return [
            StoredDocument(snap.reference.path, snap.to_dict() or {})
            for snap in self._client.get_all(refs)
            if snap.exists
        ]

    def build_query(self, collection: str, where: Sequence[Where] = ()):
        """Firestore query for `collection` filtered by protocol where clauses. Raises ValueError on unknown operators."""
        q = self._client.collection(collection.strip("/"))
        for field, op, value in where:
            native = FIRESTORE_OPERATORS.get(op)
            if native is None:
                raise ValueError(f"Unsupported operator: {op}. Supported: {SUPPORTED_OPERATORS}")
            q = q.where(filter=FieldFilter(field, native, value))
        return q

    def query(self, collection: str, where: Sequence[Where] = ()) -> list[StoredDocument]:
        q = self.build_query(collection, where)
        return [StoredDocument(snap.reference.path, snap.to_dict() or {}) for snap in q.stream()]

    def set(self, path: str, data: dict[str, Any]) -> None:
        self._client.document(path.strip("/")).set(data)

    def delete(self, path: str) -> None:
        self._client.document(path.strip("/")).delete()
