"""Document store over SQLAlchemy: a single `documents` table keyed by path."""
import logging
from typing import Any, Sequence

from sqlalchemy.orm import Session, sessionmaker

from crewnotify.models.document import DocumentRow
from crewnotify.store.base import StoredDocument, Where, check_lookup_size, matches, split_path

logger = logging.getLogger(__name__)


class SqlDocumentStore:
    """
    Each call opens and closes its own session, so one store instance is safe to share
    across fan-out threads. Where clauses are evaluated in-process after loading the
    collection (collections read by queries are small: crews, one crew's events, users
    matched by contact hash).
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def get(self, path: str) -> StoredDocument | None:
        db = self._session()
        try:
            row = db.get(DocumentRow, path.strip("/"))
            if row is None:
                return None
            return StoredDocument(row.path, dict(row.data or {}))
        finally:
            db.close()

    def get_all(self, collection: str, ids: Sequence[str]) -> list[StoredDocument]:
        check_lookup_size(ids)
        if not ids:
            return []
        collection = collection.strip("/")
        db = self._session()
        try:
            rows = (
                db.query(DocumentRow)
                .filter(DocumentRow.collection == collection, DocumentRow.doc_id.in_(list(ids)))
                .all()
            )
            return [StoredDocument(r.path, dict(r.data or {})) for r in rows]
        finally:
            db.close()

    def query(self, collection: str, where: Sequence[Where] = ()) -> list[StoredDocument]:
        collection = collection.strip("/")
        db = self._session()
        try:
            rows = (
                db.query(DocumentRow)
                .filter(DocumentRow.collection == collection)
                .order_by(DocumentRow.doc_id.asc())
                .all()
            )
            return [
                StoredDocument(r.path, dict(r.data or {}))
                for r in rows
                if matches(r.data or {}, where)
            ]
        finally:
            db.close()

    def set(self, path: str, data: dict[str, Any]) -> None:
        collection, doc_id = split_path(path)
        path = f"{collection}/{doc_id}"
        db = self._session()
        try:
            row = db.get(DocumentRow, path)
            if row is None:
                db.add(DocumentRow(path=path, collection=collection, doc_id=doc_id, data=dict(data)))
            else:
                row.data = dict(data)  # reassign so the JSON column is flagged dirty
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete(self, path: str) -> None:
        db = self._session()
        try:
            row = db.get(DocumentRow, path.strip("/"))
            if row is not None:
                db.delete(row)
                db.commit()
        finally:
            db.close()
