"""
Push-token collection for an audience of user ids.

User documents are read in batches of at most STORE_MAX_IDS_PER_LOOKUP ids (the
store's "id in list" limit); batches run in parallel. Each user passes the category
filter before their tokens are read; tokens come from both the legacy scalar field
and the array field, are validated by the transport, and are de-duplicated across
the whole result.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable

from crewnotify.core.constants import (
    COLLECTION_USERS,
    FIELD_NOTIFICATION_SETTINGS,
    FIELD_PUSH_TOKEN,
    FIELD_PUSH_TOKENS,
    STORE_MAX_IDS_PER_LOOKUP,
)
from crewnotify.notifications.categories import should_send_notification
from crewnotify.services.push import PushTransport
from crewnotify.store.base import DocumentStore, StoredDocument, chunked

logger = logging.getLogger(__name__)


def _unique_ids(user_ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out = []
    for uid in user_ids:
        if uid and uid not in seen:
            seen.add(uid)
            out.append(uid)
    return out


class PushTokenCollector:
    def __init__(
        self,
        store: DocumentStore,
        transport: PushTransport,
        *,
        batch_size: int = STORE_MAX_IDS_PER_LOOKUP,
        max_workers: int = 4,
    ) -> None:
        if not 0 < batch_size <= STORE_MAX_IDS_PER_LOOKUP:
            raise ValueError(f"batch_size must be 1..{STORE_MAX_IDS_PER_LOOKUP}")
        self._store = store
        self._transport = transport
        self._batch_size = batch_size
        self._max_workers = max(1, max_workers)

    def fetch_docs(self, collection: str, ids: Iterable[str]) -> dict[str, StoredDocument]:
        """Batched id lookup in any collection; missing documents are absent from the result."""
        batches = list(chunked(_unique_ids(ids), self._batch_size))
        if not batches:
            return {}
        if len(batches) == 1:
            results = [self._store.get_all(collection, batches[0])]
        else:
            workers = min(self._max_workers, len(batches))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="token_batch") as executor:
                results = list(executor.map(lambda b: self._store.get_all(collection, b), batches))
        return {doc.id: doc for docs in results for doc in docs}

    def fetch_users(self, user_ids: Iterable[str]) -> dict[str, StoredDocument]:
        return self.fetch_docs(COLLECTION_USERS, user_ids)

    def tokens_for_user(self, user: StoredDocument | dict[str, Any], notification_type: str) -> list[str]:
        """Valid, de-duplicated tokens of one user; [] when the user disabled this category."""
        data = user.data if isinstance(user, StoredDocument) else (user or {})
        if not should_send_notification(data.get(FIELD_NOTIFICATION_SETTINGS), notification_type):
            uid = user.id if isinstance(user, StoredDocument) else data.get("uid")
            logger.info("User %s has disabled %s notifications. Skipping.", uid, notification_type)
            return []
        candidates: list[Any] = [data.get(FIELD_PUSH_TOKEN)]
        array = data.get(FIELD_PUSH_TOKENS)
        if isinstance(array, list):
            candidates.extend(array)
        tokens: list[str] = []
        for tok in candidates:
            if tok and tok not in tokens and self._transport.is_valid_token(tok):
                tokens.append(tok)
        return tokens

    def collect_from_docs(self, docs: Iterable[StoredDocument], notification_type: str) -> list[str]:
        tokens: list[str] = []
        seen: set[str] = set()
        for doc in docs:
            for tok in self.tokens_for_user(doc, notification_type):
                if tok not in seen:
                    seen.add(tok)
                    tokens.append(tok)
        return tokens

    def collect(self, user_ids: Iterable[str], notification_type: str) -> list[str]:
        """Tokens for every user in the audience that accepts this notification type."""
        ids = _unique_ids(user_ids)
        if not ids:
            return []
        users = self.fetch_users(ids)
        # Keep audience order for stable message order
        return self.collect_from_docs((users[uid] for uid in ids if uid in users), notification_type)
