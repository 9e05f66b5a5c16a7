"""Protocol for document stores. SQL and Firestore backends return the same document shape."""
from typing import Any, Iterable, Iterator, Protocol, Sequence

from crewnotify.core.constants import STORE_MAX_IDS_PER_LOOKUP

# A where clause: (field, operator, value). Operators: ==, !=, <, <=, >, >=, in, array-contains
Where = tuple[str, str, Any]

SUPPORTED_OPERATORS = ("==", "!=", "<", "<=", ">", ">=", "in", "array-contains")


class StoredDocument:
    """One document read from a store. `path` is the full slash path; `data` its fields."""

    __slots__ = ("path", "data")

    def __init__(self, path: str, data: dict[str, Any] | None = None):
        self.path = path
        self.data = data or {}

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def get(self, field: str, default: Any = None) -> Any:
        return self.data.get(field, default)

    def __repr__(self) -> str:
        return f"StoredDocument({self.path!r})"


class DocumentStore(Protocol):
    """Interface for the document store consumed by triggers and jobs."""

    def get(self, path: str) -> StoredDocument | None:
        """Read one document; None when it does not exist."""
        ...

    def get_all(self, collection: str, ids: Sequence[str]) -> list[StoredDocument]:
        """
        Read documents by id from one collection. At most STORE_MAX_IDS_PER_LOOKUP ids
        (raises ValueError above that). Missing ids are skipped.
        """
        ...

    def query(self, collection: str, where: Sequence[Where] = ()) -> list[StoredDocument]:
        """All documents of a collection matching every where clause."""
        ...

    def set(self, path: str, data: dict[str, Any]) -> None:
        ...

    def delete(self, path: str) -> None:
        ...


def split_path(path: str) -> tuple[str, str]:
    """'crews/c1/events/e1' -> ('crews/c1/events', 'e1'). Document paths have an even segment count."""
    parts = [p for p in (path or "").strip("/").split("/") if p]
    if not parts or len(parts) % 2 != 0:
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(parts[:-1]), parts[-1]


def check_lookup_size(ids: Sequence[str]) -> None:
    if len(ids) > STORE_MAX_IDS_PER_LOOKUP:
        raise ValueError(
            f"get_all accepts at most {STORE_MAX_IDS_PER_LOOKUP} ids per call (got {len(ids)})"
        )


def chunked(items: Iterable[str], size: int = STORE_MAX_IDS_PER_LOOKUP) -> Iterator[list[str]]:
    batch: list[str] = []
    for item in items:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


def _compare(actual: Any, op: str, expected: Any) -> bool:
    if op == "==":
        return actual == expected
    if op == "!=":
        return actual != expected
    if op == "in":
        return actual in expected
    if op == "array-contains":
        return isinstance(actual, list) and expected in actual
    if actual is None:
        return False
    try:
        if op == "<":
            return actual < expected
        if op == "<=":
            return actual <= expected
        if op == ">":
            return actual > expected
        if op == ">=":
            return actual >= expected
    except TypeError:
        return False
    raise ValueError(f"Unsupported operator: {op}")


def matches(data: dict[str, Any], where: Sequence[Where]) -> bool:
    """In-process evaluation of where clauses (used by backends without native querying)."""
    for field, op, expected in where:
        if op not in SUPPORTED_OPERATORS:
            raise ValueError(f"Unsupported operator: {op}. Supported: {SUPPORTED_OPERATORS}")
        if field not in data:
            return False
        if not _compare(data.get(field), op, expected):
            return False
    return True
