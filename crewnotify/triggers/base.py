"""Document-change triggers: the change envelope and the (pattern, kinds, handler) binding."""
import re
from typing import Any, Callable

from crewnotify.notifications import transitions
from crewnotify.notifications.context import NotificationContext

WRITTEN = "written"
CREATED = transitions.CREATED
UPDATED = transitions.UPDATED
DELETED = transitions.DELETED

TRIGGER_KINDS = (WRITTEN, CREATED, UPDATED, DELETED)


class DocumentChange:
    """
    One write to one document. `before` / `after` are the document data on each side
    (None = did not exist); `params` are the wildcards captured from the path.
    """

    __slots__ = ("path", "params", "before", "after")

    def __init__(
        self,
        path: str,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ):
        self.path = path
        self.before = before
        self.after = after
        self.params = params or {}

    @property
    def kind(self) -> str | None:
        return transitions.write_kind(self.before, self.after)

    @property
    def data(self) -> dict[str, Any]:
        """Current data, or the deleted document's last data."""
        return self.after if self.after is not None else (self.before or {})

    def __repr__(self) -> str:
        return f"DocumentChange({self.path!r}, kind={self.kind})"


Handler = Callable[[NotificationContext, DocumentChange], int]

_WILDCARD_RE = re.compile(r"\{(\w+)\}")


def compile_pattern(pattern: str) -> re.Pattern:
    """'crews/{crewId}/events/{eventId}' -> regex with one named group per wildcard segment."""
    parts = []
    for segment in pattern.strip("/").split("/"):
        m = _WILDCARD_RE.fullmatch(segment)
        parts.append(f"(?P<{m.group(1)}>[^/]+)" if m else re.escape(segment))
    return re.compile("^" + "/".join(parts) + "$")


class Trigger:
    """A handler bound to a document path pattern and the write kinds it reacts to."""

    def __init__(self, name: str, pattern: str, kind: str, handler: Handler):
        if kind not in TRIGGER_KINDS:
            raise ValueError(f"Unknown trigger kind: {kind}. Expected one of {TRIGGER_KINDS}")
        self.name = name
        self.pattern = pattern
        self.kind = kind
        self.handler = handler
        self._regex = compile_pattern(pattern)

    def match_path(self, path: str) -> dict[str, str] | None:
        m = self._regex.match((path or "").strip("/"))
        return m.groupdict() if m else None

    def accepts(self, change_kind: str | None) -> bool:
        if change_kind is None:
            return False
        return self.kind == WRITTEN or self.kind == change_kind

    def __call__(self, ctx: NotificationContext, change: DocumentChange) -> int:
        return self.handler(ctx, change)

    def __repr__(self) -> str:
        return f"Trigger({self.name!r}, {self.pattern!r}, {self.kind})"
