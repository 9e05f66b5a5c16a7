"""
Send push notifications via the Expo push service.
Optional EXPO_ACCESS_TOKEN in env (required only when push security is enabled for the Expo project).

Messages are posted in chunks of PUSH_CHUNK_SIZE. Every chunk is attempted; if any chunk
fails at the HTTP level, PushTransportError is raised after the remaining chunks were sent,
so the caller can mark the invocation failed.
"""
import logging
import re
from typing import Any, Protocol, Sequence

import httpx

from crewnotify.core.constants import PUSH_CHUNK_SIZE, PUSH_SOUND
from crewnotify.core.errors import PushTransportError

logger = logging.getLogger(__name__)

# ExponentPushToken[xxx] / ExpoPushToken[xxx], or a bare UUID (legacy device ids)
_EXPO_TOKEN_RE = re.compile(r"^Expo(nent)?PushToken\[.+\]$")
_UUID_TOKEN_RE = re.compile(r"^[a-z\d]{8}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{12}$", re.IGNORECASE)


def is_expo_push_token(token: Any) -> bool:
    if not isinstance(token, str) or not token:
        return False
    return bool(_EXPO_TOKEN_RE.match(token) or _UUID_TOKEN_RE.match(token))


class PushMessage:
    """One notification addressed to one device token."""

    __slots__ = ("to", "title", "body", "data", "sound", "subtitle")

    def __init__(
        self,
        *,
        to: str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
        sound: str = PUSH_SOUND,
        subtitle: str | None = None,
    ):
        self.to = to
        self.title = title
        self.body = body
        self.data = data or {}
        self.sound = sound
        self.subtitle = subtitle

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "to": self.to,
            "sound": self.sound,
            "title": self.title,
            "body": self.body,
            "data": self.data,
        }
        if self.subtitle:
            payload["subtitle"] = self.subtitle
        return payload

    def __repr__(self) -> str:
        return f"PushMessage(to={self.to[:24]!r}, title={self.title!r})"


class PushTicket:
    """Per-message receipt returned by the push service."""

    __slots__ = ("status", "id", "message", "details")

    def __init__(self, status: str, id: str | None = None, message: str | None = None, details: dict | None = None):
        self.status = status
        self.id = id
        self.message = message
        self.details = details or {}

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def from_response(cls, raw: dict[str, Any]) -> "PushTicket":
        return cls(
            status=raw.get("status") or "error",
            id=raw.get("id"),
            message=raw.get("message"),
            details=raw.get("details") or {},
        )


class PushTransport(Protocol):
    """Interface for the push service. Handlers never talk HTTP directly."""

    def is_valid_token(self, token: Any) -> bool:
        ...

    def send(self, messages: Sequence[PushMessage]) -> list[PushTicket]:
        """Deliver messages; one ticket per message. Raises PushTransportError on transport failure."""
        ...


class ExpoPushClient:
    """Expo push API client."""

    def __init__(
        self,
        *,
        url: str = "https://exp.host/--/api/v2/push/send",
        access_token: str = "",
        timeout: float = 10.0,
        chunk_size: int = PUSH_CHUNK_SIZE,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url
        self._access_token = (access_token or "").strip()
        self._timeout = timeout
        self._chunk_size = chunk_size
        self._http_transport = http_transport  # httpx.MockTransport in tests

    def is_valid_token(self, token: Any) -> bool:
        return is_expo_push_token(token)

    def _headers(self) -> dict[str, str]:
        h = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self._access_token:
            h["Authorization"] = f"Bearer {self._access_token}"
        return h

    def _post_chunk(self, client: httpx.Client, chunk: Sequence[PushMessage]) -> list[PushTicket]:
        resp = client.post(self._url, json=[m.to_payload() for m in chunk], headers=self._headers())
        if not resp.is_success:
            raise PushTransportError(f"Expo push API error: {resp.status_code} {resp.text[:300]}")
        body = resp.json() if resp.content else {}
        if body.get("errors"):
            raise PushTransportError(f"Expo push API rejected request: {body['errors']}")
        return [PushTicket.from_response(t) for t in body.get("data") or []]

    def send(self, messages: Sequence[PushMessage]) -> list[PushTicket]:
        if not messages:
            return []
        tickets: list[PushTicket] = []
        failures: list[str] = []
        with httpx.Client(timeout=self._timeout, transport=self._http_transport) as client:
            for start in range(0, len(messages), self._chunk_size):
                chunk = messages[start:start + self._chunk_size]
                try:
                    tickets.extend(self._post_chunk(client, chunk))
                except (httpx.HTTPError, PushTransportError, ValueError) as e:
                    logger.error("Push chunk of %s messages failed: %s", len(chunk), e)
                    failures.append(str(e))
        errors = [t for t in tickets if not t.ok]
        if errors:
            logger.warning(
                "Push service returned %s error tickets (first: %s %s)",
                len(errors),
                errors[0].message,
                errors[0].details.get("error"),
            )
        if failures:
            raise PushTransportError(f"{len(failures)} push chunk(s) failed: {failures[0]}")
        return tickets
