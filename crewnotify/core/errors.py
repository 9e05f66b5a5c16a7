"""
Centralized error handling for callable RPCs.
Typed errors with stable codes (the mobile client switches on them) and one table
mapping each code to an HTTP status, so routes stay thin.
"""
from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

# ---------------------------------------------------------------------------
# Constants: error codes surfaced to the client
# ---------------------------------------------------------------------------

UNAUTHENTICATED = "unauthenticated"
INVALID_ARGUMENT = "invalid-argument"
PERMISSION_DENIED = "permission-denied"
NOT_FOUND = "not-found"
FAILED_PRECONDITION = "failed-precondition"
UNKNOWN = "unknown"

MSG_UNKNOWN = "An unknown error occurred."

# Code -> HTTP status. Add new codes here instead of scattering status literals in routes.
CODE_TO_HTTP_STATUS: dict[str, int] = {
    UNAUTHENTICATED: 401,
    INVALID_ARGUMENT: 400,
    PERMISSION_DENIED: 403,
    NOT_FOUND: 404,
    FAILED_PRECONDITION: 400,
    UNKNOWN: 500,
}


class CallableError(Exception):
    """Raised by callable RPCs; code is one of the constants above."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def http_status(self) -> int:
        return CODE_TO_HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> dict:
        return {"error": {"status": self.code, "message": self.message}}


class PushTransportError(Exception):
    """Push service rejected a request or could not be reached."""


def callable_error_to_response(exc: CallableError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def callable_error_handler(request: Request, exc: CallableError) -> JSONResponse:
    """FastAPI exception handler registered in main.py."""
    return callable_error_to_response(exc)
