"""Shared plumbing for callable RPCs: caller checks, argument checks, error normalization."""
import functools
import logging
from typing import Any, Callable, TypeVar

from crewnotify.core.errors import (
    INVALID_ARGUMENT,
    MSG_UNKNOWN,
    PERMISSION_DENIED,
    UNAUTHENTICATED,
    UNKNOWN,
    CallableError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def require_caller(caller_id: str | None) -> str:
    if not caller_id:
        raise CallableError(UNAUTHENTICATED, "The function must be called while authenticated.")
    return caller_id


def require_args(data: dict[str, Any] | None, *names: str) -> list[str]:
    """Values of the required string arguments, in order. Raises invalid-argument if any is missing."""
    data = data or {}
    values = [data.get(n) for n in names]
    if not all(isinstance(v, str) and v for v in values):
        raise CallableError(INVALID_ARGUMENT, f"The function must be called with {_join(names)}.")
    return values


def require_self(caller_id: str, user_id: str) -> None:
    if caller_id != user_id:
        raise CallableError(PERMISSION_DENIED, "You can only act on your own behalf.")


def _join(names: tuple[str, ...]) -> str:
    if len(names) <= 1:
        return "".join(names)
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return ", ".join(names[:-1]) + f", and {names[-1]}"


def callable_rpc(name: str) -> Callable[[F], F]:
    """CallableError passes through; anything else is logged and surfaced as `unknown`."""

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except CallableError:
                raise
            except Exception as e:
                logger.exception("Error in %s", name)
                raise CallableError(UNKNOWN, MSG_UNKNOWN) from e

        return wrapper  # type: ignore[return-value]

    return decorator
