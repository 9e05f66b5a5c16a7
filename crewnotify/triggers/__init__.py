from crewnotify.triggers.base import DocumentChange, Trigger
from crewnotify.triggers.registry import (
    DispatchResult,
    dispatch,
    get_trigger,
    list_triggers,
    match_triggers,
    register,
    run_trigger,
)

__all__ = [
    "DispatchResult",
    "DocumentChange",
    "Trigger",
    "dispatch",
    "get_trigger",
    "list_triggers",
    "match_triggers",
    "register",
    "run_trigger",
]
