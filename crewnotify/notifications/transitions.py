"""
Pure transition predicates: decide from (before, after) document data whether a
change is worth a notification. Every trigger handler calls one of these first, so
re-delivering the same write is a no-op.

`None` stands for "document does not exist" on either side.
"""
from typing import Any, Mapping, NamedTuple

from crewnotify.core.constants import FIELD_STATUS

Doc = Mapping[str, Any] | None

CREATED = "created"
UPDATED = "updated"
DELETED = "deleted"


def write_kind(before: Doc, after: Doc) -> str | None:
    """created / updated / deleted, or None when neither side exists."""
    if before is None and after is None:
        return None
    if before is None:
        return CREATED
    if after is None:
        return DELETED
    return UPDATED


# ---------------------------------------------------------------------------
# Availability status
# ---------------------------------------------------------------------------


def status_value(doc: Doc) -> bool | None:
    """The tri-state availability flag: True / False, or None when absent or not a boolean."""
    if not doc:
        return None
    value = doc.get(FIELD_STATUS)
    return value if isinstance(value, bool) else None


class StatusTransition(NamedTuple):
    before: bool | None
    after: bool | None

    @property
    def went_up(self) -> bool:
        return self.after is True

    @property
    def went_down(self) -> bool:
        return self.after is False


def status_transition(before: Doc, after: Doc) -> StatusTransition | None:
    """
    None when nothing should be announced: the flag is unchanged, or a user who was
    unavailable cleared their status (False -> None).
    """
    b, a = status_value(before), status_value(after)
    if b == a:
        return None
    if b is False and a is None:
        return None
    return StatusTransition(b, a)


# ---------------------------------------------------------------------------
# Event polls
# ---------------------------------------------------------------------------


def poll_options(doc: Doc) -> list[dict[str, Any]]:
    options = (doc or {}).get("options") or []
    return [o for o in options if isinstance(o, Mapping)]


def responded_user_ids(doc: Doc) -> set[str]:
    """Everyone who answered at least one option."""
    ids: set[str] = set()
    for option in poll_options(doc):
        ids.update((option.get("responses") or {}).keys())
    return ids


def poll_became_finalized(before: Doc, after: Doc) -> bool:
    if before is None or after is None:
        return False
    return not before.get("finalized") and bool(after.get("finalized"))


def all_members_responded(doc: Doc, member_ids: list[str], creator_id: str | None) -> bool:
    """Every member other than the creator has answered at least one option."""
    responded = responded_user_ids(doc)
    return all(m in responded for m in member_ids if m != creator_id)


def poll_crossed_all_responded(
    before: Doc,
    after: Doc,
    member_ids: list[str],
    creator_id: str | None,
) -> bool:
    """
    True exactly once per poll: when the responder set goes from incomplete to
    complete. Finalized polls, single-member crews and polls without options never fire.
    """
    if before is None or after is None:
        return False
    if before.get("finalized") or after.get("finalized"):
        return False
    if len(member_ids) <= 1 or not poll_options(after):
        return False
    if not all_members_responded(after, member_ids, creator_id):
        return False
    return not all_members_responded(before, member_ids, creator_id)


def poll_new_responder(before: Doc, after: Doc) -> str | None:
    """
    The user whose answer was added or changed by this write, scanning options in order.
    None on finalization writes and when the option list itself changed length.
    """
    if before is None or after is None or poll_became_finalized(before, after):
        return None
    b_opts, a_opts = poll_options(before), poll_options(after)
    if len(b_opts) != len(a_opts):
        return None
    for b_opt, a_opt in zip(b_opts, a_opts):
        b_resp = b_opt.get("responses") or {}
        a_resp = a_opt.get("responses") or {}
        for uid in a_resp:
            if uid not in b_resp:
                return uid
        for uid, answer in a_resp.items():
            if uid in b_resp and b_resp[uid] != answer:
                return uid
    return None


POLL_EDIT_NEW_DATES = "new_dates"
POLL_EDIT_TITLE = "title"
POLL_EDIT_LOCATION = "location"
POLL_EDIT_DESCRIPTION = "description"


def poll_edit_kind(before: Doc, after: Doc) -> str | None:
    """Most significant edit, by priority: new dates, title, location, description. None if none."""
    if before is None or after is None or poll_became_finalized(before, after):
        return None
    before_dates = {o.get("date") for o in poll_options(before)}
    if any(o.get("date") not in before_dates for o in poll_options(after)):
        return POLL_EDIT_NEW_DATES
    for field, kind in (
        ("title", POLL_EDIT_TITLE),
        ("location", POLL_EDIT_LOCATION),
        ("description", POLL_EDIT_DESCRIPTION),
    ):
        if before.get(field) != after.get(field):
            return kind
    return None


# ---------------------------------------------------------------------------
# Crews, messages, users
# ---------------------------------------------------------------------------


def field_changed(before: Doc, after: Doc, field: str) -> bool:
    """Both sides exist and the field differs (absent and None compare equal)."""
    if before is None or after is None:
        return False
    return before.get(field) != after.get(field)


def message_has_content(doc: Doc) -> bool:
    if not doc or not doc.get("senderId"):
        return False
    return bool(doc.get("text") or doc.get("imageUrl") or doc.get("poll"))


def phone_number_added(before: Doc, after: Doc) -> bool:
    """A user finished phone verification: hashedPhoneNumber went from empty to set."""
    if before is None or after is None:
        return False
    return not before.get("hashedPhoneNumber") and bool(after.get("hashedPhoneNumber"))


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------


SIGNAL_ACCEPT = "accept"


def signal_responses(doc: Doc) -> list[dict[str, Any]]:
    responses = (doc or {}).get("responses") or []
    return [r for r in responses if isinstance(r, Mapping) and r.get("responderId")]


def signal_new_acceptors(before: Doc, after: Doc) -> list[str]:
    """
    Responders whose answer became "accept" in this write: a new accept response, or
    an earlier response changed to accept. Listed in `after` order.
    """
    if before is None or after is None:
        return []
    previous = {r["responderId"]: r.get("response") for r in signal_responses(before)}
    acceptors: list[str] = []
    for response in signal_responses(after):
        uid = response["responderId"]
        if response.get("response") != SIGNAL_ACCEPT or previous.get(uid) == SIGNAL_ACCEPT:
            continue
        if uid not in acceptors:
            acceptors.append(uid)
    return acceptors
