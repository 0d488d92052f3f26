"""
Owner identity extraction.

The backend has shipped the salon owner id under several names and shapes
over time. Every lookup goes through an ordered list of key paths; the first
path holding a value wins, and the value is normalized to a plain string.
"""

from __future__ import annotations

from typing import Any, Sequence

from salon_connect.application.utils.payload_keys import dig

# Order matters: the recommendation service puts its enriched owner id at the
# top level, so it beats the nested salon fields.
SELECTION_OWNER_PATHS: tuple[tuple[str, ...], ...] = (
    ("ownerId",),
    ("salon", "ownerId"),
    ("salon", "owner", "_id"),
)

SALON_DETAIL_OWNER_PATHS: tuple[tuple[str, ...], ...] = (
    ("ownerId",),
    ("owner", "_id"),
)

ACCEPTED_EVENT_OWNER_PATHS: tuple[tuple[str, ...], ...] = (
    ("salonOwnerId",),
    ("booking", "salonOwnerID"),
    ("reciever", "salonOwnerID"),  # sic, spelled this way by the server
)


def normalize_identifier(value: Any) -> str | None:
    """Reduce a plain id, a number or a populated {"_id": ...} reference to a string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, dict):
        for key in ("_id", "id", "$oid"):
            if key in value:
                return normalize_identifier(value[key])
        return None
    if isinstance(value, (list, tuple, set)):
        return None
    text = str(value).strip()
    return text or None


def extract_owner_id(payload: Any, paths: Sequence[Sequence[str]]) -> str | None:
    for path in paths:
        owner_id = normalize_identifier(dig(payload, path))
        if owner_id:
            return owner_id
    return None
