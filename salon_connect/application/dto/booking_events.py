from __future__ import annotations

from typing import Any

from salon_connect.application.exceptions import MalformedPushEvent
from salon_connect.application.utils.owner_identity import (
    ACCEPTED_EVENT_OWNER_PATHS,
    extract_owner_id,
    normalize_identifier,
)
from salon_connect.application.utils.payload_keys import first_present
from salon_connect.domain.entities.booking import (
    BookingAccepted,
    BookingOutcome,
    BookingRejected,
    BookingStatusUpdate,
    ChatRoomCreated,
)

BOOKING_ID_KEYS = ("bookingId", ("booking", "_id"), ("booking", "id"), "_id")
CONVERSATION_ID_KEYS = ("conversationId", ("booking", "conversationId"), ("conversation", "_id"), "chatRoomId")


def _require_dict(event: str, payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise MalformedPushEvent(event, f"expected an object, got {type(payload).__name__}")
    return payload


def _booking_body(payload: dict[str, Any]) -> dict[str, Any]:
    booking = payload.get("booking")
    return dict(booking) if isinstance(booking, dict) else {}


def _booking_id(event: str, payload: dict[str, Any], required: bool = True) -> str | None:
    booking_id = normalize_identifier(first_present(payload, BOOKING_ID_KEYS))
    if required and not booking_id:
        raise MalformedPushEvent(event, "missing bookingId")
    return booking_id


def decode_accepted(event: str, payload: Any) -> BookingAccepted:
    data = _require_dict(event, payload)
    conversation_id = normalize_identifier(first_present(data, CONVERSATION_ID_KEYS))
    if not conversation_id:
        raise MalformedPushEvent(event, "missing conversationId")
    return BookingAccepted(
        booking_id=_booking_id(event, data),
        conversation_id=conversation_id,
        booking=_booking_body(data),
        salon_owner_id=extract_owner_id(data, ACCEPTED_EVENT_OWNER_PATHS),
    )


def decode_rejected(event: str, payload: Any) -> BookingRejected:
    data = _require_dict(event, payload)
    return BookingRejected(booking_id=_booking_id(event, data), booking=_booking_body(data))


def decode_chat_room_created(event: str, payload: Any) -> ChatRoomCreated:
    data = _require_dict(event, payload)
    conversation_id = normalize_identifier(first_present(data, CONVERSATION_ID_KEYS))
    if not conversation_id:
        raise MalformedPushEvent(event, "missing conversationId")
    owner_name = first_present(data, ("salonOwnerName", ("salonOwner", "name"), "salonName"))
    return ChatRoomCreated(
        conversation_id=conversation_id,
        booking_id=_booking_id(event, data, required=False),
        salon_owner_id=extract_owner_id(data, ACCEPTED_EVENT_OWNER_PATHS),
        salon_owner_name=str(owner_name) if owner_name is not None else None,
    )


def decode_status_update(event: str, payload: Any) -> BookingStatusUpdate:
    data = _require_dict(event, payload)
    status = first_present(data, ("status", ("booking", "status")))
    if not isinstance(status, str) or not status.strip():
        raise MalformedPushEvent(event, "missing status")
    return BookingStatusUpdate(
        booking_id=_booking_id(event, data),
        status=status.strip().lower(),
        booking=_booking_body(data),
    )


NOTIFICATION_DECODERS = {
    "accepted": decode_accepted,
    "booking_accepted": decode_accepted,
    "rejected": decode_rejected,
    "booking_rejected": decode_rejected,
    "chat_room_created": decode_chat_room_created,
    "chatroomcreated": decode_chat_room_created,
    "status_update": decode_status_update,
    "statusupdate": decode_status_update,
    "booking_status_update": decode_status_update,
}


def decode_notification(event: str, payload: Any) -> BookingOutcome:
    """`booking_notification` envelope: {"type": "...", "data": {...}}."""
    data = _require_dict(event, payload)
    kind = data.get("type")
    if not isinstance(kind, str):
        raise MalformedPushEvent(event, "missing notification type")
    decoder = NOTIFICATION_DECODERS.get(kind.strip().lower())
    if decoder is None:
        raise MalformedPushEvent(event, f"unknown notification type {kind!r}")
    inner = data.get("data") if isinstance(data.get("data"), dict) else data
    return decoder(event, inner)
