from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union


@dataclass(frozen=True)
class BookingSelection:
    salon_id: str | None
    owner_id: Any = None  # top-level owner field, plain id or {"_id": ...}
    salon: dict[str, Any] = field(default_factory=dict)  # nested salon object as received
    salon_name: str | None = None
    age: int | None = None
    weight_kg: float | None = None


@dataclass(frozen=True)
class BookingRequest:
    salon_id: str
    salon_owner_id: str
    requester_id: str
    requester_name: str
    requester_email: str
    requested_at: datetime
    duration_minutes: int
    age: int | None = None
    weight_kg: float | None = None

    def __post_init__(self) -> None:
        if not self.salon_owner_id:
            raise ValueError("BookingRequest requires a salon owner id")
        if not self.salon_id:
            raise ValueError("BookingRequest requires a salon id")


@dataclass(frozen=True)
class BookingAck:
    booking_id: str | None
    status: str | None
    payload: dict[str, Any]


@dataclass(frozen=True)
class BookingAccepted:
    booking_id: str
    conversation_id: str
    booking: dict[str, Any]
    salon_owner_id: str | None = None
    kind: str = "accepted"


@dataclass(frozen=True)
class BookingRejected:
    booking_id: str
    booking: dict[str, Any]
    kind: str = "rejected"


@dataclass(frozen=True)
class ChatRoomCreated:
    conversation_id: str
    booking_id: str | None
    salon_owner_id: str | None
    salon_owner_name: str | None
    kind: str = "chatRoomCreated"


@dataclass(frozen=True)
class BookingStatusUpdate:
    booking_id: str
    status: str
    booking: dict[str, Any]
    kind: str = "statusUpdate"


BookingOutcome = Union[BookingAccepted, BookingRejected, ChatRoomCreated, BookingStatusUpdate]
