from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from salon_connect.application.utils.owner_identity import normalize_identifier
from salon_connect.application.utils.payload_keys import first_present, unwrap_data
from salon_connect.domain.entities.booking import BookingAck, BookingRequest


def to_iso_utc(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CreateBookingBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    salon_id: str = Field(serialization_alias="salonId")
    salon_owner_id: str = Field(serialization_alias="salonOwnerId")
    firebase_uid: str = Field(serialization_alias="firebaseUID")
    name: str
    email: str
    requested_date_time: str = Field(serialization_alias="requestedDateTime")
    duration_minutes: int = Field(serialization_alias="durationMinutes")
    age: int | None = None
    weight_kg: float | None = Field(default=None, serialization_alias="weightKg")

    @classmethod
    def from_request(cls, request: BookingRequest) -> "CreateBookingBody":
        return cls(
            salon_id=request.salon_id,
            salon_owner_id=request.salon_owner_id,
            firebase_uid=request.requester_id,
            name=request.requester_name,
            email=request.requester_email,
            requested_date_time=to_iso_utc(request.requested_at),
            duration_minutes=request.duration_minutes,
            age=request.age,
            weight_kg=request.weight_kg,
        )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def decode_booking_ack(body: Any) -> BookingAck:
    payload = body if isinstance(body, dict) else {"data": body}
    booking = unwrap_data(payload)
    if isinstance(booking, dict) and isinstance(booking.get("booking"), dict):
        booking = booking["booking"]
    booking_id = normalize_identifier(first_present(payload, ("bookingId",))) or normalize_identifier(
        first_present(booking, ("_id", "id", "bookingId"))
    )
    status = first_present(booking, ("status",)) or first_present(payload, ("status",))
    return BookingAck(
        booking_id=booking_id,
        status=str(status) if status is not None else None,
        payload=payload,
    )
