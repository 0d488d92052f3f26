from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from salon_connect.application.dto.booking_payload import CreateBookingBody, decode_booking_ack
from salon_connect.application.exceptions import (
    MissingContactInfo,
    MissingOwnerInfo,
    MissingSalonId,
    SalonConnectError,
    Unauthenticated,
)
from salon_connect.application.ports.booking_api import BookingApiPort
from salon_connect.application.ports.identity_store import IdentityStorePort
from salon_connect.application.session_context import SessionContext
from salon_connect.application.utils.owner_identity import (
    SALON_DETAIL_OWNER_PATHS,
    SELECTION_OWNER_PATHS,
    extract_owner_id,
    normalize_identifier,
)
from salon_connect.application.utils.payload_keys import unwrap_data
from salon_connect.domain.entities.booking import BookingAck, BookingRequest, BookingSelection
from salon_connect.domain.entities.session import SessionIdentity


@dataclass(frozen=True)
class BookingResult:
    ack: BookingAck | None = None
    error: SalonConnectError | None = None
    request: BookingRequest | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.ack is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmitBookingUseCase:
    """
    Turns a swiped recommendation into a booking request.

    Identity and owner resolution happen locally before any POST; a request
    without a resolvable owner is never sent, because the server routes the
    booking (and later the chat room) by owner.
    """

    def __init__(
        self,
        context: SessionContext,
        identity_store: IdentityStorePort,
        booking_api: BookingApiPort,
        lead_minutes: int = 60,
        duration_minutes: int = 60,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._context = context
        self._identity_store = identity_store
        self._booking_api = booking_api
        self._lead_minutes = lead_minutes
        self._duration_minutes = duration_minutes
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, selection: BookingSelection) -> BookingResult:
        try:
            request = await self._build_request(selection)
        except SalonConnectError as e:
            self._logger.warning(
                "Booking not submitted",
                extra={"reason": type(e).__name__, "user_id": self._current_user_id()},
            )
            return BookingResult(error=e)

        try:
            body = await self._booking_api.create_booking(CreateBookingBody.from_request(request).to_json())
        except SalonConnectError as e:
            self._logger.error(
                "Booking submission failed",
                extra={"reason": type(e).__name__, "error": str(e), "user_id": request.requester_id},
            )
            return BookingResult(error=e, request=request)

        ack = decode_booking_ack(body)
        self._logger.info(
            "Booking request sent",
            extra={"booking_id": ack.booking_id, "user_id": request.requester_id, "status": ack.status},
        )
        return BookingResult(ack=ack, request=request)

    async def _build_request(self, selection: BookingSelection) -> BookingRequest:
        identity = self._context.identity
        if identity is None or not identity.user_id:
            raise Unauthenticated()

        salon_id = normalize_identifier(selection.salon_id)
        if not salon_id:
            raise MissingSalonId()

        name, email = await self._resolve_contact(identity)
        if not email:
            raise MissingContactInfo()

        owner_id = await self._resolve_owner(salon_id, selection)
        if not owner_id:
            raise MissingOwnerInfo()

        return BookingRequest(
            salon_id=salon_id,
            salon_owner_id=owner_id,
            requester_id=identity.user_id,
            requester_name=name,
            requester_email=email,
            requested_at=self._clock() + timedelta(minutes=self._lead_minutes),
            duration_minutes=self._duration_minutes,
            age=selection.age,
            weight_kg=selection.weight_kg,
        )

    async def _resolve_contact(self, identity: SessionIdentity) -> tuple[str, str | None]:
        profile: dict | None = None
        try:
            profile = await self._identity_store.get_profile(identity.user_id)
        except Exception as e:
            self._logger.warning(
                "Profile lookup failed; using session identity",
                extra={"user_id": identity.user_id, "error": str(e)},
            )

        profile = profile or {}
        name = profile.get("name") or identity.display_name or "User"
        email = profile.get("email") or identity.email
        return str(name), (str(email).strip() or None) if email else None

    async def _resolve_owner(self, salon_id: str, selection: BookingSelection) -> str | None:
        owner_id = extract_owner_id({"ownerId": selection.owner_id, "salon": selection.salon}, SELECTION_OWNER_PATHS)
        if owner_id:
            return owner_id

        for lookup in (self._booking_api.get_salon_with_owner, self._booking_api.get_salon):
            try:
                body = await lookup(salon_id)
            except SalonConnectError as e:
                self._logger.info("Salon lookup failed", extra={"event": lookup.__name__, "error": str(e)})
                continue
            if body is None:
                continue
            owner_id = extract_owner_id(unwrap_data(body), SALON_DETAIL_OWNER_PATHS)
            if owner_id:
                self._logger.info("Resolved salon owner", extra={"event": lookup.__name__})
                return owner_id
        return None

    def _current_user_id(self) -> str | None:
        identity = self._context.identity
        return identity.user_id if identity else None
