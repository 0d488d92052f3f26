from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable

from salon_connect.application.dto.booking_events import (
    decode_accepted,
    decode_chat_room_created,
    decode_notification,
    decode_rejected,
    decode_status_update,
)
from salon_connect.application.exceptions import MalformedPushEvent
from salon_connect.application.ports.transport import ListenerHandle, RealtimeTransportPort
from salon_connect.domain.entities.booking import (
    BookingAccepted,
    BookingOutcome,
    BookingRejected,
    BookingStatusUpdate,
    ChatRoomCreated,
)

BOOKING_EVENT_DECODERS: dict[str, Callable[[str, Any], BookingOutcome]] = {
    "booking_accepted": decode_accepted,
    "booking_rejected": decode_rejected,
    "booking_status_update": decode_status_update,
    "chat_room_created": decode_chat_room_created,
    "booking_notification": decode_notification,
}


@dataclass(frozen=True)
class BookingHandlers:
    on_accepted: Callable[[BookingAccepted], Any] | None = None
    on_rejected: Callable[[BookingRejected], Any] | None = None
    on_chat_room_created: Callable[[ChatRoomCreated], Any] | None = None
    on_status_update: Callable[[BookingStatusUpdate], Any] | None = None

    def for_outcome(self, outcome: BookingOutcome) -> Callable[[Any], Any] | None:
        if isinstance(outcome, BookingAccepted):
            return self.on_accepted
        if isinstance(outcome, BookingRejected):
            return self.on_rejected
        if isinstance(outcome, ChatRoomCreated):
            return self.on_chat_room_created
        return self.on_status_update


class BookingEventRouter:
    """
    Turns booking lifecycle pushes into BookingOutcome values.

    Each push produces exactly one handler call. Repeated pushes for the same
    booking are passed through as-is: only the handler knows which bookings
    it still cares about, so deduplication is its job.
    """

    def __init__(self, transport: RealtimeTransportPort) -> None:
        self._transport = transport
        self._logger = logging.getLogger(__name__)

    async def subscribe(self, user_id: str, handlers: BookingHandlers) -> Callable[[], None]:
        if not (self._transport.is_connected and self._transport.user_id == user_id):
            await self._transport.connect(user_id)

        handles: list[ListenerHandle] = [
            self._transport.on(event, self._listener(event, decoder, handlers))
            for event, decoder in BOOKING_EVENT_DECODERS.items()
        ]
        self._logger.info("Subscribed to booking events", extra={"user_id": user_id})

        def unsubscribe() -> None:
            while handles:
                handle = handles.pop()
                self._transport.off(handle.event, handle)

        return unsubscribe

    def _listener(
        self,
        event: str,
        decoder: Callable[[str, Any], BookingOutcome],
        handlers: BookingHandlers,
    ) -> Callable[[Any], Any]:
        async def listener(payload: Any) -> None:
            try:
                outcome = decoder(event, payload)
            except MalformedPushEvent as e:
                self._logger.warning("Dropping malformed push", extra={"event": event, "reason": e.reason})
                return

            handler = handlers.for_outcome(outcome)
            if handler is None:
                self._logger.debug("No handler for booking outcome", extra={"event": event})
                return

            self._logger.info(
                "Booking event received",
                extra={
                    "event": event,
                    "booking_id": getattr(outcome, "booking_id", None),
                    "conversation_id": getattr(outcome, "conversation_id", None),
                },
            )
            try:
                result = handler(outcome)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                self._logger.exception("Booking handler failed", extra={"event": event})

        return listener
