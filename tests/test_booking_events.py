"""
Tests for booking push decoding and routing.
"""

from __future__ import annotations

import pytest

from salon_connect.application.dto.booking_events import decode_accepted, decode_notification, decode_status_update
from salon_connect.application.exceptions import MalformedPushEvent
from salon_connect.application.use_cases.booking_events import BOOKING_EVENT_DECODERS, BookingEventRouter, BookingHandlers
from salon_connect.domain.entities.booking import BookingAccepted, BookingRejected, ChatRoomCreated
from salon_connect.domain.entities.connection_state import ConnectionState
from salon_connect.infrastructure.realtime.memory_transport import MemoryTransport


def test_decode_accepted_owner_from_booking_body():
    outcome = decode_accepted(
        "booking_accepted",
        {"bookingId": "b1", "conversationId": {"_id": "c1"}, "booking": {"salonOwnerID": "o1"}},
    )
    assert outcome == BookingAccepted(
        booking_id="b1", conversation_id="c1", booking={"salonOwnerID": "o1"}, salon_owner_id="o1"
    )


def test_decode_accepted_requires_conversation():
    with pytest.raises(MalformedPushEvent) as excinfo:
        decode_accepted("booking_accepted", {"bookingId": "b1"})
    assert excinfo.value.reason == "missing conversationId"


def test_decode_status_update_lowercases_status():
    outcome = decode_status_update("booking_status_update", {"booking": {"_id": "b2", "status": " Completed "}})
    assert outcome.booking_id == "b2"
    assert outcome.status == "completed"


def test_decode_notification_envelope():
    outcome = decode_notification("booking_notification", {"type": "rejected", "data": {"bookingId": "b3"}})
    assert isinstance(outcome, BookingRejected)
    assert outcome.booking_id == "b3"

    with pytest.raises(MalformedPushEvent):
        decode_notification("booking_notification", {"type": "mystery", "data": {}})


@pytest.mark.asyncio
async def test_subscribe_connects_and_registers_every_event():
    transport = MemoryTransport()
    router = BookingEventRouter(transport)

    await router.subscribe("u1", BookingHandlers())

    assert transport.state is ConnectionState.connected
    assert transport.emitted_events("user_connected") == ["u1"]
    for event in BOOKING_EVENT_DECODERS:
        assert transport.listener_count(event) == 1


@pytest.mark.asyncio
async def test_accepted_then_chat_room_created():
    """Acceptance and the chat room push each reach their own handler exactly once."""
    transport = MemoryTransport()
    accepted: list[BookingAccepted] = []
    rooms: list[ChatRoomCreated] = []
    router = BookingEventRouter(transport)
    await router.subscribe("u1", BookingHandlers(on_accepted=accepted.append, on_chat_room_created=rooms.append))

    await transport.push(
        "booking_accepted",
        {"bookingId": "b1", "conversationId": "c1", "reciever": {"salonOwnerID": "o1"}},
    )
    await transport.push("chat_room_created", {"conversationId": "c1", "bookingId": "b1", "salonOwnerName": "Mai"})

    assert [(a.booking_id, a.conversation_id, a.salon_owner_id) for a in accepted] == [("b1", "c1", "o1")]
    assert [(r.conversation_id, r.salon_owner_name) for r in rooms] == [("c1", "Mai")]


@pytest.mark.asyncio
async def test_double_subscription_is_observable():
    """Subscribing twice delivers each push twice; nothing is deduplicated."""
    transport = MemoryTransport()
    received: list[str] = []
    router = BookingEventRouter(transport)

    await router.subscribe("u1", BookingHandlers(on_rejected=lambda o: received.append(o.booking_id)))
    await router.subscribe("u1", BookingHandlers(on_rejected=lambda o: received.append(o.booking_id)))
    await transport.push("booking_rejected", {"bookingId": "b1"})

    assert transport.listener_count("booking_rejected") == 2
    assert transport.connect_calls == 1
    assert received == ["b1", "b1"]


@pytest.mark.asyncio
async def test_malformed_push_is_dropped():
    transport = MemoryTransport()
    accepted: list[BookingAccepted] = []
    await BookingEventRouter(transport).subscribe("u1", BookingHandlers(on_accepted=accepted.append))

    await transport.push("booking_accepted", "not an object")
    await transport.push("booking_accepted", {"conversationId": "c1"})
    await transport.push("booking_accepted", {"bookingId": "b1", "conversationId": "c1"})

    assert [a.booking_id for a in accepted] == ["b1"]


@pytest.mark.asyncio
async def test_handler_failure_does_not_stop_other_subscribers():
    transport = MemoryTransport()
    received: list[str] = []
    router = BookingEventRouter(transport)

    def explode(outcome):
        raise RuntimeError("boom")

    await router.subscribe("u1", BookingHandlers(on_rejected=explode))
    await router.subscribe("u1", BookingHandlers(on_rejected=lambda o: received.append(o.booking_id)))
    await transport.push("booking_rejected", {"bookingId": "b7"})

    assert received == ["b7"]


@pytest.mark.asyncio
async def test_async_handler_and_notification_envelope():
    transport = MemoryTransport()
    received: list[str] = []

    async def on_status(outcome):
        received.append(f"{outcome.booking_id}:{outcome.status}")

    await BookingEventRouter(transport).subscribe("u1", BookingHandlers(on_status_update=on_status))
    await transport.push("booking_notification", {"type": "status_update", "data": {"bookingId": "b1", "status": "completed"}})

    assert received == ["b1:completed"]


@pytest.mark.asyncio
async def test_unsubscribe_removes_only_own_listeners_and_is_idempotent():
    transport = MemoryTransport()
    first: list[str] = []
    second: list[str] = []
    router = BookingEventRouter(transport)

    unsubscribe = await router.subscribe("u1", BookingHandlers(on_rejected=lambda o: first.append(o.booking_id)))
    await router.subscribe("u1", BookingHandlers(on_rejected=lambda o: second.append(o.booking_id)))

    unsubscribe()
    unsubscribe()
    await transport.push("booking_rejected", {"bookingId": "b1"})

    assert first == []
    assert second == ["b1"]
    assert transport.listener_count("booking_rejected") == 1
