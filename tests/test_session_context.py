"""
Tests for signing out of a session that has booking and chat listeners attached.
"""

from __future__ import annotations

import pytest

from salon_connect.application.session_context import SessionContext
from salon_connect.application.use_cases.booking_events import BOOKING_EVENT_DECODERS, BookingEventRouter, BookingHandlers
from salon_connect.application.use_cases.chat_session import ChatSessionEngine
from salon_connect.domain.entities.connection_state import ConnectionState
from salon_connect.domain.entities.session import SessionIdentity
from salon_connect.infrastructure.realtime.memory_transport import MemoryTransport

CHAT_EVENTS = (
    "receive_message",
    "message_sent",
    "message_status_update",
    "user_status",
    "user_typing",
    "message_error",
)


@pytest.mark.asyncio
async def test_sign_out_disconnects_and_clears_every_listener(chat_api):
    transport = MemoryTransport()
    context = SessionContext(transport)
    context.sign_in(SessionIdentity(user_id="u1", email="ann@example.com"))

    unsubscribe = await BookingEventRouter(transport).subscribe("u1", BookingHandlers())
    engine = ChatSessionEngine(transport, chat_api, conversation_id="c1", user_id="u1", peer_id="peer")
    engine.open()
    assert transport.is_connected

    await context.sign_out()

    assert context.identity is None
    assert transport.state is ConnectionState.disconnected
    assert transport.user_id is None
    for event in (*BOOKING_EVENT_DECODERS, *CHAT_EVENTS):
        assert transport.listener_count(event) == 0

    # detaching after the session is gone is harmless
    unsubscribe()
    await engine.close()
    assert transport.state is ConnectionState.disconnected


@pytest.mark.asyncio
async def test_router_and_engine_never_close_the_connection(chat_api):
    transport = MemoryTransport()
    context = SessionContext(transport)
    context.sign_in(SessionIdentity(user_id="u1"))

    unsubscribe = await BookingEventRouter(transport).subscribe("u1", BookingHandlers())
    engine = ChatSessionEngine(transport, chat_api, conversation_id="c1", user_id="u1", peer_id="peer")
    engine.open()

    unsubscribe()
    await engine.close()

    assert transport.is_connected
    assert context.identity == SessionIdentity(user_id="u1")
