"""
Tests for the Socket.IO transport using a scripted client in place of the network.
"""

from __future__ import annotations

import pytest
from socketio.exceptions import BadNamespaceError
from socketio.exceptions import ConnectionError as SocketConnectionError

from salon_connect.application.exceptions import TransportDisconnected
from salon_connect.domain.entities.connection_state import ConnectionState
from salon_connect.infrastructure.realtime.socketio_transport import SocketIOTransport


class FakeSocketClient:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.handlers: dict[str, object] = {}
        self.emitted: list[tuple[str, object]] = []
        self.connect_kwargs: dict | None = None
        self.connected = False
        self.emit_error: Exception | None = None

    def on(self, event, handler, namespace=None):
        self.handlers[event] = handler

    async def connect(self, url, namespaces=None, transports=None, wait_timeout=None):
        self.connect_kwargs = {
            "url": url,
            "namespaces": namespaces,
            "transports": transports,
            "wait_timeout": wait_timeout,
        }
        if self.fail:
            raise SocketConnectionError("Connection refused")
        self.connected = True

    async def emit(self, event, data=None, namespace=None):
        if self.emit_error is not None:
            raise self.emit_error
        self.emitted.append((event, data))

    async def disconnect(self):
        self.connected = False

    async def server_push(self, event, data):
        await self.handlers[event](data)

    async def server_drop(self):
        self.connected = False
        await self.handlers["disconnect"]("transport close")


class ClientScript:
    """Hands out clients that fail or succeed in the given order; succeeds once the script runs out."""

    def __init__(self, *failures: bool) -> None:
        self._failures = list(failures)
        self.clients: list[FakeSocketClient] = []

    def __call__(self) -> FakeSocketClient:
        fail = self._failures.pop(0) if self._failures else False
        client = FakeSocketClient(fail=fail)
        self.clients.append(client)
        return client


def _transport(script: ClientScript, attempts: int = 2) -> tuple[SocketIOTransport, list[ConnectionState]]:
    transport = SocketIOTransport(
        url="http://backend.test",
        namespace="/chat",
        transports=["websocket", "polling"],
        reconnect_attempts=attempts,
        reconnect_delay=0,
        connect_timeout=3,
        client_factory=script,
    )
    states: list[ConnectionState] = []
    transport.add_state_listener(lambda previous, current: states.append(current))
    return transport, states


@pytest.mark.asyncio
async def test_connect_announces_presence():
    script = ClientScript()
    transport, states = _transport(script)

    state = await transport.connect("u1")

    assert state is ConnectionState.connected
    assert states == [ConnectionState.connecting, ConnectionState.connected]
    client = script.clients[0]
    assert client.emitted == [("user_connected", "u1")]
    assert client.connect_kwargs == {
        "url": "http://backend.test",
        "namespaces": ["/chat"],
        "transports": ["websocket", "polling"],
        "wait_timeout": 3,
    }


@pytest.mark.asyncio
async def test_connect_is_idempotent_for_same_user():
    script = ClientScript()
    transport, _ = _transport(script)

    await transport.connect("u1")
    await transport.connect("u1")

    assert len(script.clients) == 1


@pytest.mark.asyncio
async def test_pushes_reach_listeners_registered_after_connect():
    script = ClientScript()
    transport, _ = _transport(script)
    received = []
    await transport.connect("u1")

    transport.on("receive_message", received.append)
    await script.clients[0].server_push("receive_message", {"message": {"_id": "m1"}})

    assert received == [{"message": {"_id": "m1"}}]


@pytest.mark.asyncio
async def test_reconnect_reannounces_presence_and_keeps_listeners():
    script = ClientScript()
    transport, states = _transport(script)
    received = []
    transport.on("booking_accepted", received.append)
    await transport.connect("u1")

    await script.clients[0].server_drop()
    await transport.wait_reconnected()

    assert transport.state is ConnectionState.connected
    assert len(script.clients) == 2
    assert script.clients[1].emitted == [("user_connected", "u1")]
    await script.clients[1].server_push("booking_accepted", {"bookingId": "b1"})
    assert received == [{"bookingId": "b1"}]
    assert states[-3:] == [ConnectionState.disconnected, ConnectionState.connecting, ConnectionState.connected]


@pytest.mark.asyncio
async def test_reconnect_gives_up_after_bounded_attempts():
    script = ClientScript(False, True, True)
    transport, states = _transport(script, attempts=2)
    await transport.connect("u1")

    await script.clients[0].server_drop()
    await transport.wait_reconnected()

    assert transport.state is ConnectionState.error
    assert len(script.clients) == 3
    assert states == [
        ConnectionState.connecting,
        ConnectionState.connected,
        ConnectionState.disconnected,
        ConnectionState.connecting,
        ConnectionState.disconnected,
        ConnectionState.connecting,
        ConnectionState.disconnected,
        ConnectionState.error,
    ]
    with pytest.raises(TransportDisconnected):
        await transport.emit("send_message", {})


@pytest.mark.asyncio
async def test_failed_connect_without_retries_ends_in_error():
    script = ClientScript(True)
    transport, _ = _transport(script, attempts=0)

    state = await transport.connect("u1")

    assert state is ConnectionState.error


@pytest.mark.asyncio
async def test_connect_after_error_starts_over():
    script = ClientScript(True)
    transport, _ = _transport(script, attempts=0)
    await transport.connect("u1")

    state = await transport.connect("u1")

    assert state is ConnectionState.connected
    assert script.clients[-1].emitted == [("user_connected", "u1")]


@pytest.mark.asyncio
async def test_emit_requires_connection():
    transport, _ = _transport(ClientScript())

    with pytest.raises(TransportDisconnected):
        await transport.emit("typing", {"isTyping": True})


@pytest.mark.asyncio
async def test_emit_goes_to_namespace():
    script = ClientScript()
    transport, _ = _transport(script)
    await transport.connect("u1")

    await transport.emit("message_delivered", "m1")

    assert script.clients[0].emitted[-1] == ("message_delivered", "m1")


@pytest.mark.asyncio
async def test_emit_on_dropped_namespace_reports_disconnected():
    script = ClientScript()
    transport, _ = _transport(script)
    await transport.connect("u1")
    script.clients[0].emit_error = BadNamespaceError("/chat is not a connected namespace.")

    with pytest.raises(TransportDisconnected):
        await transport.emit("send_message", {"text": "hi"})


@pytest.mark.asyncio
async def test_disconnect_closes_and_clears_listeners():
    script = ClientScript()
    transport, _ = _transport(script)
    transport.on("receive_message", lambda data: None)
    await transport.connect("u1")

    await transport.disconnect()

    assert transport.state is ConnectionState.disconnected
    assert transport.listener_count("receive_message") == 0
    assert script.clients[0].connected is False
    assert len(script.clients) == 1


@pytest.mark.asyncio
async def test_dispatch_uses_snapshot_of_listeners():
    """Removing a listener from inside a handler does not drop the in-flight event."""
    script = ClientScript()
    transport, _ = _transport(script)
    calls = []
    handles = {}

    def first(data):
        calls.append(("first", data))
        transport.off("evt", handles["second"])

    def second(data):
        calls.append(("second", data))

    handles["first"] = transport.on("evt", first)
    handles["second"] = transport.on("evt", second)
    await transport.connect("u1")

    await script.clients[0].server_push("evt", 1)
    await script.clients[0].server_push("evt", 2)

    assert calls == [("first", 1), ("second", 1), ("first", 2)]


@pytest.mark.asyncio
async def test_duplicate_registration_runs_twice():
    script = ClientScript()
    transport, _ = _transport(script)
    calls = []
    handler = calls.append

    transport.on("evt", handler)
    transport.on("evt", handler)
    await transport.connect("u1")
    await script.clients[0].server_push("evt", "x")

    assert transport.listener_count("evt") == 2
    assert calls == ["x", "x"]


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others():
    script = ClientScript()
    transport, _ = _transport(script)
    calls = []

    def broken(data):
        raise RuntimeError("boom")

    transport.on("evt", broken)
    transport.on("evt", calls.append)
    await transport.connect("u1")
    await script.clients[0].server_push("evt", "x")

    assert calls == ["x"]


def test_off_without_handle_removes_all():
    transport, _ = _transport(ClientScript())
    transport.on("evt", lambda d: None)
    transport.on("evt", lambda d: None)

    assert transport.off("evt") == 2
    assert transport.listener_count("evt") == 0
    assert transport.off("evt") == 0
