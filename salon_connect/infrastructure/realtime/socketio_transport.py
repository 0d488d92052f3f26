from __future__ import annotations

import asyncio
from typing import Any, Callable

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError
from socketio.exceptions import SocketIOError

from salon_connect.application.exceptions import TransportDisconnected
from salon_connect.core.config import settings
from salon_connect.domain.entities.connection_state import ConnectionState
from salon_connect.infrastructure.realtime.listener_registry import ListenerRegistryTransport


def _default_client_factory() -> socketio.AsyncClient:
    # Reconnection is driven by SocketIOTransport so every attempt is visible as a state change.
    return socketio.AsyncClient(reconnection=False, logger=False, engineio_logger=False)


class SocketIOTransport(ListenerRegistryTransport):
    """Socket.IO connection to the chat namespace of the backend."""

    def __init__(
        self,
        url: str | None = None,
        namespace: str | None = None,
        transports: list[str] | None = None,
        reconnect_attempts: int | None = None,
        reconnect_delay: float | None = None,
        connect_timeout: float | None = None,
        client_factory: Callable[[], Any] | None = None,
    ) -> None:
        super().__init__()
        self._url = url or settings.BACKEND_BASE_URL
        self._namespace = namespace or settings.SOCKET_NAMESPACE
        self._transports = list(transports or settings.SOCKET_TRANSPORTS)
        self._reconnect_attempts = (
            settings.SOCKET_RECONNECT_ATTEMPTS if reconnect_attempts is None else reconnect_attempts
        )
        self._reconnect_delay = settings.SOCKET_RECONNECT_DELAY if reconnect_delay is None else reconnect_delay
        self._connect_timeout = connect_timeout or settings.SOCKET_CONNECT_TIMEOUT
        self._client_factory = client_factory or _default_client_factory
        self._client: Any | None = None
        self._bound_events: set[str] = set()
        self._reconnect_task: asyncio.Task | None = None
        self._closing = False

    async def connect(self, user_id: str) -> ConnectionState:
        if self.is_connected and self._user_id == user_id:
            return self._state

        await self._cancel_reconnect()
        if self._client is not None:
            await self._close_client()

        self._user_id = user_id
        self._closing = False
        if not await self._open():
            self._schedule_reconnect()
        return self._state

    async def disconnect(self) -> None:
        self._closing = True
        await self._cancel_reconnect()
        if self._client is not None:
            await self._close_client()
        self._clear_listeners()
        self._set_state(ConnectionState.disconnected)
        self._logger.info("Transport closed", extra={"user_id": self._user_id})
        self._user_id = None

    async def emit(self, event: str, data: Any) -> None:
        client = self._client
        if client is None or not self.is_connected:
            raise TransportDisconnected()
        try:
            await client.emit(event, data, namespace=self._namespace)
        except SocketIOError as e:
            # the namespace went away between the state check and the write
            self._logger.warning("Emit failed", extra={"event": event, "error": str(e)})
            raise TransportDisconnected() from e

    async def wait_reconnected(self) -> None:
        """Wait for a pending reconnect loop to finish."""
        if self._reconnect_task is not None:
            await asyncio.shield(self._reconnect_task)

    def _on_listener_added(self, event: str) -> None:
        if self._client is not None and event not in self._bound_events:
            self._bind_event(self._client, event)

    async def _open(self) -> bool:
        self._set_state(ConnectionState.connecting)
        client = self._client_factory()
        self._client = client
        self._bound_events = set()
        self._bind_system_handlers(client)
        for event in list(self._listeners):
            self._bind_event(client, event)

        try:
            await client.connect(
                self._url,
                namespaces=[self._namespace],
                transports=self._transports,
                wait_timeout=self._connect_timeout,
            )
        except (SocketConnectionError, asyncio.TimeoutError, OSError) as e:
            self._logger.warning("Socket connection failed", extra={"error": str(e), "user_id": self._user_id})
            if self._client is client:
                self._client = None
            self._set_state(ConnectionState.disconnected)
            return False

        if self._client is not client:
            # disconnect() ran while the connect was in flight
            await client.disconnect()
            return False

        self._set_state(ConnectionState.connected)
        await client.emit("user_connected", self._user_id, namespace=self._namespace)
        self._logger.info("Presence announced", extra={"user_id": self._user_id})
        return True

    def _bind_system_handlers(self, client: Any) -> None:
        async def on_connect(*args: Any) -> None:
            self._logger.debug("Socket connected", extra={"user_id": self._user_id})

        async def on_disconnect(*args: Any) -> None:
            await self._handle_disconnect(client, args[0] if args else None)

        async def on_connect_error(*args: Any) -> None:
            self._logger.warning(
                "Socket connection error",
                extra={"error": str(args[0]) if args else None, "user_id": self._user_id},
            )

        client.on("connect", on_connect, namespace=self._namespace)
        client.on("disconnect", on_disconnect, namespace=self._namespace)
        client.on("connect_error", on_connect_error, namespace=self._namespace)

    def _bind_event(self, client: Any, event: str) -> None:
        async def dispatcher(*args: Any) -> None:
            await self._dispatch(event, args[0] if args else None)

        client.on(event, dispatcher, namespace=self._namespace)
        self._bound_events.add(event)

    async def _handle_disconnect(self, client: Any, reason: Any) -> None:
        if self._closing or client is not self._client:
            return
        self._logger.warning("Socket disconnected", extra={"reason": reason, "user_id": self._user_id})
        self._client = None
        self._set_state(ConnectionState.disconnected)
        self._schedule_reconnect()

    def _schedule_reconnect(self) -> None:
        if self._closing:
            return
        if self._reconnect_attempts <= 0:
            self._set_state(ConnectionState.error)
            return
        if self._reconnect_task is None or self._reconnect_task.done():
            self._reconnect_task = asyncio.get_running_loop().create_task(self._reconnect_loop())

    async def _reconnect_loop(self) -> None:
        for attempt in range(1, self._reconnect_attempts + 1):
            await asyncio.sleep(self._reconnect_delay)
            if self._closing:
                return
            self._logger.info("Reconnecting", extra={"attempt": attempt, "user_id": self._user_id})
            if await self._open():
                return
        self._logger.error(
            "Giving up after reconnect attempts",
            extra={"attempt": self._reconnect_attempts, "user_id": self._user_id},
        )
        self._set_state(ConnectionState.error)

    async def _cancel_reconnect(self) -> None:
        task, self._reconnect_task = self._reconnect_task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _close_client(self) -> None:
        client, self._client = self._client, None
        try:
            await client.disconnect()
        except Exception as e:
            self._logger.warning("Error while closing socket", extra={"error": str(e)})
