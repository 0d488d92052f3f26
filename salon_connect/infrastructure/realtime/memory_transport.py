from __future__ import annotations

from typing import Any

from salon_connect.application.exceptions import TransportDisconnected
from salon_connect.domain.entities.connection_state import ConnectionState
from salon_connect.infrastructure.realtime.listener_registry import ListenerRegistryTransport


class MemoryTransport(ListenerRegistryTransport):
    """In-process transport: records emits, lets callers push server events."""

    def __init__(self, reachable: bool = True) -> None:
        super().__init__()
        self.reachable = reachable
        self.emitted: list[tuple[str, Any]] = []
        self.connect_calls = 0

    async def connect(self, user_id: str) -> ConnectionState:
        self.connect_calls += 1
        if self.is_connected and self._user_id == user_id:
            return self._state
        self._user_id = user_id
        self._set_state(ConnectionState.connecting)
        if not self.reachable:
            self._set_state(ConnectionState.error)
            return self._state
        self._set_state(ConnectionState.connected)
        self.emitted.append(("user_connected", user_id))
        return self._state

    async def disconnect(self) -> None:
        self._clear_listeners()
        self._set_state(ConnectionState.disconnected)
        self._user_id = None

    async def emit(self, event: str, data: Any) -> None:
        if not self.is_connected:
            raise TransportDisconnected()
        self.emitted.append((event, data))
        self._logger.debug("Mock emit", extra={"event": event})

    async def push(self, event: str, data: Any) -> None:
        """Deliver a server push to every listener of the event."""
        await self._dispatch(event, data)

    def drop(self) -> None:
        """Simulate losing the connection."""
        self._set_state(ConnectionState.disconnected)

    def restore(self) -> None:
        """Simulate a successful reconnect, including the presence announcement."""
        self._set_state(ConnectionState.connected)
        self.emitted.append(("user_connected", self._user_id))

    def emitted_events(self, event: str) -> list[Any]:
        return [data for name, data in self.emitted if name == event]
