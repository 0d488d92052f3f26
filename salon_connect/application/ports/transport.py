from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from salon_connect.domain.entities.connection_state import ConnectionState

EventHandler = Callable[[Any], Union[None, Awaitable[None]]]
StateListener = Callable[[ConnectionState, ConnectionState], None]


@dataclass(frozen=True)
class ListenerHandle:
    event: str
    token: int


class RealtimeTransportPort(ABC):
    """One shared realtime connection per signed-in session."""

    @property
    @abstractmethod
    def state(self) -> ConnectionState:
        raise NotImplementedError

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.connected

    @property
    @abstractmethod
    def user_id(self) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def connect(self, user_id: str) -> ConnectionState:
        """Open the connection and announce presence. Failures end in a state, not an exception."""
        raise NotImplementedError

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection and drop every listener."""
        raise NotImplementedError

    @abstractmethod
    def on(self, event: str, handler: EventHandler) -> ListenerHandle:
        raise NotImplementedError

    @abstractmethod
    def off(self, event: str, handle: ListenerHandle | None = None) -> int:
        """Remove one listener (by handle) or all listeners for the event. Returns how many were removed."""
        raise NotImplementedError

    @abstractmethod
    def listener_count(self, event: str) -> int:
        raise NotImplementedError

    @abstractmethod
    async def emit(self, event: str, data: Any) -> None:
        """Fire-and-forget send. Raises TransportDisconnected when not connected."""
        raise NotImplementedError

    @abstractmethod
    def add_state_listener(self, listener: StateListener) -> Callable[[], None]:
        """Observe (previous, current) state transitions. Returns a remover."""
        raise NotImplementedError
