from __future__ import annotations

import inspect
import itertools
import logging
from typing import Any, Callable

from salon_connect.application.ports.transport import (
    EventHandler,
    ListenerHandle,
    RealtimeTransportPort,
    StateListener,
)
from salon_connect.domain.entities.connection_state import ConnectionState


class ListenerRegistryTransport(RealtimeTransportPort):
    """
    Listener bookkeeping shared by the transport adapters.

    Several components may listen to the same event; each registration gets
    its own handle so one component can detach without touching the others.
    Dispatch walks a snapshot of the listener list, so (de)registering from
    inside a handler never drops the event currently being delivered.
    """

    def __init__(self) -> None:
        self._state = ConnectionState.disconnected
        self._user_id: str | None = None
        self._listeners: dict[str, list[tuple[int, EventHandler]]] = {}
        self._state_listeners: list[StateListener] = []
        self._tokens = itertools.count(1)
        self._logger = logging.getLogger(self.__class__.__module__)

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def user_id(self) -> str | None:
        return self._user_id

    def on(self, event: str, handler: EventHandler) -> ListenerHandle:
        entries = self._listeners.setdefault(event, [])
        if any(existing == handler for _, existing in entries):
            self._logger.warning(
                "Handler registered twice for the same event; it will run once per registration",
                extra={"event": event},
            )
        token = next(self._tokens)
        entries.append((token, handler))
        self._on_listener_added(event)
        return ListenerHandle(event=event, token=token)

    def off(self, event: str, handle: ListenerHandle | None = None) -> int:
        entries = self._listeners.get(event)
        if not entries:
            return 0
        if handle is None:
            removed = len(entries)
            del self._listeners[event]
            return removed
        kept = [(token, h) for token, h in entries if token != handle.token]
        removed = len(entries) - len(kept)
        if kept:
            self._listeners[event] = kept
        else:
            del self._listeners[event]
        return removed

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def add_state_listener(self, listener: StateListener) -> Callable[[], None]:
        self._state_listeners.append(listener)

        def remove() -> None:
            if listener in self._state_listeners:
                self._state_listeners.remove(listener)

        return remove

    def _on_listener_added(self, event: str) -> None:
        """Hook for adapters that must bind new event names on the wire."""

    def _clear_listeners(self) -> None:
        self._listeners.clear()

    def _set_state(self, new_state: ConnectionState) -> None:
        previous = self._state
        if previous is new_state:
            return
        self._state = new_state
        self._logger.info(
            "Connection state changed",
            extra={"state": new_state.value, "user_id": self._user_id},
        )
        for listener in list(self._state_listeners):
            try:
                listener(previous, new_state)
            except Exception:
                self._logger.exception("State listener failed", extra={"state": new_state.value})

    async def _dispatch(self, event: str, data: Any) -> None:
        for _, handler in list(self._listeners.get(event, [])):
            try:
                result = handler(data)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                self._logger.exception("Event handler failed", extra={"event": event})
