from __future__ import annotations

import logging

from salon_connect.application.ports.transport import RealtimeTransportPort
from salon_connect.domain.entities.session import SessionIdentity


class SessionContext:
    """
    Holds the signed-in identity and the session's shared transport.

    Async callbacks read `identity` through this object when they run instead
    of capturing it when they are created, so a sign-out or account switch
    between scheduling and running is always observed.
    """

    def __init__(self, transport: RealtimeTransportPort) -> None:
        self._transport = transport
        self._identity: SessionIdentity | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def identity(self) -> SessionIdentity | None:
        return self._identity

    @property
    def transport(self) -> RealtimeTransportPort:
        return self._transport

    def sign_in(self, identity: SessionIdentity) -> None:
        self._identity = identity
        self._logger.info("Session started", extra={"user_id": identity.user_id})

    async def sign_out(self) -> None:
        user_id = self._identity.user_id if self._identity else None
        self._identity = None
        await self._transport.disconnect()
        self._logger.info("Session ended", extra={"user_id": user_id})
