from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BookingApiPort(ABC):
    @abstractmethod
    async def get_salon_with_owner(self, salon_id: str) -> dict[str, Any] | None:
        """Salon detail with the owner populated. None when the lookup fails."""
        raise NotImplementedError

    @abstractmethod
    async def get_salon(self, salon_id: str) -> dict[str, Any] | None:
        """Plain salon detail. None when the lookup fails."""
        raise NotImplementedError

    @abstractmethod
    async def create_booking(self, body: dict[str, Any]) -> dict[str, Any]:
        """
        Create a booking.
        Raises:
            ServerUnreachable: timeout or network failure
            ServerRejected: non-2xx response (payload is the parsed JSON or raw text)
        """
        raise NotImplementedError
