from __future__ import annotations

import logging
from typing import Any

import httpx

from salon_connect.application.exceptions import ServerRejected, ServerUnreachable
from salon_connect.application.ports.booking_api import BookingApiPort
from salon_connect.application.ports.chat_api import ChatApiPort
from salon_connect.application.ports.recommendations import RecommendationsPort
from salon_connect.core.config import settings


def _error_payload(resp: httpx.Response) -> Any:
    """Structured JSON when the server sent it, raw text otherwise."""
    try:
        return resp.json()
    except ValueError:
        return resp.text or None


class BackendClient(BookingApiPort, ChatApiPort, RecommendationsPort):
    """REST client for the booking/chat backend (`/api/v1`)."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout or settings.HTTP_TIMEOUT,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            self._logger.warning("Backend request timed out", extra={"event": path, "error": str(e)})
            raise ServerUnreachable(f"{method} {path} timed out") from e
        except httpx.TransportError as e:
            self._logger.warning("Backend unreachable", extra={"event": path, "error": str(e)})
            raise ServerUnreachable(f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            payload = _error_payload(resp)
            self._logger.error(
                "Backend request rejected",
                extra={"event": path, "status": resp.status_code, "error": payload},
            )
            raise ServerRejected(resp.status_code, payload)

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise ServerRejected(resp.status_code, resp.text) from e

    async def _lookup(self, path: str) -> dict[str, Any] | None:
        try:
            body = await self._request("GET", path)
        except (ServerUnreachable, ServerRejected) as e:
            self._logger.info("Salon lookup failed", extra={"event": path, "error": str(e)})
            return None
        return body if isinstance(body, dict) else None

    async def get_salon_with_owner(self, salon_id: str) -> dict[str, Any] | None:
        return await self._lookup(f"/salons/{salon_id}/with-owner")

    async def get_salon(self, salon_id: str) -> dict[str, Any] | None:
        return await self._lookup(f"/salons/{salon_id}")

    async def create_booking(self, body: dict[str, Any]) -> dict[str, Any]:
        result = await self._request("POST", "/bookings/create-booking", json=body)
        return result if isinstance(result, dict) else {"data": result}

    async def get_messages(self, conversation_id: str) -> Any:
        return await self._request("GET", f"/messages/{conversation_id}")

    async def mark_read(self, conversation_id: str, user_id: str) -> None:
        await self._request(
            "POST",
            "/messages/mark-read",
            json={"conversationId": conversation_id, "userId": user_id},
            timeout=settings.MARK_READ_TIMEOUT,
        )

    async def list_conversations(self, user_id: str) -> dict[str, Any]:
        body = await self._request("GET", f"/conversations/{user_id}")
        return body if isinstance(body, dict) else {}

    async def fetch_recommendations(
        self,
        user_id: str,
        latitude: float,
        longitude: float,
        limit: int = 20,
    ) -> dict[str, Any]:
        body = await self._request(
            "GET",
            f"/recommendations/{user_id}",
            params={"limit": limit, "latitude": latitude, "longitude": longitude},
        )
        return body if isinstance(body, dict) else {}
