"""
Shared fakes and fixtures for the backend ports.
"""

from __future__ import annotations

from typing import Any

import pytest

from salon_connect.application.ports.booking_api import BookingApiPort
from salon_connect.application.ports.chat_api import ChatApiPort
from salon_connect.application.ports.identity_store import IdentityStorePort
from salon_connect.application.ports.recommendations import RecommendationsPort


class FakeBookingApi(BookingApiPort):
    def __init__(
        self,
        with_owner: dict[str, Any] | None = None,
        plain: dict[str, Any] | None = None,
        create_response: dict[str, Any] | None = None,
        create_error: Exception | None = None,
    ) -> None:
        self.with_owner = with_owner
        self.plain = plain
        self.create_response = create_response if create_response is not None else {"success": True}
        self.create_error = create_error
        self.lookups: list[tuple[str, str]] = []
        self.posted: list[dict[str, Any]] = []

    async def get_salon_with_owner(self, salon_id: str) -> dict[str, Any] | None:
        self.lookups.append(("with-owner", salon_id))
        return self.with_owner

    async def get_salon(self, salon_id: str) -> dict[str, Any] | None:
        self.lookups.append(("plain", salon_id))
        return self.plain

    async def create_booking(self, body: dict[str, Any]) -> dict[str, Any]:
        self.posted.append(body)
        if self.create_error is not None:
            raise self.create_error
        return self.create_response


class FakeChatApi(ChatApiPort, RecommendationsPort):
    def __init__(self, history: Any = None, history_error: Exception | None = None) -> None:
        self.history = history if history is not None else {"messages": []}
        self.history_error = history_error
        self.mark_read_error: Exception | None = None
        self.conversations: Any = {"success": True, "conversations": []}
        self.conversations_error: Exception | None = None
        self.recommendations: Any = {"success": True, "recommendations": []}
        self.get_calls: list[str] = []
        self.mark_read_calls: list[tuple[str, str]] = []
        self.recommendation_calls: list[tuple[str, float, float, int]] = []

    async def get_messages(self, conversation_id: str) -> Any:
        self.get_calls.append(conversation_id)
        if self.history_error is not None:
            raise self.history_error
        return self.history

    async def mark_read(self, conversation_id: str, user_id: str) -> None:
        self.mark_read_calls.append((conversation_id, user_id))
        if self.mark_read_error is not None:
            raise self.mark_read_error

    async def list_conversations(self, user_id: str) -> dict[str, Any]:
        if self.conversations_error is not None:
            raise self.conversations_error
        return self.conversations

    async def fetch_recommendations(
        self,
        user_id: str,
        latitude: float,
        longitude: float,
        limit: int = 20,
    ) -> dict[str, Any]:
        self.recommendation_calls.append((user_id, latitude, longitude, limit))
        return self.recommendations


class FailingIdentityStore(IdentityStorePort):
    async def get_profile(self, user_id: str) -> dict[str, Any] | None:
        raise RuntimeError("firestore unavailable")


@pytest.fixture
def booking_api() -> FakeBookingApi:
    return FakeBookingApi()


@pytest.fixture
def chat_api() -> FakeChatApi:
    return FakeChatApi()


@pytest.fixture
def failing_identity_store() -> FailingIdentityStore:
    return FailingIdentityStore()
