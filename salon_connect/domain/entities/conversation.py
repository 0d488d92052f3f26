from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from salon_connect.domain.entities.message import ChatMessage


@dataclass
class Conversation:
    conversation_id: str
    participant_ids: tuple[str, ...]
    messages: list[ChatMessage] = field(default_factory=list)


@dataclass(frozen=True)
class TypingState:
    user_id: str
    is_typing: bool = False


@dataclass(frozen=True)
class CurrentBooking:
    booking_id: str | None
    name: str | None
    time: str | None
    avatar: str | None
    conversation_id: str | None
    receiver_id: str | None


@dataclass(frozen=True)
class ConversationSummary:
    conversation_id: str | None
    name: str | None
    last_message: str | None
    status: str | None
    salon_owner_id: str | None
    raw: dict[str, Any] = field(default_factory=dict)
