from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ChatMessage:
    conversation_id: str
    sender_id: str
    receiver_id: str | None
    id: str | None = None  # server-assigned
    temp_id: str | None = None  # client-assigned while pending
    text: str | None = None
    image_url: str | None = None
    message_type: str = "text"  # "text" | "image"
    created_at: datetime | None = None
    delivered: bool = False
    read: bool = False

    @property
    def key(self) -> str:
        return self.id or self.temp_id or ""

    @property
    def status(self) -> str:
        if self.read:
            return "read"
        if self.delivered:
            return "delivered"
        if self.id:
            return "sent"
        return "pending"

    @property
    def is_pending(self) -> bool:
        return self.id is None
