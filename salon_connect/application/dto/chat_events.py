from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from salon_connect.application.utils.owner_identity import normalize_identifier
from salon_connect.application.utils.payload_keys import first_present
from salon_connect.domain.entities.message import ChatMessage

logger = logging.getLogger(__name__)


class MessageDTO(BaseModel):
    """A message as the server sends it in history loads and socket pushes."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    temp_id: str | None = None
    conversation_id: str | None = None
    sender_id: str | None = None
    receiver_id: str | None = None
    text: str | None = None
    image_url: str | None = None
    message_type: str | None = None
    created_at: datetime | None = None
    is_delivered: bool = False
    is_read: bool = False

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {
            "id": normalize_identifier(first_present(data, ("_id", "id"))),
            "temp_id": normalize_identifier(data.get("tempId")),
            "conversation_id": normalize_identifier(first_present(data, ("conversationId", "conversation"))),
            "sender_id": normalize_identifier(first_present(data, (("sender", "_id"), "senderId", "sender"))),
            "receiver_id": normalize_identifier(
                first_present(data, (("receiver", "_id"), "receiverId", "receiver"))
            ),
            "text": first_present(data, ("text", "message")),
            "image_url": first_present(data, ("imageUrl", "image")),
            "message_type": data.get("messageType"),
            "created_at": first_present(data, ("createdAt", "timestamp")),
            "is_delivered": bool(data.get("isDelivered") or False),
            "is_read": bool(data.get("isRead") or False),
        }

    def to_entity(self, default_conversation_id: str) -> ChatMessage:
        is_read = self.is_read
        return ChatMessage(
            conversation_id=self.conversation_id or default_conversation_id,
            sender_id=self.sender_id or "",
            receiver_id=self.receiver_id,
            id=self.id,
            temp_id=self.temp_id,
            text=self.text,
            image_url=self.image_url,
            message_type=self.message_type or ("image" if self.image_url and not self.text else "text"),
            created_at=self.created_at,
            delivered=self.is_delivered or is_read,
            read=is_read,
        )


class MessageEnvelopeDTO(BaseModel):
    """`receive_message` / `message_sent` payload: {"message": {...}}."""

    message: MessageDTO

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_message(cls, data: Any) -> Any:
        if isinstance(data, dict) and not isinstance(data.get("message"), dict):
            return {"message": data}
        return data


class MessageStatusDTO(BaseModel):
    message_id: str = Field(validation_alias="messageId")
    is_delivered: bool | None = Field(default=None, validation_alias="isDelivered")
    is_read: bool | None = Field(default=None, validation_alias="isRead")


class UserStatusDTO(BaseModel):
    user_id: str = Field(validation_alias="userId")
    is_online: bool = Field(default=False, validation_alias="isOnline")


class UserTypingDTO(BaseModel):
    user_id: str = Field(validation_alias="userId")
    is_typing: bool = Field(default=False, validation_alias="isTyping")


def decode_history(body: Any) -> list[MessageDTO]:
    """
    History arrives as {"messages": [...]} or as a bare list.

    Items that fail validation are logged and skipped; a body with no
    message list at all raises ValueError.
    """
    items = first_present(body, ("messages", "data")) if isinstance(body, dict) else body
    if not isinstance(items, list):
        raise ValueError("message history is not a list")
    decoded = []
    for item in items:
        try:
            decoded.append(MessageDTO.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping malformed history item", extra={"event": "history", "error": str(e)})
    return decoded
