from __future__ import annotations

import logging
from dataclasses import dataclass, field

from salon_connect.application.dto.directory import decode_conversation_list
from salon_connect.application.exceptions import SalonConnectError
from salon_connect.application.ports.chat_api import ChatApiPort
from salon_connect.domain.entities.conversation import ConversationSummary, CurrentBooking


@dataclass(frozen=True)
class ConversationList:
    chats: list[ConversationSummary] = field(default_factory=list)
    current_booking: CurrentBooking | None = None


class ListConversationsUseCase:
    def __init__(self, chat_api: ChatApiPort) -> None:
        self._chat_api = chat_api
        self._logger = logging.getLogger(__name__)

    async def execute(self, user_id: str) -> ConversationList:
        try:
            body = await self._chat_api.list_conversations(user_id)
        except SalonConnectError as e:
            self._logger.error("Failed to load conversations", extra={"user_id": user_id, "error": str(e)})
            return ConversationList()

        chats, current = decode_conversation_list(body)
        self._logger.info(
            "Loaded conversations",
            extra={"user_id": user_id, "count": len(chats), "booking_id": current.booking_id if current else None},
        )
        return ConversationList(chats=chats, current_booking=current)
