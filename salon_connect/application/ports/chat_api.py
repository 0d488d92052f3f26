from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ChatApiPort(ABC):
    @abstractmethod
    async def get_messages(self, conversation_id: str) -> Any:
        """Raw message history body. Raises ServerUnreachable / ServerRejected."""
        raise NotImplementedError

    @abstractmethod
    async def mark_read(self, conversation_id: str, user_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def list_conversations(self, user_id: str) -> dict[str, Any]:
        raise NotImplementedError
