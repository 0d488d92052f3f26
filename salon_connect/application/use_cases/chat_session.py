from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError

from salon_connect.application.dto.chat_events import (
    MessageEnvelopeDTO,
    MessageStatusDTO,
    UserStatusDTO,
    UserTypingDTO,
    decode_history,
)
from salon_connect.application.exceptions import BackendError, SalonConnectError, TransportDisconnected
from salon_connect.application.ports.chat_api import ChatApiPort
from salon_connect.application.ports.transport import ListenerHandle, RealtimeTransportPort
from salon_connect.domain.entities.connection_state import ConnectionState
from salon_connect.domain.entities.conversation import Conversation, TypingState
from salon_connect.domain.entities.message import ChatMessage

UpdateCallback = Callable[[list[ChatMessage]], None]
ErrorCallback = Callable[[Any], None]


@dataclass(frozen=True)
class HistoryResult:
    messages: list[ChatMessage] = field(default_factory=list)
    error: SalonConnectError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_temp_id() -> str:
    return uuid.uuid4().hex


class ChatSessionEngine:
    """
    Live message sequence for one conversation.

    The sequence is insertion ordered: optimistic sends and received
    messages go to the tail and server confirmations update entries in
    place. Delivery and read flags only ever move from False to True.

    The transport is borrowed; close() detaches this engine's listeners
    and leaves the connection to its owner.
    """

    def __init__(
        self,
        transport: RealtimeTransportPort,
        chat_api: ChatApiPort,
        conversation_id: str,
        user_id: str,
        peer_id: str | None,
        typing_idle_seconds: float = 2.0,
        temp_id_factory: Callable[[], str] = _new_temp_id,
        on_update: UpdateCallback | None = None,
        on_error: ErrorCallback | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.conversation_id = conversation_id
        self.user_id = user_id
        self.peer_id = peer_id
        self._transport = transport
        self._chat_api = chat_api
        self._typing_idle_seconds = typing_idle_seconds
        self._temp_id_factory = temp_id_factory
        self._on_update = on_update
        self._on_error = on_error
        self._clock = clock

        self._messages: list[ChatMessage] = []
        self._handles: list[ListenerHandle] = []
        self._remove_state_listener: Callable[[], None] | None = None
        self._typing = False
        self._typing_timer: asyncio.TimerHandle | None = None
        self._background: set[asyncio.Task] = set()
        self.peer_online = False
        self.peer_typing = False
        self._logger = logging.getLogger(__name__)

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def conversation(self) -> Conversation:
        participants = (self.user_id, self.peer_id) if self.peer_id else (self.user_id,)
        return Conversation(self.conversation_id, participant_ids=participants, messages=self.messages)

    @property
    def peer_typing_state(self) -> TypingState:
        return TypingState(user_id=self.peer_id or "", is_typing=self.peer_typing)

    @property
    def is_open(self) -> bool:
        return bool(self._handles)

    def open(self) -> None:
        if self.is_open:
            return
        handlers = {
            "receive_message": self._on_receive_message,
            "message_sent": self._on_message_sent,
            "message_status_update": self._on_status_update,
            "user_status": self._on_user_status,
            "user_typing": self._on_user_typing,
            "message_error": self._on_message_error,
        }
        self._handles = [self._transport.on(event, handler) for event, handler in handlers.items()]
        self._remove_state_listener = self._transport.add_state_listener(self._on_state_change)
        self._logger.info(
            "Chat session opened",
            extra={"conversation_id": self.conversation_id, "user_id": self.user_id},
        )

    async def close(self) -> None:
        self._cancel_typing_timer()
        for handle in self._handles:
            self._transport.off(handle.event, handle)
        self._handles = []
        if self._remove_state_listener is not None:
            self._remove_state_listener()
            self._remove_state_listener = None
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        self._background.clear()
        self._logger.info("Chat session closed", extra={"conversation_id": self.conversation_id})

    async def load_history(self) -> HistoryResult:
        try:
            body = await self._chat_api.get_messages(self.conversation_id)
            incoming = [dto.to_entity(self.conversation_id) for dto in decode_history(body)]
        except SalonConnectError as e:
            self._logger.error(
                "Failed to load messages",
                extra={"conversation_id": self.conversation_id, "error": str(e)},
            )
            return HistoryResult(error=e)
        except ValueError as e:
            self._logger.error(
                "Malformed message history",
                extra={"conversation_id": self.conversation_id, "error": str(e)},
            )
            return HistoryResult(error=BackendError("Malformed message history"))

        self._merge_history(incoming)
        self._logger.info(
            "Loaded messages",
            extra={"conversation_id": self.conversation_id, "count": len(incoming)},
        )

        try:
            await self._chat_api.mark_read(self.conversation_id, self.user_id)
        except SalonConnectError as e:
            self._logger.warning(
                "Could not mark messages as read",
                extra={"conversation_id": self.conversation_id, "error": str(e)},
            )
        return HistoryResult(messages=self.messages)

    async def send_text(self, text: str) -> ChatMessage:
        if not text or not text.strip():
            raise ValueError("Message text is empty")
        message = await self._send(text=text, message_type="text")
        await self._emit_typing(False)
        return message

    async def send_image(self, image_url: str) -> ChatMessage:
        if not image_url:
            raise ValueError("Image URL is empty")
        return await self._send(image_url=image_url, message_type="image")

    async def set_typing(self, is_typing: bool) -> None:
        if not self._transport.is_connected:
            self._cancel_typing_timer()
            self._typing = False
            return

        if not is_typing:
            self._cancel_typing_timer()
            if self._typing:
                await self._emit_typing(False)
            return

        if not self._typing:
            await self._emit_typing(True)
        self._restart_typing_timer()

    def apply_status_update(
        self,
        message_id: str,
        delivered: bool | None = None,
        read: bool | None = None,
    ) -> bool:
        """Merge receipt flags into the message. Returns True if anything changed."""
        index = self._index_of(message_id)
        if index is None:
            return False
        current = self._messages[index]
        merged = replace(
            current,
            delivered=current.delivered or bool(delivered) or bool(read),
            read=current.read or bool(read),
        )
        if merged == current:
            return False
        self._messages[index] = merged
        self._notify()
        return True

    async def _send(self, **content: Any) -> ChatMessage:
        if not self._transport.is_connected:
            raise TransportDisconnected()

        temp_id = self._temp_id_factory()
        message = ChatMessage(
            conversation_id=self.conversation_id,
            sender_id=self.user_id,
            receiver_id=self.peer_id,
            temp_id=temp_id,
            created_at=self._clock(),
            **content,
        )
        self._messages.append(message)
        self._notify()

        payload: dict[str, Any] = {
            "conversationId": self.conversation_id,
            "senderId": self.user_id,
            "receiverId": self.peer_id,
            "messageType": message.message_type,
            "tempId": temp_id,
        }
        if message.text is not None:
            payload["text"] = message.text
        if message.image_url is not None:
            payload["imageUrl"] = message.image_url
        try:
            await self._transport.emit("send_message", payload)
        except Exception:
            self._messages = [m for m in self._messages if m is not message]
            self._notify()
            raise
        self._logger.info(
            "Message sent",
            extra={"conversation_id": self.conversation_id, "message_id": temp_id},
        )
        return message

    async def _on_receive_message(self, payload: Any) -> None:
        try:
            dto = MessageEnvelopeDTO.model_validate(payload).message
        except ValidationError as e:
            self._logger.warning("Dropping malformed message", extra={"event": "receive_message", "error": str(e)})
            return
        if dto.conversation_id and dto.conversation_id != self.conversation_id:
            return
        if not dto.id:
            self._logger.warning("Dropping message without id", extra={"event": "receive_message"})
            return
        if self._index_of(dto.id) is not None:
            self._logger.debug("Duplicate message ignored", extra={"message_id": dto.id})
            return

        self._messages.append(dto.to_entity(self.conversation_id))
        self._notify()

        if not self._transport.is_connected:
            return
        try:
            await self._transport.emit("message_delivered", dto.id)
            await self._transport.emit(
                "message_read",
                {"messageId": dto.id, "conversationId": self.conversation_id, "userId": self.user_id},
            )
        except TransportDisconnected:
            self._logger.warning("Receipts not sent; connection lost", extra={"message_id": dto.id})

    async def _on_message_sent(self, payload: Any) -> None:
        try:
            dto = MessageEnvelopeDTO.model_validate(payload).message
        except ValidationError as e:
            self._logger.warning("Dropping malformed confirmation", extra={"event": "message_sent", "error": str(e)})
            return
        if not dto.temp_id:
            return
        index = next(
            (i for i, m in enumerate(self._messages) if m.is_pending and m.temp_id == dto.temp_id),
            None,
        )
        if index is None:
            self._logger.debug("No pending message for confirmation", extra={"message_id": dto.temp_id})
            return

        pending = self._messages[index]
        self._messages[index] = replace(
            pending,
            id=dto.id,
            created_at=dto.created_at or pending.created_at,
            delivered=pending.delivered or dto.is_delivered or dto.is_read,
            read=pending.read or dto.is_read,
        )
        # a history reload may already have appended the server copy
        if dto.id:
            self._messages = [
                m for i, m in enumerate(self._messages) if i == index or m.id != dto.id
            ]
        self._notify()

    def _on_status_update(self, payload: Any) -> None:
        try:
            dto = MessageStatusDTO.model_validate(payload)
        except ValidationError as e:
            self._logger.warning(
                "Dropping malformed status update", extra={"event": "message_status_update", "error": str(e)}
            )
            return
        self.apply_status_update(dto.message_id, delivered=dto.is_delivered, read=dto.is_read)

    def _on_user_status(self, payload: Any) -> None:
        try:
            dto = UserStatusDTO.model_validate(payload)
        except ValidationError:
            return
        if dto.user_id == self.peer_id and dto.is_online != self.peer_online:
            self.peer_online = dto.is_online
            self._notify()

    def _on_user_typing(self, payload: Any) -> None:
        try:
            dto = UserTypingDTO.model_validate(payload)
        except ValidationError:
            return
        if dto.user_id == self.peer_id and dto.is_typing != self.peer_typing:
            self.peer_typing = dto.is_typing
            self._notify()

    def _on_message_error(self, payload: Any) -> None:
        error = payload.get("error") if isinstance(payload, dict) else payload
        self._logger.error("Message error", extra={"conversation_id": self.conversation_id, "error": str(error)})
        if self._on_error is not None:
            try:
                self._on_error(error)
            except Exception:
                self._logger.exception("Error callback failed")

    def _on_state_change(self, previous: ConnectionState, current: ConnectionState) -> None:
        if current is not ConnectionState.connected or previous is ConnectionState.connected:
            return
        self._logger.info("Reconnected; reloading messages", extra={"conversation_id": self.conversation_id})
        task = asyncio.get_running_loop().create_task(self.load_history())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _merge_history(self, incoming: list[ChatMessage]) -> None:
        for message in incoming:
            index = self._index_of(message.id) if message.id else None
            if index is None and message.temp_id:
                index = next(
                    (i for i, m in enumerate(self._messages) if m.is_pending and m.temp_id == message.temp_id),
                    None,
                )
            if index is None and message.id and message.sender_id == self.user_id:
                # the message_sent echo was lost; the oldest matching pending send is this one
                index = next(
                    (
                        i
                        for i, m in enumerate(self._messages)
                        if m.is_pending
                        and m.sender_id == self.user_id
                        and m.text == message.text
                        and m.image_url == message.image_url
                    ),
                    None,
                )
            if index is None:
                self._messages.append(message)
                continue
            current = self._messages[index]
            self._messages[index] = replace(
                current,
                id=current.id or message.id,
                created_at=current.created_at or message.created_at,
                delivered=current.delivered or message.delivered or message.read,
                read=current.read or message.read,
            )
        self._notify()

    def _index_of(self, message_id: str | None) -> int | None:
        if not message_id:
            return None
        return next((i for i, m in enumerate(self._messages) if m.id == message_id), None)

    async def _emit_typing(self, is_typing: bool) -> None:
        self._typing = is_typing
        if not is_typing:
            self._cancel_typing_timer()
        if not self._transport.is_connected:
            return
        try:
            await self._transport.emit(
                "typing",
                {"userId": self.user_id, "receiverId": self.peer_id, "isTyping": is_typing},
            )
        except TransportDisconnected:
            self._logger.debug("Typing indicator not sent; connection lost")

    def _restart_typing_timer(self) -> None:
        self._cancel_typing_timer()
        loop = asyncio.get_running_loop()
        self._typing_timer = loop.call_later(self._typing_idle_seconds, self._on_typing_idle)

    def _cancel_typing_timer(self) -> None:
        if self._typing_timer is not None:
            self._typing_timer.cancel()
            self._typing_timer = None

    def _on_typing_idle(self) -> None:
        self._typing_timer = None
        if not self._typing:
            return
        task = asyncio.get_running_loop().create_task(self._emit_typing(False))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _notify(self) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(self.messages)
        except Exception:
            self._logger.exception("Update callback failed", extra={"conversation_id": self.conversation_id})
