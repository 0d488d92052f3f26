#!/usr/bin/env python3
"""
Interactive local harness against the configured backend.

Usage:
  python3 scripts/chat_local.py <user_id> [email]

What it does:
- Signs in with the given Firebase uid and connects the shared realtime transport
- Lists recommendations and submits a booking for the one you pick
- Prints booking push events (accepted / rejected / chat room created) as they arrive
- Opens a chat in a conversation and sends what you type
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from salon_connect.application.exceptions import SalonConnectError, TransportDisconnected
from salon_connect.application.use_cases.booking_events import BookingHandlers
from salon_connect.application.use_cases.chat_session import ChatSessionEngine
from salon_connect.core.log_format import configure_logging
from salon_connect.domain.entities.message import ChatMessage
from salon_connect.domain.entities.recommendation import Recommendation
from salon_connect.domain.entities.session import SessionIdentity
from salon_connect.wiring.dependencies import (
    get_booking_event_router,
    get_chat_session,
    get_fetch_recommendations_use_case,
    get_list_conversations_use_case,
    get_session_context,
    get_submit_booking_use_case,
)

DEFAULT_LAT = 13.7563
DEFAULT_LON = 100.5018


def _print_help() -> None:
    print("Commands:")
    print("  /recs            -> list recommendations")
    print("  /book <n>        -> book recommendation number n")
    print("  /chats           -> list conversations")
    print("  /open <convId> <peerId> -> open a chat")
    print("  /close           -> leave the open chat")
    print("  /quit            -> exit")
    print("Any other text is sent to the open chat.")


def _print_message(message: ChatMessage, user_id: str) -> None:
    who = "me" if message.sender_id == user_id else "them"
    body = message.text if message.text is not None else f"[image] {message.image_url}"
    print(f"  ({who}) {body}  [{message.status}]")


async def _read_line() -> str:
    return (await asyncio.to_thread(input, "\n> ")).strip()


async def main(user_id: str, email: str | None) -> None:
    configure_logging()
    context = get_session_context()
    context.sign_in(SessionIdentity(user_id=user_id, email=email))

    router = get_booking_event_router(context)
    unsubscribe = await router.subscribe(
        user_id,
        BookingHandlers(
            on_accepted=lambda o: print(f"\n[booking accepted] booking={o.booking_id} conversation={o.conversation_id}"),
            on_rejected=lambda o: print(f"\n[booking rejected] booking={o.booking_id}"),
            on_chat_room_created=lambda o: print(
                f"\n[chat room] conversation={o.conversation_id} owner={o.salon_owner_id}"
            ),
            on_status_update=lambda o: print(f"\n[booking status] booking={o.booking_id} status={o.status}"),
        ),
    )
    print(f"Transport: {context.transport.state.value}")
    _print_help()

    recs: list[Recommendation] = []
    chat: ChatSessionEngine | None = None
    try:
        while True:
            try:
                line = await _read_line()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                return
            if not line:
                continue

            cmd, _, arg = line.partition(" ")
            if cmd in ("/quit", "/exit"):
                print("Bye!")
                return
            if cmd == "/help":
                _print_help()
            elif cmd == "/recs":
                try:
                    recs = await get_fetch_recommendations_use_case().execute(user_id, DEFAULT_LAT, DEFAULT_LON)
                except (SalonConnectError, ValueError) as e:
                    print(f"Could not load recommendations: {e}")
                    continue
                for i, rec in enumerate(recs, 1):
                    print(f"  {i}. {rec.name} ({rec.rating:.1f}) {rec.location}")
            elif cmd == "/book":
                if not arg.isdigit() or not 1 <= int(arg) <= len(recs):
                    print("Pick a number from /recs")
                    continue
                result = await get_submit_booking_use_case(context).execute(recs[int(arg) - 1].to_selection())
                if result.ok:
                    print(f"Booking request sent: {result.ack.booking_id} ({result.ack.status})")
                else:
                    print(f"Booking failed: {result.error.user_message}")
            elif cmd == "/chats":
                listing = await get_list_conversations_use_case().execute(user_id)
                for summary in listing.chats:
                    print(f"  {summary.conversation_id} {summary.name} peer={summary.salon_owner_id}")
                if listing.current_booking:
                    print(f"Current booking: {listing.current_booking.name} {listing.current_booking.time}")
            elif cmd == "/open":
                conversation_id, _, peer_id = arg.partition(" ")
                if not conversation_id:
                    print("Usage: /open <convId> <peerId>")
                    continue
                if chat is not None:
                    await chat.close()
                chat = get_chat_session(
                    context,
                    conversation_id,
                    peer_id or None,
                    on_error=lambda error: print(f"\n[message error] {error}"),
                )
                chat.open()
                history = await chat.load_history()
                if not history.ok:
                    print(f"Failed to load messages: {history.error.user_message}")
                for message in chat.messages[-10:]:
                    _print_message(message, user_id)
            elif cmd == "/close":
                if chat is not None:
                    await chat.close()
                    chat = None
            elif chat is None:
                print("Open a chat first (/open)")
            else:
                try:
                    await chat.send_text(line)
                except TransportDisconnected as e:
                    print(e.user_message)
    finally:
        if chat is not None:
            await chat.close()
        unsubscribe()
        await context.sign_out()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None))
