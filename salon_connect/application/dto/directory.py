"""Decoding for the recommendation and conversation list endpoints."""

from __future__ import annotations

import re
from typing import Any

from salon_connect.application.utils.owner_identity import (
    SELECTION_OWNER_PATHS,
    extract_owner_id,
    normalize_identifier,
)
from salon_connect.application.utils.payload_keys import first_present
from salon_connect.domain.entities.conversation import ConversationSummary, CurrentBooking
from salon_connect.domain.entities.recommendation import Recommendation

RECOMMENDATION_LIST_KEYS = ("recommendations", "data", "recommendation")
CONVERSATION_LIST_KEYS = ("conversations", "chats")


def score_to_rating(score: Any) -> float:
    """Map a 0..1 match score or a 0..100 score onto a 0..5 rating."""
    try:
        value = float(score)
    except (TypeError, ValueError):
        return 0.0
    if value <= 1:
        return value * 5
    return min(value / 100 * 5, 5.0)


def format_location(location: Any) -> str:
    if not location:
        return "Location unavailable"
    if isinstance(location, str):
        return location
    if isinstance(location, dict):
        parts = [str(location[k]) for k in ("streetAddress", "city", "province") if location.get(k)]
        if parts:
            return ", ".join(parts)
    return "Location unavailable"


def parse_price(salon: dict[str, Any]) -> int:
    price_range = salon.get("priceRange")
    if isinstance(price_range, str):
        digits = re.sub(r"\D", "", price_range)
        return int(digits) if digits else 0
    if isinstance(price_range, (int, float)) and not isinstance(price_range, bool):
        return int(price_range)
    try:
        return int(float(salon.get("price") or 0))
    except (TypeError, ValueError):
        return 0


def decode_recommendations(body: Any) -> list[Recommendation]:
    if not isinstance(body, dict) or not body.get("success"):
        raise ValueError("Invalid response format")

    items = first_present(body, RECOMMENDATION_LIST_KEYS)
    if not isinstance(items, list):
        return []

    out: list[Recommendation] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        salon = item.get("salon") if isinstance(item.get("salon"), dict) else item
        owner_id = extract_owner_id({"ownerId": item.get("ownerId"), "salon": salon}, SELECTION_OWNER_PATHS)
        if not owner_id:
            continue  # cannot be booked
        salon_id = normalize_identifier(first_present(salon, ("_id", "salonId", "id"))) or normalize_identifier(
            item.get("_id")
        )
        score = first_present(item, ("matchScore", "score", "match"), default=0)
        services = first_present(salon, ("typesOfMassages", "typesOfMassage", "types", "services"), default=[])
        out.append(
            Recommendation(
                salon_id=salon_id or str(index),
                name=str(first_present(salon, ("salonName", "name"), default="Unknown Studio")),
                owner_id=owner_id,
                price=parse_price(salon),
                rating=score_to_rating(score),
                score=float(score) if isinstance(score, (int, float)) else 0.0,
                location=format_location(salon.get("location") or item.get("location")),
                services=tuple(str(s) for s in services) if isinstance(services, list) else (),
                image_url=first_present(salon, ("salonImage", "imageUrl", "salonImageUrl")),
                reasons=tuple(str(r) for r in item.get("reasons") or []),
                is_subscribed=bool(salon.get("isSubscribed", False)),
                salon=dict(salon),
            )
        )
    return out


def decode_conversation(item: dict[str, Any]) -> ConversationSummary:
    last_message = item.get("lastMessage")
    if isinstance(last_message, dict):
        last_message = last_message.get("text")
    return ConversationSummary(
        conversation_id=normalize_identifier(first_present(item, ("conversationId", "_id", "id"))),
        name=first_present(item, ("salonName", "name")),
        last_message=last_message,
        status=first_present(item, ("status", "bookingStatus")),
        salon_owner_id=normalize_identifier(first_present(item, ("salonOwnerId", "receiverId"))),
        raw=dict(item),
    )


def decode_current_booking(body: dict[str, Any], chats: list[dict[str, Any]]) -> CurrentBooking | None:
    current = body.get("currentBooking")
    if isinstance(current, dict):
        source = current
    else:
        source = next(
            (c for c in chats if c.get("status") == "accepted" or c.get("bookingStatus") == "accepted"),
            None,
        )
        if source is None:
            return None
    return CurrentBooking(
        booking_id=normalize_identifier(first_present(source, ("id", "_id"))),
        name=first_present(source, ("salonName", "name")),
        time=first_present(source, ("appointmentTime", "time")),
        avatar=first_present(source, ("salonImage", "avatar")),
        conversation_id=normalize_identifier(first_present(source, ("conversationId", "id", "_id"))),
        receiver_id=normalize_identifier(first_present(source, ("salonOwnerId", "receiverId"))),
    )


def decode_conversation_list(body: Any) -> tuple[list[ConversationSummary], CurrentBooking | None]:
    if not isinstance(body, dict) or not body.get("success"):
        return [], None
    items = first_present(body, CONVERSATION_LIST_KEYS, default=[])
    chats = [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []
    return [decode_conversation(c) for c in chats], decode_current_booking(body, chats)
