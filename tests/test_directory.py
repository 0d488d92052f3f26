"""
Tests for the recommendation deck and conversation list.
"""

from __future__ import annotations

import pytest

from salon_connect.application.dto.directory import decode_recommendations, format_location, score_to_rating
from salon_connect.application.exceptions import ServerUnreachable
from salon_connect.application.use_cases.fetch_recommendations import FetchRecommendationsUseCase
from salon_connect.application.use_cases.list_conversations import ListConversationsUseCase


def test_score_to_rating_scales():
    assert score_to_rating(0.8) == pytest.approx(4.0)
    assert score_to_rating(90) == pytest.approx(4.5)
    assert score_to_rating(250) == 5.0
    assert score_to_rating("n/a") == 0.0


def test_format_location():
    assert format_location({"streetAddress": "1 Main", "city": "Bangkok", "province": ""}) == "1 Main, Bangkok"
    assert format_location("Sukhumvit") == "Sukhumvit"
    assert format_location(None) == "Location unavailable"


def test_decode_recommendations_drops_unbookable_items():
    body = {
        "success": True,
        "data": [{"salon": {"_id": "s0", "salonName": "Ignored"}, "ownerId": "x"}],
        "recommendations": [
            {
                "salon": {"_id": "s1", "salonName": "Calm", "priceRange": "฿1,200", "owner": {"_id": "o1"}},
                "matchScore": 0.9,
                "reasons": ["Near you"],
            },
            {"salon": {"_id": "s2", "salonName": "No owner"}},
        ],
    }

    items = decode_recommendations(body)

    assert [r.salon_id for r in items] == ["s1"]
    assert items[0].owner_id == "o1"
    assert items[0].price == 1200
    assert items[0].rating == pytest.approx(4.5)
    selection = items[0].to_selection()
    assert selection.salon_id == "s1"
    assert selection.owner_id == "o1"


def test_decode_recommendations_requires_success():
    with pytest.raises(ValueError):
        decode_recommendations({"recommendations": []})


@pytest.mark.asyncio
async def test_fetch_recommendations_passes_location(chat_api):
    chat_api.recommendations = {
        "success": True,
        "recommendation": [{"salon": {"_id": "s1", "salonName": "Calm", "ownerId": "o1"}}],
    }

    items = await FetchRecommendationsUseCase(chat_api).execute("u1", 13.7, 100.5)

    assert [r.name for r in items] == ["Calm"]
    assert chat_api.recommendation_calls == [("u1", 13.7, 100.5, 20)]


@pytest.mark.asyncio
async def test_conversation_list_with_current_booking(chat_api):
    chat_api.conversations = {
        "success": True,
        "chats": [
            {"_id": "c1", "salonName": "Calm", "lastMessage": {"text": "See you"}, "status": "pending"},
            {"_id": "c2", "salonName": "Zen", "bookingStatus": "accepted", "salonOwnerId": "o2"},
        ],
    }

    listing = await ListConversationsUseCase(chat_api).execute("u1")

    assert [c.conversation_id for c in listing.chats] == ["c1", "c2"]
    assert listing.chats[0].last_message == "See you"
    assert listing.current_booking.conversation_id == "c2"
    assert listing.current_booking.receiver_id == "o2"


@pytest.mark.asyncio
async def test_conversation_list_failure_is_empty(chat_api):
    chat_api.conversations_error = ServerUnreachable("timed out")

    listing = await ListConversationsUseCase(chat_api).execute("u1")

    assert listing.chats == []
    assert listing.current_booking is None
