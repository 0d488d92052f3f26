from __future__ import annotations

import logging

from salon_connect.application.dto.directory import decode_recommendations
from salon_connect.application.ports.recommendations import RecommendationsPort
from salon_connect.domain.entities.recommendation import Recommendation


class FetchRecommendationsUseCase:
    """
    Loads the swipe deck for a user.

    Items that cannot be booked (no resolvable owner) are dropped here, so
    every card handed to the submitter already carries an owner id.
    Errors propagate; the caller decides how to present them.
    """

    def __init__(self, recommendations: RecommendationsPort) -> None:
        self._recommendations = recommendations
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        user_id: str,
        latitude: float,
        longitude: float,
        limit: int = 20,
    ) -> list[Recommendation]:
        body = await self._recommendations.fetch_recommendations(user_id, latitude, longitude, limit=limit)
        items = decode_recommendations(body)
        self._logger.info("Loaded recommendations", extra={"user_id": user_id, "count": len(items)})
        return items
