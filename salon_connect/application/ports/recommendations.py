from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class RecommendationsPort(ABC):
    @abstractmethod
    async def fetch_recommendations(
        self,
        user_id: str,
        latitude: float,
        longitude: float,
        limit: int = 20,
    ) -> dict[str, Any]:
        raise NotImplementedError
