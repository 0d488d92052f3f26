from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from salon_connect.domain.entities.booking import BookingSelection


@dataclass(frozen=True)
class Recommendation:
    salon_id: str
    name: str
    owner_id: str
    price: int = 0
    rating: float = 0.0
    score: float = 0.0
    location: str = "Location unavailable"
    services: tuple[str, ...] = ()
    image_url: str | None = None
    reasons: tuple[str, ...] = ()
    is_subscribed: bool = False
    salon: dict[str, Any] = field(default_factory=dict)

    def to_selection(self) -> BookingSelection:
        return BookingSelection(
            salon_id=self.salon_id,
            owner_id=self.owner_id,
            salon=dict(self.salon),
            salon_name=self.name,
        )
