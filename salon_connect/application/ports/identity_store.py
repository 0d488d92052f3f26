from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IdentityStorePort(ABC):
    @abstractmethod
    async def get_profile(self, user_id: str) -> dict[str, Any] | None:
        """User profile document (name, email, ...) or None when it does not exist."""
        raise NotImplementedError
