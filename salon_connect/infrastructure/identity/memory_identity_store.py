from __future__ import annotations

from typing import Any

from salon_connect.application.ports.identity_store import IdentityStorePort


class MemoryIdentityStore(IdentityStorePort):
    def __init__(self, profiles: dict[str, dict[str, Any]] | None = None) -> None:
        self._profiles = {uid: dict(p) for uid, p in (profiles or {}).items()}

    async def get_profile(self, user_id: str) -> dict[str, Any] | None:
        profile = self._profiles.get(user_id)
        return dict(profile) if profile is not None else None
