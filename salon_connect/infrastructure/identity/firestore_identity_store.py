from __future__ import annotations

import asyncio
from typing import Any

from salon_connect.application.ports.identity_store import IdentityStorePort
from salon_connect.core.config import settings


class FirestoreIdentityStore(IdentityStorePort):
    def __init__(self, db: Any, collection: str | None = None) -> None:
        self._db = db
        self._collection = collection or settings.USER_COLLECTION

    async def get_profile(self, user_id: str) -> dict[str, Any] | None:
        snapshot = await asyncio.to_thread(self._db.collection(self._collection).document(user_id).get)
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}
