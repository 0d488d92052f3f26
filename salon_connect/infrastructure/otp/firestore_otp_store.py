from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from firebase_admin import firestore

from salon_connect.application.ports.otp_store import OtpStorePort
from salon_connect.core.config import settings
from salon_connect.domain.entities.otp import OtpRecord


def _as_aware(value: Any) -> datetime | None:
    if not isinstance(value, datetime):
        return None
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class FirestoreOtpStore(OtpStorePort):
    """OTP records in the `OTPVerification` collection, keyed by email."""

    def __init__(self, db: Any, collection: str | None = None) -> None:
        self._db = db
        self._collection = collection or settings.OTP_COLLECTION

    def _doc(self, email: str):
        return self._db.collection(self._collection).document(email)

    def get(self, email: str) -> OtpRecord | None:
        snapshot = self._doc(email).get()
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        expires_at = _as_aware(data.get("expiresAt"))
        if expires_at is None:
            return None
        return OtpRecord(
            email=email,
            otp=str(data.get("otp", "")),
            expires_at=expires_at,
            verified=bool(data.get("verified", False)),
            attempts=int(data.get("attempts", 0)),
            verified_at=_as_aware(data.get("verifiedAt")),
        )

    def save(self, record: OtpRecord) -> None:
        self._doc(record.email).set(
            {
                "otp": record.otp,
                "expiresAt": record.expires_at,
                "verified": record.verified,
                "attempts": record.attempts,
                "createdAt": firestore.SERVER_TIMESTAMP,
            }
        )

    def delete(self, email: str) -> None:
        self._doc(email).delete()

    def mark_verified(self, email: str, verified_at: datetime) -> None:
        self._doc(email).update({"verified": True, "verifiedAt": firestore.SERVER_TIMESTAMP})

    def increment_attempts(self, email: str) -> None:
        self._doc(email).update({"attempts": firestore.Increment(1)})
