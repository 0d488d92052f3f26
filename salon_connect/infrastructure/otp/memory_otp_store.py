from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from salon_connect.application.ports.otp_store import OtpStorePort
from salon_connect.domain.entities.otp import OtpRecord


class MemoryOtpStore(OtpStorePort):
    def __init__(self) -> None:
        self._records: dict[str, OtpRecord] = {}

    def get(self, email: str) -> OtpRecord | None:
        return self._records.get(email)

    def save(self, record: OtpRecord) -> None:
        self._records[record.email] = record

    def delete(self, email: str) -> None:
        self._records.pop(email, None)

    def mark_verified(self, email: str, verified_at: datetime) -> None:
        record = self._records.get(email)
        if record is not None:
            self._records[email] = replace(record, verified=True, verified_at=verified_at)

    def increment_attempts(self, email: str) -> None:
        record = self._records.get(email)
        if record is not None:
            self._records[email] = replace(record, attempts=record.attempts + 1)
