from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OtpRecord:
    email: str
    otp: str
    expires_at: datetime
    verified: bool = False
    attempts: int = 0
    verified_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
