from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from salon_connect.domain.entities.otp import OtpRecord


class OtpStorePort(ABC):
    @abstractmethod
    def get(self, email: str) -> OtpRecord | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, record: OtpRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, email: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def mark_verified(self, email: str, verified_at: datetime) -> None:
        raise NotImplementedError

    @abstractmethod
    def increment_attempts(self, email: str) -> None:
        raise NotImplementedError
