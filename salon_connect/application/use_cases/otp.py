from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Callable

from salon_connect.application.exceptions import (
    InvalidEmail,
    InvalidOtp,
    OtpAlreadyUsed,
    OtpExpired,
    OtpMissingFields,
    OtpNotFound,
    VerificationUnavailable,
)
from salon_connect.application.ports.mailer import MailerPort
from salon_connect.application.ports.otp_store import OtpStorePort
from salon_connect.application.utils.otp_email import SUBJECT, render_otp_email
from salon_connect.domain.entities.otp import OtpRecord

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SendOtpUseCase:
    def __init__(
        self,
        mailer: MailerPort,
        store: OtpStorePort | None,
        app_name: str,
        ttl_minutes: int = 10,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._mailer = mailer
        self._store = store
        self._app_name = app_name
        self._ttl_minutes = ttl_minutes
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def execute(self, email: str | None, otp: str | None) -> str:
        """Mail the code and remember it for verification. Returns the mail message id."""
        if not email or not otp:
            raise OtpMissingFields()
        if not EMAIL_RE.match(email):
            raise InvalidEmail()

        now = self._clock()
        html, text = render_otp_email(otp, self._app_name, self._ttl_minutes, now=now)
        self._logger.info("Sending OTP", extra={"event": "send_otp"})
        message_id = self._mailer.send(email, SUBJECT, html, text)

        if self._store is not None:
            self._store.save(
                OtpRecord(email=email, otp=otp, expires_at=now + timedelta(minutes=self._ttl_minutes))
            )
        else:
            self._logger.warning("No OTP store configured; code will not be verifiable")
        self._logger.info("OTP sent", extra={"message_id": message_id})
        return message_id


class VerifyOtpUseCase:
    """
    Checks a code against the stored record.

    Order matters: an expired record is deleted even if the code matches,
    and a used record is rejected before the code is compared.
    """

    def __init__(self, store: OtpStorePort | None, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def execute(self, email: str | None, otp: str | None) -> None:
        if not email or not otp:
            raise OtpMissingFields()
        if self._store is None:
            raise VerificationUnavailable()

        record = self._store.get(email)
        if record is None:
            raise OtpNotFound()

        now = self._clock()
        if record.is_expired(now):
            self._store.delete(email)
            self._logger.info("Expired OTP removed", extra={"reason": "expired"})
            raise OtpExpired()

        if record.verified:
            raise OtpAlreadyUsed()

        if record.otp != otp:
            self._store.increment_attempts(email)
            self._logger.info("OTP mismatch", extra={"attempt": record.attempts + 1})
            raise InvalidOtp()

        self._store.mark_verified(email, now)
        self._logger.info("OTP verified", extra={"event": "verify_otp"})
