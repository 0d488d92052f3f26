from __future__ import annotations

from typing import Any


class SalonConnectError(RuntimeError):
    """Base for errors the presentation layer turns into a user-facing message."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


class BookingError(SalonConnectError):
    """Raised when a booking cannot be built locally. Never reaches the server."""


class Unauthenticated(BookingError):
    user_message = "Please sign in to send a booking request."


class MissingSalonId(BookingError):
    user_message = "No studio data available for booking."


class MissingContactInfo(BookingError):
    user_message = "Add an email address to your profile so the salon can reach you."


class MissingOwnerInfo(BookingError):
    user_message = (
        "Salon owner information is missing. This salon may not be properly configured. "
        "Please try another salon or contact support."
    )


class BackendError(SalonConnectError):
    """Raised for failures talking to the REST backend."""


class ServerUnreachable(BackendError):
    """Raised on timeouts and network errors (no response was received)."""

    user_message = "Could not reach the server. Please check your internet connection."


class ServerRejected(BackendError):
    """Raised when the server answered with a non-2xx status."""

    user_message = "The server rejected the request. Please try again."

    def __init__(self, status_code: int, payload: Any = None) -> None:
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"Server rejected request with status {status_code}: {_describe(payload)}")

    @property
    def server_message(self) -> str | None:
        if isinstance(self.payload, dict):
            detail = self.payload.get("error") or self.payload.get("message")
            return str(detail) if detail else None
        if isinstance(self.payload, str) and self.payload.strip():
            return self.payload.strip()
        return None


class TransportDisconnected(SalonConnectError):
    """Raised when a realtime send is attempted without a live connection."""

    user_message = "Not connected to chat server. Please check your internet connection."


class MalformedPushEvent(ValueError):
    """Raised when a server push lacks the fields its event type requires."""

    def __init__(self, event: str, reason: str) -> None:
        self.event = event
        self.reason = reason
        super().__init__(f"{event}: {reason}")


def _describe(payload: Any) -> str:
    if payload is None:
        return "no body"
    text = str(payload)
    return text if len(text) <= 200 else text[:200] + "..."


class OtpError(SalonConnectError):
    """Raised by the OTP service. `status_code` is the HTTP status the API answers with."""

    status_code = 400


class OtpMissingFields(OtpError):
    user_message = "Email and OTP are required"


class InvalidEmail(OtpError):
    user_message = "Invalid email format"


class OtpNotFound(OtpError):
    status_code = 404
    user_message = "OTP not found"


class OtpExpired(OtpError):
    user_message = "OTP has expired"


class OtpAlreadyUsed(OtpError):
    user_message = "OTP already used"


class InvalidOtp(OtpError):
    user_message = "Invalid OTP"


class VerificationUnavailable(OtpError):
    status_code = 501
    user_message = "Verification not implemented"


class MailDeliveryFailed(OtpError):
    status_code = 500
    user_message = "Failed to send email"
