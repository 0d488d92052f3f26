from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from salon_connect.application.exceptions import OtpError
from salon_connect.application.use_cases.otp import SendOtpUseCase, VerifyOtpUseCase
from salon_connect.core.config import settings
from salon_connect.wiring.dependencies import get_send_otp_use_case, get_verify_otp_use_case


router = APIRouter()
logger = logging.getLogger(__name__)


class OtpRequest(BaseModel):
    email: str | None = None
    otp: str | None = None

    @field_validator("otp", mode="before")
    @classmethod
    def _otp_as_text(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


def send_otp_use_case() -> SendOtpUseCase | None:
    try:
        return get_send_otp_use_case()
    except Exception as e:
        logger.exception("Failed to initialize send-otp", extra={"error": str(e)})
        return None


def verify_otp_use_case() -> VerifyOtpUseCase | None:
    try:
        return get_verify_otp_use_case()
    except Exception as e:
        logger.exception("Failed to initialize verify-otp", extra={"error": str(e)})
        return None


def _failure(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": error}
    if details and settings.ENV.lower() in {"dev", "local"}:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@router.get("/")
def health() -> dict[str, str]:
    return {
        "status": "OK",
        "message": "OTP Email Service is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/send-otp")
def send_otp(body: OtpRequest, use_case: SendOtpUseCase | None = Depends(send_otp_use_case)):
    if use_case is None:
        return _failure(500, "Failed to send email")
    try:
        message_id = use_case.execute(body.email, body.otp)
    except OtpError as e:
        if e.status_code >= 500:
            logger.error("Error sending email", extra={"error": str(e)})
        return _failure(e.status_code, str(e), details=str(e.__cause__) if e.__cause__ else None)
    except Exception as e:
        logger.exception("Error sending email", extra={"error": str(e)})
        return _failure(500, "Failed to send email", details=str(e))
    return {"success": True, "message": "OTP sent successfully", "messageId": message_id}


@router.post("/verify-otp")
def verify_otp(body: OtpRequest, use_case: VerifyOtpUseCase | None = Depends(verify_otp_use_case)):
    if use_case is None:
        return _failure(500, "Verification failed")
    try:
        use_case.execute(body.email, body.otp)
    except OtpError as e:
        return _failure(e.status_code, str(e))
    except Exception as e:
        logger.exception("Verification error", extra={"error": str(e)})
        return _failure(500, "Verification failed")
    return {"success": True, "message": "OTP verified successfully"}
