from fastapi import FastAPI

from salon_connect.api.otp import router as otp_router
from salon_connect.core.log_format import configure_logging

configure_logging()

app = FastAPI(title="OTP Email Service", version="1.0.0")

app.include_router(otp_router, tags=["otp"])
