from __future__ import annotations

from datetime import datetime
from html import escape

SUBJECT = "Email Verification - Your OTP Code"

_HTML = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <style>
    body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background-color: #f4f4f4; margin: 0; }}
    .email-container {{ max-width: 600px; margin: 40px auto; background-color: #ffffff; border-radius: 12px; }}
    .header {{ background: linear-gradient(135deg, #D96073 0%, #C54D61 100%); padding: 40px 30px; text-align: center; }}
    .header h1 {{ color: #ffffff; margin: 0; font-size: 28px; }}
    .content {{ padding: 40px 30px; color: #7A6B7A; line-height: 1.8; }}
    .otp-box {{ background: #EDE2E0; padding: 30px; text-align: center; border-radius: 12px; border: 2px dashed #D96073; }}
    .otp-code {{ font-size: 42px; font-weight: bold; color: #D96073; letter-spacing: 12px; font-family: 'Courier New', monospace; }}
    .validity {{ color: #E65100; font-weight: 600; }}
    .footer {{ background-color: #F8F8F8; padding: 30px; text-align: center; color: #8B7B8B; font-size: 13px; }}
  </style>
</head>
<body>
  <div class="email-container">
    <div class="header"><h1>Email Verification</h1></div>
    <div class="content">
      <p>Hello!</p>
      <p>Thank you for signing up with <strong>{app_name}</strong>! To complete your registration,
      please verify your email address using the code below:</p>
      <div class="otp-box">
        <div>Your Verification Code</div>
        <div class="otp-code">{otp}</div>
      </div>
      <p class="validity">This code will expire in {ttl_minutes} minutes</p>
      <p>If you didn't request this code, please ignore this email.</p>
    </div>
    <div class="footer">
      <p>This is an automated email. Please do not reply.</p>
      <p>&copy; {year} {app_name}. All rights reserved.</p>
    </div>
  </div>
</body>
</html>
"""

_TEXT = """Email Verification

Hello!

Thank you for signing up with {app_name}!

Your verification code is: {otp}

This code will expire in {ttl_minutes} minutes.

If you didn't request this code, please ignore this email.

(c) {year} {app_name}. All rights reserved.
"""


def render_otp_email(otp: str, app_name: str, ttl_minutes: int, now: datetime | None = None) -> tuple[str, str]:
    """Returns (html, text) bodies."""
    year = (now or datetime.now()).year
    html = _HTML.format(otp=escape(otp), app_name=escape(app_name), ttl_minutes=ttl_minutes, year=year)
    text = _TEXT.format(otp=otp, app_name=app_name, ttl_minutes=ttl_minutes, year=year)
    return html, text
