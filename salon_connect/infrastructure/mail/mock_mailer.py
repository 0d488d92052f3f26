from __future__ import annotations

import logging

from salon_connect.application.ports.mailer import MailerPort


class MockMailer(MailerPort):
    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self._logger = logging.getLogger(__name__)

    def send(self, to: str, subject: str, html: str, text: str) -> str:
        message_id = f"mock_mail_{len(self.sent) + 1}"
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text, "id": message_id})
        self._logger.info("Mock email sent", extra={"message_id": message_id})
        return message_id
