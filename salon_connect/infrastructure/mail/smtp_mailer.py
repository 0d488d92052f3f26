from __future__ import annotations

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid

from salon_connect.application.exceptions import MailDeliveryFailed
from salon_connect.application.ports.mailer import MailerPort
from salon_connect.core.config import settings


class SmtpMailer(MailerPort):
    def __init__(
        self,
        username: str | None = None,
        password: str | None = None,
        host: str | None = None,
        port: int | None = None,
        sender_name: str | None = None,
    ) -> None:
        self._username = username or settings.EMAIL_USER
        self._password = password or settings.EMAIL_PASSWORD
        self._host = host or settings.SMTP_HOST
        self._port = port or settings.SMTP_PORT
        self._sender_name = sender_name or settings.APP_NAME
        self._logger = logging.getLogger(__name__)

        if not self._username or not self._password:
            raise ValueError("EMAIL_USER and EMAIL_PASSWORD are required for SMTP mail")

    def send(self, to: str, subject: str, html: str, text: str) -> str:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f'"{self._sender_name}" <{self._username}>'
        msg["To"] = to
        message_id = make_msgid()
        msg["Message-ID"] = message_id
        msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))

        try:
            self._deliver(to, msg.as_string())
        except smtplib.SMTPAuthenticationError as e:
            self._logger.error("SMTP authentication failed", extra={"error": str(e)})
            raise MailDeliveryFailed("Email authentication failed. Check credentials.") from e
        except smtplib.SMTPRecipientsRefused as e:
            self._logger.error("Recipient refused", extra={"error": str(e)})
            raise MailDeliveryFailed("Invalid recipient email address.") from e
        except (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected) as e:
            self._logger.error("SMTP connection failed", extra={"error": str(e)})
            raise MailDeliveryFailed("Could not connect to email server.") from e
        except smtplib.SMTPException as e:
            self._logger.error("SMTP error", extra={"error": str(e)})
            raise MailDeliveryFailed() from e
        except OSError as e:
            # SMTPException subclasses OSError, so plain socket errors land here last
            self._logger.error("SMTP connection failed", extra={"error": str(e)})
            raise MailDeliveryFailed("Could not connect to email server.") from e

        self._logger.info("Email sent", extra={"message_id": message_id})
        return message_id

    def _deliver(self, to: str, raw: str) -> None:
        context = ssl.create_default_context()
        if self._port == 465:
            server = smtplib.SMTP_SSL(self._host, self._port, context=context, timeout=30)
        else:
            server = smtplib.SMTP(self._host, self._port, timeout=30)
        with server:
            if self._port != 465:
                server.starttls(context=context)
            server.login(self._username, self._password)
            server.sendmail(self._username, [to], raw)
