from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Protocol

from ..core.exceptions import DeliveryError

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Your one-time password"
OTP_BODY = (
    "Hello,\n\n"
    "Your one-time password is: {code}\n\n"
    "Enter it to complete your request. If you did not ask for it, you can ignore this email.\n"
)


class NotificationGateway(Protocol):
    def send_otp(self, email: str, code: str) -> None:
        """Deliver ``code`` to ``email`` or raise DeliveryError."""
        raise NotImplementedError


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int = 587
    username: str = ""
    password: str = ""
    sender: str = "no-reply@example.com"
    use_tls: bool = True
    timeout: float = 10.0


class SmtpNotificationGateway(NotificationGateway):
    """Sends OTP emails through an SMTP relay. One connection per message."""

    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    def _build_message(self, email: str, code: str) -> MIMEText:
        msg = MIMEText(OTP_BODY.format(code=code), "plain", "utf-8")
        msg["Subject"] = OTP_SUBJECT
        msg["From"] = self._settings.sender
        msg["To"] = email
        return msg

    def send_otp(self, email: str, code: str) -> None:
        if not email:
            raise DeliveryError("No email address to send the OTP to")

        s = self._settings
        msg = self._build_message(email, code)
        try:
            with smtplib.SMTP(s.host, s.port, timeout=s.timeout) as server:
                if s.use_tls:
                    server.starttls()
                if s.username:
                    server.login(s.username, s.password)
                server.sendmail(s.sender, [email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.exception("Failed to send OTP email to %s", email)
            raise DeliveryError("Failed to send OTP email") from e

        logger.info("OTP email sent to %s", email)


class LoggingNotificationGateway(NotificationGateway):
    """Development gateway: writes the code to the log instead of sending it."""

    def send_otp(self, email: str, code: str) -> None:
        if not email:
            raise DeliveryError("No email address to send the OTP to")
        logger.warning("[dev mail] OTP for %s: %s", email, code)
