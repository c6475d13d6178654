"""
SMTP Email Adapter.

Sends email through an SMTP relay with smtplib.

Environment variables (read by SMTPConfig.from_env):

* EMAIL_HOST: SMTP server hostname (default "localhost")
* EMAIL_PORT: port; defaults to 465 when EMAIL_SECURE is set, else 587
* EMAIL_USER / EMAIL_PASSWORD: credentials; login is skipped when unset
* EMAIL_SECURE: "true" for implicit SSL, otherwise STARTTLS is attempted
* EMAIL_FROM: sender address (default "noreply@newsletter.com")
* EMAIL_FROM_NAME: optional sender display name
* EMAIL_TIMEOUT: socket timeout in seconds (default 30)
"""

from __future__ import annotations

import logging
import os
import smtplib
from collections.abc import Mapping
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid

from src.core.ports.email import EmailAddress, EmailResult

logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SMTPConfig:
    host: str = "localhost"
    port: int = 587
    username: str | None = None
    password: str | None = None
    secure: bool = False  # Implicit SSL (SMTPS)
    from_email: str = "noreply@newsletter.com"
    from_name: str | None = None
    timeout: float = 30.0

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> SMTPConfig:
        env = os.environ if env is None else env
        secure = env.get("EMAIL_SECURE", "false").strip().lower() in TRUTHY
        port = int(env.get("EMAIL_PORT") or (465 if secure else 587))
        return cls(
            host=env.get("EMAIL_HOST") or "localhost",
            port=port,
            username=env.get("EMAIL_USER") or None,
            password=env.get("EMAIL_PASSWORD") or None,
            secure=secure,
            from_email=env.get("EMAIL_FROM") or "noreply@newsletter.com",
            from_name=env.get("EMAIL_FROM_NAME") or None,
            timeout=float(env.get("EMAIL_TIMEOUT") or 30),
        )

    @property
    def sender(self) -> EmailAddress:
        return EmailAddress(self.from_email, self.from_name)

    def describe(self) -> dict[str, object]:
        """Configuration summary without secrets."""
        return {
            "host": self.host,
            "port": self.port,
            "secure": self.secure,
            "user_configured": bool(self.username),
            "password_configured": bool(self.password),
            "from": str(self.sender),
            "timeout": self.timeout,
        }


class SMTPEmailAdapter:
    """SMTP implementation of EmailPort. One connection per message."""

    def __init__(self, config: SMTPConfig | None = None) -> None:
        self.config = config or SMTPConfig.from_env()

    def build_message(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = str(self.config.sender)
        msg["To"] = recipient
        msg["Message-ID"] = make_msgid(domain=self.config.from_email.split("@")[-1])
        if body_text:
            msg.set_content(body_text)
            msg.add_alternative(body_html, subtype="html")
        else:
            msg.set_content(body_html, subtype="html")
        return msg

    def _connect(self) -> smtplib.SMTP:
        if self.config.secure:
            return smtplib.SMTP_SSL(self.config.host, self.config.port, timeout=self.config.timeout)
        return smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout)

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        msg = self.build_message(recipient, subject, body_html, body_text)

        try:
            with self._connect() as smtp:
                smtp.ehlo()
                if not self.config.secure and smtp.has_extn("starttls"):
                    smtp.starttls()
                    smtp.ehlo()
                if self.config.username and self.config.password:
                    smtp.login(self.config.username, self.config.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning(
                "SMTP send to %s via %s:%s failed: %s",
                recipient,
                self.config.host,
                self.config.port,
                exc,
            )
            return EmailResult.failed(recipient, str(exc) or exc.__class__.__name__)

        logger.info("Email sent to %s (%s)", recipient, msg["Message-ID"])
        return EmailResult.success(recipient, message_id=msg["Message-ID"])
