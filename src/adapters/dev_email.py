"""
Dev Email Adapter.

Logs emails instead of sending. Selected with EMAIL_BACKEND=dev and used
throughout the tests.

Key behaviors:
- Logs recipient, subject and a body preview
- Returns SKIPPED status (not SENT)
- Stores emails in memory for test assertions
- Can be told to fail, to exercise delivery-failure paths
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from src.core.ports.email import EmailResult

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """
    Dev email adapter that logs instead of sending.

    Implements EmailPort. Safe to call from broadcast worker threads.
    """

    # In-memory storage for test assertions
    sent_emails: list[SentEmail] = field(default_factory=list)

    # Configuration
    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100
    fail_with: str | None = None  # When set, every send fails with this error

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        """
        Log an email instead of sending.

        Returns:
            EmailResult with SKIPPED status, or FAILED when `fail_with` is set
        """
        if self.fail_with:
            logger.warning("EMAIL (dev): simulated failure to %s: %s", recipient, self.fail_with)
            return EmailResult.failed(recipient, self.fail_with)

        message_id = f"dev-{uuid4().hex[:12]}"

        with self._lock:
            self.sent_emails.append(
                SentEmail(
                    id=message_id,
                    recipient=recipient,
                    subject=subject,
                    body_html=body_html,
                    body_text=body_text or "",
                    logged_at=datetime.now(UTC),
                )
            )

        self._log_email(recipient, subject, body_html, message_id)

        return EmailResult.skipped(
            recipient, "Dev mode - email logged, not sent", message_id=message_id
        )

    def _log_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        message_id: str,
    ) -> None:
        parts = [f"EMAIL (dev): To={recipient}", f"Subject={subject}"]

        if self.log_body and body_html:
            preview = body_html[: self.body_preview_length]
            if len(body_html) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview}")

        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        """Get the most recently logged email."""
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        """Get all emails logged to a specific recipient."""
        return [e for e in self.sent_emails if e.recipient == recipient]

    def get_emails_with_subject(self, subject_contains: str) -> list[SentEmail]:
        return [e for e in self.sent_emails if subject_contains in e.subject]

    def clear(self) -> None:
        """Clear all stored emails (for test isolation)."""
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
