"""
Email Adapter Interface.

Protocol-based interface for sending email. Used by the transactional
sender (confirmation, manage links, unsubscribe) and by broadcasts.

Key requirements:
- Support HTML and plain text body
- Stateless send operation
- Never raise; failures come back as EmailResult

Implementations:
1. DevEmailAdapter: Logs emails instead of sending (dev/test)
2. SMTPEmailAdapter: Sends via SMTP (STARTTLS or implicit SSL)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    QUEUED = "queued"  # Accepted for async delivery
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter or dry-run

    @property
    def delivered(self) -> bool:
        """True for every status except FAILED."""
        return self is not EmailStatus.FAILED


@dataclass(frozen=True)
class EmailAddress:
    """
    Email address with optional display name.

    Examples:
        EmailAddress("news@example.com")
        EmailAddress("news@example.com", "Weekly News")
    """

    email: str
    name: str | None = None

    def __str__(self) -> str:
        """Format as RFC 5322 address."""
        if self.name:
            safe_name = self.name.replace('"', '\\"')
            return f'"{safe_name}" <{self.email}>'
        return self.email


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    message_id: str | None = None
    error: str | None = None
    sent_at: datetime | None = None
    recipient: str = ""

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        """Create a successful send result."""
        return cls(
            status=EmailStatus.SENT,
            message_id=message_id,
            recipient=recipient,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def skipped(
        cls, recipient: str, reason: str = "Dev mode", message_id: str | None = None
    ) -> EmailResult:
        """Create a skipped result (dev adapter)."""
        return cls(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=recipient,
            error=reason,
        )

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        """Create a failed result."""
        return cls(
            status=EmailStatus.FAILED,
            recipient=recipient,
            error=error,
        )


class EmailPort(Protocol):
    """Email sending interface."""

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        """
        Send an email.

        Args:
            recipient: Email address of recipient
            subject: Email subject line
            body_html: HTML body content
            body_text: Plain text body (optional, fallback)

        Returns:
            EmailResult with send outcome

        Notes:
            Must not raise exceptions; return failed status instead
        """
        ...


class EmailError(Exception):
    """Base exception for email-related errors."""

    pass
