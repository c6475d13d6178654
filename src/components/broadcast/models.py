"""
Broadcast component models.

Newsletters sent to an audience segment and the per-recipient email log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from src.components.newsletter.models import Subscriber, SubscriberStatus


class Audience(Enum):
    """Named audience segment."""

    ALL = "all"
    ACTIVE = "active"  # Opened something recently
    NEW = "new"  # Joined recently
    ENGAGED = "engaged"  # Many opens overall


class NewsletterStatus(Enum):
    DRAFT = "DRAFT"
    SENDING = "SENDING"
    SENT = "SENT"


class EmailLogStatus(Enum):
    """Per-recipient delivery status (updated by external mail events)."""

    SENT = "sent"
    OPENED = "opened"
    CLICKED = "clicked"
    BOUNCED = "bounced"
    COMPLAINED = "complained"


@dataclass
class Newsletter:
    """A broadcast and its delivery counters."""

    title: str
    subject: str
    content: str
    author_id: UUID | None = None
    template_id: UUID | None = None
    audience: Audience = Audience.ALL
    id: UUID = field(default_factory=uuid4)
    status: NewsletterStatus = NewsletterStatus.DRAFT
    recipient_count: int = 0
    sent_count: int = 0
    failed_count: int = 0
    open_count: int = 0
    click_count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    sent_at: datetime | None = None


@dataclass(frozen=True)
class EmailLog:
    """One delivered broadcast email."""

    recipient_email: str
    newsletter_id: UUID
    subscriber_id: UUID | None = None
    message_id: str | None = None
    status: EmailLogStatus = EmailLogStatus.SENT
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class AudienceWindows:
    """Thresholds behind the audience predicates."""

    active_days: int = 30
    new_days: int = 7
    engaged_min_opens: int = 5


@dataclass(frozen=True)
class AudienceCriteria:
    """
    Resolved recipient predicate.

    Repositories translate this into a query; `matches` is the reference
    semantics.
    """

    status: SubscriberStatus = SubscriberStatus.CONFIRMED
    last_opened_since: datetime | None = None
    created_since: datetime | None = None
    min_open_count: int | None = None
    exclude_no_emails: bool = True

    def matches(self, subscriber: Subscriber, no_emails: bool = False) -> bool:
        if subscriber.status != self.status:
            return False
        if self.exclude_no_emails and no_emails:
            return False
        if self.last_opened_since is not None and (
            subscriber.last_opened_at is None
            or subscriber.last_opened_at < self.last_opened_since
        ):
            return False
        if self.created_since is not None and subscriber.created_at < self.created_since:
            return False
        if self.min_open_count is not None and subscriber.open_count < self.min_open_count:
            return False
        return True


# --- Input Models ---


@dataclass(frozen=True)
class SendNewsletterInput:
    """
    Broadcast request.

    When `template_id` is given, a blank subject or content is filled from
    the template.
    """

    subject: str | None
    content: str | None
    audience: str = "all"
    author_id: UUID | None = None
    template_id: UUID | None = None
    title: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class SendNewsletterOutput:
    """Broadcast outcome; `failures` holds "email: reason" strings."""

    success: bool
    newsletter_id: UUID | None = None
    sent: int = 0
    failed: int = 0
    total: int = 0
    failures: list[str] = field(default_factory=list)
    timestamp: datetime | None = None
    error: str | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of one send inside a batch."""

    subscriber: Subscriber
    delivered: bool
    message_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class BroadcastConfig:
    """Broadcast configuration."""

    base_url: str = "http://localhost:3000"
    unsubscribe_page: str = "/unsubscribe"
    batch_size: int = 10
    send_timeout_seconds: float = 30.0
    windows: AudienceWindows = field(default_factory=AudienceWindows)


# --- Error Types ---


class BroadcastError(Exception):
    """Base broadcast error."""

    pass
