"""
Newsletter component models.

Subscribers, their delivery preferences, the unsubscribe audit trail, and
the inputs/outputs of the subscription workflows.

State machine (Subscriber):
    (new) → PENDING → CONFIRMED → UNSUBSCRIBED
    PENDING → PENDING (re-subscribe reissues the confirmation token)
    UNSUBSCRIBED | BOUNCED → PENDING (fresh subscribe, must confirm again)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

# --- State Machine ---


class SubscriberStatus(Enum):
    """Subscriber status."""

    PENDING = "PENDING"  # Awaiting email confirmation
    CONFIRMED = "CONFIRMED"  # Active subscriber
    UNSUBSCRIBED = "UNSUBSCRIBED"
    BOUNCED = "BOUNCED"  # Set by external mail-event processing


VALID_TRANSITIONS: dict[SubscriberStatus, set[SubscriberStatus]] = {
    SubscriberStatus.PENDING: {
        SubscriberStatus.PENDING,
        SubscriberStatus.CONFIRMED,
        SubscriberStatus.UNSUBSCRIBED,
    },
    SubscriberStatus.CONFIRMED: {SubscriberStatus.UNSUBSCRIBED, SubscriberStatus.BOUNCED},
    SubscriberStatus.UNSUBSCRIBED: {SubscriberStatus.PENDING},
    SubscriberStatus.BOUNCED: {SubscriberStatus.PENDING, SubscriberStatus.UNSUBSCRIBED},
}


def can_transition(from_status: SubscriberStatus, to_status: SubscriberStatus) -> bool:
    """Check if a status transition is allowed."""
    return to_status in VALID_TRANSITIONS.get(from_status, set())


class Frequency(Enum):
    """Delivery frequency."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    REALTIME = "REALTIME"


FREQUENCY_LABELS: dict[Frequency, str] = {
    Frequency.DAILY: "Daily",
    Frequency.WEEKLY: "Weekly",
    Frequency.MONTHLY: "Monthly",
    Frequency.REALTIME: "Real-time",
}

DEFAULT_CATEGORY_LABELS: dict[str, str] = {
    "tech": "Technology",
    "business": "Business",
    "lifestyle": "Lifestyle",
    "finance": "Finance",
    "marketing": "Marketing",
    "design": "Design",
    "development": "Development",
    "productivity": "Productivity",
}

DEFAULT_UNSUBSCRIBE_REASON = "No reason provided"


# --- Entities ---


@dataclass
class Subscriber:
    """
    Newsletter subscriber.

    `tags` mirrors SubscriberPreference.categories; the workflows keep the
    two in sync and the repository writes them in one transaction.
    """

    email: str
    name: str | None = None
    id: UUID = field(default_factory=uuid4)
    status: SubscriberStatus = SubscriberStatus.PENDING
    open_count: int = 0
    click_count: int = 0
    bounce_count: int = 0
    complaint_count: int = 0
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    subscribed_at: datetime | None = None
    confirmed_at: datetime | None = None
    unsubscribed_at: datetime | None = None
    last_opened_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]


@dataclass
class SubscriberPreference:
    """Delivery preferences (1:1 with Subscriber)."""

    subscriber_id: UUID
    frequency: Frequency = Frequency.WEEKLY
    categories: list[str] = field(default_factory=list)
    no_emails: bool = False
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class UnsubscribeLog:
    """Append-only unsubscribe audit record."""

    email: str
    reason: str
    subscriber_id: UUID | None
    id: UUID = field(default_factory=uuid4)
    unsubscribed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


# --- Input Models ---


@dataclass(frozen=True)
class SubscribeInput:
    """Subscribe (or update preferences of a confirmed subscriber)."""

    email: str
    frequency: str
    categories: tuple[str, ...]
    name: str | None = None


@dataclass(frozen=True)
class ConfirmInput:
    """Confirm via the token from the confirmation link."""

    token: str


@dataclass(frozen=True)
class ManageLinkInput:
    """Request an emailed manage-preferences link."""

    email: str


@dataclass(frozen=True)
class UnsubscribeLinkInput:
    """Request an emailed unsubscribe link."""

    email: str


@dataclass(frozen=True)
class GetPreferencesInput:
    email: str
    token: str


@dataclass(frozen=True)
class UpdatePreferencesInput:
    """Partial preference update; None means unchanged."""

    email: str
    token: str
    frequency: str | None = None
    categories: tuple[str, ...] | None = None
    no_emails: bool | None = None


@dataclass(frozen=True)
class UnsubscribeInput:
    email: str
    token: str
    reason: str | None = None


@dataclass(frozen=True)
class AddSubscriberInput:
    """Admin-side add (no token, no email)."""

    email: str
    name: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class ValidationError:
    """Validation error detail."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ValidateEmailOutput:
    """Output from email validation."""

    is_valid: bool
    normalized_email: str | None
    errors: list[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class _Result:
    success: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def error(self) -> str | None:
        return self.errors[0].message if self.errors else None

    @property
    def error_code(self) -> str | None:
        return self.errors[0].code if self.errors else None


@dataclass(frozen=True)
class SubscribeOutput(_Result):
    message: str | None = None
    email: str | None = None
    is_update: bool = False
    warning: str | None = None  # Delivery failed after a successful write


@dataclass(frozen=True)
class ConfirmOutput(_Result):
    email: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class LinkOutput(_Result):
    """Result of requesting a manage/unsubscribe link."""

    message: str | None = None
    email_sent: bool = False


@dataclass(frozen=True)
class PreferencesOutput(_Result):
    email: str | None = None
    name: str | None = None
    frequency: Frequency | None = None
    categories: list[str] = field(default_factory=list)
    no_emails: bool = False
    status: SubscriberStatus | None = None


@dataclass(frozen=True)
class UpdatePreferencesOutput(_Result):
    message: str | None = None


@dataclass(frozen=True)
class UnsubscribeOutput(_Result):
    message: str | None = None
    already_unsubscribed: bool = False
    warning: str | None = None


@dataclass(frozen=True)
class AddSubscriberOutput(_Result):
    message: str | None = None
    email: str | None = None


# --- Configuration ---


@dataclass(frozen=True)
class NewsletterConfig:
    """Newsletter workflow configuration."""

    site_name: str = "Newsletter Service"
    base_url: str = "http://localhost:3000"
    confirm_path: str = "/confirm"
    confirmation_page: str = "/confirmation"
    manage_page: str = "/manage-preferences"
    unsubscribe_page: str = "/unsubscribe"
    confirm_ttl_hours: int = 24
    manage_ttl_minutes: int = 60
    category_labels: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_LABELS)
    )
    default_frequency: Frequency = Frequency.WEEKLY


# --- Error Types ---


class NewsletterError(Exception):
    """Base newsletter error."""

    pass


class SubscriptionError(NewsletterError):
    """Subscription operation failed."""

    def __init__(self, email: str, reason: str) -> None:
        self.email = email
        self.reason = reason
        super().__init__(f"Subscription error for '{email}': {reason}")
