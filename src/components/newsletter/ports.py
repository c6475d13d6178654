"""
Newsletter component ports.

Protocol interfaces for newsletter service dependencies.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from src.components.newsletter.models import (
    Subscriber,
    SubscriberPreference,
    SubscriberStatus,
    UnsubscribeLog,
)


class SubscriberRepoPort(Protocol):
    """
    Subscriber repository interface.

    Lookups by email are case-insensitive. `save` writes the subscriber and,
    when given, its preference row in one transaction so `tags` and
    `categories` never diverge.
    """

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        """Get subscriber by ID."""
        ...

    def get_by_email(self, email: str) -> Subscriber | None:
        """Get subscriber by email address."""
        ...

    def save(
        self,
        subscriber: Subscriber,
        preference: SubscriberPreference | None = None,
    ) -> Subscriber:
        """Insert or update subscriber (and preference)."""
        ...

    def get_preference(self, subscriber_id: UUID) -> SubscriberPreference | None:
        """Get the preference row, if one was ever written."""
        ...

    def record_unsubscribe(self, subscriber: Subscriber, log: UnsubscribeLog) -> None:
        """Persist the unsubscribed subscriber and append its log row together."""
        ...

    def list_subscribers(
        self,
        search: str | None = None,
        status: SubscriberStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Subscriber]:
        """List subscribers, newest first, filtered by email/name substring and status."""
        ...

    def count(self, status: SubscriberStatus | None = None) -> int:
        """Count subscribers, optionally by status."""
        ...

    def delete_many(self, subscriber_ids: Sequence[UUID]) -> int:
        """Delete subscribers (and their preferences). Returns count deleted."""
        ...


class NewsletterEmailSenderPort(Protocol):
    """
    Email sender interface for subscription workflows.

    Each method returns True when the message was handed off (or
    deliberately skipped in development) and False on failure. None raise.
    """

    def send_confirmation_email(
        self,
        recipient_email: str,
        name: str,
        confirmation_url: str,
        frequency: str,
        categories: Sequence[str],
        site_name: str,
    ) -> bool:
        """
        Send double opt-in confirmation email.

        Args:
            recipient_email: Email to send to
            name: Display name for greeting
            confirmation_url: Full URL for confirmation
            frequency: Frequency label chosen at subscribe time
            categories: Category labels chosen at subscribe time
            site_name: Site name for email template
        """
        ...

    def send_welcome_email(self, recipient_email: str, name: str, site_name: str) -> bool:
        """Send welcome email after confirmation."""
        ...

    def send_manage_link_email(
        self,
        recipient_email: str,
        name: str,
        manage_url: str,
        site_name: str,
    ) -> bool:
        """Send the manage-preferences link."""
        ...

    def send_unsubscribe_link_email(
        self,
        recipient_email: str,
        name: str,
        unsubscribe_url: str,
        site_name: str,
    ) -> bool:
        """Send the unsubscribe link."""
        ...

    def send_unsubscribe_confirmation_email(
        self,
        recipient_email: str,
        name: str,
        site_name: str,
    ) -> bool:
        """Send goodbye email after unsubscribe."""
        ...
