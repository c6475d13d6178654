"""
Broadcast component ports.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.components.broadcast.models import AudienceCriteria, EmailLog, Newsletter
from src.components.newsletter.models import Subscriber


class RecipientQueryPort(Protocol):
    """Resolves audience criteria to subscribers."""

    def find_recipients(self, criteria: AudienceCriteria) -> list[Subscriber]:
        ...


class NewsletterRepoPort(Protocol):
    """Newsletter (broadcast) repository interface."""

    def save(self, newsletter: Newsletter) -> Newsletter:
        """Insert or update."""
        ...

    def get_by_id(self, newsletter_id: UUID) -> Newsletter | None:
        ...

    def list_recent(self, limit: int = 50, offset: int = 0) -> list[Newsletter]:
        """List newsletters, newest first."""
        ...

    def list_sent_since(self, since: datetime) -> list[Newsletter]:
        """Newsletters with sent_at >= since."""
        ...

    def count_by_template(self, template_id: UUID) -> int:
        ...

    def delete_orphaned(self, author_ids: Collection[UUID]) -> int:
        """Delete newsletters whose author is not in author_ids. Returns count."""
        ...


class EmailLogRepoPort(Protocol):
    """Append-only email log."""

    def add(self, log: EmailLog) -> None:
        ...

    def count_by_status(self) -> dict[str, int]:
        """Row counts keyed by status value."""
        ...
