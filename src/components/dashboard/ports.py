"""
Dashboard component ports.

Read-only views over the subscriber, email log and newsletter stores.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.components.broadcast.models import Newsletter
from src.components.newsletter.models import SubscriberStatus


class SubscriberCountPort(Protocol):
    def count(self, status: SubscriberStatus | None = None) -> int:
        ...


class EmailLogStatsPort(Protocol):
    def count_by_status(self) -> dict[str, int]:
        ...


class SentNewslettersPort(Protocol):
    def list_sent_since(self, since: datetime) -> list[Newsletter]:
        ...
