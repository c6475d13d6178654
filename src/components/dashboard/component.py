"""
Dashboard component.

Pure aggregation of the admin overview numbers.

Weeks are consecutive 7-day windows ending at `now`: Week 4 is the last
seven days, Week 1 starts 28 days ago.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta

from src.components.broadcast.models import EmailLogStatus, Newsletter
from src.components.dashboard.models import DashboardStats, WeeklyStat
from src.components.dashboard.ports import (
    EmailLogStatsPort,
    SentNewslettersPort,
    SubscriberCountPort,
)
from src.components.newsletter.models import SubscriberStatus

logger = logging.getLogger(__name__)

WEEKS = 4


def percentage(part: int, total: int) -> int:
    """Whole-number percentage, 0 when total is 0."""
    if total <= 0:
        return 0
    return round(part / total * 100)


def weekly_buckets(
    newsletters: Sequence[Newsletter],
    now: datetime,
    weeks: int = WEEKS,
) -> list[WeeklyStat]:
    """Sum recipients, opens and clicks of sent newsletters per week."""
    stats: list[WeeklyStat] = []
    for i in range(weeks):
        start = now - timedelta(weeks=weeks - i)
        end = start + timedelta(weeks=1)
        in_week = [n for n in newsletters if n.sent_at is not None and start <= n.sent_at < end]
        stats.append(
            WeeklyStat(
                name=f"Week {i + 1}",
                subscribers=sum(n.recipient_count for n in in_week),
                opens=sum(n.open_count for n in in_week),
                clicks=sum(n.click_count for n in in_week),
            )
        )
    return stats


def compute_dashboard_stats(
    subscriber_count: int,
    active_count: int,
    log_status_counts: Mapping[str, int],
    newsletters: Sequence[Newsletter],
    now: datetime,
) -> DashboardStats:
    """
    Build the dashboard numbers.

    Args:
        subscriber_count: All subscribers
        active_count: CONFIRMED subscribers
        log_status_counts: Email log rows per status value
        newsletters: Newsletters sent in the last four weeks
        now: Reference time
    """
    total_logs = sum(log_status_counts.values())
    opened = log_status_counts.get(EmailLogStatus.OPENED.value, 0)
    clicked = log_status_counts.get(EmailLogStatus.CLICKED.value, 0)

    return DashboardStats(
        success=True,
        subscriber_count=subscriber_count,
        active_subscribers=active_count,
        open_rate=percentage(opened, total_logs),
        click_rate=percentage(clicked, total_logs),
        weekly_stats=weekly_buckets(newsletters, now),
    )


def run_dashboard_stats(
    subscribers: SubscriberCountPort,
    email_logs: EmailLogStatsPort,
    newsletters: SentNewslettersPort,
    *,
    now: datetime | None = None,
) -> DashboardStats:
    if now is None:
        now = datetime.now(UTC)

    try:
        return compute_dashboard_stats(
            subscriber_count=subscribers.count(),
            active_count=subscribers.count(SubscriberStatus.CONFIRMED),
            log_status_counts=email_logs.count_by_status(),
            newsletters=newsletters.list_sent_since(now - timedelta(weeks=WEEKS)),
            now=now,
        )
    except Exception:
        logger.exception("Failed to compute dashboard stats")
        return DashboardStats(success=False, error="Failed to fetch stats")
