"""
Dashboard component.

Admin overview: subscriber counts, engagement rates and weekly volume.
"""

from src.components.dashboard.component import (
    WEEKS,
    compute_dashboard_stats,
    percentage,
    run_dashboard_stats,
    weekly_buckets,
)
from src.components.dashboard.models import DashboardStats, WeeklyStat
from src.components.dashboard.ports import (
    EmailLogStatsPort,
    SentNewslettersPort,
    SubscriberCountPort,
)

__all__ = [
    # Functions
    "compute_dashboard_stats",
    "run_dashboard_stats",
    "percentage",
    "weekly_buckets",
    "WEEKS",
    # Models
    "DashboardStats",
    "WeeklyStat",
    # Ports
    "SubscriberCountPort",
    "EmailLogStatsPort",
    "SentNewslettersPort",
]
