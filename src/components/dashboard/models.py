"""
Dashboard component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WeeklyStat:
    """Totals for newsletters sent in one week."""

    name: str  # "Week 1" (oldest) .. "Week 4" (current)
    subscribers: int = 0
    opens: int = 0
    clicks: int = 0


@dataclass(frozen=True)
class DashboardStats:
    success: bool
    subscriber_count: int = 0
    active_subscribers: int = 0
    open_rate: int = 0  # Whole percent
    click_rate: int = 0
    weekly_stats: list[WeeklyStat] = field(default_factory=list)
    error: str | None = None
