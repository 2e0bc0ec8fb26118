"""
Confidence-based review due dates.

A fixed offset per confidence level, not an adaptive interval algorithm:

    5 -> +7 days
    4 -> +3 days
    3 -> +1 day
    1-2 -> +12 hours
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta

REVIEW_INTERVALS: dict[int, timedelta] = {
    5: timedelta(days=7),
    4: timedelta(days=3),
    3: timedelta(days=1),
}
DEFAULT_REVIEW_INTERVAL = timedelta(hours=12)


def next_review_due_for(
    level: int,
    now: datetime,
    intervals: Mapping[int, timedelta] | None = None,
) -> datetime:
    """Due date for a card just rated ``level`` at ``now``."""
    table = REVIEW_INTERVALS if intervals is None else intervals
    return now + table.get(level, DEFAULT_REVIEW_INTERVAL)
