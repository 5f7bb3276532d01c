"""Next-occurrence dates for recurring jobs"""

from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

RECURRING_TYPES = ("none", "weekly", "biweekly", "monthly")


def next_occurrence_date(
    current: date, recurring_type: Optional[str], recurring_day: Optional[int] = None
) -> Optional[date]:
    """
    Date of the next visit after ``current``, or None for one-off jobs.

    Monthly jobs land on ``recurring_day`` of the following month when set,
    clamped to the month's last day (31 -> Feb 28/29).
    """
    if recurring_type == "weekly":
        return current + timedelta(days=7)
    if recurring_type == "biweekly":
        return current + timedelta(days=14)
    if recurring_type == "monthly":
        if recurring_day:
            return current + relativedelta(months=1, day=recurring_day)
        return current + relativedelta(months=1)
    return None
