"""Per-campaign performance formulas: ROI, ROAS and campaign duration."""

import math
from datetime import date, datetime, time

SECONDS_PER_DAY = 86_400


def as_naive_datetime(value: date | datetime) -> datetime:
    """Naive local datetime; dates are taken at midnight.

    Campaign dates carry no timezone, so an aware as-of time is converted to
    local time and its tzinfo dropped before any arithmetic.
    """
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def duration_days(
    start_date: date | datetime,
    end_date: date | datetime | None,
    as_of: date | datetime,
    min_days: int = 1,
) -> int:
    """Campaign length in whole days, rounded up.

    Formula: ceil((end - start) / 1 day), end = end_date or as_of

    Args:
        start_date: First day of the campaign
        end_date: Last day of the campaign, None while it is still running
        as_of: Reference "now" used for running campaigns
        min_days: Lower clamp for same-day or inverted date ranges

    Returns:
        Duration in days, never below min_days.
    """
    end = as_naive_datetime(end_date if end_date is not None else as_of)
    start = as_naive_datetime(start_date)
    days = math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)
    return max(days, min_days)


def roi(revenue: float, cost: float) -> float:
    """Return on investment as a percentage.

    Formula: (revenue - cost) / cost * 100, 0 when cost is 0
    """
    if cost == 0:
        return 0.0
    return ((revenue - cost) / cost) * 100


def roas(revenue: float, cost: float) -> float:
    """Return on ad spend as a multiplier (2.5 = $2.50 back per $1).

    Formula: revenue / cost, 0 when cost is 0
    """
    if cost == 0:
        return 0.0
    return revenue / cost
