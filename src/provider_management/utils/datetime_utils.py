"""
Datetime utilities for consistent date handling across the engine.

Relationships are date-granular: start and end dates never carry a time of
day. "Now" is evaluated in the configured local timezone (fixed UTC offset).
"""

import logging
from datetime import datetime, timezone, timedelta, date
from typing import Optional, Union

from provider_management.core.config import LOCAL_TIMEZONE_OFFSET_HOURS

logger = logging.getLogger(__name__)

LOCAL_TZ = timezone(timedelta(hours=LOCAL_TIMEZONE_OFFSET_HOURS))

DateLike = Union[date, datetime]


def local_now() -> datetime:
    """
    Get current datetime in the configured local timezone.

    Returns:
        Current timezone-aware datetime
    """
    return datetime.now(LOCAL_TZ)


def local_today() -> date:
    """Get today's date in the configured local timezone."""
    return local_now().date()


def clear_time_component(value: DateLike) -> date:
    """
    Drop the time of day from a date or datetime.

    Timezone-aware datetimes are converted to the local timezone first so the
    calendar day matches what "today" means for the engine.

    Args:
        value: Date or datetime

    Returns:
        The calendar date
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(LOCAL_TZ)
        return value.date()
    return value


def resolve_effective_date(value: Optional[DateLike]) -> date:
    """
    Resolve an optional effective date, defaulting to today.

    Args:
        value: Date, datetime, or None

    Returns:
        Date-granular effective date
    """
    if value is None:
        return local_today()
    return clear_time_component(value)
