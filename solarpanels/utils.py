"""Utility functions for solar timestamp handling."""

import re
from datetime import date, datetime, time, timezone

END_OF_DAY = time(hour=23, minute=55)

_FRACTION = re.compile(r"(\.)(\d+)")


def parse_timestamp(value):
    """Parse an ISO-8601 timestamp into an aware UTC datetime.
    
    Accepts a trailing 'Z' and naive values, which are taken to be UTC.
    
    Args:
        value: ISO-8601 string
        
    Returns:
        datetime: Timezone-aware datetime in UTC
    """
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be an ISO-8601 string, got {type(value).__name__}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    # fromisoformat only takes up to microseconds
    value = _FRACTION.sub(lambda m: m.group(1) + m.group(2)[:6].ljust(6, "0"), value)
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt):
    """Format an aware datetime as an ISO-8601 UTC string with a 'Z' suffix."""
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_epoch_ms(dt):
    """Convert an aware datetime to integer epoch milliseconds."""
    return int(round(dt.timestamp() * 1000))


def utc_date(reference):
    """Get the UTC calendar date of a date or datetime.
    
    Args:
        reference: date, or datetime (naive values are taken to be UTC)
        
    Returns:
        date: The UTC date
    """
    if isinstance(reference, datetime):
        if reference.tzinfo is None:
            return reference.date()
        return reference.astimezone(timezone.utc).date()
    if isinstance(reference, date):
        return reference
    raise TypeError(f"expected date or datetime, got {type(reference).__name__}")


def end_of_day(reference):
    """Get the instant a day's chart ends at: 23:55:00 UTC of the reference date.
    
    Args:
        reference: date or datetime identifying the day
        
    Returns:
        datetime: 23:55:00 UTC on the reference date
    """
    return datetime.combine(utc_date(reference), END_OF_DAY, tzinfo=timezone.utc)


def utc_now():
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
