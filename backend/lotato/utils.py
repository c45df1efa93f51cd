from datetime import date, datetime, time, timedelta, timezone, tzinfo


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Make a naive datetime timezone-aware (UTC). Already-aware datetimes pass through."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def local_day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the [start, end) UTC window covering a calendar day in ``tz``."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def is_repdigit(value: str) -> bool:
    """True for strings such as "11" or "777"."""
    return len(value) > 1 and len(set(value)) == 1
