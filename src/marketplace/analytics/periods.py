"""Calendar helpers for time-bucketed analytics."""

from datetime import UTC, date, datetime, time


def as_utc(value: datetime | date | None, end_of_day: bool = False) -> datetime | None:
    """Coerce dates and naive datetimes to aware UTC datetimes."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.max if end_of_day else time.min)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def month_start(value: datetime, months_back: int = 0) -> datetime:
    """First instant of the month ``months_back`` months before ``value``'s month."""
    index = value.year * 12 + (value.month - 1) - months_back
    return datetime(index // 12, index % 12 + 1, 1, tzinfo=UTC)


def trailing_months(months: int, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Window covering the current month and the ``months - 1`` before it."""
    end = as_utc(now) or datetime.now(UTC)
    return month_start(end, months - 1), end


def month_keys(start: datetime, end: datetime) -> list[str]:
    """Every ``YYYY-MM`` from ``start``'s month through ``end``'s month, in order."""
    if end < start:
        return []
    keys = []
    cursor = month_start(start)
    last = month_start(end)
    while cursor <= last:
        keys.append(cursor.strftime("%Y-%m"))
        cursor = month_start(cursor, -1)
    return keys
