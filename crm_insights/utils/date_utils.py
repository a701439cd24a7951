"""Date manipulation utilities"""

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


def add_days(moment: datetime, days: int) -> datetime:
    return moment + timedelta(days=days)


def elapsed_days(since: datetime, now: datetime | None = None) -> float:
    """Fractional days between `since` and `now` (never negative)"""
    now = ensure_aware(now or utcnow())
    return max(0.0, (now - ensure_aware(since)).total_seconds() / 86_400)


def parse_message_timestamp(raw: str | None, default: datetime | None = None) -> datetime:
    """
    Parse a messaging-platform timestamp (unix seconds as a string).

    Falls back to `default` (or now) when the value is missing or not numeric.
    """
    if not raw:
        return default or utcnow()
    try:
        return datetime.fromtimestamp(int(raw), tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError):
        return default or utcnow()


def ensure_aware(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
