"""
Timezone-aware datetime helpers.
- Store and compute in UTC in DB.
- Calendar days (attendance work_date, archive day) are taken at the fixed
  local offset (IST, +05:30 by default), never from the server timezone.
- API responses expose datetimes with the local offset; never Z.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

from opsdesk.core.config import settings

UTC = timezone.utc
LOCAL_TZ = timezone(timedelta(minutes=settings.LOCAL_UTC_OFFSET_MINUTES))


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_local(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert to the local offset. Naive datetimes are treated as UTC."""
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(LOCAL_TZ)


def iso_local(dt: Optional[datetime]) -> Optional[str]:
    """Serialize as ISO-8601 with the local offset (e.g. +05:30). Use for API response datetime fields."""
    if dt is None:
        return None
    return to_local(dt).isoformat()


def local_date(dt: Optional[datetime] = None) -> date:
    """Local calendar day of dt (default: now)."""
    return to_local(dt or now_utc()).date()


def local_day_bounds(day: date) -> Tuple[datetime, datetime]:
    """UTC [start, end) of a local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=LOCAL_TZ).astimezone(UTC)
    return start, start + timedelta(days=1)


def elapsed_minutes(start: datetime, end: datetime) -> float:
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / 60
