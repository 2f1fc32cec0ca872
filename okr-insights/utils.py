import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

# Calendar helpers shared by the engine and the query layer.
# Dates are plain `date` values; instants are aware datetimes.

TzLike = Union[str, ZoneInfo]


def _zone(tz: TzLike) -> ZoneInfo:
    return tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)


def ensure_timezone_aware(dt: datetime) -> datetime:
    """Ensures a datetime object is timezone-aware, assuming UTC if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        return ensure_timezone_aware(value)
    return ensure_timezone_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))


def parse_ymd(value: Union[str, date, None]) -> Optional[date]:
    """Parse a YYYY-MM-DD string. Returns None when it can't be parsed."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        return None


def today_local(tz: TzLike, now: Optional[datetime] = None) -> date:
    """Today's calendar date in `tz`. `now` lets callers pin the clock."""
    instant = ensure_timezone_aware(now) if now is not None else datetime.now(timezone.utc)
    return instant.astimezone(_zone(tz)).date()


def add_days(day: date, n: int) -> date:
    return day + timedelta(days=n)


def to_local_date(timestamp: Union[str, datetime], tz: TzLike) -> date:
    """Calendar day an instant falls on in `tz`."""
    return parse_timestamp(timestamp).astimezone(_zone(tz)).date()


def week_start_for(day: date) -> date:
    """Monday on or before `day`."""
    return day - timedelta(days=day.weekday())


def is_weekday(day: date) -> bool:
    return day.weekday() < 5


def business_days_elapsed(week_start: date, today: date, total_business_days: int) -> int:
    """
    Mon-Fri days from week_start through today (inclusive), capped at
    total_business_days. Zero when today is before week_start.
    """
    if today < week_start:
        return 0
    elapsed = sum(
        1 for offset in range((today - week_start).days + 1)
        if is_weekday(week_start + timedelta(days=offset))
    )
    return min(elapsed, total_business_days)


def local_day_start_utc(day: date, tz: TzLike) -> datetime:
    """UTC instant of local midnight for `day` in `tz` (DST-correct)."""
    return datetime.combine(day, time.min, tzinfo=_zone(tz)).astimezone(timezone.utc)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


DAY_NAMES_SHORT = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def day_label(day: date) -> str:
    """Short label like 'Wed 14'."""
    return f"{DAY_NAMES_SHORT[day.weekday()]} {day.day}"
