from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into naive UTC.

    Values without an offset are taken as UTC.
    """

    raw = str(value).strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid timestamp: {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_timestamp(value: datetime | None) -> str | None:
    """Naive UTC datetime -> ISO string with a Z suffix."""
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds") + "Z"


def format_date(value: date | None) -> str | None:
    return value.strftime("%Y-%m-%d") if value else None


def now_utc() -> datetime:
    """Current UTC time as a naive datetime.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


@lru_cache(maxsize=8)
def get_zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def to_local(value: datetime, tz_name: str) -> datetime:
    """Naive UTC -> naive wall-clock time in ``tz_name``."""
    aware = value.replace(tzinfo=timezone.utc).astimezone(get_zone(tz_name))
    return aware.replace(tzinfo=None)


def to_utc(value: datetime, tz_name: str) -> datetime:
    """Naive wall-clock time in ``tz_name`` -> naive UTC."""
    aware = value.replace(tzinfo=get_zone(tz_name))
    return aware.astimezone(timezone.utc).replace(tzinfo=None)


def local_day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """UTC range [start, end) covering one local calendar day."""
    start = to_utc(datetime.combine(day, time.min), tz_name)
    end = to_utc(datetime.combine(day + timedelta(days=1), time.min), tz_name)
    return start, end


def week_monday(day: date) -> date:
    return day - timedelta(days=day.weekday())


def week_sunday(day: date) -> date:
    return week_monday(day) + timedelta(days=6)


def date_key(day: date) -> str:
    return day.strftime("%Y-%m-%d")
