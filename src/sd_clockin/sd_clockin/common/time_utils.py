"""Time-of-day helpers shared by schedules and analytics.

Schedules store blocks as "HH:MM-HH:MM" strings, while dashboards show
"9:00 am" style times. Everything here works in minutes since midnight.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

_PERIOD_RE = re.compile(r"\s*(AM|PM)\s*", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _leading_int(value: str) -> Optional[int]:
    m = _LEADING_INT_RE.match(value)
    return int(m.group(1)) if m else None


def _split_hours_minutes(value: str) -> tuple[Optional[int], Optional[int]]:
    if ":" in value:
        parts = value.split(":")
        return _leading_int(parts[0]), _leading_int(parts[1] or "0")
    return _leading_int(value), 0


def time_to_minutes(value: Optional[str]) -> int:
    """Minutes since midnight for "9:00 AM", "9 AM", "09:00", "17".

    Unparsable input yields 0.
    """

    if not value:
        return 0

    upper = value.upper().strip()
    has_am = "AM" in upper
    has_pm = "PM" in upper

    hours, minutes = _split_hours_minutes(_PERIOD_RE.sub("", value).strip())
    if hours is None or minutes is None:
        return 0

    if has_am or has_pm:
        if hours == 12 and has_am:
            hours = 0
        elif hours != 12 and has_pm:
            hours += 12

    return hours * 60 + minutes


def date_to_minutes(value: datetime) -> int:
    return value.hour * 60 + value.minute


def format_minutes_to_time(total_minutes: float, uppercase: bool = False) -> str:
    hours24 = int(total_minutes // 60)
    minutes = int(round(total_minutes % 60))

    am, pm = ("AM", "PM") if uppercase else ("am", "pm")
    hours12, period = hours24, am
    if hours24 == 0:
        hours12 = 12
    elif hours24 == 12:
        period = pm
    elif hours24 > 12:
        hours12, period = hours24 - 12, pm

    return f"{hours12}:{minutes:02d} {period}"


def format_time_for_display(value: Optional[str]) -> str:
    if not value:
        return "—"

    upper = value.upper().strip()
    if "AM" in upper or "PM" in upper:
        return _PERIOD_RE.sub(lambda m: f" {m.group(1).lower()}", value).strip()

    return format_minutes_to_time(time_to_minutes(value))


def normalize_time(value: str) -> str:
    """Normalize a time string to "9:00 AM" form."""

    upper = value.upper()
    has_minutes = ":" in value

    if "AM" in upper or "PM" in upper:
        normalized = re.sub(r"([ap]m)", lambda m: f" {m.group(1).upper()}", value, flags=re.IGNORECASE)
        normalized = re.sub(r"\s+", " ", normalized).strip()
        if not has_minutes:
            normalized = re.sub(r"\s(AM|PM)", r":00 \1", normalized, count=1)
        return normalized

    parts = value.split(":")
    hour = _leading_int(parts[0])
    if hour is None:
        return value
    minute = parts[1] if len(parts) > 1 and parts[1] else "00"

    if hour == 0:
        return f"12:{minute} AM"
    if hour < 12:
        return f"{hour}:{minute} AM"
    if hour == 12:
        return f"12:{minute} PM"
    return f"{hour - 12}:{minute} PM"


def format_timestamp_to_display(value: datetime) -> str:
    return format_minutes_to_time(date_to_minutes(value))


def calculate_duration_minutes(start: str, end: str) -> int:
    return time_to_minutes(end) - time_to_minutes(start)


def format_duration(minutes: float, style: str = "short") -> str:
    hours = int(minutes // 60)
    mins = int(round(minutes % 60))

    if style == "long":
        hour_s = f"{hours} hour{'s' if hours != 1 else ''}"
        min_s = f"{mins} minute{'s' if mins != 1 else ''}"
        if hours == 0:
            return min_s
        if mins == 0:
            return hour_s
        return f"{hour_s} {min_s}"

    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def format_hours(hours: float, decimals: int = 1) -> str:
    return f"{hours:.{decimals}f} hr{'s' if hours != 1 else ''}"
