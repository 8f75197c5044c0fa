"""Schedule block parsing, week numbering and day-off checks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import week_monday
from ..common.time_utils import format_minutes_to_time, normalize_time, time_to_minutes
from ..core.constants import AGGREGATE_TOLERANCE_MINUTES, DAILY_AGGREGATE_TOLERANCE_MINUTES, WEEKDAYS


@dataclass(frozen=True)
class ShiftTime:
    start: str
    end: str
    original: str

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end)


@dataclass(frozen=True)
class ParsedScheduleBlock:
    start: str
    end: str
    start_minutes: int
    end_minutes: int
    duration_minutes: int


def day_name(day: date) -> Optional[str]:
    """Availability key for a date; weekends have none."""
    idx = day.weekday()
    return WEEKDAYS[idx] if idx < len(WEEKDAYS) else None


def get_schedule_for_date(availability: Optional[Mapping[str, Sequence[str]]], day: date) -> list[str]:
    name = day_name(day)
    if not name or not availability:
        return []
    return list(availability.get(name) or [])


def parse_schedule_block(block: str) -> Optional[ParsedScheduleBlock]:
    if not block or "-" not in block:
        return None

    start_raw, end_raw = block.split("-")[:2]
    if not start_raw.strip() or not end_raw.strip():
        return None

    start = normalize_time(start_raw.strip())
    end = normalize_time(end_raw.strip())
    start_minutes = time_to_minutes(start)
    end_minutes = time_to_minutes(end)
    return ParsedScheduleBlock(
        start=start,
        end=end,
        start_minutes=start_minutes,
        end_minutes=end_minutes,
        duration_minutes=end_minutes - start_minutes,
    )


def expected_start_from_block(block: str) -> Optional[str]:
    if not block:
        return None
    start = block.split("-")[0].strip()
    return normalize_time(start) if start else None


def expected_end_from_block(block: str) -> Optional[str]:
    if not block:
        return None
    parts = block.split("-")
    end = parts[1].strip() if len(parts) > 1 else ""
    return normalize_time(end) if end else None


def parse_schedule_blocks(blocks: Iterable[str]) -> list[ShiftTime]:
    return [
        ShiftTime(
            start=expected_start_from_block(block) or "",
            end=expected_end_from_block(block) or "",
            original=block,
        )
        for block in blocks
    ]


def aggregate_consecutive_shifts(
    shifts: Sequence[ShiftTime], tolerance_minutes: int = AGGREGATE_TOLERANCE_MINUTES
) -> list[ShiftTime]:
    """Merge back-to-back blocks: 8-9, 9-10, 10-11 -> 8-11."""

    if not shifts:
        return []

    ordered = sorted(shifts, key=lambda s: s.start_minutes)
    aggregated: list[ShiftTime] = []
    current = ordered[0]

    for shift in ordered[1:]:
        if abs(current.end_minutes - shift.start_minutes) <= tolerance_minutes:
            end = format_minutes_to_time(max(current.end_minutes, shift.end_minutes))
            current = ShiftTime(start=current.start, end=end, original=f"{current.start}-{end}")
        else:
            aggregated.append(current)
            current = shift

    aggregated.append(current)
    return aggregated


def aggregate_simple_shifts(
    shifts: Sequence[tuple[str, str]], tolerance_minutes: int = DAILY_AGGREGATE_TOLERANCE_MINUTES
) -> list[tuple[str, str]]:
    merged = aggregate_consecutive_shifts(
        [ShiftTime(start=s, end=e, original=f"{s}-{e}") for s, e in shifts],
        tolerance_minutes,
    )
    return [(s.start, s.end) for s in merged]


def get_week_number(day: date, term_start: date) -> int:
    """1-based week index; weeks start on the Monday of the term's first week."""
    diff_days = (week_monday(day) - week_monday(term_start)).days
    return diff_days // 7 + 1


def get_week_start_date(week_num: int, term_start: date) -> date:
    return week_monday(term_start) + timedelta(days=(week_num - 1) * 7)


def get_weekdays_in_range(start: date, end: date) -> list[date]:
    days: list[date] = []
    current = start
    while current <= end:
        if current.weekday() < 5:
            days.append(current)
        current += timedelta(days=1)
    return days


def is_day_off(day: date, days_off: Optional[Iterable]) -> bool:
    return any(d.start_date <= day <= d.end_date for d in (days_off or ()))


def _format_compact(value: str) -> str:
    minutes = time_to_minutes(value)
    hours24, mins = divmod(minutes, 60)
    hours12, period = hours24, "am"
    if hours24 == 0:
        hours12 = 12
    elif hours24 == 12:
        period = "pm"
    elif hours24 > 12:
        hours12, period = hours24 - 12, "pm"
    if mins == 0:
        return f"{hours12}{period}"
    return f"{hours12}:{mins:02d}{period}"


def format_shift_time_compact(block: str) -> str:
    """"9:00 AM-5:00 PM" -> "9am-5pm"."""
    parsed = parse_schedule_block(block)
    if not parsed:
        return block
    return f"{_format_compact(parsed.start)}-{_format_compact(parsed.end)}"
