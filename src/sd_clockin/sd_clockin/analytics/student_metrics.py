"""Per-student hours and punctuality over a term.

Entries are expected in local wall-clock time. Date ranges are inclusive
calendar dates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional, Sequence

from ..checkins.model import CheckIn
from ..common.datetime_utils import week_monday, week_sunday
from ..common.time_utils import date_to_minutes, format_minutes_to_time
from ..core.constants import PUNCTUALITY_GRACE_MINUTES, SCHEDULE_OVERLAP_BUFFER
from ..core.enums import CheckInType, DayStatus
from .schedule_utils import (
    ParsedScheduleBlock,
    aggregate_simple_shifts,
    get_schedule_for_date,
    get_weekdays_in_range,
    is_day_off,
    parse_schedule_block,
)

Availability = Optional[Mapping[str, Sequence[str]]]

NO_CLOCK_OUT = "—"


@dataclass(frozen=True)
class PunctualityStats:
    on_time: int = 0
    early: int = 0
    late: int = 0
    not_scheduled: int = 0
    percentage: int = 0


@dataclass(frozen=True)
class WeekBreakdown:
    week_num: int
    start_date: date
    end_date: date
    expected_hours: float
    actual_hours: float
    shifts: int


@dataclass(frozen=True)
class ActualShift:
    start: str
    end: str
    hours: float
    clock_in_id: int
    clock_in_at: datetime
    clock_out_id: Optional[int] = None
    clock_out_at: Optional[datetime] = None


@dataclass(frozen=True)
class DayBreakdown:
    day: date
    day_name: str
    expected_shifts: list
    actual_shifts: list
    expected_hours: float
    actual_hours: float
    status: DayStatus
    is_day_off: bool


@dataclass(frozen=True)
class WeekOfDays:
    week_num: int
    start_date: date
    end_date: date
    days: list = field(default_factory=lambda: [None] * 5)


@dataclass(frozen=True)
class MonthOfDays:
    month_name: str
    month_year: str
    days: list
    total_expected: float
    total_actual: float
    calendar_weeks: list


def _blocks(availability: Availability, day: date) -> list[ParsedScheduleBlock]:
    parsed = (parse_schedule_block(b) for b in get_schedule_for_date(availability, day))
    return [p for p in parsed if p is not None]


def _sorted(entries: Iterable[CheckIn], type_: CheckInType) -> list[CheckIn]:
    return sorted((e for e in entries if e.type == type_), key=lambda e: e.timestamp)


def _overlaps_schedule(blocks: Sequence[ParsedScheduleBlock], start: int, end: int) -> bool:
    return any(
        start < b.end_minutes and end > b.start_minutes - SCHEDULE_OVERLAP_BUFFER
        for b in blocks
    )


def calculate_expected_hours(availability: Availability, start: date, end: date, days_off=()) -> float:
    minutes = 0
    for day in get_weekdays_in_range(start, end):
        if is_day_off(day, days_off):
            continue
        minutes += sum(b.duration_minutes for b in _blocks(availability, day))
    return minutes / 60


def calculate_actual_hours(entries: Sequence[CheckIn], start: date, end: date) -> float:
    """Pair each clock-in in range with the earliest unused same-day clock-out after it."""

    clock_outs = _sorted(entries, CheckInType.OUT)
    used: set[int] = set()
    minutes = 0.0

    for clock_in in _sorted(entries, CheckInType.IN):
        if not start <= clock_in.timestamp.date() <= end:
            continue
        for idx, out in enumerate(clock_outs):
            if idx in used:
                continue
            if out.timestamp > clock_in.timestamp and out.timestamp.date() == clock_in.timestamp.date():
                used.add(idx)
                minutes += (out.timestamp - clock_in.timestamp).total_seconds() / 60
                break

    return minutes / 60


def calculate_punctuality(
    availability: Availability,
    entries: Sequence[CheckIn],
    term_start: date,
    term_end: date,
    grace_minutes: int = PUNCTUALITY_GRACE_MINUTES,
) -> PunctualityStats:
    """Classify every clock-in of the term against the earliest block of its day.

    Clock-ins on unscheduled days, without a same-day clock-out, or whose
    work period misses every block count as ``not_scheduled``.
    """

    clock_ins = [
        e for e in _sorted(entries, CheckInType.IN) if term_start <= e.timestamp.date() <= term_end
    ]
    if not clock_ins:
        return PunctualityStats()

    clock_outs = _sorted(entries, CheckInType.OUT)
    on_time = early = late = not_scheduled = 0

    for clock_in in clock_ins:
        ts = clock_in.timestamp
        if ts.weekday() >= 5:
            continue

        blocks = _blocks(availability, ts.date())
        if not get_schedule_for_date(availability, ts.date()):
            not_scheduled += 1
            continue

        clock_out = next(
            (o for o in clock_outs if o.timestamp > ts and o.timestamp.date() == ts.date()),
            None,
        )
        if clock_out is None:
            not_scheduled += 1
            continue

        actual_start = date_to_minutes(ts)
        if not _overlaps_schedule(blocks, actual_start, date_to_minutes(clock_out.timestamp)):
            not_scheduled += 1
            continue

        diff = actual_start - min(b.start_minutes for b in blocks)
        if diff < -grace_minutes:
            early += 1
        elif diff <= grace_minutes:
            on_time += 1
        else:
            late += 1

    scheduled = on_time + early + late
    percentage = round((on_time + early) / scheduled * 100) if scheduled else 0
    return PunctualityStats(
        on_time=on_time, early=early, late=late, not_scheduled=not_scheduled, percentage=percentage
    )


def get_weekly_breakdown(
    availability: Availability,
    entries: Sequence[CheckIn],
    term_start: date,
    term_end: date,
    days_off=(),
) -> list[WeekBreakdown]:
    weeks: list[WeekBreakdown] = []
    monday = week_monday(term_start)
    last_sunday = week_sunday(term_end)
    week_num = 1

    while monday <= last_sunday:
        week_end = min(monday + timedelta(days=6), term_end)
        if monday <= term_end and week_end >= term_start:
            shifts = sum(
                1
                for e in entries
                if e.type == CheckInType.IN and monday <= e.timestamp.date() <= week_end
            )
            weeks.append(
                WeekBreakdown(
                    week_num=week_num,
                    start_date=monday,
                    end_date=week_end,
                    expected_hours=calculate_expected_hours(availability, monday, week_end, days_off),
                    actual_hours=calculate_actual_hours(entries, monday, week_end),
                    shifts=shifts,
                )
            )
        monday += timedelta(days=7)
        week_num += 1

    return weeks


def _actual_shifts(day_ins: Sequence[CheckIn], day_outs: Sequence[CheckIn]) -> tuple[list[ActualShift], float]:
    used: set[int] = set()
    shifts: list[ActualShift] = []
    total_minutes = 0.0

    for clock_in in day_ins:
        start = format_minutes_to_time(date_to_minutes(clock_in.timestamp), uppercase=True)
        match = next(
            (
                (idx, out)
                for idx, out in enumerate(day_outs)
                if idx not in used and out.timestamp > clock_in.timestamp
            ),
            None,
        )
        if match is None:
            shifts.append(
                ActualShift(
                    start=start,
                    end=NO_CLOCK_OUT,
                    hours=0,
                    clock_in_id=clock_in.checkin_id,
                    clock_in_at=clock_in.timestamp,
                )
            )
            continue

        idx, out = match
        used.add(idx)
        minutes = (out.timestamp - clock_in.timestamp).total_seconds() / 60
        total_minutes += minutes
        shifts.append(
            ActualShift(
                start=start,
                end=format_minutes_to_time(date_to_minutes(out.timestamp), uppercase=True),
                hours=minutes / 60,
                clock_in_id=clock_in.checkin_id,
                clock_in_at=clock_in.timestamp,
                clock_out_id=out.checkin_id,
                clock_out_at=out.timestamp,
            )
        )

    return shifts, total_minutes


def _day_status(
    *,
    off: bool,
    blocks: Sequence[ParsedScheduleBlock],
    scheduled: bool,
    day_ins: Sequence[CheckIn],
    day_outs: Sequence[CheckIn],
) -> DayStatus:
    if off:
        return DayStatus.DAY_OFF
    if not scheduled:
        return DayStatus.UNSCHEDULED_WORK if day_ins else DayStatus.NOT_SCHEDULED
    if not day_ins:
        return DayStatus.ABSENT

    def _first_out_after(clock_in: CheckIn) -> Optional[CheckIn]:
        return next((o for o in day_outs if o.timestamp > clock_in.timestamp), None)

    for clock_in in day_ins:
        out = _first_out_after(clock_in)
        start = date_to_minutes(clock_in.timestamp)
        # An open clock-in is judged by its start alone.
        end = date_to_minutes(out.timestamp) if out is not None else start + 1
        if not _overlaps_schedule(blocks, start, end):
            return DayStatus.UNSCHEDULED_WORK

    if any(_first_out_after(c) is None for c in day_ins):
        return DayStatus.NO_CLOCK_OUT
    return DayStatus.COMPLETED


def get_daily_breakdown(
    availability: Availability,
    entries: Sequence[CheckIn],
    term_start: date,
    term_end: date,
    days_off=(),
) -> list[DayBreakdown]:
    days: list[DayBreakdown] = []
    clock_ins = _sorted(entries, CheckInType.IN)
    clock_outs = _sorted(entries, CheckInType.OUT)

    for day in get_weekdays_in_range(term_start, term_end):
        off = is_day_off(day, days_off)
        blocks = _blocks(availability, day)
        scheduled = bool(get_schedule_for_date(availability, day))

        expected_blocks = [] if off else blocks
        expected_shifts = aggregate_simple_shifts([(b.start, b.end) for b in expected_blocks])
        expected_minutes = sum(b.duration_minutes for b in expected_blocks)

        day_ins = [e for e in clock_ins if e.timestamp.date() == day]
        day_outs = [e for e in clock_outs if e.timestamp.date() == day]
        actual_shifts, actual_minutes = _actual_shifts(day_ins, day_outs)

        days.append(
            DayBreakdown(
                day=day,
                day_name=day.strftime("%A"),
                expected_shifts=[{"start": s, "end": e} for s, e in expected_shifts],
                actual_shifts=actual_shifts,
                expected_hours=expected_minutes / 60,
                actual_hours=actual_minutes / 60,
                status=_day_status(
                    off=off, blocks=blocks, scheduled=scheduled, day_ins=day_ins, day_outs=day_outs
                ),
                is_day_off=off,
            )
        )

    return days


def group_days_by_week(days: Sequence[DayBreakdown], term_start: date, term_end: date) -> list[WeekOfDays]:
    """Monday-to-Friday slots per calendar week of the term."""

    weeks: list[WeekOfDays] = []
    if not days:
        return weeks

    monday = week_monday(term_start)
    last_sunday = week_sunday(term_end)
    week_num = 1

    while monday <= last_sunday:
        week_end = min(monday + timedelta(days=6), term_end)
        slots: list[Optional[DayBreakdown]] = [None] * 5
        for d in days:
            if monday <= d.day <= week_end and d.day.weekday() < 5:
                slots[d.day.weekday()] = d

        if any(slots) or (monday <= term_end and week_end >= term_start):
            weeks.append(WeekOfDays(week_num=week_num, start_date=monday, end_date=week_end, days=slots))

        monday += timedelta(days=7)
        week_num += 1

    return weeks


def group_days_by_month(days: Sequence[DayBreakdown]) -> list[MonthOfDays]:
    months: list[MonthOfDays] = []
    buckets: dict[str, list[DayBreakdown]] = {}
    for d in days:
        buckets.setdefault(d.day.strftime("%B %Y"), []).append(d)

    for key, month_days in buckets.items():
        calendar_weeks: list[list[Optional[DayBreakdown]]] = []
        current: list[Optional[DayBreakdown]] = [None] * 5
        for d in month_days:
            idx = d.day.weekday()
            if idx == 0 and any(current):
                calendar_weeks.append(current)
                current = [None] * 5
            if idx < 5:
                current[idx] = d
        if any(current):
            calendar_weeks.append(current)

        months.append(
            MonthOfDays(
                month_name=month_days[0].day.strftime("%B"),
                month_year=key,
                days=list(month_days),
                total_expected=sum(d.expected_hours for d in month_days),
                total_actual=sum(d.actual_hours for d in month_days),
                calendar_weeks=calendar_weeks,
            )
        )

    return months
