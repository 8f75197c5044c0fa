"""Aggregates across all students of a term for the admin dashboard."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Mapping, Optional, Sequence

from ..checkins.model import CheckIn
from ..common.datetime_utils import week_monday
from ..common.time_utils import date_to_minutes, time_to_minutes
from ..core.constants import HOURLY_STAFFING_END, HOURLY_STAFFING_START, MAX_SESSION_HOURS, PUNCTUALITY_GRACE_MINUTES
from ..core.enums import CheckInType, PunctualityPeriod
from .schedule_utils import expected_start_from_block, get_schedule_for_date
from .shift_matching import current_status, match_clock_entries_to_shifts, today_status


@dataclass(frozen=True)
class StaffSnapshot:
    """One student's schedule and local-time clock entries for a term."""

    student_id: int
    name: str
    availability: Mapping[str, Sequence[str]] = field(default_factory=dict)
    entries: Sequence[CheckIn] = ()


@dataclass(frozen=True)
class HourlyStaffing:
    hour: str
    expected: int
    actual: int


@dataclass(frozen=True)
class WeeklyHours:
    week: str
    start_date: date
    hours: float


@dataclass(frozen=True)
class PeriodPunctuality:
    on_time: int
    late: int
    early: int


@dataclass(frozen=True)
class TermStats:
    total_staff: int
    avg_punctuality: float
    total_manual: int
    auto_clock_outs: int
    total_clock_outs: int
    auto_clock_out_rate: float
    total_hours: float
    avg_hours_per_person: float


@dataclass(frozen=True)
class OverviewRow:
    student_id: int
    name: str
    schedule: list
    clock_in: str
    today_status: str
    current_status: str
    last_entry: Optional[datetime]


def _hour_label(hour: int) -> str:
    if hour == 12:
        return "12PM"
    if hour < 12:
        return f"{hour}AM"
    return f"{hour - 12}PM"


def _sessions(entries: Sequence[CheckIn]) -> list[tuple[datetime, Optional[datetime]]]:
    """Sequential pairing: an ``in`` opens a session, the next ``out`` closes it."""

    sessions: list[tuple[datetime, Optional[datetime]]] = []
    opened: Optional[datetime] = None
    for e in sorted(entries, key=lambda e: e.timestamp):
        if e.type == CheckInType.IN:
            opened = e.timestamp
        elif opened is not None:
            sessions.append((opened, e.timestamp))
            opened = None
    if opened is not None:
        sessions.append((opened, None))
    return sessions


def _plausible_hours(start: datetime, end: datetime) -> Optional[float]:
    hours = (end - start).total_seconds() / 3600
    return hours if 0 < hours < MAX_SESSION_HOURS else None


def hourly_staffing(
    staff: Sequence[StaffSnapshot],
    day: date,
    now: datetime,
    start_hour: int = HOURLY_STAFFING_START,
    end_hour: int = HOURLY_STAFFING_END,
) -> list[HourlyStaffing]:
    """Expected blocks and students actually present for each hour of ``day``."""

    rows: list[HourlyStaffing] = []
    for hour in range(start_hour, end_hour + 1):
        hour_start = datetime.combine(day, time(hour, 0))
        hour_end = datetime.combine(day, time(hour, 59, 59, 999000))
        expected = actual = 0

        for s in staff:
            for block in get_schedule_for_date(s.availability, day):
                parts = [p.strip() for p in block.split("-")]
                if len(parts) < 2 or not parts[0] or not parts[1]:
                    continue
                if time_to_minutes(parts[0]) < (hour + 1) * 60 and time_to_minutes(parts[1]) > hour * 60:
                    expected += 1

            day_entries = [e for e in s.entries if e.timestamp.date() == day]
            if any(
                clock_in <= hour_end and (clock_out or now) >= hour_start
                for clock_in, clock_out in _sessions(day_entries)
            ):
                actual += 1

        rows.append(
            HourlyStaffing(hour=f"{_hour_label(hour)}-{_hour_label(hour + 1)}", expected=expected, actual=actual)
        )
    return rows


def weekly_hours(staff: Sequence[StaffSnapshot], term_start: date, term_end: date, today: date) -> list[WeeklyHours]:
    last_day = min(term_end, today)
    buckets: list[tuple[date, date]] = []
    monday = week_monday(term_start)
    while monday <= last_day:
        buckets.append((monday, monday + timedelta(days=6)))
        monday += timedelta(days=7)

    totals = [0.0] * len(buckets)
    for s in staff:
        for clock_in, clock_out in _sessions(s.entries):
            if clock_out is None:
                continue
            hours = _plausible_hours(clock_in, clock_out)
            if hours is None:
                continue
            for idx, (start, end) in enumerate(buckets):
                if start <= clock_in.date() <= end:
                    totals[idx] += hours
                    break

    return [
        WeeklyHours(
            week=f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}",
            start_date=start,
            hours=round(total, 1),
        )
        for (start, end), total in zip(buckets, totals)
    ]


def period_range(period: PunctualityPeriod, today: date, term_start: date, term_end: date) -> tuple[date, date]:
    if period == PunctualityPeriod.DAY:
        return today, today
    if period == PunctualityPeriod.WEEK:
        monday = week_monday(today)
        return monday, monday + timedelta(days=6)
    if period == PunctualityPeriod.MONTH:
        last = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last)
    return term_start, term_end


def period_punctuality(
    staff: Sequence[StaffSnapshot],
    start: date,
    end: date,
    grace_minutes: int = PUNCTUALITY_GRACE_MINUTES,
) -> PeriodPunctuality:
    """Compare clock-ins with the first block of their day.

    ``on_time`` includes early arrivals; clock-ins with no schedule count as on time.
    """

    on_time = late = early = 0
    for s in staff:
        for e in s.entries:
            if e.type != CheckInType.IN or not start <= e.timestamp.date() <= end:
                continue
            blocks = get_schedule_for_date(s.availability, e.timestamp.date())
            expected = expected_start_from_block(blocks[0]) if blocks else None
            if not expected:
                on_time += 1
                continue
            diff = date_to_minutes(e.timestamp) - time_to_minutes(expected)
            if diff < -grace_minutes:
                early += 1
                on_time += 1
            elif diff <= grace_minutes:
                on_time += 1
            else:
                late += 1
    return PeriodPunctuality(on_time=on_time, late=late, early=early)


def term_stats(staff: Sequence[StaffSnapshot], term_start: date, term_end: date) -> TermStats:
    punctuality = period_punctuality(staff, term_start, term_end)
    total_manual = auto_clock_outs = total_clock_outs = 0
    hours_worked = 0.0

    for s in staff:
        entries = [e for e in s.entries if term_start <= e.timestamp.date() <= term_end]
        for e in entries:
            if e.is_manual:
                total_manual += 1
            if e.type == CheckInType.OUT:
                total_clock_outs += 1
                if e.is_auto_clock_out:
                    auto_clock_outs += 1
        for clock_in, clock_out in _sessions(entries):
            if clock_out is not None:
                hours_worked += _plausible_hours(clock_in, clock_out) or 0

    arrivals = punctuality.on_time + punctuality.late
    return TermStats(
        total_staff=len(staff),
        avg_punctuality=(punctuality.on_time / arrivals * 100) if arrivals else 0,
        total_manual=total_manual,
        auto_clock_outs=auto_clock_outs,
        total_clock_outs=total_clock_outs,
        auto_clock_out_rate=(auto_clock_outs / total_clock_outs * 100) if total_clock_outs else 0,
        total_hours=round(hours_worked, 1),
        avg_hours_per_person=round(hours_worked / len(staff), 1) if staff else 0,
    )


def attendance_overview(staff: Sequence[StaffSnapshot], day: date, now: datetime) -> list[OverviewRow]:
    rows: list[OverviewRow] = []
    for s in staff:
        matched = match_clock_entries_to_shifts(s.availability, s.entries, day, now=now)
        first_in = next((m.clock_in for m in matched if m.clock_in), None)
        last_entry = max((e.timestamp for e in s.entries), default=None)
        rows.append(
            OverviewRow(
                student_id=s.student_id,
                name=s.name,
                schedule=get_schedule_for_date(s.availability, day),
                clock_in=first_in or "—",
                today_status=today_status(matched),
                current_status=current_status(s.availability, s.entries, day),
                last_entry=last_entry,
            )
        )
    return rows
