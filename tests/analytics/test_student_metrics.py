from datetime import date, datetime

from src.sd_clockin.sd_clockin.analytics.student_metrics import (
    NO_CLOCK_OUT,
    PunctualityStats,
    calculate_actual_hours,
    calculate_expected_hours,
    calculate_punctuality,
    get_daily_breakdown,
    get_weekly_breakdown,
    group_days_by_month,
    group_days_by_week,
)
from src.sd_clockin.sd_clockin.checkins.model import CheckIn
from src.sd_clockin.sd_clockin.core.enums import CheckInType, DayStatus
from src.sd_clockin.sd_clockin.terms.model import DayOff

AVAILABILITY = {"monday": ["09:00-12:00"], "wednesday": ["13:00-15:00"]}
TERM_START = date(2026, 9, 21)
TERM_END = date(2026, 10, 2)


def _e(checkin_id, type_, month, day, hour, minute=0):
    return CheckIn(
        checkin_id=checkin_id,
        student_id=1,
        term_id=1,
        type=CheckInType(type_),
        timestamp=datetime(2026, month, day, hour, minute),
    )


def test_expected_hours_skip_days_off():
    assert calculate_expected_hours(AVAILABILITY, TERM_START, TERM_END) == 10.0

    days_off = [DayOff(start_date=date(2026, 9, 23), end_date=date(2026, 9, 23))]
    assert calculate_expected_hours(AVAILABILITY, TERM_START, TERM_END, days_off) == 8.0


def test_expected_hours_without_schedule():
    assert calculate_expected_hours(None, TERM_START, TERM_END) == 0


def test_actual_hours_pair_same_day_entries_only():
    entries = [
        _e(1, "in", 9, 21, 9),
        _e(2, "out", 9, 21, 12),
        _e(3, "in", 9, 23, 13),
        _e(4, "in", 9, 28, 9, 30),
        _e(5, "out", 9, 28, 11, 30),
    ]

    assert calculate_actual_hours(entries, TERM_START, TERM_END) == 5.0
    assert calculate_actual_hours(entries, date(2026, 9, 28), date(2026, 9, 28)) == 2.0


def test_punctuality_classifies_each_clock_in():
    entries = [
        _e(1, "in", 9, 21, 9, 5),
        _e(2, "out", 9, 21, 12),
        _e(3, "in", 9, 23, 12, 30),
        _e(4, "out", 9, 23, 15),
        _e(5, "in", 9, 28, 9, 30),
        _e(6, "out", 9, 28, 11, 30),
        # Tuesday has no schedule.
        _e(7, "in", 9, 22, 10),
        _e(8, "out", 9, 22, 11),
        # Never clocked out.
        _e(9, "in", 9, 30, 13),
        # Weekend entries are ignored.
        _e(10, "in", 9, 26, 10),
    ]

    stats = calculate_punctuality(AVAILABILITY, entries, TERM_START, TERM_END)

    assert stats == PunctualityStats(on_time=1, early=1, late=1, not_scheduled=2, percentage=67)


def test_punctuality_work_outside_every_block_is_not_scheduled():
    entries = [_e(1, "in", 9, 21, 16), _e(2, "out", 9, 21, 17)]

    stats = calculate_punctuality(AVAILABILITY, entries, TERM_START, TERM_END)

    assert stats.not_scheduled == 1
    assert stats.percentage == 0


def test_punctuality_without_entries():
    assert calculate_punctuality(AVAILABILITY, [], TERM_START, TERM_END) == PunctualityStats()


def test_weekly_breakdown():
    entries = [_e(1, "in", 9, 21, 9), _e(2, "out", 9, 21, 12), _e(3, "in", 9, 30, 13), _e(4, "out", 9, 30, 14)]

    weeks = get_weekly_breakdown(AVAILABILITY, entries, TERM_START, TERM_END)

    assert [w.week_num for w in weeks] == [1, 2]
    assert weeks[0].start_date == date(2026, 9, 21)
    assert weeks[1].end_date == date(2026, 10, 2)
    assert [w.expected_hours for w in weeks] == [5.0, 5.0]
    assert [w.actual_hours for w in weeks] == [3.0, 1.0]
    assert [w.shifts for w in weeks] == [1, 1]


def test_daily_breakdown_statuses():
    entries = [
        _e(1, "in", 9, 21, 9),
        _e(2, "out", 9, 21, 12),
        _e(3, "in", 9, 24, 10),
        _e(4, "out", 9, 24, 11),
        _e(5, "in", 9, 30, 13, 5),
    ]
    days_off = [DayOff(start_date=date(2026, 9, 23), end_date=date(2026, 9, 23))]

    days = {d.day: d for d in get_daily_breakdown(AVAILABILITY, entries, TERM_START, TERM_END, days_off)}

    assert len(days) == 10
    assert days[date(2026, 9, 21)].status == DayStatus.COMPLETED
    assert days[date(2026, 9, 22)].status == DayStatus.NOT_SCHEDULED
    assert days[date(2026, 9, 23)].status == DayStatus.DAY_OFF
    assert days[date(2026, 9, 23)].expected_hours == 0
    assert days[date(2026, 9, 24)].status == DayStatus.UNSCHEDULED_WORK
    assert days[date(2026, 9, 28)].status == DayStatus.ABSENT
    assert days[date(2026, 9, 30)].status == DayStatus.NO_CLOCK_OUT

    monday = days[date(2026, 9, 21)]
    assert monday.day_name == "Monday"
    assert monday.expected_shifts == [{"start": "9:00 AM", "end": "12:00 PM"}]
    assert monday.actual_hours == 3.0
    assert (monday.actual_shifts[0].start, monday.actual_shifts[0].end) == ("9:00 AM", "12:00 PM")

    open_shift = days[date(2026, 9, 30)].actual_shifts[0]
    assert open_shift.end == NO_CLOCK_OUT
    assert open_shift.hours == 0
    assert open_shift.clock_out_id is None


def test_group_days_by_week_fills_weekday_slots():
    start = date(2026, 9, 23)
    days = get_daily_breakdown(AVAILABILITY, [], start, TERM_END)

    weeks = group_days_by_week(days, start, TERM_END)

    assert len(weeks) == 2
    assert weeks[0].days[0] is None and weeks[0].days[1] is None
    assert [d.day for d in weeks[0].days[2:]] == [date(2026, 9, 23), date(2026, 9, 24), date(2026, 9, 25)]
    assert all(d is not None for d in weeks[1].days)
    assert group_days_by_week([], start, TERM_END) == []


def test_group_days_by_month():
    days = get_daily_breakdown(AVAILABILITY, [], date(2026, 9, 28), TERM_END)

    months = group_days_by_month(days)

    assert [m.month_year for m in months] == ["September 2026", "October 2026"]
    september, october = months
    assert september.total_expected == 5.0
    assert [d.day.day if d else None for d in september.calendar_weeks[0]] == [28, 29, 30, None, None]
    assert [d.day.day if d else None for d in october.calendar_weeks[0]] == [None, None, None, 1, 2]
