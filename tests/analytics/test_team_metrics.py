from datetime import date, datetime

import pytest

from src.sd_clockin.sd_clockin.analytics.team_metrics import (
    PeriodPunctuality,
    StaffSnapshot,
    attendance_overview,
    hourly_staffing,
    period_punctuality,
    period_range,
    term_stats,
    weekly_hours,
)
from src.sd_clockin.sd_clockin.checkins.model import CheckIn
from src.sd_clockin.sd_clockin.core.enums import CheckInType, PunctualityPeriod

TERM_START = date(2026, 9, 21)
TERM_END = date(2026, 10, 2)


def _e(checkin_id, student_id, type_, day, hour, minute=0, **flags):
    return CheckIn(
        checkin_id=checkin_id,
        student_id=student_id,
        term_id=1,
        type=CheckInType(type_),
        timestamp=datetime(2026, day[0], day[1], hour, minute),
        **flags,
    )


@pytest.fixture
def staff():
    ana = StaffSnapshot(
        student_id=1,
        name="Ana",
        availability={"monday": ["09:00-12:00"]},
        entries=[
            _e(1, 1, "in", (9, 21), 8, 40),
            _e(2, 1, "out", (9, 21), 12, 0, is_manual=True, is_auto_clock_out=True),
            _e(3, 1, "in", (9, 21), 13, 0),
        ],
    )
    ben = StaffSnapshot(
        student_id=2,
        name="Ben",
        availability={"monday": ["10:00-14:00"]},
        entries=[
            _e(4, 2, "in", (9, 21), 10, 30),
            _e(5, 2, "out", (9, 21), 14, 0),
            # Thirteen hours is treated as a forgotten clock-out.
            _e(6, 2, "in", (9, 28), 8, 0),
            _e(7, 2, "out", (9, 28), 21, 0),
        ],
    )
    return [ana, ben]


def test_hourly_staffing_counts_expected_and_present(staff):
    rows = {r.hour: r for r in hourly_staffing(staff, date(2026, 9, 21), datetime(2026, 9, 21, 15, 30))}

    assert len(rows) == 9
    assert (rows["8AM-9AM"].expected, rows["8AM-9AM"].actual) == (0, 1)
    assert (rows["9AM-10AM"].expected, rows["9AM-10AM"].actual) == (1, 1)
    assert (rows["10AM-11AM"].expected, rows["10AM-11AM"].actual) == (2, 2)
    # Ana's open afternoon session counts until now.
    assert (rows["1PM-2PM"].expected, rows["1PM-2PM"].actual) == (1, 2)
    assert (rows["4PM-5PM"].expected, rows["4PM-5PM"].actual) == (0, 0)


def test_weekly_hours_skip_implausible_sessions(staff):
    weeks = weekly_hours(staff, TERM_START, TERM_END, today=date(2026, 9, 29))

    assert [w.week for w in weeks] == ["Sep 21 - Sep 27", "Sep 28 - Oct 4"]
    assert [w.hours for w in weeks] == [6.8, 0.0]


def test_weekly_hours_stop_at_today(staff):
    weeks = weekly_hours(staff, TERM_START, TERM_END, today=date(2026, 9, 23))

    assert len(weeks) == 1


def test_period_range():
    today = date(2026, 9, 23)

    assert period_range(PunctualityPeriod.DAY, today, TERM_START, TERM_END) == (today, today)
    assert period_range(PunctualityPeriod.WEEK, today, TERM_START, TERM_END) == (
        date(2026, 9, 21),
        date(2026, 9, 27),
    )
    assert period_range(PunctualityPeriod.MONTH, today, TERM_START, TERM_END) == (
        date(2026, 9, 1),
        date(2026, 9, 30),
    )
    assert period_range(PunctualityPeriod.TERM, today, TERM_START, TERM_END) == (TERM_START, TERM_END)


def test_period_punctuality_counts_early_as_on_time(staff):
    result = period_punctuality(staff, date(2026, 9, 21), date(2026, 9, 21))

    assert result == PeriodPunctuality(on_time=1, late=2, early=1)


def test_period_punctuality_unscheduled_clock_in_is_on_time():
    snapshot = StaffSnapshot(student_id=3, name="Cy", entries=[_e(1, 3, "in", (9, 22), 15, 0)])

    assert period_punctuality([snapshot], TERM_START, TERM_END) == PeriodPunctuality(on_time=1, late=0, early=0)


def test_term_stats(staff):
    stats = term_stats(staff, TERM_START, TERM_END)

    assert stats.total_staff == 2
    assert stats.avg_punctuality == pytest.approx(50.0)
    assert stats.total_manual == 1
    assert (stats.auto_clock_outs, stats.total_clock_outs) == (1, 3)
    assert stats.auto_clock_out_rate == pytest.approx(100 / 3)
    assert stats.total_hours == 6.8
    assert stats.avg_hours_per_person == 3.4


def test_term_stats_without_staff():
    stats = term_stats([], TERM_START, TERM_END)

    assert stats.total_staff == 0
    assert stats.avg_hours_per_person == 0
    assert stats.auto_clock_out_rate == 0


def test_attendance_overview(staff):
    nobody = StaffSnapshot(student_id=3, name="Cy")

    rows = {r.name: r for r in attendance_overview(staff + [nobody], date(2026, 9, 21), datetime(2026, 9, 21, 15, 30))}

    assert rows["Ana"].clock_in == "8:40 am"
    assert rows["Ana"].today_status == "early"
    assert rows["Ana"].current_status == "present"
    assert rows["Ana"].last_entry == datetime(2026, 9, 21, 13, 0)

    assert rows["Ben"].today_status == "late"
    assert rows["Ben"].current_status == "expected"
    assert rows["Ben"].schedule == ["10:00-14:00"]

    assert rows["Cy"].clock_in == "—"
    assert rows["Cy"].today_status == "expected"
    assert rows["Cy"].current_status == "absent"
    assert rows["Cy"].last_entry is None
