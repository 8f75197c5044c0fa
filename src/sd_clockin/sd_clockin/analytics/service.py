from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..checkins.model import CheckIn
from ..checkins.repository import CheckInRepository
from ..common.datetime_utils import now_utc, to_local
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import PunctualityPeriod
from ..core.exceptions import NotFoundError
from ..schedules.repository import ScheduleRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from ..terms.model import Term
from ..terms.repository import TermRepository
from . import student_metrics, team_metrics
from .factory import PunctualityStrategyFactory
from .shift_matching import MatchedShift, match_clock_entries_to_shifts


@dataclass(frozen=True)
class StudentReport:
    student: Student
    term: Term
    expected_hours: float
    actual_hours: float
    punctuality: student_metrics.PunctualityStats
    weekly: list
    daily: list
    weeks: list
    months: list
    today_shifts: list[MatchedShift]


@dataclass(frozen=True)
class TermReport:
    term: Term
    stats: team_metrics.TermStats
    period_punctuality: dict
    weekly_hours: list


class AnalyticsService:
    """Use case: punctuality and hours analytics for one student or a whole term.

    Stored timestamps are UTC; every calculation runs on local wall-clock
    copies in ``timezone``.
    """

    def __init__(
        self,
        students: StudentRepository,
        terms: TermRepository,
        schedules: ScheduleRepository,
        checkins: CheckInRepository,
        *,
        timezone: str = DEFAULT_TIMEZONE,
        strategy_factory: Optional[PunctualityStrategyFactory] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._students = students
        self._terms = terms
        self._schedules = schedules
        self._checkins = checkins
        self._timezone = timezone
        self._factory = strategy_factory or PunctualityStrategyFactory()
        self._clock = clock

    def now_local(self) -> datetime:
        return to_local(self._clock(), self._timezone)

    def _term(self, term_id: int) -> Term:
        term = self._terms.get_by_id(term_id)
        if not term:
            raise NotFoundError("Term not found")
        return term

    def _local_entries(self, *, student_id: int, term_id: int) -> list[CheckIn]:
        entries = self._checkins.list(student_id=student_id, term_id=term_id)
        return [replace(e, timestamp=to_local(e.timestamp, self._timezone)) for e in entries]

    def _availability(self, *, student_id: int, term_id: int) -> dict:
        schedule = self._schedules.get(student_id=student_id, term_id=term_id)
        return dict(schedule.availability) if schedule else {}

    def staff_snapshots(self, term_id: int) -> list[team_metrics.StaffSnapshot]:
        return [
            team_metrics.StaffSnapshot(
                student_id=s.student_id,
                name=s.name,
                availability=self._availability(student_id=s.student_id, term_id=term_id),
                entries=self._local_entries(student_id=s.student_id, term_id=term_id),
            )
            for s in self._students.list_all()
            if s.is_active
        ]

    def student_report(self, student_id: int, term_id: int) -> StudentReport:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        term = self._term(term_id)

        availability = self._availability(student_id=student_id, term_id=term_id)
        entries = self._local_entries(student_id=student_id, term_id=term_id)
        now = self.now_local()

        daily = student_metrics.get_daily_breakdown(
            availability, entries, term.start_date, term.end_date, term.days_off
        )
        return StudentReport(
            student=student,
            term=term,
            expected_hours=student_metrics.calculate_expected_hours(
                availability, term.start_date, term.end_date, term.days_off
            ),
            actual_hours=student_metrics.calculate_actual_hours(entries, term.start_date, term.end_date),
            punctuality=student_metrics.calculate_punctuality(
                availability, entries, term.start_date, term.end_date, self._factory.grace_minutes
            ),
            weekly=student_metrics.get_weekly_breakdown(
                availability, entries, term.start_date, term.end_date, term.days_off
            ),
            daily=daily,
            weeks=student_metrics.group_days_by_week(daily, term.start_date, term.end_date),
            months=student_metrics.group_days_by_month(daily),
            today_shifts=match_clock_entries_to_shifts(
                availability, entries, now.date(), now=now, factory=self._factory
            ),
        )

    def term_report(self, term_id: int) -> TermReport:
        term = self._term(term_id)
        staff = self.staff_snapshots(term_id)
        today = self.now_local().date()

        periods = {}
        for period in PunctualityPeriod:
            start, end = team_metrics.period_range(period, today, term.start_date, term.end_date)
            periods[period.value] = (start, end, team_metrics.period_punctuality(staff, start, end))

        return TermReport(
            term=term,
            stats=team_metrics.term_stats(staff, term.start_date, term.end_date),
            period_punctuality=periods,
            weekly_hours=team_metrics.weekly_hours(staff, term.start_date, term.end_date, today),
        )

    def hourly_staffing(self, term_id: int, day: Optional[date] = None) -> Sequence[team_metrics.HourlyStaffing]:
        self._term(term_id)
        now = self.now_local()
        return team_metrics.hourly_staffing(self.staff_snapshots(term_id), day or now.date(), now)

    def attendance_overview(self, term_id: int, day: Optional[date] = None) -> Sequence[team_metrics.OverviewRow]:
        self._term(term_id)
        now = self.now_local()
        return team_metrics.attendance_overview(self.staff_snapshots(term_id), day or now.date(), now)
