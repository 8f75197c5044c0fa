"""In-memory repositories implementing the repository protocols."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from src.sd_clockin.sd_clockin.admin_users.model import AdminUser
from src.sd_clockin.sd_clockin.checkins.model import CheckIn
from src.sd_clockin.sd_clockin.core.enums import CheckInType, ShiftSource, ShiftStatus, StudentRole
from src.sd_clockin.sd_clockin.schedules.model import Schedule
from src.sd_clockin.sd_clockin.shifts.model import ShiftRecord
from src.sd_clockin.sd_clockin.students.model import Student
from src.sd_clockin.sd_clockin.terms.model import Term


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class InMemoryStudents:
    def __init__(self, students=()):
        self.items: dict[int, Student] = {s.student_id: s for s in students}
        self._id = max(self.items, default=0)

    def list_all(self):
        return sorted(self.items.values(), key=lambda s: s.name)

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.items.get(student_id)

    def get_by_card_id(self, card_id: str) -> Optional[Student]:
        return next((s for s in self.items.values() if s.card_id == card_id), None)

    def create(self, *, name: str, card_id: str, role: StudentRole, is_active: bool = True) -> int:
        self._id += 1
        self.items[self._id] = Student(student_id=self._id, name=name, card_id=card_id, role=role, is_active=is_active)
        return self._id

    def update(self, *, student_id: int, name: str, card_id: str, role: StudentRole, is_active: bool) -> bool:
        current = self.items[student_id]
        self.items[student_id] = replace(current, name=name, card_id=card_id, role=role, is_active=is_active)
        return True

    def delete(self, student_id: int) -> bool:
        return self.items.pop(student_id, None) is not None


class InMemoryTerms:
    def __init__(self, terms=()):
        self.items: dict[int, Term] = {t.term_id: t for t in terms}
        self._id = max(self.items, default=0)

    def list_all(self):
        return sorted(self.items.values(), key=lambda t: t.start_date, reverse=True)

    def get_by_id(self, term_id: int) -> Optional[Term]:
        return self.items.get(term_id)

    def get_active(self) -> Optional[Term]:
        return next((t for t in self.items.values() if t.is_active), None)

    def create(self, *, name, start_date, end_date, year, is_active, days_off=(), notes=None) -> int:
        if is_active:
            self._deactivate_others(None)
        self._id += 1
        self.items[self._id] = Term(
            term_id=self._id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            year=year,
            is_active=is_active,
            days_off=tuple(days_off),
            notes=notes,
        )
        return self._id

    def update(self, *, term_id, name, start_date, end_date, year, is_active, days_off, notes) -> bool:
        if is_active:
            self._deactivate_others(term_id)
        self.items[term_id] = Term(
            term_id=term_id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            year=year,
            is_active=is_active,
            days_off=tuple(days_off),
            notes=notes,
        )
        return True

    def _deactivate_others(self, keep_id) -> None:
        for term_id, t in list(self.items.items()):
            if term_id != keep_id:
                self.items[term_id] = replace(t, is_active=False)

    def delete(self, term_id: int) -> bool:
        return self.items.pop(term_id, None) is not None


class InMemorySchedules:
    def __init__(self, schedules=()):
        self.items: dict[tuple[int, int], Schedule] = {(s.student_id, s.term_id): s for s in schedules}
        self._id = max((s.schedule_id for s in schedules), default=0)

    def get(self, *, student_id: int, term_id: int) -> Optional[Schedule]:
        return self.items.get((student_id, term_id))

    def list_for_term(self, term_id: int):
        return [s for (_, t), s in self.items.items() if t == term_id]

    def upsert(self, *, student_id: int, term_id: int, availability: dict, timezone: str) -> int:
        existing = self.items.get((student_id, term_id))
        if existing:
            schedule_id = existing.schedule_id
        else:
            self._id += 1
            schedule_id = self._id
        self.items[(student_id, term_id)] = Schedule(
            schedule_id=schedule_id,
            student_id=student_id,
            term_id=term_id,
            availability=dict(availability),
            timezone=timezone,
        )
        return schedule_id

    def delete(self, *, student_id: int, term_id: int) -> bool:
        return self.items.pop((student_id, term_id), None) is not None

    def delete_for_student(self, student_id: int) -> int:
        keys = [k for k in self.items if k[0] == student_id]
        for k in keys:
            del self.items[k]
        return len(keys)


class InMemoryCheckIns:
    def __init__(self, checkins=()):
        self.items: dict[int, CheckIn] = {c.checkin_id: c for c in checkins}
        self._id = max(self.items, default=0)

    def list(self, *, student_id=None, term_id=None, start=None, end=None, limit=None):
        rows = [
            c
            for c in self.items.values()
            if (student_id is None or c.student_id == student_id)
            and (term_id is None or c.term_id == term_id)
            and (start is None or c.timestamp >= start)
            and (end is None or c.timestamp <= end)
        ]
        rows.sort(key=lambda c: c.timestamp, reverse=True)
        return rows[:limit] if limit else rows

    def get_by_id(self, checkin_id: int) -> Optional[CheckIn]:
        return self.items.get(checkin_id)

    def create(self, *, student_id, term_id, type: CheckInType, timestamp, is_manual=False, is_auto_clock_out=False) -> int:
        self._id += 1
        self.items[self._id] = CheckIn(
            checkin_id=self._id,
            student_id=student_id,
            term_id=term_id,
            type=type,
            timestamp=timestamp,
            is_manual=is_manual,
            is_auto_clock_out=is_auto_clock_out,
        )
        return self._id

    def update(self, *, checkin_id, type, timestamp, is_manual) -> bool:
        self.items[checkin_id] = replace(self.items[checkin_id], type=type, timestamp=timestamp, is_manual=is_manual)
        return True

    def delete(self, checkin_id: int) -> bool:
        return self.items.pop(checkin_id, None) is not None

    def delete_for_student(self, student_id: int) -> int:
        ids = [k for k, c in self.items.items() if c.student_id == student_id]
        for k in ids:
            del self.items[k]
        return len(ids)


class InMemoryShifts:
    def __init__(self, shifts=()):
        self.items: dict[int, ShiftRecord] = {s.shift_id: s for s in shifts}
        self._id = max(self.items, default=0)

    def get_for_student_and_date(self, *, student_id: int, term_id: int, shift_date: date):
        return next(
            (
                s
                for s in self.items.values()
                if s.student_id == student_id and s.term_id == term_id and s.shift_date == shift_date
            ),
            None,
        )

    def list_by_date(self, shift_date: date, *, status: Optional[ShiftStatus] = None):
        return [
            s for s in self.items.values() if s.shift_date == shift_date and (status is None or s.status == status)
        ]

    def create(
        self,
        *,
        student_id,
        term_id,
        shift_date,
        status,
        source=ShiftSource.MANUAL,
        actual_start=None,
        actual_end=None,
    ) -> int:
        self._id += 1
        self.items[self._id] = ShiftRecord(
            shift_id=self._id,
            student_id=student_id,
            term_id=term_id,
            shift_date=shift_date,
            status=status,
            source=source,
            actual_start=actual_start,
            actual_end=actual_end,
        )
        return self._id

    def update(self, *, shift_id, status, actual_start, actual_end, notes) -> bool:
        self.items[shift_id] = replace(
            self.items[shift_id], status=status, actual_start=actual_start, actual_end=actual_end, notes=notes
        )
        return True

    def delete_for_student(self, student_id: int) -> int:
        ids = [k for k, s in self.items.items() if s.student_id == student_id]
        for k in ids:
            del self.items[k]
        return len(ids)


class InMemoryAdminUsers:
    def __init__(self, admins=()):
        self.items: dict[int, AdminUser] = {a.admin_user_id: a for a in admins}
        self._id = max(self.items, default=0)

    def list_all(self):
        return sorted(self.items.values(), key=lambda a: a.admin_user_id, reverse=True)

    def get_by_id(self, admin_user_id: int):
        return self.items.get(admin_user_id)

    def get_by_email(self, email: str):
        key = email.strip().lower()
        return next((a for a in self.items.values() if a.email_lower == key), None)

    def create(self, *, email, name, is_active=True) -> int:
        self._id += 1
        self.items[self._id] = AdminUser(admin_user_id=self._id, email=email, name=name, is_active=is_active)
        return self._id

    def update(self, *, admin_user_id, email, name, is_active) -> bool:
        self.items[admin_user_id] = replace(self.items[admin_user_id], email=email, name=name, is_active=is_active)
        return True

    def touch_login(self, admin_user_id, *, at, name=None) -> None:
        current = self.items[admin_user_id]
        self.items[admin_user_id] = replace(current, last_login_at=at, name=current.name or name)

    def delete(self, admin_user_id: int) -> bool:
        return self.items.pop(admin_user_id, None) is not None


class RecordingCache:
    """Disabled cache that remembers what was invalidated."""

    def __init__(self):
        self.invalidated: list[tuple] = []

    enabled = False

    def get(self, key):
        return None

    def set(self, key, value, ttl_seconds):
        pass

    def delete(self, key):
        self.invalidated.append(("delete", key))

    def delete_pattern(self, pattern):
        self.invalidated.append(("pattern", pattern))
        return 0

    def wrapper(self, key, ttl_seconds, fetch):
        return fetch()

    def invalidate_student(self, student_id, term_id=None):
        self.invalidated.append(("student", student_id, term_id))

    def invalidate_term(self, term_id):
        self.invalidated.append(("term", term_id))

    def flush_all(self):
        return False


def build_fake_container(
    *,
    students=(),
    terms=(),
    schedules=(),
    checkins=(),
    admins=(),
    now: datetime = datetime(2026, 9, 21, 17, 0),
    timezone: str = "America/Los_Angeles",
    microsoft_auth=None,
):
    """Container-shaped namespace wiring the real services to in-memory repositories."""

    from types import SimpleNamespace

    from src.sd_clockin.sd_clockin.admin_users.service import AdminUserService
    from src.sd_clockin.sd_clockin.analytics.service import AnalyticsService
    from src.sd_clockin.sd_clockin.auth.microsoft import MicrosoftAuthConfig
    from src.sd_clockin.sd_clockin.checkins.service import CheckInService
    from src.sd_clockin.sd_clockin.imports.service import ImportService
    from src.sd_clockin.sd_clockin.jobs.auto_clock_out import AutoClockOutJob
    from src.sd_clockin.sd_clockin.reports.service import CheckInReportService
    from src.sd_clockin.sd_clockin.schedules.service import ScheduleService
    from src.sd_clockin.sd_clockin.students.service import StudentService
    from src.sd_clockin.sd_clockin.terms.service import TermService

    clock = FixedClock(now)
    cache = RecordingCache()
    students_repo = InMemoryStudents(students)
    terms_repo = InMemoryTerms(terms)
    schedules_repo = InMemorySchedules(schedules)
    checkins_repo = InMemoryCheckIns(checkins)
    shifts_repo = InMemoryShifts()
    admins_repo = InMemoryAdminUsers(admins)

    return SimpleNamespace(
        cache=cache,
        clock=clock,
        timezone=timezone,
        microsoft_auth=microsoft_auth or MicrosoftAuthConfig(),
        students_repo=students_repo,
        terms_repo=terms_repo,
        schedules_repo=schedules_repo,
        checkins_repo=checkins_repo,
        shifts_repo=shifts_repo,
        admin_users_repo=admins_repo,
        student_service=StudentService(
            students_repo, schedules_repo, checkins_repo, shifts_repo, timezone=timezone, clock=clock
        ),
        term_service=TermService(terms_repo),
        schedule_service=ScheduleService(schedules_repo, students_repo, terms_repo, default_timezone=timezone),
        checkin_service=CheckInService(
            checkins_repo, students_repo, terms_repo, shifts_repo, timezone=timezone, clock=clock
        ),
        import_service=ImportService(students_repo, schedules_repo, terms_repo, timezone=timezone),
        admin_user_service=AdminUserService(admins_repo, clock=clock),
        analytics_service=AnalyticsService(
            students_repo, terms_repo, schedules_repo, checkins_repo, timezone=timezone, clock=clock
        ),
        checkin_report_service=CheckInReportService(checkins_repo, students_repo, terms_repo, timezone=timezone),
        auto_clock_out_job=AutoClockOutJob(shifts_repo, checkins_repo, cache, timezone=timezone, clock=clock),
    )
