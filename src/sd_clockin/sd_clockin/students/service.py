from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from ..analytics.shift_matching import calculate_shift_end, check_expected_arrival
from ..checkins.repository import CheckInRepository
from ..common.datetime_utils import local_day_bounds, now_utc, to_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_CLOCK_ENTRY_LIMIT, DEFAULT_TIMEZONE
from ..core.enums import CheckInType, CurrentStatus, ShiftStatus, StudentRole
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..schedules.model import empty_availability
from ..schedules.repository import ScheduleRepository
from ..shifts.repository import ShiftRepository
from .model import Student, StudentTermView
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_SHIFT_STATUS_TO_CURRENT = {
    ShiftStatus.STARTED: CurrentStatus.PRESENT,
    ShiftStatus.COMPLETED: CurrentStatus.CLOCKED_OUT,
    ShiftStatus.MISSED: CurrentStatus.ABSENT,
}


def parse_role(value) -> StudentRole:
    try:
        return StudentRole(str(value).strip())
    except ValueError:
        allowed = ", ".join(r.value for r in StudentRole)
        raise ValidationError(f"Invalid role: {value}. Expected one of: {allowed}")


class StudentService:
    """Use case: manage student workers and their live status in a term."""

    def __init__(
        self,
        students: StudentRepository,
        schedules: ScheduleRepository,
        checkins: CheckInRepository,
        shifts: ShiftRepository,
        *,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._students = students
        self._schedules = schedules
        self._checkins = checkins
        self._shifts = shifts
        self._timezone = timezone
        self._clock = clock

    def list_students(self) -> Sequence[Student]:
        return self._students.list_all()

    def get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def list_students_for_term(self, term_id: int) -> list[StudentTermView]:
        now_local = to_local(self._clock(), self._timezone)
        return [self._term_view(s, term_id, now_local) for s in self._students.list_all()]

    def _term_view(self, student: Student, term_id: int, now_local) -> StudentTermView:
        schedule = self._schedules.get(student_id=student.student_id, term_id=term_id)
        availability = schedule.availability if schedule else None
        today = now_local.date()

        status = CurrentStatus.OFF
        today_actual = None
        expected_start: Optional[str] = None
        expected_end: Optional[str] = None

        shift = self._shifts.get_for_student_and_date(
            student_id=student.student_id, term_id=term_id, shift_date=today
        )
        if shift:
            status = _SHIFT_STATUS_TO_CURRENT.get(shift.status, CurrentStatus.OFF)
            today_actual = shift.actual_start
            expected_start = shift.scheduled_start
            expected_end = shift.scheduled_end

        if status == CurrentStatus.OFF:
            start, end = local_day_bounds(today, self._timezone)
            todays = self._checkins.list(
                student_id=student.student_id,
                term_id=term_id,
                start=start,
                end=end - timedelta(milliseconds=1),
                limit=1,
            )
            if todays:
                last = todays[0]
                if last.type == CheckInType.IN:
                    status = CurrentStatus.PRESENT
                    today_actual = last.timestamp
                else:
                    status = CurrentStatus.CLOCKED_OUT

        if status == CurrentStatus.PRESENT and not expected_end and availability and today_actual:
            start_s, end_s = calculate_shift_end(
                availability, now_local, to_local(today_actual, self._timezone)
            )
            expected_start = start_s or expected_start
            expected_end = end_s or "No schedule"

        if status == CurrentStatus.OFF and availability:
            incoming = check_expected_arrival(availability, now_local)
            if incoming:
                status = CurrentStatus.INCOMING
                expected_start, expected_end = incoming

        entries = self._checkins.list(
            student_id=student.student_id, term_id=term_id, limit=DEFAULT_CLOCK_ENTRY_LIMIT
        )
        return StudentTermView(
            student=student,
            current_status=status,
            today_actual=today_actual,
            expected_start=expected_start,
            expected_end=expected_end,
            weekly_schedule=dict(availability) if availability else empty_availability(),
            clock_entries=entries,
        )

    def create_student(self, *, name: str, card_id: str, role) -> Student:
        name = require_non_empty(name, "name")
        card_id = require_non_empty(card_id, "cardId")
        parsed_role = parse_role(role)

        if self._students.get_by_card_id(card_id):
            raise ConflictError("A student with this card ID already exists")

        student_id = self._students.create(name=name, card_id=card_id, role=parsed_role)
        logger.info("Created student %s (%s)", student_id, name)
        return self.get_student(student_id)

    def update_student(
        self,
        student_id: int,
        *,
        name: Optional[str] = None,
        card_id: Optional[str] = None,
        role=None,
        is_active: Optional[bool] = None,
    ) -> Student:
        student = self.get_student(student_id)

        if card_id and card_id != student.card_id:
            if self._students.get_by_card_id(card_id):
                raise ConflictError("A student with this card ID already exists")

        self._students.update(
            student_id=student_id,
            name=name.strip() if name and name.strip() else student.name,
            card_id=card_id or student.card_id,
            role=parse_role(role) if role else student.role,
            is_active=student.is_active if is_active is None else bool(is_active),
        )
        return self.get_student(student_id)

    def delete_student(self, student_id: int) -> None:
        self.get_student(student_id)

        schedules = self._schedules.delete_for_student(student_id)
        checkins = self._checkins.delete_for_student(student_id)
        self._shifts.delete_for_student(student_id)
        self._students.delete(student_id)
        logger.info(
            "Deleted student %s with %s schedules and %s check-ins", student_id, schedules, checkins
        )
