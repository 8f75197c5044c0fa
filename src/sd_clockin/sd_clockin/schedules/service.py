from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from ..terms.repository import TermRepository
from .model import Schedule, empty_availability
from .parser import normalize_schedule
from .repository import ScheduleRepository


class ScheduleService:
    """Use case: read and save weekly availability per student and term."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        students: StudentRepository,
        terms: TermRepository,
        *,
        default_timezone: str = DEFAULT_TIMEZONE,
    ):
        self._schedules = schedules
        self._students = students
        self._terms = terms
        self._default_timezone = default_timezone

    def get_schedule(self, *, student_id: int, term_id: int) -> Schedule:
        """Return the saved schedule, or an empty one when none exists yet."""

        schedule = self._schedules.get(student_id=student_id, term_id=term_id)
        if schedule:
            return schedule
        return Schedule(
            schedule_id=0,
            student_id=student_id,
            term_id=term_id,
            availability=empty_availability(),
            timezone=self._default_timezone,
        )

    def list_for_term(self, term_id: int) -> Sequence[Schedule]:
        return self._schedules.list_for_term(term_id)

    def save_schedule(
        self,
        *,
        student_id: int,
        term_id: int,
        availability: dict,
        timezone: Optional[str] = None,
    ) -> Schedule:
        if not isinstance(availability, dict):
            raise ValidationError("availability must be an object keyed by weekday")
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")
        if not self._terms.get_by_id(term_id):
            raise NotFoundError("Term not found")

        self._schedules.upsert(
            student_id=student_id,
            term_id=term_id,
            availability=normalize_schedule(availability),
            timezone=timezone or self._default_timezone,
        )
        return self.get_schedule(student_id=student_id, term_id=term_id)

    def delete_schedule(self, *, student_id: int, term_id: int) -> None:
        if not self._schedules.delete(student_id=student_id, term_id=term_id):
            raise NotFoundError("Schedule not found")
