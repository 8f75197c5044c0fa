from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import local_day_bounds, now_utc, to_local
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import CheckInType, ShiftSource, ShiftStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..shifts.repository import ShiftRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from ..terms.repository import TermRepository
from .model import CheckIn
from .repository import CheckInRepository

logger = logging.getLogger(__name__)

# Magnetic stripe track: "%FIRST^NAME?;ISO_NUMBER?"; the trailing "?" may be missing.
_CARD_TRACK_RE = re.compile(r";(\d+)")


def parse_card_swipe(raw: str) -> str:
    """Card ID from a raw reader string, or the input itself upper-cased."""

    raw = (raw or "").strip()
    m = _CARD_TRACK_RE.search(raw)
    if m:
        return m.group(1)
    return raw.upper()


def parse_checkin_type(value) -> CheckInType:
    try:
        return CheckInType(str(value).strip().lower())
    except ValueError:
        raise ValidationError('type must be "in" or "out"')


@dataclass(frozen=True)
class SwipeResult:
    student: Student
    checkin: CheckIn


class CheckInService:
    """Use case: record clock events and keep the daily shift record in step."""

    def __init__(
        self,
        checkins: CheckInRepository,
        students: StudentRepository,
        terms: TermRepository,
        shifts: ShiftRepository,
        *,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._checkins = checkins
        self._students = students
        self._terms = terms
        self._shifts = shifts
        self._timezone = timezone
        self._clock = clock

    def local_date(self, timestamp: datetime) -> date:
        return to_local(timestamp, self._timezone).date()

    def list_checkins(
        self,
        *,
        student_id: Optional[int] = None,
        term_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[CheckIn]:
        return self._checkins.list(student_id=student_id, term_id=term_id, start=start, end=end)

    def get_checkin(self, checkin_id: int) -> CheckIn:
        checkin = self._checkins.get_by_id(checkin_id)
        if not checkin:
            raise NotFoundError("Check-in not found")
        return checkin

    def create_checkin(
        self,
        *,
        student_id: int,
        term_id: int,
        type: CheckInType,
        timestamp: Optional[datetime] = None,
        is_manual: bool = False,
    ) -> CheckIn:
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")
        if not self._terms.get_by_id(term_id):
            raise NotFoundError("Term not found")

        checkin_id = self._checkins.create(
            student_id=student_id,
            term_id=term_id,
            type=type,
            timestamp=timestamp or self._clock(),
            is_manual=bool(is_manual),
        )
        checkin = self.get_checkin(checkin_id)
        self._sync_shift(checkin)
        return checkin

    def update_checkin(
        self,
        checkin_id: int,
        *,
        type: Optional[CheckInType] = None,
        timestamp: Optional[datetime] = None,
    ) -> CheckIn:
        current = self.get_checkin(checkin_id)
        # Any edit turns the entry into a manual one.
        self._checkins.update(
            checkin_id=checkin_id,
            type=type or current.type,
            timestamp=timestamp or current.timestamp,
            is_manual=True,
        )
        checkin = self.get_checkin(checkin_id)
        self._sync_shift(checkin)
        return checkin

    def delete_checkin(self, checkin_id: int) -> CheckIn:
        checkin = self.get_checkin(checkin_id)
        self._checkins.delete(checkin_id)
        return checkin

    def _sync_shift(self, checkin: CheckIn) -> None:
        shift_date = self.local_date(checkin.timestamp)
        shift = self._shifts.get_for_student_and_date(
            student_id=checkin.student_id, term_id=checkin.term_id, shift_date=shift_date
        )

        if shift is None:
            self._shifts.create(
                student_id=checkin.student_id,
                term_id=checkin.term_id,
                shift_date=shift_date,
                status=ShiftStatus.STARTED if checkin.type == CheckInType.IN else ShiftStatus.COMPLETED,
                source=ShiftSource.MANUAL,
                actual_start=checkin.timestamp if checkin.type == CheckInType.IN else None,
                actual_end=checkin.timestamp if checkin.type == CheckInType.OUT else None,
            )
            return

        if checkin.type == CheckInType.IN:
            self._shifts.update(
                shift_id=shift.shift_id,
                status=ShiftStatus.STARTED,
                actual_start=checkin.timestamp,
                actual_end=shift.actual_end,
                notes=shift.notes,
            )
        else:
            self._shifts.update(
                shift_id=shift.shift_id,
                status=ShiftStatus.COMPLETED,
                actual_start=shift.actual_start,
                actual_end=checkin.timestamp,
                notes=shift.notes,
            )

    def _is_present(self, student_id: int, term_id: int) -> bool:
        today = self.local_date(self._clock())
        shift = self._shifts.get_for_student_and_date(student_id=student_id, term_id=term_id, shift_date=today)
        if shift and shift.status in (ShiftStatus.STARTED, ShiftStatus.COMPLETED):
            return shift.status == ShiftStatus.STARTED

        start, end = local_day_bounds(today, self._timezone)
        latest = self._checkins.list(
            student_id=student_id, term_id=term_id, start=start, end=end - timedelta(milliseconds=1), limit=1
        )
        return bool(latest) and latest[0].type == CheckInType.IN

    def swipe(self, card_data: str) -> SwipeResult:
        """Kiosk swipe: clock the card's owner out when present, otherwise in."""

        card_id = parse_card_swipe(card_data)
        if not card_id:
            raise ValidationError("cardData is required")

        student = self._students.get_by_card_id(card_id)
        if not student:
            raise NotFoundError("Card not recognized")
        term = self._terms.get_active()
        if not term:
            raise NotFoundError("No active term found")

        action = CheckInType.OUT if self._is_present(student.student_id, term.term_id) else CheckInType.IN
        checkin = self.create_checkin(student_id=student.student_id, term_id=term.term_id, type=action)
        logger.info("Card swipe: %s clocked %s", student.name, action.value)
        return SwipeResult(student=student, checkin=checkin)
