from datetime import date, datetime

import pytest

from src.sd_clockin.sd_clockin.checkins.service import CheckInService, parse_card_swipe, parse_checkin_type
from src.sd_clockin.sd_clockin.core.enums import CheckInType, ShiftStatus, StudentRole
from src.sd_clockin.sd_clockin.core.exceptions import NotFoundError, ValidationError
from src.sd_clockin.sd_clockin.students.model import Student
from src.sd_clockin.sd_clockin.terms.model import Term
from tests.fakes import FixedClock, InMemoryCheckIns, InMemoryShifts, InMemoryStudents, InMemoryTerms

NOW = datetime(2026, 9, 21, 17, 0)
TODAY = date(2026, 9, 21)


def _term(is_active=True):
    return Term(
        term_id=1, name="Fall", start_date=date(2026, 9, 1), end_date=date(2026, 12, 1), year=2026, is_active=is_active
    )


def _build(term_active=True):
    checkins = InMemoryCheckIns()
    shifts = InMemoryShifts()
    service = CheckInService(
        checkins,
        InMemoryStudents([Student(student_id=1, name="Ana", card_id="12345", role=StudentRole.ASSISTANT)]),
        InMemoryTerms([_term(term_active)]),
        shifts,
        timezone="America/Los_Angeles",
        clock=FixedClock(NOW),
    )
    return service, checkins, shifts


def _shift(shifts):
    return shifts.get_for_student_and_date(student_id=1, term_id=1, shift_date=TODAY)


def test_clock_in_then_out_tracks_shift():
    service, _, shifts = _build()

    checkin = service.create_checkin(student_id=1, term_id=1, type=CheckInType.IN)
    assert checkin.timestamp == NOW
    assert not checkin.is_manual
    assert _shift(shifts).status == ShiftStatus.STARTED
    assert _shift(shifts).actual_start == NOW

    out_at = datetime(2026, 9, 21, 20, 0)
    service.create_checkin(student_id=1, term_id=1, type=CheckInType.OUT, timestamp=out_at, is_manual=True)
    assert _shift(shifts).status == ShiftStatus.COMPLETED
    assert _shift(shifts).actual_end == out_at
    assert _shift(shifts).actual_start == NOW


def test_clock_out_without_shift_creates_completed_record():
    service, _, shifts = _build()

    service.create_checkin(student_id=1, term_id=1, type=CheckInType.OUT)

    assert _shift(shifts).status == ShiftStatus.COMPLETED
    assert _shift(shifts).actual_start is None


def test_shift_date_is_local():
    service, _, shifts = _build()

    # 03:00 UTC on the 22nd is still the 21st in Los Angeles.
    service.create_checkin(student_id=1, term_id=1, type=CheckInType.IN, timestamp=datetime(2026, 9, 22, 3, 0))

    assert _shift(shifts) is not None


def test_create_checkin_requires_known_records():
    service, _, _ = _build()

    with pytest.raises(NotFoundError, match="Student not found"):
        service.create_checkin(student_id=9, term_id=1, type=CheckInType.IN)
    with pytest.raises(NotFoundError, match="Term not found"):
        service.create_checkin(student_id=1, term_id=9, type=CheckInType.IN)


def test_update_marks_entry_manual():
    service, _, shifts = _build()
    checkin = service.create_checkin(student_id=1, term_id=1, type=CheckInType.IN)

    updated = service.update_checkin(checkin.checkin_id, type=CheckInType.OUT)

    assert updated.is_manual
    assert updated.type == CheckInType.OUT
    assert updated.timestamp == NOW
    assert _shift(shifts).status == ShiftStatus.COMPLETED


def test_delete_checkin():
    service, checkins, _ = _build()
    checkin = service.create_checkin(student_id=1, term_id=1, type=CheckInType.IN)

    assert service.delete_checkin(checkin.checkin_id) == checkin
    assert checkins.list() == []
    with pytest.raises(NotFoundError):
        service.delete_checkin(checkin.checkin_id)


def test_swipe_toggles_between_in_and_out():
    service, _, shifts = _build()

    first = service.swipe("%ANA^LEE?;12345?")
    second = service.swipe("12345")
    third = service.swipe("12345")

    assert first.student.name == "Ana"
    assert [r.checkin.type for r in (first, second, third)] == [CheckInType.IN, CheckInType.OUT, CheckInType.IN]
    assert _shift(shifts).status == ShiftStatus.STARTED


def test_swipe_errors():
    service, _, _ = _build()
    with pytest.raises(ValidationError):
        service.swipe("   ")
    with pytest.raises(NotFoundError, match="Card not recognized"):
        service.swipe("99999")

    inactive, _, _ = _build(term_active=False)
    with pytest.raises(NotFoundError, match="No active term found"):
        inactive.swipe("12345")


def test_parse_card_swipe():
    assert parse_card_swipe("%DOE^JANE?;000123?") == "000123"
    assert parse_card_swipe(" ab12 ") == "AB12"
    assert parse_card_swipe(None) == ""


def test_parse_card_swipe_without_closing_sentinel():
    assert parse_card_swipe(";123456") == "123456"
    assert parse_card_swipe("%DOE^JANE?;123456") == "123456"
    assert parse_card_swipe(";123456=2612101?") == "123456"


def test_parse_checkin_type():
    assert parse_checkin_type(" IN ") == CheckInType.IN
    with pytest.raises(ValidationError):
        parse_checkin_type("sideways")
