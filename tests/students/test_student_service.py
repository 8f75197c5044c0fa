from datetime import date, datetime

import pytest

from src.sd_clockin.sd_clockin.checkins.model import CheckIn
from src.sd_clockin.sd_clockin.core.enums import CheckInType, CurrentStatus, ShiftStatus, StudentRole
from src.sd_clockin.sd_clockin.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.sd_clockin.sd_clockin.schedules.model import Schedule
from src.sd_clockin.sd_clockin.shifts.model import ShiftRecord
from src.sd_clockin.sd_clockin.students.model import Student
from src.sd_clockin.sd_clockin.students.service import StudentService, parse_role
from tests.fakes import FixedClock, InMemoryCheckIns, InMemorySchedules, InMemoryShifts, InMemoryStudents

# 17:00 UTC is 10:00 on Monday in Los Angeles.
NOW = datetime(2026, 9, 21, 17, 0)


def _student(student_id, name, card_id):
    return Student(student_id=student_id, name=name, card_id=card_id, role=StudentRole.ASSISTANT)


def _checkin(checkin_id, student_id, type_, timestamp):
    return CheckIn(checkin_id=checkin_id, student_id=student_id, term_id=1, type=type_, timestamp=timestamp)


@pytest.fixture
def repos():
    students = InMemoryStudents(
        [_student(1, "Ana", "100"), _student(2, "Ben", "200"), _student(3, "Cy", "300"), _student(4, "Dee", "400")]
    )
    schedules = InMemorySchedules(
        [
            Schedule(schedule_id=1, student_id=1, term_id=1, availability={"monday": ["09:00-12:00"]}),
            Schedule(schedule_id=2, student_id=2, term_id=1, availability={"monday": ["12:00-14:00"]}),
        ]
    )
    checkins = InMemoryCheckIns(
        [
            _checkin(1, 1, CheckInType.IN, datetime(2026, 9, 21, 16, 2)),
            _checkin(2, 4, CheckInType.IN, datetime(2026, 9, 21, 15, 0)),
            _checkin(3, 4, CheckInType.OUT, datetime(2026, 9, 21, 16, 30)),
        ]
    )
    shifts = InMemoryShifts(
        [
            ShiftRecord(
                shift_id=1,
                student_id=1,
                term_id=1,
                shift_date=date(2026, 9, 21),
                status=ShiftStatus.STARTED,
                actual_start=datetime(2026, 9, 21, 16, 2),
            )
        ]
    )
    return students, schedules, checkins, shifts


@pytest.fixture
def service(repos):
    return StudentService(*repos, timezone="America/Los_Angeles", clock=FixedClock(NOW))


def test_term_view_statuses(service):
    views = {v.student.name: v for v in service.list_students_for_term(1)}

    ana = views["Ana"]
    assert ana.current_status == CurrentStatus.PRESENT
    assert ana.today_actual == datetime(2026, 9, 21, 16, 2)
    assert (ana.expected_start, ana.expected_end) == ("09:00", "12:00")
    assert len(ana.clock_entries) == 1

    ben = views["Ben"]
    assert ben.current_status == CurrentStatus.INCOMING
    assert (ben.expected_start, ben.expected_end) == ("12:00", "14:00")

    assert views["Cy"].current_status == CurrentStatus.OFF
    assert views["Cy"].weekly_schedule["monday"] == []

    assert views["Dee"].current_status == CurrentStatus.CLOCKED_OUT
    assert [e.checkin_id for e in views["Dee"].clock_entries] == [3, 2]


def test_create_student(service):
    student = service.create_student(name=" Eve ", card_id="500", role="Student Lead")

    assert student.name == "Eve"
    assert student.role == StudentRole.STUDENT_LEAD
    assert student.is_active


def test_create_student_rejects_duplicates_and_bad_roles(service):
    with pytest.raises(ConflictError):
        service.create_student(name="Copy", card_id="100", role="Assistant")
    with pytest.raises(ValidationError, match="Invalid role"):
        service.create_student(name="Eve", card_id="500", role="Manager")
    with pytest.raises(ValidationError):
        service.create_student(name="", card_id="500", role="Assistant")


def test_update_student(service):
    updated = service.update_student(2, name="  Benjamin ", is_active=False)

    assert updated.name == "Benjamin"
    assert updated.card_id == "200"
    assert not updated.is_active

    with pytest.raises(ConflictError):
        service.update_student(2, card_id="100")


def test_delete_student_cascades(service, repos):
    _, schedules, checkins, shifts = repos

    service.delete_student(1)

    assert schedules.get(student_id=1, term_id=1) is None
    assert checkins.list(student_id=1) == []
    assert shifts.get_for_student_and_date(student_id=1, term_id=1, shift_date=date(2026, 9, 21)) is None
    with pytest.raises(NotFoundError):
        service.get_student(1)


def test_parse_role():
    assert parse_role(" Assistant ") == StudentRole.ASSISTANT
    with pytest.raises(ValidationError):
        parse_role(None)
