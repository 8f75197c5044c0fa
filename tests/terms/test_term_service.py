from datetime import date

import pytest

from src.sd_clockin.sd_clockin.core.exceptions import NotFoundError, ValidationError
from src.sd_clockin.sd_clockin.terms.model import DayOff
from src.sd_clockin.sd_clockin.terms.service import TermService, parse_days_off
from tests.fakes import InMemoryTerms


def _service():
    return TermService(InMemoryTerms())


def test_create_active_term_deactivates_others():
    service = _service()
    fall = service.create_term(name="Fall", start_date=date(2026, 9, 1), end_date=date(2026, 12, 15), is_active=True)
    winter = service.create_term(name="Winter", start_date=date(2027, 1, 5), end_date=date(2027, 3, 20), is_active=True)

    assert service.get_active_term().term_id == winter.term_id
    assert not service.get_term(fall.term_id).is_active
    assert winter.year == 2027


class BrokenInsertTerms(InMemoryTerms):
    def create(self, **kwargs) -> int:
        raise RuntimeError("insert failed")


def test_failed_create_keeps_current_active_term():
    terms = BrokenInsertTerms()
    current = InMemoryTerms.create(
        terms, name="Fall", start_date=date(2026, 9, 1), end_date=date(2026, 12, 15), year=2026, is_active=True
    )
    service = TermService(terms)

    with pytest.raises(RuntimeError):
        service.create_term(name="Winter", start_date=date(2027, 1, 5), end_date=date(2027, 3, 20), is_active=True)

    assert service.get_active_term().term_id == current


def test_create_term_rejects_bad_input():
    service = _service()

    with pytest.raises(ValidationError, match="Start date must be before end date"):
        service.create_term(name="Bad", start_date=date(2026, 9, 1), end_date=date(2026, 9, 1))
    with pytest.raises(ValidationError):
        service.create_term(name="  ", start_date=date(2026, 9, 1), end_date=date(2026, 9, 2))


def test_update_term_keeps_unspecified_fields():
    service = _service()
    term = service.create_term(
        name="Fall", start_date=date(2026, 9, 1), end_date=date(2026, 12, 15), notes="first"
    )

    updated = service.update_term(term.term_id, end_date=date(2026, 12, 20))

    assert updated.name == "Fall"
    assert updated.notes == "first"
    assert updated.end_date == date(2026, 12, 20)

    with pytest.raises(ValidationError):
        service.update_term(term.term_id, start_date=date(2027, 1, 1))


def test_activating_term_on_update():
    service = _service()
    first = service.create_term(name="A", start_date=date(2026, 1, 1), end_date=date(2026, 3, 1), is_active=True)
    second = service.create_term(name="B", start_date=date(2026, 4, 1), end_date=date(2026, 6, 1))

    service.update_term(second.term_id, is_active=True)

    assert service.get_active_term().term_id == second.term_id
    assert not service.get_term(first.term_id).is_active


def test_missing_terms():
    service = _service()

    with pytest.raises(NotFoundError, match="No active term found"):
        service.get_active_term()
    with pytest.raises(NotFoundError):
        service.delete_term(3)


def test_parse_days_off_sorts_ranges():
    days = parse_days_off(
        [
            {"startDate": "2026-11-26", "endDate": "2026-11-27", "notes": "Thanksgiving"},
            {"startDate": "2026-10-12", "endDate": "2026-10-12"},
        ]
    )

    assert days == (
        DayOff(start_date=date(2026, 10, 12), end_date=date(2026, 10, 12)),
        DayOff(start_date=date(2026, 11, 26), end_date=date(2026, 11, 27), notes="Thanksgiving"),
    )
    assert days[1].contains(date(2026, 11, 27))
    assert parse_days_off(None) == ()


def test_parse_days_off_rejects_inverted_range():
    with pytest.raises(ValidationError):
        parse_days_off([{"startDate": "2026-10-13", "endDate": "2026-10-12"}])
    with pytest.raises(ValidationError):
        parse_days_off([{"startDate": "2026-10-13"}])
