from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import DayOff, Term
from .repository import TermRepository


def parse_days_off(raw: Optional[Iterable[Mapping[str, Any]]]) -> tuple[DayOff, ...]:
    """Parse ``[{startDate, endDate, notes}]`` payloads into DayOff ranges."""

    out: list[DayOff] = []
    for item in raw or []:
        if not item.get("startDate") or not item.get("endDate"):
            raise ValidationError("Each day off needs a startDate and endDate")
        start = parse_iso_date(item["startDate"])
        end = parse_iso_date(item["endDate"])
        if end < start:
            raise ValidationError("Day off start date must be on or before its end date")
        out.append(DayOff(start_date=start, end_date=end, notes=(item.get("notes") or None)))
    out.sort(key=lambda d: d.start_date)
    return tuple(out)


class TermService:
    """Use case: manage academic terms. At most one term is active."""

    def __init__(self, terms: TermRepository):
        self._terms = terms

    def list_terms(self) -> Sequence[Term]:
        return self._terms.list_all()

    def get_term(self, term_id: int) -> Term:
        term = self._terms.get_by_id(term_id)
        if not term:
            raise NotFoundError("Term not found")
        return term

    def get_active_term(self) -> Term:
        term = self._terms.get_active()
        if not term:
            raise NotFoundError("No active term found")
        return term

    @staticmethod
    def _check_dates(start: date, end: date) -> None:
        if start >= end:
            raise ValidationError("Start date must be before end date")

    def create_term(
        self,
        *,
        name: str,
        start_date: date,
        end_date: date,
        is_active: bool = False,
        days_off: Sequence[DayOff] = (),
        notes: Optional[str] = None,
    ) -> Term:
        name = require_non_empty(name, "name")
        self._check_dates(start_date, end_date)

        term_id = self._terms.create(
            name=name,
            start_date=start_date,
            end_date=end_date,
            year=start_date.year,
            is_active=bool(is_active),
            days_off=tuple(days_off),
            notes=notes,
        )
        return self.get_term(term_id)

    def update_term(
        self,
        term_id: int,
        *,
        name: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_active: Optional[bool] = None,
        days_off: Optional[Sequence[DayOff]] = None,
        notes: Optional[str] = None,
    ) -> Term:
        term = self.get_term(term_id)

        new_start = start_date or term.start_date
        new_end = end_date or term.end_date
        self._check_dates(new_start, new_end)

        active = term.is_active if is_active is None else bool(is_active)

        self._terms.update(
            term_id=term_id,
            name=require_non_empty(name, "name") if name is not None else term.name,
            start_date=new_start,
            end_date=new_end,
            year=new_start.year,
            is_active=active,
            days_off=tuple(days_off) if days_off is not None else term.days_off,
            notes=notes if notes is not None else term.notes,
        )
        return self.get_term(term_id)

    def delete_term(self, term_id: int) -> None:
        if not self._terms.delete(term_id):
            raise NotFoundError("Term not found")
