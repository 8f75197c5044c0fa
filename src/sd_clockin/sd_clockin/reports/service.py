from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence

from ..checkins.model import CheckIn
from ..checkins.repository import CheckInRepository
from ..common.datetime_utils import local_day_bounds, to_local
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import CheckInType
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from ..terms.repository import TermRepository
from .calculator.base import HoursCalculator
from .calculator.standard_calculator import StandardHoursCalculator
from .model import SessionRow

REPORT_FIELDS = [
    "work_date",
    "student_id",
    "name",
    "card_id",
    "clock_in",
    "clock_out",
    "worked_hours",
    "note",
]

SUMMARY_FIELDS = ["student_id", "name", "total_hours"]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


def _hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def pair_sessions(entries: Sequence[CheckIn]) -> list[tuple[CheckIn, Optional[CheckIn]]]:
    """Pair each ``in`` with the next ``out``; a stray ``out`` is dropped."""

    pairs: list[tuple[CheckIn, Optional[CheckIn]]] = []
    opened: Optional[CheckIn] = None
    for e in sorted(entries, key=lambda e: e.timestamp):
        if e.type == CheckInType.IN:
            if opened is not None:
                pairs.append((opened, None))
            opened = e
        elif opened is not None:
            pairs.append((opened, e))
            opened = None
    if opened is not None:
        pairs.append((opened, None))
    return pairs


class CheckInReportService:
    def __init__(
        self,
        checkins: CheckInRepository,
        students: StudentRepository,
        terms: TermRepository,
        *,
        timezone: str = DEFAULT_TIMEZONE,
        calculator: Optional[HoursCalculator] = None,
    ):
        self._checkins = checkins
        self._students = students
        self._terms = terms
        self._timezone = timezone
        self._calculator = calculator or StandardHoursCalculator()

    def sessions(self, *, term_id: int, start: Optional[date] = None, end: Optional[date] = None) -> list[SessionRow]:
        term = self._terms.get_by_id(term_id)
        if not term:
            raise NotFoundError("Term not found")
        start = start or term.start_date
        end = end or term.end_date
        if start > end:
            raise ValidationError("start must be on or before end")

        range_start, _ = local_day_bounds(start, self._timezone)
        _, range_end = local_day_bounds(end, self._timezone)

        rows: list[SessionRow] = []
        for student in self._students.list_all():
            entries = self._checkins.list(
                student_id=student.student_id,
                term_id=term_id,
                start=range_start,
                end=range_end - timedelta(milliseconds=1),
            )
            for clock_in, clock_out in pair_sessions(entries):
                local_in = to_local(clock_in.timestamp, self._timezone)
                rows.append(
                    SessionRow(
                        student_id=student.student_id,
                        name=student.name,
                        card_id=student.card_id,
                        work_date=local_in.date(),
                        clock_in=local_in,
                        clock_out=to_local(clock_out.timestamp, self._timezone) if clock_out else None,
                        is_manual=clock_in.is_manual or bool(clock_out and clock_out.is_manual),
                        is_auto_clock_out=bool(clock_out and clock_out.is_auto_clock_out),
                    )
                )
        rows.sort(key=lambda r: (r.work_date, r.name.lower(), r.clock_in))
        return rows

    def build_checkin_report(
        self, *, term_id: int, start: Optional[date] = None, end: Optional[date] = None
    ) -> ReportData:
        out_rows: list[dict] = []
        totals: dict[int, dict] = {}

        for r in self.sessions(term_id=term_id, start=start, end=end):
            minutes = self._calculator.worked_minutes(r)
            notes = []
            if r.is_auto_clock_out:
                notes.append("auto clock-out")
            elif r.is_manual:
                notes.append("manual")
            if r.clock_out is None:
                notes.append("open")

            out_rows.append(
                {
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "student_id": r.student_id,
                    "name": r.name,
                    "card_id": r.card_id,
                    "clock_in": r.clock_in.strftime("%H:%M"),
                    "clock_out": r.clock_out.strftime("%H:%M") if r.clock_out else "-",
                    "worked_hours": _hhmm(minutes),
                    "note": ", ".join(notes),
                }
            )

            s = totals.setdefault(r.student_id, {"student_id": r.student_id, "name": r.name, "total_minutes": 0})
            s["total_minutes"] += minutes

        summary = [
            {"student_id": s["student_id"], "name": s["name"], "total_hours": _hhmm(int(s["total_minutes"]))}
            for s in sorted(totals.values(), key=lambda s: s["total_minutes"], reverse=True)
        ]
        return ReportData(rows=out_rows, summary=summary)
