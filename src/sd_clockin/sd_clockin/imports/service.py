from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from werkzeug.security import gen_salt

from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import StudentRole
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..schedules.parser import normalize_schedule
from ..schedules.repository import ScheduleRepository
from ..students.repository import StudentRepository
from ..terms.repository import TermRepository
from .csv_importer import MatchedSchedule, match_students_by_name, parse_teams_csv

logger = logging.getLogger(__name__)


def placeholder_card_id() -> str:
    """Unique stand-in card ID for students created by an import."""
    return f"TEMP-{int(time.time() * 1000)}-{gen_salt(9).lower()}"


@dataclass(frozen=True)
class ImportPreview:
    total_rows: int
    matched: list[MatchedSchedule]
    to_create: list[MatchedSchedule]


@dataclass
class ImportResult:
    total_processed: int = 0
    saved: list[dict] = field(default_factory=list)
    created: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    @property
    def matched_count(self) -> int:
        return len(self.saved) - len(self.created)

    @property
    def message(self) -> str:
        return (
            f"Successfully imported schedules for {len(self.saved)} students "
            f"({self.matched_count} existing, {len(self.created)} new)"
        )


class ImportService:
    """Use case: import weekly schedules from a Teams shift export."""

    def __init__(
        self,
        students: StudentRepository,
        schedules: ScheduleRepository,
        terms: TermRepository,
        *,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self._students = students
        self._schedules = schedules
        self._terms = terms
        self._timezone = timezone

    def _match(self, csv_content: str) -> tuple[int, list[MatchedSchedule]]:
        if not csv_content or not str(csv_content).strip():
            raise ValidationError("csvContent is required")
        processed = parse_teams_csv(csv_content)
        return len(processed), match_students_by_name(processed, self._students.list_all())

    def preview(self, csv_content: str) -> ImportPreview:
        total, matched = self._match(csv_content)
        return ImportPreview(
            total_rows=total,
            matched=[m for m in matched if m.matched],
            to_create=[m for m in matched if not m.matched],
        )

    def import_schedules(self, csv_content: str, term_id: int) -> ImportResult:
        if not self._terms.get_by_id(term_id):
            raise NotFoundError("Term not found")
        total, matched = self._match(csv_content)

        result = ImportResult(total_processed=total)
        for item in matched:
            try:
                student_id = item.student_id
                if not item.matched:
                    card_id = placeholder_card_id()
                    student_id = self._students.create(
                        name=item.csv_name, card_id=card_id, role=StudentRole.ASSISTANT
                    )
                    result.created.append(
                        {"studentId": student_id, "studentName": item.csv_name, "cardId": card_id}
                    )

                self._schedules.upsert(
                    student_id=student_id,
                    term_id=term_id,
                    availability=normalize_schedule(item.availability),
                    timezone=self._default_timezone(student_id, term_id),
                )
                result.saved.append(
                    {"studentId": student_id, "studentName": item.student_name, "wasCreated": not item.matched}
                )
            except DomainError as e:
                logger.warning("Schedule import failed for %s: %s", item.student_name, e)
                result.errors.append({"studentName": item.student_name, "error": str(e)})
            except Exception as e:
                logger.exception("Schedule import failed for %s", item.student_name)
                result.errors.append({"studentName": item.student_name, "error": str(e) or type(e).__name__})

        logger.info(result.message)
        return result

    def _default_timezone(self, student_id: int, term_id: int) -> str:
        existing = self._schedules.get(student_id=student_id, term_id=term_id)
        return existing.timezone if existing else self._timezone
