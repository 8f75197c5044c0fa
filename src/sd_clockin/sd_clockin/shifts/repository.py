from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftSource, ShiftStatus
from .model import ShiftRecord


class ShiftRepository(Protocol):
    def get_for_student_and_date(self, *, student_id: int, term_id: int, shift_date: date) -> Optional[ShiftRecord]:
        raise NotImplementedError

    def list_by_date(self, shift_date: date, *, status: Optional[ShiftStatus] = None) -> Sequence[ShiftRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: int,
        term_id: int,
        shift_date: date,
        status: ShiftStatus,
        source: ShiftSource = ShiftSource.MANUAL,
        actual_start: Optional[datetime] = None,
        actual_end: Optional[datetime] = None,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        shift_id: int,
        status: ShiftStatus,
        actual_start: Optional[datetime],
        actual_end: Optional[datetime],
        notes: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete_for_student(self, student_id: int) -> int:
        raise NotImplementedError
