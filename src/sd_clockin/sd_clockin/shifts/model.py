from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ShiftSource, ShiftStatus


@dataclass(frozen=True)
class ShiftRecord:
    """One student's work on one local calendar day, derived from check-ins."""

    shift_id: int
    student_id: int
    term_id: int
    shift_date: date
    status: ShiftStatus
    source: ShiftSource = ShiftSource.MANUAL
    scheduled_start: Optional[str] = None
    scheduled_end: Optional[str] = None
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None
    notes: Optional[str] = None
