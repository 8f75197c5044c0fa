from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class SessionRow:
    """One clock-in paired with the clock-out that closed it (local time)."""

    student_id: int
    name: str
    card_id: str
    work_date: date
    clock_in: datetime
    clock_out: Optional[datetime] = None
    is_manual: bool = False
    is_auto_clock_out: bool = False
