from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class DayOff:
    """Inclusive range of dates with no expected work (holidays, breaks)."""

    start_date: date
    end_date: date
    notes: Optional[str] = None

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class Term:
    term_id: int
    name: str
    start_date: date
    end_date: date
    year: int
    is_active: bool
    days_off: tuple[DayOff, ...] = ()
    notes: Optional[str] = None
