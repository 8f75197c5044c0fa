from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DayOff, Term


class TermRepository(Protocol):
    def list_all(self) -> Sequence[Term]:
        """Terms ordered by start date, newest first."""

        raise NotImplementedError

    def get_by_id(self, term_id: int) -> Optional[Term]:
        raise NotImplementedError

    def get_active(self) -> Optional[Term]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        start_date: date,
        end_date: date,
        year: int,
        is_active: bool,
        days_off: Sequence[DayOff] = (),
        notes: Optional[str] = None,
    ) -> int:
        """Insert a term. An active one deactivates every other term in the same transaction."""

        raise NotImplementedError

    def update(
        self,
        *,
        term_id: int,
        name: str,
        start_date: date,
        end_date: date,
        year: int,
        is_active: bool,
        days_off: Sequence[DayOff],
        notes: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete(self, term_id: int) -> bool:
        raise NotImplementedError
