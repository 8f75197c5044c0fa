from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CheckInType
from .model import CheckIn


class CheckInRepository(Protocol):
    def list(
        self,
        *,
        student_id: Optional[int] = None,
        term_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[CheckIn]:
        """Matching entries, newest first. ``end`` is inclusive."""

        raise NotImplementedError

    def get_by_id(self, checkin_id: int) -> Optional[CheckIn]:
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: int,
        term_id: int,
        type: CheckInType,
        timestamp: datetime,
        is_manual: bool = False,
        is_auto_clock_out: bool = False,
    ) -> int:
        raise NotImplementedError

    def update(self, *, checkin_id: int, type: CheckInType, timestamp: datetime, is_manual: bool) -> bool:
        raise NotImplementedError

    def delete(self, checkin_id: int) -> bool:
        raise NotImplementedError

    def delete_for_student(self, student_id: int) -> int:
        raise NotImplementedError
