from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Schedule


class ScheduleRepository(Protocol):
    def get(self, *, student_id: int, term_id: int) -> Optional[Schedule]:
        raise NotImplementedError

    def list_for_term(self, term_id: int) -> Sequence[Schedule]:
        raise NotImplementedError

    def upsert(self, *, student_id: int, term_id: int, availability: dict, timezone: str) -> int:
        raise NotImplementedError

    def delete(self, *, student_id: int, term_id: int) -> bool:
        raise NotImplementedError

    def delete_for_student(self, student_id: int) -> int:
        raise NotImplementedError
