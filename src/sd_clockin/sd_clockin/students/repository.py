from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import StudentRole
from .model import Student


class StudentRepository(Protocol):
    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_card_id(self, card_id: str) -> Optional[Student]:
        raise NotImplementedError

    def create(self, *, name: str, card_id: str, role: StudentRole, is_active: bool = True) -> int:
        raise NotImplementedError

    def update(self, *, student_id: int, name: str, card_id: str, role: StudentRole, is_active: bool) -> bool:
        raise NotImplementedError

    def delete(self, student_id: int) -> bool:
        raise NotImplementedError
