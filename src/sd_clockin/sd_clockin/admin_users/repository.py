from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AdminUser


class AdminUserRepository(Protocol):
    def list_all(self) -> Sequence[AdminUser]:
        """Newest first."""

        raise NotImplementedError

    def get_by_id(self, admin_user_id: int) -> Optional[AdminUser]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[AdminUser]:
        """Case-insensitive lookup."""

        raise NotImplementedError

    def create(self, *, email: str, name: Optional[str], is_active: bool = True) -> int:
        raise NotImplementedError

    def update(self, *, admin_user_id: int, email: str, name: Optional[str], is_active: bool) -> bool:
        raise NotImplementedError

    def touch_login(self, admin_user_id: int, *, at: datetime, name: Optional[str] = None) -> None:
        """Stamp ``last_login_at`` and fill ``name`` when given."""

        raise NotImplementedError

    def delete(self, admin_user_id: int) -> bool:
        raise NotImplementedError
