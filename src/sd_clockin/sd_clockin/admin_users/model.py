from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AdminUser:
    """An email address allowed to sign in to the admin dashboard."""

    admin_user_id: int
    email: str
    name: Optional[str] = None
    role: str = "admin"
    is_admin: bool = True
    is_active: bool = True
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def email_lower(self) -> str:
        return self.email.lower()
