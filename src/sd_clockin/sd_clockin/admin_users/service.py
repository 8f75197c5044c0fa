from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Sequence

from ..common.datetime_utils import now_utc
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .model import AdminUser
from .repository import AdminUserRepository

logger = logging.getLogger(__name__)


def _clean(value) -> str:
    return str(value).strip() if value is not None else ""


class AdminUserService:
    """Use case: maintain the admin allow-list and authorize sign-ins against it."""

    def __init__(self, admins: AdminUserRepository, *, clock: Callable[[], datetime] = now_utc):
        self._admins = admins
        self._clock = clock

    def list_admins(self) -> Sequence[AdminUser]:
        return self._admins.list_all()

    def get_admin(self, admin_user_id: int) -> AdminUser:
        admin = self._admins.get_by_id(admin_user_id)
        if not admin:
            raise NotFoundError("Admin user not found")
        return admin

    def create_admin(self, *, email, name=None, is_active=None) -> AdminUser:
        email = _clean(email)
        if not email:
            raise ValidationError("email is required")
        if self._admins.get_by_email(email):
            raise ConflictError("An admin with this email already exists")

        admin_id = self._admins.create(
            email=email,
            name=_clean(name) or None,
            is_active=is_active if isinstance(is_active, bool) else True,
        )
        logger.info("Added admin user %s", email)
        return self.get_admin(admin_id)

    def update_admin(self, admin_user_id: int, *, email=None, name=None, is_active=None) -> AdminUser:
        admin = self.get_admin(admin_user_id)
        email = _clean(email) or admin.email

        duplicate = self._admins.get_by_email(email)
        if duplicate and duplicate.admin_user_id != admin.admin_user_id:
            raise ConflictError("Another admin user already uses this email")

        self._admins.update(
            admin_user_id=admin.admin_user_id,
            email=email,
            name=_clean(name) or None,
            is_active=is_active if isinstance(is_active, bool) else admin.is_active,
        )
        return self.get_admin(admin_user_id)

    def delete_admin(self, admin_user_id: int) -> None:
        self.get_admin(admin_user_id)
        self._admins.delete(admin_user_id)
        logger.info("Removed admin user %s", admin_user_id)

    def authorize(self, *, email, name=None) -> AdminUser:
        """Admit an active admin, stamping the login time.

        A missing display name is filled from ``name``.
        """

        email = _clean(email)
        if not email:
            raise ValidationError("email is required")

        admin = self._admins.get_by_email(email)
        if not admin or not admin.is_active:
            raise AuthorizationError("User is not an active admin")

        self._admins.touch_login(admin.admin_user_id, at=self._clock(), name=_clean(name) or None)
        return self.get_admin(admin.admin_user_id)

