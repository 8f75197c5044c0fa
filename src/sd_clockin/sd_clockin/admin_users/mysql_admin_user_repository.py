from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AdminUser
from .repository import AdminUserRepository

_COLUMNS = "admin_user_id, email, name, role, is_admin, is_active, last_login_at, created_at, updated_at"


def _to_admin(r: dict) -> AdminUser:
    return AdminUser(
        admin_user_id=int(r["admin_user_id"]),
        email=r["email"],
        name=r.get("name"),
        role=r.get("role") or "admin",
        is_admin=bool(r.get("is_admin", 1)),
        is_active=bool(r.get("is_active", 1)),
        last_login_at=r.get("last_login_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAdminUserRepository(AdminUserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[AdminUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM admin_users ORDER BY created_at DESC, admin_user_id DESC")
            return [_to_admin(r) for r in fetchall(cur)]

    def get_by_id(self, admin_user_id: int) -> Optional[AdminUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM admin_users WHERE admin_user_id=%s", (int(admin_user_id),))
            r = fetchone(cur)
            return _to_admin(r) if r else None

    def get_by_email(self, email: str) -> Optional[AdminUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM admin_users WHERE email_lower=%s", (email.strip().lower(),))
            r = fetchone(cur)
            return _to_admin(r) if r else None

    def create(self, *, email: str, name: Optional[str], is_active: bool = True) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO admin_users(email, email_lower, name, role, is_admin, is_active)
                VALUES(%s,%s,%s,'admin',1,%s)
                """,
                (email, email.lower(), name, int(is_active)),
            )
            return int(cur.lastrowid)

    def update(self, *, admin_user_id: int, email: str, name: Optional[str], is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE admin_users
                SET email=%s, email_lower=%s, name=%s, is_active=%s
                WHERE admin_user_id=%s
                """,
                (email, email.lower(), name, int(is_active), int(admin_user_id)),
            )
            return cur.rowcount > 0

    def touch_login(self, admin_user_id: int, *, at: datetime, name: Optional[str] = None) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE admin_users SET last_login_at=%s, name=COALESCE(name, %s) WHERE admin_user_id=%s",
                (at, name, int(admin_user_id)),
            )

    def delete(self, admin_user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM admin_users WHERE admin_user_id=%s", (int(admin_user_id),))
            return cur.rowcount > 0
