from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import CheckInType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CheckIn
from .repository import CheckInRepository

_COLUMNS = "checkin_id, student_id, term_id, type, timestamp, is_manual, is_auto_clock_out"


def _to_checkin(r: dict) -> CheckIn:
    return CheckIn(
        checkin_id=int(r["checkin_id"]),
        student_id=int(r["student_id"]),
        term_id=int(r["term_id"]),
        type=CheckInType(r["type"]),
        timestamp=r["timestamp"],
        is_manual=bool(r["is_manual"]),
        is_auto_clock_out=bool(r["is_auto_clock_out"]),
    )


class MySQLCheckInRepository(CheckInRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(
        self,
        *,
        student_id: Optional[int] = None,
        term_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[CheckIn]:
        clauses: list[str] = []
        params: list[object] = []
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))
        if term_id is not None:
            clauses.append("term_id=%s")
            params.append(int(term_id))
        if start is not None:
            clauses.append("timestamp >= %s")
            params.append(start)
        if end is not None:
            clauses.append("timestamp <= %s")
            params.append(end)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        limit_sql = ""
        if limit is not None:
            limit_sql = "LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM checkins
                {where}
                ORDER BY timestamp DESC, checkin_id DESC
                {limit_sql}
                """,
                tuple(params),
            )
            return [_to_checkin(r) for r in fetchall(cur)]

    def get_by_id(self, checkin_id: int) -> Optional[CheckIn]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM checkins WHERE checkin_id=%s", (int(checkin_id),))
            r = fetchone(cur)
            return _to_checkin(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO checkins(student_id, term_id, type, timestamp, is_manual, is_auto_clock_out)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(student_id), int(term_id), type.value, timestamp, int(is_manual), int(is_auto_clock_out)),
            )
            return int(cur.lastrowid)

    def update(self, *, checkin_id: int, type: CheckInType, timestamp: datetime, is_manual: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE checkins SET type=%s, timestamp=%s, is_manual=%s WHERE checkin_id=%s",
                (type.value, timestamp, int(is_manual), int(checkin_id)),
            )
            return cur.rowcount > 0

    def delete(self, checkin_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM checkins WHERE checkin_id=%s", (int(checkin_id),))
            return cur.rowcount > 0

    def delete_for_student(self, student_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM checkins WHERE student_id=%s", (int(student_id),))
            return int(cur.rowcount)
