from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ShiftSource, ShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import ShiftRecord
from .repository import ShiftRepository

_COLUMNS = (
    "shift_id, student_id, term_id, shift_date, status, source, "
    "scheduled_start, scheduled_end, actual_start, actual_end, notes"
)


def _to_shift(r: dict) -> ShiftRecord:
    return ShiftRecord(
        shift_id=int(r["shift_id"]),
        student_id=int(r["student_id"]),
        term_id=int(r["term_id"]),
        shift_date=normalize_mysql_date(r["shift_date"]),
        status=ShiftStatus(r["status"]),
        source=ShiftSource(r["source"]),
        scheduled_start=r.get("scheduled_start"),
        scheduled_end=r.get("scheduled_end"),
        actual_start=r.get("actual_start"),
        actual_end=r.get("actual_end"),
        notes=r.get("notes"),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_and_date(self, *, student_id: int, term_id: int, shift_date: date) -> Optional[ShiftRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE student_id=%s AND term_id=%s AND shift_date=%s
                """,
                (int(student_id), int(term_id), shift_date),
            )
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def list_by_date(self, shift_date: date, *, status: Optional[ShiftStatus] = None) -> Sequence[ShiftRecord]:
        sql = f"SELECT {_COLUMNS} FROM shifts WHERE shift_date=%s"
        params: list[object] = [shift_date]
        if status is not None:
            sql += " AND status=%s"
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY shift_id ASC", tuple(params))
            return [_to_shift(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        student_id: int,
        term_id: int,
        shift_date: date,
        status: ShiftStatus,
        source: ShiftSource = ShiftSource.MANUAL,
        actual_start: Optional[datetime] = None,
        actual_end: Optional[datetime] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(student_id, term_id, shift_date, status, source, actual_start, actual_end)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(student_id), int(term_id), shift_date, status.value, source.value, actual_start, actual_end),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        shift_id: int,
        status: ShiftStatus,
        actual_start: Optional[datetime],
        actual_end: Optional[datetime],
        notes: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts
                SET status=%s, actual_start=%s, actual_end=%s, notes=%s
                WHERE shift_id=%s
                """,
                (status.value, actual_start, actual_end, notes, int(shift_id)),
            )
            return cur.rowcount > 0

    def delete_for_student(self, student_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shifts WHERE student_id=%s", (int(student_id),))
            return int(cur.rowcount)
