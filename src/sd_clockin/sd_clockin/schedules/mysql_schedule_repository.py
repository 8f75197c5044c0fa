from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Schedule, empty_availability
from .repository import ScheduleRepository

_COLUMNS = "schedule_id, student_id, term_id, timezone, availability"


def _to_schedule(r: dict) -> Schedule:
    availability = empty_availability()
    availability.update(load_json(r.get("availability"), {}))
    return Schedule(
        schedule_id=int(r["schedule_id"]),
        student_id=int(r["student_id"]),
        term_id=int(r["term_id"]),
        availability=availability,
        timezone=r["timezone"],
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, student_id: int, term_id: int) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM schedules WHERE student_id=%s AND term_id=%s",
                (int(student_id), int(term_id)),
            )
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def list_for_term(self, term_id: int) -> Sequence[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM schedules WHERE term_id=%s ORDER BY student_id ASC",
                (int(term_id),),
            )
            return [_to_schedule(r) for r in fetchall(cur)]

    def upsert(self, *, student_id: int, term_id: int, availability: dict, timezone: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedules(student_id, term_id, timezone, availability)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE timezone=VALUES(timezone), availability=VALUES(availability)
                """,
                (int(student_id), int(term_id), timezone, dump_json(availability)),
            )

            # If it was an update, lastrowid can be 0; fetch schedule_id.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT schedule_id FROM schedules WHERE student_id=%s AND term_id=%s",
                (int(student_id), int(term_id)),
            )
            r = fetchone(cur)
            return int(r["schedule_id"]) if r else 0

    def delete(self, *, student_id: int, term_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM schedules WHERE student_id=%s AND term_id=%s",
                (int(student_id), int(term_id)),
            )
            return cur.rowcount > 0

    def delete_for_student(self, student_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedules WHERE student_id=%s", (int(student_id),))
            return int(cur.rowcount)
