from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import DayOff, Term
from .repository import TermRepository

_COLUMNS = "term_id, name, start_date, end_date, year, is_active, notes"


class MySQLTermRepository(TermRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_days_off(self, cur, term_ids: Sequence[int]) -> dict[int, list[DayOff]]:
        out: dict[int, list[DayOff]] = {tid: [] for tid in term_ids}
        if not term_ids:
            return out
        placeholders = ",".join(["%s"] * len(term_ids))
        cur.execute(
            f"""
            SELECT term_id, start_date, end_date, notes
            FROM term_days_off
            WHERE term_id IN ({placeholders})
            ORDER BY start_date ASC
            """,
            tuple(term_ids),
        )
        for r in fetchall(cur):
            out[int(r["term_id"])].append(
                DayOff(
                    start_date=normalize_mysql_date(r["start_date"]),
                    end_date=normalize_mysql_date(r["end_date"]),
                    notes=r.get("notes"),
                )
            )
        return out

    def _to_terms(self, cur, rows: list[dict]) -> list[Term]:
        days_off = self._load_days_off(cur, [int(r["term_id"]) for r in rows])
        return [
            Term(
                term_id=int(r["term_id"]),
                name=r["name"],
                start_date=normalize_mysql_date(r["start_date"]),
                end_date=normalize_mysql_date(r["end_date"]),
                year=int(r["year"]),
                is_active=bool(r["is_active"]),
                days_off=tuple(days_off.get(int(r["term_id"]), [])),
                notes=r.get("notes"),
            )
            for r in rows
        ]

    def _replace_days_off(self, cur, term_id: int, days_off: Sequence[DayOff]) -> None:
        cur.execute("DELETE FROM term_days_off WHERE term_id=%s", (int(term_id),))
        for d in days_off:
            cur.execute(
                "INSERT INTO term_days_off(term_id, start_date, end_date, notes) VALUES(%s,%s,%s,%s)",
                (int(term_id), d.start_date, d.end_date, d.notes),
            )

    def list_all(self) -> Sequence[Term]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM terms ORDER BY start_date DESC")
            return self._to_terms(cur, fetchall(cur))

    def get_by_id(self, term_id: int) -> Optional[Term]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM terms WHERE term_id=%s", (int(term_id),))
            r = fetchone(cur)
            return self._to_terms(cur, [r])[0] if r else None

    def get_active(self) -> Optional[Term]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM terms WHERE is_active=1 ORDER BY start_date DESC LIMIT 1")
            r = fetchone(cur)
            return self._to_terms(cur, [r])[0] if r else None

    def create(
        self,
        *,
        name: str,
        start_date: date,
        end_date: date,
        year: int,
        is_active: bool,
        days_off: Sequence[DayOff] = (),
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if is_active:
                cur.execute("UPDATE terms SET is_active=0 WHERE is_active=1")
            cur.execute(
                """
                INSERT INTO terms(name, start_date, end_date, year, is_active, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (name, start_date, end_date, int(year), int(is_active), notes),
            )
            term_id = int(cur.lastrowid)
            self._replace_days_off(cur, term_id, days_off)
            return term_id

    def update(
        self,
        *,
        term_id: int,
        name: str,
        start_date: date,
        end_date: date,
        year: int,
        is_active: bool,
        days_off: Sequence[DayOff],
        notes: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if is_active:
                cur.execute(
                    "UPDATE terms SET is_active=0 WHERE is_active=1 AND term_id<>%s", (int(term_id),)
                )
            cur.execute(
                """
                UPDATE terms
                SET name=%s, start_date=%s, end_date=%s, year=%s, is_active=%s, notes=%s
                WHERE term_id=%s
                """,
                (name, start_date, end_date, int(year), int(is_active), notes, int(term_id)),
            )
            changed = cur.rowcount > 0
            self._replace_days_off(cur, term_id, days_off)
            return changed

    def delete(self, term_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM terms WHERE term_id=%s", (int(term_id),))
            return cur.rowcount > 0
