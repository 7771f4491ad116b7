from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.exceptions import BackendError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from ..punches.normalizer import TimeNormalizer
from .model import AttendanceSession
from .repository import SessionRepository


class MySQLSessionRepository(SessionRepository):
    """Sessions in the ``attendance_sessions`` table (naive UTC datetimes)."""

    supports_lookup = True

    def __init__(self, conn_factory: DatabaseConnection, normalizer: TimeNormalizer):
        self._conn_factory = conn_factory
        self._normalizer = normalizer

    def _to_db(self, instant: datetime) -> datetime:
        return self._normalizer.from_backend(instant).replace(tzinfo=None)

    def _row_to_session(self, r: dict) -> AttendanceSession:
        check_out = r.get("check_out")
        return AttendanceSession(
            session_id=int(r["session_id"]),
            employee_id=int(r["employee_id"]),
            check_in=self._normalizer.from_backend(r["check_in"]),
            check_out=self._normalizer.from_backend(check_out) if check_out else None,
        )

    def find_open_or_last_session(self, employee_id: int, day: str) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id, employee_id, check_in, check_out
                FROM attendance_sessions
                WHERE employee_id=%s AND work_date=%s
                ORDER BY (check_out IS NULL) DESC, check_in DESC
                LIMIT 1
                """,
                (int(employee_id), day),
            )
            r = fetchone(cur)
            return self._row_to_session(r) if r else None

    def create(self, employee_id: int, check_in: datetime, check_out: Optional[datetime] = None) -> int:
        work_date = self._normalizer.civil_day(check_in)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(employee_id, work_date, check_in, check_out)
                VALUES(%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    work_date,
                    self._to_db(check_in),
                    self._to_db(check_out) if check_out else None,
                ),
            )
            return int(cur.lastrowid)

    def set_checkout(self, session_id: int, check_out: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET check_out=%s
                WHERE session_id=%s AND check_out IS NULL AND check_in < %s
                """,
                (self._to_db(check_out), int(session_id), self._to_db(check_out)),
            )
            if cur.rowcount == 0:
                raise BackendError(f"Session {session_id} is not open or check_out precedes check_in")
