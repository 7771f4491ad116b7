from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.exceptions import BackendError
from ..odoo.client import OdooClient
from ..punches.normalizer import TimeNormalizer
from .model import AttendanceSession
from .repository import SessionRepository

ATTENDANCE_MODEL = "hr.attendance"
_FIELDS = ["id", "employee_id", "check_in", "check_out"]


class OdooSessionRepository(SessionRepository):
    """Sessions stored as Odoo ``hr.attendance`` records."""

    supports_lookup = True

    def __init__(self, client: OdooClient, normalizer: TimeNormalizer):
        self._client = client
        self._normalizer = normalizer

    def _to_session(self, employee_id: int, r: dict) -> AttendanceSession:
        check_out = r.get("check_out")
        return AttendanceSession(
            session_id=int(r["id"]),
            employee_id=employee_id,
            check_in=self._normalizer.from_backend(r["check_in"]),
            check_out=self._normalizer.from_backend(check_out) if check_out else None,
        )

    def find_open_or_last_session(self, employee_id: int, day: str) -> Optional[AttendanceSession]:
        start, end = self._normalizer.day_bounds(day)
        rows = self._client.search_read(
            ATTENDANCE_MODEL,
            [
                ["employee_id", "=", int(employee_id)],
                ["check_in", ">=", self._normalizer.to_backend(start)],
                ["check_in", "<", self._normalizer.to_backend(end)],
            ],
            _FIELDS,
            order="check_in desc",
        )
        if not rows:
            return None

        open_rows = [r for r in rows if not r.get("check_out")]
        return self._to_session(employee_id, (open_rows or rows)[0])

    def create(self, employee_id: int, check_in: datetime, check_out: Optional[datetime] = None) -> int:
        values = {"employee_id": int(employee_id), "check_in": self._normalizer.to_backend(check_in)}
        if check_out is not None:
            values["check_out"] = self._normalizer.to_backend(check_out)
        return self._client.create(ATTENDANCE_MODEL, values)

    def set_checkout(self, session_id: int, check_out: datetime) -> None:
        ok = self._client.write(
            ATTENDANCE_MODEL,
            [int(session_id)],
            {"check_out": self._normalizer.to_backend(check_out)},
        )
        if not ok:
            raise BackendError(f"Odoo refused check_out for attendance {session_id}")
