from __future__ import annotations

import threading
from datetime import datetime
from typing import Optional

from ..core.exceptions import BackendError
from ..punches.normalizer import TimeNormalizer
from .model import AttendanceSession
from .repository import SessionRepository


class InMemorySessionRepository(SessionRepository):
    """Process-local backend for dry runs (``BACKEND=memory``) and tests."""

    supports_lookup = True

    def __init__(self, normalizer: TimeNormalizer):
        self._normalizer = normalizer
        self._sessions: dict[int, AttendanceSession] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def find_open_or_last_session(self, employee_id: int, day: str) -> Optional[AttendanceSession]:
        with self._lock:
            items = [
                s
                for s in self._sessions.values()
                if s.employee_id == employee_id and self._normalizer.civil_day(s.check_in) == day
            ]
        if not items:
            return None
        items.sort(key=lambda s: (s.is_open, s.check_in), reverse=True)
        return items[0]

    def create(self, employee_id: int, check_in: datetime, check_out: Optional[datetime] = None) -> int:
        with self._lock:
            if check_out is None and any(s.employee_id == employee_id and s.is_open for s in self._sessions.values()):
                raise BackendError(f"Employee {employee_id} already has an open session")
            session_id = self._next_id
            self._next_id += 1
            self._sessions[session_id] = AttendanceSession(
                session_id=session_id,
                employee_id=employee_id,
                check_in=check_in,
                check_out=check_out,
            )
            return session_id

    def set_checkout(self, session_id: int, check_out: datetime) -> None:
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None or not current.is_open:
                raise BackendError(f"Session {session_id} is not open")
            self._sessions[session_id] = AttendanceSession(
                session_id=current.session_id,
                employee_id=current.employee_id,
                check_in=current.check_in,
                check_out=check_out,
            )

    def all_sessions(self) -> list[AttendanceSession]:
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: (s.employee_id, s.check_in))
