from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import AttendanceSession


class SessionRepository(Protocol):
    """Backend contract for attendance sessions.

    Lookups return None when no record matches. Transport problems raise
    BackendUnavailable; writes the backend refuses raise BackendError. A
    failed write must leave the stored sessions untouched.
    """

    supports_lookup: bool

    def find_open_or_last_session(self, employee_id: int, day: str) -> Optional[AttendanceSession]:
        """Open session of ``day`` if any, else the latest session of ``day``."""

        raise NotImplementedError

    def create(self, employee_id: int, check_in: datetime, check_out: Optional[datetime] = None) -> int:
        raise NotImplementedError

    def set_checkout(self, session_id: int, check_out: datetime) -> None:
        raise NotImplementedError
