from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import IgnoreReason, IntentKind
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one check-in to check-out period of an employee.

    ``session_id`` is owned by the backend and is None for a projected
    session that has not been written yet.
    """

    session_id: Optional[int]
    employee_id: int
    check_in: datetime
    check_out: Optional[datetime] = None

    def __post_init__(self):
        if self.check_out is not None and self.check_out <= self.check_in:
            raise ValidationError("check_out must be later than check_in")

    @property
    def is_open(self) -> bool:
        return self.check_out is None


@dataclass(frozen=True)
class Intent:
    """Write decision produced by the reconciler for a single punch."""

    kind: IntentKind
    employee_id: int
    session_id: Optional[int] = None
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    reason: Optional[IgnoreReason] = None

    @classmethod
    def create(cls, employee_id: int, check_in: datetime) -> "Intent":
        return cls(IntentKind.CREATE, employee_id, check_in=check_in)

    @classmethod
    def close(cls, employee_id: int, session_id: Optional[int], check_out: datetime) -> "Intent":
        return cls(IntentKind.CLOSE, employee_id, session_id=session_id, check_out=check_out)

    @classmethod
    def create_and_close(cls, employee_id: int, check_in: datetime, check_out: datetime) -> "Intent":
        return cls(IntentKind.CREATE_AND_CLOSE, employee_id, check_in=check_in, check_out=check_out)

    @classmethod
    def ignore(cls, employee_id: int, reason: IgnoreReason) -> "Intent":
        return cls(IntentKind.IGNORE, employee_id, reason=reason)

    @property
    def is_write(self) -> bool:
        return self.kind != IntentKind.IGNORE
