from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..model import AttendanceSession, Intent
from ..reconciler import PunchReconciler


class BatchStrategy(ABC):
    """Strategy Pattern: turn a (first, last) punch pair into write intents."""

    needs_lookup: bool = True

    @abstractmethod
    def decide(
        self,
        reconciler: PunchReconciler,
        *,
        employee_id: int,
        first: datetime,
        last: datetime,
        last_session: Optional[AttendanceSession],
        today: Optional[str] = None,
    ) -> list[Intent]:
        raise NotImplementedError
