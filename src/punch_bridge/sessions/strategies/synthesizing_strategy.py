from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import IgnoreReason
from ..model import AttendanceSession, Intent
from ..reconciler import PunchReconciler
from .base import BatchStrategy


class SynthesizingBatchStrategy(BatchStrategy):
    """Lossy fallback: write one session spanning exactly [first, last].

    Used when the backend cannot tell us the employee's current session. No
    continuity with earlier cycles: an open session from a previous cycle is
    not closed, and a second pair the same day creates another session.
    """

    needs_lookup = False

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
        probe = reconciler.reconcile(employee_id, first, None, today=today)
        if probe.reason == IgnoreReason.NON_TODAY:
            return [probe]
        if last == first:
            return [Intent.create(employee_id, first)]
        return [Intent.create_and_close(employee_id, first, last)]
