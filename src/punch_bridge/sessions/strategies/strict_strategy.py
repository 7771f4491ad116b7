from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import IntentKind
from ..model import AttendanceSession, Intent
from ..reconciler import PunchReconciler
from .base import BatchStrategy


class StrictBatchStrategy(BatchStrategy):
    """Replay the pair as two punches through the per-punch rules."""

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
        today = today or reconciler.today()

        opening = reconciler.reconcile(employee_id, first, last_session, today=today)
        if last == first:
            return [opening]

        projected = reconciler.apply(opening, last_session)
        closing = reconciler.reconcile(employee_id, last, projected, today=today)

        # The session opened by `first` has no id yet, so both punches go in one write.
        if opening.kind == IntentKind.CREATE and closing.kind == IntentKind.CLOSE:
            return [Intent.create_and_close(employee_id, first, last)]
        return [opening, closing]
