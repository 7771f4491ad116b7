from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import utc_now
from ..core.enums import IgnoreReason, IntentKind
from ..punches.normalizer import TimeNormalizer
from .model import AttendanceSession, Intent

logger = logging.getLogger(__name__)


class PunchReconciler:
    """Decide what one punch means for an employee's sessions.

    Pure: no I/O, no retries. The caller looks up ``last_session`` and
    executes the returned intent. At most one session per employee is open
    after applying any sequence of intents produced here.
    """

    def __init__(self, normalizer: TimeNormalizer, *, clock: Optional[Callable[[], datetime]] = None):
        self._normalizer = normalizer
        self._clock = clock or utc_now

    def today(self) -> str:
        return self._normalizer.today(self._clock())

    def reconcile(
        self,
        employee_id: int,
        punch_instant: datetime,
        last_session: Optional[AttendanceSession],
        *,
        today: Optional[str] = None,
    ) -> Intent:
        today = today or self.today()
        if self._normalizer.civil_day(punch_instant) != today:
            return Intent.ignore(employee_id, IgnoreReason.NON_TODAY)

        if last_session is None:
            return Intent.create(employee_id, punch_instant)

        if last_session.is_open:
            if punch_instant == last_session.check_in:
                return Intent.ignore(employee_id, IgnoreReason.DUPLICATE_CHECKIN)
            if punch_instant > last_session.check_in:
                return Intent.close(employee_id, last_session.session_id, punch_instant)
            return self._backdated(employee_id, punch_instant, last_session.check_in)

        if punch_instant > last_session.check_out:
            return Intent.create(employee_id, punch_instant)
        if punch_instant == last_session.check_out:
            return Intent.ignore(employee_id, IgnoreReason.DUPLICATE_CHECKOUT)
        return self._backdated(employee_id, punch_instant, last_session.check_out)

    def apply(self, intent: Intent, last_session: Optional[AttendanceSession]) -> Optional[AttendanceSession]:
        """Session state after ``intent`` is executed (projection, no I/O)."""
        if intent.kind == IntentKind.IGNORE:
            return last_session
        if intent.kind == IntentKind.CREATE:
            return AttendanceSession(session_id=None, employee_id=intent.employee_id, check_in=intent.check_in)
        if intent.kind == IntentKind.CREATE_AND_CLOSE:
            return AttendanceSession(
                session_id=None,
                employee_id=intent.employee_id,
                check_in=intent.check_in,
                check_out=intent.check_out,
            )

        if last_session is None or not last_session.is_open:
            raise ValueError("CLOSE intent needs an open session")
        return AttendanceSession(
            session_id=last_session.session_id,
            employee_id=last_session.employee_id,
            check_in=last_session.check_in,
            check_out=intent.check_out,
        )

    def _backdated(self, employee_id: int, punch_instant: datetime, reference: datetime) -> Intent:
        # Usually a terminal clock running behind the backend.
        logger.warning(
            "Backdated punch for employee %s: %s is before %s",
            employee_id,
            self._normalizer.to_backend(punch_instant),
            self._normalizer.to_backend(reference),
        )
        return Intent.ignore(employee_id, IgnoreReason.BACKDATED)
