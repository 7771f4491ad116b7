from __future__ import annotations

import logging
import threading
from collections import Counter, defaultdict
from datetime import datetime
from typing import Iterable, Optional

from ..common.datetime_utils import utc_now
from ..core.enums import IntentKind, OutcomeStatus, PollMode
from ..core.exceptions import BackendError, BackendUnavailable, UnmappedSubjectError
from ..employees.directory import EmployeeDirectory
from ..employees.model import EmployeeMapping
from ..punches.batcher import SessionBatcher
from ..punches.dedup import Deduplicator
from ..punches.model import PunchEvent
from ..punches.normalizer import TimeNormalizer
from ..sessions.factory import BatchStrategyFactory
from ..sessions.model import Intent
from ..sessions.reconciler import PunchReconciler
from ..sessions.repository import SessionRepository
from .locks import EmployeeLocks
from .model import PunchOutcome, SyncReport

logger = logging.getLogger(__name__)

_WRITE_STATUS = {
    IntentKind.CREATE: OutcomeStatus.CREATED,
    IntentKind.CLOSE: OutcomeStatus.CLOSED,
    IntentKind.CREATE_AND_CLOSE: OutcomeStatus.CREATED_AND_CLOSED,
    IntentKind.IGNORE: OutcomeStatus.IGNORED,
}


class PunchSyncService:
    """Use case: turn delivered punches into backend session writes.

    Shared by the poll loop, the realtime listener and the HTTP push
    endpoint. All writes for one employee run under that employee's lock so
    the at-most-one-open-session rule holds when the paths interleave.
    """

    def __init__(
        self,
        directory: EmployeeDirectory,
        sessions: SessionRepository,
        normalizer: TimeNormalizer,
        *,
        reconciler: Optional[PunchReconciler] = None,
        dedup: Optional[Deduplicator] = None,
        locks: Optional[EmployeeLocks] = None,
        strategy_factory: Optional[BatchStrategyFactory] = None,
        batcher: Optional[SessionBatcher] = None,
        poll_mode: PollMode = PollMode.PER_PUNCH,
    ):
        self._directory = directory
        self._sessions = sessions
        self._normalizer = normalizer
        self._reconciler = reconciler or PunchReconciler(normalizer)
        self._dedup = dedup or Deduplicator()
        self._locks = locks or EmployeeLocks()
        self._factory = strategy_factory or BatchStrategyFactory()
        self._batcher = batcher or SessionBatcher()
        self._poll_mode = PollMode(poll_mode)

        self._stats: Counter = Counter()
        self._stats_lock = threading.Lock()
        self._last_cycle: Optional[dict] = None
        self._started_at = utc_now()

    # ------------------------------------------------------------------
    # realtime path

    def handle_punch(self, event: PunchEvent, *, source: str = "realtime") -> PunchOutcome:
        if self._dedup.seen(*event.key):
            logger.debug("Duplicate %s punch %s@%s", source, event.subject_id, event.instant)
            return self._record(PunchOutcome(OutcomeStatus.DUPLICATE, event.subject_id, event.instant))

        try:
            employee = self._directory.require(event.subject_id)
        except UnmappedSubjectError as e:
            return self._record(self._unmapped(event, e))

        with self._locks.for_employee(employee.employee_id):
            outcome = self._reconcile_one(employee, event, today=self._reconciler.today())
        return self._record(outcome)

    # ------------------------------------------------------------------
    # poll path

    def handle_batch(self, events: Iterable[PunchEvent], *, source: str = "poll") -> SyncReport:
        report = SyncReport(source=source)
        today = self._reconciler.today()

        by_employee: dict[int, list[PunchEvent]] = defaultdict(list)
        employees: dict[int, EmployeeMapping] = {}

        for event in events:
            # History on the terminal is never reconciled, so keep it out of the cache too.
            if self._normalizer.civil_day(event.instant) != today:
                report.skipped_non_today += 1
                continue
            if self._dedup.seen(*event.key):
                report.add(PunchOutcome(OutcomeStatus.DUPLICATE, event.subject_id, event.instant))
                continue

            try:
                employee = self._directory.require(event.subject_id)
            except UnmappedSubjectError as e:
                report.add(self._unmapped(event, e))
                continue
            employees[employee.employee_id] = employee
            by_employee[employee.employee_id].append(event)

        for employee_id, items in by_employee.items():
            employee = employees[employee_id]
            if self._poll_mode == PollMode.BATCHED:
                outcomes = self._reconcile_pair(employee, items, today=today)
            else:
                outcomes = self._reconcile_sequence(employee, items, today=today)
            for outcome in outcomes:
                report.add(outcome)

        for outcome in report.outcomes:
            self._record(outcome)
        with self._stats_lock:
            self._last_cycle = dict(report.as_dict(), finished_at=utc_now().isoformat())

        if report.writes or report.retryable_failures:
            logger.info("%s cycle: %s", source, report.as_dict())
        return report

    def _reconcile_sequence(self, employee: EmployeeMapping, items: list[PunchEvent], *, today: str) -> list[PunchOutcome]:
        outcomes: list[PunchOutcome] = []
        ordered = sorted(items, key=lambda e: e.instant)
        # Held for the whole sequence so a realtime punch cannot land between two of these.
        with self._locks.for_employee(employee.employee_id):
            for idx, event in enumerate(ordered):
                outcome = self._reconcile_one(employee, event, today=today)
                outcomes.append(outcome)
                if outcome.status == OutcomeStatus.FAILED and outcome.retryable:
                    # Later punches must wait for this one or they would be reconciled out of order.
                    for deferred in ordered[idx + 1:]:
                        self._dedup.discard(*deferred.key)
                        outcomes.append(
                            PunchOutcome(
                                OutcomeStatus.FAILED,
                                deferred.subject_id,
                                deferred.instant,
                                employee_id=employee.employee_id,
                                error="deferred after earlier failure",
                                retryable=True,
                            )
                        )
                    break
        return outcomes

    def _reconcile_pair(self, employee: EmployeeMapping, items: list[PunchEvent], *, today: str) -> list[PunchOutcome]:
        # Keyed by employee: two subject keys (id and barcode) may resolve to the same person.
        first, last = self._batcher.batch(items, window_key=lambda e: employee.employee_id)[employee.employee_id]
        strategy = self._factory.for_batch(lookup_available=self._sessions.supports_lookup)

        lock = self._locks.for_employee(employee.employee_id)
        with lock:
            try:
                last_session = (
                    self._sessions.find_open_or_last_session(employee.employee_id, today) if strategy.needs_lookup else None
                )
                intents = strategy.decide(
                    self._reconciler,
                    employee_id=employee.employee_id,
                    first=first.instant,
                    last=last.instant,
                    last_session=last_session,
                    today=today,
                )
                outcomes = []
                for punch, intent in zip((first, last), intents):
                    session_id = self._execute(employee, intent)
                    outcomes.append(self._written(punch, employee, intent, session_id))
                return outcomes
            except BackendUnavailable as e:
                for event in items:
                    self._dedup.discard(*event.key)
                logger.warning("Backend unavailable for employee %s, batch retried next cycle: %s", employee.employee_id, e)
                return [self._failed(first, employee, e, retryable=True)]
            except BackendError as e:
                logger.error("Backend rejected batch for employee %s: %s", employee.employee_id, e)
                return [self._failed(first, employee, e, retryable=False)]

    # ------------------------------------------------------------------
    # shared

    def _reconcile_one(self, employee: EmployeeMapping, event: PunchEvent, *, today: str) -> PunchOutcome:
        """Lookup, decide and write one punch. Caller holds the employee lock."""
        try:
            last_session = None
            if self._normalizer.civil_day(event.instant) == today:
                last_session = self._sessions.find_open_or_last_session(employee.employee_id, today)
            intent = self._reconciler.reconcile(employee.employee_id, event.instant, last_session, today=today)
            session_id = self._execute(employee, intent)
        except BackendUnavailable as e:
            self._dedup.discard(*event.key)
            logger.warning(
                "Backend unavailable for employee %s punch %s, will retry: %s",
                employee.employee_id,
                self._normalizer.to_backend(event.instant),
                e,
            )
            return self._failed(event, employee, e, retryable=True)
        except BackendError as e:
            logger.error("Backend rejected punch of employee %s: %s", employee.employee_id, e)
            return self._failed(event, employee, e, retryable=False)

        return self._written(event, employee, intent, session_id)

    def _execute(self, employee: EmployeeMapping, intent: Intent) -> Optional[int]:
        if intent.kind == IntentKind.IGNORE:
            logger.debug("Ignored punch of %s (%s): %s", employee.name, employee.employee_id, intent.reason.value)
            return None

        if intent.kind == IntentKind.CLOSE:
            self._sessions.set_checkout(intent.session_id, intent.check_out)
            logger.info(
                "Closed session %s for %s (%s) at %s",
                intent.session_id,
                employee.name,
                employee.employee_id,
                self._normalizer.to_backend(intent.check_out),
            )
            return intent.session_id

        session_id = self._sessions.create(employee.employee_id, intent.check_in, intent.check_out)
        logger.info(
            "Created session %s for %s (%s): in=%s out=%s",
            session_id,
            employee.name,
            employee.employee_id,
            self._normalizer.to_backend(intent.check_in),
            self._normalizer.to_backend(intent.check_out) if intent.check_out else "-",
        )
        return session_id

    def _written(self, event: PunchEvent, employee: EmployeeMapping, intent: Intent, session_id: Optional[int]) -> PunchOutcome:
        return PunchOutcome(
            _WRITE_STATUS[intent.kind],
            event.subject_id,
            event.instant,
            employee_id=employee.employee_id,
            intent=intent,
            session_id=session_id,
        )

    def _failed(self, event: PunchEvent, employee: EmployeeMapping, error: Exception, *, retryable: bool) -> PunchOutcome:
        return PunchOutcome(
            OutcomeStatus.FAILED,
            event.subject_id,
            event.instant,
            employee_id=employee.employee_id,
            error=str(error),
            retryable=retryable,
        )

    def _unmapped(self, event: PunchEvent, error: UnmappedSubjectError) -> PunchOutcome:
        logger.warning("%s; punch dropped", error)
        return PunchOutcome(OutcomeStatus.UNMAPPED, event.subject_id, event.instant, error=str(error))

    def _record(self, outcome: PunchOutcome) -> PunchOutcome:
        with self._stats_lock:
            self._stats[outcome.status.value] += 1
        return outcome

    def status(self) -> dict:
        with self._stats_lock:
            counts = dict(self._stats)
            last_cycle = dict(self._last_cycle) if self._last_cycle else None
        return {
            "started_at": self._started_at.isoformat(),
            "today": self._reconciler.today(),
            "poll_mode": self._poll_mode.value,
            "dedup_size": len(self._dedup),
            "directory_size": len(self._directory),
            "outcomes": counts,
            "last_cycle": last_cycle,
        }
