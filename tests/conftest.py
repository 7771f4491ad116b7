from __future__ import annotations

from datetime import datetime

import pytest
import pytz

from punch_bridge.employees.directory import EmployeeDirectory
from punch_bridge.employees.model import EmployeeMapping
from punch_bridge.punches.dedup import Deduplicator
from punch_bridge.punches.normalizer import TimeNormalizer
from punch_bridge.sessions.memory_session_repository import InMemorySessionRepository
from punch_bridge.sessions.reconciler import PunchReconciler
from punch_bridge.sync.service import PunchSyncService

KARACHI = pytz.timezone("Asia/Karachi")


def local(day: int, hour: int, minute: int = 0, second: int = 0, *, month: int = 3) -> datetime:
    """Aware UTC instant for a Karachi wall-clock reading in 2025."""
    return KARACHI.localize(datetime(2025, month, day, hour, minute, second)).astimezone(pytz.UTC)


@pytest.fixture
def fixed_now() -> datetime:
    # 2025-03-10 10:00 in Karachi
    return local(10, 10)


@pytest.fixture
def today() -> str:
    return "2025-03-10"


@pytest.fixture
def normalizer() -> TimeNormalizer:
    return TimeNormalizer("Asia/Karachi")


@pytest.fixture
def reconciler(normalizer, fixed_now) -> PunchReconciler:
    return PunchReconciler(normalizer, clock=lambda: fixed_now)


@pytest.fixture
def directory() -> EmployeeDirectory:
    d = EmployeeDirectory()
    d.replace(
        [
            EmployeeMapping(employee_id=7, name="Ayesha Khan", department="Ops", barcode="B-7"),
            EmployeeMapping(employee_id=9, name="Bilal Ahmed", department="Finance"),
        ]
    )
    return d


@pytest.fixture
def sessions_repo(normalizer) -> InMemorySessionRepository:
    return InMemorySessionRepository(normalizer)


@pytest.fixture
def make_service(directory, sessions_repo, normalizer, reconciler):
    def _make(**kwargs) -> PunchSyncService:
        kwargs.setdefault("reconciler", reconciler)
        kwargs.setdefault("dedup", Deduplicator(100))
        return PunchSyncService(
            kwargs.pop("directory", directory), kwargs.pop("sessions", sessions_repo), normalizer, **kwargs
        )

    return _make


@pytest.fixture
def at():
    return local
