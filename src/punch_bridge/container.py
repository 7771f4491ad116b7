from __future__ import annotations

import threading
from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional

from .core.enums import BackendKind, BatchPolicy, EmployeeKey, PollMode
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .devices.zk_device import ZKDevice
from .employees.directory import EmployeeDirectory
from .employees.memory_employee_source import StaticEmployeeSource
from .employees.mysql_employee_source import MySQLEmployeeSource
from .employees.odoo_employee_source import OdooEmployeeSource
from .employees.repository import EmployeeSource
from .odoo.client import OdooClient, OdooConfig
from .punches.dedup import Deduplicator
from .punches.normalizer import TimeNormalizer
from .sessions.factory import BatchStrategyFactory
from .sessions.memory_session_repository import InMemorySessionRepository
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.odoo_session_repository import OdooSessionRepository
from .sessions.reconciler import PunchReconciler
from .sessions.repository import SessionRepository
from .sync.backoff import Backoff
from .sync.locks import EmployeeLocks
from .sync.poller import Poller
from .sync.realtime import RealtimeListener
from .sync.refresher import DirectoryRefresher
from .sync.service import PunchSyncService


@dataclass(frozen=True)
class Container:
    settings: object
    stop_event: threading.Event

    normalizer: TimeNormalizer
    dedup: Deduplicator
    directory: EmployeeDirectory
    employee_source: EmployeeSource
    sessions_repo: SessionRepository
    reconciler: PunchReconciler

    sync_service: PunchSyncService
    poller: Poller
    realtime_listener: Optional[RealtimeListener]
    directory_refresher: DirectoryRefresher
    device_factory: Callable[[], ZKDevice]


def _setting(settings, name: str, default=None):
    return getattr(settings, name, default)


def _build_backend(settings, normalizer: TimeNormalizer) -> tuple[SessionRepository, EmployeeSource]:
    try:
        kind = BackendKind(str(_setting(settings, "BACKEND", "odoo")).lower())
    except ValueError as e:
        raise ValidationError(f"Unknown BACKEND: {_setting(settings, 'BACKEND')!r}") from e

    if kind == BackendKind.ODOO:
        odoo = dict(_setting(settings, "ODOO_CONFIG", {}))
        client = OdooClient(
            OdooConfig(
                url=str(odoo["url"]),
                database=str(odoo["database"]),
                uid=int(odoo["uid"]),
                password=str(odoo["password"]),
                timeout=float(odoo.get("timeout", 30)),
            )
        )
        return OdooSessionRepository(client, normalizer), OdooEmployeeSource(client)

    if kind == BackendKind.MYSQL:
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(_setting(settings, "DB_CONFIG", {})))
        return MySQLSessionRepository(conn, normalizer), MySQLEmployeeSource(conn)

    return InMemorySessionRepository(normalizer), StaticEmployeeSource(_setting(settings, "STATIC_EMPLOYEES", []))


def build_container(settings, *, device_factory: Optional[Callable[[], ZKDevice]] = None) -> Container:
    stop_event = threading.Event()

    normalizer = TimeNormalizer(
        str(_setting(settings, "DEVICE_TIMEZONE", "Asia/Karachi")),
        _setting(settings, "OPERATING_TIMEZONE"),
    )
    dedup = Deduplicator(int(_setting(settings, "DEDUP_CAPACITY", 5000)))
    directory = EmployeeDirectory(EmployeeKey(str(_setting(settings, "EMPLOYEE_KEY", "id")).lower()))
    sessions_repo, employee_source = _build_backend(settings, normalizer)
    reconciler = PunchReconciler(normalizer)

    sync_service = PunchSyncService(
        directory,
        sessions_repo,
        normalizer,
        reconciler=reconciler,
        dedup=dedup,
        locks=EmployeeLocks(),
        strategy_factory=BatchStrategyFactory(BatchPolicy(str(_setting(settings, "BATCH_POLICY", "strict")).lower())),
        poll_mode=PollMode(str(_setting(settings, "POLL_MODE", "per_punch")).lower()),
    )

    if device_factory is None:
        device_factory = partial(
            ZKDevice,
            str(_setting(settings, "DEVICE_IP")),
            int(_setting(settings, "DEVICE_PORT", 4370)),
            normalizer=normalizer,
            timeout=int(_setting(settings, "DEVICE_TIMEOUT", 10)),
            password=int(_setting(settings, "DEVICE_PASSWORD", 0)),
            force_udp=bool(_setting(settings, "DEVICE_FORCE_UDP", False)),
        )

    backoff_max = float(_setting(settings, "BACKOFF_MAX_SECONDS", 60))
    poller = Poller(
        device_factory,
        sync_service,
        stop_event=stop_event,
        interval=float(_setting(settings, "POLL_INTERVAL_SECONDS", 10)),
        backoff=Backoff(maximum=backoff_max),
        time_sync=bool(_setting(settings, "TIME_SYNC_ENABLED", True)),
        max_drift_seconds=float(_setting(settings, "MAX_CLOCK_DRIFT_SECONDS", 5)),
    )

    realtime_listener = None
    if bool(_setting(settings, "REALTIME_ENABLED", False)):
        realtime_listener = RealtimeListener(
            device_factory,
            sync_service,
            stop_event=stop_event,
            backoff=Backoff(maximum=backoff_max),
        )

    directory_refresher = DirectoryRefresher(
        directory,
        employee_source,
        stop_event=stop_event,
        interval=float(_setting(settings, "DIRECTORY_REFRESH_SECONDS", 300)),
    )

    return Container(
        settings=settings,
        stop_event=stop_event,
        normalizer=normalizer,
        dedup=dedup,
        directory=directory,
        employee_source=employee_source,
        sessions_repo=sessions_repo,
        reconciler=reconciler,
        sync_service=sync_service,
        poller=poller,
        realtime_listener=realtime_listener,
        directory_refresher=directory_refresher,
        device_factory=device_factory,
    )
