from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from zk import ZK
from zk.exception import ZKError

from ..common.datetime_utils import utc_now
from ..core.constants import DEFAULT_DEVICE_PORT, DEFAULT_DEVICE_TIMEOUT, DEFAULT_LIVE_CAPTURE_TIMEOUT, DEFAULT_MAX_CLOCK_DRIFT_SECONDS
from ..core.enums import PunchState
from ..core.exceptions import DeviceUnavailable, ValidationError
from ..punches.model import DeviceUser, PunchEvent
from ..punches.normalizer import TimeNormalizer

logger = logging.getLogger(__name__)


class ZKDevice:
    """ZKTeco terminal accessed through pyzk.

    One instance holds at most one connection. The poll loop and the
    realtime listener each get their own instance.
    """

    def __init__(
        self,
        ip: str,
        port: int = DEFAULT_DEVICE_PORT,
        *,
        normalizer: TimeNormalizer,
        timeout: int = DEFAULT_DEVICE_TIMEOUT,
        password: int = 0,
        force_udp: bool = False,
        zk_factory: Optional[Callable[..., ZK]] = None,
    ):
        self._ip = ip
        self._port = int(port)
        self._normalizer = normalizer
        self._zk = (zk_factory or ZK)(
            ip,
            port=self._port,
            timeout=int(timeout),
            password=int(password),
            force_udp=bool(force_udp),
            ommit_ping=True,
        )
        self._conn = None

    @property
    def address(self) -> str:
        return f"{self._ip}:{self._port}"

    @property
    def connected(self) -> bool:
        return self._conn is not None

    def connect(self) -> None:
        if self._conn is not None:
            return
        try:
            self._conn = self._zk.connect()
        except (ZKError, OSError) as e:
            raise DeviceUnavailable(f"Cannot connect to device {self.address}: {e}") from e
        logger.info("Connected to device %s", self.address)

    def disconnect(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.disconnect()
        except (ZKError, OSError) as e:
            logger.warning("Disconnect from %s failed: %s", self.address, e)

    def __enter__(self) -> "ZKDevice":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def _require_conn(self):
        if self._conn is None:
            self.connect()
        return self._conn

    def _to_event(self, record) -> Optional[PunchEvent]:
        subject_id = getattr(record, "user_id", None) or getattr(record, "uid", None)
        timestamp = getattr(record, "timestamp", None)
        if subject_id in (None, "") or timestamp is None:
            logger.debug("Skipping device record without user or time: %r", record)
            return None
        try:
            instant = self._normalizer.to_instant(timestamp)
        except ValidationError as e:
            logger.warning("Skipping device record with bad time %r: %s", timestamp, e)
            return None
        return PunchEvent(
            subject_id=str(subject_id).strip(),
            instant=instant,
            raw_state=PunchState.from_device(getattr(record, "punch", None)),
        )

    def fetch_batch(self) -> list[PunchEvent]:
        conn = self._require_conn()
        try:
            records = conn.get_attendance() or []
        except (ZKError, OSError) as e:
            self.disconnect()
            raise DeviceUnavailable(f"Reading attendance from {self.address} failed: {e}") from e

        events = [e for e in (self._to_event(r) for r in records) if e is not None]
        logger.info("Fetched %d punches (%d raw records) from %s", len(events), len(records), self.address)
        return events

    def users(self) -> list[DeviceUser]:
        conn = self._require_conn()
        try:
            records = conn.get_users() or []
        except (ZKError, OSError) as e:
            self.disconnect()
            raise DeviceUnavailable(f"Reading users from {self.address} failed: {e}") from e

        return [
            DeviceUser(
                subject_id=str(u.user_id or u.uid).strip(),
                name=(u.name or "").strip() or f"User-{u.uid}",
                uid=u.uid,
            )
            for u in records
        ]

    def sync_time(self, *, max_drift_seconds: float = DEFAULT_MAX_CLOCK_DRIFT_SECONDS, now: Optional[datetime] = None) -> float:
        """Reset the device clock when it drifts too far. Returns the drift seen."""
        conn = self._require_conn()
        now = now or utc_now()
        try:
            device_time = conn.get_time()
        except (ZKError, OSError) as e:
            raise DeviceUnavailable(f"Reading time from {self.address} failed: {e}") from e

        drift = (self._normalizer.to_instant(device_time) - now).total_seconds()
        if abs(drift) > max_drift_seconds:
            try:
                conn.set_time(self._normalizer.to_device_wall_clock(now))
            except (ZKError, OSError) as e:
                raise DeviceUnavailable(f"Setting time on {self.address} failed: {e}") from e
            logger.info("Device %s clock reset (drift=%.3fs)", self.address, drift)
        return drift

    def listen(
        self,
        handler: Callable[[PunchEvent], None],
        stop_event: threading.Event,
        *,
        capture_timeout: int = DEFAULT_LIVE_CAPTURE_TIMEOUT,
    ) -> None:
        """Feed live punches to ``handler`` until ``stop_event`` is set."""
        conn = self._require_conn()
        try:
            for record in conn.live_capture(new_timeout=capture_timeout):
                if stop_event.is_set():
                    conn.end_live_capture = True
                    continue
                if record is None:
                    continue
                event = self._to_event(record)
                if event is not None:
                    handler(event)
        except (ZKError, OSError) as e:
            self.disconnect()
            raise DeviceUnavailable(f"Live capture on {self.address} failed: {e}") from e
