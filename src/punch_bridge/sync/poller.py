from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..core.constants import DEFAULT_MAX_CLOCK_DRIFT_SECONDS, DEFAULT_POLL_INTERVAL_SECONDS
from ..core.exceptions import DeviceUnavailable
from ..devices.zk_device import ZKDevice
from .backoff import Backoff
from .model import SyncReport
from .service import PunchSyncService

logger = logging.getLogger(__name__)


class Poller:
    """Fixed-interval poll of the terminal; backs off while cycles fail.

    Each cycle opens a fresh connection, reads every stored punch, closes
    the connection and hands the batch to the service.
    """

    def __init__(
        self,
        device_factory: Callable[[], ZKDevice],
        service: PunchSyncService,
        *,
        stop_event: threading.Event,
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        backoff: Optional[Backoff] = None,
        time_sync: bool = True,
        max_drift_seconds: float = DEFAULT_MAX_CLOCK_DRIFT_SECONDS,
    ):
        self._device_factory = device_factory
        self._service = service
        self._stop = stop_event
        self._interval = float(interval)
        self._backoff = backoff or Backoff()
        self._time_sync = time_sync
        self._max_drift = float(max_drift_seconds)

    def run_once(self) -> SyncReport:
        device = self._device_factory()
        with device:
            if self._time_sync:
                try:
                    device.sync_time(max_drift_seconds=self._max_drift)
                except DeviceUnavailable as e:
                    logger.warning("Clock check on %s skipped: %s", device.address, e)
            events = device.fetch_batch()
        return self._service.handle_batch(events, source="poll")

    def run(self) -> None:
        logger.info("Poll loop started (interval=%ss)", self._interval)
        while not self._stop.is_set():
            try:
                report = self.run_once()
            except DeviceUnavailable as e:
                delay = self._backoff.next_delay()
                logger.warning("Device unavailable, next poll in %.1fs: %s", delay, e)
            else:
                if report.retryable_failures:
                    delay = self._backoff.next_delay()
                    logger.warning(
                        "%d punches could not be written, next poll in %.1fs",
                        report.retryable_failures,
                        delay,
                    )
                else:
                    self._backoff.reset()
                    delay = self._interval
            self._stop.wait(delay)
        logger.info("Poll loop stopped")
