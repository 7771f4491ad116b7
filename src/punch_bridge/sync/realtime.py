from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..core.exceptions import DeviceUnavailable
from ..devices.zk_device import ZKDevice
from ..punches.model import PunchEvent
from .backoff import Backoff
from .service import PunchSyncService

logger = logging.getLogger(__name__)


class RealtimeListener:
    """Keeps a live-capture session open and feeds each punch to the service."""

    def __init__(
        self,
        device_factory: Callable[[], ZKDevice],
        service: PunchSyncService,
        *,
        stop_event: threading.Event,
        backoff: Optional[Backoff] = None,
    ):
        self._device_factory = device_factory
        self._service = service
        self._stop = stop_event
        self._backoff = backoff or Backoff()

    def _on_punch(self, event: PunchEvent) -> None:
        outcome = self._service.handle_punch(event, source="realtime")
        # A realtime failure is picked up again by the next poll cycle.
        logger.debug("Realtime punch %s@%s -> %s", event.subject_id, event.instant, outcome.status.value)

    def run(self) -> None:
        logger.info("Realtime listener started")
        while not self._stop.is_set():
            device = self._device_factory()
            try:
                device.connect()
                self._backoff.reset()
                device.listen(self._on_punch, self._stop)
                if not self._stop.is_set():
                    delay = self._backoff.next_delay()
                    logger.info("Live capture ended, reconnecting in %.1fs", delay)
                    self._stop.wait(delay)
            except DeviceUnavailable as e:
                delay = self._backoff.next_delay()
                logger.warning("Realtime listener lost the device, reconnecting in %.1fs: %s", delay, e)
                self._stop.wait(delay)
            finally:
                device.disconnect()
        logger.info("Realtime listener stopped")
