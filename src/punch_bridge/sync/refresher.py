from __future__ import annotations

import logging
import threading

from ..core.constants import DEFAULT_DIRECTORY_REFRESH_SECONDS
from ..core.exceptions import BackendError
from ..employees.directory import EmployeeDirectory
from ..employees.repository import EmployeeSource

logger = logging.getLogger(__name__)


class DirectoryRefresher:
    """Reloads the employee directory on a fixed cadence."""

    def __init__(
        self,
        directory: EmployeeDirectory,
        source: EmployeeSource,
        *,
        stop_event: threading.Event,
        interval: float = DEFAULT_DIRECTORY_REFRESH_SECONDS,
    ):
        self._directory = directory
        self._source = source
        self._stop = stop_event
        self._interval = float(interval)

    def refresh_once(self) -> bool:
        try:
            self._directory.refresh(self._source)
        except BackendError as e:
            logger.warning("Employee directory refresh failed, keeping %d mappings: %s", len(self._directory), e)
            return False
        return True

    def run(self) -> None:
        while not self._stop.wait(self._interval):
            self.refresh_once()
