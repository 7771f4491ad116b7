from __future__ import annotations

import threading
from collections import OrderedDict
from datetime import datetime

from ..core.constants import DEFAULT_DEDUP_CAPACITY


class Deduplicator:
    """Bounded FIFO memory of ``(subject_id, instant)`` pairs already handled.

    A key is only ever seen again when the same physical punch is delivered
    twice (overlapping poll windows, poll + realtime), so lookups do not
    refresh a key's position: the oldest inserted key is evicted first.
    """

    def __init__(self, capacity: int = DEFAULT_DEDUP_CAPACITY):
        if int(capacity) < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = int(capacity)
        self._keys: OrderedDict[tuple[str, datetime], None] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def seen(self, subject_id: str, instant: datetime) -> bool:
        """Return True for a repeat sighting; record the key otherwise."""
        key = (str(subject_id), instant)
        with self._lock:
            if key in self._keys:
                return True
            self._keys[key] = None
            while len(self._keys) > self._capacity:
                self._keys.popitem(last=False)
            return False

    def discard(self, subject_id: str, instant: datetime) -> None:
        """Forget a key so a later delivery of the punch is processed again."""
        with self._lock:
            self._keys.pop((str(subject_id), instant), None)

    def __contains__(self, key) -> bool:
        subject_id, instant = key
        with self._lock:
            return (str(subject_id), instant) in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)
