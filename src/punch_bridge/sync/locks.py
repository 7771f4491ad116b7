from __future__ import annotations

import threading
from collections import defaultdict


class EmployeeLocks:
    """One lock per employee id: serializes lookup + write for that employee."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = defaultdict(threading.Lock)

    def for_employee(self, employee_id: int) -> threading.Lock:
        with self._guard:
            return self._locks[int(employee_id)]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
