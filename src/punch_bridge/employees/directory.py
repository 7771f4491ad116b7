from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from ..core.enums import EmployeeKey
from ..core.exceptions import UnmappedSubjectError
from .model import EmployeeMapping
from .repository import EmployeeSource

logger = logging.getLogger(__name__)


class EmployeeDirectory:
    """Read-mostly map from device subject id to employee.

    Refreshed out of band; lookups may run at any time, including before the
    first refresh (every subject is then unmapped).
    """

    def __init__(self, key_policy: EmployeeKey = EmployeeKey.ID):
        self._key_policy = EmployeeKey(key_policy)
        self._by_subject: dict[str, EmployeeMapping] = {}
        self._lock = threading.Lock()

    def _keys_for(self, employee: EmployeeMapping) -> list[str]:
        keys: list[str] = []
        if self._key_policy in (EmployeeKey.ID, EmployeeKey.BOTH):
            keys.append(str(employee.employee_id).strip())
        if self._key_policy in (EmployeeKey.BARCODE, EmployeeKey.BOTH) and employee.barcode:
            barcode = str(employee.barcode).strip()
            if barcode and barcode not in keys:
                keys.append(barcode)
        return keys

    def replace(self, employees: Iterable[EmployeeMapping]) -> int:
        by_subject: dict[str, EmployeeMapping] = {}
        for employee in employees:
            for key in self._keys_for(employee):
                if key in by_subject and by_subject[key].employee_id != employee.employee_id:
                    logger.warning(
                        "Subject key %s maps to employees %s and %s; keeping the first",
                        key,
                        by_subject[key].employee_id,
                        employee.employee_id,
                    )
                    continue
                by_subject[key] = employee

        with self._lock:
            self._by_subject = by_subject
        return len(by_subject)

    def refresh(self, source: EmployeeSource) -> int:
        employees = list(source.list_employees())
        if not employees:
            logger.warning("Employee source returned no employees; keeping %d cached mappings", len(self))
            return len(self)

        count = self.replace(employees)
        logger.info("Loaded %d employees (%d subject keys, policy=%s)", len(employees), count, self._key_policy.value)
        return count

    def lookup(self, subject_id: str) -> Optional[EmployeeMapping]:
        with self._lock:
            return self._by_subject.get(str(subject_id).strip())

    def require(self, subject_id: str) -> EmployeeMapping:
        employee = self.lookup(subject_id)
        if employee is None:
            raise UnmappedSubjectError(str(subject_id).strip())
        return employee

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_subject)
