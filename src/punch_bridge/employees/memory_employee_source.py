from __future__ import annotations

from typing import Iterable, Sequence

from .model import EmployeeMapping
from .repository import EmployeeSource


class StaticEmployeeSource(EmployeeSource):
    """Fixed employee list, for ``BACKEND=memory`` dry runs.

    Accepts EmployeeMapping objects or dicts with the same keys.
    """

    def __init__(self, employees: Iterable):
        self._employees = [e if isinstance(e, EmployeeMapping) else EmployeeMapping(**e) for e in employees]

    def list_employees(self) -> Sequence[EmployeeMapping]:
        return list(self._employees)
