from __future__ import annotations

from typing import Protocol, Sequence

from .model import EmployeeMapping


class EmployeeSource(Protocol):
    """Where the directory loads employees from (Odoo, MySQL, ...)."""

    def list_employees(self) -> Sequence[EmployeeMapping]:
        raise NotImplementedError
