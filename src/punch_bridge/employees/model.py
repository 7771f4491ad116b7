from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EmployeeMapping:
    """Domain entity: backend employee a device subject id resolves to."""

    employee_id: int
    name: str
    department: Optional[str] = None
    barcode: Optional[str] = None
