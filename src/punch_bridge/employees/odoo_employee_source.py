from __future__ import annotations

from typing import Sequence

from ..odoo.client import OdooClient
from .model import EmployeeMapping
from .repository import EmployeeSource


def _many2one_name(value):
    # Odoo renders many2one fields as [id, display_name] or False.
    if isinstance(value, (list, tuple)) and len(value) > 1:
        return value[1]
    return None


class OdooEmployeeSource(EmployeeSource):
    def __init__(self, client: OdooClient):
        self._client = client

    def list_employees(self) -> Sequence[EmployeeMapping]:
        rows = self._client.search_read(
            "hr.employee",
            [["active", "=", True]],
            ["id", "name", "barcode", "department_id"],
        )
        return [
            EmployeeMapping(
                employee_id=int(r["id"]),
                name=str(r.get("name") or f"Employee-{r['id']}"),
                department=_many2one_name(r.get("department_id")),
                barcode=str(r["barcode"]).strip() if r.get("barcode") else None,
            )
            for r in rows
        ]
