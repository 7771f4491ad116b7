from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import EmployeeMapping
from .repository import EmployeeSource


class MySQLEmployeeSource(EmployeeSource):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_employees(self) -> Sequence[EmployeeMapping]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, full_name, department, barcode
                FROM employees
                WHERE is_active=1
                ORDER BY employee_id
                """
            )
            return [
                EmployeeMapping(
                    employee_id=int(r["employee_id"]),
                    name=r["full_name"],
                    department=r.get("department"),
                    barcode=r.get("barcode"),
                )
                for r in fetchall(cur)
            ]
