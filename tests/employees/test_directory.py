from __future__ import annotations

import pytest

from punch_bridge.core.enums import EmployeeKey
from punch_bridge.core.exceptions import UnmappedSubjectError
from punch_bridge.employees.directory import EmployeeDirectory
from punch_bridge.employees.memory_employee_source import StaticEmployeeSource
from punch_bridge.employees.model import EmployeeMapping
from punch_bridge.employees.odoo_employee_source import OdooEmployeeSource
from punch_bridge.odoo.client import OdooClient, OdooConfig

STAFF = [
    EmployeeMapping(employee_id=7, name="Ayesha Khan", barcode="1007"),
    EmployeeMapping(employee_id=9, name="Bilal Ahmed"),
]


def test_id_policy_matches_backend_id():
    d = EmployeeDirectory(EmployeeKey.ID)
    d.replace(STAFF)
    assert d.lookup("7").name == "Ayesha Khan"
    assert d.lookup(" 9 ").employee_id == 9
    assert d.lookup("1007") is None


def test_barcode_policy_skips_employees_without_badge():
    d = EmployeeDirectory(EmployeeKey.BARCODE)
    assert d.replace(STAFF) == 1
    assert d.lookup("1007").employee_id == 7
    assert d.lookup("9") is None


def test_both_policy_accepts_either_key():
    d = EmployeeDirectory(EmployeeKey.BOTH)
    d.replace(STAFF)
    assert d.lookup("7") == d.lookup("1007")


def test_conflicting_key_keeps_first(caplog):
    d = EmployeeDirectory(EmployeeKey.BOTH)
    d.replace([EmployeeMapping(employee_id=7, name="A", barcode="9"), EmployeeMapping(employee_id=9, name="B")])
    assert d.lookup("9").employee_id == 7
    assert "keeping the first" in caplog.text


def test_empty_refresh_keeps_previous_map():
    d = EmployeeDirectory()
    d.refresh(StaticEmployeeSource(STAFF))
    assert d.refresh(StaticEmployeeSource([])) == 2
    assert d.lookup("9") is not None


def test_require_raises_for_unknown_subject():
    d = EmployeeDirectory()
    with pytest.raises(UnmappedSubjectError) as exc:
        d.require("404")
    assert exc.value.subject_id == "404"


def test_static_source_accepts_dicts():
    source = StaticEmployeeSource([{"employee_id": 3, "name": "Zara", "barcode": "B3"}])
    assert source.list_employees() == [EmployeeMapping(employee_id=3, name="Zara", barcode="B3")]


class _Response:
    status_code = 200

    def __init__(self, payload):
        self._payload = payload

    def json(self):
        return self._payload


class _Session:
    def __init__(self, payload):
        self.payload = payload
        self.body = None

    def post(self, url, json=None, headers=None, timeout=None):
        self.body = json
        return _Response(self.payload)


def test_odoo_source_reads_active_employees():
    rows = [
        {"id": 7, "name": "Ayesha Khan", "barcode": " 1007 ", "department_id": [3, "Operations"]},
        {"id": 9, "name": "Bilal Ahmed", "barcode": False, "department_id": False},
    ]
    session = _Session({"jsonrpc": "2.0", "id": 1, "result": rows})
    client = OdooClient(OdooConfig(url="http://odoo/jsonrpc", database="prod", uid=2, password="x"), session=session)

    employees = OdooEmployeeSource(client).list_employees()

    assert employees == [
        EmployeeMapping(employee_id=7, name="Ayesha Khan", department="Operations", barcode="1007"),
        EmployeeMapping(employee_id=9, name="Bilal Ahmed"),
    ]
    args = session.body["params"]["args"]
    assert args[3:6] == ["hr.employee", "search_read", [[["active", "=", True]]]]
