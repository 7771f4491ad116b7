from __future__ import annotations

from datetime import datetime
from pathlib import Path

import mysql.connector
import pytest

from punch_bridge.core.exceptions import BackendError, BackendUnavailable
from punch_bridge.database import bootstrap
from punch_bridge.database.bootstrap import DEFAULT_SCHEMA_PATH, _iter_sql_statements, _strip_create_db_and_use
from punch_bridge.sessions.mysql_session_repository import MySQLSessionRepository


class FakeCursor:
    def __init__(self, db):
        self._db = db
        self.rowcount = 0
        self.lastrowid = None

    def execute(self, sql, params=()):
        self._db.executed.append((" ".join(sql.split()), params))
        if self._db.error:
            raise self._db.error
        self.rowcount = self._db.rowcount
        self.lastrowid = self._db.lastrowid

    def fetchone(self):
        return self._db.row

    def close(self):
        pass


class FakeConnection:
    def __init__(self, db):
        self._db = db

    def cursor(self, dictionary=True):
        return FakeCursor(self._db)

    def commit(self):
        self._db.commits += 1

    def rollback(self):
        self._db.rollbacks += 1

    def close(self):
        pass


class FakeDB:
    def __init__(self, *, row=None, rowcount=1, lastrowid=None, error=None):
        self.row = row
        self.rowcount = rowcount
        self.lastrowid = lastrowid
        self.error = error
        self.executed = []
        self.commits = 0
        self.rollbacks = 0

    def connect(self):
        return FakeConnection(self)


def test_create_stores_naive_utc_and_work_date(normalizer, at):
    db = FakeDB(lastrowid=5)
    repo = MySQLSessionRepository(db, normalizer)

    assert repo.create(7, at(10, 9)) == 5

    sql, params = db.executed[0]
    assert sql.startswith("INSERT INTO attendance_sessions")
    assert params == (7, "2025-03-10", datetime(2025, 3, 10, 4, 0), None)
    assert db.commits == 1


def test_lookup_maps_row(normalizer, at):
    db = FakeDB(row={"session_id": 3, "employee_id": 7, "check_in": datetime(2025, 3, 10, 4, 0), "check_out": None})
    session = MySQLSessionRepository(db, normalizer).find_open_or_last_session(7, "2025-03-10")

    assert session.session_id == 3
    assert session.check_in == at(10, 9)
    assert session.is_open
    assert db.executed[0][1] == (7, "2025-03-10")


def test_checkout_on_closed_session_rolls_back(normalizer, at):
    db = FakeDB(rowcount=0)
    with pytest.raises(BackendError):
        MySQLSessionRepository(db, normalizer).set_checkout(3, at(10, 17))
    assert db.rollbacks == 1
    assert db.commits == 0


def test_lost_connection_is_unavailable(normalizer, at):
    db = FakeDB(error=mysql.connector.OperationalError("Lost connection to MySQL server"))
    with pytest.raises(BackendUnavailable):
        MySQLSessionRepository(db, normalizer).create(7, at(10, 9))


def test_schema_splitter_ignores_database_statements():
    sql = "CREATE DATABASE IF NOT EXISTS x;\nUSE x;\nCREATE TABLE a (s VARCHAR(5) DEFAULT ';');\nSELECT 1;"
    statements = list(_iter_sql_statements(_strip_create_db_and_use(sql)))
    assert statements == ["CREATE TABLE a (s VARCHAR(5) DEFAULT ';')", "SELECT 1"]


def test_bundled_schema_ships_beside_the_bootstrap_module():
    assert DEFAULT_SCHEMA_PATH.is_file()
    assert DEFAULT_SCHEMA_PATH.parent == Path(bootstrap.__file__).resolve().parent

    sql = DEFAULT_SCHEMA_PATH.read_text(encoding="utf-8")
    heads = [s.split("(")[0].upper() for s in _iter_sql_statements(_strip_create_db_and_use(sql))]
    assert any("CREATE TABLE" in h and "ATTENDANCE_SESSIONS" in h for h in heads)
    assert any("CREATE TABLE" in h and "EMPLOYEES" in h for h in heads)
