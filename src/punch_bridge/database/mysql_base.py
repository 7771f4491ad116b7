from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import BackendError, BackendUnavailable
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor); commit on success, roll back on any error.

    mysql-connector errors are translated: connection-level failures become
    BackendUnavailable, everything else BackendError.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise BackendUnavailable(f"MySQL connect failed: {e}") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except (mysql.connector.InterfaceError, mysql.connector.OperationalError) as e:
        _safe_rollback(conn)
        raise BackendUnavailable(f"MySQL unavailable: {e}") from e
    except mysql.connector.Error as e:
        _safe_rollback(conn)
        raise BackendError(f"MySQL rejected statement: {e}") from e
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error:
        # Connection already gone; nothing was committed.
        pass


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
