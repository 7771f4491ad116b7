"""Settings shared by every environment. Values come from the environment (.env)."""

import os


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# Terminal
DEVICE_IP = os.getenv("DEVICE_IP", "192.168.1.201")
DEVICE_PORT = int(os.getenv("DEVICE_PORT", "4370"))
DEVICE_TIMEOUT = int(os.getenv("DEVICE_TIMEOUT", "10"))
DEVICE_PASSWORD = int(os.getenv("DEVICE_PASSWORD", "0"))
DEVICE_FORCE_UDP = _flag("DEVICE_FORCE_UDP")
DEVICE_TIMEZONE = os.getenv("DEVICE_TIMEZONE", os.getenv("TIMEZONE", "Asia/Karachi"))
OPERATING_TIMEZONE = os.getenv("OPERATING_TIMEZONE") or DEVICE_TIMEZONE
TIME_SYNC_ENABLED = _flag("TIME_SYNC_ENABLED", "1")
MAX_CLOCK_DRIFT_SECONDS = float(os.getenv("MAX_CLOCK_DRIFT_SECONDS", "5"))

# Backend: odoo | mysql | memory
BACKEND = os.getenv("BACKEND", "odoo").lower()

ODOO_CONFIG = {
    "url": os.getenv("ODOO_URL", "http://localhost:8069/jsonrpc"),
    "database": os.getenv("ODOO_DB", "odoo"),
    "uid": int(os.getenv("ODOO_UID", "2")),
    "password": os.getenv("ODOO_PASSWORD", ""),
    "timeout": float(os.getenv("ODOO_TIMEOUT", "30")),
}

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "punch_bridge"),
}

# Employees served by BACKEND=memory (dry runs): list of {"employee_id", "name", "barcode"}
STATIC_EMPLOYEES: list = []

# Reconciliation
POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "10"))
REALTIME_ENABLED = _flag("REALTIME_ENABLED", "1")
DEDUP_CAPACITY = int(os.getenv("DEDUP_CAPACITY", "5000"))
POLL_MODE = os.getenv("POLL_MODE", "per_punch").lower()
BATCH_POLICY = os.getenv("BATCH_POLICY", "strict").lower()
EMPLOYEE_KEY = os.getenv("EMPLOYEE_KEY", "id").lower()
DIRECTORY_REFRESH_SECONDS = float(os.getenv("DIRECTORY_REFRESH_SECONDS", "300"))
BACKOFF_MAX_SECONDS = float(os.getenv("BACKOFF_MAX_SECONDS", "60"))

# HTTP push endpoint / health
HTTP_ENABLED = _flag("HTTP_ENABLED", "1")
HTTP_HOST = os.getenv("HTTP_HOST", "0.0.0.0")
HTTP_PORT = int(os.getenv("HTTP_PORT", "8080"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE") or None

AUTO_INIT_DB = _flag("AUTO_INIT_DB")
DEBUG = False
