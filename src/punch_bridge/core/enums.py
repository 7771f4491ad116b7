from __future__ import annotations

from enum import Enum


class PunchState(str, Enum):
    """In/out hint reported by the terminal (informational only)."""

    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_device(cls, value) -> "PunchState":
        if value is None or value == "":
            return cls.UNKNOWN
        if isinstance(value, PunchState):
            return value
        if isinstance(value, str):
            v = value.strip()
            if v.isdigit():
                value = int(v)
            else:
                try:
                    return cls(v.upper())
                except ValueError:
                    return cls.UNKNOWN
        return {0: cls.CHECK_IN, 1: cls.CHECK_OUT}.get(value, cls.UNKNOWN)


class IntentKind(str, Enum):
    CREATE = "CREATE"
    CLOSE = "CLOSE"
    CREATE_AND_CLOSE = "CREATE_AND_CLOSE"
    IGNORE = "IGNORE"


class IgnoreReason(str, Enum):
    """Why a punch produced no backend write."""

    NON_TODAY = "non-today"
    DUPLICATE_CHECKIN = "duplicate-checkin"
    DUPLICATE_CHECKOUT = "duplicate-checkout"
    BACKDATED = "backdated"


class OutcomeStatus(str, Enum):
    CREATED = "CREATED"
    CLOSED = "CLOSED"
    CREATED_AND_CLOSED = "CREATED_AND_CLOSED"
    IGNORED = "IGNORED"
    DUPLICATE = "DUPLICATE"
    UNMAPPED = "UNMAPPED"
    FAILED = "FAILED"


class PollMode(str, Enum):
    PER_PUNCH = "per_punch"
    BATCHED = "batched"


class BatchPolicy(str, Enum):
    """How a (first, last) batch is written when only the pair is known."""

    STRICT = "strict"
    SYNTHESIZE = "synthesize"


class EmployeeKey(str, Enum):
    """Which backend field the device subject id is matched against."""

    ID = "id"
    BARCODE = "barcode"
    BOTH = "both"


class BackendKind(str, Enum):
    ODOO = "odoo"
    MYSQL = "mysql"
    MEMORY = "memory"
