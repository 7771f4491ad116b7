from __future__ import annotations

from datetime import datetime

import pytz


def utc_now() -> datetime:
    """Current aware UTC time.

    Note: Wrapped so tests can patch it easier.
    """
    return datetime.now(pytz.UTC)
