"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_DEVICE_TIMEZONE = "Asia/Karachi"
DEFAULT_DEVICE_PORT = 4370
DEFAULT_DEVICE_TIMEOUT = 10
DEFAULT_DEDUP_CAPACITY = 5000
DEFAULT_POLL_INTERVAL_SECONDS = 10
DEFAULT_MAX_CLOCK_DRIFT_SECONDS = 5
DEFAULT_DIRECTORY_REFRESH_SECONDS = 300
DEFAULT_BACKOFF_INITIAL_SECONDS = 1.0
DEFAULT_BACKOFF_MAX_SECONDS = 60.0
DEFAULT_LIVE_CAPTURE_TIMEOUT = 10

BACKEND_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
CIVIL_DAY_FORMAT = "%Y-%m-%d"
