from config.config import *  # noqa: F401,F403

DEBUG = False
TESTING = True

BACKEND = "memory"
REALTIME_ENABLED = False
HTTP_ENABLED = False
TIME_SYNC_ENABLED = False
DEVICE_TIMEZONE = "Asia/Karachi"
OPERATING_TIMEZONE = "Asia/Karachi"
AUTO_INIT_DB = False
