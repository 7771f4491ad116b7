from config.config import *  # noqa: F401,F403

DEBUG = False
HTTP_HOST = os.getenv("HTTP_HOST", "127.0.0.1")  # noqa: F405
LOG_FILE = os.getenv("LOG_FILE", "logs/punch_bridge.log")  # noqa: F405
