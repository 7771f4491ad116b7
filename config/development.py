from config.config import *  # noqa: F401,F403
from config.config import _flag

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()  # noqa: F405

# Apply the bundled punch_bridge/database/schema.sql on startup when the MySQL backend is used
AUTO_INIT_DB = _flag("AUTO_INIT_DB", "1")
