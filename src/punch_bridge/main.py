from __future__ import annotations

import importlib
import logging
import signal
import threading

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .api.controller import register as register_api
from .common.logging_setup import configure_logging
from .container import Container, build_container
from .core.enums import BackendKind
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(__name__)


def create_app(container: Container) -> Flask:
    app = Flask(__name__)
    app.config["DEBUG"] = bool(getattr(container.settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(container.settings, "TESTING", False))
    register_api(app, container)
    return app


def load_settings():
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def _start(name: str, target) -> threading.Thread:
    thread = threading.Thread(target=target, name=name, daemon=True)
    thread.start()
    return thread


def main() -> None:
    settings = load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))

    backend = str(getattr(settings, "BACKEND", "odoo")).lower()
    if backend == BackendKind.MYSQL.value and bool(getattr(settings, "AUTO_INIT_DB", False)):
        db_config = dict(settings.DB_CONFIG)
        apply_schema(db_config)
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(settings)
    logger.info(
        "Bridge starting: device=%s:%s tz=%s backend=%s",
        getattr(settings, "DEVICE_IP", "?"),
        getattr(settings, "DEVICE_PORT", "?"),
        container.normalizer.device_timezone,
        backend,
    )

    # Punches for unknown subjects are dropped, so load the directory before the first poll.
    container.directory_refresher.refresh_once()

    stop = container.stop_event

    def _on_signal(signum, frame):
        logger.info("Signal %s received, stopping", signum)
        stop.set()
        raise SystemExit(0)

    signal.signal(signal.SIGTERM, _on_signal)

    threads = [
        _start("poller", container.poller.run),
        _start("directory-refresher", container.directory_refresher.run),
    ]
    if container.realtime_listener is not None:
        threads.append(_start("realtime", container.realtime_listener.run))

    try:
        if bool(getattr(settings, "HTTP_ENABLED", False)):
            app = create_app(container)
            app.run(
                host=getattr(settings, "HTTP_HOST", "127.0.0.1"),
                port=int(getattr(settings, "HTTP_PORT", 8080)),
                debug=False,
                use_reloader=False,
                threaded=True,
            )
        else:
            while not stop.wait(1.0):
                pass
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
    finally:
        stop.set()
        for thread in threads:
            thread.join(timeout=5.0)
        logger.info("Bridge stopped")


if __name__ == "__main__":
    main()
