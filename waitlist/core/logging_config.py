"""Logging setup for the waitlist API (console, optional rotating files)."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from .config import Settings, get_settings

LOG_FORMAT = "%(asctime)s [%(name)s] [%(levelname)s] [%(process)d] %(message)s"


def _file_handler(path: str, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5)  # 10 MB
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    # Reset root logger handlers to avoid duplicates when the app is rebuilt
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    console.setLevel(level)
    root_logger.addHandler(console)

    if settings.log_dir:
        try:
            os.makedirs(settings.log_dir, exist_ok=True)
        except OSError as e:
            print(f"Failed to create log directory {settings.log_dir}: {e}", file=sys.stderr)
        else:
            root_logger.addHandler(
                _file_handler(os.path.join(settings.log_dir, "waitlist_app.log"), level, formatter)
            )
            # WARNING and ERROR only
            root_logger.addHandler(
                _file_handler(os.path.join(settings.log_dir, "waitlist_errors.log"), logging.WARNING, formatter)
            )

    root_logger.setLevel(level)
