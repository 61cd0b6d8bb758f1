# src/clientui/core/logging/builder.py
"""
Logging builder: build a dictConfig mapping from Settings and apply it.

 - make_dict_config(settings) is pure: it returns the mapping, nothing is installed.
 - setup_logging(settings) creates LOG_DIR when file logging is on, applies the
   mapping, and adds a RequestIdFilter on the root logger as a safety net.

Handler wiring:

| LOG_TO_STDOUT | LOG_DIR | Active handlers                  |
| ------------- | ------- | -------------------------------- |
| true          | any     | console + error_console          |
| false         | unset   | console + error_console          |
| false         | set     | console + file + error_file      |
"""

from __future__ import annotations

from pathlib import Path
import logging
import logging.config

from clientui.utils.project_info import get_project_name

from .formatters import JsonFormatter, ColorFormatter
from .filters import RequestIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)

# Settings type only (avoid calling get_settings() here to prevent import-time side effects)
from clientui.config.settings import Settings


def _writes_files(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping using the provided settings.

    Loggers configured:
      - root: every active handler, at LOG_LEVEL
      - uvicorn.error / uvicorn.access: server logs, no propagation
      - httpx / httpcore: gateway transport; DEBUG only with ENABLE_HTTP_LOGGING
        (request lines can carry patient identifiers)
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(),
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}

    if _writes_files(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    http_level = "DEBUG" if getattr(settings, "ENABLE_HTTP_LOGGING", False) else "WARNING"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "uvicorn.error": {
                "level": settings.LOG_LEVEL,
                "handlers": list(handlers.keys()),
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            "httpx": {
                "level": http_level,
                "handlers": ["console"],
                "propagate": False,
            },
            "httpcore": {
                "level": http_level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Initialize logging for the process. Safe to call more than once (tests do);
    each call replaces the previous configuration.
    """
    if _writes_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    # keeps %(request_id)s safe for records that bypass the configured handlers
    logging.getLogger().addFilter(RequestIdFilter())
