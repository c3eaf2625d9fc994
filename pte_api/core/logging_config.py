# pte_api/core/logging_config.py
import logging
import logging.config
import sys
from typing import Any, Dict

from pte_api.core.config import settings

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers kept at WARNING; provider SDKs log every request at INFO
QUIET_LOGGERS = ("sqlalchemy", "httpx", "httpcore", "botocore", "google", "groq", "openai")


def _app_level() -> str:
    if settings.DEBUG:
        return "DEBUG"
    return "INFO"


def build_logging_config() -> Dict[str, Any]:
    """dictConfig for the API: console everywhere, plus a file for pte_api.* records."""
    app_handlers = ["console"]
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": _app_level(),
            "formatter": "detailed" if settings.DEBUG else "default",
            "stream": sys.stdout,
        },
    }
    if settings.LOG_FILE:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "level": "INFO",
            "formatter": "detailed",
            "filename": settings.LOG_FILE,
            "mode": "a",
            "delay": True,
        }
        app_handlers.append("file")

    loggers: Dict[str, Any] = {
        "": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "pte_api": {"handlers": app_handlers, "level": _app_level(), "propagate": False},
        "uvicorn": {
            "handlers": ["console"],
            "level": "WARNING" if settings.ENVIRONMENT == "production" else "INFO",
            "propagate": False,
        },
    }
    for name in QUIET_LOGGERS:
        loggers[name] = {"handlers": ["console"], "level": "WARNING", "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": DATE_FORMAT,
            },
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                "datefmt": DATE_FORMAT,
            },
        },
        "handlers": handlers,
        "loggers": loggers,
    }


def setup_logging() -> None:
    # A broken stdout pipe must not fail a scoring request
    logging.raiseExceptions = False
    logging.config.dictConfig(build_logging_config())
    logging.getLogger("pte_api.core.logging_config").info(
        f"Logging configured for {settings.ENVIRONMENT} (debug={settings.DEBUG})"
    )


def get_logger(name: str) -> logging.Logger:
    """Logger namespaced under ``pte_api`` so it reaches the app handlers."""
    if name.startswith("pte_api"):
        return logging.getLogger(name)
    return logging.getLogger(f"pte_api.{name}")


setup_logging()
