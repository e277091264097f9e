"""Logging setup shared by the API process and the Celery worker."""

import logging
import logging.config

from erp.config import settings


def setup_logging() -> None:
    """Configure console logging for the application."""
    level = settings.LOG_LEVEL.upper()
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "": {
                "level": level,
                "handlers": ["console"],
            },
            "celery": {"level": "INFO"},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(logging_config)
    logging.getLogger(__name__).info("Logging configured at %s", level)
