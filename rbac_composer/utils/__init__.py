"""
Logging helpers shared by every module.
"""
import logging
import logging.config
from typing import Optional

from rbac_composer.core import config


def get_logging_config(level: Optional[str] = None) -> dict:
    """Build the dictConfig used by configure_logging()."""
    level = (level or config.LOG_LEVEL).upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
        "loggers": {
            "rbac_composer": {
                "level": level,
            },
        },
    }


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging for the engine and its scripts."""
    logging.config.dictConfig(get_logging_config(level))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name, normally the calling module's __name__

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
