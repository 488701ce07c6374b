"""Central logging configuration for the submission service.

One stdout handler on the root logger so every module logger emits INFO
without per-module setup; uvicorn loggers stay visible.
"""
from __future__ import annotations
import logging
from logging.config import dictConfig

_DICT_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        }
    },
    "root": {"level": "INFO", "handlers": ["console"]},
    "loggers": {
        "survey_relay": {"level": "INFO"},
        "httpx": {"level": "WARNING"},
        "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
    },
}


def configure_logging() -> None:
    """Configure logging once; a root logger that already has handlers is left alone."""
    if logging.getLogger().handlers:
        return
    dictConfig(_DICT_CONFIG)
