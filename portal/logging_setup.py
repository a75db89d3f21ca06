"""Central logging configuration for the portal service.

Installs a root stdout handler so every module logger emits INFO-level
records without per-module setup, and routes the uvicorn loggers through
the same handler.
"""
from __future__ import annotations

import logging
import os
from logging.config import dictConfig


def _build_dict_config(level: str) -> dict:
    return {
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
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(level: str | None = None) -> None:
    """Configure application-wide logging once.

    Returns early when the root logger already has handlers so reloaders and
    repeated app factories do not duplicate output. `PORTAL_LOG_LEVEL`
    overrides the default INFO level.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    resolved = (level or os.getenv("PORTAL_LOG_LEVEL") or "INFO").upper()
    dictConfig(_build_dict_config(resolved))
