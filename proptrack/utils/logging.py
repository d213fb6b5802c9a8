"""Namespaced loggers for the PropTrack core.

State changes are logged as an event name followed by key=value pairs
(``payment_deleted id=p1``) so a run can be grepped without an aggregator.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

NAMESPACE = "proptrack"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(NAMESPACE)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    logger.addHandler(handler)
    logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    logger.propagate = False
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    base = configure_logging()
    if child:
        return base.getChild(child)
    return base


def format_fields(**fields: Any) -> str:
    """Render ``key=value`` pairs; floats get two decimals, None is skipped."""

    parts = []
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, float):
            value = f"{value:.2f}"
        parts.append(f"{key}={value}")
    return " ".join(parts)


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    if logger.isEnabledFor(level):
        logger.log(level, "%s %s", event, format_fields(**fields))
