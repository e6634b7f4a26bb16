"""
commit_status/utils/logging_setup.py

Process-wide structlog configuration for the step's console output.
Call configure_logging() once, from main(), before anything logs.
"""

from __future__ import annotations

import logging
import sys

import structlog

DEFAULT_LOG_LEVEL = "INFO"


def _stderr_logger(*args) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger so redirected streams are honored
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """
    Route structlog output to stderr, filtered at `level`.

    Unknown level names fall back to INFO.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
