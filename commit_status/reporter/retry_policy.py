"""
commit_status/reporter/retry_policy.py

Fixed-count, fixed-delay retry around one reporter call.

    Attempting ──ok──────────────────────────> Succeeded
        │
        └─ReportError, attempt < max ─ sleep(delay) ─> Attempting
        └─ReportError, attempt == max ───────────────> FinalFailure (re-raise last error)

Only ReportError is retried. Anything else propagates on the first
attempt.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

import structlog

from commit_status.reporter.errors import ReportError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 5.0


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = MAX_ATTEMPTS
    delay_seconds: float = RETRY_DELAY_SECONDS
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")

    def run(self, operation: Callable[[], T]) -> T:
        """
        Call `operation` until it returns or max_attempts is reached.

        Raises:
            ReportError: the error from the last attempt.
        """
        attempt = 1
        while True:
            try:
                return operation()
            except ReportError as exc:
                if attempt >= self.max_attempts:
                    logger.error(
                        "commit_status_retry_exhausted",
                        attempts=attempt,
                        error=str(exc),
                    )
                    raise

                logger.warning(
                    "commit_status_attempt_failed",
                    attempt=attempt,
                    next_attempt=attempt + 1,
                    max_attempts=self.max_attempts,
                    retry_in_seconds=self.delay_seconds,
                    error=str(exc),
                )
                self.sleep(self.delay_seconds)
                attempt += 1
