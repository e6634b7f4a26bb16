"""
main.py

WHAT THIS FILE IS FOR
---------------------
This module is the process entry point of the GitLab commit status
step. It is the thin shell around the reporter:

1) require a commit hash (checked before any other parsing)
2) load and validate Settings
3) send the commit status under the fixed retry policy
4) map the outcome to a process exit code

EXIT CODES
----------
- 0: the status was recorded
- 1: commit hash missing, configuration invalid, or every attempt failed

It must NOT contain:
- status resolution rules
- request construction
- retry logic

Those responsibilities live in:
- commit_status/reporter/*
"""

from __future__ import annotations

import os
import sys
from typing import Optional

import structlog

from commit_status.reporter.commit_status_service import CommitStatusService
from commit_status.reporter.errors import ConfigurationError, ReportError
from commit_status.reporter.retry_policy import RetryPolicy
from commit_status.utils.logging_setup import DEFAULT_LOG_LEVEL, configure_logging
from commit_status.utils.settings import get_settings

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

COMMIT_HASH_ENV = "commit_hash"


def main(retry_policy: Optional[RetryPolicy] = None) -> int:
    configure_logging(os.environ.get("log_level") or DEFAULT_LOG_LEVEL)

    if not os.environ.get(COMMIT_HASH_ENV, "").strip():
        logger.warning(
            "commit_hash_missing",
            message="GitLab requires a commit hash for build status reporting",
        )
        return EXIT_FAILURE

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        logger.error(
            "configuration_invalid",
            error=str(exc),
            missing=exc.missing,
            errors=exc.errors,
        )
        return EXIT_FAILURE

    configure_logging(settings.log_level)

    service = CommitStatusService(settings)
    policy = retry_policy or RetryPolicy()

    try:
        policy.run(service.send)
    except ReportError as exc:
        logger.error("commit_status_failed", error=str(exc))
        return EXIT_FAILURE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
