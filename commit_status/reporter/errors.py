"""
commit_status/reporter/errors.py

Error taxonomy for the commit status step.

- ConfigurationError: fatal, raised before any request is built, never retried
- ReportError: anything the reporter raises; the retry policy retries this family
    - TransportError: the request never produced an HTTP response
    - APIError: the server answered outside [200, 300)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class CommitStatusError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(CommitStatusError):
    def __init__(
        self,
        message: str,
        *,
        missing: Optional[List[str]] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message)
        self.missing = missing or []
        self.errors = errors or []


class ReportError(CommitStatusError):
    """Raised by the status reporter. Always retryable."""


class TransportError(ReportError):
    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"failed to send the request: {cause}")
        self.url = url
        self.cause = cause


class APIError(ReportError):
    def __init__(self, *, status: str, url: str, status_code: int, body: str) -> None:
        super().__init__(
            f"server error: {status} url: {url} code: {status_code} body: {body}"
        )
        self.status = status
        self.url = url
        self.status_code = status_code
        self.body = body
