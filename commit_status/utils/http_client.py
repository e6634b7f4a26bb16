"""
commit_status/utils/http_client.py

WHAT THIS FILE IS FOR
---------------------
This module provides a minimal, synchronous HTTP client abstraction
used by the reporter layer to make the outbound call to the GitLab
commit status API.

It exists to:
- Centralize the one HTTP verb the step needs (POST + form body)
- Standardize timeout handling
- Avoid scattering raw `requests.post(...)` calls across the codebase

This client is intentionally kept *very thin*.

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Retry logic (see reporter/retry_policy.py)
- Logging
- URL templating
- Status code interpretation or error translation

Those responsibilities belong to CommitStatusService.
"""

from __future__ import annotations

import requests
from typing import Dict, Optional


class HttpClient:
    """
    Minimal synchronous HTTP client wrapper over `requests`.

    It intentionally:
    - Does NOT add retries
    - Does NOT add logging
    - Does NOT interpret response status codes

    `timeout_seconds` is passed directly to `requests.post` and covers
    both connect and read.
    """

    def __init__(self, timeout_seconds: float = 60):
        self.timeout_seconds = timeout_seconds

    def post_form(
        self,
        url: str,
        form: Dict[str, str],
        headers: Optional[Dict[str, str]] = None,
        timeout_seconds: Optional[float] = None,
    ) -> requests.Response:
        """
        Send a POST request with a URL-encoded form body.

        Returns:
            requests.Response. The caller owns it and must close it.

        Raises:
            requests.RequestException:
                Any network-level error (timeout, DNS, connection error).
                Caller is responsible for translating this into a
                domain-specific error.
        """
        return requests.post(
            url,
            data=form,
            headers=headers or {},
            timeout=timeout_seconds if timeout_seconds is not None else self.timeout_seconds,
        )
