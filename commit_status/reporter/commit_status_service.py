"""
commit_status/reporter/commit_status_service.py

WHAT THIS FILE IS FOR
---------------------
This module defines a *thin, synchronous client* for the GitLab
commit status API.

It is responsible for:
- Resolving the state/description to report (via status_resolver)
- Constructing the form body and the request URL
- Attaching the PRIVATE-TOKEN header
- Reading the full response body and releasing the response
- Translating failures into TransportError / APIError

CALL FLOW CONTEXT
-----------------
main.py
  → RetryPolicy.run(service.send)
      → CommitStatusService.send()
          → POST {api_base_url}/projects/{project_id}/statuses/{commit_hash}

ERROR HANDLING RULES
--------------------
- requests.RequestException          → TransportError
- HTTP status outside [200, 300)     → APIError (status, url, code, body)
- No retries are performed here (retry policy is enforced by the caller)

Each call to send() builds a fresh request. Nothing is cached between
attempts except the immutable Settings.

See also:
https://docs.gitlab.com/ee/api/commits.html#set-the-pipeline-status-of-a-commit
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

import requests
import structlog

from commit_status.reporter.errors import APIError, TransportError
from commit_status.reporter.status_resolver import resolve
from commit_status.utils.http_client import HttpClient
from commit_status.utils.settings import Settings
from schemas.status_schema import CommitStatusForm

logger = structlog.get_logger(__name__)

TOKEN_HEADER = "PRIVATE-TOKEN"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

BuildSignal = Callable[[], bool]


class CommitStatusService:
    """
    Thin client for the GitLab commit status endpoint.

    `build_succeeded` is the ambient build-result signal used by the
    "auto" preset. It defaults to the CI-provided flag held in Settings.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        build_succeeded: Optional[BuildSignal] = None,
        http: Optional[HttpClient] = None,
    ):
        self.settings = settings
        self.build_succeeded = build_succeeded or (lambda: settings.build_succeeded)
        self.http = http or HttpClient(timeout_seconds=settings.http_timeout_seconds)

    def status_url(self) -> str:
        base = self.settings.api_base_url.rstrip("/")
        return f"{base}/projects/{self.settings.gitlab_project_id}/statuses/{self.settings.commit_hash}"

    def build_form(self) -> CommitStatusForm:
        state, description = resolve(
            self.settings.preset_status,
            self.build_succeeded(),
            self.settings.description,
        )
        return CommitStatusForm(
            state=state,
            target_url=self.settings.target_url,
            description=description,
            context=self.settings.context,
            coverage=self.settings.coverage,
            pipeline_id=self.settings.gitlab_pipeline_id,
        )

    def headers(self) -> Dict[str, str]:
        return {
            TOKEN_HEADER: self.settings.private_token.get_secret_value(),
            "Content-Type": FORM_CONTENT_TYPE,
        }

    def send(self) -> None:
        url = self.status_url()
        form = self.build_form()

        logger.info(
            "commit_status_sending",
            url=url,
            state=form.state,
            description=form.description,
            context=form.context,
        )

        try:
            resp = self.http.post_form(url, form.to_form(), headers=self.headers())
        except requests.RequestException as exc:
            raise TransportError(url, exc) from exc

        # Closes the response on every exit path, including a failed body read
        with resp:
            try:
                body = resp.text
            except requests.RequestException as exc:
                raise TransportError(url, exc) from exc

        if not 200 <= resp.status_code < 300:
            raise APIError(
                status=f"{resp.status_code} {resp.reason or ''}".rstrip(),
                url=url,
                status_code=resp.status_code,
                body=body,
            )

        logger.info("commit_status_sent", url=url, state=form.state, status_code=resp.status_code)
