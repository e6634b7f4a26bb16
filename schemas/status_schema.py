# -------------------------------------------------------------------
# schemas/status_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the **outbound form schema** for the GitLab
# commit status API:
#
#     POST {api_base_url}/projects/{project_id}/statuses/{commit_hash}
#
# and the fixed enumeration of status presets the step accepts.
#
# WIRE FORMAT
# -----------
# The body is application/x-www-form-urlencoded, not JSON.
# Field order matches the order GitLab documents:
#   state, target_url, description, context, coverage, pipeline_id
#
# `coverage` travels as a fixed-point decimal string with six digits
# after the point ("87.500000"), the same text printf("%f") produces.
#
# WHAT THIS FILE IS NOT FOR
# ------------------------
# This module does NOT:
# - Resolve the "auto" preset (see reporter/status_resolver.py)
# - Send requests or interpret responses
# - Load configuration
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

StatusPreset = Literal["auto", "pending", "running", "success", "failed", "canceled"]

AUTO_PRESET = "auto"


class CommitStatusForm(BaseModel):
    """
    Form fields of one commit status request.

    Unset optional text fields are sent as empty strings.
    """

    model_config = ConfigDict(frozen=True)

    state: str = Field(..., min_length=1)
    target_url: str = ""
    description: str = ""
    context: str = ""
    coverage: float = Field(0.0, ge=0.0, le=100.0)
    pipeline_id: str = Field(..., min_length=1)

    @field_serializer("coverage")
    def _format_coverage(self, value: float) -> str:
        return "%f" % value

    def to_form(self) -> Dict[str, str]:
        return self.model_dump()
