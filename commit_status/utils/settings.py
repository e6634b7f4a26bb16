"""
commit_status/utils/settings.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single source of truth* for runtime configuration
of the commit status step.

It is responsible for:
- Defining all supported configuration fields (via Pydantic BaseSettings)
- Loading default values from parameters/parameters.yaml
- Overriding defaults with environment variables (the CI step inputs)
- Validating required inputs (token, project, commit, pipeline, API URL)
- Exposing a cached, fully-validated, immutable Settings object

LOAD & PRECEDENCE MODEL
-----------------------
Configuration is loaded in the following order (last wins):

1) YAML defaults from:
       parameters/parameters.yaml
2) Environment variables, named after the step inputs:
       private_token, gitlab_project_id, commit_hash, gitlab_pipeline_id,
       api_base_url, preset_status, target_url, context, description,
       coverage

Empty environment values count as unset. CI systems export optional
inputs left blank as empty strings.

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Resolving the status to report
- HTTP calls
- Retry behavior

DESIGN INTENT
-------------
- Any missing required input fails fast, before a request is built
- Failures raise ConfigurationError, which is never retried
- The access token is a SecretStr and never logged in clear text
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml
from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from commit_status.reporter.errors import ConfigurationError
from schemas.status_schema import StatusPreset

logger = structlog.get_logger(__name__)

PARAMETERS_PATH = Path(__file__).resolve().parents[2] / "parameters" / "parameters.yaml"

REQUIRED_FIELDS = (
    "private_token",
    "gitlab_project_id",
    "commit_hash",
    "gitlab_pipeline_id",
    "api_base_url",
)

# Value of BITRISE_BUILD_STATUS while the build has not failed
BUILD_STATUS_SUCCEEDED = "0"


class Settings(BaseSettings):
    """
    Runtime settings for the commit status step.

    Load order / precedence:
        1) YAML defaults (parameters/parameters.yaml)
        2) Environment variables, overriding YAML
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    log_level: str = "INFO"

    # Required inputs.
    # Optional at the model level to allow partial env loading;
    # enforced explicitly in get_settings().
    private_token: Optional[SecretStr] = None
    gitlab_project_id: str = ""
    commit_hash: str = ""
    gitlab_pipeline_id: str = ""
    api_base_url: str = ""

    # Status inputs
    preset_status: StatusPreset = "auto"
    target_url: str = ""
    context: str = ""
    description: str = ""
    coverage: float = Field(default=0.0, ge=0.0, le=100.0)

    # Ambient build result, exported by the CI runner
    bitrise_build_status: Optional[str] = None

    http_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout applied to the commit status POST (connect + read).",
    )

    @property
    def build_succeeded(self) -> bool:
        return self.bitrise_build_status == BUILD_STATUS_SUCCEEDED


@lru_cache(maxsize=1)
def _load_yaml_parameters() -> Dict[str, Any]:
    """
    Load base configuration from parameters/parameters.yaml.

    The file is optional. A malformed file is a configuration error.
    """
    if not PARAMETERS_PATH.exists():
        logger.debug("parameters_yaml_missing", expected=str(PARAMETERS_PATH))
        return {}

    try:
        with PARAMETERS_PATH.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.error("parameters_yaml_load_error", path=str(PARAMETERS_PATH), error=str(exc))
        raise ConfigurationError(f"Could not read {PARAMETERS_PATH}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{PARAMETERS_PATH} must contain a mapping, got {type(data).__name__}"
        )
    logger.debug("parameters_yaml_loaded", path=str(PARAMETERS_PATH))
    return data


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Construct and return the final validated Settings object.

    This function is:
    - Cached (singleton per process)
    - The ONLY supported way to access runtime settings

    Raises:
        ConfigurationError: a required input is missing, or an input
        fails validation (unknown preset, coverage out of range).
    """
    # 1) YAML defaults
    yaml_data = _load_yaml_parameters()

    # 2) env overrides (partial)
    try:
        env_data = Settings().model_dump(exclude_unset=True)
    except ValidationError as exc:
        logger.error("settings_env_validation_error", errors=exc.errors())
        raise ConfigurationError(
            f"Invalid step inputs: {exc.error_count()} validation error(s)",
            errors=exc.errors(),
        ) from exc

    # 3) merge
    merged: Dict[str, Any] = {**yaml_data, **env_data}

    # 4) enforce required inputs
    missing = [name for name in REQUIRED_FIELDS if _is_blank(merged.get(name))]
    if missing:
        logger.error("settings_missing_required_inputs", missing=missing)
        raise ConfigurationError(
            f"Missing required inputs: {', '.join(missing)}",
            missing=missing,
        )

    # 5) final validation
    try:
        settings = Settings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid step inputs: {exc.error_count()} validation error(s)",
            errors=exc.errors(),
        ) from exc

    logger.info(
        "settings_loaded",
        private_token=str(settings.private_token),
        gitlab_project_id=settings.gitlab_project_id,
        commit_hash=settings.commit_hash,
        gitlab_pipeline_id=settings.gitlab_pipeline_id,
        api_base_url=settings.api_base_url,
        preset_status=settings.preset_status,
        target_url=settings.target_url,
        context=settings.context,
        description=settings.description,
        coverage=settings.coverage,
        http_timeout_seconds=settings.http_timeout_seconds,
    )

    return settings


def _is_blank(value: Any) -> bool:
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    return value is None or not str(value).strip()
