# tests/test_settings.py
from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from structlog.testing import capture_logs

import commit_status.utils.settings as settings_mod
from commit_status.reporter.errors import ConfigurationError

STEP_ENV = {
    "private_token": "glpat-secret-value",
    "gitlab_project_id": "42",
    "commit_hash": "abc123",
    "gitlab_pipeline_id": "9001",
    "api_base_url": "https://gitlab.example.com/api/v4",
}

ALL_ENV_NAMES = list(settings_mod.Settings.model_fields)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    for name in ALL_ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.upper(), raising=False)

    # Point YAML defaults at an empty temp dir so the repo file does not leak in
    monkeypatch.setattr(settings_mod, "PARAMETERS_PATH", tmp_path / "parameters.yaml")
    settings_mod._load_yaml_parameters.cache_clear()
    settings_mod.get_settings.cache_clear()
    yield
    settings_mod._load_yaml_parameters.cache_clear()
    settings_mod.get_settings.cache_clear()


def _set_step_env(monkeypatch: pytest.MonkeyPatch, **overrides: str) -> None:
    for key, value in {**STEP_ENV, **overrides}.items():
        monkeypatch.setenv(key, value)


def test_loads_required_inputs_and_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_step_env(monkeypatch)

    s = settings_mod.get_settings()

    assert s.private_token is not None
    assert s.private_token.get_secret_value() == "glpat-secret-value"
    assert s.gitlab_project_id == "42"
    assert s.commit_hash == "abc123"
    assert s.gitlab_pipeline_id == "9001"
    assert s.api_base_url == "https://gitlab.example.com/api/v4"
    assert s.preset_status == "auto"
    assert s.target_url == ""
    assert s.context == ""
    assert s.description == ""
    assert s.coverage == 0.0
    assert s.http_timeout_seconds == 60.0


def test_settings_are_cached_and_immutable(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_step_env(monkeypatch)

    s = settings_mod.get_settings()

    assert settings_mod.get_settings() is s
    with pytest.raises(Exception):
        s.commit_hash = "other"  # type: ignore[misc]


@pytest.mark.parametrize("field", settings_mod.REQUIRED_FIELDS)
def test_missing_required_input_is_configuration_error(
    monkeypatch: pytest.MonkeyPatch, field: str
) -> None:
    _set_step_env(monkeypatch)
    monkeypatch.delenv(field)

    with pytest.raises(ConfigurationError) as exc_info:
        settings_mod.get_settings()

    assert exc_info.value.missing == [field]
    assert field in str(exc_info.value)


def test_blank_required_input_counts_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_step_env(monkeypatch, gitlab_pipeline_id="", private_token="   ")

    with pytest.raises(ConfigurationError) as exc_info:
        settings_mod.get_settings()

    assert exc_info.value.missing == ["private_token", "gitlab_pipeline_id"]


@pytest.mark.parametrize("preset", ["auto", "pending", "running", "success", "failed", "canceled"])
def test_every_documented_preset_is_accepted(monkeypatch: pytest.MonkeyPatch, preset: str) -> None:
    _set_step_env(monkeypatch, preset_status=preset)
    assert settings_mod.get_settings().preset_status == preset


def test_unknown_preset_is_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_step_env(monkeypatch, preset_status="skipped")

    with pytest.raises(ConfigurationError) as exc_info:
        settings_mod.get_settings()

    assert exc_info.value.errors
    assert exc_info.value.errors[0]["loc"] == ("preset_status",)


@pytest.mark.parametrize("coverage", ["-1", "100.5", "not-a-number"])
def test_invalid_coverage_is_configuration_error(monkeypatch: pytest.MonkeyPatch, coverage: str) -> None:
    _set_step_env(monkeypatch, coverage=coverage)

    with pytest.raises(ConfigurationError):
        settings_mod.get_settings()


def test_coverage_bounds_are_inclusive(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_step_env(monkeypatch, coverage="100.0")
    assert settings_mod.get_settings().coverage == 100.0


def test_empty_optional_inputs_are_treated_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_step_env(monkeypatch, coverage="", preset_status="", description="")

    s = settings_mod.get_settings()

    assert s.coverage == 0.0
    assert s.preset_status == "auto"
    assert s.description == ""


def test_env_overrides_yaml_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    settings_mod.PARAMETERS_PATH.write_text(
        "preset_status: running\ncontext: from-yaml\nhttp_timeout_seconds: 12\n",
        encoding="utf-8",
    )
    _set_step_env(monkeypatch, context="from-env")

    s = settings_mod.get_settings()

    assert s.preset_status == "running"
    assert s.context == "from-env"
    assert s.http_timeout_seconds == 12.0


def test_required_inputs_may_come_from_yaml(monkeypatch: pytest.MonkeyPatch) -> None:
    settings_mod.PARAMETERS_PATH.write_text(
        "api_base_url: https://gitlab.internal/api/v4\n",
        encoding="utf-8",
    )
    _set_step_env(monkeypatch)
    monkeypatch.delenv("api_base_url")

    assert settings_mod.get_settings().api_base_url == "https://gitlab.internal/api/v4"


def test_yaml_that_is_not_a_mapping_is_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    settings_mod.PARAMETERS_PATH.write_text("- just\n- a list\n", encoding="utf-8")
    _set_step_env(monkeypatch)

    with pytest.raises(ConfigurationError):
        settings_mod.get_settings()


@pytest.mark.parametrize("value, expected", [("0", True), ("1", False), (None, False)])
def test_build_succeeded_reads_ci_build_status(
    monkeypatch: pytest.MonkeyPatch, value: str, expected: bool
) -> None:
    _set_step_env(monkeypatch)
    if value is not None:
        monkeypatch.setenv("BITRISE_BUILD_STATUS", value)

    assert settings_mod.get_settings().build_succeeded is expected


def test_settings_loaded_log_redacts_token(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_step_env(monkeypatch)

    with capture_logs() as logs:
        settings_mod.get_settings()

    loaded = [e for e in logs if e["event"] == "settings_loaded"]
    assert len(loaded) == 1
    assert loaded[0]["commit_hash"] == "abc123"
    assert "glpat-secret-value" not in repr(logs)


def test_numeric_identifiers_in_yaml_load_as_strings(monkeypatch: pytest.MonkeyPatch) -> None:
    settings_mod.PARAMETERS_PATH.write_text(
        "gitlab_project_id: 42\ngitlab_pipeline_id: 7\ncommit_hash: 1234567\n",
        encoding="utf-8",
    )
    _set_step_env(monkeypatch)
    for name in ("gitlab_project_id", "gitlab_pipeline_id", "commit_hash"):
        monkeypatch.delenv(name)

    s = settings_mod.get_settings()

    assert s.gitlab_project_id == "42"
    assert s.gitlab_pipeline_id == "7"
    assert s.commit_hash == "1234567"
