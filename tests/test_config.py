"""Unit tests for configuration models (create_openfort.config)."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from create_openfort.config import (
    DEFAULT_API_ENDPOINT,
    DEFAULT_TARGET_DIR,
    Config,
    DownloadConfig,
    RepoConfig,
    TelemetryConfig,
)

ENV_VARS = (
    "CREATE_OPENFORT_TEMPLATES_DIR",
    "CREATE_OPENFORT_DOWNLOAD_TIMEOUT_MS",
    "CREATE_OPENFORT_TEMPLATE_REPO",
    "CREATE_OPENFORT_BACKEND_REPO",
    "CREATE_OPENFORT_DASHBOARD_URL",
    "POSTHOG_KEY",
    "POSTHOG_HOST",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:
    @pytest.mark.unit
    def test_config_defaults(self):
        config = Config()
        assert config.default_target_dir == DEFAULT_TARGET_DIR == "openfort-project"
        assert config.default_api_endpoint == DEFAULT_API_ENDPOINT
        assert config.templates_dir is None
        assert config.validate_inputs is True
        assert config.is_verbose is False
        assert config.api_keys_url == "https://dashboard.openfort.io/developers/api-keys"

    @pytest.mark.unit
    def test_download_defaults(self):
        download = DownloadConfig()
        assert download.command == ["npx", "degit"]
        assert download.executable == "npx"
        assert download.timeout_ms == 60000

    @pytest.mark.unit
    def test_repo_defaults(self):
        repos = RepoConfig()
        assert repos.template_repo == "openfort-xyz/openfort-react"
        assert repos.template_path("headless") == "examples/quickstarts/headless"
        assert repos.backend_repo == "openfort-xyz/openfort-backend-quickstart"
        assert repos.backend_port == 3110

    @pytest.mark.unit
    def test_verbose_debug_implies_verbose(self):
        assert Config(verbose_debug=True).is_verbose is True

    @pytest.mark.unit
    def test_telemetry_configured(self):
        assert TelemetryConfig().configured is False
        assert TelemetryConfig(posthog_key="k", posthog_host="https://h").configured is True


class TestValidation:
    @pytest.mark.unit
    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            DownloadConfig(timeout_ms=0)

    @pytest.mark.unit
    def test_rejects_empty_command(self):
        with pytest.raises(ValidationError):
            DownloadConfig(command=[])

    @pytest.mark.unit
    def test_rejects_bad_port(self):
        with pytest.raises(ValidationError):
            RepoConfig(backend_port=70000)


class TestFromEnv:
    @pytest.mark.unit
    def test_no_environment(self, clean_env):
        config = Config.from_env()
        assert config.download.timeout_ms == 60000
        assert config.telemetry.configured is False

    @pytest.mark.unit
    def test_reads_environment(self, clean_env, tmp_path: Path):
        clean_env.setenv("CREATE_OPENFORT_TEMPLATES_DIR", str(tmp_path))
        clean_env.setenv("CREATE_OPENFORT_DOWNLOAD_TIMEOUT_MS", "1500")
        clean_env.setenv("CREATE_OPENFORT_TEMPLATE_REPO", "me/templates")
        clean_env.setenv("CREATE_OPENFORT_BACKEND_REPO", "me/backend")
        clean_env.setenv("CREATE_OPENFORT_DASHBOARD_URL", "https://dash.example")
        clean_env.setenv("POSTHOG_KEY", "phc_key")
        clean_env.setenv("POSTHOG_HOST", "https://ph.example")

        config = Config.from_env()

        assert config.templates_dir == tmp_path
        assert config.download.timeout_ms == 1500
        assert config.repos.template_repo == "me/templates"
        assert config.repos.backend_repo == "me/backend"
        assert config.dashboard_url == "https://dash.example"
        assert config.telemetry.configured is True

    @pytest.mark.unit
    def test_overrides_win(self, clean_env):
        clean_env.setenv("CREATE_OPENFORT_DASHBOARD_URL", "https://from-env")
        config = Config.from_env(dashboard_url="https://override", verbose=True)
        assert config.dashboard_url == "https://override"
        assert config.verbose is True
