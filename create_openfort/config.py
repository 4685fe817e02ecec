"""create-openfort configuration.

Centralised, typed configuration for a scaffolding run.  All settings use
Pydantic v2 models so they are validated at construction time and can be
overridden from environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_TARGET_DIR = "openfort-project"
DEFAULT_API_ENDPOINT = "http://localhost:3110/api/protected-create-encryption-session"
DEFAULT_DASHBOARD_URL = "https://dashboard.openfort.io"
DEFAULT_PACKAGE_NAME = "openfort-app"


class DownloadConfig(BaseModel):
    """How remote templates are fetched."""

    command: list[str] = Field(
        default_factory=lambda: ["npx", "degit"],
        min_length=1,
        description="Downloader invocation; the repo and destination are appended",
    )
    timeout_ms: int = Field(default=60000, ge=1, description="Per-download timeout in ms")

    @property
    def executable(self) -> str:
        """Name of the downloader executable (first word of ``command``)."""
        return self.command[0]


class RepoConfig(BaseModel):
    """Remote sources for the frontend template and the sample backend."""

    template_repo: str = Field(default="openfort-xyz/openfort-react")
    template_path_prefix: str = Field(default="examples/quickstarts")
    backend_repo: str = Field(default="openfort-xyz/openfort-backend-quickstart")
    backend_port: int = Field(default=3110, ge=1, le=65535)

    def template_path(self, template: str) -> str:
        """Path of *template* inside ``template_repo``."""
        return f"{self.template_path_prefix}/{template}"


class TelemetryConfig(BaseModel):
    """Anonymous usage reporting (PostHog capture endpoint)."""

    enabled: bool = Field(default=True)
    posthog_key: str | None = Field(default=None)
    posthog_host: str | None = Field(default=None)
    timeout: float = Field(default=5.0, gt=0, description="Request timeout in seconds")

    @property
    def configured(self) -> bool:
        """``True`` when a key and host are both available."""
        return bool(self.posthog_key and self.posthog_host)


class Config(BaseModel):
    """Global create-openfort configuration.

    Built once by the CLI entry point from the parsed arguments (and
    ``from_env`` overrides) and then passed through the rest of the system.
    """

    default_target_dir: str = Field(default=DEFAULT_TARGET_DIR)
    default_api_endpoint: str = Field(default=DEFAULT_API_ENDPOINT)
    dashboard_url: str = Field(default=DEFAULT_DASHBOARD_URL)
    product: str = Field(default="openfortkit", description="Folder under updated-files/")
    templates_dir: Path | None = Field(
        default=None,
        description="Local templates root; enables layered materialization",
    )
    verbose: bool = Field(default=False)
    verbose_debug: bool = Field(default=False)
    validate_inputs: bool = Field(default=True)
    use_defaults: bool = Field(default=False)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    repos: RepoConfig = Field(default_factory=RepoConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @property
    def is_verbose(self) -> bool:
        """Verbose output is on when either verbose level was requested."""
        return self.verbose or self.verbose_debug

    @property
    def api_keys_url(self) -> str:
        """Dashboard page where the user finds their keys."""
        return f"{self.dashboard_url.rstrip('/')}/developers/api-keys"

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CREATE_OPENFORT_TEMPLATES_DIR, CREATE_OPENFORT_DOWNLOAD_TIMEOUT_MS,
            CREATE_OPENFORT_TEMPLATE_REPO, CREATE_OPENFORT_BACKEND_REPO,
            CREATE_OPENFORT_DASHBOARD_URL, POSTHOG_KEY, POSTHOG_HOST.

        Keyword *overrides* win over the environment.
        """
        download_kwargs: dict[str, Any] = {}
        if os.environ.get("CREATE_OPENFORT_DOWNLOAD_TIMEOUT_MS"):
            download_kwargs["timeout_ms"] = int(os.environ["CREATE_OPENFORT_DOWNLOAD_TIMEOUT_MS"])

        repo_kwargs: dict[str, Any] = {}
        if os.environ.get("CREATE_OPENFORT_TEMPLATE_REPO"):
            repo_kwargs["template_repo"] = os.environ["CREATE_OPENFORT_TEMPLATE_REPO"]
        if os.environ.get("CREATE_OPENFORT_BACKEND_REPO"):
            repo_kwargs["backend_repo"] = os.environ["CREATE_OPENFORT_BACKEND_REPO"]

        telemetry_kwargs: dict[str, Any] = {
            "posthog_key": os.environ.get("POSTHOG_KEY") or None,
            "posthog_host": os.environ.get("POSTHOG_HOST") or None,
        }

        kwargs: dict[str, Any] = {
            "download": DownloadConfig(**download_kwargs),
            "repos": RepoConfig(**repo_kwargs),
            "telemetry": TelemetryConfig(**telemetry_kwargs),
        }
        if os.environ.get("CREATE_OPENFORT_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["CREATE_OPENFORT_TEMPLATES_DIR"])
        if os.environ.get("CREATE_OPENFORT_DASHBOARD_URL"):
            kwargs["dashboard_url"] = os.environ["CREATE_OPENFORT_DASHBOARD_URL"]

        kwargs.update(overrides)
        return cls(**kwargs)
