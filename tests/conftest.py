"""Shared pytest fixtures for the create-openfort test suite.

Provides reusable fixtures for:
- Scripted prompters standing in for the terminal
- Layered template trees on disk
- Initialized project workspaces
- Fake downloaders that write a repository snapshot instead of spawning
- Telemetry-free configuration
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from create_openfort.config import Config, TelemetryConfig
from create_openfort.fetcher import DownloadErrorKind, TemplateDownloadError
from create_openfort.prompts import OperationCancelled
from create_openfort.telemetry import Telemetry
from create_openfort.utils import PackageManagerInfo
from create_openfort.workspace import ProjectWorkspace


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


class ScriptedPrompter:
    """Prompter that replays canned answers.

    ``text`` answers are run through the caller's validator; rejected answers
    are recorded in ``errors`` and the next answer is used, mirroring the
    re-ask loop of the real prompter.  Use ``CANCEL`` as an answer to
    simulate Ctrl+C.
    """

    CANCEL = object()

    def __init__(self, texts: list[Any] | None = None, selects: list[Any] | None = None) -> None:
        self.texts = list(texts or [])
        self.selects = list(selects or [])
        self.messages: list[str] = []
        self.errors: list[str] = []
        self.options: list[list[Any]] = []

    def text(self, message, default=None, placeholder=None, validate=None) -> str:
        self.messages.append(message)
        while True:
            if not self.texts:
                raise AssertionError(f"Unexpected text prompt: {message}")
            answer = self.texts.pop(0)
            if answer is self.CANCEL:
                raise OperationCancelled()
            answer = answer or (default or "")
            error = validate(answer) if validate else None
            if error is None:
                return answer
            self.errors.append(error)

    def select(self, message, options):
        self.messages.append(message)
        self.options.append([option.value for option in options])
        if not self.selects:
            raise AssertionError(f"Unexpected select prompt: {message}")
        answer = self.selects.pop(0)
        if answer is self.CANCEL:
            raise OperationCancelled()
        return answer


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def write_tree(root: Path, files: Mapping[str, str]) -> Path:
    """Create *files* (relative path -> content) under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def read_tree(root: Path) -> dict[str, str]:
    """Map every file under *root* to its content, keyed by POSIX relative path."""
    return {
        path.relative_to(root).as_posix(): path.read_text(encoding="utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def templates_root(tmp_path: Path) -> Path:
    """Empty templates root; tests add layers with ``write_tree``."""
    root = tmp_path / "templates"
    root.mkdir()
    return root


@pytest.fixture
def workspace(tmp_path: Path, prompter: ScriptedPrompter) -> ProjectWorkspace:
    """Workspace initialized at ``<tmp>/cwd/my-app``."""
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    ws = ProjectWorkspace(
        prompter=prompter,
        cwd=cwd,
        package_manager=PackageManagerInfo("npm"),
    )
    return ws.initialize(target_dir="my-app")


# ---------------------------------------------------------------------------
# Downloads
# ---------------------------------------------------------------------------


class FakeFetcher:
    """Stands in for ``RemoteFetcher``: writes a snapshot of each repo.

    Attributes:
        repos: Repo id -> files (relative path -> content).
        calls: ``(repo, destination)`` for every fetch.
        error: Raised instead of writing files, when set.
    """

    def __init__(self, repos: Mapping[str, Mapping[str, str]] | None = None, error: BaseException | None = None) -> None:
        self.repos = dict(repos or {})
        self.calls: list[tuple[str, Path]] = []
        self.error = error

    async def fetch(self, repo: str, destination, *, verbose=None, timeout_ms=None) -> None:
        destination = Path(destination)
        self.calls.append((repo, destination))
        if self.error is not None:
            destination.mkdir(parents=True, exist_ok=True)
            raise self.error
        if repo not in self.repos:
            raise TemplateDownloadError(f"unknown repo {repo}", kind=DownloadErrorKind.REPO_NOT_FOUND)
        write_tree(destination, self.repos[repo])


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> Config:
    """Default configuration with telemetry switched off."""
    return Config(telemetry=TelemetryConfig(enabled=False))


@pytest.fixture
def telemetry(config: Config) -> Telemetry:
    return Telemetry(config.telemetry)
