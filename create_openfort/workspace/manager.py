"""Target directory lifecycle for a scaffolded project.

``ProjectWorkspace`` resolves and prepares the directory the project is
written to, derives its package name, and exposes a rooted file namespace.
Once a backend is added the workspace switches to subfolder mode: frontend
files go under ``frontend/`` and the backend lives in ``backend/``.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from jinja2 import Environment

from create_openfort.config import DEFAULT_TARGET_DIR
from create_openfort.fetcher import RemoteFetcher
from create_openfort.prompts import OperationCancelled, Option, Prompter
from create_openfort.scaffolder.env_writer import ENV_FILE, EXAMPLE_FILE, fill_env_exact
from create_openfort.telemetry import Telemetry
from create_openfort.utils import (
    PackageManagerInfo,
    create_spinner,
    pkg_from_user_agent,
    print_error,
    print_info,
    print_success,
    quote_path,
)
from create_openfort.workspace.file_ops import copy_dir, edit_file, empty_dir, is_empty, remove_path
from create_openfort.workspace.names import format_target_dir, is_valid_name, to_valid_name

FRONTEND_DIR = "frontend"
BACKEND_DIR = "backend"
TMP_DIR = "tmp"


class WorkspaceNotInitializedError(RuntimeError):
    """Raised when a workspace method is used before ``initialize``."""

    def __init__(self) -> None:
        super().__init__("Workspace not initialized")


class OverwritePolicy(str, Enum):
    """What to do with a target directory that already has files."""

    ABORT = "no"
    PURGE = "yes"
    IGNORE = "ignore"


@dataclass(frozen=True)
class BackendSecrets:
    """Keys written into the sample backend's ``.env``."""

    openfort_secret_key: str
    shield_secret_key: str
    shield_api_key: str
    shield_encryption_share: str

    def as_env(self, port: int) -> dict[str, str]:
        return {
            "OPENFORT_SECRET_KEY": self.openfort_secret_key,
            "SHIELD_SECRET_KEY": self.shield_secret_key,
            "SHIELD_API_KEY": self.shield_api_key,
            "SHIELD_ENCRYPTION_SHARE": self.shield_encryption_share,
            "PORT": str(port),
        }


_NEXT_STEPS_TEMPLATE = """\
Done.

Now run:
{%- if cd_path %}
  cd {{ cd_path }}
{%- endif %}
{%- if subfolders %}

For the backend project, run in one terminal.
  cd backend
  {{ pm }} install
  {{ pm }} run dev

Then run the frontend project in another terminal.
  cd frontend
{%- endif %}
  {{ pm }} install
  {{ pm }} run dev"""


class ProjectWorkspace:
    """The project directory being scaffolded and its derived metadata.

    Attributes:
        root: Absolute project directory; ``None`` until ``initialize``.
        target_dir: Directory as given by the user (relative to ``cwd``).
        package_name: Validated package.json name.
        uses_subfolders: Frontend files live under ``frontend/``.
        package_manager: Package manager named in the closing instructions.
    """

    def __init__(
        self,
        prompter: Prompter | None = None,
        cwd: str | Path | None = None,
        verbose: bool = False,
        telemetry: Telemetry | None = None,
        package_manager: PackageManagerInfo | None = None,
    ) -> None:
        self.prompter = prompter or Prompter()
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.verbose = verbose
        self.telemetry = telemetry
        self.root: Path | None = None
        self.target_dir: str | None = None
        self.package_name: str | None = None
        self.uses_subfolders = False
        self.package_manager = package_manager or pkg_from_user_agent() or PackageManagerInfo()

        if verbose:
            print_info(f"Using {self.package_manager.name} {self.package_manager.version}".rstrip())

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(
        self,
        target_dir: str | None = None,
        overwrite: bool | OverwritePolicy | None = None,
        default_target_dir: str = DEFAULT_TARGET_DIR,
    ) -> "ProjectWorkspace":
        """Resolve, prepare and create the project directory.

        Args:
            target_dir: Directory from the command line; prompted for when
                omitted.
            overwrite: ``True`` purges a non-empty directory without asking;
                an ``OverwritePolicy`` is applied as given; otherwise the
                user is asked.
            default_target_dir: Default answer of the directory prompt.

        Raises:
            OperationCancelled: If the user cancels or chooses to abort.
        """
        if target_dir:
            self.target_dir = target_dir
            print_success(f"Project name: {self.target_dir}")
        else:
            answer = self.prompter.text(
                "Project name:",
                default=default_target_dir,
                placeholder=default_target_dir,
            )
            self.target_dir = format_target_dir(answer) or default_target_dir

        target_path = self.cwd / self.target_dir
        if target_path.exists() and not is_empty(target_path):
            policy = self._overwrite_policy(overwrite)
            if policy is OverwritePolicy.ABORT:
                raise OperationCancelled()
            if policy is OverwritePolicy.PURGE:
                empty_dir(target_path)

        self.package_name = self._resolve_package_name(target_path)
        self.root = target_path.resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        return self

    def _overwrite_policy(self, overwrite: bool | OverwritePolicy | None) -> OverwritePolicy:
        if isinstance(overwrite, OverwritePolicy):
            return overwrite
        if overwrite:
            return OverwritePolicy.PURGE

        where = "Current directory" if self.target_dir == "." else f'Target directory "{self.target_dir}"'
        return self.prompter.select(
            f"{where} is not empty. Please choose how to proceed:",
            [
                Option(OverwritePolicy.ABORT, "Cancel operation"),
                Option(OverwritePolicy.PURGE, "Remove existing files and continue"),
                Option(OverwritePolicy.IGNORE, "Ignore files and continue"),
            ],
        )

    def _resolve_package_name(self, target_path: Path) -> str:
        name = target_path.resolve().name
        if is_valid_name(name):
            return name

        suggested = to_valid_name(name)
        answer = self.prompter.text(
            "Package name:",
            default=suggested,
            placeholder=suggested,
            validate=lambda value: (
                "Invalid package.json name" if value and not is_valid_name(value) else None
            ),
        )
        return answer or suggested

    # ------------------------------------------------------------------
    # Rooted file access
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self.root is not None

    def _require_root(self) -> Path:
        if self.root is None:
            raise WorkspaceNotInitializedError()
        return self.root

    @property
    def frontend_root(self) -> Path:
        """Directory frontend files are written to."""
        root = self._require_root()
        return root / FRONTEND_DIR if self.uses_subfolders else root

    @property
    def backend_root(self) -> Path:
        return self._require_root() / BACKEND_DIR

    def resolve_path(self, relative: str | Path) -> Path:
        """Absolute path of a frontend file.

        Raises:
            WorkspaceNotInitializedError: Before ``initialize``.
        """
        return self.frontend_root / relative

    def read(self, relative: str | Path) -> str:
        return self.resolve_path(relative).read_text(encoding="utf-8")

    def write(self, relative: str | Path, content: str) -> Path:
        target = self.resolve_path(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    def edit_file(self, relative: str | Path, callback: Callable[[str], str]) -> None:
        edit_file(self.resolve_path(relative), callback)

    # ------------------------------------------------------------------
    # Remote sources
    # ------------------------------------------------------------------

    async def fetch_subtree(self, fetcher: RemoteFetcher, repo: str, repo_path: str) -> Path:
        """Download *repo* and copy its *repo_path* folder into the frontend root.

        The download goes to ``<root>/tmp``, which is removed afterwards
        whether or not the download succeeded.

        Raises:
            TemplateDownloadError: If the download fails.
        """
        root = self._require_root()
        tmp_dir = root / TMP_DIR
        target_dir = self.frontend_root

        try:
            with create_spinner() as spinner:
                spinner.add_task("Downloading template...", total=None)
                if self.verbose:
                    print_info(f"Cloning repo {repo} path {repo_path}")
                await fetcher.fetch(repo, tmp_dir, verbose=self.verbose)

                if self.verbose:
                    print_info(f'Repo cloned. Copying path "{repo_path}" to {target_dir}')
                copy_dir(tmp_dir / repo_path, target_dir)
        except Exception as exc:
            print_error(f"Failed to download template.\n{exc}")
            await self._report_error(exc, repo=repo, repoPath=repo_path)
            raise
        finally:
            remove_path(tmp_dir)

        print_success("Template download completed successfully!")
        return target_dir

    async def create_backend(
        self,
        fetcher: RemoteFetcher,
        repo: str,
        secrets: BackendSecrets,
        port: int = 3110,
    ) -> Path:
        """Download the sample backend into ``backend/`` and fill its ``.env``.

        Switches the workspace to subfolder mode first.

        Raises:
            TemplateDownloadError: If the download fails.
            FileNotFoundError: If the backend ships no ``.env.example``.
        """
        self._require_root()
        self.uses_subfolders = True
        backend_dir = self.backend_root

        try:
            with create_spinner() as spinner:
                spinner.add_task("Creating backend...", total=None)
                if self.verbose:
                    print_info(f"Creating backend folder from {repo}")
                await fetcher.fetch(repo, backend_dir, verbose=self.verbose)

                source = backend_dir / EXAMPLE_FILE
                target = backend_dir / ENV_FILE
                if self.verbose:
                    print_info(f"Reading {EXAMPLE_FILE} from {source}")
                    print_info(f"Writing {ENV_FILE} to {target}")
                fill_env_exact(source, target, secrets.as_env(port))
        except Exception as exc:
            print_error(f"Failed to create backend.\n{exc}")
            await self._report_error(exc)
            raise

        print_success("Backend creation completed successfully!")
        return backend_dir

    async def _report_error(self, exc: BaseException, **properties: str) -> None:
        if self.telemetry is not None:
            await self.telemetry.send("error", {"error": str(exc), **properties})

    # ------------------------------------------------------------------
    # Closing instructions
    # ------------------------------------------------------------------

    def next_steps(self) -> str:
        """Instructions for installing and running the scaffolded project."""
        root = self._require_root()
        cd_path = None
        if root != self.cwd.resolve():
            cd_path = quote_path(os.path.relpath(root, self.cwd))
        template = Environment(keep_trailing_newline=False).from_string(_NEXT_STEPS_TEMPLATE)
        return template.render(
            cd_path=cd_path,
            subfolders=self.uses_subfolders,
            pm=self.package_manager.name,
        )
