"""create-openfort scaffolding flow and CLI entry point.

Drives one interactive run from an empty terminal to a ready-to-install
project:

1. WORKSPACE   -- Resolve the target directory and package name.
2. CHOICES     -- Template, recovery backend, theme and API keys.
3. BACKEND     -- Optionally download and configure the sample backend.
4. TEMPLATE    -- Download the quickstart (or materialize local layers).
5. ENV         -- Fill ``.env`` from ``.env.example``.

Usage::

    create-openfort my-app
    create-openfort my-app --template headless --overwrite
    create-openfort my-app --templates-dir ./templates --framework vite
"""

from __future__ import annotations

import argparse
import asyncio
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from create_openfort import __version__
from create_openfort.config import DEFAULT_DASHBOARD_URL, Config
from create_openfort.fetcher import RemoteFetcher
from create_openfort.prompts import OperationCancelled, Option, Prompter
from create_openfort.scaffolder import Framework, TemplateMaterializer, fill_env, fill_framework_env
from create_openfort.telemetry import Telemetry
from create_openfort.templates import prompt_template, prompt_theme
from create_openfort.utils import (
    console,
    print_error,
    print_info,
    print_intro,
    print_step,
    print_success,
    print_warning,
)
from create_openfort.validation import (
    ENCRYPTION_SHARE_RE,
    PUBLISHABLE_KEY_RE,
    SECRET_KEY_RE,
    UUID_V4_RE,
    check_session_endpoint,
    validate_input,
    validate_required,
)
from create_openfort.workspace import BackendSecrets, ProjectWorkspace, format_target_dir, remove_path
from create_openfort.workspace.manager import TMP_DIR

# ---------------------------------------------------------------------------
# Flow state
# ---------------------------------------------------------------------------


class FlowState(str, Enum):
    """Progress of a scaffolding run."""

    UNINITIALIZED = "uninitialized"
    WORKSPACE_READY = "workspace_ready"
    BACKEND_PROVISIONED = "backend_provisioned"
    TEMPLATE_MATERIALIZED = "template_materialized"
    ENV_WRITTEN = "env_written"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class ProjectKeys:
    """Keys collected from the user.  Backend-only keys stay ``None`` otherwise."""

    openfort_publishable_key: str
    shield_publishable_key: str
    openfort_secret_key: str | None = None
    shield_secret_key: str | None = None
    shield_encryption_share: str | None = None

    def backend_secrets(self) -> BackendSecrets:
        """Secrets for the sample backend.

        Raises:
            OperationCancelled: If a backend key was left empty.
        """
        if not (
            self.openfort_secret_key
            and self.shield_secret_key
            and self.shield_publishable_key
            and self.shield_encryption_share
        ):
            raise OperationCancelled(
                "Missing Openfort Secret, Shield Secret, Shield Publishable Key or Shield Encryption Share"
            )
        return BackendSecrets(
            openfort_secret_key=self.openfort_secret_key,
            shield_secret_key=self.shield_secret_key,
            shield_api_key=self.shield_publishable_key,
            shield_encryption_share=self.shield_encryption_share,
        )


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class ScaffoldPipeline:
    """One create-openfort run.

    Steps are awaited one after another; a failure at any step moves the
    flow to ``ABORTED`` and the original exception propagates to the caller.

    Attributes:
        config: Run configuration.
        state: Current ``FlowState``.
        framework: When set together with ``config.templates_dir``, the
            template is materialized from local layers instead of downloaded.
    """

    def __init__(
        self,
        config: Config,
        prompter: Prompter | None = None,
        fetcher: RemoteFetcher | None = None,
        telemetry: Telemetry | None = None,
        workspace: ProjectWorkspace | None = None,
        framework: Framework | None = None,
    ) -> None:
        self.config = config
        self.prompter = prompter or Prompter()
        self.fetcher = fetcher or RemoteFetcher.from_config(config.download, verbose=config.is_verbose)
        self.telemetry = telemetry or Telemetry(config.telemetry, debug=config.verbose_debug)
        self.workspace = workspace or ProjectWorkspace(
            prompter=self.prompter,
            verbose=config.is_verbose,
            telemetry=self.telemetry,
        )
        self.framework = framework
        self.state = FlowState.UNINITIALIZED

    @property
    def uses_local_templates(self) -> bool:
        return self.config.templates_dir is not None and self.framework is not None

    def _advance(self, state: FlowState) -> None:
        self.state = state
        if self.config.verbose_debug:
            print_info(f"State: {state.value}")

    async def run(
        self,
        target_dir: str | None = None,
        template: str | None = None,
        overwrite: bool = False,
        dashboard: str | None = None,
    ) -> ProjectWorkspace:
        """Execute the whole flow.

        Args:
            target_dir: Project directory from the command line.
            template: Template name from the command line.
            overwrite: Purge a non-empty target without asking.
            dashboard: Dashboard URL to point the user to.

        Returns:
            The initialized workspace.

        Raises:
            OperationCancelled: If the user cancels.
            TemplateDownloadError: If a download fails.
            TemplateNotFoundError: If a local raw template is missing.
        """
        try:
            return await self._run(target_dir, template, overwrite, dashboard)
        except BaseException:
            self.state = FlowState.ABORTED
            raise

    async def _run(
        self,
        target_dir: str | None,
        template: str | None,
        overwrite: bool,
        dashboard: str | None,
    ) -> ProjectWorkspace:
        await self.telemetry.send("started")

        print_intro("Let's create a new Openfort project!")
        if self.config.is_verbose:
            print_success("Verbose mode enabled")
            print_info(f"create-openfort version: {__version__}")
        if dashboard:
            print_info(f"You can manage your Openfort project at {dashboard}")
        if not self.config.validate_inputs:
            print_warning(
                "No validation will be performed on the input values.\n"
                "Please make sure to provide valid values."
            )

        # 1. Workspace
        self.workspace.initialize(
            target_dir=target_dir,
            overwrite=True if overwrite else None,
            default_target_dir=self.config.default_target_dir,
        )
        self._advance(FlowState.WORKSPACE_READY)

        # 2. Choices
        if template and self.config.is_verbose:
            print_info(f"Using template from argument: {template}")
        chosen = prompt_template(self.prompter, template)

        create_backend, api_endpoint = await self._choose_recovery()
        theme = prompt_theme(self.prompter, chosen)

        print_success(
            "Good! You are all set.\n"
            "Please provide the following keys to continue.\n"
            f"Get your keys from {(dashboard or DEFAULT_DASHBOARD_URL).rstrip('/')}/developers/api-keys"
        )
        keys = self._ask_keys(create_backend)
        self.telemetry.project_id = keys.openfort_publishable_key

        if self.config.is_verbose:
            print_info(f"Using template: {chosen}")
        print_step(f"Scaffolding project in {self.workspace.root}...")

        # 3. Backend
        if create_backend:
            await self.workspace.create_backend(
                self.fetcher,
                self.config.repos.backend_repo,
                keys.backend_secrets(),
                port=self.config.repos.backend_port,
            )
            self._advance(FlowState.BACKEND_PROVISIONED)

        # 4. Template
        await self._materialize(chosen)
        self._advance(FlowState.TEMPLATE_MATERIALIZED)

        # 5. Env
        env: dict[str, str | None] = {
            "SHIELD_PUBLISHABLE_KEY": keys.shield_publishable_key,
            "OPENFORT_PUBLISHABLE_KEY": keys.openfort_publishable_key,
            "CREATE_ENCRYPTED_SESSION_ENDPOINT": api_endpoint,
        }
        if theme:
            env["OPENFORT_THEME"] = theme

        await self.telemetry.send("completed")
        self._write_env(env)
        self._advance(FlowState.ENV_WRITTEN)

        console.print()
        console.print(self.workspace.next_steps())
        console.print()
        self._advance(FlowState.DONE)
        return self.workspace

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    async def _choose_recovery(self) -> tuple[bool, str]:
        """Ask whether to create a recovery backend and which endpoint to use.

        Returns:
            ``(create_backend, api_endpoint)``.
        """
        api_endpoint = self.config.default_api_endpoint

        if self.config.use_defaults:
            automatic_recovery = True
        else:
            automatic_recovery = self.prompter.select(
                "Do you want to create a backend for automatic account recovery?",
                [
                    Option(True, "Yes", hint="Better user experience"),
                    Option(False, "No", hint="Users will recover their account with a password or passkey"),
                ],
            )
        if not automatic_recovery:
            return False, api_endpoint

        create_backend = self.prompter.select(
            "Do you already have a backend to create an encryption session?",
            [
                Option(True, "No", hint="We will create a sample backend for you"),
                Option(False, "Yes", hint="You will need to provide an endpoint to create an encryption session"),
            ],
        )
        if create_backend:
            return True, api_endpoint

        attempts = 0
        while True:
            message = (
                "Please provide your API endpoint to create an encryption session:"
                if attempts == 0
                else "Please provide a valid API endpoint to create an encryption session:"
            )
            api_endpoint = self.prompter.text(
                message,
                placeholder=self.config.default_api_endpoint,
                validate=lambda value: validate_required(value, "API endpoint", self.config.validate_inputs),
            )
            result = await check_session_endpoint(api_endpoint)
            if result.valid or not self.config.validate_inputs:
                return False, api_endpoint
            print_error(result.error or "Invalid API endpoint.")
            attempts += 1

    def _ask_key(self, message: str, placeholder: str, pattern: re.Pattern[str], name: str) -> str:
        enabled = self.config.validate_inputs
        return self.prompter.text(
            message,
            placeholder=placeholder,
            validate=lambda value: validate_input(value, pattern, name, enabled),
        )

    def _ask_keys(self, create_backend: bool) -> ProjectKeys:
        publishable = self._ask_key(
            "Openfort Publishable Key:", "pk...", PUBLISHABLE_KEY_RE, "Openfort Publishable Key"
        )
        if not create_backend:
            shield_publishable = self._ask_key(
                "Shield Publishable Key:", "Your Shield Publishable Key", UUID_V4_RE, "Shield Publishable Key"
            )
            return ProjectKeys(publishable, shield_publishable)

        secret = self._ask_key("Openfort Secret:", "sk_...", SECRET_KEY_RE, "Openfort Secret Key")
        shield_publishable = self._ask_key(
            "Shield Publishable Key:", "Your Shield Publishable Key", UUID_V4_RE, "Shield Publishable Key"
        )
        share = self._ask_key(
            "Shield Encryption Share:",
            "Your Shield Encryption Share",
            ENCRYPTION_SHARE_RE,
            "Shield Encryption Share",
        )
        shield_secret = self._ask_key("Shield Secret:", "Your Shield Secret", UUID_V4_RE, "Shield Secret Key")
        return ProjectKeys(
            openfort_publishable_key=publishable,
            shield_publishable_key=shield_publishable,
            openfort_secret_key=secret,
            shield_secret_key=shield_secret,
            shield_encryption_share=share,
        )

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def _materialize(self, template: str) -> Path:
        if self.uses_local_templates:
            materializer = TemplateMaterializer(
                self.config.templates_dir,
                product=self.config.product,
                verbose=self.config.is_verbose,
            )
            return materializer.materialize(self.framework, self.workspace)

        repos = self.config.repos
        return await self.workspace.fetch_subtree(
            self.fetcher,
            repos.template_repo,
            repos.template_path(template),
        )

    def _write_env(self, env: dict[str, str | None]) -> Path:
        if self.config.is_verbose:
            print_info(f"Filling .env with provided environment variables: {env}")
        if self.uses_local_templates:
            return fill_framework_env(self.workspace, self.framework, env, verbose=self.config.is_verbose)
        return fill_env(self.workspace, env, verbose=self.config.is_verbose)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-openfort",
        description=(
            "Create a new Openfort project in TypeScript.\n"
            "With no arguments, start the CLI in interactive mode."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-openfort my-app\n"
            "  create-openfort my-app -t headless -o\n"
            "  create-openfort my-app --templates-dir ./templates --framework nextjs\n"
        ),
    )
    parser.add_argument("directory", nargs="?", default=None, help="Project directory")
    parser.add_argument("-t", "--template", default=None, help="Template to use")
    parser.add_argument("-o", "--overwrite", action="store_true", help="Overwrite existing files")
    parser.add_argument("-d", "--default", action="store_true", help="Use default values for all inputs")
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable verbose mode")
    parser.add_argument("--verbose-debug", action="store_true", help="Enable verbose mode with debug output")
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"create-openfort version: {__version__}",
        help="Version number",
    )
    parser.add_argument(
        "--no-validate",
        dest="validate",
        action="store_false",
        help="Disable input validation",
    )
    parser.add_argument(
        "--no-telemetry",
        dest="telemetry",
        action="store_false",
        help="Disable sending anonymous usage data",
    )
    parser.add_argument(
        "--dashboard",
        nargs="?",
        const=DEFAULT_DASHBOARD_URL,
        default=None,
        metavar="URL",
        help=f"Show the dashboard URL (default: {DEFAULT_DASHBOARD_URL})",
    )
    parser.add_argument(
        "--templates-dir",
        type=Path,
        default=None,
        help="Local templates root (raw-templates/ and updated-files/)",
    )
    parser.add_argument(
        "--framework",
        choices=[f.value for f in Framework],
        default=None,
        help="Framework to materialize from --templates-dir",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    """Build the run ``Config`` from parsed arguments and the environment."""
    overrides = {
        "verbose": args.verbose,
        "verbose_debug": args.verbose_debug,
        "validate_inputs": args.validate,
        "use_defaults": args.default,
    }
    if args.templates_dir is not None:
        overrides["templates_dir"] = args.templates_dir
    if args.dashboard:
        overrides["dashboard_url"] = args.dashboard
    config = Config.from_env(**overrides)
    config.telemetry.enabled = args.telemetry
    return config


def _remove_tmp(pipeline: ScaffoldPipeline) -> None:
    if pipeline.workspace.root is not None:
        remove_path(pipeline.workspace.root / TMP_DIR)


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``create-openfort``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.framework and args.templates_dir is None:
        parser.error("--framework requires --templates-dir")

    config = config_from_args(args)
    framework = Framework.parse(args.framework) if args.framework else None
    pipeline = ScaffoldPipeline(config, framework=framework)

    try:
        asyncio.run(
            pipeline.run(
                target_dir=format_target_dir(args.directory) if args.directory else None,
                template=args.template,
                overwrite=args.overwrite,
                dashboard=args.dashboard,
            )
        )
    except OperationCancelled as exc:
        print_warning(str(exc))
        return
    except KeyboardInterrupt:
        _remove_tmp(pipeline)
        print_warning(str(OperationCancelled()))
        return
    except Exception as exc:
        _remove_tmp(pipeline)
        print_error(f"Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
