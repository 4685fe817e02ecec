"""Remote template fetching through an external downloader process.

Spawns ``npx degit <repo> <destination>`` (configurable) through the shell,
streams its output, and turns the outcome into either a clean return or a
categorized ``TemplateDownloadError``.  A download finishes when the process
exits, when it cannot be started, or when the timeout fires, whichever comes
first; every later event is ignored.
"""

from __future__ import annotations

import asyncio
import shlex
from collections.abc import Sequence
from pathlib import Path

from create_openfort.config import DownloadConfig
from create_openfort.fetcher.errors import (
    TemplateTimeoutError,
    create_clone_error,
    create_spawn_error,
)
from create_openfort.utils import console, print_info


class DownloadTask:
    """State of a single downloader invocation.

    ``outcome`` is a one-shot future: the first of ``on_close``, ``on_error``
    or ``on_timeout`` settles it and cancels the timer, later calls are no-ops.
    Must be created inside a running event loop.
    """

    def __init__(
        self,
        repo: str,
        destination: str | Path,
        timeout_ms: float = 60000,
        verbose: bool = False,
        executable: str = "npx",
    ) -> None:
        self.repo = repo
        self.destination = Path(destination)
        self.timeout_ms = timeout_ms
        self.verbose = verbose
        self.executable = executable
        self.process: asyncio.subprocess.Process | None = None
        self.stderr_chunks: list[str] = []
        self._loop = asyncio.get_running_loop()
        self.outcome: asyncio.Future[None] = self._loop.create_future()
        self._timer: asyncio.TimerHandle | None = None

    @property
    def settled(self) -> bool:
        return self.outcome.done()

    @property
    def stderr(self) -> str:
        return "".join(self.stderr_chunks)

    def start_timer(self) -> None:
        self._timer = self._loop.call_later(self.timeout_ms / 1000, self.on_timeout)

    def on_close(self, exit_code: int) -> None:
        """Handle process exit."""
        if self.settled:
            return
        if exit_code == 0:
            self._settle()
        else:
            self._settle(create_clone_error(exit_code, self.stderr, self.executable))

    def on_error(self, error: BaseException) -> None:
        """Handle a failure to start (or talk to) the process."""
        if self.settled:
            return
        self._settle(create_spawn_error(error, self.executable))

    def on_timeout(self) -> None:
        """Kill the process and fail the download."""
        if self.settled:
            return
        self.kill()
        self._settle(TemplateTimeoutError(self.timeout_ms))

    def kill(self) -> None:
        if self.process is None or self.process.returncode is not None:
            return
        try:
            self.process.kill()
        except ProcessLookupError:
            pass

    def abort(self) -> None:
        """Stop the download without settling it: cancel the timer and kill the process."""
        if self._timer is not None:
            self._timer.cancel()
        self.kill()
        if not self.outcome.done():
            self.outcome.cancel()

    def _settle(self, error: Exception | None = None) -> bool:
        if self.outcome.done():
            return False
        if self._timer is not None:
            self._timer.cancel()
        if error is None:
            self.outcome.set_result(None)
        else:
            self.outcome.set_exception(error)
        return True


class RemoteFetcher:
    """Downloads a repository (or a subpath of one) with an external tool.

    Only one download runs at a time; callers await ``fetch`` before starting
    the next step.
    """

    def __init__(
        self,
        command: Sequence[str] = ("npx", "degit"),
        timeout_ms: float = 60000,
        verbose: bool = False,
    ) -> None:
        self.command = list(command)
        self.timeout_ms = timeout_ms
        self.verbose = verbose

    @classmethod
    def from_config(cls, config: DownloadConfig, verbose: bool = False) -> "RemoteFetcher":
        return cls(command=config.command, timeout_ms=config.timeout_ms, verbose=verbose)

    @property
    def executable(self) -> str:
        return self.command[0]

    def build_command(self, repo: str, destination: str | Path) -> str:
        """Shell command line for downloading *repo* into *destination*."""
        return shlex.join([*self.command, repo, str(destination)])

    async def fetch(
        self,
        repo: str,
        destination: str | Path,
        *,
        verbose: bool | None = None,
        timeout_ms: float | None = None,
    ) -> None:
        """Download *repo* into *destination*.

        Args:
            repo: Repository identifier understood by the downloader, e.g.
                ``owner/name`` or ``owner/name/sub/path``.
            destination: Directory to create and fill.
            verbose: Echo the command and the process output.  Defaults to
                the fetcher's setting.
            timeout_ms: Per-call override of the timeout.

        Raises:
            TemplateDownloadError: On non-zero exit, spawn failure or timeout
                (``TemplateTimeoutError``).
        """
        task = DownloadTask(
            repo,
            destination,
            timeout_ms=self.timeout_ms if timeout_ms is None else timeout_ms,
            verbose=self.verbose if verbose is None else verbose,
            executable=self.executable,
        )
        cmd = self.build_command(repo, destination)
        if task.verbose:
            print_info(f"Running: {cmd}")

        task.start_timer()
        pump: asyncio.Task[None] | None = None
        try:
            process = await asyncio.create_subprocess_shell(
                cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            task.on_error(exc)
        else:
            task.process = process
            if task.settled:
                task.kill()
            else:
                pump = asyncio.create_task(self._pump(task, process))

        try:
            await task.outcome
        except asyncio.CancelledError:
            task.abort()
            if task.process is not None:
                await task.process.wait()
            raise
        finally:
            if pump is not None and not pump.done():
                pump.cancel()
                try:
                    await pump
                except asyncio.CancelledError:
                    pass

    async def _pump(self, task: DownloadTask, process: asyncio.subprocess.Process) -> None:
        try:
            await asyncio.gather(
                self._read_stream(task, process.stdout, "stdout"),
                self._read_stream(task, process.stderr, "stderr"),
            )
            exit_code = await process.wait()
        except (OSError, ValueError) as exc:
            task.on_error(exc)
            return
        task.on_close(exit_code)

    async def _read_stream(
        self,
        task: DownloadTask,
        stream: asyncio.StreamReader | None,
        name: str,
    ) -> None:
        if stream is None:
            return
        while True:
            line = await stream.readline()
            if not line:
                break
            text = line.decode("utf-8", errors="replace")
            if name == "stderr":
                task.stderr_chunks.append(text)
            if task.verbose:
                console.print(f"[CLONE_REPO {name}]: {text.rstrip()}", markup=False, highlight=False)
