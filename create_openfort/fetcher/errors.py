"""Download errors and their classification.

The external downloader only reports failures as free text on stderr (or as
an ``OSError`` when it cannot be started).  ``categorize`` maps that text onto
a fixed set of ``DownloadErrorKind`` values with an actionable message, using
an ordered rule table where the first match wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from create_openfort.utils import format_seconds


class DownloadErrorKind(str, Enum):
    """Why a template download failed."""

    REPO_NOT_FOUND = "REPO_NOT_FOUND"
    NETWORK_ERROR = "NETWORK_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    SPAWN_NOT_FOUND = "SPAWN_NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"


class TemplateDownloadError(Exception):
    """Raised when a template or backend download fails.

    Attributes:
        kind: The classified failure reason.
        details: Raw stderr / exception text the classification was based on.
        exit_code: Downloader exit status, when the process ran at all.
    """

    def __init__(
        self,
        message: str,
        kind: DownloadErrorKind,
        details: str = "",
        exit_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.details = details
        self.exit_code = exit_code
        super().__init__(message)


class TemplateTimeoutError(TemplateDownloadError):
    """Raised when the downloader produced no terminal event in time."""

    def __init__(self, timeout_ms: float) -> None:
        seconds = format_seconds(timeout_ms)
        super().__init__(
            f"Template download timed out after {seconds}. "
            "This might be due to network issues or the repository being unavailable. "
            "Please check your internet connection and try again.",
            DownloadErrorKind.TIMEOUT,
            details=f"Timeout: {seconds}",
        )


@dataclass(frozen=True)
class ErrorRule:
    """One row of the classification table."""

    pattern: re.Pattern[str]
    kind: DownloadErrorKind
    message: str


@dataclass(frozen=True)
class Classification:
    """Result of matching raw text against the rule table."""

    kind: DownloadErrorKind
    message: str
    details: str


def build_rules(executable: str = "npx") -> list[ErrorRule]:
    """Return the ordered classification rules for a downloader *executable*."""
    exe = re.escape(executable)
    return [
        ErrorRule(
            re.compile(r"could not find commit hash", re.IGNORECASE),
            DownloadErrorKind.REPO_NOT_FOUND,
            "The repository or path might not exist.",
        ),
        ErrorRule(
            re.compile(r"ENOTFOUND|ECONNREFUSED", re.IGNORECASE),
            DownloadErrorKind.NETWORK_ERROR,
            "Network error - please check your internet connection.",
        ),
        ErrorRule(
            re.compile(r"rate limit", re.IGNORECASE),
            DownloadErrorKind.RATE_LIMIT,
            "GitHub rate limit exceeded. Please try again later.",
        ),
        ErrorRule(
            re.compile(
                rf"ENOENT.*{exe}|{exe}.*ENOENT|spawn {exe}|{exe}: (command )?not found",
                re.IGNORECASE,
            ),
            DownloadErrorKind.SPAWN_NOT_FOUND,
            f"{executable} command not found. Please ensure the runtime and package "
            "manager are installed (Node.js and npm).",
        ),
    ]


def _match(text: str, rules: list[ErrorRule]) -> ErrorRule | None:
    for rule in rules:
        if rule.pattern.search(text):
            return rule
    return None


def categorize(
    stderr: str,
    error: BaseException | None = None,
    executable: str = "npx",
) -> Classification:
    """Classify downloader output.

    stderr is checked first, then the message of *error*.  When nothing
    matches, the raw text is carried verbatim as an ``UNKNOWN`` failure.
    """
    rules = build_rules(executable)
    stderr_text = stderr.strip()
    error_text = str(error) if error is not None else ""

    for text in (stderr_text, error_text):
        if not text:
            continue
        rule = _match(text, rules)
        if rule is not None:
            return Classification(kind=rule.kind, message=rule.message, details=text)

    if stderr_text:
        message = f"Error: {stderr_text}"
    else:
        message = error_text or "Unknown error occurred"
    return Classification(
        kind=DownloadErrorKind.UNKNOWN,
        message=message,
        details=stderr_text or error_text,
    )


def create_clone_error(exit_code: int, stderr: str, executable: str = "npx") -> TemplateDownloadError:
    """Build the error for a downloader that exited with a non-zero status."""
    result = categorize(stderr, executable=executable)
    return TemplateDownloadError(
        f"Failed to download template (exit code {exit_code}). {result.message}",
        result.kind,
        details=result.details,
        exit_code=exit_code,
    )


def create_spawn_error(error: BaseException, executable: str = "npx") -> TemplateDownloadError:
    """Build the error for a downloader that could not be started."""
    result = categorize("", error, executable=executable)
    return TemplateDownloadError(
        f"Failed to spawn download process. {result.message}",
        result.kind,
        details=result.details,
    )
